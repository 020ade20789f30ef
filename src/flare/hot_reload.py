"""
Polling hot reload.

The watcher records a modification signature ``(mtime_ns, size)`` for every
file source of a load. Callers poll it from their own loop; nothing here
spawns threads or timers.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .sources.base import ConfigurationSource
from .sources.files import FileConfigurationSource

logger = logging.getLogger(__name__)

Signature = Optional[Tuple[int, int]]
Snapshot = Dict[str, Signature]


class HotReloadWatcher:
    """Tracks file sources and the callback to run after a reload."""

    def __init__(
        self,
        sources: Sequence[ConfigurationSource],
        callback: Optional[Callable[[Any], None]] = None,
    ):
        self._files: List[FileConfigurationSource] = [
            source for source in sources if isinstance(source, FileConfigurationSource)
        ]
        self.callback = callback
        # a missing optional file is recorded as None so its creation is a change
        self._snapshot: Snapshot = self.poll()

    @property
    def watched_files(self) -> List[str]:
        return [source.name for source in self._files]

    @property
    def snapshot(self) -> Snapshot:
        return dict(self._snapshot)

    def poll(self) -> Snapshot:
        """Stat every watched file."""
        return {source.name: source.signature() for source in self._files}

    def changed_files(self, snapshot: Optional[Snapshot] = None) -> List[str]:
        """Files whose signature differs from the last committed snapshot."""
        current = self.poll() if snapshot is None else snapshot
        return [name for name, signature in current.items() if self._snapshot.get(name) != signature]

    def has_changed(self) -> bool:
        return bool(self.changed_files())

    def commit(self, snapshot: Optional[Snapshot] = None) -> None:
        """Accept ``snapshot`` (or a fresh poll) as the new baseline."""
        self._snapshot = self.poll() if snapshot is None else dict(snapshot)

    def notify(self, config: Any) -> None:
        if self.callback is None:
            return
        try:
            self.callback(config)
        except Exception as e:
            logger.error(f"Error in reload callback: {e}", exc_info=True)
