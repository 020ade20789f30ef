"""
Source pipeline shared by the initial load and by hot reload.
"""

import logging
from typing import Any, List, Sequence, Tuple

from .exceptions import ConfigurationError
from .log import source_context
from .paths import KeyPath
from .sources.base import ConfigurationSource

logger = logging.getLogger(__name__)


def order_sources(sources: Sequence[ConfigurationSource]) -> List[ConfigurationSource]:
    """Lowest priority first; sources of equal priority keep their given order."""
    return sorted(sources, key=lambda s: s.get_priority())


def run_sources(sources: Sequence[ConfigurationSource]) -> List[Tuple[KeyPath, Any]]:
    """
    Load every source and return its key path -> value pairs in write order.

    A failing required source aborts the run. A failing optional source is
    logged and skipped.
    """
    pairs: List[Tuple[KeyPath, Any]] = []

    for source in order_sources(sources):
        with source_context(source.name):
            try:
                loaded = source.load()
            except ConfigurationError as e:
                if not source.required:
                    logger.warning(f"Skipping optional configuration source {source.name}: {e.message}")
                    continue
                logger.error(f"Failed to load configuration from source: {source.name}: {e}")
                raise

            logger.debug(f"Source {source.name} contributed {len(loaded)} keys")
        pairs.extend(loaded.items())

    return pairs
