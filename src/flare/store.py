"""
Configuration store with dotted-path access and typed getters.

The store keeps two layers, ``data`` (loaded or explicitly set values) and
``defaults`` (programmatic fallbacks). Lookups consult ``data`` first and fall
back to ``defaults``; the layers are never merged.

Each layer indexes its entries by the underscore-flattened alias of their
key path, so ``set("database.host", ...)`` and ``set("database_host", ...)``
write the same logical entry and the most recent write wins.
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from . import coercion
from .exceptions import ConfigurationError, InvalidArrayIndexError, InvalidPathError, MissingKeyError
from .hot_reload import HotReloadWatcher
from .paths import KeyLike, KeyPath, flatten_path, format_path, has_index, parse_path
from .pipeline import run_sources
from .sources.base import ConfigurationSource
from .validation import Validator
from .validation_result import ValidationResult
from .value import Value, clone_value, to_value

logger = logging.getLogger(__name__)

_MISSING = object()


def _descend(node: Any, rest: KeyPath, key: str) -> Any:
    """Walk ``rest`` into a stored map/array, returning _MISSING on a dead end."""
    for segment in rest:
        if isinstance(segment, int):
            if not isinstance(node, list):
                return _MISSING
            if segment >= len(node):
                raise InvalidArrayIndexError(key, segment, len(node))
            node = node[segment]
        else:
            if not isinstance(node, dict) or segment not in node:
                return _MISSING
            node = node[segment]
    return node


class _Layer:
    """
    Key path -> value entries of one store layer, indexed by flattened alias.

    Every entry remembers when it was written; when a key is reachable both
    directly and through a stored map, the most recent write wins.
    """

    def __init__(self):
        self._entries: Dict[str, Tuple[KeyPath, Value]] = {}
        self._written: Dict[str, int] = {}
        self._clock = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[KeyPath, Value]]:
        return iter(self._entries.values())

    def put(self, path: KeyPath, value: Value) -> None:
        alias = flatten_path(path)
        previous = self._entries.pop(alias, None)
        if previous is not None and previous[0] != path:
            logger.debug(f"'{format_path(path)}' replaces '{format_path(previous[0])}' (same flattened key)")
        self._entries[alias] = (path, value)
        self._clock += 1
        self._written[alias] = self._clock

    def resolve(self, path: KeyPath, key: str) -> Any:
        """Newest match among the exact alias and descents into stored prefixes."""
        best, best_written = _MISSING, 0

        if not has_index(path):
            alias = flatten_path(path)
            if alias in self._entries:
                best, best_written = self._entries[alias][1], self._written[alias]

        for end in range(len(path) - 1, 0, -1):
            prefix = path[:end]
            if has_index(prefix):
                continue
            alias = flatten_path(prefix)
            if alias not in self._entries or self._written[alias] < best_written:
                continue
            found = _descend(self._entries[alias][1], path[end:], key)
            if found is not _MISSING:
                best, best_written = found, self._written[alias]
        return best

    def has_prefix(self, path: KeyPath) -> bool:
        alias = flatten_path(path) + "_"
        return any(key.startswith(alias) for key in self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self._written.clear()


class ValueArena:
    """
    Owner of every value held by a store.

    Both layers live here and are released together by ``release()``; a
    released arena refuses further access.
    """

    def __init__(self):
        self.data = _Layer()
        self.defaults = _Layer()
        self.closed = False

    def replace_data(self, layer: _Layer) -> None:
        self.data = layer

    def release(self) -> None:
        self.data.clear()
        self.defaults.clear()
        self.closed = True


class Config:
    """
    Hierarchical configuration store.

    Values are deep-copied on the way in and on the way out, so callers never
    share containers with the store. Use as a context manager or call
    ``close()`` to release it.
    """

    def __init__(self, sources: Optional[Sequence[ConfigurationSource]] = None):
        self._arena = ValueArena()
        self._sources: List[ConfigurationSource] = list(sources or [])
        self._schema = None
        self._watcher: Optional[HotReloadWatcher] = None

    def __enter__(self) -> "Config":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __len__(self) -> int:
        """Number of distinct keys across both layers."""
        return len(self._paths())

    def __contains__(self, key: KeyLike) -> bool:
        return self.has_key(key)

    def __repr__(self) -> str:
        if self._arena.closed:
            return "Config(closed)"
        return f"Config(data={len(self._arena.data)}, defaults={len(self._arena.defaults)})"

    @property
    def closed(self) -> bool:
        return self._arena.closed

    @property
    def sources(self) -> List[ConfigurationSource]:
        return list(self._sources)

    @property
    def schema(self):
        return self._schema

    def close(self) -> None:
        """Release every stored value. Further access raises ConfigurationError."""
        if not self._arena.closed:
            self._arena.release()
            self._watcher = None
            logger.debug("Configuration store closed")

    def _open_arena(self) -> ValueArena:
        if self._arena.closed:
            raise ConfigurationError("Configuration store has been closed")
        return self._arena

    # Writing

    def _writable_path(self, key: KeyLike) -> KeyPath:
        path = parse_path(key)
        if has_index(path):
            raise InvalidPathError(format_path(path), "array indexes cannot be written")
        return path

    def set(self, key: KeyLike, value: Any) -> None:
        """Store a deep copy of ``value`` under ``key`` in the data layer."""
        path = self._writable_path(key)
        self._open_arena().data.put(path, to_value(value))

    def set_default(self, key: KeyLike, value: Any) -> None:
        """Store a deep copy of ``value`` under ``key`` in the defaults layer."""
        path = self._writable_path(key)
        self._open_arena().defaults.put(path, to_value(value))

    def load_sources(self, sources: Sequence[ConfigurationSource]) -> None:
        """Run ``sources`` and make them the pipeline replayed on reload."""
        self._sources = list(sources)
        self._open_arena().replace_data(self._stage())

    def _stage(self) -> _Layer:
        staging = _Layer()
        for path, value in run_sources(self._sources):
            staging.put(path, value)
        return staging

    # Reading

    def _lookup(self, key: KeyLike) -> Tuple[Any, str]:
        """
        Resolve ``key`` in data, then defaults.

        A string key is tried as a dotted path and then verbatim as a single
        segment, so file keys that contain dots or brackets stay reachable.
        """
        arena = self._open_arena()
        error = None
        candidates: List[Tuple[KeyPath, str]] = []
        try:
            path = parse_path(key)
            candidates.append((path, format_path(path)))
        except InvalidPathError as e:
            if not isinstance(key, str) or not key:
                raise
            error = e
        if isinstance(key, str) and (key,) not in [path for path, _ in candidates]:
            candidates.append(((key,), key))

        for layer in (arena.data, arena.defaults):
            for path, display in candidates:
                value = layer.resolve(path, display)
                if value is not _MISSING:
                    return value, display
        if error is not None:
            raise error
        return _MISSING, candidates[0][1]

    def get(self, key: KeyLike) -> Optional[Value]:
        """
        Get a copy of the value at ``key`` or None when nothing matches.

        Raises:
            InvalidArrayIndexError: If an index in ``key`` is out of range.
        """
        value, _ = self._lookup(key)
        return None if value is _MISSING else clone_value(value)

    def _typed(self, key: KeyLike, default: Any, convert: Callable[[Any, str], Any]) -> Any:
        value, display = self._lookup(key)
        if value is _MISSING:
            if default is not _MISSING:
                return default
            raise MissingKeyError(display)
        return convert(clone_value(value), display)

    def get_bool(self, key: KeyLike, default: Any = _MISSING) -> bool:
        return self._typed(key, default, coercion.to_bool)

    def get_int(self, key: KeyLike, default: Any = _MISSING) -> int:
        return self._typed(key, default, coercion.to_int)

    def get_float(self, key: KeyLike, default: Any = _MISSING) -> float:
        return self._typed(key, default, coercion.to_float)

    def get_string(self, key: KeyLike, default: Any = _MISSING) -> str:
        return self._typed(key, default, coercion.to_string)

    def get_array(self, key: KeyLike, default: Any = _MISSING) -> List[Value]:
        return self._typed(key, default, coercion.to_array)

    def get_map(self, key: KeyLike, default: Any = _MISSING) -> Dict[str, Value]:
        return self._typed(key, default, coercion.to_map)

    def get_string_list(self, key: KeyLike, default: Any = _MISSING) -> List[str]:
        """Get an array whose elements must all be strings."""
        def convert(value: Any, display: str) -> List[str]:
            items = coercion.to_array(value, display)
            return [coercion.to_string(item, f"{display}[{i}]") for i, item in enumerate(items)]

        return self._typed(key, default, convert)

    def get_by_index(self, key: KeyLike, index: int) -> Value:
        items = self.get_array(key)
        if index < 0 or index >= len(items):
            raise InvalidArrayIndexError(format_path(parse_path(key)), index, len(items))
        return items[index]

    def has_key(self, key: KeyLike) -> bool:
        try:
            value, _ = self._lookup(key)
        except InvalidArrayIndexError:
            return False
        return value is not _MISSING

    def has_prefix(self, key: KeyLike) -> bool:
        """True if a map is stored at ``key`` or any entry lives underneath it."""
        try:
            value, _ = self._lookup(key)
        except InvalidArrayIndexError:
            return False
        if isinstance(value, dict):
            return True
        try:
            path = parse_path(key)
        except InvalidPathError:
            return False
        if has_index(path):
            return False
        arena = self._open_arena()
        return arena.data.has_prefix(path) or arena.defaults.has_prefix(path)

    def validate_required(self, keys: Sequence[KeyLike]) -> None:
        """
        Raises:
            MissingKeyError: Naming every key in ``keys`` that has no value.
        """
        missing = [format_path(parse_path(key)) for key in keys if not self.has_key(key)]
        if missing:
            raise MissingKeyError(missing[0], missing=missing)

    def _paths(self) -> List[KeyPath]:
        arena = self._open_arena()
        seen: Dict[str, KeyPath] = {}
        for layer in (arena.data, arena.defaults):
            for path, _ in layer:
                seen.setdefault(flatten_path(path), path)
        return list(seen.values())

    def keys(self) -> List[str]:
        """Dotted keys of every entry, data layer first."""
        return [format_path(path) for path in self._paths()]

    def items(self) -> List[Tuple[str, Value]]:
        """Dotted key and resolved value of every entry, data layer first."""
        arena = self._open_arena()
        pairs = []
        for path in self._paths():
            display = format_path(path)
            value = arena.data.resolve(path, display)
            if value is _MISSING:
                value = arena.defaults.resolve(path, display)
            pairs.append((display, clone_value(value)))
        return pairs

    def data_paths(self) -> List[KeyPath]:
        """Stored key paths of the data layer."""
        return [path for path, _ in self._open_arena().data]

    def data_keys(self) -> List[str]:
        return [format_path(path) for path in self.data_paths()]

    def to_dict(self) -> Dict[str, Value]:
        """Nested view of the merged configuration, defaults overlaid by data."""
        arena = self._open_arena()
        tree: Dict[str, Value] = {}
        for layer in (arena.defaults, arena.data):
            for path, value in layer:
                _assign(tree, path, clone_value(value))
        return tree

    # Schema

    def set_schema(self, schema, apply_defaults: bool = True) -> None:
        """
        Attach ``schema`` without taking ownership of it.

        When ``apply_defaults`` is set, schema defaults are registered in the
        defaults layer.
        """
        self._schema = schema
        if apply_defaults:
            for path, value in schema.iter_defaults():
                self.set_default(path, value)

    def validate(self) -> ValidationResult:
        """Validate against the attached schema; an empty result without one."""
        self._open_arena()
        if self._schema is None:
            return ValidationResult()
        return Validator(self._schema).validate(self)

    # Hot reload

    def enable_hot_reload(self, callback: Optional[Callable[["Config"], None]] = None) -> None:
        """Snapshot every file source so later changes can be detected."""
        self._open_arena()
        self._watcher = HotReloadWatcher(self._sources, callback)
        logger.info(f"Hot reload enabled for {len(self._watcher.watched_files)} file(s)")

    def is_hot_reload_enabled(self) -> bool:
        return self._watcher is not None

    def check_and_reload(self) -> bool:
        """Reload if a watched file changed. Returns whether a reload happened."""
        self._open_arena()
        if self._watcher is None:
            return False

        snapshot = self._watcher.poll()
        changed = self._watcher.changed_files(snapshot)
        if not changed:
            return False

        logger.info(f"Configuration file(s) changed, reloading: {', '.join(changed)}")
        self._reload(snapshot)
        return True

    def reload(self) -> None:
        """Unconditionally rebuild the data layer from the original sources."""
        self._open_arena()
        snapshot = self._watcher.poll() if self._watcher is not None else None
        self._reload(snapshot)

    def _reload(self, snapshot) -> None:
        # staged so a failure leaves the current data layer in place
        try:
            staging = self._stage()
        except ConfigurationError as e:
            logger.error(f"Failed to reload configuration: {e}")
            raise

        self._arena.replace_data(staging)
        logger.info(f"Configuration reloaded ({len(staging)} keys)")

        if self._watcher is not None:
            self._watcher.commit(snapshot)
            self._watcher.notify(self)


def _assign(tree: Dict[str, Value], path: KeyPath, value: Value) -> None:
    node = tree
    for segment in path[:-1]:
        child = node.get(segment)
        if not isinstance(child, dict):
            child = {}
            node[segment] = child
        node = child

    last = path[-1]
    existing = node.get(last)
    if isinstance(existing, dict) and isinstance(value, dict):
        _merge(existing, value)
    else:
        node[last] = value


def _merge(base: Dict[str, Value], override: Dict[str, Value]) -> None:
    for key, value in override.items():
        if isinstance(base.get(key), dict) and isinstance(value, dict):
            _merge(base[key], value)
        else:
            base[key] = value
