"""
Key path addressing.

A key path is canonically a tuple of segments: strings name map members
and non-negative integers index arrays, e.g. ``"servers[0].host"`` is
``("servers", 0, "host")``.

Historically nested keys were also addressable by joining segments with
underscores (``database.host`` == ``database_host``). That flattened form is
kept only as a lookup alias; see ``flatten_path``.
"""

import re
from typing import Tuple, Union

from .exceptions import InvalidPathError

KeyPath = Tuple[Union[str, int], ...]
KeyLike = Union[str, KeyPath]

_SEGMENT_RE = re.compile(r"^([^\[\]]+)((?:\[\d+\])*)$")
_INDEX_RE = re.compile(r"\[(\d+)\]")


def parse_path(key: KeyLike) -> KeyPath:
    """
    Parse a dotted key into its canonical segment tuple.

    Raises:
        InvalidPathError: On empty keys, empty segments or malformed indexes.
    """
    if isinstance(key, tuple):
        return _check_segments(key)
    if not isinstance(key, str):
        raise InvalidPathError(repr(key), "key must be a string or a tuple of segments")
    if not key:
        raise InvalidPathError(key, "empty key")

    segments = []
    for part in key.split('.'):
        if not part:
            raise InvalidPathError(key, "empty path segment")
        match = _SEGMENT_RE.match(part)
        if match is None:
            raise InvalidPathError(key, f"malformed segment '{part}'")
        segments.append(match.group(1))
        segments.extend(int(index) for index in _INDEX_RE.findall(match.group(2)))
    return tuple(segments)


def _check_segments(segments: tuple) -> KeyPath:
    if not segments or not isinstance(segments[0], str):
        raise InvalidPathError(repr(segments), "path must start with a name")
    for segment in segments:
        if isinstance(segment, bool):
            raise InvalidPathError(repr(segments), "boolean segment")
        if isinstance(segment, int):
            if segment < 0:
                raise InvalidPathError(repr(segments), "negative index")
        elif not isinstance(segment, str) or not segment:
            raise InvalidPathError(repr(segments), "empty path segment")
    return segments


def format_path(segments: KeyPath) -> str:
    """Render a segment tuple back to dotted notation."""
    rendered = ""
    for segment in segments:
        if isinstance(segment, int):
            rendered += f"[{segment}]"
        elif rendered:
            rendered += f".{segment}"
        else:
            rendered = segment
    return rendered


def has_index(segments: KeyPath) -> bool:
    return any(isinstance(segment, int) for segment in segments)


def flatten_path(segments: KeyPath) -> str:
    """
    Underscore-joined alias of a name-only path.

    Compatibility shim: ``("a", "b_c")`` and ``("a_b", "c")`` share the alias
    ``"a_b_c"``, so the store treats them as one logical key and the most
    recent write wins.
    """
    return "_".join(str(segment) for segment in segments)


def child_path(prefix: KeyPath, name: Union[str, int]) -> KeyPath:
    return prefix + (name,)
