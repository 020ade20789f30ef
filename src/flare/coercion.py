"""
Type coercion rules shared by every typed getter.

| Requested | Accepts              |
|-----------|----------------------|
| bool      | bool, string, int    |
| int       | int, float, string   |
| float     | float, int, string   |
| string    | string               |
| array/map | array/map            |
"""

import math
import re
from typing import Any, Dict, List

from .exceptions import TypeMismatchError
from .value import ValueKind, describe, fits_int64, kind_of

_INT_RE = re.compile(r"[+-]?[0-9]+")

_TRUE_STRINGS = ("true", "1")
_FALSE_STRINGS = ("false", "0")


def parse_int(text: str):
    """Parse a strict base-10 int64 literal, returning None on failure."""
    if not _INT_RE.fullmatch(text):
        return None
    number = int(text)
    return number if fits_int64(number) else None


def parse_float(text: str):
    """Parse a float literal, returning None on failure."""
    if not text or not text.isascii() or '_' in text or text != text.strip():
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _mismatch(key: str, expected: str, value: Any, detail: str = "") -> TypeMismatchError:
    actual = describe(value)
    message = f"Type mismatch at '{key}': expected {expected}, got {actual}"
    if detail:
        message += f" ({detail})"
    return TypeMismatchError(message, key=key, expected=expected, actual=actual)


def to_bool(value: Any, key: str = "") -> bool:
    kind = kind_of(value)
    if kind is ValueKind.BOOL:
        return value
    if kind is ValueKind.STRING:
        if value in _TRUE_STRINGS:
            return True
        if value in _FALSE_STRINGS:
            return False
        raise _mismatch(key, "bool", value, f"unrecognized boolean string {value!r}")
    if kind is ValueKind.INT:
        return value != 0
    raise _mismatch(key, "bool", value)


def to_int(value: Any, key: str = "") -> int:
    kind = kind_of(value)
    if kind is ValueKind.INT:
        return value
    if kind is ValueKind.FLOAT:
        if not math.isfinite(value):
            raise _mismatch(key, "int", value, "non-finite float")
        truncated = math.trunc(value)
        if not fits_int64(truncated):
            raise _mismatch(key, "int", value, "out of int64 range")
        return truncated
    if kind is ValueKind.STRING:
        parsed = parse_int(value)
        if parsed is None:
            raise _mismatch(key, "int", value, f"cannot parse {value!r} as integer")
        return parsed
    raise _mismatch(key, "int", value)


def to_float(value: Any, key: str = "") -> float:
    kind = kind_of(value)
    if kind is ValueKind.FLOAT:
        return value
    if kind is ValueKind.INT:
        return float(value)
    if kind is ValueKind.STRING:
        parsed = parse_float(value)
        if parsed is None:
            raise _mismatch(key, "float", value, f"cannot parse {value!r} as float")
        return parsed
    raise _mismatch(key, "float", value)


def to_string(value: Any, key: str = "") -> str:
    if kind_of(value) is ValueKind.STRING:
        return value
    raise _mismatch(key, "string", value)


def to_array(value: Any, key: str = "") -> List[Any]:
    if kind_of(value) is ValueKind.ARRAY:
        return value
    raise _mismatch(key, "array", value)


def to_map(value: Any, key: str = "") -> Dict[str, Any]:
    if kind_of(value) is ValueKind.MAP:
        return value
    raise _mismatch(key, "map", value)
