"""
Configuration value model.

Values are plain Python objects drawn from a closed set of kinds:
``None``, ``bool``, ``int`` (64-bit), ``float``, ``str``, ``list`` and
``dict`` with string keys. Arrays and maps own their children; the store
always keeps its own deep copy.
"""

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, List, Union

from .exceptions import TypeMismatchError

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

Value = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


class ValueKind(Enum):
    """Kinds of configuration values."""
    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    MAP = "map"


def kind_of(value: Any) -> ValueKind:
    """Return the kind of a normalized value."""
    # bool is a subclass of int, check it first
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.MAP
    raise TypeMismatchError(
        f"Unsupported configuration value type: {type(value).__name__}",
        actual=type(value).__name__,
    )


def describe(value: Any) -> str:
    """Short kind name for messages."""
    try:
        return kind_of(value).value
    except TypeMismatchError:
        return type(value).__name__


def fits_int64(number: int) -> bool:
    return INT64_MIN <= number <= INT64_MAX


def to_value(obj: Any) -> Value:
    """
    Normalize an arbitrary Python object into a configuration value.

    Tuples become lists, dates and times become ISO strings and map keys
    are converted to strings. Returns a fresh copy for containers.

    Raises:
        TypeMismatchError: If the object has no configuration representation
            or an integer does not fit in 64 bits.
    """
    if obj is None or isinstance(obj, (bool, str, float)):
        return obj
    if isinstance(obj, int):
        if not fits_int64(obj):
            raise TypeMismatchError(
                f"Integer {obj} does not fit in a 64-bit signed integer",
                expected="int64",
                actual="int",
            )
        return obj
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, (list, tuple)):
        return [to_value(item) for item in obj]
    if isinstance(obj, dict):
        return {str(key): to_value(item) for key, item in obj.items()}
    raise TypeMismatchError(
        f"Unsupported configuration value type: {type(obj).__name__}",
        actual=type(obj).__name__,
    )


def clone_value(value: Value) -> Value:
    """Deep copy a normalized value."""
    if isinstance(value, list):
        return [clone_value(item) for item in value]
    if isinstance(value, dict):
        return {key: clone_value(item) for key, item in value.items()}
    return value

