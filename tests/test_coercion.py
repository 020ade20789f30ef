"""
Tests for type coercion rules.
"""

import math

import pytest

from flare import TypeMismatchError
from flare.coercion import parse_float, parse_int, to_array, to_bool, to_float, to_int, to_map, to_string


class TestBoolCoercion:
    """Test coercion to bool."""

    @pytest.mark.parametrize("value,expected", [
        (True, True), (False, False),
        ("true", True), ("1", True), ("false", False), ("0", False),
        (0, False), (7, True), (-1, True),
    ])
    def test_accepted(self, value, expected):
        assert to_bool(value) is expected

    @pytest.mark.parametrize("value", ["yes", "TRUE", "", 1.0, None, [], {}])
    def test_rejected(self, value):
        """Test unrecognized values raise TypeMismatchError."""
        with pytest.raises(TypeMismatchError):
            to_bool(value, "flag")


class TestIntCoercion:
    """Test coercion to int."""

    def test_float_truncates_toward_zero(self):
        assert to_int(3.9) == 3
        assert to_int(-3.9) == -3

    def test_string_base_ten(self):
        assert to_int("42") == 42
        assert to_int("-17") == -17
        assert to_int("+5") == 5

    @pytest.mark.parametrize("value", ["4.2", "0x10", "1_000", " 1", "7\n", "\u0667", "abc", "", True])
    def test_rejected(self, value):
        with pytest.raises(TypeMismatchError):
            to_int(value, "port")

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, 1e30])
    def test_non_finite_or_huge_float(self, value):
        with pytest.raises(TypeMismatchError):
            to_int(value)

    def test_string_beyond_int64(self):
        with pytest.raises(TypeMismatchError):
            to_int("9223372036854775808")

    def test_idempotent(self):
        """Test coercing an already coerced value changes nothing."""
        assert to_int(to_int("12")) == 12


class TestFloatCoercion:
    """Test coercion to float."""

    def test_int_converts(self):
        value = to_float(3)
        assert value == 3.0
        assert isinstance(value, float)

    def test_string(self):
        assert to_float("2.5") == 2.5
        assert to_float("1e3") == 1000.0

    @pytest.mark.parametrize("value", ["fast", "", False, [1.0]])
    def test_rejected(self, value):
        with pytest.raises(TypeMismatchError):
            to_float(value)


class TestStrictKinds:
    """Test string, array and map accept only their own kind."""

    def test_string_only(self):
        assert to_string("x") == "x"
        with pytest.raises(TypeMismatchError, match="expected string, got int"):
            to_string(1, "name")

    def test_array_only(self):
        assert to_array([1, 2]) == [1, 2]
        with pytest.raises(TypeMismatchError):
            to_array({"a": 1})

    def test_map_only(self):
        assert to_map({"a": 1}) == {"a": 1}
        with pytest.raises(TypeMismatchError):
            to_map([1])

    def test_error_names_key(self):
        """Test mismatch errors carry the key and kinds."""
        with pytest.raises(TypeMismatchError) as exc_info:
            to_int("abc", "server.port")
        assert exc_info.value.context["key"] == "server.port"
        assert exc_info.value.expected == "int"
        assert exc_info.value.actual == "string"


class TestLiteralParsing:
    """Test the literal parsers shared by the loaders."""

    def test_parse_int(self):
        assert parse_int("10") == 10
        assert parse_int("1.0") is None

    @pytest.mark.parametrize("text", ["7\n", " 7", "\u0667", "1\u0660"])
    def test_parse_int_rejects_loose_digits(self, text):
        """Test trailing newlines and non-ASCII digits are not integers."""
        assert parse_int(text) is None

    def test_parse_float(self):
        assert parse_float("1.5") == 1.5
        assert parse_float("1_5") is None
        assert parse_float("x") is None
        assert parse_float("\u0667") is None
        assert parse_float("1.5\n") is None
