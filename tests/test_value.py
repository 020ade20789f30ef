"""
Tests for the value model and key paths.
"""

from datetime import date, datetime

import pytest

from flare import InvalidPathError, TypeMismatchError
from flare.paths import flatten_path, format_path, has_index, parse_path
from flare.value import INT64_MAX, ValueKind, clone_value, describe, kind_of, to_value


class TestValueKinds:
    """Test kind detection."""

    @pytest.mark.parametrize("value,kind", [
        (None, ValueKind.NULL),
        (True, ValueKind.BOOL),
        (0, ValueKind.INT),
        (1.5, ValueKind.FLOAT),
        ("x", ValueKind.STRING),
        ([1], ValueKind.ARRAY),
        ({"a": 1}, ValueKind.MAP),
    ])
    def test_kind_of(self, value, kind):
        """Test every value kind is detected."""
        assert kind_of(value) is kind

    def test_bool_is_not_int(self):
        """Test booleans are never reported as integers."""
        assert kind_of(False) is ValueKind.BOOL
        assert describe(True) == "bool"

    def test_unsupported_type(self):
        """Test foreign objects are rejected."""
        with pytest.raises(TypeMismatchError):
            kind_of(object())


class TestToValue:
    """Test normalization of Python objects."""

    def test_tuples_become_lists(self):
        assert to_value((1, (2, 3))) == [1, [2, 3]]

    def test_dates_become_iso_strings(self):
        """Test dates and datetimes normalize to ISO 8601 strings."""
        assert to_value(date(1979, 5, 27)) == "1979-05-27"
        assert to_value({"at": datetime(2024, 1, 2, 3, 4, 5)}) == {"at": "2024-01-02T03:04:05"}

    def test_map_keys_become_strings(self):
        assert to_value({1: "one"}) == {"1": "one"}

    def test_int_out_of_range(self):
        """Test integers beyond 64 bits are rejected."""
        assert to_value(INT64_MAX) == INT64_MAX
        with pytest.raises(TypeMismatchError, match="64-bit"):
            to_value(INT64_MAX + 1)

    def test_unsupported_object(self):
        with pytest.raises(TypeMismatchError, match="Unsupported"):
            to_value({"x": {1, 2}})

    def test_to_value_copies_containers(self):
        """Test the normalized value shares no containers with the input."""
        original = {"servers": [{"host": "a"}]}
        normalized = to_value(original)
        original["servers"][0]["host"] = "b"
        assert normalized == {"servers": [{"host": "a"}]}

    def test_clone_value_is_deep(self):
        original = {"a": [1, {"b": 2}]}
        copy = clone_value(original)
        copy["a"][1]["b"] = 3
        assert original["a"][1]["b"] == 2


class TestKeyPaths:
    """Test key path parsing and rendering."""

    def test_dotted(self):
        assert parse_path("database.host") == ("database", "host")

    def test_indexes(self):
        """Test bracketed indexes become integer segments."""
        assert parse_path("servers[0].host") == ("servers", 0, "host")
        assert parse_path("matrix[1][2]") == ("matrix", 1, 2)

    def test_tuple_passthrough(self):
        assert parse_path(("a", 0, "b")) == ("a", 0, "b")

    @pytest.mark.parametrize("key", ["", "a..b", ".a", "a.", "a[x]", "a[0", "[0]"])
    def test_malformed(self, key):
        """Test malformed keys raise InvalidPathError."""
        with pytest.raises(InvalidPathError):
            parse_path(key)

    @pytest.mark.parametrize("segments", [(), (0, "a"), ("a", -1), ("a", "")])
    def test_malformed_tuples(self, segments):
        with pytest.raises(InvalidPathError):
            parse_path(segments)

    def test_format_path(self):
        assert format_path(("servers", 0, "host")) == "servers[0].host"
        assert format_path(parse_path("a.b[3]")) == "a.b[3]"

    def test_flatten_path(self):
        """Test the underscore alias joins name segments."""
        assert flatten_path(("database", "host")) == "database_host"
        assert flatten_path(("a", "b_c")) == flatten_path(("a_b", "c"))

    def test_has_index(self):
        assert has_index(("a", 0))
        assert not has_index(("a", "b"))
