"""
Tests for the exception hierarchy.
"""

from flare import (
    ConfigurationError,
    ConfigValidationError,
    FlareException,
    InvalidArrayIndexError,
    InvalidFormatError,
    InvalidPathError,
    IoError,
    MissingKeyError,
    ParseError,
    SchemaErrorKind,
    SchemaValidationError,
    TypeMismatchError,
)


class TestExceptionHierarchy:
    """Test error codes and context."""

    def test_all_are_configuration_errors(self):
        for error in (
            ParseError("x"), IoError("x"), MissingKeyError("k"), TypeMismatchError("x"),
            InvalidPathError("a..b"), InvalidArrayIndexError("a", 3, 1), InvalidFormatError("ini"),
            SchemaValidationError("x", SchemaErrorKind.TYPE_MISMATCH, "a"), ConfigValidationError("x", []),
        ):
            assert isinstance(error, ConfigurationError)
            assert isinstance(error, FlareException)

    def test_error_codes(self):
        assert ConfigurationError("x").error_code == "CONFIG_ERROR"
        assert ParseError("x").error_code == "PARSE_ERROR"
        assert IoError("x").error_code == "IO_ERROR"
        assert MissingKeyError("k").error_code == "MISSING_KEY"
        assert TypeMismatchError("x").error_code == "TYPE_MISMATCH"
        assert InvalidArrayIndexError("a", 1, 0).error_code == "INVALID_ARRAY_INDEX"

    def test_to_dict(self):
        cause = OSError("disk")
        error = IoError("Cannot read", path="/etc/app.toml", cause=cause)
        data = error.to_dict()

        assert data["error_type"] == "IoError"
        assert data["error_code"] == "IO_ERROR"
        assert data["context"] == {"path": "/etc/app.toml"}
        assert data["cause"] == "disk"
        assert "timestamp" in data

    def test_missing_key_lists_all(self):
        error = MissingKeyError("a", missing=["a", "b"])
        assert error.message == "Missing configuration keys: a, b"
        assert error.missing == ["a", "b"]
        assert MissingKeyError("a").missing == ["a"]

    def test_array_index_context(self):
        error = InvalidArrayIndexError("servers", 5, 2)
        assert error.context == {"key": "servers", "index": 5, "length": 2}
        assert "servers" in str(error)

    def test_schema_error_kind(self):
        error = SchemaValidationError("bad", SchemaErrorKind.INVALID_FORMAT, "email")
        assert error.context["kind"] == "invalid_format"
        assert error.path == "email"

    def test_detailed_message(self):
        error = ConfigValidationError("Configuration validation failed", [
            {"path": "port", "message": "Value out of range at 'port'"},
            {"path": "", "message": "root problem"},
        ])
        assert error.get_detailed_message().splitlines() == [
            "Configuration validation failed",
            "Validation errors:",
            "- port: Value out of range at 'port'",
            "- <root>: root problem",
        ]
