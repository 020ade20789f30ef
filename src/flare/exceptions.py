"""
Structured Exception Hierarchy

Every error raised by flare carries an error code and a context dictionary
so callers can log or serialize failures without parsing messages.
"""

from typing import Dict, List, Any, Optional
from datetime import datetime, timezone


class FlareException(Exception):
    """
    Base exception class for all flare-specific exceptions.

    Provides structured error information including an error code,
    context data and the underlying cause.
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }


class ConfigurationError(FlareException):
    """Raised when configuration-related errors occur."""

    error_code = "CONFIG_ERROR"

    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        context = kwargs.pop('context', {})
        if key is not None:
            context['key'] = key
        super().__init__(
            message=message,
            error_code=kwargs.pop('error_code', self.error_code),
            context=context,
            **kwargs
        )


class ParseError(ConfigurationError):
    """Raised when a configuration file or value cannot be parsed."""

    error_code = "PARSE_ERROR"

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        context = kwargs.pop('context', {})
        if source:
            context['source'] = source
        super().__init__(message, context=context, **kwargs)


class IoError(ConfigurationError):
    """Raised when a configuration file cannot be opened or read."""

    error_code = "IO_ERROR"

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        context = kwargs.pop('context', {})
        if path:
            context['path'] = path
        super().__init__(message, context=context, **kwargs)


class MissingKeyError(ConfigurationError):
    """Raised when a getter finds no value and no default was supplied."""

    error_code = "MISSING_KEY"

    def __init__(self, key: str, missing: Optional[List[str]] = None, **kwargs):
        if missing and len(missing) > 1:
            message = f"Missing configuration keys: {', '.join(missing)}"
        else:
            message = f"Missing configuration key: {key}"
        context = kwargs.pop('context', {})
        if missing:
            context['missing'] = list(missing)
        super().__init__(message, key=key, context=context, **kwargs)
        self.missing = list(missing) if missing else [key]


class TypeMismatchError(ConfigurationError):
    """Raised when a value is present but cannot be coerced to the requested kind."""

    error_code = "TYPE_MISMATCH"

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if expected:
            context['expected'] = expected
        if actual:
            context['actual'] = actual
        super().__init__(message, key=key, context=context, **kwargs)
        self.expected = expected
        self.actual = actual


class InvalidPathError(ConfigurationError):
    """Raised when a key path is malformed."""

    error_code = "INVALID_PATH"

    def __init__(self, path: str, reason: str = "malformed key path", **kwargs):
        super().__init__(f"Invalid key path '{path}': {reason}", key=path, **kwargs)
        self.path = path


class InvalidArrayIndexError(ConfigurationError):
    """Raised on out-of-bounds array access."""

    error_code = "INVALID_ARRAY_INDEX"

    def __init__(self, key: str, index: int, length: int, **kwargs):
        context = kwargs.pop('context', {})
        context.update({'index': index, 'length': length})
        super().__init__(
            f"Array index {index} out of range for '{key}' (length {length})",
            key=key,
            context=context,
            **kwargs
        )
        self.index = index
        self.length = length


class InvalidFormatError(ConfigurationError):
    """Raised when a file format token is not recognized."""

    error_code = "INVALID_FORMAT"

    def __init__(self, fmt: str, **kwargs):
        context = kwargs.pop('context', {})
        context['format'] = fmt
        super().__init__(f"Unrecognized configuration format: {fmt!r}", context=context, **kwargs)
        self.format = fmt


class SchemaValidationError(ConfigurationError):
    """Raised by single-value schema checks; carries the schema error kind."""

    error_code = "SCHEMA_ERROR"

    def __init__(self, message: str, kind: Any, path: str, **kwargs):
        context = kwargs.pop('context', {})
        context['kind'] = getattr(kind, 'value', kind)
        super().__init__(message, key=path, context=context, **kwargs)
        self.kind = kind
        self.path = path


class ConfigValidationError(ConfigurationError):
    """Aggregate exception raised when schema validation of a config fails."""

    error_code = "VALIDATION_FAILED"

    def __init__(self, message: str, validation_errors: List[Dict[str, Any]], **kwargs):
        super().__init__(message, context={"validation_errors": validation_errors}, **kwargs)
        self.validation_errors = validation_errors

    def get_detailed_message(self) -> str:
        """Get a detailed error message with all validation errors."""
        lines = [self.message]
        lines.append("Validation errors:")

        for error in self.validation_errors:
            path = error.get('path') or '<root>'
            msg = error.get('message', 'Unknown error')
            lines.append(f"- {path}: {msg}")

        return "\n".join(lines)
