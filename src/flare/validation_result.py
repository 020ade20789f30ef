"""
Validation result types.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from .exceptions import ConfigValidationError


class SchemaErrorKind(Enum):
    """Schema validation error kinds."""
    MISSING_REQUIRED_FIELD = "missing_required_field"
    TYPE_MISMATCH = "type_mismatch"
    VALUE_OUT_OF_RANGE = "value_out_of_range"
    INVALID_FORMAT = "invalid_format"
    VALIDATION_FAILED = "validation_failed"


_TITLES = {
    SchemaErrorKind.MISSING_REQUIRED_FIELD: "Missing required field",
    SchemaErrorKind.TYPE_MISMATCH: "Type mismatch",
    SchemaErrorKind.VALUE_OUT_OF_RANGE: "Value out of range",
    SchemaErrorKind.INVALID_FORMAT: "Invalid format",
    SchemaErrorKind.VALIDATION_FAILED: "Validation failed",
}


def build_message(kind: SchemaErrorKind, path: str, expected: Any = None, actual: Any = None) -> str:
    """Human-readable message from (kind, path, expected, actual)."""
    message = f"{_TITLES[kind]} at '{path}'"
    if expected is not None and actual is not None:
        message += f": expected {expected}, got {actual}"
    elif expected is not None:
        message += f": expected {expected}"
    return message


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation error."""
    path: str
    message: str
    kind: SchemaErrorKind

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "message": self.message, "kind": self.kind.value}


@dataclass(frozen=True)
class ValidationWarning:
    """A non-fatal validation finding."""
    path: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "message": self.message}


@dataclass
class ValidationResult:
    """Ordered errors and warnings produced by one validation run."""
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, kind: SchemaErrorKind, path: str, expected: Any = None, actual: Any = None) -> None:
        self.errors.append(ValidationIssue(path, build_message(kind, path, expected, actual), kind))

    def add_warning(self, path: str, message: str) -> None:
        self.warnings.append(ValidationWarning(path, message))

    def errors_of(self, kind: SchemaErrorKind) -> List[ValidationIssue]:
        return [error for error in self.errors if error.kind is kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.is_valid,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": [warning.to_dict() for warning in self.warnings],
        }

    def raise_for_errors(self) -> None:
        """Raise a single aggregate ConfigValidationError when errors exist."""
        if self.errors:
            raise ConfigValidationError(
                f"Configuration validation failed with {len(self.errors)} error(s)",
                [error.to_dict() for error in self.errors],
            )
