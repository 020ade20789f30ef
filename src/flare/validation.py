"""
Configuration validation against a schema.
"""

import logging
from typing import Any

from .schema import Schema, SchemaKind
from .validation_result import SchemaErrorKind, ValidationResult
from .value import describe

logger = logging.getLogger(__name__)


class Validator:
    """
    Walks a schema tree and checks the store value at every declared path.

    Fields are visited in declaration order and every field is visited;
    validation never raises for invalid data.
    """

    def __init__(self, schema: Schema):
        if schema.kind is not SchemaKind.OBJECT:
            raise ValueError(f"Root schema must be an object, got {schema.kind.value}")
        self.schema = schema

    def validate(self, config) -> ValidationResult:
        """
        Validate a configuration store.

        Args:
            config: Store exposing ``get``, ``has_key``, ``has_prefix`` and ``data_paths``

        Returns:
            ValidationResult with errors in visiting order and warnings for
            top-level keys the schema does not declare
        """
        result = ValidationResult()
        self._visit_fields(config, self.schema, "", result)
        self._warn_unknown_keys(config, result)

        if result.has_errors():
            logger.debug(f"Validation found {len(result.errors)} error(s)")
        return result

    def _visit_fields(self, config, schema: Schema, prefix: str, result: ValidationResult) -> None:
        for name, field in schema.fields.items():
            path = f"{prefix}.{name}" if prefix else name
            if field.kind is SchemaKind.OBJECT:
                self._visit_object(config, field, path, result)
            elif config.has_key(path):
                result.errors.extend(field.check(config.get(path), path))
            elif field.is_required:
                result.add_error(SchemaErrorKind.MISSING_REQUIRED_FIELD, path)

    def _visit_object(self, config, field: Schema, path: str, result: ValidationResult) -> None:
        value = config.get(path)
        if value is not None and not isinstance(value, dict):
            result.add_error(SchemaErrorKind.TYPE_MISMATCH, path, SchemaKind.OBJECT.value, describe(value))
            return

        present = value is not None or config.has_prefix(path)
        if not present and field.is_required:
            result.add_error(SchemaErrorKind.MISSING_REQUIRED_FIELD, path)
            return

        # absent optional objects are still walked so required children surface
        self._visit_fields(config, field, path, result)

    def _warn_unknown_keys(self, config, result: ValidationResult) -> None:
        known = list(self.schema.fields)
        reported = set()

        for path in config.data_paths():
            top = path[0]
            if top in known or any(top.startswith(name + "_") for name in known):
                continue
            if top not in reported:
                reported.add(top)
                result.add_warning(top, f"Unknown configuration key: {top}")


def validate_config(config: Any, schema: Schema) -> ValidationResult:
    """Validate ``config`` against ``schema``."""
    return Validator(schema).validate(config)
