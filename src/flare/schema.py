"""
Declarative configuration schema.

Schemas are immutable trees built once and shared read-only::

    schema = (
        Schema.object()
        .field("database", Schema.object()
               .field("host", Schema.string(min_length=1).required())
               .field("port", Schema.int(1, 65535).with_default(5432))
               .build())
        .field("debug", Schema.boolean())
        .build()
    )

Updates such as ``required()`` return a new node and leave the original
untouched.
"""

import re
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError, SchemaValidationError
from .paths import KeyPath
from .validation_result import SchemaErrorKind, ValidationIssue, build_message
from .value import describe, to_value

Number = Union[int, float]
Count = int


class SchemaKind(str, Enum):
    """Kinds a schema node can require."""
    STRING = "string"
    INT = "int"
    BOOL = "bool"
    FLOAT = "float"
    OBJECT = "object"
    ARRAY = "array"


_KIND_ALIASES = {
    "str": "string",
    "integer": "int",
    "boolean": "bool",
    "number": "float",
    "map": "object",
    "list": "array",
}


def _matches_kind(kind: SchemaKind, value: Any) -> bool:
    if kind is SchemaKind.STRING:
        return isinstance(value, str)
    if kind is SchemaKind.BOOL:
        return isinstance(value, bool)
    if kind is SchemaKind.INT:
        return isinstance(value, int) and not isinstance(value, bool)
    if kind is SchemaKind.FLOAT:
        # ints are acceptable floats
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind is SchemaKind.ARRAY:
        return isinstance(value, list)
    return isinstance(value, dict)


def _issue(kind: SchemaErrorKind, path: str, expected: Any = None, actual: Any = None) -> ValidationIssue:
    return ValidationIssue(path, build_message(kind, path, expected, actual), kind)


def _child(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


class Schema(BaseModel):
    """A node of the schema tree."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='forbid')

    kind: SchemaKind
    is_required: bool = Field(default=False, alias="required")
    default: Any = None
    description: Optional[str] = None

    min_length: Optional[Count] = Field(default=None, ge=0)
    max_length: Optional[Count] = Field(default=None, ge=0)
    pattern: Optional[str] = None

    minimum: Optional[Number] = None
    maximum: Optional[Number] = None

    min_items: Optional[Count] = Field(default=None, ge=0)
    max_items: Optional[Count] = Field(default=None, ge=0)
    items: Optional["Schema"] = None

    fields: Dict[str, "Schema"] = Field(default_factory=dict)

    @field_validator('kind', mode='before')
    @classmethod
    def validate_kind(cls, v):
        """Accept common spellings of the kind names."""
        if isinstance(v, str) and not isinstance(v, SchemaKind):
            lowered = v.lower()
            return _KIND_ALIASES.get(lowered, lowered)
        return v

    @field_validator('default', mode='before')
    @classmethod
    def validate_default(cls, v):
        return to_value(v)

    @field_validator('pattern')
    @classmethod
    def validate_pattern(cls, v):
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Invalid pattern {v!r}: {e}") from e
        return v

    @model_validator(mode='after')
    def validate_bounds(self):
        """Ensure lower bounds do not exceed upper bounds."""
        for low, high in (('min_length', 'max_length'), ('minimum', 'maximum'), ('min_items', 'max_items')):
            lo, hi = getattr(self, low), getattr(self, high)
            if lo is not None and hi is not None and lo > hi:
                raise ValueError(f"{low} ({lo}) must not exceed {high} ({hi})")
        if self.fields and self.kind is not SchemaKind.OBJECT:
            raise ValueError("only object schemas can declare fields")
        if self.items is not None and self.kind is not SchemaKind.ARRAY:
            raise ValueError("only array schemas can declare items")
        return self

    # Functional updates

    def required(self) -> "Schema":
        return self.model_copy(update={"is_required": True})

    def optional(self) -> "Schema":
        return self.model_copy(update={"is_required": False})

    def with_default(self, value: Any) -> "Schema":
        return self.model_copy(update={"default": to_value(value)})

    def with_description(self, text: str) -> "Schema":
        return self.model_copy(update={"description": text})

    # Checking

    def check(self, value: Any, path: str = "") -> List[ValidationIssue]:
        """
        Check one value against this node.

        Object values are checked field by field and array values item by
        item, so the returned list can hold issues at nested paths.
        """
        if not _matches_kind(self.kind, value):
            return [_issue(SchemaErrorKind.TYPE_MISMATCH, path, self.kind.value, describe(value))]

        if self.kind is SchemaKind.STRING:
            return self._check_string(value, path)
        if self.kind in (SchemaKind.INT, SchemaKind.FLOAT):
            return self._check_number(value, path)
        if self.kind is SchemaKind.ARRAY:
            return self._check_array(value, path)
        if self.kind is SchemaKind.OBJECT:
            return self._check_object(value, path)
        return []

    def validate(self, value: Any, path: str = "") -> None:
        """
        Raises:
            SchemaValidationError: For the first issue found in ``value``.
        """
        issues = self.check(value, path)
        if issues:
            first = issues[0]
            raise SchemaValidationError(first.message, first.kind, first.path)

    def check_missing(self, path: str) -> List[ValidationIssue]:
        """Issues for a value absent at ``path``: required nodes and required descendants."""
        if self.is_required:
            return [_issue(SchemaErrorKind.MISSING_REQUIRED_FIELD, path)]
        if self.kind is not SchemaKind.OBJECT:
            return []
        issues: List[ValidationIssue] = []
        for name, field in self.fields.items():
            issues.extend(field.check_missing(_child(path, name)))
        return issues

    def _check_string(self, value: str, path: str) -> List[ValidationIssue]:
        issues = []
        if self.min_length is not None and len(value) < self.min_length:
            issues.append(_issue(SchemaErrorKind.VALUE_OUT_OF_RANGE, path,
                                 f"length >= {self.min_length}", f"length {len(value)}"))
        if self.max_length is not None and len(value) > self.max_length:
            issues.append(_issue(SchemaErrorKind.VALUE_OUT_OF_RANGE, path,
                                 f"length <= {self.max_length}", f"length {len(value)}"))
        if self.pattern is not None and re.search(self.pattern, value) is None:
            issues.append(_issue(SchemaErrorKind.INVALID_FORMAT, path,
                                 f"match for pattern {self.pattern!r}", repr(value)))
        return issues

    def _check_number(self, value: Number, path: str) -> List[ValidationIssue]:
        issues = []
        if self.minimum is not None and value < self.minimum:
            issues.append(_issue(SchemaErrorKind.VALUE_OUT_OF_RANGE, path, f">= {self.minimum}", value))
        if self.maximum is not None and value > self.maximum:
            issues.append(_issue(SchemaErrorKind.VALUE_OUT_OF_RANGE, path, f"<= {self.maximum}", value))
        return issues

    def _check_array(self, value: List[Any], path: str) -> List[ValidationIssue]:
        issues = []
        if self.min_items is not None and len(value) < self.min_items:
            issues.append(_issue(SchemaErrorKind.VALUE_OUT_OF_RANGE, path,
                                 f"at least {self.min_items} items", f"{len(value)} items"))
        if self.max_items is not None and len(value) > self.max_items:
            issues.append(_issue(SchemaErrorKind.VALUE_OUT_OF_RANGE, path,
                                 f"at most {self.max_items} items", f"{len(value)} items"))
        if self.items is not None:
            for i, item in enumerate(value):
                issues.extend(self.items.check(item, f"{path}[{i}]"))
        return issues

    def _check_object(self, value: Dict[str, Any], path: str) -> List[ValidationIssue]:
        issues = []
        for name, field in self.fields.items():
            child = _child(path, name)
            if name in value:
                issues.extend(field.check(value[name], child))
            else:
                issues.extend(field.check_missing(child))
        return issues

    def iter_defaults(self, prefix: KeyPath = ()) -> Iterator[Tuple[KeyPath, Any]]:
        """Yield (key path, default) for every field that declares a default."""
        for name, field in self.fields.items():
            path = prefix + (name,)
            if field.default is not None:
                yield path, field.default
            if field.kind is SchemaKind.OBJECT:
                yield from field.iter_defaults(path)

    # Construction

    @classmethod
    def from_dict(cls, document: Dict[str, Any]) -> "Schema":
        """
        Build a schema from a declarative document such as::

            {"kind": "object", "fields": {"port": {"kind": "int", "minimum": 1}}}

        A document without ``kind`` describes the root object.

        Raises:
            ConfigurationError: If the document is not a valid schema.
        """
        if not isinstance(document, dict):
            raise ConfigurationError("Schema document must be a mapping")
        if "kind" not in document:
            document = {**document, "kind": SchemaKind.OBJECT}
        try:
            return cls.model_validate(document)
        except ValidationError as e:
            errors = [
                {'path': '.'.join(str(loc) for loc in error['loc']), 'message': error['msg']}
                for error in e.errors()
            ]
            raise ConfigurationError(
                f"Invalid schema document: {len(errors)} error(s)",
                context={"validation_errors": errors},
                cause=e,
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True, exclude_defaults=True)

    @classmethod
    def root(cls) -> "ObjectSchemaBuilder":
        """Builder for the top-level object of a configuration."""
        return ObjectSchemaBuilder()

    @classmethod
    def object(cls) -> "ObjectSchemaBuilder":
        return ObjectSchemaBuilder()

    @classmethod
    def string(cls, min_length: Optional[Count] = None, max_length: Optional[Count] = None,
               pattern: Optional[str] = None) -> "Schema":
        return cls(kind=SchemaKind.STRING, min_length=min_length, max_length=max_length, pattern=pattern)

    @classmethod
    def boolean(cls) -> "Schema":
        return cls(kind=SchemaKind.BOOL)

    @classmethod
    def array(cls, min_items: Optional[Count] = None, max_items: Optional[Count] = None,
              items: Optional["Schema"] = None) -> "Schema":
        return cls(kind=SchemaKind.ARRAY, min_items=min_items, max_items=max_items, items=items)

    # these two shadow the builtins inside the class body, keep them last
    @classmethod
    def int(cls, minimum: Optional[Number] = None, maximum: Optional[Number] = None) -> "Schema":
        return cls(kind=SchemaKind.INT, minimum=minimum, maximum=maximum)

    @classmethod
    def float(cls, minimum: Optional[Number] = None, maximum: Optional[Number] = None) -> "Schema":
        return cls(kind=SchemaKind.FLOAT, minimum=minimum, maximum=maximum)


class ObjectSchemaBuilder:
    """Fluent builder for object schemas; field order is declaration order."""

    def __init__(self):
        self._fields: Dict[str, Schema] = {}
        self._required = False
        self._description: Optional[str] = None

    def field(self, name: str, schema: Union[Schema, "ObjectSchemaBuilder"]) -> "ObjectSchemaBuilder":
        if not name or '.' in name:
            raise ConfigurationError(f"Invalid schema field name: {name!r}", key=name)
        if isinstance(schema, ObjectSchemaBuilder):
            schema = schema.build()
        self._fields[name] = schema
        return self

    def required(self) -> "ObjectSchemaBuilder":
        self._required = True
        return self

    def with_description(self, text: str) -> "ObjectSchemaBuilder":
        self._description = text
        return self

    def build(self) -> Schema:
        return Schema(
            kind=SchemaKind.OBJECT,
            required=self._required,
            description=self._description,
            fields=dict(self._fields),
        )


Schema.model_rebuild()
