"""
Tests for schema construction and single-value checks.
"""

import pytest
from pydantic import ValidationError

from flare import ConfigurationError, Schema, SchemaErrorKind, SchemaKind, SchemaValidationError


def kinds(issues):
    return [issue.kind for issue in issues]


class TestSchemaBuilders:
    """Test builders and functional updates."""

    def test_leaf_builders(self):
        assert Schema.string(min_length=1, max_length=5).kind is SchemaKind.STRING
        assert Schema.int(1, 10).minimum == 1
        assert Schema.float(maximum=1.0).maximum == 1.0
        assert Schema.boolean().kind is SchemaKind.BOOL
        assert Schema.array(items=Schema.string()).items.kind is SchemaKind.STRING

    def test_object_builder_keeps_declaration_order(self):
        schema = (Schema.object()
                  .field("b", Schema.int())
                  .field("a", Schema.string())
                  .field("c", Schema.object().field("x", Schema.boolean()))
                  .build())
        assert list(schema.fields) == ["b", "a", "c"]
        assert schema.fields["c"].kind is SchemaKind.OBJECT

    def test_functional_updates_return_new_nodes(self):
        """Test required/with_default/with_description leave the original untouched."""
        base = Schema.int()
        required = base.required()
        described = required.with_default(5).with_description("port")

        assert base.is_required is False
        assert required.is_required is True
        assert described.default == 5
        assert described.description == "port"
        assert required.default is None

    def test_schema_is_frozen(self):
        schema = Schema.string()
        with pytest.raises(ValidationError):
            schema.is_required = True

    def test_invalid_bounds(self):
        with pytest.raises(ValidationError):
            Schema.int(10, 1)
        with pytest.raises(ValidationError):
            Schema.string(pattern="(")

    def test_invalid_field_name(self):
        with pytest.raises(ConfigurationError):
            Schema.object().field("a.b", Schema.int())

    def test_iter_defaults(self):
        schema = (Schema.root()
                  .field("port", Schema.int().with_default(8080))
                  .field("db", Schema.object().field("pool", Schema.int().with_default(4)))
                  .field("host", Schema.string())
                  .build())
        assert list(schema.iter_defaults()) == [(("port",), 8080), (("db", "pool"), 4)]


class TestSchemaFromDict:
    """Test declarative schema documents."""

    def test_from_dict(self):
        schema = Schema.from_dict({
            "fields": {
                "name": {"kind": "string", "required": True, "min_length": 2},
                "port": {"kind": "integer", "minimum": 1, "maximum": 65535, "default": 80},
                "tags": {"kind": "array", "items": {"kind": "str"}},
            }
        })
        assert schema.kind is SchemaKind.OBJECT
        assert schema.fields["name"].is_required is True
        assert schema.fields["port"].kind is SchemaKind.INT
        assert schema.fields["port"].default == 80
        assert schema.fields["tags"].items.kind is SchemaKind.STRING

    def test_invalid_document(self):
        with pytest.raises(ConfigurationError, match="Invalid schema document") as exc_info:
            Schema.from_dict({"fields": {"x": {"kind": "decimal"}}})
        assert exc_info.value.context["validation_errors"]

    def test_unknown_constraint_rejected(self):
        with pytest.raises(ConfigurationError):
            Schema.from_dict({"fields": {"x": {"kind": "int", "minimun": 1}}})

    def test_to_dict_round_trip(self):
        schema = Schema.root().field("name", Schema.string(min_length=1).required()).build()
        assert Schema.from_dict(schema.to_dict()) == schema


class TestSchemaCheck:
    """Test checking single values."""

    def test_kind_mismatch(self):
        issues = Schema.int().check("8080", "port")
        assert kinds(issues) == [SchemaErrorKind.TYPE_MISMATCH]
        assert issues[0].message == "Type mismatch at 'port': expected int, got string"

    def test_bool_is_not_an_int(self):
        assert kinds(Schema.int().check(True)) == [SchemaErrorKind.TYPE_MISMATCH]

    def test_float_accepts_int(self):
        assert Schema.float(0, 1).check(1) == []

    def test_string_constraints(self):
        schema = Schema.string(min_length=3, max_length=5, pattern=r"^[a-z]+$")
        assert schema.check("abcd") == []
        assert kinds(schema.check("ab")) == [SchemaErrorKind.VALUE_OUT_OF_RANGE]
        assert kinds(schema.check("abcdef")) == [SchemaErrorKind.VALUE_OUT_OF_RANGE]
        assert kinds(schema.check("ABCD")) == [SchemaErrorKind.INVALID_FORMAT]

    def test_numeric_bounds(self):
        schema = Schema.int(1, 65535)
        assert schema.check(1) == []
        assert schema.check(65535) == []
        assert kinds(schema.check(0)) == [SchemaErrorKind.VALUE_OUT_OF_RANGE]
        assert kinds(schema.check(70000)) == [SchemaErrorKind.VALUE_OUT_OF_RANGE]

    def test_array_items(self):
        """Test array counts and per-item errors at indexed paths."""
        schema = Schema.array(min_items=1, max_items=3, items=Schema.int(minimum=0))
        assert schema.check([1, 2]) == []
        assert kinds(schema.check([])) == [SchemaErrorKind.VALUE_OUT_OF_RANGE]

        issues = schema.check([1, "x", -1, 4], "ports")
        assert [issue.path for issue in issues] == ["ports", "ports[1]", "ports[2]"]
        assert kinds(issues) == [
            SchemaErrorKind.VALUE_OUT_OF_RANGE,
            SchemaErrorKind.TYPE_MISMATCH,
            SchemaErrorKind.VALUE_OUT_OF_RANGE,
        ]

    def test_array_of_objects(self):
        schema = Schema.array(items=Schema.object().field("host", Schema.string().required()).build())
        issues = schema.check([{"host": "a"}, {}], "servers")
        assert [issue.path for issue in issues] == ["servers[1].host"]
        assert kinds(issues) == [SchemaErrorKind.MISSING_REQUIRED_FIELD]

    def test_object_value(self):
        schema = (Schema.object()
                  .field("host", Schema.string().required())
                  .field("port", Schema.int())
                  .build())
        issues = schema.check({"port": "x"}, "db")
        assert [(issue.path, issue.kind) for issue in issues] == [
            ("db.host", SchemaErrorKind.MISSING_REQUIRED_FIELD),
            ("db.port", SchemaErrorKind.TYPE_MISMATCH),
        ]

    def test_validate_raises_first_issue(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            Schema.int(maximum=10).validate(11, "retries")
        assert exc_info.value.kind is SchemaErrorKind.VALUE_OUT_OF_RANGE
        assert exc_info.value.path == "retries"

    def test_validate_passes(self):
        Schema.string().validate("ok")
