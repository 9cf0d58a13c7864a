"""
Tests for schema adapters.
"""

from typing import Any, Dict, List

import jsonschema
import pytest
from pydantic import BaseModel, Field

from mcpline.schema import (
    JSONSchema,
    ModelSchema,
    Schema,
    SchemaValidationError,
    is_validation_error,
    schema,
)

pytestmark = pytest.mark.unit


class AddInput(BaseModel):
    a: int = Field(..., description="First operand")
    b: int = Field(..., description="Second operand")


class TestModelSchema:
    """Test pydantic-backed schemas."""

    def test_validates_model(self):
        adapter = ModelSchema(AddInput)

        result = adapter.validate({"a": 5, "b": 3})

        assert isinstance(result, AddInput)
        assert result.a + result.b == 8

    def test_rejects_bad_input(self):
        adapter = ModelSchema(AddInput)

        with pytest.raises(SchemaValidationError) as exc_info:
            adapter.validate({"a": "five"})

        locs = [err["loc"] for err in exc_info.value.errors]
        assert ["a"] in locs
        assert ["b"] in locs

    def test_plain_types(self):
        assert ModelSchema(str).validate("hi") == "hi"
        assert ModelSchema(List[int]).validate([1, 2]) == [1, 2]
        with pytest.raises(SchemaValidationError):
            ModelSchema(str).validate(123)

    def test_json_schema(self):
        generated = ModelSchema(AddInput).json_schema()

        assert generated["type"] == "object"
        assert set(generated["properties"]) == {"a", "b"}
        assert generated["properties"]["a"]["description"] == "First operand"


class TestJSONSchema:
    """Test jsonschema-backed schemas."""

    DOCUMENT: Dict[str, Any] = {
        "type": "object",
        "properties": {"name": {"type": "string"}},
        "required": ["name"],
    }

    def test_returns_data_unchanged(self):
        data = {"name": "Ada", "extra": True}

        assert JSONSchema(self.DOCUMENT).validate(data) is data

    def test_rejects_missing_field(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            JSONSchema(self.DOCUMENT).validate({})

        assert "name" in str(exc_info.value)
        assert exc_info.value.errors[0]["type"] == "required"

    def test_rejects_invalid_document(self):
        with pytest.raises(jsonschema.SchemaError):
            JSONSchema({"type": "not-a-type"})

    def test_json_schema_is_copy(self):
        adapter = JSONSchema(self.DOCUMENT)

        exported = adapter.json_schema()
        exported["type"] = "array"

        assert adapter.schema["type"] == "object"


class TestSchemaFactory:
    """Test schema() dispatch."""

    def test_dict_becomes_json_schema(self):
        assert isinstance(schema({"type": "integer"}), JSONSchema)

    def test_types_become_model_schema(self):
        assert isinstance(schema(AddInput), ModelSchema)
        assert isinstance(schema(int), ModelSchema)

    def test_existing_adapter_passthrough(self):
        adapter = ModelSchema(int)

        assert schema(adapter) is adapter

    def test_custom_adapter_passthrough(self):
        class Upper:
            def validate(self, data):
                return str(data).upper()

            def json_schema(self):
                return {"type": "string"}

        custom = Upper()

        assert isinstance(custom, Schema)
        assert schema(custom) is custom


class TestIsValidationError:
    """Test validation error detection."""

    def test_adapter_errors(self):
        assert is_validation_error(SchemaValidationError("bad"))

    def test_message_heuristic(self):
        assert is_validation_error(ValueError("input validation failed"))

    def test_other_errors(self):
        assert not is_validation_error(RuntimeError("boom"))
