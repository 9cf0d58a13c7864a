"""
Schema adapters.

A schema is anything exposing ``validate(data)`` (returns the narrowed value or
raises ``SchemaValidationError``) and ``json_schema()``. Two adapters ship:

- ``ModelSchema``: pydantic models and any type ``TypeAdapter`` understands
- ``JSONSchema``: raw JSON Schema documents checked with ``jsonschema``
"""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Protocol, TypeVar, runtime_checkable

import jsonschema
from pydantic import TypeAdapter, ValidationError

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class SchemaValidationError(ValueError):
    """Raised by schema adapters when data does not match."""

    def __init__(self, message: str, errors: List[Dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@runtime_checkable
class Schema(Protocol[T_co]):
    def validate(self, data: Any) -> T_co: ...

    def json_schema(self) -> Dict[str, Any]: ...


class ModelSchema(Generic[T]):
    """Pydantic-backed schema adapter."""

    def __init__(self, type_: Any) -> None:
        self.type_ = type_
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    def validate(self, data: Any) -> T:
        try:
            return self._adapter.validate_python(data)
        except ValidationError as exc:
            errors = [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
                for err in exc.errors()
            ]
            raise SchemaValidationError(f"Schema validation failed: {exc}", errors) from exc

    def json_schema(self) -> Dict[str, Any]:
        return self._adapter.json_schema()

    def __repr__(self) -> str:
        return f"ModelSchema({self.type_!r})"


class JSONSchema:
    """jsonschema-backed adapter; ``validate`` returns the data unchanged."""

    def __init__(self, schema: Dict[str, Any]) -> None:
        validator_cls = jsonschema.validators.validator_for(schema)
        validator_cls.check_schema(schema)
        self.schema = schema
        self._validator = validator_cls(schema)

    def validate(self, data: Any) -> Any:
        errors = sorted(self._validator.iter_errors(data), key=lambda err: list(err.path))
        if errors:
            details = [
                {"loc": list(err.path), "msg": err.message, "type": err.validator}
                for err in errors
            ]
            raise SchemaValidationError(
                f"Schema validation failed: {errors[0].message}", details
            ) from errors[0]
        return data

    def json_schema(self) -> Dict[str, Any]:
        return dict(self.schema)

    def __repr__(self) -> str:
        return f"JSONSchema({self.schema!r})"


def schema(definition: Any) -> Schema[Any]:
    """
    Build a schema adapter.

    Dicts are treated as JSON Schema documents; anything else (pydantic
    models, builtin types, typing constructs) goes through ``ModelSchema``.
    Existing adapters, including custom ones, are returned as-is.
    """
    if isinstance(definition, (ModelSchema, JSONSchema)):
        return definition
    if not isinstance(definition, type) and isinstance(definition, Schema):
        return definition
    if isinstance(definition, dict):
        return JSONSchema(definition)
    return ModelSchema(definition)


def is_validation_error(exc: BaseException) -> bool:
    """Whether ``exc`` signals rejected input rather than a failed execution."""
    if isinstance(exc, (SchemaValidationError, ValidationError, jsonschema.ValidationError)):
        return True
    return "validation" in str(exc)
