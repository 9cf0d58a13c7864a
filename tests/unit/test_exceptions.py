"""
Tests for the error taxonomy.
"""

import pytest

from mcpline.core.exceptions import (
    ExecutionFailure,
    InvalidInputError,
    LifecycleError,
    McpRuntimeError,
    NameConflictError,
    OpaqueFailure,
    OperationKind,
    PromptNotFoundError,
    ResourceNotFoundError,
    ToolNotFoundError,
)

pytestmark = pytest.mark.unit


class TestNotFoundErrors:
    """Test lookup-miss errors."""

    @pytest.mark.parametrize(
        "error_cls,label,code",
        [
            (ToolNotFoundError, "Tool", "TOOL_NOT_FOUND"),
            (PromptNotFoundError, "Prompt", "PROMPT_NOT_FOUND"),
            (ResourceNotFoundError, "Resource", "RESOURCE_NOT_FOUND"),
        ],
    )
    def test_message_and_code(self, error_cls, label, code):
        error = error_cls("missing")

        assert isinstance(error, McpRuntimeError)
        assert str(error) == f"{label} 'missing' not found in registry"
        assert error.code == code
        assert error.entity_name == "missing"
        assert error.cause is None


class TestWrappedErrors:
    """Test errors that carry an underlying cause."""

    def test_invalid_input_keeps_cause(self):
        cause = ValueError("expected string")
        error = InvalidInputError("echo", OperationKind.TOOL, cause)

        assert error.code == "INVALID_INPUT"
        assert error.kind is OperationKind.TOOL
        assert error.cause is cause
        assert error.__cause__ is cause
        assert str(error) == "Invalid input for tool 'echo': expected string"

    def test_execution_failure_message(self):
        error = ExecutionFailure("greet", "prompt", RuntimeError("boom"))

        assert error.code == "EXECUTION_FAILURE"
        assert error.kind is OperationKind.PROMPT
        assert "Execution failed for prompt 'greet'" in str(error)
        assert "boom" in str(error)

    def test_to_dict_includes_cause(self):
        error = ExecutionFailure("add", OperationKind.TOOL, RuntimeError("boom"))

        assert error.to_dict() == {
            "name": "ExecutionFailure",
            "code": "EXECUTION_FAILURE",
            "message": "Execution failed for tool 'add': boom",
            "cause": {"name": "RuntimeError", "message": "boom"},
        }


class TestBuilderErrors:
    """Test registration and lifecycle errors."""

    def test_name_conflict(self):
        error = NameConflictError("add", OperationKind.TOOL)

        assert error.code == "NAME_CONFLICT"
        assert str(error) == "tool with name 'add' already exists in registry"
        assert "cause" not in error.to_dict()

    def test_lifecycle_error(self):
        error = LifecycleError("build()", "server has already been built")

        assert error.code == "LIFECYCLE_ERROR"
        assert error.operation == "build()"
        assert str(error) == "Lifecycle violation: build() - server has already been built"


class TestOpaqueFailure:
    """Test the opaque value carrier."""

    def test_carries_value(self):
        failure = OpaqueFailure({"sentinel": 42})

        assert failure.value == {"sentinel": 42}
        assert not isinstance(failure, McpRuntimeError)
