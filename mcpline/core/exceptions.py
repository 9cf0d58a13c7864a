"""
Error taxonomy raised by the registry, runtime and builder.

Every taxonomy error carries a stable ``code`` so transports can map it to a
wire error without inspecting messages. ``OpaqueFailure`` is the escape hatch:
the runtime never wraps it, and the error wrapper unwraps its ``value``.
"""

from enum import Enum
from typing import Any, Dict, Optional


class OperationKind(str, Enum):
    """Kinds of operations held by the registry."""
    TOOL = "tool"
    PROMPT = "prompt"
    RESOURCE = "resource"


class McpRuntimeError(Exception):
    """Base class for taxonomy errors."""

    code: str = "RUNTIME_ERROR"

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view used when the error crosses the wire."""
        payload: Dict[str, Any] = {
            "name": type(self).__name__,
            "code": self.code,
            "message": self.message,
        }
        if self.cause is not None:
            payload["cause"] = {
                "name": type(self.cause).__name__,
                "message": str(self.cause),
            }
        return payload


class ToolNotFoundError(McpRuntimeError):
    code = "TOOL_NOT_FOUND"

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Tool '{tool_name}' not found in registry")
        self.entity_name = tool_name


class PromptNotFoundError(McpRuntimeError):
    code = "PROMPT_NOT_FOUND"

    def __init__(self, prompt_name: str) -> None:
        super().__init__(f"Prompt '{prompt_name}' not found in registry")
        self.entity_name = prompt_name


class ResourceNotFoundError(McpRuntimeError):
    code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_name: str) -> None:
        super().__init__(f"Resource '{resource_name}' not found in registry")
        self.entity_name = resource_name


class InvalidInputError(McpRuntimeError):
    """Input or params were rejected by the declared schema."""

    code = "INVALID_INPUT"

    def __init__(self, entity_name: str, kind: OperationKind, validation_error: BaseException) -> None:
        kind = OperationKind(kind)
        super().__init__(
            f"Invalid input for {kind.value} '{entity_name}': {validation_error}",
            cause=validation_error,
        )
        self.entity_name = entity_name
        self.kind = kind


class ExecutionFailure(McpRuntimeError):
    """A handler, template or resource loader raised."""

    code = "EXECUTION_FAILURE"

    def __init__(self, entity_name: str, kind: OperationKind, cause: BaseException) -> None:
        kind = OperationKind(kind)
        super().__init__(
            f"Execution failed for {kind.value} '{entity_name}': {cause}",
            cause=cause,
        )
        self.entity_name = entity_name
        self.kind = kind


class NameConflictError(McpRuntimeError):
    code = "NAME_CONFLICT"

    def __init__(self, name: str, kind: OperationKind) -> None:
        kind = OperationKind(kind)
        super().__init__(f"{kind.value} with name '{name}' already exists in registry")
        self.entity_name = name
        self.kind = kind


class LifecycleError(McpRuntimeError):
    code = "LIFECYCLE_ERROR"

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"Lifecycle violation: {operation} - {reason}")
        self.operation = operation
        self.reason = reason


class OpaqueFailure(Exception):
    """
    Raise to carry an arbitrary sentinel value through the pipeline.

    The runtime re-raises it untouched and the error wrapper middleware
    reports ``value`` itself as the error content.
    """

    def __init__(self, value: Any) -> None:
        super().__init__(repr(value))
        self.value = value
