"""mcpline - typed tools, prompts and resources served over line-delimited RPC."""

from .core.config import Settings, get_settings
from .core.exceptions import (
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
from .core.logging import StructuredLogger, ensure_logging, get_logger, setup_logging
from .manifest import Manifest, build_manifest
from .middleware import compose, error_wrapper_middleware, telemetry_middleware
from .protocol import (
    CallCtx,
    CallMeta,
    CallResult,
    ExecutionContext,
    InvokeFn,
    Middleware,
    PromptSpec,
    ResourceSpec,
    ToolSpec,
)
from .registry import Registry
from .runtime import Runtime
from .schema import JSONSchema, ModelSchema, Schema, SchemaValidationError, schema
from .server import RuntimeBundle, ServerBuilder, create_server
from .templating import render_template
from .transport import ErrorCode, StdioTransport, Transport, TransportState

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "ExecutionFailure",
    "InvalidInputError",
    "LifecycleError",
    "McpRuntimeError",
    "NameConflictError",
    "OpaqueFailure",
    "OperationKind",
    "PromptNotFoundError",
    "ResourceNotFoundError",
    "ToolNotFoundError",
    "StructuredLogger",
    "ensure_logging",
    "get_logger",
    "setup_logging",
    "Manifest",
    "build_manifest",
    "compose",
    "error_wrapper_middleware",
    "telemetry_middleware",
    "CallCtx",
    "CallMeta",
    "CallResult",
    "ExecutionContext",
    "InvokeFn",
    "Middleware",
    "PromptSpec",
    "ResourceSpec",
    "ToolSpec",
    "Registry",
    "Runtime",
    "JSONSchema",
    "ModelSchema",
    "Schema",
    "SchemaValidationError",
    "schema",
    "RuntimeBundle",
    "ServerBuilder",
    "create_server",
    "render_template",
    "ErrorCode",
    "StdioTransport",
    "Transport",
    "TransportState",
]
