"""
Shared contracts for the invocation pipeline.

Defines:
- ToolSpec / PromptSpec / ResourceSpec: immutable operation definitions
- ExecutionContext: read-only bundle handed to every handler
- CallCtx / CallResult: one invocation travelling through the middleware chain
- InvokeFn / Middleware: the onion-model function signatures
"""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .core.config import SEMVER_PATTERN
from .core.exceptions import OperationKind
from .core.logging import StructuredLogger
from .schema import Schema

__all__ = [
    "OperationKind",
    "ExecutionContext",
    "ToolSpec",
    "PromptSpec",
    "ResourceSpec",
    "OperationSpec",
    "CallMeta",
    "CallCtx",
    "CallResult",
    "InvokeFn",
    "Middleware",
]


class ExecutionContext(BaseModel):
    """Read-only context passed to handlers."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    logger: StructuredLogger
    version: str = Field("1.0.0", pattern=SEMVER_PATTERN.pattern, description="Semantic version MAJOR.MINOR.PATCH")


Handler = Callable[[Any, ExecutionContext], Any]


class ToolSpec(BaseModel):
    """A callable tool with typed input and output."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, description="Unique tool identifier")
    title: Optional[str] = Field(None, description="Human-readable name")
    description: Optional[str] = Field(None, description="Tool purpose")
    input: Schema = Field(..., description="Schema applied to raw input before the handler runs")
    output: Schema = Field(..., description="Schema describing the handler result")
    handler: Handler = Field(..., description="handler(input, ctx); may be sync or async")


class PromptSpec(BaseModel):
    """A text template with optional parameter schema."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1)
    template: str = Field(..., description="Template with {{identifier}} placeholders")
    params: Optional[Schema] = Field(None, description="Schema applied to params before rendering")
    description: Optional[str] = None


class ResourceSpec(BaseModel):
    """A named piece of content reachable by an absolute URI."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    uri: str = Field(..., description="Absolute URI (file, http or https)")
    title: Optional[str] = None
    description: Optional[str] = None
    mime_type: str = Field("text/plain", description="MIME type advertised in the manifest")


OperationSpec = Union[ToolSpec, PromptSpec, ResourceSpec]


class CallMeta(BaseModel):
    start: int = Field(default_factory=time.perf_counter_ns, description="Monotonic start time in nanoseconds")


class CallCtx(BaseModel):
    """One inbound invocation. Middlewares may mutate it before forwarding."""

    model_config = ConfigDict(validate_assignment=True)

    type: OperationKind
    name: str
    input: Any = None
    meta: CallMeta = Field(default_factory=CallMeta)


class CallResult(BaseModel):
    """Outcome of an invocation; on ``is_error`` the content is the raised value."""

    content: Any = None
    is_error: bool = False


InvokeFn = Callable[[CallCtx], Awaitable[CallResult]]
Middleware = Callable[[InvokeFn], InvokeFn]
