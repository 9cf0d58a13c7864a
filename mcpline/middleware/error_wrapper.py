"""Built-in middleware that turns raised exceptions into error results."""

import structlog

from ..core.exceptions import OpaqueFailure
from ..protocol import CallCtx, CallResult, InvokeFn

logger = structlog.get_logger(__name__)


def error_wrapper_middleware(next_fn: InvokeFn) -> InvokeFn:
    """
    Convert anything raised downstream into ``CallResult(is_error=True)``.

    The server appends it after user middlewares, so it sits innermost,
    right around the core invoker.
    """

    async def invoke(ctx: CallCtx) -> CallResult:
        try:
            return await next_fn(ctx)
        except OpaqueFailure as failure:
            logger.debug("Invocation raised opaque value", kind=ctx.type.value, name=ctx.name)
            return CallResult(is_error=True, content=failure.value)
        except Exception as exc:
            logger.debug(
                "Invocation raised",
                kind=ctx.type.value,
                name=ctx.name,
                error_type=type(exc).__name__,
            )
            return CallResult(is_error=True, content=exc)

    return invoke
