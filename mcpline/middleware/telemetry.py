"""
Telemetry middleware for invocation tracking.
"""

import time

import structlog

from ..protocol import CallCtx, CallResult, InvokeFn

logger = structlog.get_logger(__name__)


def _elapsed_ms(ctx: CallCtx) -> float:
    return (time.perf_counter_ns() - ctx.meta.start) / 1_000_000


def telemetry_middleware(next_fn: InvokeFn) -> InvokeFn:
    """Log every invocation with its outcome and duration."""

    async def invoke(ctx: CallCtx) -> CallResult:
        try:
            result = await next_fn(ctx)
        except Exception as e:
            logger.error(
                "Invocation failed",
                kind=ctx.type.value,
                name=ctx.name,
                error=str(e),
                duration_ms=_elapsed_ms(ctx),
            )
            raise

        logger.info(
            "Invocation completed",
            kind=ctx.type.value,
            name=ctx.name,
            is_error=result.is_error,
            duration_ms=_elapsed_ms(ctx),
        )
        return result

    return invoke
