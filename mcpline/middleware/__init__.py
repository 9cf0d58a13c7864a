"""Middleware primitives for the invocation pipeline."""

from .compose import compose
from .error_wrapper import error_wrapper_middleware
from .telemetry import telemetry_middleware

__all__ = [
    "compose",
    "error_wrapper_middleware",
    "telemetry_middleware",
]
