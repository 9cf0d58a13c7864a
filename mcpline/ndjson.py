"""
Newline-delimited JSON codec.

- NDJSONReader: iterate discrete lines (or decoded values) from an async byte stream
- NDJSONWriter: write one compact JSON value plus ``\\n`` per call, serialized by a lock
"""

from __future__ import annotations

import asyncio
import inspect
import json
from typing import Any, AsyncIterator, Callable, Dict, Optional, Tuple

import structlog
from pydantic import BaseModel

from .core.exceptions import McpRuntimeError

logger = structlog.get_logger(__name__)


class NDJSONParseError(ValueError):
    """A line could not be decoded as JSON."""

    def __init__(
        self,
        line_number: int,
        original_error: BaseException,
        partial_content: str,
        message: Optional[str] = None,
    ) -> None:
        super().__init__(message or f"NDJSON parse error at line {line_number}: {original_error}")
        self.line_number = line_number
        self.original_error = original_error
        self.partial_content = partial_content

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": type(self).__name__,
            "message": str(self),
            "lineNumber": self.line_number,
            "originalError": {
                "name": type(self.original_error).__name__,
                "message": str(self.original_error),
            },
            "partialContent": self.partial_content,
        }


def decode_line(text: str, line_number: int) -> Any:
    """Decode one line, raising NDJSONParseError with its position on failure."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise NDJSONParseError(line_number, exc, text) from exc


class NDJSONReader:
    """
    Reads lines from an ``asyncio.StreamReader``-like object.

    ``lines()`` yields ``(line_number, text)`` with surrounding whitespace
    (including ``\\r``) removed; iterating the reader itself yields decoded values.
    """

    def __init__(self, stream: asyncio.StreamReader, *, skip_empty_lines: bool = True) -> None:
        self.stream = stream
        self.skip_empty_lines = skip_empty_lines

    async def lines(self) -> AsyncIterator[Tuple[int, str]]:
        line_number = 0
        while True:
            try:
                raw = await self.stream.readline()
            except ValueError as exc:
                # Line longer than the stream limit; the oversized chunk is discarded.
                line_number += 1
                logger.warning("Skipping oversized line", line_number=line_number, error=str(exc))
                continue
            if not raw:
                return
            line_number += 1
            text = raw.decode("utf-8", errors="replace").strip()
            if not text:
                if self.skip_empty_lines:
                    continue
                raise NDJSONParseError(line_number, ValueError("Empty line encountered"), text)
            yield line_number, text

    async def __aiter__(self) -> AsyncIterator[Any]:
        async for line_number, text in self.lines():
            yield decode_line(text, line_number)


def encode_default(obj: Any) -> Any:
    """``json.dumps`` fallback for values that reach the wire as error content."""
    if isinstance(obj, (McpRuntimeError, NDJSONParseError)):
        return obj.to_dict()
    if isinstance(obj, BaseException):
        return {"name": type(obj).__name__, "message": str(obj)}
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    return str(obj)


class NDJSONWriter:
    """
    Writes JSON values as lines to a byte stream.

    Each value goes out in a single ``write`` call under a lock, so concurrent
    writers never interleave partial lines.
    """

    def __init__(self, stream: Any, *, default: Callable[[Any], Any] = encode_default) -> None:
        self.stream = stream
        self.default = default
        self._lock = asyncio.Lock()

    def encode(self, obj: Any) -> bytes:
        text = json.dumps(obj, default=self.default, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        return (text + "\n").encode("utf-8")

    async def write(self, obj: Any) -> None:
        line = self.encode(obj)
        async with self._lock:
            self.stream.write(line)
            drain = getattr(self.stream, "drain", None)
            if drain is not None:
                result = drain()
                if inspect.isawaitable(result):
                    await result
            flush = getattr(self.stream, "flush", None)
            if flush is not None:
                flush()

    async def close(self) -> None:
        close = getattr(self.stream, "close", None)
        if close is None:
            return
        result = close()
        if inspect.isawaitable(result):
            await result
        wait_closed = getattr(self.stream, "wait_closed", None)
        if wait_closed is not None:
            await wait_closed()
