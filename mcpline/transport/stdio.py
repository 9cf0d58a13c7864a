"""
Stdio line transport.

Reads one request envelope per line, dispatches each line in its own task and
writes one response envelope per line. Responses may leave out of arrival
order; each one is written atomically.

State machine: IDLE -> RUNNING -> STOPPED.
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
import sys
from typing import Any, Dict, Optional, Set

import structlog

from ..core.config import Settings, get_settings
from ..core.exceptions import LifecycleError, OperationKind
from ..core.logging import ensure_logging
from ..ndjson import NDJSONParseError, NDJSONReader, NDJSONWriter, decode_line
from ..protocol import CallCtx, InvokeFn
from .base import TransportState
from .envelope import (
    ErrorCode,
    ValidationError,
    best_effort_id,
    error_response,
    parse_request,
    parse_tool_params,
    success_response,
)

logger = structlog.get_logger(__name__)

# StreamReader limit for stdin; one request must fit in a single line.
READ_LIMIT = 2 ** 24
TOOL_METHOD = "tool"


class StdioTransport:
    """Line-delimited RPC server over stdin/stdout (or any injected streams)."""

    name = "stdio"

    def __init__(
        self,
        reader: Optional[asyncio.StreamReader] = None,
        writer: Optional[Any] = None,
        *,
        handle_signals: Optional[bool] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """
        Args:
            reader: StreamReader to consume (default: stdin attached on start)
            writer: byte stream with ``write`` (default: stdout's buffer)
            handle_signals: install SIGINT/SIGTERM handlers (default from settings)
            settings: settings override
        """
        self.settings = settings or get_settings()
        self.handle_signals = self.settings.handle_signals if handle_signals is None else handle_signals
        self.state = TransportState.IDLE
        self._reader = reader
        self._writer_stream = writer
        self._writer: Optional[NDJSONWriter] = None
        self._stopped = asyncio.Event()
        self._read_task: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()
        self._pipe_transport: Optional[asyncio.BaseTransport] = None
        self._installed_signals: list[int] = []

    async def start(self, invoker: InvokeFn) -> None:
        """Serve until end of input or ``stop()``."""
        if self.state is not TransportState.IDLE:
            raise LifecycleError("start()", f"transport is {self.state.value}")
        self.state = TransportState.RUNNING

        loop = asyncio.get_running_loop()
        reader = self._reader if self._reader is not None else await self._attach_stdin(loop)
        if self._writer_stream is None:
            ensure_logging(self.settings.log_level, json_output=self.settings.log_json)
        self._writer = NDJSONWriter(self._writer_stream if self._writer_stream is not None else sys.stdout.buffer)
        if self.handle_signals:
            self._install_signal_handlers(loop)

        logger.info("Stdio transport started")
        self._read_task = asyncio.create_task(self._read_loop(NDJSONReader(reader), invoker))
        stop_waiter = asyncio.create_task(self._stopped.wait())
        try:
            done, _ = await asyncio.wait({self._read_task, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)
            if self._read_task in done and not self._read_task.cancelled():
                self._read_task.result()
                if not self._stopped.is_set():
                    await self._drain_pending(stop_waiter)
        finally:
            stop_waiter.cancel()
            if not self._read_task.done():
                self._read_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._read_task
            self._remove_signal_handlers(loop)
            self._close_pipe()
            self.state = TransportState.STOPPED
            logger.info("Stdio transport stopped", in_flight=len(self._pending))

    async def stop(self) -> None:
        """Stop reading; in-flight requests keep running. Safe to call repeatedly."""
        if self._stopped.is_set():
            return
        self._request_stop()

    def _request_stop(self) -> None:
        self.state = TransportState.STOPPED
        self._stopped.set()
        if self._read_task is not None and not self._read_task.done():
            self._read_task.cancel()

    async def _drain_pending(self, stop_waiter: asyncio.Task) -> None:
        # End of input: let in-flight requests answer unless stop() comes first.
        if not self._pending:
            return
        drain = asyncio.ensure_future(asyncio.gather(*self._pending, return_exceptions=True))
        await asyncio.wait({drain, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)

    async def _read_loop(self, reader: NDJSONReader, invoker: InvokeFn) -> None:
        async for line_number, line in reader.lines():
            task = asyncio.create_task(self._handle_line(line, invoker, line_number))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _handle_line(self, line: str, invoker: InvokeFn, line_number: int) -> None:
        try:
            response = await self.handle_line(line, invoker, line_number)
        except Exception as exc:
            logger.error("Unexpected error handling line", error=str(exc), exc_info=True)
            response = error_response(None, ErrorCode.INTERNAL_ERROR, "Unexpected error", data=str(exc))
        if response is not None:
            await self._emit(response)

    async def handle_line(self, line: str, invoker: InvokeFn, line_number: int = 0) -> Optional[Dict[str, Any]]:
        """Turn one inbound line into its response envelope (None for blank lines)."""
        line = line.strip()
        if not line:
            return None

        try:
            payload = decode_line(line, line_number)
        except NDJSONParseError as exc:
            logger.warning("Rejected unparsable line", line_number=exc.line_number, error=str(exc.original_error))
            return error_response(None, ErrorCode.PARSE_ERROR)

        try:
            request = parse_request(payload)
        except ValidationError:
            logger.warning("Rejected invalid request envelope")
            return error_response(best_effort_id(payload), ErrorCode.INVALID_REQUEST)

        if request.method != TOOL_METHOD:
            logger.warning("Unknown method", method=request.method, request_id=request.id)
            return error_response(request.id, ErrorCode.METHOD_NOT_FOUND)

        try:
            params = parse_tool_params(request.params)
        except ValidationError:
            logger.warning("Rejected invalid params", request_id=request.id)
            return error_response(request.id, ErrorCode.INVALID_PARAMS)

        ctx = CallCtx(type=OperationKind.TOOL, name=params.name, input=params.input)
        try:
            result = await invoker(ctx)
        except Exception as exc:
            logger.error("Invoker raised", tool=params.name, request_id=request.id, error=str(exc))
            return error_response(request.id, ErrorCode.INTERNAL_ERROR, "Internal error", data=str(exc))

        if result.is_error:
            return error_response(
                request.id,
                ErrorCode.INTERNAL_ERROR,
                "Tool execution failed",
                data=result.content,
            )
        return success_response(request.id, result.content)

    async def _emit(self, response: Dict[str, Any]) -> None:
        try:
            await self._writer.write(response)
        except (TypeError, ValueError) as exc:
            logger.error("Response not serializable", request_id=response.get("id"), error=str(exc))
            await self._emit(
                error_response(
                    response.get("id"),
                    ErrorCode.INTERNAL_ERROR,
                    "Response serialization failed",
                    data=str(exc),
                )
            )
        except OSError as exc:
            logger.error("Failed to write response", request_id=response.get("id"), error=str(exc))

    async def _attach_stdin(self, loop: asyncio.AbstractEventLoop) -> asyncio.StreamReader:
        reader = asyncio.StreamReader(limit=READ_LIMIT)
        protocol = asyncio.StreamReaderProtocol(reader)
        self._pipe_transport, _ = await loop.connect_read_pipe(lambda: protocol, sys.stdin)
        return reader

    def _close_pipe(self) -> None:
        if self._pipe_transport is not None:
            self._pipe_transport.close()
            self._pipe_transport = None

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._request_stop)
            except (NotImplementedError, RuntimeError, ValueError):
                # Windows loops and non-main threads cannot install handlers
                continue
            self._installed_signals.append(sig)

    def _remove_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in self._installed_signals:
            loop.remove_signal_handler(sig)
        self._installed_signals.clear()


def create_stdio_transport(**kwargs: Any) -> StdioTransport:
    return StdioTransport(**kwargs)
