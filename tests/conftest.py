"""
Pytest configuration and fixtures.

Provides:
- Settings with signal handling disabled
- Registry / runtime fixtures with a mock-backed handler logger
- In-memory streams for driving the stdio transport
"""

import asyncio
from typing import Any, Iterable, List
from unittest.mock import Mock

import json
import pytest

from mcpline.core.config import Settings
from mcpline.core.logging import StructuredLogger
from mcpline.protocol import ExecutionContext
from mcpline.registry import Registry
from mcpline.runtime import Runtime


# ============================================================================
# Core fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Settings that never touch process signals."""
    return Settings(handle_signals=False, server_name="test-server", server_version="1.2.3")


@pytest.fixture
def handler_logger():
    """Mock standing in for the structlog logger behind StructuredLogger."""
    return Mock()


@pytest.fixture
def execution_ctx(handler_logger):
    return ExecutionContext(logger=StructuredLogger(handler_logger), version="1.2.3")


@pytest.fixture
def registry():
    """Fresh registry for each test."""
    return Registry()


@pytest.fixture
def runtime(registry, execution_ctx, settings):
    return Runtime(registry, execution_ctx, settings=settings)


# ============================================================================
# Stream helpers
# ============================================================================

class CollectingWriter:
    """Byte sink recording each ``write`` call separately."""

    def __init__(self) -> None:
        self.writes: List[bytes] = []

    def write(self, data: bytes) -> None:
        self.writes.append(data)

    @property
    def lines(self) -> List[str]:
        return [chunk.decode("utf-8") for chunk in self.writes]

    def messages(self) -> List[Any]:
        return [json.loads(line) for line in self.lines]


def make_reader(lines: Iterable[str], *, eof: bool = True) -> asyncio.StreamReader:
    """Build a StreamReader pre-fed with ``lines``; call from a running loop."""
    reader = asyncio.StreamReader()
    for line in lines:
        reader.feed_data((line + "\n").encode("utf-8"))
    if eof:
        reader.feed_eof()
    return reader


@pytest.fixture
def writer():
    return CollectingWriter()


@pytest.fixture
def reader_factory():
    """``make_reader`` as a fixture; only call it inside a running event loop."""
    return make_reader
