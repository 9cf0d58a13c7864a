"""Transport contract consumed by the server builder."""

from enum import Enum
from typing import Protocol, runtime_checkable

from ..protocol import InvokeFn


class TransportState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@runtime_checkable
class Transport(Protocol):
    name: str

    async def start(self, invoker: InvokeFn) -> None:
        """Serve requests until input ends or ``stop()`` is called."""
        ...

    async def stop(self) -> None:
        ...
