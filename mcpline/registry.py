"""Operation registry: tools, prompts and resources keyed by name."""

from __future__ import annotations

from typing import Dict, List, Optional

import structlog

from .core.exceptions import NameConflictError, OperationKind
from .protocol import PromptSpec, ResourceSpec, ToolSpec

logger = structlog.get_logger(__name__)


class Registry:
    """
    In-memory registry of operation specs.

    Names are unique within a kind only; a tool and a prompt may share one.
    Populated while the server is built and read-only afterwards.
    """

    def __init__(self) -> None:
        self._tools: Dict[str, ToolSpec] = {}
        self._prompts: Dict[str, PromptSpec] = {}
        self._resources: Dict[str, ResourceSpec] = {}

    def add_tool(self, tool: ToolSpec) -> None:
        """Register a tool or raise NameConflictError."""
        self._add(self._tools, tool, OperationKind.TOOL)

    def add_prompt(self, prompt: PromptSpec) -> None:
        """Register a prompt or raise NameConflictError."""
        self._add(self._prompts, prompt, OperationKind.PROMPT)

    def add_resource(self, resource: ResourceSpec) -> None:
        """Register a resource or raise NameConflictError."""
        self._add(self._resources, resource, OperationKind.RESOURCE)

    def get_tool(self, name: str) -> Optional[ToolSpec]:
        return self._tools.get(name)

    def get_prompt(self, name: str) -> Optional[PromptSpec]:
        return self._prompts.get(name)

    def get_resource(self, name: str) -> Optional[ResourceSpec]:
        return self._resources.get(name)

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def has_prompt(self, name: str) -> bool:
        return name in self._prompts

    def has_resource(self, name: str) -> bool:
        return name in self._resources

    def list_tool_names(self) -> List[str]:
        return list(self._tools)

    def list_prompt_names(self) -> List[str]:
        return list(self._prompts)

    def list_resource_names(self) -> List[str]:
        return list(self._resources)

    def clear(self) -> None:
        """Drop every registered operation."""
        self._tools, self._prompts, self._resources = {}, {}, {}

    @staticmethod
    def _add(bucket: Dict, spec, kind: OperationKind) -> None:
        if spec.name in bucket:
            raise NameConflictError(spec.name, kind)
        bucket[spec.name] = spec
        logger.info("Registered operation", kind=kind.value, name=spec.name)

    def __repr__(self) -> str:
        return (
            f"Registry(tools={len(self._tools)}, "
            f"prompts={len(self._prompts)}, "
            f"resources={len(self._resources)})"
        )
