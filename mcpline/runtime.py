"""
Execution runtime.

Looks operations up in the registry, validates input against the declared
schema, runs the handler and normalizes failures into the error taxonomy:

- lookup misses        -> *NotFoundError
- schema rejections    -> InvalidInputError
- anything else raised -> ExecutionFailure
- OpaqueFailure        -> re-raised untouched
"""

from __future__ import annotations

import asyncio
import inspect
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote, urlsplit
from urllib.request import url2pathname

import httpx

from .core.config import Settings, get_settings
from .core.exceptions import (
    ExecutionFailure,
    InvalidInputError,
    OpaqueFailure,
    OperationKind,
    PromptNotFoundError,
    ResourceNotFoundError,
    ToolNotFoundError,
)
from .manifest import Manifest
from .protocol import ExecutionContext
from .registry import Registry
from .schema import is_validation_error
from .templating import render_template

SUPPORTED_SCHEMES = ("file", "http", "https")


class Runtime:
    """Validates and executes operations held by a registry."""

    def __init__(
        self,
        registry: Registry,
        execution_ctx: ExecutionContext,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.registry = registry
        self.execution_ctx = execution_ctx
        self.settings = settings or get_settings()
        self._http_client = http_client
        self._manifest: Optional[Manifest] = None

    def set_manifest(self, manifest: Manifest) -> None:
        self._manifest = manifest

    def get_manifest(self) -> Optional[Manifest]:
        return self._manifest

    async def execute_tool(self, name: str, raw_input: Any) -> Any:
        """
        Validate ``raw_input`` and run the tool handler.

        Raises:
            ToolNotFoundError: no tool registered under ``name``
            InvalidInputError: the input schema rejected ``raw_input``
            ExecutionFailure: the handler raised
        """
        log = self.execution_ctx.logger
        log.info({"tool": name}, "[runtime] Executing tool")

        tool = self.registry.get_tool(name)
        if tool is None:
            log.error({"tool": name}, "Tool not found")
            raise ToolNotFoundError(name)

        try:
            validated = tool.input.validate(raw_input)
            log.info({"tool": name}, "Input validated successfully")

            result = tool.handler(validated, self.execution_ctx)
            if inspect.isawaitable(result):
                result = await result
            log.info({"tool": name}, "Execution completed successfully")
            return result
        except OpaqueFailure:
            raise
        except Exception as exc:
            if is_validation_error(exc):
                log.error({"tool": name, "error": str(exc)}, "Invalid input")
                raise InvalidInputError(name, OperationKind.TOOL, exc) from exc
            log.error({"tool": name, "error": str(exc)}, "Execution failed")
            raise ExecutionFailure(name, OperationKind.TOOL, exc) from exc

    async def render_prompt(self, name: str, raw_params: Any) -> str:
        """Validate params (when a schema is declared) and render the template."""
        log = self.execution_ctx.logger
        log.info({"prompt": name}, "[runtime] Rendering prompt")

        prompt = self.registry.get_prompt(name)
        if prompt is None:
            log.error({"prompt": name}, "Prompt not found")
            raise PromptNotFoundError(name)

        try:
            params = raw_params
            if prompt.params is not None:
                params = prompt.params.validate(raw_params)
                log.info({"prompt": name}, "Parameters validated successfully")

            rendered = render_template(prompt.template, params)
            log.info({"prompt": name}, "Rendering completed successfully")
            return rendered
        except OpaqueFailure:
            raise
        except Exception as exc:
            if is_validation_error(exc):
                log.error({"prompt": name, "error": str(exc)}, "Invalid parameters")
                raise InvalidInputError(name, OperationKind.PROMPT, exc) from exc
            log.error({"prompt": name, "error": str(exc)}, "Rendering failed")
            raise ExecutionFailure(name, OperationKind.PROMPT, exc) from exc

    async def get_resource(self, name: str) -> str:
        """Load a resource's content from its file, http or https URI."""
        log = self.execution_ctx.logger
        log.info({"resource": name}, "[runtime] Getting resource")

        resource = self.registry.get_resource(name)
        if resource is None:
            log.error({"resource": name}, "Resource not found")
            raise ResourceNotFoundError(name)

        try:
            scheme = urlsplit(resource.uri).scheme.lower()
            if scheme not in SUPPORTED_SCHEMES:
                log.error({"resource": name, "scheme": scheme}, "Unsupported URI scheme")
                raise ExecutionFailure(
                    name,
                    OperationKind.RESOURCE,
                    ValueError(f"Unsupported URI scheme: {scheme}"),
                )

            content = await self._load(resource.uri)
            log.info({"resource": name}, "Resource loaded successfully")
            return content
        except (ExecutionFailure, OpaqueFailure):
            raise
        except Exception as exc:
            log.error({"resource": name, "error": str(exc)}, "Loading failed")
            raise ExecutionFailure(name, OperationKind.RESOURCE, exc) from exc

    async def _load(self, uri: str) -> str:
        parts = urlsplit(uri)
        match parts.scheme.lower():
            case "file":
                path = Path(url2pathname(unquote(parts.path)))
                return await asyncio.to_thread(path.read_text, encoding=self.settings.resource_encoding)
            case "http" | "https":
                return await self._fetch(uri)
            case other:
                raise ValueError(f"Unsupported URI scheme: {other}")

    async def _fetch(self, uri: str) -> str:
        if self._http_client is not None:
            response = await self._http_client.get(uri)
        else:
            async with httpx.AsyncClient(
                timeout=self.settings.resource_http_timeout,
                follow_redirects=True,
            ) as client:
                response = await client.get(uri)

        if not response.is_success:
            raise httpx.HTTPStatusError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                request=response.request,
                response=response,
            )
        return response.text
