"""
Server builder.

Accumulates operations, middlewares, plugins and a transport, then turns them
into an immutable runtime bundle:

    server = (
        create_server()
        .tool("add", input=AddInput, output=int, handler=add)
        .prompt("greet", "Hello {{name}}!")
        .use(telemetry_middleware)
    )
    await server.listen()
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

import structlog

from .core.config import Settings, get_settings
from .core.exceptions import LifecycleError, OperationKind
from .core.logging import StructuredLogger, ensure_logging, setup_logging
from .manifest import build_manifest
from .middleware import compose, error_wrapper_middleware
from .protocol import (
    CallCtx,
    CallResult,
    ExecutionContext,
    InvokeFn,
    Middleware,
    PromptSpec,
    ResourceSpec,
    ToolSpec,
)
from .registry import Registry
from .runtime import Runtime
from .schema import schema
from .transport import StdioTransport, Transport

logger = structlog.get_logger(__name__)

Plugin = Callable[["ServerBuilder", Any], None]


@dataclass(frozen=True)
class RuntimeBundle:
    """Result of ``ServerBuilder.build()``."""
    registry: Registry
    runtime: Runtime
    invoke: InvokeFn


class ServerBuilder:
    """Collects declarations until ``build()`` freezes them into a RuntimeBundle."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self._pending_tools: List[ToolSpec] = []
        self._pending_prompts: List[PromptSpec] = []
        self._pending_resources: List[ResourceSpec] = []
        self._pending_middlewares: List[Middleware] = []
        self._pending_plugins: List[Tuple[Plugin, Any]] = []
        self._transport: Optional[Transport] = None
        self._bundle: Optional[RuntimeBundle] = None
        self._listening = False

    def tool(
        self,
        name: str,
        *,
        input: Any,
        output: Any,
        handler: Callable[..., Any],
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> "ServerBuilder":
        """Declare a tool; ``input``/``output`` accept anything ``schema()`` does."""
        self._pending_tools.append(
            ToolSpec(
                name=name,
                title=title,
                description=description,
                input=schema(input),
                output=schema(output),
                handler=handler,
            )
        )
        return self

    def prompt(
        self,
        name: str,
        template: str,
        *,
        params: Any = None,
        description: Optional[str] = None,
    ) -> "ServerBuilder":
        self._pending_prompts.append(
            PromptSpec(
                name=name,
                template=template,
                params=schema(params) if params is not None else None,
                description=description,
            )
        )
        return self

    def resource(
        self,
        name: str,
        uri: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        mime_type: str = "text/plain",
    ) -> "ServerBuilder":
        self._pending_resources.append(
            ResourceSpec(name=name, uri=uri, title=title, description=description, mime_type=mime_type)
        )
        return self

    def use(self, middleware: Middleware) -> "ServerBuilder":
        if not callable(middleware):
            raise TypeError("Middleware must be callable")
        self._pending_middlewares.append(middleware)
        return self

    def register(self, plugin: Plugin, options: Any = None) -> "ServerBuilder":
        """Queue a plugin; it runs against the builder during ``build()``."""
        self._pending_plugins.append((plugin, options))
        return self

    def transport(self, transport: Transport) -> "ServerBuilder":
        if self._transport is not None:
            raise LifecycleError("transport()", "transport can only be set once")
        self._transport = transport
        return self

    def build(self) -> RuntimeBundle:
        """
        Run plugins, populate the registry and compose the invocation chain.

        Raises:
            LifecycleError: the server was already built
            NameConflictError: two operations of one kind share a name
        """
        if self._bundle is not None:
            raise LifecycleError("build()", "server has already been built")
        ensure_logging(self.settings.log_level, json_output=self.settings.log_json)

        self._run_plugins()
        middlewares = [*self._pending_middlewares, error_wrapper_middleware]

        registry = Registry()
        for tool in self._pending_tools:
            registry.add_tool(tool)
        for prompt in self._pending_prompts:
            registry.add_prompt(prompt)
        for resource in self._pending_resources:
            registry.add_resource(resource)

        execution_ctx = ExecutionContext(
            logger=StructuredLogger(),
            version=self.settings.server_version,
        )
        runtime = Runtime(registry, execution_ctx, settings=self.settings)
        runtime.set_manifest(
            build_manifest(registry, name=self.settings.server_name, version=self.settings.server_version)
        )

        async def core_invoke(ctx: CallCtx) -> CallResult:
            match ctx.type:
                case OperationKind.TOOL:
                    return CallResult(content=await runtime.execute_tool(ctx.name, ctx.input))
                case OperationKind.PROMPT:
                    return CallResult(content=await runtime.render_prompt(ctx.name, ctx.input))
                case OperationKind.RESOURCE:
                    return CallResult(content=await runtime.get_resource(ctx.name))
                case _:
                    raise ValueError(f"Unknown operation type: {ctx.type}")

        self._bundle = RuntimeBundle(
            registry=registry,
            runtime=runtime,
            invoke=compose(middlewares, core_invoke),
        )
        logger.info(
            "Server built",
            tools=len(self._pending_tools),
            prompts=len(self._pending_prompts),
            resources=len(self._pending_resources),
            middlewares=len(middlewares),
        )
        return self._bundle

    async def listen(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Build if needed and serve on the configured (or default stdio) transport."""
        if self._listening:
            raise LifecycleError("listen()", "method can only be called once")
        self._listening = True

        bundle = self._bundle if self._bundle is not None else self.build()
        transport = self._transport if self._transport is not None else StdioTransport(settings=self.settings)

        watcher: Optional[asyncio.Task] = None
        if stop_event is not None:
            async def _stop_on_event() -> None:
                await stop_event.wait()
                await transport.stop()

            watcher = asyncio.create_task(_stop_on_event())

        try:
            await transport.start(bundle.invoke)
        finally:
            if watcher is not None:
                watcher.cancel()

    def run(self) -> None:
        """Configure logging from settings and serve until stdin closes."""
        setup_logging(self.settings.log_level, json_output=self.settings.log_json)
        asyncio.run(self.listen())

    def _run_plugins(self) -> None:
        protected = _PluginBuilder(self)
        index = 0
        # Plugins may register further plugins; those run in the same pass.
        while index < len(self._pending_plugins):
            plugin, options = self._pending_plugins[index]
            index += 1
            plugin(protected, options)

    def __repr__(self) -> str:
        return (
            f"ServerBuilder(tools={len(self._pending_tools)}, "
            f"prompts={len(self._pending_prompts)}, "
            f"resources={len(self._pending_resources)}, "
            f"middlewares={len(self._pending_middlewares)})"
        )


class _PluginBuilder:
    """Builder view handed to plugins; ``build``/``listen`` are off limits."""

    def __init__(self, builder: ServerBuilder) -> None:
        self._builder = builder

    def tool(self, name: str, **definition: Any) -> "_PluginBuilder":
        self._builder.tool(name, **definition)
        return self

    def prompt(self, name: str, template: str, **metadata: Any) -> "_PluginBuilder":
        self._builder.prompt(name, template, **metadata)
        return self

    def resource(self, name: str, uri: str, **metadata: Any) -> "_PluginBuilder":
        self._builder.resource(name, uri, **metadata)
        return self

    def use(self, middleware: Middleware) -> "_PluginBuilder":
        self._builder.use(middleware)
        return self

    def register(self, plugin: Plugin, options: Any = None) -> "_PluginBuilder":
        self._builder.register(plugin, options)
        return self

    def transport(self, transport: Transport) -> "_PluginBuilder":
        self._builder.transport(transport)
        return self

    def build(self) -> RuntimeBundle:
        raise LifecycleError("build()", "plugins cannot call build() during execution")

    def listen(self, stop_event: Optional[asyncio.Event] = None) -> None:
        raise LifecycleError("listen()", "plugins cannot call listen() during execution")


def create_server(settings: Optional[Settings] = None) -> ServerBuilder:
    return ServerBuilder(settings)
