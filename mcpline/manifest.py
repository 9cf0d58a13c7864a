"""Discovery manifest generated from a built registry."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .registry import Registry


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ToolEntry(_WireModel):
    name: str
    title: Optional[str] = None
    description: str = ""
    input_schema: Dict[str, Any] = Field(..., alias="inputSchema")
    output_schema: Optional[Dict[str, Any]] = Field(None, alias="outputSchema")


class PromptArgument(_WireModel):
    name: str
    description: str = ""
    required: bool = False


class PromptEntry(_WireModel):
    name: str
    description: str = ""
    arguments: List[PromptArgument] = Field(default_factory=list)


class ResourceEntry(_WireModel):
    uri: str
    name: str
    title: Optional[str] = None
    description: str = ""
    mime_type: str = Field("text/plain", alias="mimeType")


class Implementation(_WireModel):
    name: str
    version: str


class Manifest(_WireModel):
    """Everything a client needs to discover the server's operations."""

    tools: List[ToolEntry] = Field(default_factory=list)
    prompts: List[PromptEntry] = Field(default_factory=list)
    resources: List[ResourceEntry] = Field(default_factory=list)
    capabilities: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    implementation: Implementation

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def _prompt_arguments(params_schema: Dict[str, Any]) -> List[PromptArgument]:
    properties = params_schema.get("properties") or {}
    required = set(params_schema.get("required") or [])
    return [
        PromptArgument(
            name=prop_name,
            description=prop_schema.get("description", "") if isinstance(prop_schema, dict) else "",
            required=prop_name in required,
        )
        for prop_name, prop_schema in properties.items()
    ]


def build_manifest(registry: Registry, *, name: str, version: str) -> Manifest:
    """Build a manifest listing every operation in registration order."""
    tools = []
    for tool_name in registry.list_tool_names():
        tool = registry.get_tool(tool_name)
        tools.append(
            ToolEntry(
                name=tool.name,
                title=tool.title,
                description=tool.description or "",
                input_schema=tool.input.json_schema(),
                output_schema=tool.output.json_schema(),
            )
        )

    prompts = []
    for prompt_name in registry.list_prompt_names():
        prompt = registry.get_prompt(prompt_name)
        arguments = _prompt_arguments(prompt.params.json_schema()) if prompt.params else []
        prompts.append(
            PromptEntry(name=prompt.name, description=prompt.description or "", arguments=arguments)
        )

    resources = []
    for resource_name in registry.list_resource_names():
        resource = registry.get_resource(resource_name)
        resources.append(
            ResourceEntry(
                uri=resource.uri,
                name=resource.name,
                title=resource.title,
                description=resource.description or "",
                mime_type=resource.mime_type,
            )
        )

    capabilities: Dict[str, Dict[str, Any]] = {}
    if tools:
        capabilities["tools"] = {}
    if prompts:
        capabilities["prompts"] = {}
    if resources:
        capabilities["resources"] = {}

    return Manifest(
        tools=tools,
        prompts=prompts,
        resources=resources,
        capabilities=capabilities,
        implementation=Implementation(name=name, version=version),
    )
