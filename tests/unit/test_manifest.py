"""
Tests for manifest generation.
"""

import pytest
from pydantic import BaseModel, Field

from mcpline.manifest import build_manifest
from mcpline.protocol import PromptSpec, ResourceSpec, ToolSpec
from mcpline.schema import schema

pytestmark = pytest.mark.unit


class AddInput(BaseModel):
    a: int
    b: int


class GreetParams(BaseModel):
    name: str = Field(..., description="Who to greet")
    mood: str = "cheerful"


class TestBuildManifest:
    """Test build_manifest()."""

    def test_empty_registry(self, registry):
        manifest = build_manifest(registry, name="svc", version="0.1.0")

        assert manifest.to_wire() == {
            "tools": [],
            "prompts": [],
            "resources": [],
            "capabilities": {},
            "implementation": {"name": "svc", "version": "0.1.0"},
        }

    def test_lists_every_operation(self, registry):
        registry.add_tool(
            ToolSpec(
                name="add",
                title="Add",
                description="Adds two numbers",
                input=schema(AddInput),
                output=schema(int),
                handler=lambda data, ctx: data.a + data.b,
            )
        )
        registry.add_prompt(
            PromptSpec(name="greet", template="Hi {{name}}", params=schema(GreetParams), description="Greeting")
        )
        registry.add_resource(
            ResourceSpec(name="readme", uri="https://example.com/readme.md", mime_type="text/markdown")
        )

        wire = build_manifest(registry, name="svc", version="1.0.0").to_wire()

        tool = wire["tools"][0]
        assert tool["name"] == "add"
        assert tool["title"] == "Add"
        assert tool["inputSchema"]["required"] == ["a", "b"]
        assert tool["outputSchema"] == {"type": "integer"}

        prompt = wire["prompts"][0]
        assert prompt["description"] == "Greeting"
        assert prompt["arguments"] == [
            {"name": "name", "description": "Who to greet", "required": True},
            {"name": "mood", "description": "", "required": False},
        ]

        resource = wire["resources"][0]
        assert resource["uri"] == "https://example.com/readme.md"
        assert resource["mimeType"] == "text/markdown"
        assert "title" not in resource

        assert wire["capabilities"] == {"tools": {}, "prompts": {}, "resources": {}}

    def test_prompt_without_params(self, registry):
        registry.add_prompt(PromptSpec(name="plain", template="static"))

        manifest = build_manifest(registry, name="svc", version="1.0.0")

        assert manifest.prompts[0].arguments == []
        assert manifest.capabilities == {"prompts": {}}
