"""Pytest configuration and fixtures for Toolgate tests."""

import asyncio
import json
import os
from typing import Any, Callable, Optional, Union

import pytest
from dotenv import load_dotenv
from pydantic import BaseModel

from agents.tool_approval import ToolApprovalManager
from client.base_client import Message, ModelResponse
from common.types import ToolCall, ToolDescriptor
from tools.base import BaseCoreTool
from tools.registry import ToolExecutor, ToolRegistry

# Load environment variables from .env file
load_dotenv()


@pytest.fixture
def require_anthropic_key() -> None:
    """Fixture to skip test if Anthropic API key is not available."""
    if not os.getenv("ANTHROPIC_API_KEY"):
        pytest.skip("Anthropic API key not available")


class FakeTransport:
    """Scripted planning transport.

    Returns the queued responses in order and records every call.
    """

    def __init__(self, *responses: Union[str, list[Any], Exception]):
        self.responses = list(responses)
        self.calls: list[list[Message]] = []

    async def invoke(
        self, messages: list[Message], cancel_event: Optional[asyncio.Event] = None
    ) -> ModelResponse:
        self.calls.append(messages)
        response = self.responses.pop(0) if self.responses else ""
        if isinstance(response, Exception):
            raise response
        return ModelResponse(content=response)


def plan_json(
    *tools: dict[str, Any], analysis: str = "Needs data", execute_all: bool = True
) -> str:
    """A well-formed plan as the model would return it."""
    entries = [
        {
            "name": tool["name"],
            "description": tool.get("description", f"Run {tool['name']}"),
            "arguments": tool.get("arguments", {}),
            "priority": tool.get("priority", "medium"),
            "reason": tool.get("reason", "Needed"),
        }
        for tool in tools
    ]
    return json.dumps({"analysis": analysis, "tools": entries, "shouldExecuteAll": execute_all})


class EchoInput(BaseModel):
    """Input schema for echo tools."""

    value: str = ""
    fail: bool = False


class EchoTool(BaseCoreTool):
    """Tool that echoes its input and records each call."""

    def __init__(self, name: str):
        super().__init__(name=name, description=f"Echo tool {name}", input_schema=EchoInput)
        self.calls: list[dict[str, Any]] = []

    async def _execute_impl(self, input_data: BaseModel) -> str:
        assert isinstance(input_data, EchoInput)
        self.calls.append(input_data.model_dump())
        if input_data.fail:
            raise RuntimeError("Simulated failure")
        return f"{self.name}: {input_data.value}"


@pytest.fixture
def approval_manager() -> ToolApprovalManager:
    """Fresh approval gate per test."""
    return ToolApprovalManager()


@pytest.fixture
def echo_tools() -> dict[str, EchoTool]:
    return {
        name: EchoTool(name)
        for name in ("get_pods", "list_namespaces", "apply_manifest", "delete_pod")
    }


@pytest.fixture
def registry(echo_tools: dict[str, EchoTool]) -> ToolRegistry:
    """Registry over an executor holding the echo tools."""
    executor = ToolExecutor()
    for tool in echo_tools.values():
        executor.register_tool(tool)
    return ToolRegistry(executor)


@pytest.fixture
def available_tools() -> list[ToolDescriptor]:
    return [
        ToolDescriptor(name="get_pods", description="List pods in a namespace"),
        ToolDescriptor(name="search_logs", description="Search container logs"),
        ToolDescriptor(name="apply_manifest", description="Apply a manifest"),
        ToolDescriptor(name="delete_pod", description="Delete a pod"),
    ]


@pytest.fixture
def make_tool_call() -> Callable[..., ToolCall]:
    """Factory for tool calls with predictable ids."""
    counter = {"n": 0}

    def _make(name: str, call_id: Optional[str] = None, **arguments: Any) -> ToolCall:
        counter["n"] += 1
        return ToolCall(id=call_id or f"call-{counter['n']}", name=name, arguments=arguments)

    return _make
