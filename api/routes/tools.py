"""Tools and planning API routes."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request

from agents.tool_orchestrator import ToolOrchestrator
from client.base_client import ChatTransport
from tools.registry import ToolRegistry

from ..models.tools import (
    EnabledToolsRequest,
    EnabledToolsResponse,
    PlanRequest,
    PlanResponse,
    ToolInfo,
    ToolsResponse,
    ToolToggleResponse,
)

logger = logging.getLogger(__name__)

tools_router = APIRouter()


def _get_state(request: Request, name: str, label: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(status_code=503, detail=f"{label} not initialized")
    return value


def get_registry(request: Request) -> ToolRegistry:
    """Get the tool registry from app state."""
    return _get_state(request, "registry", "Tool registry")  # type: ignore[no-any-return]


@tools_router.get("/tools", response_model=ToolsResponse)
async def get_tools(request: Request) -> ToolsResponse:
    """Get every known tool with its enabled flag."""
    registry = get_registry(request)
    tools = [
        ToolInfo(
            name=tool.name,
            description=tool.description,
            source=tool.source,
            enabled=registry.is_enabled(tool.name),
        )
        for tool in registry.get_all_tools()
    ]
    logger.info(f"🔧 Returning {len(tools)} tools")
    return ToolsResponse(tools=tools, count=len(tools))


@tools_router.post("/tools/{tool_name}/toggle", response_model=ToolToggleResponse)
async def toggle_tool(request: Request, tool_name: str) -> ToolToggleResponse:
    """Flip a tool between enabled and disabled."""
    registry = get_registry(request)
    if registry.get_tool_source(tool_name) is None:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {tool_name}")

    return ToolToggleResponse(tool_name=tool_name, enabled=registry.toggle_tool(tool_name))


@tools_router.put("/tools/enabled", response_model=EnabledToolsResponse)
async def set_enabled_tools(request: Request, body: EnabledToolsRequest) -> EnabledToolsResponse:
    """Enable exactly the listed tools and disable the rest."""
    registry = get_registry(request)
    unknown = [name for name in body.enabled_tools if registry.get_tool_source(name) is None]
    if unknown:
        raise HTTPException(status_code=404, detail=f"Unknown tools: {', '.join(unknown)}")

    return EnabledToolsResponse(enabled_tools=registry.set_enabled_tools(body.enabled_tools))


@tools_router.post("/plan", response_model=PlanResponse)
async def plan_tools(request: Request, plan_request: PlanRequest) -> PlanResponse:
    """Recommend tools for a message without executing them."""
    registry = get_registry(request)
    orchestrator: ToolOrchestrator = _get_state(request, "orchestrator", "Tool orchestrator")
    transport: ChatTransport = _get_state(request, "transport", "Planning transport")

    recommendation = await orchestrator.analyze_and_recommend_tools(
        plan_request.message,
        registry.snapshot(),
        transport,
        conversation_history=plan_request.history,
    )

    groups = orchestrator.group_tools_by_execution_strategy(recommendation.tools)
    return PlanResponse(recommendation=recommendation, groups=groups)
