"""Tool and planning API models."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from common.models.enums import ToolCallType
from common.types import ExecutionGroups, ToolRecommendation


class ToolInfo(BaseModel):
    """Information about a known tool."""

    name: str
    description: str
    source: ToolCallType
    enabled: bool


class ToolsResponse(BaseModel):
    """Tools listing response."""

    tools: list[ToolInfo]
    count: int


class ToolToggleResponse(BaseModel):
    tool_name: str
    enabled: bool


class EnabledToolsRequest(BaseModel):
    """The full set of tools that should be enabled."""

    enabled_tools: list[str]


class EnabledToolsResponse(BaseModel):
    enabled_tools: list[str]


class PlanRequest(BaseModel):
    """A user message to plan tools for."""

    message: str = Field(..., min_length=1)
    history: Optional[list[dict[str, Any]]] = None


class PlanResponse(BaseModel):
    """Validated recommendation plus its execution groups."""

    recommendation: ToolRecommendation
    groups: ExecutionGroups
