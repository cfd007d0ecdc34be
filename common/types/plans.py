"""Planner output types."""

import uuid
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from common.models.enums import ToolCallType, ToolPriority

from .tools import ToolCall


class RecommendedTool(BaseModel):
    """A tool the planner wants to run, before it is bound to a call id."""

    name: str = Field(..., min_length=1, description="Exact name of the tool to execute")
    description: str = Field("", description="What this tool will do")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Tool arguments")
    priority: ToolPriority = Field(ToolPriority.MEDIUM, description="Execution priority")
    reason: str = Field("", description="Why this tool is needed")

    def to_tool_call(
        self, call_id: Optional[str] = None, tool_type: ToolCallType = ToolCallType.REGULAR
    ) -> ToolCall:
        """Bind this recommendation to a concrete tool call."""
        return ToolCall(
            id=call_id or f"call_{uuid.uuid4().hex[:12]}",
            name=self.name,
            description=self.description or None,
            arguments=dict(self.arguments),
            type=tool_type,
        )


class ToolRecommendation(BaseModel):
    """The planner's full output."""

    model_config = ConfigDict(populate_by_name=True)

    tools: list[RecommendedTool] = Field(default_factory=list)
    analysis: str = ""
    should_execute_all: bool = Field(False, alias="shouldExecuteAll")

    @classmethod
    def empty(cls, analysis: str) -> "ToolRecommendation":
        """A plan with nothing to execute, keeping the analysis text."""
        return cls(tools=[], analysis=analysis, should_execute_all=False)


class ExecutionGroups(BaseModel):
    """Recommended tools split by execution strategy."""

    parallel: list[RecommendedTool] = Field(default_factory=list)
    sequential: list[RecommendedTool] = Field(default_factory=list)
