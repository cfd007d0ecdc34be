"""Common types module."""

from .plans import ExecutionGroups, RecommendedTool, ToolRecommendation
from .tools import (
    TOOL_ERROR_MESSAGES,
    ToolCall,
    ToolCallResult,
    ToolDescriptor,
    ToolErrorType,
    ToolExecution,
)

__all__ = [
    # Tool types
    "ToolCall",
    "ToolCallResult",
    "ToolDescriptor",
    "ToolExecution",
    "ToolErrorType",
    "TOOL_ERROR_MESSAGES",
    # Planner types
    "RecommendedTool",
    "ToolRecommendation",
    "ExecutionGroups",
]
