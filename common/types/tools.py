"""Tool-related types used throughout the system."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from common.models.enums import ToolCallType


class ToolErrorType(str, Enum):
    """Types of errors that can occur around tool execution."""

    EXECUTION_ERROR = "execution_error"
    NOT_FOUND = "not_found"
    USER_REJECTED = "user_rejected"
    SUPERSEDED = "superseded"
    INVALID_ARGS = "invalid_args"


TOOL_ERROR_MESSAGES = {
    ToolErrorType.EXECUTION_ERROR: "Tool execution failed: {error}",
    ToolErrorType.NOT_FOUND: (
        "Tool '{tool_name}' not found. "
        "Available tools: {available_tools}. "
        "Cannot execute tool '{tool_name}'."
    ),
    ToolErrorType.USER_REJECTED: "The execution of {tool_name} was denied by the user.",
    ToolErrorType.SUPERSEDED: (
        "Approval for {tool_name} was superseded by a newer tool approval request."
    ),
    ToolErrorType.INVALID_ARGS: "Invalid arguments for tool '{tool_name}': {validation_error}",
}


class ToolDescriptor(BaseModel):
    """A tool as advertised to the planner: name plus description."""

    name: str = Field(..., description="Exact tool name")
    description: str = Field("", description="What the tool does")
    source: ToolCallType = Field(
        ToolCallType.REGULAR, description="Whether the tool is built-in or MCP-hosted"
    )


class ToolCall(BaseModel):
    """A concrete, arguments-bound tool invocation candidate.

    Created by the planner or by a direct single-tool caller, consumed once by
    the approval gate and discarded after execution.
    """

    id: str = Field(..., description="Unique identifier for this tool call")
    name: str = Field(..., description="Name of the tool to execute")
    description: Optional[str] = Field(None, description="Human-readable description")

    # Arguments - JSON-compatible dict
    arguments: dict[str, Any] = Field(
        default_factory=dict,
        description="Arguments to pass to the tool as a JSON-compatible dictionary",
    )
    type: ToolCallType = Field(
        ToolCallType.REGULAR, description="Provenance of the tool, for UI grouping only"
    )


class ToolCallResult(BaseModel):
    """Standardized result from tool call execution."""

    # Identification fields
    tool_name: str = Field(..., description="Name of the tool that was executed")
    tool_call_id: Optional[str] = Field(
        None, description="ID from the original tool call for correlation"
    )

    # Result content
    content: str = Field(..., description="The actual result content")

    # Status
    is_error: bool = Field(False, description="Whether this result represents an error")

    # Error details (only populated if is_error=True)
    error: Optional[str] = Field(None, description="Error message if execution failed")
    error_type: Optional[ToolErrorType] = Field(
        None, description="Type of error if execution failed"
    )

    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Additional metadata about the execution"
    )

    @classmethod
    def failure(
        cls, tool_call: ToolCall, error_type: ToolErrorType, error: str, **metadata: Any
    ) -> "ToolCallResult":
        """Build an error result for a tool call."""
        return cls(
            tool_name=tool_call.name,
            tool_call_id=tool_call.id,
            content=error,
            is_error=True,
            error=error,
            error_type=error_type,
            metadata=metadata,
        )


class ToolExecution(BaseModel):
    """Record of a tool execution."""

    tool_call: ToolCall
    result: ToolCallResult
