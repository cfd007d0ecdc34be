"""Enumerations used across the Toolgate system."""

from enum import Enum


class ToolPriority(str, Enum):
    """Execution priority of a recommended tool."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank, lower runs first."""
        return PRIORITY_RANK[self]


PRIORITY_RANK = {ToolPriority.HIGH: 0, ToolPriority.MEDIUM: 1, ToolPriority.LOW: 2}


class ToolCallType(str, Enum):
    """Where a tool comes from. Used for UI grouping only."""

    MCP = "mcp"  # Hosted by an external MCP server
    REGULAR = "regular"  # Built-in, in-process tool


class ApprovalGateState(str, Enum):
    """States of the approval gate."""

    IDLE = "idle"
    AWAITING_DECISION = "awaiting_decision"


class PlanFailure(str, Enum):
    """Ways a planning response can fail to produce a usable plan."""

    EXTRACTION = "extraction"  # No JSON object in the model output
    PARSE = "parse"  # JSON object found but malformed
    SCHEMA = "schema"  # JSON parses but does not match the recommendation schema


class HistoryRole(str, Enum):
    """Roles of conversation history entries."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


# Roles replayed to the planning model
PLANNING_HISTORY_ROLES = frozenset({HistoryRole.SYSTEM, HistoryRole.USER, HistoryRole.ASSISTANT})
