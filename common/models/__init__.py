"""Shared enumerations for Toolgate."""

from .enums import (
    PLANNING_HISTORY_ROLES,
    PRIORITY_RANK,
    ApprovalGateState,
    HistoryRole,
    PlanFailure,
    ToolCallType,
    ToolPriority,
)

__all__ = [
    "ApprovalGateState",
    "HistoryRole",
    "PlanFailure",
    "ToolCallType",
    "ToolPriority",
    "PLANNING_HISTORY_ROLES",
    "PRIORITY_RANK",
]
