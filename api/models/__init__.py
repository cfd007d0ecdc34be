"""API models for the Toolgate FastAPI server."""

from .approvals import ApprovalDecisionResponse, ApproveToolsRequest, PendingApprovalResponse
from .common import ErrorResponse
from .tools import (
    EnabledToolsRequest,
    EnabledToolsResponse,
    PlanRequest,
    PlanResponse,
    ToolInfo,
    ToolsResponse,
    ToolToggleResponse,
)

__all__ = [
    "ApprovalDecisionResponse",
    "ApproveToolsRequest",
    "PendingApprovalResponse",
    "ErrorResponse",
    "EnabledToolsRequest",
    "EnabledToolsResponse",
    "PlanRequest",
    "PlanResponse",
    "ToolInfo",
    "ToolsResponse",
    "ToolToggleResponse",
]
