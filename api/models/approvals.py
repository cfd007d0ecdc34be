"""Approval-related API models."""

from typing import Optional

from pydantic import BaseModel, Field

from common.messages import ApprovalDecision, ApprovalRequestMessage


class PendingApprovalResponse(BaseModel):
    """The request currently awaiting a decision, if any."""

    pending: Optional[ApprovalRequestMessage] = None


class ApproveToolsRequest(BaseModel):
    """User approval of some or all tools of a request."""

    approved_tool_ids: list[str] = Field(default_factory=list)
    remember_choice: bool = False


class ApprovalDecisionResponse(BaseModel):
    """Outcome of an approve/deny call."""

    request_id: str
    decision: ApprovalDecision
    applied: bool
