"""Approval gate API routes."""

import logging

from fastapi import APIRouter, HTTPException, Request

from agents.tool_approval import ToolApprovalManager
from common.messages import ApprovalDecision, AutoApprovalSettings, create_approval_response

from ..models.approvals import (
    ApprovalDecisionResponse,
    ApproveToolsRequest,
    PendingApprovalResponse,
)

logger = logging.getLogger(__name__)

approvals_router = APIRouter()


def get_approval_manager(request: Request) -> ToolApprovalManager:
    """Get the approval gate from app state."""
    approval_manager = getattr(request.app.state, "approval_manager", None)
    if approval_manager is None:
        raise HTTPException(status_code=503, detail="Approval gate not initialized")
    return approval_manager  # type: ignore[no-any-return]


@approvals_router.get("/approvals/pending", response_model=PendingApprovalResponse)
async def get_pending_approval(request: Request) -> PendingApprovalResponse:
    """Get the approval request currently awaiting a decision."""
    pending = get_approval_manager(request).get_pending_request()
    return PendingApprovalResponse(pending=pending.to_message() if pending else None)


@approvals_router.post(
    "/approvals/{request_id}/approve", response_model=ApprovalDecisionResponse
)
async def approve_tools(
    request: Request, request_id: str, body: ApproveToolsRequest
) -> ApprovalDecisionResponse:
    """Approve tools of the pending request."""
    logger.info(
        f"🔧 Approval for {request_id}: {body.approved_tool_ids} "
        f"(remember={body.remember_choice})"
    )
    response = create_approval_response(
        request_id,
        ApprovalDecision.APPROVED,
        approved_tool_ids=body.approved_tool_ids,
        remember_choice=body.remember_choice,
    )

    if not get_approval_manager(request).handle_response(response):
        raise HTTPException(status_code=404, detail=f"No pending approval request {request_id}")

    return ApprovalDecisionResponse(
        request_id=request_id, decision=ApprovalDecision.APPROVED, applied=True
    )


@approvals_router.post("/approvals/{request_id}/deny", response_model=ApprovalDecisionResponse)
async def deny_tools(request: Request, request_id: str) -> ApprovalDecisionResponse:
    """Deny the pending request."""
    logger.info(f"🔧 Denial for {request_id}")
    response = create_approval_response(request_id, ApprovalDecision.DENIED)

    if not get_approval_manager(request).handle_response(response):
        raise HTTPException(status_code=404, detail=f"No pending approval request {request_id}")

    return ApprovalDecisionResponse(
        request_id=request_id, decision=ApprovalDecision.DENIED, applied=True
    )


@approvals_router.get("/approvals/settings", response_model=AutoApprovalSettings)
async def get_auto_approval_settings(request: Request) -> AutoApprovalSettings:
    """Get the session and per-tool auto-approval settings."""
    return get_approval_manager(request).get_auto_approval_settings()


@approvals_router.delete("/approvals/settings", response_model=AutoApprovalSettings)
async def clear_auto_approval_settings(request: Request) -> AutoApprovalSettings:
    """Forget all remembered approvals."""
    approval_manager = get_approval_manager(request)
    approval_manager.clear_session()
    return approval_manager.get_auto_approval_settings()
