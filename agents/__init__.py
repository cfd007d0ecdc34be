"""Toolgate Agents - tool planning, approval and execution."""

from agents.plan_validator import PlanValidationResult, validate_plan_text
from agents.tool_approval import ApprovalMailbox, PendingApprovalRequest, ToolApprovalManager
from agents.tool_orchestrator import ToolOrchestrator, group_tools_by_execution_strategy
from agents.tool_pipeline import PipelineResult, ToolPipeline

__all__ = [
    "ToolOrchestrator",
    "ToolApprovalManager",
    "ToolPipeline",
    "ApprovalMailbox",
    "PendingApprovalRequest",
    "PipelineResult",
    "PlanValidationResult",
    "group_tools_by_execution_strategy",
    "validate_plan_text",
]
