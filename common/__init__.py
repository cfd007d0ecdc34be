"""Common shared modules across the Toolgate system."""

from .errors import (
    ApprovalError,
    PlanningCancelledError,
    RequestSupersededError,
    ToolgateError,
    UserDeniedError,
)
from .messages import (
    AnyMessage,
    ApprovalDecision,
    ApprovalRequestMessage,
    ApprovalResponseMessage,
    AutoApprovalSettings,
    Message,
    MessageType,
    ToolAutoApproval,
    create_approval_request,
    create_approval_response,
    message_from_dict,
)
from .types import (
    ExecutionGroups,
    RecommendedTool,
    ToolCall,
    ToolCallResult,
    ToolDescriptor,
    ToolErrorType,
    ToolExecution,
    ToolRecommendation,
)

__all__ = [
    # Errors
    "ToolgateError",
    "ApprovalError",
    "RequestSupersededError",
    "UserDeniedError",
    "PlanningCancelledError",
    # Messages
    "MessageType",
    "Message",
    "AnyMessage",
    "ApprovalRequestMessage",
    "ApprovalResponseMessage",
    "ApprovalDecision",
    "AutoApprovalSettings",
    "ToolAutoApproval",
    "create_approval_request",
    "create_approval_response",
    "message_from_dict",
    # Data classes
    "ToolCall",
    "ToolCallResult",
    "ToolDescriptor",
    "ToolErrorType",
    "ToolExecution",
    "RecommendedTool",
    "ToolRecommendation",
    "ExecutionGroups",
]
