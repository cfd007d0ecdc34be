"""Messages exchanged between the approval gate and the UI."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from common.types import ToolCall


class MessageType(str, Enum):
    """Types of gate messages."""

    APPROVAL_REQUEST = "approval_request"  # Gate asks the UI for a decision
    APPROVAL_RESPONSE = "approval_response"  # UI approves/denies


class Message(BaseModel):
    """Base message class for gate communication."""

    type: MessageType
    timestamp: datetime = Field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json")


class ApprovalRequestMessage(Message):
    """The approval-requested notification.

    Carries only what the UI needs; the continuation of the pending request
    stays inside the gate.
    """

    type: MessageType = MessageType.APPROVAL_REQUEST
    request_id: str
    tool_calls: list[ToolCall]


class ApprovalDecision(str, Enum):
    """Tool approval decisions."""

    APPROVED = "approved"
    DENIED = "denied"


class ApprovalResponseMessage(Message):
    """User responds to an approval request."""

    type: MessageType = MessageType.APPROVAL_RESPONSE
    request_id: str
    decision: ApprovalDecision
    approved_tool_ids: list[str] = Field(default_factory=list)
    remember_choice: bool = False


class ToolAutoApproval(BaseModel):
    """One remembered per-tool auto-approval."""

    tool_name: str
    auto_approve: bool


class AutoApprovalSettings(BaseModel):
    """Snapshot of the gate's auto-approval policy."""

    session_auto_approval: bool = False
    tool_settings: list[ToolAutoApproval] = Field(default_factory=list)


AnyMessage = Union[ApprovalRequestMessage, ApprovalResponseMessage]


def create_approval_request(
    request_id: str, tool_calls: list[ToolCall], timestamp: Optional[datetime] = None
) -> ApprovalRequestMessage:
    """Create an approval request message."""
    message = ApprovalRequestMessage(request_id=request_id, tool_calls=list(tool_calls))
    if timestamp is not None:
        message.timestamp = timestamp
    return message


def create_approval_response(
    request_id: str,
    decision: ApprovalDecision,
    approved_tool_ids: Optional[list[str]] = None,
    remember_choice: bool = False,
) -> ApprovalResponseMessage:
    """Create an approval response message."""
    return ApprovalResponseMessage(
        request_id=request_id,
        decision=decision,
        approved_tool_ids=approved_tool_ids or [],
        remember_choice=remember_choice,
    )


def message_from_dict(data: dict[str, Any]) -> Message:
    """Reconstruct a Message object from a dictionary.

    Args:
        data: Dictionary with message data including 'type' field

    Returns:
        Appropriate Message subclass instance

    Raises:
        ValueError: If message type is unknown
    """
    msg_type = data.get("type")
    if msg_type is None:
        raise ValueError("Missing 'type' field in message data")

    type_map: dict[str, type[Message]] = {
        MessageType.APPROVAL_REQUEST.value: ApprovalRequestMessage,
        MessageType.APPROVAL_RESPONSE.value: ApprovalResponseMessage,
    }

    message_class = type_map.get(msg_type)
    if not message_class:
        raise ValueError(f"Unknown message type: {msg_type}")

    # Use Pydantic validation
    return message_class(**data)
