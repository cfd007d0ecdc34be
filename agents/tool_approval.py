"""Single-flight human approval gate for tool execution.

At most one approval request is outstanding at a time. A new request that
needs a human decision supersedes the previous one, whose caller is rejected
immediately with RequestSupersededError. Remembered choices turn into
auto-approval, either for whole tool names or for the rest of the session.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from common.errors import ApprovalError, RequestSupersededError, UserDeniedError
from common.messages import (
    ApprovalDecision,
    ApprovalRequestMessage,
    ApprovalResponseMessage,
    AutoApprovalSettings,
    ToolAutoApproval,
    create_approval_request,
)
from common.models.enums import ApprovalGateState
from common.types import ToolCall

logger = logging.getLogger(__name__)

ApprovalListener = Callable[[ApprovalRequestMessage], None]


def new_request_id() -> str:
    """Timestamped, randomly suffixed approval request id."""
    return f"tool-approval-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


@dataclass
class PendingApprovalRequest:
    """The one outstanding approval request."""

    request_id: str
    tool_calls: list[ToolCall]  # Calls that still need a decision
    future: "asyncio.Future[list[str]]"
    auto_approved_ids: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def tool_ids(self) -> list[str]:
        return [tool_call.id for tool_call in self.tool_calls]

    def to_message(self) -> ApprovalRequestMessage:
        """The UI-facing view of this request, without its continuation."""
        return create_approval_request(self.request_id, self.tool_calls, timestamp=self.created_at)


class ApprovalMailbox:
    """Single-slot channel carrying the pending approval request to the UI.

    The slot mirrors the gate: it holds the current request's message or
    nothing. Posting replaces whatever is there.
    """

    def __init__(self) -> None:
        self._message: Optional[ApprovalRequestMessage] = None
        self._available = asyncio.Event()

    def post(self, message: ApprovalRequestMessage) -> None:
        self._message = message
        self._available.set()

    def withdraw(self, request_id: str) -> None:
        """Empty the slot if it still holds ``request_id``."""
        if self._message is not None and self._message.request_id == request_id:
            self._message = None
            self._available.clear()

    def peek(self) -> Optional[ApprovalRequestMessage]:
        return self._message

    async def wait_for_request(self) -> ApprovalRequestMessage:
        """Wait until a request is pending and return it."""
        while True:
            await self._available.wait()
            if self._message is not None:
                return self._message
            # Withdrawn between wake-up and read
            self._available.clear()


class ToolApprovalManager:
    """Gate between planned tool calls and their execution.

    Construct one per session and share it between the code that runs tools
    and the UI layer that answers approval requests.

    State machine:
        IDLE --request needing approval--> AWAITING_DECISION
        AWAITING_DECISION --new request--> AWAITING_DECISION (old one superseded)
        AWAITING_DECISION --approve/deny with matching id--> IDLE
    """

    def __init__(self, mailbox: Optional[ApprovalMailbox] = None) -> None:
        self.mailbox = mailbox or ApprovalMailbox()
        self._pending: Optional[PendingApprovalRequest] = None
        self._auto_approve_settings: dict[str, bool] = {}
        self._session_auto_approval = False
        self._listeners: list[ApprovalListener] = []

    @property
    def state(self) -> ApprovalGateState:
        if self._pending is None:
            return ApprovalGateState.IDLE
        return ApprovalGateState.AWAITING_DECISION

    def add_listener(self, listener: ApprovalListener) -> None:
        """Be told about every new approval request."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ApprovalListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def request_approval(self, tool_calls: list[ToolCall]) -> "asyncio.Future[list[str]]":
        """Ask for approval of tool calls that are about to execute.

        All bookkeeping happens before this returns, so the order of calls
        decides which request supersedes which. Await the returned future for
        the approved call ids.

        Returns:
            Future resolving to the approved ids, or failing with
            UserDeniedError / RequestSupersededError
        """
        loop = asyncio.get_running_loop()
        result: asyncio.Future[list[str]] = loop.create_future()

        if self._session_auto_approval:
            logger.info("Auto-approving tools due to session setting")
            result.set_result([tool_call.id for tool_call in tool_calls])
            return result

        auto_approved_ids: list[str] = []
        needs_approval: list[ToolCall] = []
        for tool_call in tool_calls:
            if self._auto_approve_settings.get(tool_call.name):
                auto_approved_ids.append(tool_call.id)
            else:
                needs_approval.append(tool_call)

        if not needs_approval:
            logger.info(f"All tools auto-approved: {auto_approved_ids}")
            result.set_result(auto_approved_ids)
            return result

        if self._pending is not None:
            superseded = self._pending
            logger.warning(f"Approval request {superseded.request_id} superseded")
            self._clear_pending(superseded)
            self._settle(superseded, error=RequestSupersededError(superseded.request_id))

        pending = PendingApprovalRequest(
            request_id=new_request_id(),
            tool_calls=needs_approval,
            future=result,
            auto_approved_ids=auto_approved_ids,
        )
        self._pending = pending
        result.add_done_callback(lambda future: self._on_caller_done(pending, future))

        message = pending.to_message()
        self.mailbox.post(message)
        self._notify_listeners(message)
        logger.info(
            f"Approval requested ({pending.request_id}) for "
            f"{[tool_call.name for tool_call in needs_approval]}"
        )
        return result

    def approve_tools(
        self, request_id: str, approved_tool_ids: list[str], remember_choice: bool = False
    ) -> bool:
        """Approve tools of the pending request.

        With ``remember_choice``, approving every pending call turns on
        session-wide auto-approval; approving only some stores those tools'
        names for auto-approval.

        Returns:
            False if ``request_id`` is not the pending request (nothing changes)
        """
        pending = self._pending
        if pending is None or pending.request_id != request_id:
            logger.warning(f"No matching pending request for approval: {request_id}")
            return False

        if remember_choice:
            approved = set(approved_tool_ids)
            if set(pending.tool_ids) <= approved:
                self._session_auto_approval = True
                logger.info("Session auto-approval enabled")
            else:
                for tool_call in pending.tool_calls:
                    if tool_call.id in approved:
                        self._auto_approve_settings[tool_call.name] = True
                logger.info("Individual tool approvals saved")

        self._clear_pending(pending)
        all_approved = list(dict.fromkeys([*pending.auto_approved_ids, *approved_tool_ids]))
        self._settle(pending, approved_ids=all_approved)
        logger.info(f"Approval request {request_id} approved: {all_approved}")
        return True

    def deny_tools(self, request_id: str) -> bool:
        """Deny the pending request.

        Returns:
            False if ``request_id`` is not the pending request (nothing changes)
        """
        pending = self._pending
        if pending is None or pending.request_id != request_id:
            logger.warning(f"No matching pending request for denial: {request_id}")
            return False

        self._clear_pending(pending)
        self._settle(pending, error=UserDeniedError(request_id))
        logger.info(f"Approval request {request_id} denied")
        return True

    def handle_response(self, response: ApprovalResponseMessage) -> bool:
        """Apply a decision message from the UI."""
        if response.decision == ApprovalDecision.APPROVED:
            return self.approve_tools(
                response.request_id, response.approved_tool_ids, response.remember_choice
            )
        return self.deny_tools(response.request_id)

    def get_pending_request(self) -> Optional[PendingApprovalRequest]:
        return self._pending

    def clear_session(self) -> None:
        """Forget all remembered approvals."""
        self._session_auto_approval = False
        self._auto_approve_settings.clear()
        logger.info("Tool approval session settings cleared")

    def set_session_auto_approval(self, enabled: bool) -> None:
        self._session_auto_approval = enabled

    def is_session_auto_approval_enabled(self) -> bool:
        return self._session_auto_approval

    def is_tool_auto_approved(self, tool_name: str) -> bool:
        return self._session_auto_approval or self._auto_approve_settings.get(tool_name, False)

    def get_auto_approval_settings(self) -> AutoApprovalSettings:
        return AutoApprovalSettings(
            session_auto_approval=self._session_auto_approval,
            tool_settings=[
                ToolAutoApproval(tool_name=name, auto_approve=auto_approve)
                for name, auto_approve in self._auto_approve_settings.items()
            ],
        )

    def _clear_pending(self, pending: PendingApprovalRequest) -> None:
        if self._pending is pending:
            self._pending = None
        self.mailbox.withdraw(pending.request_id)

    def _settle(
        self,
        pending: PendingApprovalRequest,
        approved_ids: Optional[list[str]] = None,
        error: Optional[ApprovalError] = None,
    ) -> None:
        """Resolve or reject the caller's future, at most once."""
        if pending.future.done():
            return
        if error is not None:
            pending.future.set_exception(error)
        else:
            pending.future.set_result(approved_ids or [])

    def _on_caller_done(
        self, pending: PendingApprovalRequest, future: "asyncio.Future[list[str]]"
    ) -> None:
        # The caller gave up waiting; stop advertising the request
        if future.cancelled() and self._pending is pending:
            logger.info(f"Approval request {pending.request_id} cancelled by caller")
            self._clear_pending(pending)

    def _notify_listeners(self, message: ApprovalRequestMessage) -> None:
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception as e:
                logger.error(f"Approval listener failed: {e}", exc_info=True)
