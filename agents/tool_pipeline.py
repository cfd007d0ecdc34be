"""ToolPipeline - plan, approve and execute the tools for one user request."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from agents.tool_approval import ToolApprovalManager
from agents.tool_orchestrator import HistoryEntry, ToolOrchestrator
from client.base_client import ChatTransport
from common.errors import ApprovalError, RequestSupersededError
from common.models.enums import ToolCallType
from common.types import (
    TOOL_ERROR_MESSAGES,
    ExecutionGroups,
    RecommendedTool,
    ToolCall,
    ToolCallResult,
    ToolErrorType,
    ToolExecution,
    ToolRecommendation,
)
from config import TOOL_APPROVAL_CONFIG
from tools.registry import ToolExecutor, ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of one pipeline run."""

    recommendation: ToolRecommendation
    groups: ExecutionGroups
    executions: list[ToolExecution] = field(default_factory=list)

    @property
    def executed(self) -> bool:
        return bool(self.executions)


class ToolPipeline:
    """Runs planned tools through the approval gate and the executor.

    Sequential tools run first, one at a time, then the parallel-safe tools
    run concurrently. Each non-empty group is sent to the gate as one batch.
    """

    def __init__(
        self,
        orchestrator: ToolOrchestrator,
        approval_manager: ToolApprovalManager,
        registry: ToolRegistry,
        executor: Optional[ToolExecutor] = None,
        require_approval: Optional[bool] = None,
        auto_approve_tools: Optional[list[str]] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.approval_manager = approval_manager
        self.registry = registry
        self.executor = executor or registry.executor

        if require_approval is None:
            require_approval = TOOL_APPROVAL_CONFIG["require_approval"]
        if auto_approve_tools is None:
            auto_approve_tools = TOOL_APPROVAL_CONFIG["auto_approve_tools"]
        self.require_approval = require_approval
        self.auto_approve_tools = set(auto_approve_tools)

        logger.info(
            f"Tool pipeline configured: require_approval={self.require_approval}, "
            f"auto_approve={sorted(self.auto_approve_tools)}"
        )

    async def run(
        self,
        user_message: str,
        transport: ChatTransport,
        conversation_history: Optional[list[HistoryEntry]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> PipelineResult:
        """Plan the tools for a request and execute them.

        Args:
            user_message: The user's question/request
            transport: Model transport used for planning
            conversation_history: Previous turns for context
            cancel_event: Set to cancel planning

        Returns:
            The plan, its execution groups and the executions. Nothing is
            executed when the plan says not to run all tools together.

        Raises:
            PlanningCancelledError: If planning was cancelled
        """
        recommendation = await self.orchestrator.analyze_and_recommend_tools(
            user_message,
            self.registry.snapshot(),
            transport,
            conversation_history=conversation_history,
            cancel_event=cancel_event,
        )
        groups = self.orchestrator.group_tools_by_execution_strategy(recommendation.tools)

        if not recommendation.should_execute_all:
            logger.info("Plan does not call for executing all tools, skipping execution")
            return PipelineResult(recommendation=recommendation, groups=groups)

        executions: list[ToolExecution] = []
        if groups.sequential:
            tool_calls = [self._to_tool_call(tool) for tool in groups.sequential]
            executions.extend(await self.execute_batch(tool_calls, parallel=False))
        if groups.parallel:
            tool_calls = [self._to_tool_call(tool) for tool in groups.parallel]
            executions.extend(await self.execute_batch(tool_calls, parallel=True))

        return PipelineResult(recommendation=recommendation, groups=groups, executions=executions)

    async def execute_batch(
        self, tool_calls: list[ToolCall], parallel: bool = False
    ) -> list[ToolExecution]:
        """Get approval for a batch of tool calls and execute the approved ones.

        Args:
            tool_calls: Calls to approve and execute
            parallel: Execute approved calls concurrently instead of in order

        Returns:
            One execution per input call, in input order. Calls that were not
            approved carry an error result.
        """
        if not tool_calls:
            return []

        approved_ids = {tc.id for tc in tool_calls if not self._requires_approval(tc.name)}
        gated = [tc for tc in tool_calls if tc.id not in approved_ids]

        rejection: Optional[ApprovalError] = None
        if gated:
            try:
                approved_ids.update(await self.approval_manager.request_approval(gated))
            except ApprovalError as e:
                logger.info(f"Tool batch not approved: {e}")
                rejection = e

        approved_calls = [tc for tc in tool_calls if tc.id in approved_ids]
        if parallel:
            results = await asyncio.gather(*(self.executor.execute(tc) for tc in approved_calls))
        else:
            results = [await self.executor.execute(tc) for tc in approved_calls]
        results_by_id = {tc.id: result for tc, result in zip(approved_calls, results)}

        executions = []
        for tool_call in tool_calls:
            result = results_by_id.get(tool_call.id) or self._rejected_result(tool_call, rejection)
            executions.append(ToolExecution(tool_call=tool_call, result=result))
        return executions

    def _requires_approval(self, tool_name: str) -> bool:
        return self.require_approval and tool_name not in self.auto_approve_tools

    def _to_tool_call(self, tool: RecommendedTool) -> ToolCall:
        source = self.registry.get_tool_source(tool.name) or ToolCallType.REGULAR
        return tool.to_tool_call(tool_type=source)

    @staticmethod
    def _rejected_result(
        tool_call: ToolCall, rejection: Optional[ApprovalError]
    ) -> ToolCallResult:
        if isinstance(rejection, RequestSupersededError):
            error_type = ToolErrorType.SUPERSEDED
        else:
            error_type = ToolErrorType.USER_REJECTED

        message = TOOL_ERROR_MESSAGES[error_type].format(tool_name=tool_call.name)
        if rejection is None:
            return ToolCallResult.failure(tool_call, error_type, message)
        return ToolCallResult.failure(
            tool_call, error_type, message, reason=str(rejection), request_id=rejection.request_id
        )
