"""ToolOrchestrator - plans which tools to run for a user request.

Asks the planning model for every tool needed to answer a request, validates
the untrusted response, drops tools that are not currently available, and
splits the result into parallel-safe and sequential execution groups.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from agents.plan_validator import validate_plan_text
from agents.prompts import build_planning_system_prompt, build_planning_user_prompt
from client.base_client import ChatTransport, Message, Role, extract_text_content
from common.errors import PlanningCancelledError
from common.models.enums import PLANNING_HISTORY_ROLES
from common.types import ExecutionGroups, RecommendedTool, ToolDescriptor, ToolRecommendation

logger = logging.getLogger(__name__)

# Name fragments of read-style tools, which are safe to run in parallel
PARALLEL_PATTERNS = ("get_", "list_", "search_", "read")

ANALYSIS_FAILED_MESSAGE = "Unable to analyze tool requirements"

HistoryEntry = Union[Message, Mapping[str, Any]]

_REPLAYED_ROLES = frozenset(role.value for role in PLANNING_HISTORY_ROLES)


def is_parallel_eligible(tool_name: str) -> bool:
    """Read-only by naming convention."""
    return any(pattern in tool_name for pattern in PARALLEL_PATTERNS)


def group_tools_by_execution_strategy(tools: list[RecommendedTool]) -> ExecutionGroups:
    """Split tools into parallel and sequential groups, each sorted by priority.

    The sort is stable, so tools of equal priority keep their input order.
    """
    parallel = [tool for tool in tools if is_parallel_eligible(tool.name)]
    sequential = [tool for tool in tools if not is_parallel_eligible(tool.name)]

    return ExecutionGroups(
        parallel=sorted(parallel, key=lambda tool: tool.priority.rank),
        sequential=sorted(sequential, key=lambda tool: tool.priority.rank),
    )


def _to_descriptor(tool: Union[ToolDescriptor, Mapping[str, Any]]) -> ToolDescriptor:
    if isinstance(tool, ToolDescriptor):
        return tool
    return ToolDescriptor(name=tool["name"], description=tool.get("description") or "")


def _history_to_messages(history: list[HistoryEntry]) -> list[Message]:
    """Keep only system/user/assistant turns."""
    messages = []
    for entry in history:
        if isinstance(entry, Message):
            role, content = entry.role.value, entry.content
        else:
            role, content = entry.get("role"), entry.get("content")

        if role not in _REPLAYED_ROLES:
            continue
        messages.append(Message(role=Role(role), content=extract_text_content(content)))
    return messages


class ToolOrchestrator:
    """Analyzes user requests and recommends every tool needed to answer them.

    Domain-agnostic: works with any tool that has a name and a description,
    whether built-in or hosted on an MCP server.
    """

    async def analyze_and_recommend_tools(
        self,
        user_message: str,
        available_tools: list[Union[ToolDescriptor, Mapping[str, Any]]],
        transport: ChatTransport,
        conversation_history: Optional[list[HistoryEntry]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ToolRecommendation:
        """Analyze a user request and recommend the tools to execute together.

        Args:
            user_message: The user's question/request
            available_tools: Snapshot of the available tools
            transport: Model transport used for the planning call
            conversation_history: Previous turns for context
            cancel_event: Set to cancel the planning call

        Returns:
            Recommended tools with arguments, analysis and execution flag. Parsing
            and validation problems yield an empty recommendation.

        Raises:
            PlanningCancelledError: If the planning call was cancelled
        """
        descriptors = [_to_descriptor(tool) for tool in available_tools]
        available_names = {tool.name for tool in descriptors}

        messages = [
            Message(role=Role.SYSTEM, content=build_planning_system_prompt(descriptors)),
            *_history_to_messages(conversation_history or []),
            Message(role=Role.USER, content=build_planning_user_prompt(user_message)),
        ]

        if cancel_event is not None and cancel_event.is_set():
            raise PlanningCancelledError("Planning request cancelled before it was sent")

        try:
            response = await transport.invoke(messages, cancel_event=cancel_event)
        except PlanningCancelledError:
            logger.info("Tool planning cancelled")
            raise
        except Exception as e:
            logger.error(f"Error in tool orchestration analysis: {e}", exc_info=True)
            return ToolRecommendation.empty(ANALYSIS_FAILED_MESSAGE)

        response_text = extract_text_content(response.content)
        result = validate_plan_text(response_text)
        if not result.ok:
            logger.warning(
                f"Tool plan rejected ({result.failure.value}): {result.errors or response_text!r}"
            )
            return result.recommendation

        validated = result.recommendation
        tools = [tool for tool in validated.tools if tool.name in available_names]
        dropped = [tool.name for tool in validated.tools if tool.name not in available_names]
        if dropped:
            logger.debug(f"Dropping unknown tools from plan: {dropped}")

        recommendation = ToolRecommendation(
            tools=tools,
            analysis=validated.analysis,
            should_execute_all=validated.should_execute_all and len(tools) > 0,
        )
        logger.info(
            f"Planned {len(tools)} tools "
            f"(execute_all={recommendation.should_execute_all}): {[t.name for t in tools]}"
        )
        return recommendation

    # Short name for the planning entry point
    analyze = analyze_and_recommend_tools

    @staticmethod
    def group_tools_by_execution_strategy(tools: list[RecommendedTool]) -> ExecutionGroups:
        """Group tools by execution strategy (parallel vs sequential)."""
        return group_tools_by_execution_strategy(tools)
