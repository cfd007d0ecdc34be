"""Prompts for the tool planning call."""

from common.types import ToolDescriptor

PLANNING_SYSTEM_PROMPT = """You plan tool usage for a cluster operations assistant.
Given the user's request, decide which of the available tools should run together so
the request can be answered completely in one pass.

## Rules
1. Recommend every tool that contributes information needed for a complete answer,
   not only the minimum set.
2. Order tools by priority and dependency: if one tool needs another tool's output,
   give the dependent tool a lower priority.
3. Fill in concrete arguments for each tool from the request and the conversation.
4. Read-style tools (get_*, list_*, search_*, read*) may run in parallel.
5. Tools that create, apply, update, patch or delete run one after another.
6. Only use tool names from the list below, spelled exactly as listed.

## Available tools
{tool_list}

## Response format
Return a single JSON object and nothing else:
{{
  "analysis": "What the user needs and how the tools cover it",
  "tools": [
    {{
      "name": "exact_tool_name",
      "description": "What this call does",
      "arguments": {{"key": "value"}},
      "priority": "high|medium|low",
      "reason": "Why this tool is needed"
    }}
  ],
  "shouldExecuteAll": true
}}

Use the "name" field (not "tool_name") and give "arguments" as a JSON object."""

PLANNING_USER_PROMPT = """User request: "{user_message}"

Recommend ALL tools needed to answer this request completely. For each tool give the
exact tool name, the complete arguments as a JSON object, and why it is needed.
Respond with the JSON object only."""


def format_tool_list(tools: list[ToolDescriptor]) -> str:
    """One ``- name: description`` line per tool."""
    if not tools:
        return "(no tools available)"
    return "\n".join(f"- {tool.name}: {tool.description}" for tool in tools)


def build_planning_system_prompt(tools: list[ToolDescriptor]) -> str:
    return PLANNING_SYSTEM_PROMPT.format(tool_list=format_tool_list(tools))


def build_planning_user_prompt(user_message: str) -> str:
    return PLANNING_USER_PROMPT.format(user_message=user_message)
