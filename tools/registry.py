"""Tool descriptor registry, enabled-tools settings map and tool executor."""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from common.models.enums import ToolCallType
from common.types import (
    TOOL_ERROR_MESSAGES,
    ToolCall,
    ToolCallResult,
    ToolDescriptor,
    ToolErrorType,
)
from tools.base import BaseTool

logger = logging.getLogger(__name__)

# Separator between server and tool names in MCP tool identifiers
MCP_NAME_SEPARATOR = "__"


class ToolSettings(BaseModel):
    """Enabled/disabled state per tool name.

    Tools without an entry are enabled.
    """

    enabled_tools: Optional[dict[str, bool]] = Field(
        None, description="Explicit enabled flags keyed by tool name"
    )


def is_tool_enabled(settings: Optional[ToolSettings], tool_name: str) -> bool:
    """Check if a tool is enabled (default: True)."""
    if settings is None or settings.enabled_tools is None:
        return True
    return settings.enabled_tools.get(tool_name, True)


def toggle_tool(settings: Optional[ToolSettings], tool_name: str) -> ToolSettings:
    """Return new settings with the tool's effective enabled state flipped."""
    current = dict(settings.enabled_tools or {}) if settings else {}
    current[tool_name] = not is_tool_enabled(settings, tool_name)
    return ToolSettings(enabled_tools=current)


def set_enabled_tools(
    settings: Optional[ToolSettings], enabled_tool_names: list[str], all_tool_names: list[str]
) -> ToolSettings:
    """Return new settings where exactly ``enabled_tool_names`` are enabled."""
    enabled = set(enabled_tool_names)
    enabled_tools = dict(settings.enabled_tools or {}) if settings else {}
    for tool_name in all_tool_names:
        enabled_tools[tool_name] = tool_name in enabled
    return ToolSettings(enabled_tools=enabled_tools)


def get_enabled_tool_names(
    settings: Optional[ToolSettings], all_tool_names: list[str]
) -> list[str]:
    """Filter tool names down to the enabled ones."""
    return [name for name in all_tool_names if is_tool_enabled(settings, name)]


def parse_mcp_tool_name(full_tool_name: str) -> tuple[str, str]:
    """Split ``server__tool`` into ``(server, tool)``.

    Names without a server prefix belong to the ``default`` server.
    """
    parts = full_tool_name.split(MCP_NAME_SEPARATOR)
    if len(parts) >= 2:
        return parts[0], MCP_NAME_SEPARATOR.join(parts[1:])
    return "default", full_tool_name


class ToolExecutor:
    """Runs approved tool calls against registered tools."""

    def __init__(self) -> None:
        self.tools: dict[str, BaseTool] = {}

    def register_tool(self, tool: BaseTool) -> None:
        """Register a tool instance."""
        self.tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name} ({tool.tool_type.value})")

    def unregister_tool(self, tool_name: str) -> Optional[BaseTool]:
        """Remove a tool by name."""
        tool = self.tools.pop(tool_name, None)
        if tool is not None:
            logger.debug(f"Unregistered tool: {tool_name}")
        return tool

    async def execute(self, tool_call: ToolCall) -> ToolCallResult:
        """Execute a tool call. Failures come back as error results."""
        tool = self.tools.get(tool_call.name)
        if tool is None:
            error_msg = TOOL_ERROR_MESSAGES[ToolErrorType.NOT_FOUND].format(
                tool_name=tool_call.name, available_tools=", ".join(sorted(self.tools)) or "none"
            )
            logger.error(error_msg)
            return ToolCallResult.failure(
                tool_call, ToolErrorType.NOT_FOUND, error_msg, not_found=True
            )

        logger.info(f"Executing tool: {tool_call.name}")
        try:
            result = await tool.execute(tool_call.arguments)
        except Exception as e:
            logger.error(f"Tool {tool_call.name} failed: {e}", exc_info=True)
            return ToolCallResult.failure(
                tool_call,
                ToolErrorType.EXECUTION_ERROR,
                TOOL_ERROR_MESSAGES[ToolErrorType.EXECUTION_ERROR].format(error=str(e)),
            )

        # Tools return results without the call id, the executor sets it
        if result.tool_call_id is None:
            result.tool_call_id = tool_call.id
        return result


class ToolRegistry:
    """Supplies the descriptors of the currently available tools.

    Availability combines what the executor can run, descriptors registered
    for externally hosted tools, and the enabled-tools settings map.
    """

    def __init__(self, executor: ToolExecutor, settings: Optional[ToolSettings] = None) -> None:
        self.executor = executor
        self.settings = settings or ToolSettings()
        self._external: dict[str, ToolDescriptor] = {}

    def register_external_tools(self, descriptors: list[ToolDescriptor]) -> None:
        """Register descriptors for tools hosted outside this process (e.g. MCP).

        Names with a server prefix (``server__tool``) are MCP-hosted.
        """
        for descriptor in descriptors:
            server, _ = parse_mcp_tool_name(descriptor.name)
            if server != "default" and descriptor.source != ToolCallType.MCP:
                descriptor = descriptor.model_copy(update={"source": ToolCallType.MCP})
            self._external[descriptor.name] = descriptor
        logger.debug(f"Registered {len(descriptors)} external tool descriptors")

    def update_settings(self, settings: ToolSettings) -> None:
        """Replace the enabled-tools settings map."""
        self.settings = settings
        logger.info(f"Tool settings updated: {settings.enabled_tools}")

    def set_enabled_tools(self, enabled_tool_names: list[str]) -> list[str]:
        """Enable exactly the given tools and disable every other known tool.

        Returns the names of the tools that are enabled afterwards.
        """
        all_names = [t.name for t in self.get_all_tools()]
        self.settings = set_enabled_tools(self.settings, enabled_tool_names, all_names)
        enabled = get_enabled_tool_names(self.settings, all_names)
        logger.info(f"Enabled tools set to: {enabled}")
        return enabled

    def toggle_tool(self, tool_name: str) -> bool:
        """Flip a tool's enabled state and return the new state."""
        self.settings = toggle_tool(self.settings, tool_name)
        enabled = is_tool_enabled(self.settings, tool_name)
        logger.info(f"Tool {tool_name} {'enabled' if enabled else 'disabled'}")
        return enabled

    def get_all_tools(self) -> list[ToolDescriptor]:
        """All known tools, enabled or not. Executor tools come first."""
        descriptors = {name: tool.to_descriptor() for name, tool in self.executor.tools.items()}
        for name, descriptor in self._external.items():
            descriptors.setdefault(name, descriptor)
        return list(descriptors.values())

    def snapshot(self) -> list[ToolDescriptor]:
        """Enabled tool descriptors, as handed to the planner."""
        all_tools = self.get_all_tools()
        enabled = set(get_enabled_tool_names(self.settings, [t.name for t in all_tools]))
        tools = [t for t in all_tools if t.name in enabled]
        logger.debug(f"Returning {len(tools)} available tools")
        return tools

    def is_enabled(self, tool_name: str) -> bool:
        return is_tool_enabled(self.settings, tool_name)

    def has_tool(self, tool_name: str) -> bool:
        """Check if a tool is known and enabled."""
        return any(t.name == tool_name for t in self.snapshot())

    def get_tool_source(self, tool_name: str) -> Optional[ToolCallType]:
        """Whether a known tool is built-in or MCP-hosted."""
        for descriptor in self.get_all_tools():
            if descriptor.name == tool_name:
                return descriptor.source
        return None
