"""Base classes for executable tools.

- BaseTool: Abstract base for all tools the executor can run
- BaseCoreTool: Base for in-process tools with a Pydantic input schema

Tools advertise themselves to the planner as ToolDescriptor values and are
executed by ToolExecutor once the approval gate lets their calls through.
"""

import json
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ValidationError

from common.models.enums import ToolCallType
from common.types import TOOL_ERROR_MESSAGES, ToolCallResult, ToolDescriptor, ToolErrorType


class BaseTool(ABC):
    """Abstract base class for all tools."""

    tool_type: ToolCallType = ToolCallType.REGULAR

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this tool."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this tool does."""
        pass

    def to_descriptor(self) -> ToolDescriptor:
        """Describe this tool for the planner."""
        return ToolDescriptor(name=self.name, description=self.description, source=self.tool_type)

    @abstractmethod
    async def execute(self, params: dict[str, Any]) -> ToolCallResult:
        """Execute the tool with given parameters.

        Args:
            params: Tool arguments

        Returns:
            ToolCallResult with execution output
        """
        pass


class BaseCoreTool(BaseTool):
    """Base class for in-process tools with Pydantic input schemas."""

    def __init__(
        self,
        name: str,
        description: str,
        input_schema: type[BaseModel],
        tool_type: ToolCallType = ToolCallType.REGULAR,
    ):
        self._name = name
        self._description = description
        self.input_schema = input_schema
        self.tool_type = tool_type

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    async def execute(self, params: dict[str, Any]) -> ToolCallResult:
        """Execute tool with validation and error handling."""
        try:
            validated_input = self.input_schema(**params)
        except ValidationError as e:
            return ToolCallResult(
                tool_name=self.name,
                content=TOOL_ERROR_MESSAGES[ToolErrorType.INVALID_ARGS].format(
                    tool_name=self.name, validation_error=e
                ),
                is_error=True,
                error=str(e),
                error_type=ToolErrorType.INVALID_ARGS,
            )

        try:
            output = await self._execute_impl(validated_input)
        except Exception as e:
            # Return error as result
            error_msg = f"Error executing {self.name}: {str(e)}"
            return ToolCallResult(
                tool_name=self.name,
                content=error_msg,
                is_error=True,
                error=str(e),
                error_type=ToolErrorType.EXECUTION_ERROR,
                metadata={"error_class": type(e).__name__},
            )

        return ToolCallResult(tool_name=self.name, content=self._format_output(output))

    @abstractmethod
    async def _execute_impl(self, input_data: BaseModel) -> Any:
        """Tool-specific implementation.

        Args:
            input_data: Validated input matching input_schema

        Returns:
            A string, a Pydantic model or any JSON-serializable value
        """
        pass

    def _format_output(self, output: Any) -> str:
        if isinstance(output, str):
            return output
        if isinstance(output, BaseModel):
            return output.model_dump_json()
        return json.dumps(output, default=str)
