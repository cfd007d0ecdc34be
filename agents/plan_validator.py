"""Validation and repair of tool plans returned by the planning model.

Model output is untrusted free text. Turning it into a ToolRecommendation is a
pipeline of small steps, each usable and testable on its own:

1. extract_json_object - find the JSON object span in the text
2. parse_plan_json     - decode it
3. normalize_plan      - resolve the ``tool_name`` alias, decode stringified arguments
4. validate_plan       - check it against the recommendation schema

validate_plan_text runs all four and never raises; every failure degrades to an
empty plan tagged with the step that failed.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError

from common.models.enums import PlanFailure, ToolPriority
from common.types import RecommendedTool, ToolRecommendation

logger = logging.getLogger(__name__)

# Greedy: first "{" through last "}"
JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


class ToolEntrySchema(BaseModel):
    """One recommended tool as the model must return it (after normalization)."""

    name: StrictStr = Field(..., min_length=1, description="Exact name of the tool to execute")
    description: StrictStr = Field(..., description="What this tool will do")
    arguments: dict[str, Any] = Field(..., description="Arguments needed for this tool")
    priority: ToolPriority = Field(
        ToolPriority.MEDIUM, description="Execution priority - high priority tools run first"
    )
    reason: StrictStr = Field(..., description="Why this tool is needed")


class PlanSchema(BaseModel):
    """The recommendation object the model must return."""

    model_config = ConfigDict(populate_by_name=True)

    analysis: StrictStr = Field(..., description="Analysis of what information the user needs")
    tools: list[ToolEntrySchema] = Field(..., description="List of tools to execute")
    should_execute_all: StrictBool = Field(
        True,
        alias="shouldExecuteAll",
        description="Whether all tools should be executed together for a complete answer",
    )


@dataclass
class PlanValidationResult:
    """Outcome of validating one model response."""

    recommendation: ToolRecommendation
    failure: Optional[PlanFailure] = None
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failure is None


def extract_json_object(text: str) -> Optional[str]:
    """Return the span from the first ``{`` to the last ``}``, if any."""
    match = JSON_OBJECT_PATTERN.search(text)
    return match.group(0) if match else None


def parse_plan_json(span: str) -> Optional[dict[str, Any]]:
    """Decode a JSON object span. Returns None if it is malformed or not an object."""
    try:
        data = json.loads(span)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def normalize_plan(data: Any) -> Any:
    """Repair the two known deviations in model output.

    - ``tool_name`` is accepted in place of ``name``
    - ``arguments`` given as a JSON string is decoded to an object

    Anything else is left for validation to reject.
    """
    if not isinstance(data, dict) or not isinstance(data.get("tools"), list):
        return data

    normalized_tools = []
    for entry in data["tools"]:
        if not isinstance(entry, dict):
            normalized_tools.append(entry)
            continue

        entry = dict(entry)
        tool_name = entry.pop("tool_name", None)
        entry["name"] = entry.get("name") or tool_name

        arguments = entry.get("arguments")
        if isinstance(arguments, str):
            try:
                entry["arguments"] = json.loads(arguments)
            except json.JSONDecodeError:
                pass

        normalized_tools.append(entry)

    return {**data, "tools": normalized_tools}


def validate_plan(data: Any) -> PlanSchema:
    """Validate normalized plan data.

    Raises:
        ValidationError: If the data does not match the recommendation schema
    """
    return PlanSchema.model_validate(data)


def validate_plan_text(text: str) -> PlanValidationResult:
    """Turn raw model text into a recommendation without ever raising."""
    span = extract_json_object(text)
    if span is None:
        return PlanValidationResult(ToolRecommendation.empty(text), PlanFailure.EXTRACTION)

    data = parse_plan_json(span)
    if data is None:
        return PlanValidationResult(ToolRecommendation.empty(text), PlanFailure.PARSE)

    try:
        validated = validate_plan(normalize_plan(data))
    except ValidationError as e:
        analysis = data.get("analysis")
        fallback = analysis if isinstance(analysis, str) and analysis else text
        errors = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        return PlanValidationResult(ToolRecommendation.empty(fallback), PlanFailure.SCHEMA, errors)

    tools = [RecommendedTool(**entry.model_dump()) for entry in validated.tools]
    recommendation = ToolRecommendation(
        tools=tools,
        analysis=validated.analysis,
        should_execute_all=validated.should_execute_all,
    )
    return PlanValidationResult(recommendation)
