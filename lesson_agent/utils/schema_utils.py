"""
JSON Schema Utilities for tool calling.

Builds tool parameter schemas from Pydantic argument models and parses the
arguments a model sends back.
"""

import json
from typing import Any, Optional, Type, TypeVar, Union
from pydantic import BaseModel, ValidationError

from lesson_agent.exceptions import ToolArgumentError


T = TypeVar("T", bound=BaseModel)


def get_tool_schema(model: Type[BaseModel], strict: bool = False) -> dict[str, Any]:
    """
    Get the JSON schema of a tool's argument model (by alias).

    With strict=True the schema is transformed for OpenAI strict mode.
    """
    base_schema = model.model_json_schema(by_alias=True)
    base_schema.pop("title", None)
    return make_schema_strict(base_schema) if strict else base_schema


def make_schema_strict(schema: dict[str, Any]) -> dict[str, Any]:
    """Transform a JSON schema to meet OpenAI's strict mode requirements."""
    def transform(obj: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(obj, dict):
            return obj

        if "$ref" in obj:
            return {"$ref": obj["$ref"]}

        result = {}
        for key, value in obj.items():
            if key == "$defs":
                result[key] = {k: transform(v) for k, v in value.items()}
            elif isinstance(value, dict):
                result[key] = transform(value)
            elif isinstance(value, list):
                result[key] = [
                    transform(item) if isinstance(item, dict) else item
                    for item in value
                ]
            else:
                result[key] = value

        if result.get("type") == "object" and "properties" in result:
            result["additionalProperties"] = False
            result["required"] = list(result["properties"].keys())

        return result

    return transform(schema)


def parse_tool_arguments(
    arguments: Optional[Union[str, dict[str, Any]]],
    model: Type[T],
    tool_name: str = "unknown",
) -> T:
    """Parse raw tool arguments (JSON string or dict) into the tool's argument model."""
    if arguments is None or arguments == "":
        arguments = {}

    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments)
        except json.JSONDecodeError as e:
            raise ToolArgumentError(tool_name, f"arguments are not valid JSON ({e.msg})") from e

    if not isinstance(arguments, dict):
        raise ToolArgumentError(tool_name, "arguments must be a JSON object")

    try:
        return model.model_validate(arguments)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}"
            for error in e.errors()[:5]
        )
        raise ToolArgumentError(tool_name, problems) from e
