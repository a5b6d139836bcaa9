"""Helpers shared by the tool groups."""

from typing import Any

from omnioutliner_mcp.mcp.models import InputSchema, PropertySchema, Tool, ToolCallResult
from omnioutliner_mcp.mcp.values import serialize_json

UNDO_HINT = "Use Cmd+Z in OmniOutliner to undo."


class ToolBuilder:
    """
    Fluent builder for tool definitions.

    Usage:
        tool = (
            ToolBuilder("get_row", "Get a single row")
            .add_parameter("rowId", "string", "The row ID", required=True)
            .build()
        )
    """

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description
        self._properties: dict[str, PropertySchema] = {}
        self._required: list[str] = []

    def add_parameter(
        self,
        name: str,
        type: str,
        description: str,
        required: bool = False,
        enum: list[str] | None = None,
        default: Any = None,
        minimum: int | None = None,
        maximum: int | None = None,
    ) -> "ToolBuilder":
        self._properties[name] = PropertySchema(
            type=type,
            description=description,
            enum=enum,
            default=default,
            minimum=minimum,
            maximum=maximum,
        )
        if required:
            self._required.append(name)
        return self

    def build(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=InputSchema(
                properties=dict(self._properties),
                required=list(self._required) or None,
            ),
        )


def json_result(value: Any) -> ToolCallResult:
    """Wrap a JSON value as a single pretty-printed text block."""
    return ToolCallResult.text(serialize_json(value, pretty=True).decode("utf-8"))


def with_undo_hint(result: dict[str, Any]) -> dict[str, Any]:
    """Append the undo hint to the message of a successful modification."""
    if result.get("success") and isinstance(result.get("message"), str):
        result = dict(result)
        result["message"] = f"{result['message']} {UNDO_HINT}"
    return result
