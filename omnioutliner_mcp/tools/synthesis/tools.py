"""Tools for reading whole sections and inserting structured content."""

from functools import partial
from typing import Any

from omnioutliner_mcp.mcp.models import ToolCallResult
from omnioutliner_mcp.mcp.registry import ToolRegistry
from omnioutliner_mcp.outliner import scripts
from omnioutliner_mcp.outliner.bridge import ScriptExecutor
from omnioutliner_mcp.tools.base import ToolBuilder, json_result, with_undo_hint
from omnioutliner_mcp.tools.query.tools import DOCUMENT_NAME_HELP


async def get_section_content_handler(
    executor: ScriptExecutor, arguments: dict[str, Any]
) -> ToolCallResult:
    """Handle the get_section_content tool call."""
    script = scripts.get_section_content(
        row_id=arguments.get("rowId"),
        format=arguments.get("format", "structured"),
        document_name=arguments.get("documentName"),
        offset=int(arguments.get("offset", 0)),
        limit=int(arguments.get("limit", 500)),
    )
    return json_result(await executor.execute(script))


async def insert_content_handler(
    executor: ScriptExecutor, arguments: dict[str, Any]
) -> ToolCallResult:
    """Handle the insert_content tool call."""
    script = scripts.insert_content(
        arguments["content"],
        parent_id=arguments.get("parentId"),
        position=arguments.get("position", "last"),
        document_name=arguments.get("documentName"),
    )
    return json_result(with_undo_hint(await executor.execute(script)))


def register_tools(registry: ToolRegistry, executor: ScriptExecutor) -> None:
    """Register all synthesis tools with the registry."""

    registry.register_tool(
        ToolBuilder(
            "get_section_content",
            "Get a section (a row and everything under it, or the whole document) as "
            "plain text, markdown or structured rows. Results are paged with offset "
            "and limit.",
        )
        .add_parameter("rowId", "string", "Section root row; omit for the whole document")
        .add_parameter("documentName", "string", DOCUMENT_NAME_HELP)
        .add_parameter(
            "format",
            "string",
            "Output format",
            enum=["plain", "markdown", "structured"],
            default="structured",
        )
        .add_parameter("offset", "integer", "Rows to skip", default=0, minimum=0)
        .add_parameter(
            "limit", "integer", "Maximum rows to return", default=500, minimum=1, maximum=2000
        )
        .build(),
        partial(get_section_content_handler, executor),
    )

    registry.register_tool(
        ToolBuilder(
            "insert_content",
            "Insert several rows at once. content is a JSON array of "
            "{topic, note?, children?} objects or strings; plain text becomes one row.",
        )
        .add_parameter("content", "string", "Rows to insert", required=True)
        .add_parameter("documentName", "string", DOCUMENT_NAME_HELP)
        .add_parameter("parentId", "string", "Parent row ID; omit for top level")
        .add_parameter(
            "position",
            "string",
            "Position among the parent's children",
            enum=["first", "last"],
            default="last",
        )
        .build(),
        partial(insert_content_handler, executor),
    )
