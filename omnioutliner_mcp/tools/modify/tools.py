"""Tools that change outlines: create documents, add, update, move and delete rows."""

from functools import partial
from typing import Any

from omnioutliner_mcp.mcp.models import ToolCallResult
from omnioutliner_mcp.mcp.registry import ToolRegistry
from omnioutliner_mcp.outliner import scripts
from omnioutliner_mcp.outliner.bridge import ScriptExecutor
from omnioutliner_mcp.tools.base import ToolBuilder, json_result, with_undo_hint
from omnioutliner_mcp.tools.query.tools import DOCUMENT_NAME_HELP


async def create_document_handler(
    executor: ScriptExecutor, arguments: dict[str, Any]
) -> ToolCallResult:
    """Handle the create_document tool call."""
    return json_result(await executor.execute(scripts.create_document()))


async def add_row_handler(executor: ScriptExecutor, arguments: dict[str, Any]) -> ToolCallResult:
    """Handle the add_row tool call."""
    script = scripts.add_row(
        arguments["topic"],
        note=arguments.get("note"),
        parent_id=arguments.get("parentId"),
        position=arguments.get("position", "last"),
        sibling_id=arguments.get("siblingId"),
        relative_position=arguments.get("relativePosition"),
        document_name=arguments.get("documentName"),
    )
    return json_result(with_undo_hint(await executor.execute(script)))


async def update_row_handler(executor: ScriptExecutor, arguments: dict[str, Any]) -> ToolCallResult:
    """Handle the update_row tool call."""
    script = scripts.update_row(
        arguments["rowId"],
        topic=arguments.get("topic"),
        note=arguments.get("note"),
        state=arguments.get("state"),
        document_name=arguments.get("documentName"),
    )
    return json_result(with_undo_hint(await executor.execute(script)))


async def move_row_handler(executor: ScriptExecutor, arguments: dict[str, Any]) -> ToolCallResult:
    """Handle the move_row tool call."""
    script = scripts.move_row(
        arguments["rowId"],
        new_parent_id=arguments.get("newParentId"),
        position=arguments.get("position", "last"),
        sibling_id=arguments.get("siblingId"),
        relative_position=arguments.get("relativePosition"),
        document_name=arguments.get("documentName"),
    )
    return json_result(with_undo_hint(await executor.execute(script)))


async def delete_row_handler(executor: ScriptExecutor, arguments: dict[str, Any]) -> ToolCallResult:
    """Handle the delete_row tool call. Without confirmation only a preview is returned."""
    script = scripts.delete_row(
        arguments["rowId"],
        confirmed=arguments["confirmed"],
        document_name=arguments.get("documentName"),
    )
    return json_result(with_undo_hint(await executor.execute(script)))


def register_tools(registry: ToolRegistry, executor: ScriptExecutor) -> None:
    """Register all modification tools with the registry."""

    registry.register_tool(
        ToolBuilder(
            "create_document",
            "Create a new, unsaved OmniOutliner document. Launches OmniOutliner if needed.",
        ).build(),
        partial(create_document_handler, executor),
    )

    registry.register_tool(
        ToolBuilder(
            "add_row",
            "Add a row. Place it under parentId, or before/after siblingId.",
        )
        .add_parameter("topic", "string", "Text of the new row", required=True)
        .add_parameter("documentName", "string", DOCUMENT_NAME_HELP)
        .add_parameter("note", "string", "Note attached to the row")
        .add_parameter("parentId", "string", "Parent row ID; omit for top level")
        .add_parameter(
            "position",
            "string",
            "Position among the parent's children",
            enum=["first", "last"],
            default="last",
        )
        .add_parameter("siblingId", "string", "Place the row next to this row instead")
        .add_parameter(
            "relativePosition",
            "string",
            "Side of siblingId to place the row on",
            enum=["before", "after"],
        )
        .build(),
        partial(add_row_handler, executor),
    )

    registry.register_tool(
        ToolBuilder(
            "update_row",
            "Change a row's topic, note or checkbox state. An empty note clears it.",
        )
        .add_parameter("rowId", "string", "The row ID", required=True)
        .add_parameter("documentName", "string", DOCUMENT_NAME_HELP)
        .add_parameter("topic", "string", "New topic text")
        .add_parameter("note", "string", "New note text")
        .add_parameter(
            "state", "string", "Checkbox state", enum=["checked", "unchecked", "none"]
        )
        .build(),
        partial(update_row_handler, executor),
    )

    registry.register_tool(
        ToolBuilder(
            "move_row",
            "Move a row and its children. The moved row gets a new ID.",
        )
        .add_parameter("rowId", "string", "The row to move", required=True)
        .add_parameter("documentName", "string", DOCUMENT_NAME_HELP)
        .add_parameter("newParentId", "string", "New parent row ID; omit for top level")
        .add_parameter(
            "position",
            "string",
            "Position among the new parent's children",
            enum=["first", "last"],
            default="last",
        )
        .add_parameter("siblingId", "string", "Place the row next to this row instead")
        .add_parameter(
            "relativePosition",
            "string",
            "Side of siblingId to place the row on",
            enum=["before", "after"],
        )
        .build(),
        partial(move_row_handler, executor),
    )

    registry.register_tool(
        ToolBuilder(
            "delete_row",
            "Delete a row and all its children. Call with confirmed=false first to "
            "preview what will be deleted.",
        )
        .add_parameter("rowId", "string", "The row to delete", required=True)
        .add_parameter("documentName", "string", DOCUMENT_NAME_HELP)
        .add_parameter(
            "confirmed", "boolean", "Must be true to actually delete", required=True
        )
        .build(),
        partial(delete_row_handler, executor),
    )
