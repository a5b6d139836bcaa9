"""Read-only tools: documents, outline structure, rows and search."""

from functools import partial
from typing import Any

from omnioutliner_mcp.mcp.models import ToolCallResult
from omnioutliner_mcp.mcp.registry import ToolRegistry
from omnioutliner_mcp.outliner import scripts
from omnioutliner_mcp.outliner.bridge import ScriptExecutor, check_connection
from omnioutliner_mcp.tools.base import ToolBuilder, json_result

DOCUMENT_NAME_HELP = (
    "Name of the document to use. Defaults to the frontmost document. "
    "Use list_documents to see open documents."
)


async def list_documents_handler(
    executor: ScriptExecutor, arguments: dict[str, Any]
) -> ToolCallResult:
    """Handle the list_documents tool call."""
    return json_result(await executor.execute(scripts.list_documents()))


async def get_all_documents_content_handler(
    executor: ScriptExecutor, arguments: dict[str, Any]
) -> ToolCallResult:
    """Handle the get_all_documents_content tool call."""
    script = scripts.get_all_documents_content(
        include_notes=arguments.get("includeNotes", True),
    )
    return json_result(await executor.execute(script))


async def get_current_document_handler(
    executor: ScriptExecutor, arguments: dict[str, Any]
) -> ToolCallResult:
    """Handle the get_current_document tool call."""
    return json_result(await executor.execute(scripts.get_current_document()))


async def get_outline_structure_handler(
    executor: ScriptExecutor, arguments: dict[str, Any]
) -> ToolCallResult:
    """Handle the get_outline_structure tool call."""
    max_depth = arguments.get("maxDepth")
    script = scripts.get_outline_structure(
        max_depth=int(max_depth) if max_depth is not None else None,
        include_notes=arguments.get("includeNotes", True),
        document_name=arguments.get("documentName"),
    )
    return json_result(await executor.execute(script))


async def get_row_handler(executor: ScriptExecutor, arguments: dict[str, Any]) -> ToolCallResult:
    """Handle the get_row tool call."""
    script = scripts.get_row(
        arguments["rowId"],
        include_children=arguments.get("includeChildren", False),
        document_name=arguments.get("documentName"),
    )
    return json_result(await executor.execute(script))


async def get_row_children_handler(
    executor: ScriptExecutor, arguments: dict[str, Any]
) -> ToolCallResult:
    """Handle the get_row_children tool call."""
    script = scripts.get_row_children(
        row_id=arguments.get("rowId"),
        document_name=arguments.get("documentName"),
    )
    return json_result(await executor.execute(script))


async def search_outline_handler(
    executor: ScriptExecutor, arguments: dict[str, Any]
) -> ToolCallResult:
    """Handle the search_outline tool call."""
    script = scripts.search_outline(
        arguments["query"],
        search_in=arguments.get("searchIn", "all"),
        case_sensitive=arguments.get("caseSensitive", False),
        max_results=int(arguments.get("maxResults", 50)),
        document_name=arguments.get("documentName"),
    )
    return json_result(await executor.execute(script))


async def check_connection_handler(
    executor: ScriptExecutor, arguments: dict[str, Any]
) -> ToolCallResult:
    """Handle the check_connection tool call."""
    status = await check_connection(executor)
    return json_result(status.model_dump())


def register_tools(registry: ToolRegistry, executor: ScriptExecutor) -> None:
    """Register all query tools with the registry."""

    registry.register_tool(
        ToolBuilder(
            "list_documents",
            "List all open OmniOutliner documents with their names, row counts "
            "and which one is frontmost.",
        ).build(),
        partial(list_documents_handler, executor),
    )

    registry.register_tool(
        ToolBuilder(
            "get_all_documents_content",
            "Get the rows of every open document in one call. Documents with "
            f"{scripts.LARGE_DOC_THRESHOLD} or more rows return top-level rows only.",
        )
        .add_parameter("includeNotes", "boolean", "Include row notes", default=True)
        .build(),
        partial(get_all_documents_content_handler, executor),
    )

    registry.register_tool(
        ToolBuilder(
            "get_current_document",
            "Get the name and row count of the frontmost document.",
        ).build(),
        partial(get_current_document_handler, executor),
    )

    registry.register_tool(
        ToolBuilder(
            "get_outline_structure",
            "Get the outline as a flat list of rows with levels and descendant counts. "
            "Large documents return top-level rows only unless maxDepth is given.",
        )
        .add_parameter("documentName", "string", DOCUMENT_NAME_HELP)
        .add_parameter("maxDepth", "integer", "Deepest level to include", minimum=0)
        .add_parameter("includeNotes", "boolean", "Include row notes", default=True)
        .build(),
        partial(get_outline_structure_handler, executor),
    )

    registry.register_tool(
        ToolBuilder("get_row", "Get a single row by its ID.")
        .add_parameter("rowId", "string", "The row ID", required=True)
        .add_parameter("documentName", "string", DOCUMENT_NAME_HELP)
        .add_parameter(
            "includeChildren", "boolean", "Also return direct children", default=False
        )
        .build(),
        partial(get_row_handler, executor),
    )

    registry.register_tool(
        ToolBuilder(
            "get_row_children",
            "Get the direct children of a row, or the top-level rows when no rowId is given.",
        )
        .add_parameter("rowId", "string", "Parent row ID; omit for top-level rows")
        .add_parameter("documentName", "string", DOCUMENT_NAME_HELP)
        .build(),
        partial(get_row_children_handler, executor),
    )

    registry.register_tool(
        ToolBuilder("search_outline", "Search row topics and notes for text.")
        .add_parameter("query", "string", "Text to search for", required=True)
        .add_parameter("documentName", "string", DOCUMENT_NAME_HELP)
        .add_parameter(
            "searchIn",
            "string",
            "Which fields to search",
            enum=["all", "topics", "notes"],
            default="all",
        )
        .add_parameter("caseSensitive", "boolean", "Match case exactly", default=False)
        .add_parameter(
            "maxResults", "integer", "Maximum matches to return", default=50, minimum=1, maximum=100
        )
        .build(),
        partial(search_outline_handler, executor),
    )

    registry.register_tool(
        ToolBuilder(
            "check_connection",
            "Check whether OmniOutliner is running and a document is open.",
        ).build(),
        partial(check_connection_handler, executor),
    )
