"""MCP (Model Context Protocol) implementation with JSON-RPC 2.0."""

from omnioutliner_mcp.mcp.models import (
    JsonRpcRequest,
    JsonRpcResponse,
    SuccessResponse,
    ErrorResponse,
    JsonRpcError,
    Tool,
    InputSchema,
    PropertySchema,
    TextContent,
    ImageContent,
    ToolCallResult,
)
from omnioutliner_mcp.mcp.registry import ToolRegistry, ToolSuccess, ToolFailure
from omnioutliner_mcp.mcp.jsonrpc import JsonRpcHandler
from omnioutliner_mcp.mcp.router import MCPRouter
from omnioutliner_mcp.mcp.errors import (
    PARSE_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
    TOOL_EXECUTION_ERROR,
    AppError,
    ErrorCode,
    RpcError,
)

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "SuccessResponse",
    "ErrorResponse",
    "JsonRpcError",
    "Tool",
    "InputSchema",
    "PropertySchema",
    "TextContent",
    "ImageContent",
    "ToolCallResult",
    "ToolRegistry",
    "ToolSuccess",
    "ToolFailure",
    "JsonRpcHandler",
    "MCPRouter",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "TOOL_EXECUTION_ERROR",
    "AppError",
    "ErrorCode",
    "RpcError",
]
