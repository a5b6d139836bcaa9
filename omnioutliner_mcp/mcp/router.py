"""MCP method routing for JSON-RPC requests."""

import logging
import time
from typing import Any, Awaitable, Callable

from omnioutliner_mcp.config.loader import Settings, get_settings
from omnioutliner_mcp.mcp.errors import AppError, ErrorCode, RpcError
from omnioutliner_mcp.mcp.jsonrpc import JsonRpcHandler
from omnioutliner_mcp.mcp.models import (
    Capabilities,
    InitializeResult,
    JsonRpcRequest,
    JsonRpcResponse,
    ServerInfo,
    ToolCallResult,
    ToolsListResult,
)
from omnioutliner_mcp.mcp.registry import ToolFailure, ToolRegistry
from omnioutliner_mcp.mcp.values import as_string

logger = logging.getLogger(__name__)

MethodHandler = Callable[[dict[str, Any] | None], Awaitable[Any]]


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class MCPRouter:
    """
    Route MCP requests to method handlers.

    Each request is handled independently; the router keeps no session
    state. This is also the only place that decides whether a failure is
    reported as a JSON-RPC error or as a tool result flagged with isError.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        handler: JsonRpcHandler | None = None,
        settings: Settings | None = None,
    ):
        self.registry = registry
        self.handler = handler or JsonRpcHandler()
        self.settings = settings or get_settings()
        self._methods: dict[str, MethodHandler] = {
            "initialize": self.handle_initialize,
            "initialized": self.handle_initialized,
            "notifications/initialized": self.handle_initialized,
            "ping": self.handle_ping,
            "tools/list": self.handle_tools_list,
            "tools/call": self.handle_tools_call,
            "shutdown": self.handle_shutdown,
        }

    # -------------------------------------------------------------------------
    # Method handlers
    # -------------------------------------------------------------------------

    async def handle_initialize(self, params: dict[str, Any] | None) -> dict[str, Any]:
        """Handle the initialize request."""
        client = (params or {}).get("clientInfo")
        if isinstance(client, dict):
            logger.info(f"Initialize from client {client.get('name')} {client.get('version')}")

        result = InitializeResult(
            protocolVersion=self.settings.protocol_version,
            capabilities=Capabilities(),
            serverInfo=ServerInfo(
                name=self.settings.server_name,
                version=self.settings.server_version,
            ),
        )
        return result.model_dump()

    async def handle_initialized(self, params: dict[str, Any] | None) -> None:
        """Handle the initialized notification."""
        logger.info("Client confirmed initialization")
        return None

    async def handle_ping(self, params: dict[str, Any] | None) -> dict[str, Any]:
        """Handle the ping request."""
        return {"status": "ok"}

    async def handle_shutdown(self, params: dict[str, Any] | None) -> None:
        """Handle the shutdown request; stopping the process is up to the transport."""
        logger.info("Shutdown requested")
        return None

    async def handle_tools_list(self, params: dict[str, Any] | None) -> dict[str, Any]:
        """Handle the tools/list request."""
        tools = [tool.to_mcp() for tool in self.registry.list_tools()]
        return ToolsListResult(tools=tools).model_dump()

    async def handle_tools_call(self, params: dict[str, Any] | None) -> dict[str, Any]:
        """
        Handle the tools/call request.

        Unknown tools and invalid arguments propagate as RpcError. Anything
        that goes wrong while the tool runs comes back as a successful
        response whose result has isError set.
        """
        name = as_string((params or {}).get("name"))
        if name is None:
            raise RpcError.invalid_params("Missing tool name")

        arguments = self.handler.extract_tool_arguments(params)

        logger.info(f"Executing tool: {name}")
        start = time.perf_counter()

        try:
            outcome = await self.registry.execute(name, arguments)
        except RpcError as e:
            logger.warning(f"Tool {name} rejected after {_elapsed_ms(start):.1f}ms: {e.message}")
            raise
        except Exception as e:
            logger.exception(f"Tool {name} raised after {_elapsed_ms(start):.1f}ms")
            outcome = ToolFailure(AppError(ErrorCode.OPERATION_FAILED, str(e) or type(e).__name__))

        if isinstance(outcome, ToolFailure):
            logger.error(
                f"Tool {name} failed after {_elapsed_ms(start):.1f}ms: {outcome.error.message}"
            )
            return ToolCallResult.error(outcome.error.display_text).model_dump()

        logger.info(f"Tool {name} completed in {_elapsed_ms(start):.1f}ms")
        return outcome.result.model_dump()

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    async def dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Dispatch one parsed request and build its response."""
        start = time.perf_counter()
        logger.debug(f"Request: {request.method} (id: {request.id!r})")

        method_handler = self._methods.get(request.method)
        try:
            if method_handler is None:
                raise RpcError.method_not_found(request.method)
            result = await method_handler(request.params)
            response: JsonRpcResponse = self.handler.build_success(result, request.id)
        except RpcError as e:
            response = self.handler.build_error(e, request.id)
        except Exception as e:
            logger.exception(f"Error handling method {request.method}")
            response = self.handler.build_error(RpcError.internal_error(str(e)), request.id)

        logger.debug(f"Response: {request.method} completed in {_elapsed_ms(start):.1f}ms")
        return response

    async def handle(self, raw_data: str | bytes) -> bytes:
        """
        Handle a raw JSON-RPC message end-to-end.

        Returns the serialized response, or b"" for a lone notification. A
        batch made only of notifications still yields "[]".
        """
        try:
            if self.handler.is_batch(raw_data):
                requests = self.handler.parse_batch(raw_data)
                responses: list[JsonRpcResponse] = []
                for request in requests:
                    response = await self.dispatch(request)
                    if not request.is_notification:
                        responses.append(response)
                return self.handler.serialize(responses)

            request = self.handler.parse_request(raw_data)
            response = await self.dispatch(request)
            if request.is_notification:
                return b""
            return self.handler.serialize(response)

        except RpcError as e:
            # The id cannot be recovered from input that failed to parse
            return self.handler.serialize(self.handler.build_error(e, None))
        except Exception as e:
            logger.exception("Unexpected error handling message")
            return self.handler.serialize(
                self.handler.build_error(RpcError.internal_error(str(e)), None)
            )
