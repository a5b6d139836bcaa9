"""FastAPI MCP Server - Main application entrypoint."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, Response

from omnioutliner_mcp.config.loader import get_enabled_groups, get_settings, load_tools_config
from omnioutliner_mcp.mcp.errors import AppError
from omnioutliner_mcp.mcp.registry import ToolRegistry
from omnioutliner_mcp.mcp.router import MCPRouter
from omnioutliner_mcp.outliner.bridge import OutlinerBridge, ScriptExecutor
from omnioutliner_mcp.utils.logging import get_logger, set_request_id, setup_logging

logger = logging.getLogger(__name__)


def build_router(executor: ScriptExecutor | None = None) -> MCPRouter:
    """Create a registry with the enabled tool groups and a router over it."""
    log = get_logger("startup")
    settings = get_settings()
    executor = executor or OutlinerBridge.from_settings(settings)

    groups = get_enabled_groups(load_tools_config())
    log.info("Loading tool groups", groups=groups)

    registry = ToolRegistry()
    results = registry.load_providers(groups, executor)
    for group, success in results.items():
        if success:
            log.info("Loaded tool group", group=group)
        else:
            log.warning("Failed to load tool group", group=group)

    log.info(
        "Tool registry ready",
        tool_count=registry.tool_count,
        provider_count=registry.provider_count,
    )
    return MCPRouter(registry, settings=settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    setup_logging()
    log = get_logger("startup")

    settings = get_settings()
    log.info(
        "Starting MCP server",
        server_name=settings.server_name,
        version=settings.server_version,
        host=settings.host,
        port=settings.port,
    )

    # Tests may install their own router before startup
    if getattr(app.state, "router", None) is None:
        app.state.router = build_router()

    yield

    # Shutdown
    log.info("Shutting down MCP server")


app = FastAPI(
    title="OmniOutliner MCP Server",
    description="MCP server exposing OmniOutliner documents as tools",
    version="1.0.0",
    lifespan=lifespan,
)


# Request ID middleware
@app.middleware("http")
async def add_request_id_middleware(request: Request, call_next):
    """Add request ID to all requests."""
    request_id = request.headers.get("X-Request-ID") or set_request_id()
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def get_router(request: Request) -> MCPRouter:
    return request.app.state.router


# =============================================================================
# Health and Info Endpoints
# =============================================================================


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/")
async def root(request: Request) -> dict:
    """Root endpoint with server info."""
    settings = get_settings()
    router = get_router(request)

    return {
        "name": settings.server_name,
        "version": settings.server_version,
        "description": "MCP server for OmniOutliner",
        "endpoints": {
            "health": "/health",
            "mcp": "/mcp",
            "docs": "/docs",
        },
        "tools_available": router.registry.tool_count,
        "mcp_protocol_version": settings.protocol_version,
    }


# =============================================================================
# MCP Endpoint
# =============================================================================


async def _handle_message(request: Request) -> Response:
    body = await request.body()
    payload = await get_router(request).handle(body)

    if not payload:
        # Notification - no response body
        return Response(status_code=202)

    return Response(content=payload, media_type="application/json")


@app.post("/mcp")
async def mcp_endpoint(request: Request) -> Response:
    """
    JSON-RPC endpoint.

    Protocol and tool failures are both reported inside a 200 response; a
    lone notification gets 202 with an empty body.
    """
    return await _handle_message(request)


@app.post("/")
async def root_message(request: Request) -> Response:
    """Same as /mcp, for clients configured with the bare server URL."""
    return await _handle_message(request)


# =============================================================================
# Main Entry Point
# =============================================================================


def main() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    settings = get_settings()
    try:
        uvicorn.run(
            "omnioutliner_mcp.main:app",
            host=settings.host,
            port=settings.port,
            log_level=settings.effective_log_level.lower(),
        )
    except OSError as e:
        error = AppError.server_start_failed(settings.port, str(e))
        logger.error(error.display_text)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
