"""Pytest configuration and fixtures."""

from typing import Any

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport

from omnioutliner_mcp.config.loader import get_settings
from omnioutliner_mcp.main import app
from omnioutliner_mcp.mcp.jsonrpc import JsonRpcHandler
from omnioutliner_mcp.mcp.registry import ToolRegistry
from omnioutliner_mcp.mcp.router import MCPRouter


class FakeExecutor:
    """
    Stands in for OutlinerBridge.

    Records every script it is given and answers with queued results; an
    AppError (or any exception) in the queue is raised instead of returned.
    """

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.scripts: list[str] = []

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    async def execute(self, script: str) -> dict[str, Any]:
        self.scripts.append(script)
        response = self.responses.pop(0) if self.responses else {"success": True}
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def settings():
    """Get application settings."""
    return get_settings()


@pytest.fixture
def executor():
    """Fake script executor with an empty response queue."""
    return FakeExecutor()


@pytest.fixture
def registry(executor):
    """A registry with every tool group registered against the fake executor."""
    registry = ToolRegistry()
    registry.load_providers(["query", "modify", "synthesis"], executor)
    return registry


@pytest.fixture
def empty_registry():
    """A registry with no tools."""
    return ToolRegistry()


@pytest.fixture
def handler():
    return JsonRpcHandler()


@pytest.fixture
def router(registry, settings):
    return MCPRouter(registry, settings=settings)


@pytest.fixture
def client(router):
    """Synchronous test client for FastAPI app, wired to the fake executor."""
    app.state.router = router
    with TestClient(app) as client:
        yield client
    app.state.router = None


@pytest.fixture
async def async_client(router):
    """Async test client for FastAPI app."""
    app.state.router = router
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.state.router = None


@pytest.fixture
def sample_jsonrpc_request():
    """Sample JSON-RPC request factory."""
    def _make_request(method: str, params: dict = None, id: int = 1):
        return {
            "jsonrpc": "2.0",
            "id": id,
            "method": method,
            "params": params or {},
        }
    return _make_request
