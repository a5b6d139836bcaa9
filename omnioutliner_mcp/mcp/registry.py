"""Tool registry for managing MCP tools."""

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from omnioutliner_mcp.mcp.errors import AppError, ErrorCode, RpcError
from omnioutliner_mcp.mcp.models import InputSchema, PropertySchema, Tool, ToolCallResult

logger = logging.getLogger(__name__)

# Type alias for tool handlers
ToolHandler = Callable[[dict[str, Any]], Awaitable[ToolCallResult]]

# Upper bound for any string argument forwarded to a handler
MAX_STRING_LENGTH = 65535

PROVIDER_PACKAGE = "omnioutliner_mcp.tools"


@dataclass(frozen=True)
class ToolSuccess:
    """The tool ran and produced a result."""

    result: ToolCallResult


@dataclass(frozen=True)
class ToolFailure:
    """The tool was accepted but failed while running."""

    error: AppError


ToolOutcome = ToolSuccess | ToolFailure


class RegisteredTool:
    """A registered tool with its metadata and handler."""

    def __init__(self, tool: Tool, handler: ToolHandler):
        self.tool = tool
        self.handler = handler

    @property
    def name(self) -> str:
        return self.tool.name

    @property
    def input_schema(self) -> InputSchema:
        return self.tool.inputSchema


class ToolRegistry:
    """
    Registry for MCP tools with plugin-style provider loading.

    Registration is expected to finish before requests are served; after
    that the registry is only read, so execute() needs no locking.
    """

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}
        self._providers: set[str] = set()

    def register(
        self,
        name: str,
        description: str,
        input_schema: InputSchema | dict[str, Any] | None,
        handler: ToolHandler,
    ) -> None:
        """Register a tool with the registry."""
        if input_schema is None:
            input_schema = InputSchema()
        elif isinstance(input_schema, dict):
            input_schema = InputSchema.model_validate(input_schema)
        self.register_tool(
            Tool(name=name, description=description, inputSchema=input_schema),
            handler,
        )

    def register_tool(self, tool: Tool, handler: ToolHandler) -> None:
        """Register a prebuilt tool definition. The last registration for a name wins."""
        if tool.name in self._tools:
            logger.warning(f"Tool '{tool.name}' already registered, overwriting")
        self._tools[tool.name] = RegisteredTool(tool, handler)
        logger.debug(f"Registered tool: {tool.name}")

    def unregister(self, name: str) -> bool:
        """Remove a tool; returns False if it was not registered."""
        removed = self._tools.pop(name, None)
        if removed is not None:
            logger.debug(f"Unregistered tool: {name}")
        return removed is not None

    def get(self, name: str) -> RegisteredTool | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> list[Tool]:
        """List all registered tool definitions."""
        return [entry.tool for entry in list(self._tools.values())]

    async def execute(self, name: str, arguments: dict[str, Any] | None) -> ToolOutcome:
        """
        Validate arguments and run a tool.

        Raises RpcError when the call itself is unacceptable (unknown tool,
        bad arguments). Failures raised by the handler once it is running are
        returned as ToolFailure.
        """
        entry = self.get(name)
        if entry is None:
            raise RpcError.method_not_found(name)

        sanitized = validate_arguments(entry.input_schema, arguments)

        try:
            result = await entry.handler(sanitized)
        except RpcError:
            raise
        except AppError as e:
            logger.warning(f"Tool {name} failed: {e.code.value}: {e.message}")
            return ToolFailure(e)
        except Exception as e:
            logger.exception(f"Error executing tool {name}")
            return ToolFailure(
                AppError(
                    ErrorCode.OPERATION_FAILED,
                    str(e) or type(e).__name__,
                    technical_detail=repr(e),
                )
            )
        return ToolSuccess(result)

    def load_provider(self, provider_name: str, executor: Any) -> bool:
        """
        Load a tool group module and register its tools.

        Tool groups live in omnioutliner_mcp/tools/<provider_name>/ and expose
        a register_tools(registry, executor) function.
        """
        if provider_name in self._providers:
            logger.debug(f"Provider '{provider_name}' already loaded")
            return True

        module_path = f"{PROVIDER_PACKAGE}.{provider_name}.tools"
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            logger.warning(f"Could not import provider '{provider_name}': {e}")
            return False

        if not hasattr(module, "register_tools"):
            logger.warning(f"Provider '{provider_name}' has no register_tools function")
            return False

        try:
            module.register_tools(self, executor)
        except Exception as e:
            logger.error(f"Error loading provider '{provider_name}': {e}")
            return False

        self._providers.add(provider_name)
        logger.info(f"Loaded provider: {provider_name}")
        return True

    def load_providers(self, provider_names: list[str], executor: Any) -> dict[str, bool]:
        """Load multiple providers, returning success status for each."""
        return {name: self.load_provider(name, executor) for name in provider_names}

    @property
    def tool_count(self) -> int:
        """Return the number of registered tools."""
        return len(self._tools)

    @property
    def provider_count(self) -> int:
        """Return the number of loaded providers."""
        return len(self._providers)


# =============================================================================
# Argument validation
# =============================================================================


def _matches_type(value: Any, expected: str) -> bool:
    if expected == "string":
        return isinstance(value, str)
    if expected in ("integer", "number"):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "array":
        return isinstance(value, list)
    if expected == "object":
        return isinstance(value, dict)
    return True


def sanitize_string(value: str) -> str:
    """Strip NUL bytes and cap the length."""
    value = value.replace("\x00", "")
    if len(value) > MAX_STRING_LENGTH:
        value = value[:MAX_STRING_LENGTH]
    return value


def sanitize_value(value: Any) -> Any:
    """Apply sanitize_string to every string inside a JSON value."""
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, list):
        return [sanitize_value(item) for item in value]
    if isinstance(value, dict):
        return {key: sanitize_value(item) for key, item in value.items()}
    return value


def _check_property(key: str, value: Any, prop: PropertySchema) -> None:
    if not _matches_type(value, prop.type):
        raise RpcError.invalid_params(
            f"Invalid type for parameter '{key}': expected {prop.type}"
        )

    if prop.enum and prop.type == "string" and value not in prop.enum:
        raise RpcError.invalid_params(
            f"Invalid value for '{key}': must be one of {', '.join(prop.enum)}"
        )

    if prop.type in ("integer", "number"):
        if prop.minimum is not None and value < prop.minimum:
            raise RpcError.invalid_params(f"Value for '{key}' must be >= {prop.minimum}")
        if prop.maximum is not None and value > prop.maximum:
            raise RpcError.invalid_params(f"Value for '{key}' must be <= {prop.maximum}")


def validate_arguments(
    schema: InputSchema, arguments: dict[str, Any] | None
) -> dict[str, Any]:
    """
    Validate tool arguments against a schema and return the sanitized copy.

    Only declared properties are forwarded; undeclared keys are dropped
    without error.
    """
    arguments = arguments or {}

    for param in schema.required or []:
        if param not in arguments:
            raise RpcError.invalid_params(f"Missing required parameter: {param}")

    properties = schema.properties or {}
    sanitized: dict[str, Any] = {}

    for key, value in arguments.items():
        prop = properties.get(key)
        if prop is None:
            continue
        _check_property(key, value, prop)
        sanitized[key] = sanitize_value(value)

    return sanitized
