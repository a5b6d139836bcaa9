"""Pydantic models for MCP JSON-RPC 2.0 protocol."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from omnioutliner_mcp.mcp.values import JsonValue

JSONRPC_VERSION = "2.0"

# Request ids are strings or integers; null/absent marks a notification.
RequestId = StrictInt | StrictStr | None


# =============================================================================
# JSON-RPC 2.0 Base Models
# =============================================================================


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request object."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    jsonrpc: Literal["2.0"]
    method: StrictStr
    params: dict[str, Any] | None = None
    id: RequestId = None

    @property
    def has_id(self) -> bool:
        """Whether the id key was present at all (it may still be null)."""
        return "id" in self.model_fields_set

    @property
    def is_notification(self) -> bool:
        """Absent and null ids both mean no response is expected."""
        return self.id is None


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def to_wire(self) -> dict[str, Any]:
        """Wire form; data is omitted when there is none."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class SuccessResponse(BaseModel):
    """JSON-RPC 2.0 response carrying a result (which may be null)."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    result: Any = None
    id: int | str | None = None

    def to_wire(self) -> dict[str, Any]:
        """Wire form, keys in JSON-RPC order."""
        return {"jsonrpc": self.jsonrpc, "result": self.result, "id": self.id}


class ErrorResponse(BaseModel):
    """JSON-RPC 2.0 response carrying an error."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    error: JsonRpcError
    id: int | str | None = None

    def to_wire(self) -> dict[str, Any]:
        """Wire form, keys in JSON-RPC order."""
        return {"jsonrpc": self.jsonrpc, "error": self.error.to_wire(), "id": self.id}


# A response is one or the other; there is no model holding both fields.
JsonRpcResponse = SuccessResponse | ErrorResponse


# =============================================================================
# MCP Content Types
# =============================================================================


class TextContent(BaseModel):
    """Text content returned by tools."""

    type: Literal["text"] = "text"
    text: str


class ImageContent(BaseModel):
    """Image content returned by tools (base64 encoded)."""

    type: Literal["image"] = "image"
    data: str  # base64 encoded
    mimeType: str


Content = Annotated[TextContent | ImageContent, Field(discriminator="type")]


# =============================================================================
# MCP Tool Models
# =============================================================================

PropertyType = Literal["string", "integer", "number", "boolean", "array", "object"]


class PropertySchema(BaseModel):
    """A single tool parameter (JSON Schema subset)."""

    type: PropertyType
    description: str | None = None
    enum: list[str] | None = None
    default: JsonValue | None = None
    minimum: int | None = None
    maximum: int | None = None

    def to_json_schema(self) -> dict[str, Any]:
        """Flatten into plain JSON Schema keys, leaving out anything unset."""
        schema: dict[str, Any] = {"type": self.type}
        if self.description is not None:
            schema["description"] = self.description
        if self.enum:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self.default
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


class InputSchema(BaseModel):
    """Tool input schema; always an object at the top level."""

    type: Literal["object"] = "object"
    properties: dict[str, PropertySchema] | None = None
    required: list[str] | None = None

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {
                name: prop.to_json_schema()
                for name, prop in (self.properties or {}).items()
            },
        }
        if self.required:
            schema["required"] = list(self.required)
        return schema


class Tool(BaseModel):
    """MCP tool definition."""

    name: str = Field(..., description="Tool name (lowercase with underscores)")
    description: str = Field(..., description="Human-readable description")
    inputSchema: InputSchema = Field(default_factory=InputSchema)

    def to_mcp(self) -> dict[str, Any]:
        """Shape used in tools/list responses."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.inputSchema.to_json_schema(),
        }


class ToolCallResult(BaseModel):
    """Result of a tool call."""

    content: list[Content]
    isError: bool = False

    @classmethod
    def text(cls, text: str) -> "ToolCallResult":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def error(cls, message: str) -> "ToolCallResult":
        return cls(content=[TextContent(text=message)], isError=True)


# =============================================================================
# MCP Protocol Models
# =============================================================================


class ServerInfo(BaseModel):
    """Server information returned during initialization."""

    name: str
    version: str


class Capabilities(BaseModel):
    """Server capabilities."""

    tools: dict[str, Any] = Field(default_factory=lambda: {"listChanged": False})


class InitializeResult(BaseModel):
    """Result of initialize request."""

    protocolVersion: str
    capabilities: Capabilities
    serverInfo: ServerInfo


class ToolsListResult(BaseModel):
    """Result of tools/list request."""

    tools: list[dict[str, Any]]
