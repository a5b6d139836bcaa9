"""JSON-RPC 2.0 error codes, protocol errors and application errors."""

from enum import Enum
from typing import Any

from omnioutliner_mcp.mcp.models import JsonRpcError

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700  # Invalid JSON was received
INVALID_REQUEST = -32600  # The JSON sent is not a valid Request object
METHOD_NOT_FOUND = -32601  # The method does not exist / is not available
INVALID_PARAMS = -32602  # Invalid method parameter(s)
INTERNAL_ERROR = -32603  # Internal JSON-RPC error

# Custom error codes (server-defined, must be between -32000 and -32099)
TOOL_EXECUTION_ERROR = -32000  # Tool execution failed


def error_message(code: int) -> str:
    """Get the standard message for a JSON-RPC error code."""
    messages = {
        PARSE_ERROR: "Parse error",
        INVALID_REQUEST: "Invalid Request",
        METHOD_NOT_FOUND: "Method not found",
        INVALID_PARAMS: "Invalid params",
        INTERNAL_ERROR: "Internal error",
        TOOL_EXECUTION_ERROR: "Tool execution error",
    }
    return messages.get(code, "Unknown error")


def make_error_data(code: int, message: str | None = None, data: Any = None) -> dict[str, Any]:
    """Create an error object for JSON-RPC response."""
    error: dict[str, Any] = {
        "code": code,
        "message": message or error_message(code),
    }
    if data is not None:
        error["data"] = data
    return error


# =============================================================================
# Protocol-level errors
# =============================================================================


class RpcError(Exception):
    """A failure that surfaces as a JSON-RPC error object."""

    def __init__(self, code: int, message: str | None = None, data: Any = None):
        self.code = code
        self.message = message or error_message(code)
        self.data = data
        super().__init__(self.message)

    def to_model(self) -> JsonRpcError:
        return JsonRpcError(**make_error_data(self.code, self.message, self.data))

    @classmethod
    def parse_error(cls, detail: str | None = None) -> "RpcError":
        message = f"Invalid JSON: {detail}" if detail else None
        return cls(PARSE_ERROR, message)

    @classmethod
    def invalid_request(cls, detail: str | None = None) -> "RpcError":
        message = f"Invalid Request: {detail}" if detail else None
        return cls(INVALID_REQUEST, message)

    @classmethod
    def method_not_found(cls, method: str) -> "RpcError":
        return cls(METHOD_NOT_FOUND, f"Method not found: {method}")

    @classmethod
    def invalid_params(cls, detail: str | None = None) -> "RpcError":
        return cls(INVALID_PARAMS, detail)

    @classmethod
    def internal_error(cls, detail: str | None = None) -> "RpcError":
        message = f"Internal error: {detail}" if detail else None
        return cls(INTERNAL_ERROR, message)

    @classmethod
    def tool_error(cls, message: str, data: Any = None) -> "RpcError":
        return cls(TOOL_EXECUTION_ERROR, message, data)

    def __repr__(self) -> str:
        return f"RpcError(code={self.code}, message={self.message!r})"


# =============================================================================
# Application-level errors
# =============================================================================


class ErrorCode(str, Enum):
    """Machine-readable error codes for OmniOutliner operations."""

    APP_NOT_RUNNING = "app_not_running"
    NO_DOCUMENT = "no_document"
    ROW_NOT_FOUND = "row_not_found"
    INVALID_LOCATION = "invalid_location"
    PERMISSION_DENIED = "permission_denied"
    PRO_REQUIRED = "pro_required"
    DOCUMENT_LOCKED = "document_locked"
    OPERATION_FAILED = "operation_failed"
    SERVER_START_FAILED = "server_start_failed"
    INVALID_INPUT = "invalid_input"

    @classmethod
    def from_value(cls, value: Any) -> "ErrorCode":
        """Map a code string from a script result; unknown codes become operation_failed."""
        try:
            return cls(value)
        except ValueError:
            return cls.OPERATION_FAILED


class AppError(Exception):
    """
    A failure inside a tool call, carrying user-facing guidance.

    The router reports these as tool results flagged with isError rather than
    as JSON-RPC errors.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str | None = None,
        technical_detail: str | None = None,
    ):
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.technical_detail = technical_detail
        super().__init__(message)

    @property
    def display_text(self) -> str:
        """Message followed by the suggestion, if there is one."""
        if self.suggestion:
            return f"{self.message} {self.suggestion}"
        return self.message

    def to_response(self) -> dict[str, Any]:
        """Convert to a dictionary suitable for a JSON response."""
        response: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.suggestion is not None:
            response["suggestion"] = self.suggestion
        if self.technical_detail is not None:
            response["technicalDetail"] = self.technical_detail
        return response

    def to_rpc_error(self) -> RpcError:
        """Protocol-level form, for when the failure must be a JSON-RPC error."""
        return RpcError.tool_error(
            self.message,
            data={
                "code": self.code.value,
                "suggestion": self.suggestion,
                "technicalDetail": self.technical_detail,
            },
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AppError):
            return NotImplemented
        return self.to_response() == other.to_response()

    def __hash__(self) -> int:
        return hash((self.code, self.message, self.suggestion, self.technical_detail))

    def __repr__(self) -> str:
        return f"AppError(code={self.code.value!r}, message={self.message!r})"

    # -------------------------------------------------------------------------
    # Canonical errors
    # -------------------------------------------------------------------------

    @classmethod
    def app_not_running(cls) -> "AppError":
        return cls(
            ErrorCode.APP_NOT_RUNNING,
            "OmniOutliner is not running.",
            "Please open OmniOutliner to use this feature.",
        )

    @classmethod
    def no_document(cls) -> "AppError":
        return cls(
            ErrorCode.NO_DOCUMENT,
            "No document is open in OmniOutliner.",
            "Please open a document in OmniOutliner.",
        )

    @classmethod
    def row_not_found(cls, row_id: str) -> "AppError":
        return cls(
            ErrorCode.ROW_NOT_FOUND,
            f"The row '{row_id}' could not be found.",
            "The row may have been deleted or moved. Try refreshing the outline.",
        )

    @classmethod
    def invalid_location(cls, detail: str | None = None) -> "AppError":
        return cls(
            ErrorCode.INVALID_LOCATION,
            "Cannot place the row at the specified location.",
            "Choose a different parent row or position.",
            detail,
        )

    @classmethod
    def permission_denied(cls) -> "AppError":
        return cls(
            ErrorCode.PERMISSION_DENIED,
            "OmniOutliner MCP needs permission to control OmniOutliner.",
            "Go to System Settings > Privacy & Security > Automation and enable "
            "OmniOutliner for this app.",
        )

    @classmethod
    def pro_required(cls) -> "AppError":
        return cls(
            ErrorCode.PRO_REQUIRED,
            "OmniOutliner Pro is required.",
            "Scripting is a Pro-only feature. Please upgrade to OmniOutliner Pro, "
            "or subscribe to OmniOutliner or Omni Pro.",
        )

    @classmethod
    def document_locked(cls) -> "AppError":
        return cls(
            ErrorCode.DOCUMENT_LOCKED,
            "The document is read-only or locked.",
            "Unlock the document in OmniOutliner or open a different document.",
        )

    @classmethod
    def operation_failed(cls, detail: str | None = None) -> "AppError":
        return cls(
            ErrorCode.OPERATION_FAILED,
            "The operation could not be completed.",
            "Please try again. If the problem persists, restart OmniOutliner.",
            detail,
        )

    @classmethod
    def server_start_failed(cls, port: int, detail: str | None = None) -> "AppError":
        return cls(
            ErrorCode.SERVER_START_FAILED,
            f"Could not start the MCP server on port {port}.",
            "Another application may be using this port. Try changing the port setting.",
            detail,
        )

    @classmethod
    def invalid_input(cls, detail: str) -> "AppError":
        return cls(
            ErrorCode.INVALID_INPUT,
            "Invalid input provided.",
            "Please check your request and try again.",
            detail,
        )
