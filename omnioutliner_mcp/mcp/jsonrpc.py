"""JSON-RPC 2.0 message parsing, response building and serialization."""

import logging
from typing import Any

from pydantic import ValidationError

from omnioutliner_mcp.mcp.errors import AppError, RpcError
from omnioutliner_mcp.mcp.models import (
    ErrorResponse,
    JsonRpcRequest,
    JsonRpcResponse,
    SuccessResponse,
)
from omnioutliner_mcp.mcp.values import (
    as_bool,
    as_int,
    as_object,
    as_string,
    parse_json,
    serialize_json,
)

logger = logging.getLogger(__name__)


def _validation_detail(error: ValidationError) -> str:
    """First validation problem, in a form short enough for an error message."""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "request"
    return f"{location}: {first.get('msg', 'invalid value')}"


class JsonRpcHandler:
    """Parse JSON-RPC 2.0 envelopes and build/serialize responses."""

    def __init__(self, pretty: bool = True):
        self.pretty = pretty

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def _load(self, raw_data: str | bytes) -> Any:
        try:
            return parse_json(raw_data)
        except ValueError as e:
            raise RpcError.parse_error(str(e)) from e

    def _to_request(self, data: Any) -> JsonRpcRequest:
        try:
            return JsonRpcRequest.model_validate(data)
        except ValidationError as e:
            raise RpcError.invalid_request(_validation_detail(e)) from e

    def parse_request(self, raw_data: str | bytes) -> JsonRpcRequest:
        """
        Parse a single JSON-RPC request from raw data.

        Raises RpcError: ParseError for malformed JSON, InvalidRequest for
        JSON that is not a valid 2.0 request object.
        """
        return self._to_request(self._load(raw_data))

    def is_batch(self, raw_data: str | bytes) -> bool:
        """Whether the payload is a JSON array (first non-whitespace byte is '[')."""
        if isinstance(raw_data, str):
            return raw_data.lstrip()[:1] == "["
        return raw_data.lstrip()[:1] == b"["

    def parse_batch(self, raw_data: str | bytes) -> list[JsonRpcRequest]:
        """Parse a batch; one invalid member invalidates the whole batch."""
        data = self._load(raw_data)
        if not isinstance(data, list):
            raise RpcError.invalid_request("batch must be a JSON array")
        return [self._to_request(item) for item in data]

    # -------------------------------------------------------------------------
    # Response building
    # -------------------------------------------------------------------------

    def build_success(self, result: Any, request_id: int | str | None) -> SuccessResponse:
        """Create a success response."""
        return SuccessResponse(result=result, id=request_id)

    def build_error(self, error: RpcError, request_id: int | str | None) -> ErrorResponse:
        """Create an error response."""
        return ErrorResponse(error=error.to_model(), id=request_id)

    def build_app_error(self, error: AppError, request_id: int | str | None) -> ErrorResponse:
        """Create an error response from an application error (code -32000)."""
        return self.build_error(error.to_rpc_error(), request_id)

    # -------------------------------------------------------------------------
    # Encoding
    # -------------------------------------------------------------------------

    def serialize(self, response: JsonRpcResponse | list[JsonRpcResponse]) -> bytes:
        """Serialize a response, or a list of them for a batch."""
        if isinstance(response, list):
            payload: Any = [item.to_wire() for item in response]
        else:
            payload = response.to_wire()
        return serialize_json(payload, pretty=self.pretty)

    # -------------------------------------------------------------------------
    # Parameter extraction
    # -------------------------------------------------------------------------

    @staticmethod
    def _require(key: str, params: dict[str, Any] | None) -> Any:
        if params is None:
            raise RpcError.invalid_params("Missing required parameters")
        return params.get(key)

    def required_string(self, key: str, params: dict[str, Any] | None) -> str:
        """Required: raises InvalidParams if absent or not a string."""
        value = as_string(self._require(key, params))
        if value is None:
            raise RpcError.invalid_params(f"Missing required parameter: {key}")
        return value

    def optional_string(self, key: str, params: dict[str, Any] | None) -> str | None:
        """Optional: None if absent or not a string."""
        return as_string((params or {}).get(key))

    def required_int(self, key: str, params: dict[str, Any] | None) -> int:
        """Required: raises InvalidParams if absent or not an integer."""
        value = as_int(self._require(key, params))
        if value is None:
            raise RpcError.invalid_params(f"Missing required parameter: {key}")
        return value

    def optional_int(self, key: str, params: dict[str, Any] | None, default: int) -> int:
        """Optional with default."""
        value = as_int((params or {}).get(key))
        return default if value is None else value

    def required_bool(self, key: str, params: dict[str, Any] | None) -> bool:
        """Required: raises InvalidParams if absent or not a boolean."""
        value = as_bool(self._require(key, params))
        if value is None:
            raise RpcError.invalid_params(f"Missing required parameter: {key}")
        return value

    def optional_bool(self, key: str, params: dict[str, Any] | None, default: bool) -> bool:
        """Optional with default."""
        value = as_bool((params or {}).get(key))
        return default if value is None else value

    def extract_tool_arguments(self, params: dict[str, Any] | None) -> dict[str, Any] | None:
        """
        Pull the nested arguments object out of tools/call params.

        Tool arguments sit one level down ({"name": ..., "arguments": {...}});
        anything other than an object is treated as no arguments.
        """
        if params is None:
            return None
        return as_object(params.get("arguments"))
