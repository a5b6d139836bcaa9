"""Tests for JSON-RPC envelope parsing, response building and parameter helpers."""

import json

import pytest

from omnioutliner_mcp.mcp.errors import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    PARSE_ERROR,
    TOOL_EXECUTION_ERROR,
    AppError,
    RpcError,
)
from omnioutliner_mcp.mcp.jsonrpc import JsonRpcHandler
from omnioutliner_mcp.mcp.models import ErrorResponse, SuccessResponse


class TestJsonRpcParsing:
    """Tests for JSON-RPC message parsing."""

    def test_parses_valid_request(self, handler: JsonRpcHandler):
        request = handler.parse_request(b'{"jsonrpc":"2.0","method":"ping","id":1}')
        assert request.method == "ping"
        assert request.id == 1
        assert request.params is None
        assert not request.is_notification

    def test_string_id(self, handler: JsonRpcHandler):
        request = handler.parse_request('{"jsonrpc":"2.0","method":"ping","id":"abc"}')
        assert request.id == "abc"

    def test_missing_id_is_notification(self, handler: JsonRpcHandler):
        request = handler.parse_request('{"jsonrpc":"2.0","method":"initialized"}')
        assert request.is_notification
        assert not request.has_id

    def test_null_id_is_notification(self, handler: JsonRpcHandler):
        request = handler.parse_request('{"jsonrpc":"2.0","method":"initialized","id":null}')
        assert request.is_notification
        assert request.has_id

    def test_invalid_json_is_parse_error(self, handler: JsonRpcHandler):
        with pytest.raises(RpcError) as exc_info:
            handler.parse_request(b"not valid json{")
        assert exc_info.value.code == PARSE_ERROR
        assert "invalid json" in exc_info.value.message.lower()

    @pytest.mark.parametrize(
        "payload",
        [
            {"id": 1, "method": "ping"},
            {"jsonrpc": "1.0", "id": 1, "method": "ping"},
            {"jsonrpc": "2.0", "id": 1},
            {"jsonrpc": "2.0", "id": 1, "method": 5},
            {"jsonrpc": "2.0", "id": 1.5, "method": "ping"},
            {"jsonrpc": "2.0", "id": True, "method": "ping"},
            {"jsonrpc": "2.0", "id": 1, "method": "ping", "params": [1, 2]},
            [],
            "just a string",
        ],
    )
    def test_invalid_request(self, handler: JsonRpcHandler, payload):
        """Valid JSON that is not a valid 2.0 request object."""
        with pytest.raises(RpcError) as exc_info:
            handler.parse_request(json.dumps(payload))
        assert exc_info.value.code == INVALID_REQUEST

    def test_unknown_fields_are_ignored(self, handler: JsonRpcHandler):
        request = handler.parse_request('{"jsonrpc":"2.0","method":"ping","id":1,"extra":true}')
        assert request.method == "ping"


class TestBatchParsing:
    """Tests for batch detection and parsing."""

    def test_is_batch(self, handler: JsonRpcHandler):
        assert handler.is_batch(b'  \n [{"jsonrpc":"2.0"}]')
        assert handler.is_batch("[]")
        assert not handler.is_batch(b'{"jsonrpc":"2.0"}')
        assert not handler.is_batch(b"")

    def test_parse_batch_preserves_order(self, handler: JsonRpcHandler):
        requests = handler.parse_batch(
            b'[{"jsonrpc":"2.0","method":"a","id":1},{"jsonrpc":"2.0","method":"b","id":2}]'
        )
        assert [r.method for r in requests] == ["a", "b"]

    def test_empty_batch(self, handler: JsonRpcHandler):
        assert handler.parse_batch(b"[]") == []

    def test_one_invalid_member_rejects_batch(self, handler: JsonRpcHandler):
        with pytest.raises(RpcError) as exc_info:
            handler.parse_batch(
                b'[{"jsonrpc":"2.0","method":"a","id":1},{"jsonrpc":"1.0","method":"b","id":2}]'
            )
        assert exc_info.value.code == INVALID_REQUEST

    def test_malformed_batch_is_parse_error(self, handler: JsonRpcHandler):
        with pytest.raises(RpcError) as exc_info:
            handler.parse_batch(b'[{"jsonrpc":"2.0",')
        assert exc_info.value.code == PARSE_ERROR


class TestResponseBuilding:
    """Tests for response construction and serialization."""

    def test_success_has_no_error_key(self, handler: JsonRpcHandler):
        response = handler.build_success({"status": "ok"}, 1)
        assert isinstance(response, SuccessResponse)
        assert response.to_wire() == {"jsonrpc": "2.0", "result": {"status": "ok"}, "id": 1}

    def test_null_result_is_kept(self, handler: JsonRpcHandler):
        assert handler.build_success(None, "a").to_wire() == {
            "jsonrpc": "2.0",
            "result": None,
            "id": "a",
        }

    def test_error_has_no_result_key(self, handler: JsonRpcHandler):
        response = handler.build_error(RpcError.method_not_found("bogus"), "x")
        assert isinstance(response, ErrorResponse)
        assert response.to_wire() == {
            "jsonrpc": "2.0",
            "error": {"code": -32601, "message": "Method not found: bogus"},
            "id": "x",
        }

    def test_app_error_response(self, handler: JsonRpcHandler):
        response = handler.build_app_error(AppError.row_not_found("r1"), 3)
        data = response.to_wire()
        assert data["error"]["code"] == TOOL_EXECUTION_ERROR
        assert data["error"]["message"] == "The row 'r1' could not be found."
        assert data["error"]["data"]["code"] == "row_not_found"

    def test_serialize_single(self, handler: JsonRpcHandler):
        output = handler.serialize(handler.build_success({"status": "ok"}, 1))
        assert json.loads(output) == {"jsonrpc": "2.0", "result": {"status": "ok"}, "id": 1}

    def test_serialize_list(self, handler: JsonRpcHandler):
        output = handler.serialize(
            [handler.build_success(1, 1), handler.build_error(RpcError.invalid_params("x"), 2)]
        )
        data = json.loads(output)
        assert [item["id"] for item in data] == [1, 2]
        assert "error" in data[1] and "result" not in data[1]

    def test_serialize_empty_list(self, handler: JsonRpcHandler):
        assert json.loads(handler.serialize([])) == []

    def test_model_dump_honours_pydantic_options(self, handler: JsonRpcHandler):
        """Wire shaping lives in to_wire(); model_dump keeps its usual options."""
        error = handler.build_error(RpcError.method_not_found("bogus"), 1)
        assert error.model_dump(exclude_none=True) == {
            "jsonrpc": "2.0",
            "error": {"code": -32601, "message": "Method not found: bogus"},
            "id": 1,
        }
        assert handler.build_success({"a": 1}, 1).model_dump(include={"id"}) == {"id": 1}


class TestParameterHelpers:
    """Tests for the typed parameter helpers."""

    def test_required_string(self, handler: JsonRpcHandler):
        assert handler.required_string("name", {"name": "x"}) == "x"

    def test_required_string_missing(self, handler: JsonRpcHandler):
        with pytest.raises(RpcError) as exc_info:
            handler.required_string("name", {})
        assert exc_info.value.code == INVALID_PARAMS
        assert exc_info.value.message == "Missing required parameter: name"

    def test_required_with_no_params(self, handler: JsonRpcHandler):
        with pytest.raises(RpcError) as exc_info:
            handler.required_int("count", None)
        assert exc_info.value.message == "Missing required parameters"

    def test_required_wrong_type(self, handler: JsonRpcHandler):
        with pytest.raises(RpcError):
            handler.required_bool("flag", {"flag": "yes"})
        with pytest.raises(RpcError):
            handler.required_int("count", {"count": True})

    def test_optional_helpers(self, handler: JsonRpcHandler):
        assert handler.optional_string("name", None) is None
        assert handler.optional_string("name", {"name": 3}) is None
        assert handler.optional_int("count", {}, 10) == 10
        assert handler.optional_int("count", {"count": 4}, 10) == 4
        assert handler.optional_bool("flag", {"flag": False}, True) is False
        assert handler.optional_bool("flag", None, True) is True

    def test_extract_tool_arguments(self, handler: JsonRpcHandler):
        assert handler.extract_tool_arguments({"name": "t", "arguments": {"a": 1}}) == {"a": 1}
        assert handler.extract_tool_arguments({"name": "t"}) is None
        assert handler.extract_tool_arguments({"name": "t", "arguments": [1]}) is None
        assert handler.extract_tool_arguments(None) is None
