"""Tests for tool registration, argument validation and execution outcomes."""

import pytest

from omnioutliner_mcp.mcp.errors import INVALID_PARAMS, METHOD_NOT_FOUND, AppError, ErrorCode, RpcError
from omnioutliner_mcp.mcp.models import InputSchema, PropertySchema, ToolCallResult
from omnioutliner_mcp.mcp.registry import (
    MAX_STRING_LENGTH,
    ToolFailure,
    ToolRegistry,
    ToolSuccess,
    sanitize_value,
    validate_arguments,
)


class CountingHandler:
    """Tool handler that records how often and with what it was called."""

    def __init__(self, result=None, error: Exception | None = None):
        self.calls: list[dict] = []
        self.result = result or ToolCallResult.text("done")
        self.error = error

    async def __call__(self, arguments: dict) -> ToolCallResult:
        self.calls.append(arguments)
        if self.error is not None:
            raise self.error
        return self.result


SEARCH_SCHEMA = {
    "type": "object",
    "properties": {
        "query": {"type": "string", "description": "Text to search for"},
        "searchIn": {"type": "string", "enum": ["all", "topics", "notes"]},
        "maxResults": {"type": "integer", "minimum": 1, "maximum": 100},
        "caseSensitive": {"type": "boolean"},
        "tags": {"type": "array"},
        "meta": {"type": "object"},
        "weight": {"type": "number"},
    },
    "required": ["query"],
}


@pytest.fixture
def counting_handler():
    return CountingHandler()


@pytest.fixture
def search_registry(empty_registry: ToolRegistry, counting_handler):
    empty_registry.register("search", "Search the outline", SEARCH_SCHEMA, counting_handler)
    return empty_registry


class TestRegistration:
    """Tests for registering and looking up tools."""

    def test_register_and_get(self, search_registry: ToolRegistry):
        entry = search_registry.get("search")
        assert entry is not None
        assert entry.name == "search"
        assert entry.input_schema.required == ["query"]
        assert isinstance(entry.input_schema.properties["query"], PropertySchema)

    def test_register_without_schema(self, empty_registry: ToolRegistry, counting_handler):
        empty_registry.register("noop", "Does nothing", None, counting_handler)
        assert empty_registry.get("noop").input_schema == InputSchema()

    def test_last_registration_wins(self, empty_registry: ToolRegistry):
        first = CountingHandler(ToolCallResult.text("first"))
        second = CountingHandler(ToolCallResult.text("second"))
        empty_registry.register("dup", "one", None, first)
        empty_registry.register("dup", "two", None, second)

        assert empty_registry.tool_count == 1
        assert empty_registry.get("dup").tool.description == "two"
        assert empty_registry.get("dup").handler is second

    def test_unregister(self, search_registry: ToolRegistry):
        assert search_registry.unregister("search") is True
        assert search_registry.get("search") is None
        assert search_registry.unregister("search") is False

    def test_list_tools_is_a_snapshot(self, search_registry: ToolRegistry, counting_handler):
        tools = search_registry.list_tools()
        search_registry.register("other", "Other", None, counting_handler)
        assert [t.name for t in tools] == ["search"]
        assert {t.name for t in search_registry.list_tools()} == {"search", "other"}

    def test_load_provider_registers_group(self, empty_registry: ToolRegistry, executor):
        assert empty_registry.load_provider("query", executor) is True
        assert empty_registry.get("search_outline") is not None
        assert empty_registry.provider_count == 1

        # Loading the same group again is a no-op
        assert empty_registry.load_provider("query", executor) is True
        assert empty_registry.provider_count == 1

    def test_load_unknown_provider(self, empty_registry: ToolRegistry, executor):
        results = empty_registry.load_providers(["modify", "does_not_exist"], executor)
        assert results == {"modify": True, "does_not_exist": False}
        assert empty_registry.provider_count == 1


class TestValidation:
    """Tests for the validate-then-sanitize pipeline."""

    def test_missing_required_parameter(self):
        schema = InputSchema.model_validate(SEARCH_SCHEMA)
        with pytest.raises(RpcError) as exc_info:
            validate_arguments(schema, {"searchIn": "all"})
        assert exc_info.value.code == INVALID_PARAMS
        assert exc_info.value.message == "Missing required parameter: query"

    def test_none_arguments_are_empty(self):
        schema = InputSchema.model_validate(SEARCH_SCHEMA)
        with pytest.raises(RpcError, match="query"):
            validate_arguments(schema, None)

    def test_unknown_keys_are_dropped(self):
        schema = InputSchema.model_validate(
            {"type": "object", "properties": {"known": {"type": "string"}}}
        )
        assert validate_arguments(schema, {"known": "a", "unknown": "b"}) == {"known": "a"}

    def test_tool_without_properties_forwards_nothing(self):
        assert validate_arguments(InputSchema(), {"anything": 1}) == {}

    @pytest.mark.parametrize(
        "key,value,expected",
        [
            ("query", 5, "string"),
            ("maxResults", "10", "integer"),
            ("maxResults", True, "integer"),
            ("caseSensitive", "true", "boolean"),
            ("tags", "a,b", "array"),
            ("meta", [1], "object"),
            ("weight", False, "number"),
        ],
    )
    def test_type_mismatch(self, key, value, expected):
        schema = InputSchema.model_validate(SEARCH_SCHEMA)
        with pytest.raises(RpcError) as exc_info:
            validate_arguments(schema, {"query": "q", key: value})
        assert exc_info.value.code == INVALID_PARAMS
        assert exc_info.value.message == (
            f"Invalid type for parameter '{key}': expected {expected}"
        )

    def test_numbers_accept_int_and_float(self):
        schema = InputSchema.model_validate(SEARCH_SCHEMA)
        result = validate_arguments(schema, {"query": "q", "maxResults": 10.0, "weight": 3})
        assert result["maxResults"] == 10.0
        assert result["weight"] == 3

    def test_enum_violation(self):
        schema = InputSchema.model_validate(SEARCH_SCHEMA)
        with pytest.raises(RpcError) as exc_info:
            validate_arguments(schema, {"query": "q", "searchIn": "titles"})
        assert exc_info.value.message == (
            "Invalid value for 'searchIn': must be one of all, topics, notes"
        )

    def test_minimum_and_maximum(self):
        schema = InputSchema.model_validate(SEARCH_SCHEMA)
        with pytest.raises(RpcError, match="must be >= 1"):
            validate_arguments(schema, {"query": "q", "maxResults": 0})
        with pytest.raises(RpcError, match="must be <= 100"):
            validate_arguments(schema, {"query": "q", "maxResults": 101})
        assert validate_arguments(schema, {"query": "q", "maxResults": 100})["maxResults"] == 100

    def test_strings_are_sanitized(self):
        schema = InputSchema.model_validate(SEARCH_SCHEMA)
        long_text = "x" * (MAX_STRING_LENGTH + 10)
        result = validate_arguments(schema, {"query": "a\x00b", "tags": [long_text, {"k": "c\x00"}]})
        assert result["query"] == "ab"
        assert len(result["tags"][0]) == MAX_STRING_LENGTH
        assert result["tags"][1] == {"k": "c"}

    def test_sanitize_leaves_non_strings(self):
        assert sanitize_value({"n": 1, "b": True, "z": None}) == {"n": 1, "b": True, "z": None}


class TestExecute:
    """Tests for execute() outcomes."""

    async def test_success(self, search_registry: ToolRegistry, counting_handler):
        outcome = await search_registry.execute("search", {"query": "milk", "extra": 1})
        assert isinstance(outcome, ToolSuccess)
        assert outcome.result.content[0].text == "done"
        assert counting_handler.calls == [{"query": "milk"}]

    async def test_unknown_tool(self, search_registry: ToolRegistry):
        with pytest.raises(RpcError) as exc_info:
            await search_registry.execute("nope", {})
        assert exc_info.value.code == METHOD_NOT_FOUND

    async def test_handler_not_called_when_validation_fails(
        self, search_registry: ToolRegistry, counting_handler
    ):
        with pytest.raises(RpcError) as exc_info:
            await search_registry.execute("search", {})
        assert exc_info.value.code == INVALID_PARAMS
        assert "query" in exc_info.value.message
        assert counting_handler.calls == []

    async def test_app_error_becomes_failure(self, empty_registry: ToolRegistry):
        error = AppError.row_not_found("r1")
        empty_registry.register("t", "t", None, CountingHandler(error=error))
        outcome = await empty_registry.execute("t", None)
        assert isinstance(outcome, ToolFailure)
        assert outcome.error == error

    async def test_unexpected_exception_becomes_failure(self, empty_registry: ToolRegistry):
        empty_registry.register("t", "t", None, CountingHandler(error=RuntimeError("boom")))
        outcome = await empty_registry.execute("t", {})
        assert isinstance(outcome, ToolFailure)
        assert outcome.error.code == ErrorCode.OPERATION_FAILED
        assert outcome.error.message == "boom"

    async def test_rpc_error_from_handler_propagates(self, empty_registry: ToolRegistry):
        empty_registry.register(
            "t", "t", None, CountingHandler(error=RpcError.invalid_params("bad"))
        )
        with pytest.raises(RpcError) as exc_info:
            await empty_registry.execute("t", {})
        assert exc_info.value.message == "bad"
