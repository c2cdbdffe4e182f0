"""Tests for ToolDispatcher and tool argument parsing."""

import asyncio
import json

import pytest

from voicetodo.tool.base import BaseTool
from voicetodo.tool.dispatcher import ToolDispatcher, parse_tool_arguments
from voicetodo.tool.executor import RetryingExecutor
from voicetodo.tool.invoker import ToolInvoker
from voicetodo.tool.permission.approval import ApprovalChannel
from voicetodo.tool.permission.gate import PermissionGate
from voicetodo.tool.permission.store import InMemoryPermissionStore


class EchoTool(BaseTool):
    def __init__(self) -> None:
        self.calls: list[dict] = []
        super().__init__()

    def get_name(self) -> str:
        return "echo"

    def get_description(self) -> str:
        return "Echo the text argument"

    def get_parameters(self) -> dict:
        return {
            "type": "object",
            "properties": {"text": {"type": "string"}},
            "required": ["text"],
        }

    async def execute(self, parameters: dict) -> str:
        self.calls.append(parameters)
        return f"echo: {parameters.get('text')}"


def _tool_call(name, arguments, call_id="call_1"):
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}


@pytest.fixture
def echo_tool():
    return EchoTool()


async def _make_dispatcher(tool, fake_sleep, allowed=("echo",)):
    gate = PermissionGate(InMemoryPermissionStore(allowed))
    await gate.init()
    invoker = ToolInvoker(
        gate, ApprovalChannel(), RetryingExecutor(max_retries=2, sleep=fake_sleep)
    )
    return ToolDispatcher([tool], invoker)


class TestParseToolArguments:
    def test_dict_passthrough(self):
        assert parse_tool_arguments({"a": 1}) == {"a": 1}

    def test_json_string(self):
        assert parse_tool_arguments('{"title": "milk"}') == {"title": "milk"}

    def test_python_literal(self):
        assert parse_tool_arguments("{'title': 'milk', 'done': True}") == {
            "title": "milk",
            "done": True,
        }

    def test_empty(self):
        assert parse_tool_arguments("") == {}
        assert parse_tool_arguments(None) == {}

    def test_unparsable(self):
        with pytest.raises(ValueError):
            parse_tool_arguments("not json at all")


class TestDispatch:
    @pytest.mark.asyncio
    async def test_dispatch_json_arguments(self, echo_tool, fake_sleep):
        dispatcher = await _make_dispatcher(echo_tool, fake_sleep)
        outcome = await dispatcher.dispatch(_tool_call("echo", json.dumps({"text": "hi"})))
        assert outcome.success
        assert outcome.result == "echo: hi"
        assert echo_tool.calls == [{"text": "hi"}]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, echo_tool, fake_sleep):
        dispatcher = await _make_dispatcher(echo_tool, fake_sleep)
        outcome = await dispatcher.dispatch(_tool_call("nope", {}))
        assert not outcome.success
        assert outcome.error == "Tool nope not found"

    @pytest.mark.asyncio
    async def test_missing_name(self, echo_tool, fake_sleep):
        dispatcher = await _make_dispatcher(echo_tool, fake_sleep)
        outcome = await dispatcher.dispatch({"id": "x", "function": {}})
        assert outcome.error == "Tool name missing in tool call"

    @pytest.mark.asyncio
    async def test_bad_arguments(self, echo_tool, fake_sleep):
        dispatcher = await _make_dispatcher(echo_tool, fake_sleep)
        outcome = await dispatcher.dispatch(_tool_call("echo", "{broken"))
        assert not outcome.success
        assert echo_tool.calls == []

    @pytest.mark.asyncio
    async def test_invalid_argument_types(self, echo_tool, fake_sleep):
        dispatcher = await _make_dispatcher(echo_tool, fake_sleep)
        outcome = await dispatcher.dispatch(_tool_call("echo", {"text": ["a", "b"]}))
        assert not outcome.success
        assert outcome.error.startswith("Invalid arguments for echo")
        assert echo_tool.calls == []

    @pytest.mark.asyncio
    async def test_dispatch_batch_preserves_order(self, echo_tool, fake_sleep):
        dispatcher = await _make_dispatcher(echo_tool, fake_sleep)
        outcomes = await dispatcher.dispatch_batch(
            [
                _tool_call("echo", {"text": "one"}, "c1"),
                _tool_call("missing", {}, "c2"),
                _tool_call("echo", {"text": "three"}, "c3"),
            ]
        )
        assert [o.success for o in outcomes] == [True, False, True]
        assert outcomes[0].result == "echo: one"
        assert outcomes[2].result == "echo: three"

    @pytest.mark.asyncio
    async def test_requires_approval_when_not_allowed(self, echo_tool, fake_sleep):
        dispatcher = await _make_dispatcher(echo_tool, fake_sleep, allowed=())
        subscription = dispatcher.invoker.channel.subscribe()

        task = asyncio.create_task(dispatcher.dispatch(_tool_call("echo", {"text": "hi"})))
        request = await subscription.get()
        assert request.tool_name == "echo"
        request.deny()

        outcome = await task
        assert outcome.permission_denied
        assert echo_tool.calls == []
        await subscription.close()


class TestToolSchemas:
    @pytest.mark.asyncio
    async def test_openai_format(self, echo_tool, fake_sleep):
        dispatcher = await _make_dispatcher(echo_tool, fake_sleep)
        schemas = dispatcher.tool_schemas()
        assert schemas == [
            {
                "type": "function",
                "function": {
                    "name": "echo",
                    "description": "Echo the text argument",
                    "parameters": echo_tool.get_parameters(),
                },
            }
        ]
