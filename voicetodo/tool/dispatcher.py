import ast
import asyncio
import json
from functools import partial
from typing import Any

from pydantic import ValidationError

from voicetodo.tool.base import BaseTool, ToolCallOutcome
from voicetodo.tool.invoker import ToolInvoker
from voicetodo.utils.logging import get_logger

logger = get_logger(__name__)


def parse_tool_arguments(args: Any) -> dict[str, Any]:
    """
    Parse tool arguments from various formats (dict, JSON string, python-dict string) into a dictionary.

    Raises:
        ValueError: If a non-empty string cannot be parsed into a dict
    """
    if isinstance(args, dict):
        return args

    if not args or not isinstance(args, str):
        return {}

    try:
        parsed = json.loads(args)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    # Fallback for models that emit Python dict literals
    stripped = args.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        try:
            parsed = ast.literal_eval(stripped)
            if isinstance(parsed, dict):
                return parsed
        except (ValueError, SyntaxError, MemoryError, RecursionError):
            pass

    raise ValueError(f"Could not parse tool arguments: {args[:200]}")


class ToolDispatcher:
    """
    Routes LLM tool calls to registered tools through the ToolInvoker.

    Accepts OpenAI-style tool call dicts:
        {"id": "...", "function": {"name": "addTodo", "arguments": "{...}"}}
    """

    def __init__(self, tools: list[BaseTool], invoker: ToolInvoker) -> None:
        self.tools = tools
        self.tools_map = {t.get_name(): t for t in tools}
        self.invoker = invoker

    def tool_schemas(self) -> list[dict]:
        return [t.to_openai_schema() for t in self.tools]

    async def dispatch(self, tool_call: dict[str, Any]) -> ToolCallOutcome:
        fn = tool_call.get("function", {}) or {}
        fn_name = fn.get("name")
        call_id = tool_call.get("id")

        if not fn_name:
            return ToolCallOutcome.failed("Tool name missing in tool call")

        tool = self.tools_map.get(fn_name)
        if tool is None:
            logger.warning("tool_not_found", tool_name=fn_name, tool_call_id=call_id)
            return ToolCallOutcome.failed(f"Tool {fn_name} not found")

        try:
            args = parse_tool_arguments(fn.get("arguments", {}))
        except ValueError as e:
            return ToolCallOutcome.failed(str(e))

        try:
            return await self.invoker.invoke(fn_name, args, partial(tool.execute, args))
        except ValidationError as e:
            logger.warning(
                "tool_arguments_invalid",
                tool_name=fn_name,
                tool_call_id=call_id,
                error=str(e),
            )
            return ToolCallOutcome.failed(f"Invalid arguments for {fn_name}: {e}")

    async def dispatch_batch(
        self, tool_calls: list[dict[str, Any]]
    ) -> list[ToolCallOutcome]:
        """Dispatch several tool calls concurrently, preserving order."""

        async def _run_single(tc: dict[str, Any]) -> ToolCallOutcome:
            try:
                return await self.dispatch(tc)
            except Exception as e:
                fn = tc.get("function", {}) if isinstance(tc, dict) else {}
                logger.error(
                    "tool_dispatch_error",
                    tool_name=fn.get("name", "unknown"),
                    error=str(e),
                    exc_info=True,
                )
                return ToolCallOutcome.failed(f"Tool dispatch failed: {e}")

        return list(await asyncio.gather(*(_run_single(tc) for tc in tool_calls)))


__all__ = ["ToolDispatcher", "parse_tool_arguments"]
