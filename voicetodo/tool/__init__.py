from voicetodo.tool.base import (
    ArgValue,
    BaseTool,
    ToolArguments,
    ToolCallOutcome,
    ToolCallRecord,
    ToolCallRequest,
    ToolCallStatus,
)
from voicetodo.tool.dispatcher import ToolDispatcher
from voicetodo.tool.executor import RetryingExecutor
from voicetodo.tool.invoker import ToolInvoker, ToolInvokerHooks

__all__ = [
    "ArgValue",
    "BaseTool",
    "ToolArguments",
    "ToolCallOutcome",
    "ToolCallRecord",
    "ToolCallRequest",
    "ToolCallStatus",
    "ToolDispatcher",
    "RetryingExecutor",
    "ToolInvoker",
    "ToolInvokerHooks",
]
