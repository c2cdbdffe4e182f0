"""
VoiceTodo - tool-call execution pipeline for a voice-driven todo agent

Usage:
    from voicetodo import ToolDispatcher, ToolInvoker, create_todo_tools
    from voicetodo.tool.permission import ApprovalChannel, create_permission_gate

    gate = create_permission_gate()
    await gate.init()
    channel = ApprovalChannel()
    invoker = ToolInvoker(gate, channel)
    dispatcher = ToolDispatcher(create_todo_tools(InMemoryTodoRepository()), invoker)

    requests = channel.subscribe()

    async def approve_all():
        async with requests:
            async for request in requests:
                request.grant(remember=False)

    asyncio.create_task(approve_all())
    outcome = await dispatcher.dispatch(tool_call)
"""

from voicetodo.todo import InMemoryTodoRepository, TodoRepository, create_todo_tools
from voicetodo.tool import (
    BaseTool,
    RetryingExecutor,
    ToolCallOutcome,
    ToolCallRecord,
    ToolCallRequest,
    ToolCallStatus,
    ToolDispatcher,
    ToolInvoker,
    ToolInvokerHooks,
)
from voicetodo.tool.permission import (
    ApprovalChannel,
    PermissionGate,
    create_permission_gate,
    create_permission_store,
)

__all__ = [
    "ApprovalChannel",
    "BaseTool",
    "InMemoryTodoRepository",
    "PermissionGate",
    "RetryingExecutor",
    "TodoRepository",
    "ToolCallOutcome",
    "ToolCallRecord",
    "ToolCallRequest",
    "ToolCallStatus",
    "ToolDispatcher",
    "ToolInvoker",
    "ToolInvokerHooks",
    "create_permission_gate",
    "create_permission_store",
    "create_todo_tools",
]
