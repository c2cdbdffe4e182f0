"""
ToolInvoker - Single entry point for executing one tool call.

Resolves permission (always-allow or interactive approval), then runs the
action through the RetryingExecutor and reports lifecycle records.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping

from voicetodo.tool.base import (
    ArgValue,
    ToolCallOutcome,
    ToolCallRecord,
    ToolCallRequest,
    ToolCallStatus,
)
from voicetodo.tool.executor import RetryingExecutor, ToolAction
from voicetodo.tool.permission.approval import ApprovalChannel
from voicetodo.tool.permission.gate import PermissionGate
from voicetodo.utils.logging import get_logger

logger = get_logger(__name__)

OnStatusHook = Callable[[ToolCallRecord], Awaitable[None]]


@dataclass
class ToolInvokerHooks:
    """
    Lifecycle hooks for tool calls. All hooks are optional and async.

    on_status: Called with a ToolCallRecord each time a call changes status
        (PENDING_APPROVAL, EXECUTING, RETRYING, then SUCCESS/FAILED/DENIED).
        Errors raised by the hook are logged and ignored.
    """

    on_status: OnStatusHook | None = None


class ToolInvoker:
    """
    Orchestrates PermissionGate -> ApprovalChannel -> RetryingExecutor.

    Permission is always settled before the first execution attempt.
    Independent invocations may run concurrently.
    """

    def __init__(
        self,
        gate: PermissionGate,
        channel: ApprovalChannel,
        executor: RetryingExecutor | None = None,
        hooks: ToolInvokerHooks | None = None,
        max_retries: int | None = None,
    ) -> None:
        self.gate = gate
        self.channel = channel
        self.executor = executor or RetryingExecutor()
        self.hooks = hooks or ToolInvokerHooks()
        self.max_retries = max_retries

    async def invoke(
        self,
        tool_name: str,
        arguments: Mapping[str, ArgValue] | None,
        action: ToolAction,
    ) -> ToolCallOutcome:
        """
        Run one tool call.

        Args:
            tool_name: Name of the tool
            arguments: Call arguments (str, int, float, bool or None values)
            action: Zero-argument coroutine function performing the call

        Returns:
            ToolCallOutcome: success, failure or denial; never raised

        Raises:
            pydantic.ValidationError: If the arguments are not valid tool arguments
        """
        request = ToolCallRequest(tool_name=tool_name, arguments=dict(arguments or {}))
        log = logger.bind(tool_name=tool_name, tool_call_id=request.id)

        if self.gate.is_always_allowed(tool_name):
            log.debug("tool_always_allowed")

            async def permission() -> bool:
                return True

        else:

            async def permission() -> bool:
                return await self._request_approval(request)

        async def on_attempt(index: int) -> None:
            status = ToolCallStatus.EXECUTING if index == 0 else ToolCallStatus.RETRYING
            await self._emit(ToolCallRecord.from_request(request, status, approved=True))

        outcome = await self.executor.execute_with_retry(
            action,
            max_retries=self.max_retries,
            is_permission_granted=permission,
            tool_name=tool_name,
            on_attempt=on_attempt,
        )

        record = ToolCallRecord.from_request(
            request,
            outcome.status,
            result=outcome.result if outcome.success else outcome.error,
            approved=not outcome.permission_denied,
            denied=outcome.permission_denied,
        )
        await self._emit(record)
        self.channel.notify_completion(record)
        log.info(
            "tool_call_finished",
            status=outcome.status.value,
            retry_count=outcome.retry_count,
        )
        return outcome

    async def _request_approval(self, request: ToolCallRequest) -> bool:
        await self._emit(
            ToolCallRecord.from_request(request, ToolCallStatus.PENDING_APPROVAL)
        )
        decision = await self.channel.request_decision(
            request.tool_name, request.arguments, request_id=request.id
        )

        if decision.granted and decision.remember:
            try:
                await self.gate.set_always_allowed(request.tool_name, True)
            except Exception as e:
                # The grant for this call stands even if it could not be remembered
                logger.error(
                    "always_allow_persist_failed",
                    tool_name=request.tool_name,
                    tool_call_id=request.id,
                    error=str(e),
                    exc_info=True,
                )
        return decision.granted

    async def _emit(self, record: ToolCallRecord) -> None:
        if self.hooks.on_status is None:
            return
        try:
            await self.hooks.on_status(record)
        except Exception as e:
            logger.warning(
                "tool_status_hook_failed",
                tool_name=record.tool_name,
                tool_call_id=record.id,
                status=record.status.value,
                error=str(e),
                exc_info=True,
            )


__all__ = ["ToolInvoker", "ToolInvokerHooks"]
