import asyncio
from typing import Any, Awaitable, Callable

from voicetodo.config.settings import settings
from voicetodo.tool.base import ToolCallOutcome
from voicetodo.utils.logging import get_logger
from voicetodo.utils.retry import build_async_retrying, error_message, is_transient_error

logger = get_logger(__name__)

ToolAction = Callable[[], Awaitable[Any]]
PermissionPredicate = Callable[[], Awaitable[bool]]
AttemptCallback = Callable[[int], Awaitable[None]]


class RetryingExecutor:
    """
    Runs a fallible async tool action with bounded exponential-backoff retry.

    Permission is resolved before the first attempt. Attempts are strictly
    sequential; transient failures are retried, fatal ones end the call.
    Denials and failures are returned as ToolCallOutcome, never raised.
    """

    def __init__(
        self,
        max_retries: int | None = None,
        base_delay: float | None = None,
        max_delay: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            max_retries: Default attempt bound (settings.tool_max_retries)
            base_delay: Delay before the first retry in seconds (settings.retry_base_delay)
            max_delay: Cap for a single delay in seconds (settings.retry_max_delay)
            sleep: Awaitable sleep function, replaced in tests
        """
        self.max_retries = (
            settings.tool_max_retries if max_retries is None else max_retries
        )
        self.base_delay = settings.retry_base_delay if base_delay is None else base_delay
        self.max_delay = settings.retry_max_delay if max_delay is None else max_delay
        self._sleep = sleep

    async def execute_with_retry(
        self,
        action: ToolAction,
        max_retries: int | None = None,
        is_permission_granted: PermissionPredicate | None = None,
        tool_name: str = "tool",
        on_attempt: AttemptCallback | None = None,
    ) -> ToolCallOutcome:
        """
        Check permission, then run `action` until it succeeds or gives up.

        Args:
            action: Zero-argument coroutine function producing the result
            max_retries: Total attempts allowed (defaults to the executor's bound)
            is_permission_granted: Predicate awaited once before any attempt
            tool_name: Used for log entries
            on_attempt: Awaited before each attempt with its zero-based index

        Returns:
            ToolCallOutcome: succeeded with retry_count = index of the
            successful attempt, failed with retry_count = attempts made,
            or denied.
        """
        max_retries = self.max_retries if max_retries is None else max_retries
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")

        if is_permission_granted is not None and not await is_permission_granted():
            logger.info("tool_permission_denied", tool_name=tool_name)
            return ToolCallOutcome.denied()

        retrying = build_async_retrying(
            max_attempts=max_retries,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            sleep=self._sleep,
            tool_name=tool_name,
        )

        attempts = 0
        try:
            async for attempt in retrying:
                attempts = attempt.retry_state.attempt_number
                if on_attempt is not None:
                    await on_attempt(attempts - 1)
                with attempt:
                    result = await action()
        except Exception as e:
            message = error_message(e)
            logger.warning(
                "tool_execution_failed",
                tool_name=tool_name,
                attempts=attempts,
                transient=is_transient_error(e),
                error=message,
            )
            return ToolCallOutcome.failed(message, retry_count=attempts)

        logger.debug(
            "tool_execution_completed", tool_name=tool_name, attempts=attempts
        )
        return ToolCallOutcome.succeeded(
            result if isinstance(result, str) else str(result),
            retry_count=attempts - 1,
        )


__all__ = ["RetryingExecutor", "ToolAction", "PermissionPredicate", "AttemptCallback"]
