"""
Retry utilities - transient error classification and async retry policy.

Tool actions are backed by HTTP calls (LLM providers, sync backends) whose
failures surface as human-readable text, so whether a failure is worth
retrying is decided from the error message alone.
"""

import asyncio
from typing import Any, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from voicetodo.utils.logging import get_logger

logger = get_logger(__name__)

# Case-folded substrings marking a failure as transient (server-side or network)
TRANSIENT_ERROR_MARKERS: tuple[str, ...] = (
    "500",
    "502",
    "503",
    "504",
    "timeout",
    "connection",
)

UNKNOWN_ERROR = "Unknown error"


def error_message(error: BaseException) -> str:
    """Human-readable message of an error, never empty."""
    return str(error) or UNKNOWN_ERROR


def is_transient_error(error: BaseException) -> bool:
    """
    Classify a failure as transient (retry) or fatal (give up).

    Only ordinary exceptions are considered; cancellation and other
    BaseException subclasses are never retried.
    """
    if not isinstance(error, Exception):
        return False
    message = str(error).casefold()
    return any(marker in message for marker in TRANSIENT_ERROR_MARKERS)


def build_async_retrying(
    max_attempts: int,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    tool_name: str = "tool",
) -> AsyncRetrying:
    """
    Build a tenacity retry policy for one tool call.

    Waits ``base_delay * 2**i`` seconds after the i-th failed attempt
    (1s, 2s, 4s with the default base), capped at ``max_delay``. Only
    transient failures are retried; the last error is re-raised once
    attempts are exhausted.

    Args:
        max_attempts: Total number of attempts, including the first one
        base_delay: Delay before the first retry (seconds)
        max_delay: Upper bound for any single delay (seconds)
        sleep: Awaitable sleep function (injectable for tests)
        tool_name: Tool name used in retry log entries
    """

    def log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "tool_retry_scheduled",
            tool_name=tool_name,
            attempt=retry_state.attempt_number,
            max_attempts=max_attempts,
            delay=retry_state.next_action.sleep if retry_state.next_action else None,
            error=error_message(error) if error else None,
        )

    return AsyncRetrying(
        sleep=sleep,
        reraise=True,
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=base_delay, exp_base=2, min=0, max=max_delay),
        retry=retry_if_exception(is_transient_error),
        before_sleep=log_retry,
    )


__all__ = [
    "TRANSIENT_ERROR_MARKERS",
    "build_async_retrying",
    "error_message",
    "is_transient_error",
]
