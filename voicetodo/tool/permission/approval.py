"""
ApprovalChannel - Interactive tool approval broker.

Publishes pending approval requests to every subscribed surface (dialogs,
loggers) and suspends the requesting task until one of them answers.
Each request owns a one-shot future: the first answer wins and later
answers are ignored.
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Callable, Generic, TypeVar

from pydantic import BaseModel

from voicetodo.tool.base import ToolArguments, ToolCallRecord
from voicetodo.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ApprovalDecision(BaseModel):
    """User approval decision"""

    granted: bool
    remember: bool = False  # Always allow this tool from now on


class ApprovalRequest:
    """
    A pending approval for one tool call.

    Subscribers answer through `respond` (or `grant` / `deny`). Only the
    first answer resolves the waiting task; answers arriving after that,
    or after the waiting task was cancelled, are no-ops.
    """

    def __init__(
        self,
        tool_name: str,
        arguments: ToolArguments,
        request_id: str | None = None,
    ) -> None:
        self.id = request_id or uuid.uuid4().hex
        self.tool_name = tool_name
        self.arguments = dict(arguments)
        self.created_at = datetime.now(timezone.utc)
        self._loop = asyncio.get_running_loop()
        self._future: asyncio.Future[ApprovalDecision] = self._loop.create_future()

    @property
    def resolved(self) -> bool:
        """True once answered or abandoned"""
        return self._future.done()

    def respond(self, granted: bool, remember: bool = False) -> bool:
        """
        Answer the request.

        Returns:
            True if this answer resolved the request, False if it was ignored
        """
        if self._future.done():
            logger.debug(
                "approval_response_ignored",
                request_id=self.id,
                tool_name=self.tool_name,
                cancelled=self._future.cancelled(),
            )
            return False

        self._future.set_result(ApprovalDecision(granted=granted, remember=remember))
        logger.info(
            "approval_resolved",
            request_id=self.id,
            tool_name=self.tool_name,
            granted=granted,
            remember=remember,
        )
        return True

    def grant(self, remember: bool = False) -> bool:
        return self.respond(True, remember=remember)

    def deny(self) -> bool:
        return self.respond(False)

    def respond_threadsafe(self, granted: bool, remember: bool = False) -> None:
        """Answer from a thread other than the one running the event loop."""
        self._loop.call_soon_threadsafe(self.respond, granted, remember)

    async def wait(self) -> ApprovalDecision:
        return await self._future

    def __repr__(self) -> str:
        return (
            f"ApprovalRequest(id={self.id!r}, tool_name={self.tool_name!r}, "
            f"resolved={self.resolved})"
        )


class Subscription(Generic[T]):
    """
    Per-subscriber event queue.

    Async-iterate to receive events until the subscription is closed.
    Usable as an async context manager, which closes it on exit.
    """

    # Sentinel value to signal end of stream
    _SENTINEL = object()

    def __init__(self, on_close: Callable[["Subscription[T]"], None]) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._on_close = on_close

    def publish(self, event: T) -> None:
        if self._closed:
            return
        self._queue.put_nowait(event)

    async def get(self) -> T:
        """
        Wait for the next event.

        Raises:
            StopAsyncIteration: If the subscription is closed
        """
        return await self.__anext__()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._on_close(self)
        self._queue.put_nowait(self._SENTINEL)

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "Subscription[T]":
        return self

    async def __anext__(self) -> T:
        item = await self._queue.get()
        if item is self._SENTINEL:
            # Re-put sentinel so later reads also stop
            self._queue.put_nowait(self._SENTINEL)
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> "Subscription[T]":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"Subscription(closed={self._closed}, qsize={self._queue.qsize()})"


class ApprovalChannel:
    """
    In-memory broadcast broker for tool approvals.

    Holds no durable state: requests pending when the process stops are
    lost. There is no built-in timeout; callers that need one race the
    request against their own timer.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscription[ApprovalRequest]] = []
        self._completion_subscribers: list[Subscription[ToolCallRecord]] = []
        self._pending: dict[str, ApprovalRequest] = {}

    def subscribe(self) -> Subscription[ApprovalRequest]:
        """Receive every approval request published from now on."""
        subscription: Subscription[ApprovalRequest] = Subscription(
            self._subscribers.remove
        )
        self._subscribers.append(subscription)
        return subscription

    def subscribe_completions(self) -> Subscription[ToolCallRecord]:
        """Receive a record for every tool call that reaches a terminal status."""
        subscription: Subscription[ToolCallRecord] = Subscription(
            self._completion_subscribers.remove
        )
        self._completion_subscribers.append(subscription)
        return subscription

    def pending_requests(self) -> list[ApprovalRequest]:
        """Requests still waiting for an answer, oldest first."""
        return list(self._pending.values())

    async def request_decision(
        self,
        tool_name: str,
        arguments: ToolArguments,
        request_id: str | None = None,
    ) -> ApprovalDecision:
        """
        Publish an approval request and wait for the first answer.

        Args:
            tool_name: Tool awaiting approval
            arguments: Arguments of the call, for display
            request_id: Identifier shared with the tool call (generated if None)

        Returns:
            ApprovalDecision: The first answer given

        Raises:
            asyncio.CancelledError: If the waiting task is cancelled; the
                request is abandoned and later answers are ignored
        """
        request = ApprovalRequest(tool_name, arguments, request_id=request_id)
        self._pending[request.id] = request

        if not self._subscribers:
            logger.warning(
                "approval_request_unobserved",
                request_id=request.id,
                tool_name=tool_name,
            )
        for subscription in list(self._subscribers):
            subscription.publish(request)
        logger.info(
            "approval_requested",
            request_id=request.id,
            tool_name=tool_name,
            subscribers=len(self._subscribers),
        )

        try:
            return await request.wait()
        except asyncio.CancelledError:
            logger.info(
                "approval_request_abandoned", request_id=request.id, tool_name=tool_name
            )
            raise
        finally:
            self._pending.pop(request.id, None)

    async def request_permission(
        self,
        tool_name: str,
        arguments: ToolArguments,
        request_id: str | None = None,
    ) -> bool:
        """Publish an approval request; True if granted."""
        decision = await self.request_decision(tool_name, arguments, request_id)
        return decision.granted

    def notify_completion(self, record: ToolCallRecord) -> None:
        for subscription in list(self._completion_subscribers):
            subscription.publish(record)


__all__ = [
    "ApprovalChannel",
    "ApprovalDecision",
    "ApprovalRequest",
    "Subscription",
]
