"""Pytest configuration and shared fixtures"""

import asyncio
import os

import pytest

# Keep tests away from the user's permission database
os.environ.setdefault("VOICETODO_PERMISSION_STORE_TYPE", "memory")

from voicetodo.tool.permission.approval import ApprovalChannel, ApprovalRequest  # noqa: E402


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class BlockingSleep:
    """Records the delay, then blocks until cancelled."""

    def __init__(self) -> None:
        self.delays: list[float] = []
        self.entered = asyncio.Event()

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        self.entered.set()
        await asyncio.Event().wait()


class FlakyAction:
    """Coroutine action that raises the queued errors, then returns `result`."""

    def __init__(self, errors=None, result="ok") -> None:
        self.errors = list(errors or [])
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


def _start_responder(
    channel: ApprovalChannel,
    granted: bool = True,
    remember: bool = False,
) -> tuple[asyncio.Task, list[ApprovalRequest]]:
    # Subscribe before any request is published, answer from a task
    subscription = channel.subscribe()
    seen: list[ApprovalRequest] = []

    async def respond_all() -> None:
        async with subscription:
            async for request in subscription:
                seen.append(request)
                request.respond(granted, remember=remember)

    return asyncio.create_task(respond_all()), seen


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def blocking_sleep():
    return BlockingSleep()


@pytest.fixture
def flaky_action():
    """Factory: flaky_action([errors...], result="ok")"""
    return FlakyAction


@pytest.fixture
def start_responder():
    """Factory: start_responder(channel, granted=True, remember=False)"""
    return _start_responder
