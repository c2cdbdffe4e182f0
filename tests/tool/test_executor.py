"""Tests for RetryingExecutor."""

import asyncio

import pytest

from voicetodo.tool.executor import RetryingExecutor


@pytest.fixture
def executor(fake_sleep):
    return RetryingExecutor(max_retries=3, base_delay=1.0, sleep=fake_sleep)


class TestSuccess:
    @pytest.mark.asyncio
    async def test_first_attempt(self, executor, fake_sleep, flaky_action):
        action = flaky_action(result="Added todo")
        outcome = await executor.execute_with_retry(action)
        assert outcome.success
        assert outcome.result == "Added todo"
        assert outcome.retry_count == 0
        assert action.calls == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(
        self, executor, fake_sleep, flaky_action
    ):
        action = flaky_action(
            [RuntimeError("503 Service Unavailable"), RuntimeError("Connection refused")]
        )
        outcome = await executor.execute_with_retry(action)
        assert outcome.success
        assert outcome.retry_count == 2
        assert action.calls == 3
        assert fake_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_non_string_result(self, executor, flaky_action):
        outcome = await executor.execute_with_retry(flaky_action(result=42))
        assert outcome.result == "42"


class TestFailure:
    @pytest.mark.asyncio
    async def test_fatal_error_stops_immediately(
        self, executor, fake_sleep, flaky_action
    ):
        action = flaky_action([ValueError("Invalid todo")])
        outcome = await executor.execute_with_retry(action)
        assert not outcome.success
        assert outcome.error == "Invalid todo"
        assert outcome.retry_count == 1
        assert action.calls == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_exhausts_retries(self, executor, fake_sleep, flaky_action):
        action = flaky_action([RuntimeError("timeout")] * 5)
        outcome = await executor.execute_with_retry(action)
        assert not outcome.success
        assert outcome.error == "timeout"
        assert outcome.retry_count == 3
        assert action.calls == 3
        assert fake_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_last_error_reported(self, executor, flaky_action):
        action = flaky_action(
            [RuntimeError("500 first"), RuntimeError("502 second"), RuntimeError("504 third")]
        )
        outcome = await executor.execute_with_retry(action)
        assert outcome.error == "504 third"

    @pytest.mark.asyncio
    async def test_transient_then_fatal(self, executor, fake_sleep, flaky_action):
        action = flaky_action([RuntimeError("503"), KeyError("missing")])
        outcome = await executor.execute_with_retry(action)
        assert not outcome.success
        assert outcome.retry_count == 2
        assert fake_sleep.delays == [1.0]

    @pytest.mark.asyncio
    async def test_empty_message(self, executor, flaky_action):
        outcome = await executor.execute_with_retry(flaky_action([RuntimeError()]))
        assert outcome.error == "Unknown error"

    @pytest.mark.asyncio
    async def test_single_attempt(self, executor, fake_sleep, flaky_action):
        action = flaky_action([RuntimeError("503")])
        outcome = await executor.execute_with_retry(action, max_retries=1)
        assert not outcome.success
        assert outcome.retry_count == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_invalid_max_retries(self, executor, flaky_action):
        action = flaky_action()
        with pytest.raises(ValueError):
            await executor.execute_with_retry(action, max_retries=0)
        assert action.calls == 0


class TestPermission:
    @pytest.mark.asyncio
    async def test_denied_never_runs_action(self, executor, flaky_action):
        action = flaky_action()

        async def deny() -> bool:
            return False

        outcome = await executor.execute_with_retry(action, is_permission_granted=deny)
        assert outcome.permission_denied
        assert outcome.error == "Permission denied by user"
        assert outcome.retry_count == 0
        assert action.calls == 0

    @pytest.mark.asyncio
    async def test_permission_checked_once(self, executor, flaky_action):
        checks = 0

        async def allow() -> bool:
            nonlocal checks
            checks += 1
            return True

        action = flaky_action([RuntimeError("timeout"), RuntimeError("timeout")])
        outcome = await executor.execute_with_retry(action, is_permission_granted=allow)
        assert outcome.success
        assert checks == 1


class TestAttemptCallback:
    @pytest.mark.asyncio
    async def test_called_before_each_attempt(self, executor, flaky_action):
        indices: list[int] = []

        async def on_attempt(index: int) -> None:
            indices.append(index)

        action = flaky_action([RuntimeError("503"), RuntimeError("503")])
        await executor.execute_with_retry(action, on_attempt=on_attempt)
        assert indices == [0, 1, 2]


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_during_backoff(self, blocking_sleep, flaky_action):
        executor = RetryingExecutor(max_retries=3, base_delay=1.0, sleep=blocking_sleep)
        action = flaky_action([RuntimeError("503")] * 3)

        task = asyncio.create_task(executor.execute_with_retry(action))
        await blocking_sleep.entered.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert action.calls == 1
        assert blocking_sleep.delays == [1.0]

    @pytest.mark.asyncio
    async def test_cancel_during_action(self, executor):
        started = asyncio.Event()

        async def slow_action():
            started.set()
            await asyncio.Event().wait()

        task = asyncio.create_task(executor.execute_with_retry(slow_action))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestDefaults:
    def test_defaults_from_settings(self):
        from voicetodo.config.settings import settings

        executor = RetryingExecutor()
        assert executor.max_retries == settings.tool_max_retries
        assert executor.base_delay == settings.retry_base_delay
