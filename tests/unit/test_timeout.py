"""Tests for TaskRunner.with_timeout."""

import asyncio
import time

import pytest
from pydantic import ValidationError

from tasklane import TaskRunner, TaskError, TaskTimeoutError
from tasklane.runner import runner as runner_module


@pytest.mark.asyncio
async def test_timeout_fires_before_slow_task(runner, probe):
    """Test that the timer wins against a slower task."""
    start = time.monotonic()
    with pytest.raises(TaskTimeoutError) as exc_info:
        await runner.with_timeout(probe.task("slow", "late", delay=0.2), 0.05)

    elapsed = time.monotonic() - start
    assert 0.04 <= elapsed < 0.15
    assert exc_info.value.timeout == 0.05
    assert exc_info.value.code == "timeout"

    await asyncio.sleep(0.2)


@pytest.mark.asyncio
async def test_timeout_leaves_task_running(runner, probe):
    """Test that the losing task is not cancelled and its result is dropped."""
    with pytest.raises(TaskTimeoutError):
        await runner.with_timeout(probe.task("slow", "late", delay=0.1), 0.02)

    assert probe.finished == []
    await asyncio.sleep(0.15)
    assert probe.finished == ["slow"]


@pytest.mark.asyncio
async def test_timeout_losing_task_failure_is_discarded(runner, probe):
    """Test that a late failure from the losing task is not reported."""
    loop = asyncio.get_running_loop()
    reported = []
    loop.set_exception_handler(lambda _loop, context: reported.append(context))
    try:
        with pytest.raises(TaskTimeoutError):
            await runner.with_timeout(
                probe.task("slow", delay=0.05, error=RuntimeError("late")), 0.01
            )
        await asyncio.sleep(0.1)
    finally:
        loop.set_exception_handler(None)

    assert probe.finished == ["slow"]
    assert reported == []


@pytest.mark.asyncio
async def test_timeout_returns_fast_result(runner, probe):
    """Test that a task settling first returns its value."""
    assert await runner.with_timeout(probe.task("fast", 42, delay=0.01), 0.5) == 42


@pytest.mark.asyncio
async def test_timeout_propagates_task_failure(runner, probe):
    """Test that the task's own failure is distinct from a timeout."""
    error = LookupError("not found")
    with pytest.raises(LookupError) as exc_info:
        await runner.with_timeout(probe.task("fails", error=error), 0.5)

    assert exc_info.value is error
    assert not isinstance(exc_info.value, TaskError)


@pytest.mark.asyncio
async def test_timeout_error_is_a_timeout_error(runner, probe):
    """Test that callers can catch the builtin TimeoutError."""
    with pytest.raises(TimeoutError):
        await runner.with_timeout(probe.task("slow", delay=0.1), 0.01)
    await asyncio.sleep(0.15)


@pytest.mark.asyncio
async def test_timeout_message(probe):
    """Test runner-level and per-call timeout messages."""
    runner = TaskRunner(timeout_message="Request took too long")

    with pytest.raises(TaskTimeoutError, match="Request took too long"):
        await runner.with_timeout(probe.task("a", delay=0.1), 0.01)
    with pytest.raises(TaskTimeoutError, match="Upload timed out"):
        await runner.with_timeout(probe.task("b", delay=0.1), 0.01, message="Upload timed out")

    await asyncio.sleep(0.15)


@pytest.mark.asyncio
async def test_timeout_rejects_non_positive_duration(runner, probe):
    """Test that zero, negative and infinite timeouts are refused."""
    for seconds in (0, -1, float("inf")):
        with pytest.raises(ValidationError):
            await runner.with_timeout(probe.task("a"), seconds)

    assert probe.events == []


@pytest.mark.asyncio
async def test_timeout_holds_reference_to_losing_task(runner, probe):
    """Test that the losing task is kept alive until it finishes."""
    before = set(runner_module._background)
    with pytest.raises(TaskTimeoutError):
        await runner.with_timeout(probe.task("slow", delay=0.05), 0.01)

    assert len(runner_module._background - before) == 1

    await asyncio.sleep(0.15)
    assert probe.finished == ["slow"]
    assert runner_module._background - before == set()
