"""TaskRunner - sequencing, fan-out, retry and timeout over async tasks."""

import asyncio
import logging
from typing import List, Optional, Sequence, Set, Tuple, Type, TypeVar

from tasklane.exceptions import TaskTimeoutError
from .policy import ConcurrencyPolicy, RetryPolicy, TimeoutPolicy, WaitPolicy
from .task import Task, invoke, task_name, windows

T = TypeVar("T")


# Futures left running after the caller stopped waiting on them. The event
# loop only holds weak references to tasks.
_background: Set["asyncio.Future"] = set()


def _discard_result(future: "asyncio.Future") -> None:
    """Mark a losing future's exception as retrieved so it is not reported."""
    _background.discard(future)
    if not future.cancelled():
        future.exception()


def _detach(future: "asyncio.Future") -> None:
    """Let a future run to completion unobserved, with its result discarded."""
    _background.add(future)
    future.add_done_callback(_discard_result)


class TaskRunner:
    """Combinators for running tasks in order, together, bounded, retried or raced.

    The runner only decides when tasks are invoked and how many are in flight.
    It keeps no state between calls and never cancels a task it started:
    parallel siblings of a failed task and the loser of a timeout race keep
    running in the background with their results discarded.

    Failures surface as exceptions. A task's own exception is re-raised
    unchanged; the runner's only failure of its own is TaskTimeoutError.

    Example:
        >>> runner = TaskRunner(retry=RetryPolicy(max_retries=2, delay=0.5))
        >>> users = await runner.with_concurrency_limit(
        ...     [partial(fetch_user, uid) for uid in ids], limit=4
        ... )
        >>> token = await runner.retry(refresh_token)
        >>> page = await runner.with_timeout(load_page, 5.0)
    """

    def __init__(
        self,
        retry: Optional[RetryPolicy] = None,
        timeout_message: str = "Timeout",
    ):
        """Initialize TaskRunner.

        Args:
            retry: Default retry policy used when retry() is called without
                explicit max_retries/delay (default: RetryPolicy())
            timeout_message: Default message for TaskTimeoutError
        """
        self._retry = retry or RetryPolicy()
        self._timeout_message = timeout_message
        self._logger = logging.getLogger(__name__)

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    async def wait(self, seconds: float) -> None:
        """Suspend for at least `seconds`.

        The event loop may wake a sleeper slightly before its deadline, so
        this keeps sleeping until the loop clock has actually passed it.
        """
        policy = WaitPolicy(seconds=seconds)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + policy.seconds
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return
            await asyncio.sleep(remaining)

    def delay(self, seconds: float) -> Task[None]:
        """Return wait(seconds) as a task, for use inside other combinators."""

        async def _delay() -> None:
            await self.wait(seconds)

        _delay.__qualname__ = f"delay({seconds})"
        return _delay

    async def series(self, tasks: Sequence[Task[T]]) -> List[T]:
        """Run tasks one at a time, in input order.

        Each task is invoked only after the previous one resolved. The first
        failure is raised immediately and no later task is invoked.

        Args:
            tasks: Tasks to run

        Returns:
            Task values in input order
        """
        results: List[T] = []
        for index, task in enumerate(tasks):
            self._logger.debug(f"series - Task {index}: {task_name(task)}")
            results.append(await invoke(task))
        return results

    async def parallel(self, tasks: Sequence[Task[T]]) -> List[T]:
        """Invoke every task now and wait for all of them.

        If any task fails, the first failure to settle is raised. The other
        tasks are not cancelled; they run to completion and their outcomes
        are discarded.

        Args:
            tasks: Tasks to run concurrently

        Returns:
            Task values in input order, not completion order
        """
        futures: List["asyncio.Future[T]"] = []
        try:
            for task in tasks:
                futures.append(asyncio.ensure_future(invoke(task)))
        except Exception:
            # Tasks already started keep running, like siblings of a failure.
            for future in futures:
                _detach(future)
            raise

        if not futures:
            return []

        self._logger.debug(f"parallel - Started {len(futures)} tasks")

        # gather leaves the remaining children running when one of them raises
        # and retrieves their later exceptions itself.
        return list(await asyncio.gather(*futures))

    async def with_concurrency_limit(
        self, tasks: Sequence[Task[T]], limit: int
    ) -> List[T]:
        """Run tasks in fixed windows of `limit`, one window after another.

        Tasks are split into consecutive windows. Each window runs under
        parallel() and the next window starts only after every task in the
        current one has resolved, so a slow task holds back the next window
        even when the others finished early. A failing window raises and the
        windows after it are never started.

        Args:
            tasks: Tasks to run
            limit: Window size (maximum tasks in flight)

        Returns:
            Task values in input order
        """
        policy = ConcurrencyPolicy(limit=limit)
        batches = windows(tasks, policy.limit)

        results: List[T] = []
        for index, batch in enumerate(batches):
            self._logger.debug(
                f"with_concurrency_limit - Window {index + 1}/{len(batches)} "
                f"start ({len(batch)} tasks)"
            )
            try:
                results.extend(await self.parallel(batch))
            except Exception as e:
                self._logger.info(
                    f"with_concurrency_limit - Window {index + 1}/{len(batches)} "
                    f"failed, {len(batches) - index - 1} windows not started: {e!r}"
                )
                raise
        return results

    async def retry(
        self,
        task: Task[T],
        max_retries: Optional[int] = None,
        delay: Optional[float] = None,
        retry_on: Tuple[Type[Exception], ...] = (Exception,),
    ) -> T:
        """Invoke a task until it succeeds, up to max_retries + 1 times.

        The task is called afresh for every attempt. Between a failed attempt
        and the next one the runner waits a fixed `delay`. Earlier failures
        are dropped; if every attempt fails the last attempt's exception is
        raised. Exceptions not matching `retry_on` are raised at once.

        Args:
            task: Task producing a new attempt on each call
            max_retries: Retries after the first attempt (default: policy)
            delay: Seconds between attempts (default: policy)
            retry_on: Exception types that trigger another attempt

        Returns:
            Value of the first successful attempt
        """
        policy = RetryPolicy(
            max_retries=self._retry.max_retries if max_retries is None else max_retries,
            delay=self._retry.delay if delay is None else delay,
        )
        name = task_name(task)

        for attempt in range(1, policy.max_attempts + 1):
            try:
                return await invoke(task)
            except retry_on as e:
                if attempt == policy.max_attempts:
                    self._logger.warning(
                        f"retry - {name} failed after {attempt} attempts: {e!r}"
                    )
                    raise
                self._logger.info(
                    f"retry - {name} attempt {attempt}/{policy.max_attempts} "
                    f"failed: {e!r}. Retrying in {policy.delay}s"
                )
            await self.wait(policy.delay)

        # Unreachable: the last attempt either returns or raises.
        raise AssertionError("retry loop exited without a result")

    async def with_timeout(
        self, task: Task[T], seconds: float, message: Optional[str] = None
    ) -> T:
        """Race a task against a timer.

        If the task settles first its value is returned or its exception
        raised. If the timer fires first TaskTimeoutError is raised and the
        task is left running; its eventual result is discarded.

        Args:
            task: Task to run
            seconds: Time allowed before the timer wins
            message: Message for TaskTimeoutError (default: runner's)

        Returns:
            The task's value
        """
        policy = TimeoutPolicy(
            timeout=seconds,
            message=self._timeout_message if message is None else message,
        )
        future = asyncio.ensure_future(invoke(task))

        done, _ = await asyncio.wait({future}, timeout=policy.timeout)
        if future in done:
            return future.result()

        self._logger.info(
            f"with_timeout - {task_name(task)} still running after "
            f"{policy.timeout}s, result will be discarded"
        )
        _detach(future)
        raise TaskTimeoutError(policy.timeout, policy.message)
