"""tasklane - control flow for asynchronous tasks.

A task is a zero-argument callable returning an awaitable. The runner
decides when tasks are invoked and how many are in flight:

- series(tasks) - One at a time, in order, stop at the first failure
- parallel(tasks) - All at once, results in input order
- with_concurrency_limit(tasks, limit) - Fixed windows of `limit` tasks
- retry(task) - Fresh attempts with a fixed delay in between
- with_timeout(task, seconds) - Race against a timer, without cancelling
- wait(seconds) - Sleep for at least the given time

Example:
    >>> from functools import partial
    >>> from tasklane import TaskRunner
    >>>
    >>> runner = TaskRunner()
    >>> pages = await runner.with_concurrency_limit(
    ...     [partial(fetch, url) for url in urls], limit=5
    ... )
    >>> user = await runner.with_timeout(partial(fetch_user, 42), 2.0)
"""

from .exceptions import TaskError, TaskTimeoutError
from .runner import (
    TaskRunner,
    Task,
    windows,
    Outcome,
    OutcomeStatus,
    Success,
    Failure,
    settle,
    RetryPolicy,
    TimeoutPolicy,
    ConcurrencyPolicy,
    WaitPolicy,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "TaskRunner",
    "Task",
    "windows",
    # Outcomes
    "Outcome",
    "OutcomeStatus",
    "Success",
    "Failure",
    "settle",
    # Policies
    "RetryPolicy",
    "TimeoutPolicy",
    "ConcurrencyPolicy",
    "WaitPolicy",
    # Errors
    "TaskError",
    "TaskTimeoutError",
]
