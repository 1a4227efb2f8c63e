"""Task - the deferred unit of work every combinator operates on."""

import functools
import inspect
from typing import Awaitable, Callable, List, Sequence, TypeVar

T = TypeVar("T")

# A zero-argument callable producing a fresh awaitable on every call.
# Nothing runs until the runner calls it.
Task = Callable[[], Awaitable[T]]


def task_name(task: Callable) -> str:
    """Best-effort readable name for log lines."""
    if isinstance(task, functools.partial):
        return task_name(task.func)
    name = getattr(task, "__qualname__", None) or getattr(task, "__name__", None)
    return name or repr(task)


def invoke(task: Task[T]) -> Awaitable[T]:
    """Call a task and return the awaitable it produced.

    Raises:
        TypeError: If task is not callable or does not return an awaitable
    """
    if not callable(task):
        raise TypeError(f"Task must be a zero-argument callable, got {task!r}")

    awaitable = task()
    if not inspect.isawaitable(awaitable):
        raise TypeError(
            f"Task '{task_name(task)}' returned {type(awaitable).__name__}, "
            "expected an awaitable"
        )
    return awaitable


def windows(tasks: Sequence[Task[T]], limit: int) -> List[List[Task[T]]]:
    """Partition tasks into consecutive windows of at most `limit` tasks.

    Input order is preserved; only the last window may be shorter.

    Args:
        tasks: Tasks in input order
        limit: Window size, must be >= 1

    Returns:
        List of windows
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    tasks = list(tasks)
    return [tasks[i : i + limit] for i in range(0, len(tasks), limit)]
