"""Outcome - a settled task result held as a value."""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from .task import Task, invoke

T = TypeVar("T")


class OutcomeStatus(str, Enum):
    """How a task settled."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Success(Generic[T]):
    """Task resolved with a value."""

    value: T

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.SUCCESS

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Return the value."""
        return self.value

    def __str__(self) -> str:
        return f"Success({self.value!r})"


@dataclass(frozen=True)
class Failure:
    """Task failed with an exception."""

    error: Exception

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.FAILURE

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Re-raise the captured exception."""
        raise self.error

    def __str__(self) -> str:
        return f"Failure({type(self.error).__name__}: {self.error})"


Outcome = Union[Success[T], Failure]


async def settle(task: Task[T]) -> Outcome[T]:
    """Run a task and capture how it settled instead of raising.

    Only Exception subclasses are captured; cancellation and other
    BaseExceptions propagate.

    Example:
        >>> outcome = await settle(fetch_user)
        >>> if outcome.ok:
        ...     print(outcome.value)
    """
    try:
        return Success(await invoke(task))
    except Exception as e:
        return Failure(e)
