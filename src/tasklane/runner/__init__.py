"""Runner - task scheduling machinery."""

from .runner import TaskRunner
from .task import Task, invoke, windows
from .outcome import Outcome, OutcomeStatus, Success, Failure, settle
from .policy import RetryPolicy, TimeoutPolicy, ConcurrencyPolicy, WaitPolicy

__all__ = [
    "TaskRunner",
    "Task",
    "invoke",
    "windows",
    "Outcome",
    "OutcomeStatus",
    "Success",
    "Failure",
    "settle",
    "RetryPolicy",
    "TimeoutPolicy",
    "ConcurrencyPolicy",
    "WaitPolicy",
]
