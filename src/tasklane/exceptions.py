"""Custom exceptions for tasklane."""

from typing import Optional


class TaskError(Exception):
    """Base class for failures raised by the runner itself.

    Failures raised by caller tasks are never wrapped in this type; they
    propagate unchanged.

    Attributes:
        message: Human-readable description of the failure
        code: Optional machine-readable failure kind
    """

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class TaskTimeoutError(TaskError, TimeoutError):
    """Raised by with_timeout when the timer settles before the task."""

    def __init__(self, timeout: float, message: str = "Timeout"):
        super().__init__(message, code="timeout")
        self.timeout = timeout

    def __str__(self) -> str:
        return f"{self.message} after {self.timeout}s"
