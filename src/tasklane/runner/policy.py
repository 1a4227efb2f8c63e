"""Policies - validated configuration for runner operations."""

from pydantic import BaseModel, Field


class RetryPolicy(BaseModel):
    """Retry configuration.

    The delay between attempts is fixed; it does not grow between attempts.

    Example:
        >>> policy = RetryPolicy(max_retries=2, delay=0.5)
        >>> runner = TaskRunner(retry=policy)
    """

    max_retries: int = Field(
        default=3,
        description="Number of retries after the first failed attempt.",
        ge=0,
    )
    delay: float = Field(
        default=1.0,
        description="Seconds to wait after a failed attempt before the next one.",
        ge=0,
        allow_inf_nan=False,
    )

    @property
    def max_attempts(self) -> int:
        """Total number of attempts, the first one included."""
        return self.max_retries + 1


class TimeoutPolicy(BaseModel):
    """Timeout configuration for with_timeout."""

    timeout: float = Field(
        description="Seconds the task may run before the timer wins the race.",
        gt=0,
        allow_inf_nan=False,
    )
    message: str = Field(
        default="Timeout",
        description="Message carried by the TaskTimeoutError.",
    )


class ConcurrencyPolicy(BaseModel):
    """Concurrency configuration for with_concurrency_limit."""

    limit: int = Field(
        description="Maximum number of tasks in flight at once (window size).",
        ge=1,
    )


class WaitPolicy(BaseModel):
    """Duration for wait()."""

    seconds: float = Field(
        description="Minimum seconds to suspend.",
        ge=0,
        allow_inf_nan=False,
    )
