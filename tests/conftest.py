"""Shared fixtures for runner tests."""

import asyncio
from typing import Any, Callable, List, Optional, Tuple

import pytest

from tasklane import TaskRunner


class Probe:
    """Builds tasks that record when they start and finish.

    events holds ("start", name) / ("end", name) tuples in the order they
    happened, which lets tests check invocation order and window boundaries.
    """

    def __init__(self):
        self.events: List[Tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def started(self) -> List[str]:
        return [name for kind, name in self.events if kind == "start"]

    @property
    def finished(self) -> List[str]:
        return [name for kind, name in self.events if kind == "end"]

    def index(self, kind: str, name: str) -> int:
        return self.events.index((kind, name))

    def task(
        self,
        name: str,
        value: Any = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ) -> Callable:
        async def _run():
            self.events.append(("start", name))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(delay)
                if error is not None:
                    raise error
                return value
            finally:
                self.in_flight -= 1
                self.events.append(("end", name))

        _run.__qualname__ = name
        return _run


@pytest.fixture
def probe() -> Probe:
    return Probe()


@pytest.fixture
def runner() -> TaskRunner:
    return TaskRunner()
