from __future__ import annotations

import threading
from typing import Callable, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_sec: float, fn: Callable[[], None]) -> Cancellable: ...


class ThreadingScheduler:
    """Runs callbacks on a daemon threading.Timer; cancel() before it fires drops the call."""

    def call_later(self, delay_sec: float, fn: Callable[[], None]) -> Cancellable:
        timer = threading.Timer(delay_sec, fn)
        timer.daemon = True
        timer.start()
        return timer


class _ManualTask:
    def __init__(self, due: float, fn: Callable[[], None]):
        self.due = due
        self.fn = fn
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic scheduler driven by advance(). Used by tests and by
    callers that pump their own event loop.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._tasks: list[_ManualTask] = []

    def call_later(self, delay_sec: float, fn: Callable[[], None]) -> Cancellable:
        task = _ManualTask(self.now + delay_sec, fn)
        self._tasks.append(task)
        return task

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks if not t.cancelled)

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [t for t in self._tasks if not t.cancelled and t.due <= self.now + 1e-9]
        self._tasks = [t for t in self._tasks if not t.cancelled and t not in due]
        for task in sorted(due, key=lambda t: t.due):
            task.fn()
