"""Progress reporting for long-running tasks.

A :class:`TaskReporter` is passed into code that wants to announce when
a named task starts and finishes.  Numeric code takes the reporter as an
argument instead of logging on its own, so it stays testable without
capturing output:

* :class:`LoggingTaskReporter` prints ``GO``/``DONE`` lines with elapsed
  time through a log callable (the module logger by default).
* :class:`SilentTaskReporter` only records what happened, for tests.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Protocol

__all__ = [
    "LoggingTaskReporter",
    "SilentTaskReporter",
    "TaskReporter",
    "finish_message",
    "format_time_elapsed",
    "reporting",
    "start_message",
]

logger = logging.getLogger(__name__)


class TaskReporter(Protocol):
    def start(self, task_id: str) -> TaskReporter:
        ...

    def finish(self, task_id: str) -> TaskReporter:
        ...


def format_time_elapsed(elapsed_ms: float) -> str:
    if elapsed_ms < 1000:
        return f"{int(elapsed_ms)}ms"
    # Half-up rounding to whole seconds; larger units are floored.
    secs = math.floor(elapsed_ms / 1000 + 0.5)
    if secs < 60:
        return f"{secs}s"
    mins = secs // 60
    if mins < 60:
        return f"{mins}m {secs % 60}s"
    hours = mins // 60
    if hours < 24:
        return f"{hours}h {mins % 60}m"
    days = hours // 24
    return f"{days}d {hours % 24}h"


def start_message(task_id: str) -> str:
    return f"  GO   {task_id}"


def finish_message(task_id: str, elapsed_ms: float) -> str:
    return f"DONE   {task_id}: {format_time_elapsed(elapsed_ms)}"


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class LoggingTaskReporter:
    """Reports task progress through a log callable.

    Parameters
    ----------
    log:
        Receives each formatted line; defaults to ``logger.info``.
    get_time:
        Clock in milliseconds; defaults to a monotonic clock.
    scoped_prefix:
        Prepended to task ids (``"<prefix>: <task>"``).
    """

    def __init__(
        self,
        *,
        log: Callable[[str], None] | None = None,
        get_time: Callable[[], float] | None = None,
        scoped_prefix: str | None = None,
    ) -> None:
        self._log = log if log is not None else logger.info
        self._get_time = get_time if get_time is not None else _monotonic_ms
        self._scoped_prefix = scoped_prefix
        self._active: dict[str, float] = {}

    def _scope(self, task_id: str) -> str:
        if self._scoped_prefix is None:
            return task_id
        return f"{self._scoped_prefix}: {task_id}"

    def start(self, task_id: str) -> LoggingTaskReporter:
        if task_id in self._active:
            raise ValueError(f"task {self._scope(task_id)} already registered")
        self._active[task_id] = self._get_time()
        self._log(start_message(task_id))
        return self

    def finish(self, task_id: str) -> LoggingTaskReporter:
        started = self._active.pop(task_id, None)
        if started is None:
            raise ValueError(f"task {self._scope(task_id)} not registered")
        self._log(finish_message(task_id, self._get_time() - started))
        return self


class SilentTaskReporter:
    """Records task transitions without emitting anything."""

    def __init__(self) -> None:
        self._entries: list[tuple[str, str]] = []
        # Insertion-ordered set of running tasks.
        self._active: dict[str, None] = {}

    def start(self, task_id: str) -> SilentTaskReporter:
        if task_id in self._active:
            raise ValueError(f"task {task_id} already active")
        self._active[task_id] = None
        self._entries.append(("START", task_id))
        return self

    def finish(self, task_id: str) -> SilentTaskReporter:
        if task_id not in self._active:
            raise ValueError(f"task {task_id} not active")
        del self._active[task_id]
        self._entries.append(("FINISH", task_id))
        return self

    def entries(self) -> list[tuple[str, str]]:
        return list(self._entries)

    def active_tasks(self) -> list[str]:
        return list(self._active)


@contextmanager
def reporting(reporter: TaskReporter | None, task_id: str) -> Iterator[None]:
    """Run the ``with`` body as task *task_id* on *reporter*, if any.

    The task is finished on the way out even when the body raises, so the
    reporter can be reused after a failed run.
    """
    if reporter is None:
        yield
        return
    reporter.start(task_id)
    try:
        yield
    finally:
        reporter.finish(task_id)
