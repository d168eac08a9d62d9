"""
Task: one named stage of the ghstat pipeline.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ghstat.logging_utils import log_event
from ghstat.taskmaster.progress import NullProgress, ProgressSink

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    READY = "ready"
    STARTED = "started"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({TaskStatus.SUCCEEDED, TaskStatus.FAILED})


@dataclass(frozen=True)
class TaskReport:
    """
    Point-in-time snapshot of one task.
    """

    name: str
    status: TaskStatus
    message: str
    progress: float


class Task:
    """
    Wraps a work function with a name, a status and progress reporting.

    The work function receives a :class:`TaskCtl` and signals failure by
    raising. Verbose tasks log their transitions; otherwise transitions are
    shown on the progress sink unless the task is silent.
    """

    def __init__(
        self,
        name: str,
        message: str,
        func: Callable[["TaskCtl"], None],
        *,
        silent: bool = False,
    ) -> None:
        self.name = name
        self.verbose = False
        self.progress_sink: ProgressSink = NullProgress()
        self._initial_message = message
        self._message = message
        self._func = func
        self._silent = silent
        self._status = TaskStatus.READY
        self._progress = 0.0
        self._lock = threading.Lock()

    @property
    def status(self) -> TaskStatus:
        return self._status

    @property
    def message(self) -> str:
        return self._message

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def silent(self) -> bool:
        return self._silent

    def execute(self) -> None:
        """
        Run the work function once, moving READY -> STARTED -> SUCCEEDED/FAILED.

        Anything raised by the work function, KeyboardInterrupt included, is
        re-raised after the task is marked failed.
        """

        if self._status is not TaskStatus.READY:
            raise RuntimeError(f"task '{self.name}' has already been run (status={self._status.value})")

        self._start()
        try:
            self._func(TaskCtl(self))
        except BaseException as exc:
            self._fail(exc)
            raise
        self._succeed()

    def retry(self) -> "Task":
        """
        Fresh READY copy of this task, used to resume a failed pipeline.
        """

        return Task(self.name, self._initial_message, self._func, silent=self._silent)

    def report(self) -> TaskReport:
        with self._lock:
            return TaskReport(
                name=self.name,
                status=self._status,
                message=self._message,
                progress=self._progress,
            )

    def set_progress(self, progress: float) -> None:
        with self._lock:
            self._progress = progress
            self._show()

    def set_message(self, message: str) -> None:
        with self._lock:
            self._message = message
            self._show()

    def _render(self) -> str:
        if self._progress:
            return f"{self._message} ({self._progress:.0f}%)"
        return self._message

    def _drives_sink(self) -> bool:
        return not self.verbose and not self._silent

    def _show(self) -> None:
        if self._status is TaskStatus.STARTED and self._drives_sink():
            self.progress_sink.update(self._render())

    def _start(self) -> None:
        self._status = TaskStatus.STARTED
        if self.verbose:
            log_event(logger, logging.DEBUG, "task_started", task=self.name)
        elif self._drives_sink():
            self.progress_sink.start(self._message)

    def _fail(self, error: BaseException) -> None:
        self._status = TaskStatus.FAILED
        if self.verbose:
            log_event(logger, logging.DEBUG, "task_failed", task=self.name, error=str(error))
        elif self._drives_sink():
            self.progress_sink.fail(self._message)

    def _succeed(self) -> None:
        self._status = TaskStatus.SUCCEEDED
        if self.verbose:
            log_event(logger, logging.DEBUG, "task_succeeded", task=self.name)
        elif self._drives_sink():
            self.progress_sink.succeed(self._message)


class TaskCtl:
    """
    The slice of a :class:`Task` its work function is allowed to touch.
    """

    def __init__(self, task: Task) -> None:
        self._task = task

    def set_progress(self, progress: float) -> None:
        self._task.set_progress(progress)

    def set_message(self, message: str) -> None:
        self._task.set_message(message)
