"""
Taskmaster: runs tasks strictly in sequence and stops at the first failure.
"""

from __future__ import annotations

import logging

from ghstat.errors import TaskFailedError
from ghstat.taskmaster.progress import RunContext
from ghstat.taskmaster.task import Task, TaskReport, TaskStatus

logger = logging.getLogger(__name__)


class Taskmaster:
    """
    Ordered list of tasks sharing one :class:`RunContext`.

    ``execute`` may be called again after a failure: succeeded tasks are
    skipped, the failed task is replaced by a fresh copy and re-run, and the
    remaining tasks follow.
    """

    def __init__(self, context: RunContext | None = None) -> None:
        self.context = context or RunContext()
        self._tasks: list[Task] = []

    @property
    def verbose(self) -> bool:
        return self.context.verbose

    def add_task(self, task: Task) -> None:
        self._attach(task)
        self._tasks.append(task)

    def execute(self) -> None:
        for index, task in enumerate(self._tasks):
            if task.status is TaskStatus.SUCCEEDED:
                continue
            if task.status is TaskStatus.FAILED:
                logger.debug("resuming failed task '%s'", task.name)
                task = task.retry()
                self._attach(task)
                self._tasks[index] = task

            try:
                task.execute()
            except Exception as exc:
                raise TaskFailedError(task.name, exc) from exc

    def tasks(self) -> tuple[TaskReport, ...]:
        """
        Snapshot of every task, in execution order.
        """

        return tuple(task.report() for task in self._tasks)

    def _attach(self, task: Task) -> None:
        task.verbose = self.context.verbose
        task.progress_sink = self.context.progress
