"""
Sequential task pipeline with progress reporting.
"""

from ghstat.taskmaster.progress import (
    NullProgress,
    ProgressSink,
    RunContext,
    TerminalSpinner,
)
from ghstat.taskmaster.task import Task, TaskCtl, TaskReport, TaskStatus
from ghstat.taskmaster.taskmaster import Taskmaster

__all__ = [
    "NullProgress",
    "ProgressSink",
    "RunContext",
    "Task",
    "TaskCtl",
    "TaskReport",
    "TaskStatus",
    "Taskmaster",
    "TerminalSpinner",
]
