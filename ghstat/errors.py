"""
ghstat/errors.py

Exception taxonomy shared across the pipeline.
"""

from __future__ import annotations


class GhstatError(Exception):
    """
    Base class for every error ghstat raises deliberately.
    """


class ConfigError(GhstatError, ValueError):
    """
    Raised when the configuration file or a command line option is invalid.
    """


class LoginError(GhstatError, RuntimeError):
    """
    Raised when an authenticated Greenhouse session cannot be established.
    """


class FetchError(GhstatError, RuntimeError):
    """
    Raised when one title or candidate count lookup fails.

    Role population absorbs these; they never cross a task boundary.
    """


class TaskFailedError(GhstatError):
    """
    Raised by the taskmaster when a task fails.

    Attributes:
        task_name: Name of the task that failed.
        error: The exception raised by the task's function.
    """

    def __init__(self, task_name: str, error: BaseException) -> None:
        self.task_name = task_name
        self.error = error
        super().__init__(f"{task_name} failed: {error}")
