"""
Progress sinks used by tasks to report what they are doing.
"""

from __future__ import annotations

import itertools
import sys
import threading
from dataclasses import dataclass, field
from typing import Protocol, TextIO

SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
_GREEN = "\033[32m"
_RED = "\033[31m"
_RESET = "\033[0m"
_CLEAR_LINE = "\r\033[K"


class ProgressSink(Protocol):
    """
    Destination for task status messages.
    """

    def start(self, message: str) -> None:
        """Begin reporting for a task."""

    def update(self, message: str) -> None:
        """Replace the message of the running task."""

    def succeed(self, message: str) -> None:
        """Finish reporting with a success marker."""

    def fail(self, message: str) -> None:
        """Finish reporting with a failure marker."""


class NullProgress:
    """
    Sink that discards everything.
    """

    def start(self, message: str) -> None:
        return None

    def update(self, message: str) -> None:
        return None

    def succeed(self, message: str) -> None:
        return None

    def fail(self, message: str) -> None:
        return None


class TerminalSpinner:
    """
    Animated single-line spinner, drawn from a background thread.
    """

    def __init__(self, stream: TextIO | None = None, interval: float = 0.1) -> None:
        self.stream = stream or sys.stderr
        self.interval = interval
        self._message = ""
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def message(self) -> str:
        with self._lock:
            return self._message

    def start(self, message: str) -> None:
        self._halt()
        with self._lock:
            self._message = message
        self._stop.clear()
        self._thread = threading.Thread(target=self._spin, name="ghstat-spinner", daemon=True)
        self._thread.start()

    def update(self, message: str) -> None:
        with self._lock:
            self._message = message

    def succeed(self, message: str) -> None:
        self._finish(f"{_GREEN}✓{_RESET}", message)

    def fail(self, message: str) -> None:
        self._finish(f"{_RED}✗{_RESET}", message)

    def _finish(self, marker: str, message: str) -> None:
        self._halt()
        with self._lock:
            self._message = message
            self.stream.write(f"{_CLEAR_LINE}{marker} {message}\n")
            self.stream.flush()

    def _halt(self) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None

    def _spin(self) -> None:
        for frame in itertools.cycle(SPINNER_FRAMES):
            with self._lock:
                self.stream.write(f"{_CLEAR_LINE}{_GREEN}{frame}{_RESET} {self._message}")
                self.stream.flush()
            if self._stop.wait(self.interval):
                return


@dataclass(frozen=True)
class RunContext:
    """
    Presentation settings shared by every task in a taskmaster.
    """

    verbose: bool = False
    progress: ProgressSink = field(default_factory=NullProgress)

    @classmethod
    def for_terminal(cls, verbose: bool, stream: TextIO | None = None) -> "RunContext":
        """
        Spinner on stderr unless verbose, where debug logs take its place.
        """

        if verbose:
            return cls(verbose=True, progress=NullProgress())
        return cls(verbose=False, progress=TerminalSpinner(stream=stream))
