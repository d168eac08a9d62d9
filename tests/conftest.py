"""
Shared fakes for the ghstat test-suite.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Mapping
from contextlib import contextmanager
from typing import Any, Iterator

import pytest

from ghstat.errors import FetchError
from ghstat.greenhouse.role import role_filters


class FakeGreenhouse:
    """
    In-memory Greenhouse returning a fixed count for every field.

    Tracks how many lookups are in flight at once so tests can check the
    scheduler's concurrency ceiling.
    """

    def __init__(
        self,
        *,
        count: int = 17,
        failing_fields: Iterable[str] = (),
        fail_title: bool = False,
        login_error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.count = count
        self.fail_title = fail_title
        self.login_error = login_error
        self.delay = delay
        self.login_calls = 0
        self.title_calls = 0
        self.count_calls = 0
        self.cookies: list[dict[str, Any]] = [{"name": "_session", "value": "abc"}]
        self.imported: list[dict[str, Any]] | None = None
        self.active = 0
        self.peak_active = 0
        self._failing_queries = [dict(role_filters()[name]) for name in failing_fields]
        self._lock = threading.Lock()

    def login(self) -> None:
        self.login_calls += 1
        if self.login_error is not None:
            raise self.login_error

    def role_title(self, role_id: int) -> str:
        with self._in_flight():
            with self._lock:
                self.title_calls += 1
            if self.fail_title:
                raise FetchError("title element not found")
            return f"Role {role_id}"

    def candidate_count(self, role_id: int, query: Mapping[str, str]) -> int:
        with self._in_flight():
            with self._lock:
                self.count_calls += 1
            if dict(query) in self._failing_queries:
                raise FetchError("results count not found")
            return self.count

    def export_state(self) -> list[dict[str, Any]]:
        return list(self.cookies)

    def import_state(self, cookies: list[dict[str, Any]]) -> None:
        self.imported = cookies

    @contextmanager
    def _in_flight(self) -> Iterator[None]:
        with self._lock:
            self.active += 1
            self.peak_active = max(self.peak_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            yield
        finally:
            with self._lock:
                self.active -= 1


class RecordingProgress:
    """
    Progress sink that records every call.
    """

    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    def start(self, message: str) -> None:
        self.events.append(("start", message))

    def update(self, message: str) -> None:
        self.events.append(("update", message))

    def succeed(self, message: str) -> None:
        self.events.append(("succeed", message))

    def fail(self, message: str) -> None:
        self.events.append(("fail", message))


class RecordingCtl:
    """
    Stand-in for TaskCtl that keeps every progress value it is given.
    """

    def __init__(self) -> None:
        self.progress: list[float] = []
        self.messages: list[str] = []
        self._lock = threading.Lock()

    def set_progress(self, progress: float) -> None:
        with self._lock:
            self.progress.append(progress)

    def set_message(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture()
def fake_greenhouse() -> FakeGreenhouse:
    return FakeGreenhouse()


@pytest.fixture()
def make_greenhouse() -> type[FakeGreenhouse]:
    """Factory for FakeGreenhouse instances with custom behaviour."""
    return FakeGreenhouse


@pytest.fixture()
def recording_progress() -> RecordingProgress:
    return RecordingProgress()


@pytest.fixture()
def recording_ctl() -> RecordingCtl:
    return RecordingCtl()
