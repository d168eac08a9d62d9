"""
tests/test_manager.py

End-to-end runs of the login -> processing -> output pipeline against a fake
Greenhouse.
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from ghstat.config.models import GhstatConfig, Lead
from ghstat.errors import ConfigError, LoginError, TaskFailedError
from ghstat.greenhouse.session_store import CookieStore
from ghstat.manager import Manager
from ghstat.taskmaster import TaskStatus

EXPECTED_MARKDOWN = (
    "| Lead       | Role     | CVs | Decisions | Scheduling | WI (Screen) | WI (Grade) | Stale |\n"
    "| ---------- | -------- | --- | --------- | ---------- | ----------- | ---------- | ----- |\n"
    "| Joe Bloggs | Role 123 | 17  | 17        | 17         | 17          | 17         | 17    |\n"
    "| Joe Bloggs | Role 456 | 17  | 17        | 17         | 17          | 17         | 17    |\n"
    "| Joe Bloggs | Role 789 | 17  | 17        | 17         | 17          | 17         | 17    |\n"
)


@pytest.fixture()
def config() -> GhstatConfig:
    return GhstatConfig(
        leads=(Lead(name="Joe Bloggs", roles=(123, 456, 789)),),
        formatter="markdown",
    )


@pytest.fixture()
def store(tmp_path: Path) -> CookieStore:
    return CookieStore(config_dir=tmp_path)


class TestConstruction:
    def test_invalid_formatter(self, fake_greenhouse) -> None:
        with pytest.raises(ConfigError, match="invalid output formatter 'foobar'"):
            Manager(GhstatConfig(formatter="foobar"), fake_greenhouse, io.StringIO())

    def test_registers_pipeline_tasks(self, config: GhstatConfig, fake_greenhouse) -> None:
        manager = Manager(config, fake_greenhouse, io.StringIO())
        reports = manager.taskmaster.tasks()
        assert [report.name for report in reports] == ["login", "processing", "output"]
        assert all(report.status is TaskStatus.READY for report in reports)


class TestExecute:
    def test_markdown_run(self, config: GhstatConfig, fake_greenhouse, store: CookieStore) -> None:
        out = io.StringIO()
        manager = Manager(config, fake_greenhouse, out, session_store=store)

        manager.execute()

        assert out.getvalue() == EXPECTED_MARKDOWN
        assert [report.status for report in manager.taskmaster.tasks()] == [TaskStatus.SUCCEEDED] * 3
        assert len(manager.roles) == 3
        assert fake_greenhouse.login_calls == 1

    def test_session_saved_after_login(self, config: GhstatConfig, fake_greenhouse, store: CookieStore) -> None:
        Manager(config, fake_greenhouse, io.StringIO(), session_store=store).execute()

        assert json.loads(store.path.read_text(encoding="utf-8")) == fake_greenhouse.cookies

    def test_saved_session_is_restored(self, config: GhstatConfig, fake_greenhouse, store: CookieStore) -> None:
        store.save([{"name": "_session", "value": "old"}])

        Manager(config, fake_greenhouse, io.StringIO(), session_store=store).execute()

        assert fake_greenhouse.imported == [{"name": "_session", "value": "old"}]

    def test_unreadable_session_is_not_fatal(
        self, config: GhstatConfig, fake_greenhouse, store: CookieStore
    ) -> None:
        store.config_dir.mkdir(parents=True, exist_ok=True)
        store.path.write_text("not json", encoding="utf-8")

        Manager(config, fake_greenhouse, io.StringIO(), session_store=store).execute()

        assert fake_greenhouse.imported is None
        assert fake_greenhouse.login_calls == 1

    def test_login_failure_stops_pipeline(self, config: GhstatConfig, make_greenhouse) -> None:
        client = make_greenhouse(login_error=LoginError("bad password"))
        out = io.StringIO()
        manager = Manager(config, client, out)

        with pytest.raises(TaskFailedError) as exc_info:
            manager.execute()

        assert exc_info.value.task_name == "login"
        assert isinstance(exc_info.value.__cause__, LoginError)
        statuses = [report.status for report in manager.taskmaster.tasks()]
        assert statuses == [TaskStatus.FAILED, TaskStatus.READY, TaskStatus.READY]
        assert client.title_calls == 0
        assert out.getvalue() == ""

    def test_unexpected_login_error_is_wrapped(self, config: GhstatConfig, make_greenhouse) -> None:
        client = make_greenhouse(login_error=ConnectionResetError("reset"))
        manager = Manager(config, client, io.StringIO())

        with pytest.raises(TaskFailedError) as exc_info:
            manager.execute()

        assert isinstance(exc_info.value.__cause__, LoginError)

    def test_resume_after_login_failure(self, config: GhstatConfig, make_greenhouse) -> None:
        client = make_greenhouse(login_error=LoginError("otp expired"))
        out = io.StringIO()
        manager = Manager(config, client, out)

        with pytest.raises(TaskFailedError):
            manager.execute()
        client.login_error = None
        manager.execute()

        assert client.login_calls == 2
        assert out.getvalue() == EXPECTED_MARKDOWN

    def test_partial_failures_still_output(self, config: GhstatConfig, make_greenhouse) -> None:
        client = make_greenhouse(failing_fields=["stale"])
        out = io.StringIO()
        manager = Manager(config, client, out)

        manager.execute()

        assert all(role.stale == 0 for role in manager.roles)
        assert all(role.failed_fields == frozenset({"stale"}) for role in manager.roles)
        assert out.getvalue().splitlines()[2].endswith("| 17         | 0     |")

    def test_filter_selects_leads(self, make_greenhouse) -> None:
        config = GhstatConfig(
            leads=(
                Lead(name="Joe Bloggs", roles=(1, 2)),
                Lead(name="Jane Doe", roles=(3,)),
            ),
            formatter="json",
            filter=("jane doe",),
        )
        client = make_greenhouse()
        out = io.StringIO()

        Manager(config, client, out).execute()

        payload = json.loads(out.getvalue())
        assert [(item["lead"], item["id"]) for item in payload] == [("Jane Doe", 3)]

    def test_no_roles_writes_nothing(self, fake_greenhouse) -> None:
        out = io.StringIO()
        manager = Manager(GhstatConfig(formatter="json"), fake_greenhouse, out)

        manager.execute()

        assert out.getvalue() == ""
        assert manager.taskmaster.tasks()[-1].status is TaskStatus.SUCCEEDED

    def test_output_sorted_by_lead_then_reviews(self, make_greenhouse) -> None:
        config = GhstatConfig(
            leads=(
                Lead(name="Zed", roles=(1,)),
                Lead(name="Amy", roles=(2, 3)),
            ),
            formatter="json",
        )
        out = io.StringIO()

        Manager(config, make_greenhouse(), out).execute()

        payload = json.loads(out.getvalue())
        assert [(item["lead"], item["id"]) for item in payload] == [("Amy", 2), ("Amy", 3), ("Zed", 1)]
