"""
tests/test_scheduler.py

Bounded fan-out and progress aggregation of the RoleScheduler.
"""

from __future__ import annotations

import pytest

from ghstat.greenhouse.role import NUM_ROLE_FIELDS, ROLE_FIELDS, Role
from ghstat.greenhouse.scheduler import MAX_CONCURRENT_ROLES, RoleScheduler


def make_roles(count: int) -> list[Role]:
    return [Role(1000 + index, "Joe Bloggs") for index in range(count)]


class TestProgressAggregation:
    @pytest.mark.parametrize("num_roles", [1, 3, 12])
    def test_progress_called_once_per_unit_and_ends_at_100(
        self, fake_greenhouse, recording_ctl, num_roles: int
    ) -> None:
        roles = make_roles(num_roles)

        summary = RoleScheduler(fake_greenhouse).run(roles, recording_ctl)

        assert len(recording_ctl.progress) == num_roles * NUM_ROLE_FIELDS
        assert recording_ctl.progress[-1] == pytest.approx(100.0)
        assert recording_ctl.progress == sorted(recording_ctl.progress)
        assert summary.roles == num_roles
        assert summary.units == num_roles * NUM_ROLE_FIELDS

    def test_partial_failures_still_reach_100(self, make_greenhouse, recording_ctl) -> None:
        greenhouse = make_greenhouse(failing_fields={"wiGrading"}, fail_title=True)
        roles = make_roles(4)

        summary = RoleScheduler(greenhouse).run(roles, recording_ctl)

        assert recording_ctl.progress[-1] == pytest.approx(100.0)
        assert summary.failed_fields == 4 * 2
        for role in roles:
            assert set(role.fields) == set(ROLE_FIELDS)
            assert role.wi_grading == 0

    def test_no_roles_reports_nothing(self, fake_greenhouse, recording_ctl) -> None:
        summary = RoleScheduler(fake_greenhouse).run([], recording_ctl)
        assert recording_ctl.progress == []
        assert summary.units == 0


class TestConcurrency:
    def test_fans_out_to_ceiling(self, make_greenhouse, recording_ctl) -> None:
        greenhouse = make_greenhouse(delay=0.02)
        roles = make_roles(12)

        RoleScheduler(greenhouse).run(roles, recording_ctl)

        assert MAX_CONCURRENT_ROLES == 5
        assert greenhouse.peak_active == MAX_CONCURRENT_ROLES
        assert all(role.title == f"Role {role.id}" for role in roles)

    def test_custom_ceiling_is_respected(self, make_greenhouse, recording_ctl) -> None:
        greenhouse = make_greenhouse(delay=0.02)
        RoleScheduler(greenhouse, max_concurrency=2).run(make_roles(6), recording_ctl)
        assert greenhouse.peak_active == 2

    def test_single_worker_runs_serially(self, make_greenhouse, recording_ctl) -> None:
        greenhouse = make_greenhouse(delay=0.005)
        RoleScheduler(greenhouse, max_concurrency=1).run(make_roles(3), recording_ctl)
        assert greenhouse.peak_active == 1

    def test_invalid_ceiling_rejected(self, fake_greenhouse) -> None:
        with pytest.raises(ValueError):
            RoleScheduler(fake_greenhouse, max_concurrency=0)


class TestErrorPropagation:
    def test_first_error_raised_after_all_roles_finish(self, fake_greenhouse, recording_ctl) -> None:
        class ExplodingRole(Role):
            def populate(self, client, inc_progress, *, today=None) -> None:
                raise RuntimeError(f"boom {self.id}")

        roles = [Role(1, "A"), ExplodingRole(2, "A"), Role(3, "A"), ExplodingRole(4, "A")]

        with pytest.raises(RuntimeError, match="boom 2"):
            RoleScheduler(fake_greenhouse).run(roles, recording_ctl)

        assert roles[0].title == "Role 1"
        assert roles[2].title == "Role 3"
