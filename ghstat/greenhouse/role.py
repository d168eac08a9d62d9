"""
Role: the statistics gathered for one Greenhouse requisition.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import date, timedelta
from types import MappingProxyType

from ghstat.errors import FetchError
from ghstat.greenhouse.client import GreenhouseClient
from ghstat.logging_utils import log_event

logger = logging.getLogger(__name__)

STALE_AFTER_DAYS = 7

# Names of the numeric fields, in display order
ROLE_FIELDS: tuple[str, ...] = (
    "appReviews",
    "needsDecision",
    "needsScheduling",
    "wiScreening",
    "wiGrading",
    "stale",
)

# Fields fetched per role; the extra one is the title
NUM_ROLE_FIELDS = len(ROLE_FIELDS) + 1

TITLE_FIELD = "title"


def role_filters(today: date | None = None) -> dict[str, dict[str, str]]:
    """
    Candidate page query parameters that select each field's candidates.
    """

    last_activity = (today or date.today()) - timedelta(days=STALE_AFTER_DAYS)
    return {
        "appReviews": {
            "in_stages[]": "Application Review",
        },
        "needsDecision": {
            "needs_decision": "1",
        },
        "needsScheduling": {
            "interview_status_id[]": "1",
            "availability_state": "received",
        },
        "wiScreening": {
            "take_home_test_status_id[]": "9",
            "in_stages[]": "Written Interview",
            "stage_status_id[]": "2",
        },
        "wiGrading": {
            "take_home_test_status_id[]": "9",
            "in_stages[]": "Hold",
            "stage_status_id[]": "2",
        },
        "stale": {
            "last_activity_end": last_activity.strftime("%Y/%m/%d"),
        },
    }


class Role:
    """
    One requisition: its id, hiring lead, title and candidate counts.

    Only :meth:`populate` writes to a role, and only from one thread.
    """

    def __init__(self, role_id: int, lead: str) -> None:
        self.id = role_id
        self.lead = lead
        self.title = ""
        self._fields: dict[str, int] = {}
        self._failed: set[str] = set()

    def __repr__(self) -> str:
        return f"Role(id={self.id!r}, lead={self.lead!r}, title={self.title!r})"

    def populate(
        self,
        client: GreenhouseClient,
        inc_progress: Callable[[int], None],
        *,
        today: date | None = None,
    ) -> None:
        """
        Fetch the title and every field from Greenhouse.

        A failed lookup leaves the title empty or the count at 0 and is
        recorded in :attr:`failed_fields`. ``inc_progress(1)`` is called
        exactly :data:`NUM_ROLE_FIELDS` times, whatever the outcome.
        """

        log_event(logger, logging.DEBUG, "role_processing", role=self.id, lead=self.lead)

        try:
            self.title = client.role_title(self.id)
        except Exception as exc:
            self.title = ""
            self._failed.add(TITLE_FIELD)
            log_event(logger, logging.DEBUG, "title_fetch_failed", role=self.id, error=str(exc))
        inc_progress(1)

        filters = role_filters(today)
        for name in ROLE_FIELDS:
            try:
                count = client.candidate_count(self.id, filters[name])
                if count < 0:
                    raise FetchError(f"negative candidate count {count}")
            except Exception as exc:
                count = 0
                self._failed.add(name)
                log_event(
                    logger,
                    logging.DEBUG,
                    "field_fetch_failed",
                    role=self.id,
                    field=name,
                    error=str(exc),
                )
            self._fields[name] = count
            inc_progress(1)

    @property
    def fields(self) -> Mapping[str, int]:
        return MappingProxyType(self._fields)

    @property
    def failed_fields(self) -> frozenset[str]:
        return frozenset(self._failed)

    @property
    def app_reviews(self) -> int:
        """Outstanding application reviews."""
        return self._fields.get("appReviews", 0)

    @property
    def needs_decision(self) -> int:
        """Candidates awaiting a decision from the hiring lead."""
        return self._fields.get("needsDecision", 0)

    @property
    def needs_scheduling(self) -> int:
        """Interviews to schedule where the candidate sent their availability."""
        return self._fields.get("needsScheduling", 0)

    @property
    def wi_screening(self) -> int:
        """Written interviews awaiting an initial screen."""
        return self._fields.get("wiScreening", 0)

    @property
    def wi_grading(self) -> int:
        """Written interviews on hold awaiting grading."""
        return self._fields.get("wiGrading", 0)

    @property
    def stale(self) -> int:
        """Candidates with no activity for a week or longer."""
        return self._fields.get("stale", 0)


def sort_roles(roles: Iterable[Role]) -> list[Role]:
    """
    Order by lead ascending, then by outstanding app reviews descending.

    The sort is stable, so ties keep their input order.
    """

    return sorted(roles, key=lambda role: (role.lead, -role.app_reviews))
