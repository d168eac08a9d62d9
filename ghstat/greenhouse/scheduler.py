"""
Bounded concurrent population of roles.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

from ghstat.greenhouse.client import GreenhouseClient
from ghstat.greenhouse.role import NUM_ROLE_FIELDS, Role
from ghstat.logging_utils import log_event
from ghstat.taskmaster.task import TaskCtl

logger = logging.getLogger(__name__)

# Roles populated at once; each one keeps a request in flight against Greenhouse
MAX_CONCURRENT_ROLES = 5


@dataclass(frozen=True)
class ScheduleSummary:
    """
    Outcome of one scheduler run.
    """

    roles: int
    units: int
    failed_fields: int


class RoleScheduler:
    """
    Populates many roles on a bounded worker pool and reports one percentage.
    """

    def __init__(
        self,
        client: GreenhouseClient,
        *,
        max_concurrency: int = MAX_CONCURRENT_ROLES,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._client = client
        self._max_concurrency = max_concurrency

    def run(self, roles: Sequence[Role], task_ctl: TaskCtl) -> ScheduleSummary:
        """
        Populate every role, blocking until all workers have returned.

        Workers are never cancelled; if any raised, the first error in role
        order is re-raised once all of them are done.
        """

        total_units = len(roles) * NUM_ROLE_FIELDS
        completed = 0
        lock = threading.Lock()

        def inc_progress(amount: int) -> None:
            nonlocal completed
            with lock:
                completed += amount
                percent = completed / total_units * 100
                # set under the lock so the reported value never goes backwards
                task_ctl.set_progress(percent)

        log_event(
            logger,
            logging.DEBUG,
            "roles_scheduled",
            roles=len(roles),
            units=total_units,
            max_concurrency=self._max_concurrency,
        )

        futures: list[Future[None]] = []
        with ThreadPoolExecutor(
            max_workers=self._max_concurrency,
            thread_name_prefix="ghstat-role",
        ) as executor:
            for role in roles:
                futures.append(executor.submit(role.populate, self._client, inc_progress))
            wait(futures)

        for future in futures:
            error = future.exception()
            if error is not None:
                raise error

        summary = ScheduleSummary(
            roles=len(roles),
            units=completed,
            failed_fields=sum(len(role.failed_fields) for role in roles),
        )
        log_event(
            logger,
            logging.DEBUG,
            "roles_processed",
            roles=summary.roles,
            units=summary.units,
            failed_fields=summary.failed_fields,
        )
        return summary
