"""
Manager: wires the login, processing and output tasks together.
"""

from __future__ import annotations

import logging
from typing import TextIO

from ghstat.config.models import GhstatConfig
from ghstat.errors import ConfigError, LoginError
from ghstat.formatters import FORMATTERS, Formatter, new_formatter
from ghstat.greenhouse.client import GreenhouseClient
from ghstat.greenhouse.role import Role, sort_roles
from ghstat.greenhouse.scheduler import MAX_CONCURRENT_ROLES, RoleScheduler
from ghstat.greenhouse.session_store import CookieStore
from ghstat.logging_utils import log_event
from ghstat.taskmaster import RunContext, Task, TaskCtl, Taskmaster

logger = logging.getLogger(__name__)


class Manager:
    """
    Entry point for a ghstat run.

    Construction fails with :class:`ConfigError` when the configured output
    format is unknown. :meth:`execute` may be called again after a failure to
    resume from the failed task.
    """

    def __init__(
        self,
        config: GhstatConfig,
        client: GreenhouseClient,
        writer: TextIO,
        *,
        session_store: CookieStore | None = None,
        context: RunContext | None = None,
        max_concurrency: int = MAX_CONCURRENT_ROLES,
    ) -> None:
        formatter = new_formatter(config.formatter, writer)
        if formatter is None:
            allowed = ", ".join(f"'{name}'" for name in FORMATTERS)
            raise ConfigError(
                f"invalid output formatter '{config.formatter}' specified, please choose one of {allowed}"
            )

        self.config = config
        self.client = client
        self.formatter: Formatter = formatter
        self.session_store = session_store
        self.roles: list[Role] = []
        self._max_concurrency = max_concurrency

        self.taskmaster = Taskmaster(context or RunContext(verbose=config.verbose))
        self.taskmaster.add_task(Task("login", "Logging in", self._login))
        self.taskmaster.add_task(Task("processing", "Processing roles", self._process))
        self.taskmaster.add_task(Task("output", "Output", self._output, silent=True))

    def execute(self) -> None:
        self.taskmaster.execute()

    def _login(self, tc: TaskCtl) -> None:
        self._load_session()
        try:
            self.client.login()
        except LoginError:
            raise
        except Exception as exc:
            raise LoginError(f"failed to login to Greenhouse: {exc}") from exc
        self._save_session()

    def _process(self, tc: TaskCtl) -> None:
        self.roles = [
            Role(role_id, lead.name)
            for lead in self.config.selected_leads()
            for role_id in lead.roles
        ]
        tc.set_message(f"Processing {len(self.roles)} roles")

        scheduler = RoleScheduler(self.client, max_concurrency=self._max_concurrency)
        summary = scheduler.run(self.roles, tc)
        if summary.failed_fields:
            log_event(
                logger,
                logging.WARNING,
                "fields_unavailable",
                roles=summary.roles,
                failed_fields=summary.failed_fields,
            )

    def _output(self, tc: TaskCtl) -> None:
        if not self.roles:
            logger.info("no roles to output")
            return
        self.formatter.output(sort_roles(self.roles))

    def _load_session(self) -> None:
        if self.session_store is None:
            return
        try:
            self.client.import_state(self.session_store.load())
        except (OSError, ValueError) as exc:
            log_event(logger, logging.DEBUG, "session_load_failed", error=str(exc))

    def _save_session(self) -> None:
        if self.session_store is None:
            return
        try:
            self.session_store.save(self.client.export_state())
        except (OSError, TypeError, ValueError) as exc:
            log_event(logger, logging.WARNING, "session_save_failed", error=str(exc))
