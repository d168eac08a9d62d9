"""
Configuration models.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class Lead:
    """
    A hiring lead and the Greenhouse role ids they manage.
    """

    name: str
    roles: tuple[int, ...] = ()


@dataclass(frozen=True)
class GhstatConfig:
    """
    Everything a single ghstat run needs to know about what to process.
    """

    leads: tuple[Lead, ...] = ()
    formatter: str = "pretty"
    verbose: bool = False
    filter: tuple[str, ...] = ()

    def with_options(
        self,
        *,
        formatter: str | None = None,
        verbose: bool | None = None,
        filter: Sequence[str] | None = None,
    ) -> "GhstatConfig":
        """
        Return a copy with command line options applied over the file values.
        """

        return replace(
            self,
            formatter=self.formatter if formatter is None else formatter,
            verbose=self.verbose if verbose is None else verbose,
            filter=self.filter if filter is None else tuple(filter),
        )

    def selected_leads(self) -> list[Lead]:
        """
        Leads matching the name filter, or all leads when no filter is set.
        """

        normalized = {item.strip().lower() for item in self.filter if item.strip()}
        if not normalized:
            return list(self.leads)
        return [lead for lead in self.leads if lead.name.strip().lower() in normalized]


@dataclass(frozen=True)
class GreenhouseSettings:
    """
    Runtime settings for talking to Greenhouse.
    """

    base_url: str = "https://canonical.greenhouse.io"
    login_url: str = "https://login.ubuntu.com"
    user_agent: str = "ghstat"
    timeout_seconds: float = 15.0
    max_retries: int = 2
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    login: str | None = None
    password: str | None = field(default=None, repr=False)
