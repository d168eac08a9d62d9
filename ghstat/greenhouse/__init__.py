"""
Greenhouse access, role model and role scheduling.
"""

from ghstat.greenhouse.client import Greenhouse, GreenhouseClient, terminal_prompt
from ghstat.greenhouse.role import (
    NUM_ROLE_FIELDS,
    ROLE_FIELDS,
    Role,
    role_filters,
    sort_roles,
)
from ghstat.greenhouse.scheduler import MAX_CONCURRENT_ROLES, RoleScheduler, ScheduleSummary
from ghstat.greenhouse.session_store import CookieStore

__all__ = [
    "CookieStore",
    "Greenhouse",
    "GreenhouseClient",
    "MAX_CONCURRENT_ROLES",
    "NUM_ROLE_FIELDS",
    "ROLE_FIELDS",
    "Role",
    "RoleScheduler",
    "ScheduleSummary",
    "role_filters",
    "sort_roles",
    "terminal_prompt",
]
