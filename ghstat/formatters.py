"""
Output formatters for populated roles.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Protocol, TextIO

from ghstat.greenhouse.role import Role
from ghstat.schemas.role import RoleSummary

HEADERS = ("Lead", "Role", "CVs", "Decisions", "Scheduling", "WI (Screen)", "WI (Grade)", "Stale")

_HEADER_STYLE = "\033[32;4m"
_FIRST_COLUMN_STYLE = "\033[33m"
_RESET = "\033[0m"


class Formatter(Protocol):
    """
    Renders a list of roles to a writer.
    """

    def output(self, roles: Sequence[Role]) -> None:
        """Write ``roles`` in this formatter's format."""


def role_row(role: Role) -> list[str]:
    return [
        role.lead,
        role.title,
        str(role.app_reviews),
        str(role.needs_decision),
        str(role.needs_scheduling),
        str(role.wi_screening),
        str(role.wi_grading),
        str(role.stale),
    ]


def _column_widths(rows: Sequence[Sequence[str]]) -> list[int]:
    widths = [len(header) for header in HEADERS]
    for row in rows:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))
    return widths


class JsonFormatter:
    """
    Indented JSON list of role summaries.
    """

    def __init__(self, writer: TextIO) -> None:
        self.writer = writer

    def output(self, roles: Sequence[Role]) -> None:
        payload = [RoleSummary.from_role(role).model_dump(by_alias=True) for role in roles]
        self.writer.write(json.dumps(payload, indent=2) + "\n")


class MarkdownTableFormatter:
    """
    GitHub-flavoured Markdown table with padded columns.
    """

    def __init__(self, writer: TextIO) -> None:
        self.writer = writer

    def output(self, roles: Sequence[Role]) -> None:
        rows = [role_row(role) for role in roles]
        widths = _column_widths(rows)

        def line(cells: Sequence[str]) -> str:
            padded = [cell.ljust(width) for cell, width in zip(cells, widths)]
            return "| " + " | ".join(padded) + " |\n"

        self.writer.write(line(HEADERS))
        self.writer.write(line(["-" * width for width in widths]))
        for row in rows:
            self.writer.write(line(row))


class PrettyTableFormatter:
    """
    Aligned terminal table, coloured when the writer is a TTY.
    """

    def __init__(self, writer: TextIO, *, color: bool | None = None) -> None:
        self.writer = writer
        if color is None:
            isatty = getattr(writer, "isatty", None)
            color = bool(isatty and isatty())
        self.color = color

    def output(self, roles: Sequence[Role]) -> None:
        rows = [role_row(role) for role in roles]
        widths = _column_widths(rows)

        header = "  ".join(cell.ljust(width) for cell, width in zip(HEADERS, widths)).rstrip()
        if self.color:
            header = f"{_HEADER_STYLE}{header}{_RESET}"
        self.writer.write(header + "\n")

        for row in rows:
            cells = [cell.ljust(width) for cell, width in zip(row, widths)]
            if self.color:
                cells[0] = f"{_FIRST_COLUMN_STYLE}{cells[0]}{_RESET}"
            self.writer.write("  ".join(cells).rstrip() + "\n")


FORMATTERS: dict[str, type[JsonFormatter] | type[MarkdownTableFormatter] | type[PrettyTableFormatter]] = {
    "pretty": PrettyTableFormatter,
    "markdown": MarkdownTableFormatter,
    "json": JsonFormatter,
}


def new_formatter(name: str, writer: TextIO) -> Formatter | None:
    """
    Build the formatter registered as ``name``, or None if there is none.
    """

    formatter_class = FORMATTERS.get(name.strip().lower())
    if formatter_class is None:
        return None
    return formatter_class(writer)
