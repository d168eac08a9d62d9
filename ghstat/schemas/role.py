"""
ghstat/schemas/role.py

JSON output schema for one populated role.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from ghstat.greenhouse.role import Role


class RoleSummary(BaseModel):
    """
    One role as written by the json formatter.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    title: str
    lead: str
    app_reviews: int = Field(..., ge=0, alias="appReviews")
    needs_decision: int = Field(..., ge=0, alias="needsDecision")
    needs_scheduling: int = Field(..., ge=0, alias="needsScheduling")
    wi_screening: int = Field(..., ge=0, alias="wiScreening")
    wi_grading: int = Field(..., ge=0, alias="wiGrading")
    stale: int = Field(..., ge=0)

    @classmethod
    def from_role(cls, role: "Role") -> "RoleSummary":
        return cls(
            id=role.id,
            title=role.title,
            lead=role.lead,
            app_reviews=role.app_reviews,
            needs_decision=role.needs_decision,
            needs_scheduling=role.needs_scheduling,
            wi_screening=role.wi_screening,
            wi_grading=role.wi_grading,
            stale=role.stale,
        )
