from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from .team import MatchResult, TeamAssignment


class MatchStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class Role(str, Enum):
    """Privilege level of whoever is asking; supplied by the caller."""

    PLAYER = "player"
    ADMIN = "admin"
    SUPER = "super"

    @property
    def is_admin(self) -> bool:
        return self in (Role.ADMIN, Role.SUPER)

    @property
    def sees_voters(self) -> bool:
        return self is Role.SUPER


@dataclass
class MatchRecord:
    match_id: str
    match_date: date
    status: MatchStatus
    created_at: datetime


@dataclass
class AssignmentRecord:
    assignment: TeamAssignment
    locked: bool
    result: MatchResult | None
    updated_at: datetime
