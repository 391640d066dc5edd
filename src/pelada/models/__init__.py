"""Domain models shared across balancing, voting and persistence layers."""

from .match import AssignmentRecord, MatchRecord, MatchStatus, Role
from .player import (
    ATTRIBUTE_NAMES,
    FIELD_POSITIONS,
    GOALKEEPER_ATTRIBUTES,
    Player,
    Position,
    SkillAttributes,
)
from .team import MatchResult, TeamAssignment, TeamSide
from .vote import Vote, VoteRatings

__all__ = [
    "ATTRIBUTE_NAMES",
    "AssignmentRecord",
    "FIELD_POSITIONS",
    "GOALKEEPER_ATTRIBUTES",
    "MatchRecord",
    "MatchResult",
    "MatchStatus",
    "Player",
    "Position",
    "Role",
    "SkillAttributes",
    "TeamAssignment",
    "TeamSide",
    "Vote",
    "VoteRatings",
]
