"""Peer vote records."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class VoteRatings(BaseModel):
    """Six attribute ratings on the 1-5 star scale."""

    speed: int = Field(..., ge=1, le=5)
    finishing: int = Field(..., ge=1, le=5)
    passing: int = Field(..., ge=1, le=5)
    dribbling: int = Field(..., ge=1, le=5)
    defense: int = Field(..., ge=1, le=5)
    physical: int = Field(..., ge=1, le=5)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def uniform(cls, value: int) -> "VoteRatings":
        return cls(
            speed=value,
            finishing=value,
            passing=value,
            dribbling=value,
            defense=value,
            physical=value,
        )


class Vote(BaseModel):
    vote_id: str
    match_id: str
    voter_id: str
    target_id: str
    ratings: VoteRatings
    created_at: datetime

    model_config = ConfigDict(frozen=True)
