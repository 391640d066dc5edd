"""Team split for a single match."""

from __future__ import annotations

from typing import Literal, Tuple

from pydantic import BaseModel, model_validator
from pydantic.config import ConfigDict

TeamSide = Literal["A", "B"]


class TeamAssignment(BaseModel):
    """Two disjoint, ordered lists of player ids."""

    match_id: str
    team_a: Tuple[str, ...] = ()
    team_b: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_disjoint(self) -> "TeamAssignment":
        for label, team in (("team_a", self.team_a), ("team_b", self.team_b)):
            if len(set(team)) != len(team):
                raise ValueError(f"{label} lists a player more than once")
        overlap = set(self.team_a) & set(self.team_b)
        if overlap:
            raise ValueError(f"players on both teams: {', '.join(sorted(overlap))}")
        return self

    @property
    def is_populated(self) -> bool:
        # A zero-length team A is a legacy placeholder, not a split.
        return len(self.team_a) > 0

    @property
    def player_ids(self) -> Tuple[str, ...]:
        return self.team_a + self.team_b

    def team(self, side: TeamSide) -> Tuple[str, ...]:
        return self.team_a if side == "A" else self.team_b

    def team_of(self, player_id: str) -> TeamSide | None:
        if player_id in self.team_a:
            return "A"
        if player_id in self.team_b:
            return "B"
        return None

    def teammates_of(self, player_id: str) -> Tuple[str, ...]:
        side = self.team_of(player_id)
        if side is None:
            return ()
        return tuple(pid for pid in self.team(side) if pid != player_id)


class MatchResult(BaseModel):
    goals_team_a: int
    goals_team_b: int
    winner: Literal["A", "B", "draw"]

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_score(cls, goals_team_a: int, goals_team_b: int) -> "MatchResult":
        if goals_team_a > goals_team_b:
            winner: Literal["A", "B", "draw"] = "A"
        elif goals_team_b > goals_team_a:
            winner = "B"
        else:
            winner = "draw"
        return cls(goals_team_a=goals_team_a, goals_team_b=goals_team_b, winner=winner)
