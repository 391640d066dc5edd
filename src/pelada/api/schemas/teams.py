from __future__ import annotations

from datetime import date
from typing import List, Literal

from pydantic import BaseModel, Field


class MatchCreateRequest(BaseModel):
    match_date: date
    match_id: str | None = None


class MatchResponse(BaseModel):
    match_id: str
    match_date: date
    status: str
    player_count: int


class RegistrationRequest(BaseModel):
    player_id: str = Field(..., min_length=1)


class DrawRequest(BaseModel):
    seed: int | None = None


class TeamsPayload(BaseModel):
    team_a: List[str]
    team_b: List[str]


class MovePlayerRequest(TeamsPayload):
    player_id: str
    from_team: Literal["A", "B"]


class TeamPlayerResponse(BaseModel):
    player_id: str
    name: str
    is_goalkeeper: bool
    positions: List[str]
    overall: int


class TeamAssignmentResponse(BaseModel):
    match_id: str
    team_a: List[str]
    team_b: List[str]
    locked: bool
    saved: bool
    team_a_players: List[TeamPlayerResponse] = Field(default_factory=list)
    team_b_players: List[TeamPlayerResponse] = Field(default_factory=list)
    team_a_overall: int = 0
    team_b_overall: int = 0


class MatchResultRequest(BaseModel):
    goals_team_a: int = Field(..., ge=0)
    goals_team_b: int = Field(..., ge=0)


class MatchResultResponse(BaseModel):
    match_id: str
    goals_team_a: int
    goals_team_b: int
    winner: Literal["A", "B", "draw"]


class RankingResponse(BaseModel):
    field_players: List[TeamPlayerResponse]
    goalkeepers: List[TeamPlayerResponse]
