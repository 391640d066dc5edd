from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Literal

from pydantic import BaseModel, Field


class VoteRequest(BaseModel):
    voter_id: str
    target_id: str
    ratings: Dict[str, int]


class ForceCompleteRequest(BaseModel):
    confirm: bool = False


class VoteResponse(BaseModel):
    vote_id: str
    match_id: str
    voter_id: str
    target_id: str
    ratings: Dict[str, int]
    created_at: datetime


class PlayerVotingStatusResponse(BaseModel):
    player_id: str
    name: str
    is_goalkeeper: bool
    team: Literal["A", "B"] | None
    total_teammates: int
    voted_count: int
    missing_votes: List[str]
    has_completed: bool


class VotingStatusResponse(BaseModel):
    match_id: str
    all_voted: bool
    completed: int
    total: int
    completion_percent: int
    players: List[PlayerVotingStatusResponse]


class ScoredVoteResponse(BaseModel):
    vote_id: str
    ratings: Dict[str, int]
    score: float
    voter_id: str | None = None


class PlayerRatingResponse(BaseModel):
    rank: int
    player_id: str
    name: str
    is_goalkeeper: bool
    match_rating: float
    votes_count: int
    votes: List[ScoredVoteResponse] = Field(default_factory=list)


class MatchSummaryResponse(BaseModel):
    match_id: str
    team_a: List[str]
    team_b: List[str]
    goals_team_a: int | None
    goals_team_b: int | None
    winner: Literal["A", "B", "draw"] | None
    all_voted: bool
    voters_completed: int
    voters_total: int
    ratings_visible: bool
    anonymous: bool
    total_votes: int
    ratings: List[PlayerRatingResponse]


class MatchHistoryResponse(BaseModel):
    match_id: str
    match_date: date
    goals_team_a: int | None
    goals_team_b: int | None
    winner: str | None
    team: Literal["A", "B"] | None
    match_rating: float
    votes_count: int
