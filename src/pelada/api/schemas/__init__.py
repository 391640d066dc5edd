"""Pydantic models for API I/O."""

from .teams import (
    DrawRequest,
    MatchCreateRequest,
    MatchResponse,
    MatchResultRequest,
    MatchResultResponse,
    MovePlayerRequest,
    RankingResponse,
    RegistrationRequest,
    TeamAssignmentResponse,
    TeamPlayerResponse,
    TeamsPayload,
)
from .voting import (
    ForceCompleteRequest,
    MatchHistoryResponse,
    MatchSummaryResponse,
    PlayerRatingResponse,
    PlayerVotingStatusResponse,
    ScoredVoteResponse,
    VoteRequest,
    VoteResponse,
    VotingStatusResponse,
)

__all__ = [
    "DrawRequest",
    "ForceCompleteRequest",
    "MatchCreateRequest",
    "MatchHistoryResponse",
    "MatchResponse",
    "MatchResultRequest",
    "MatchResultResponse",
    "MatchSummaryResponse",
    "MovePlayerRequest",
    "PlayerRatingResponse",
    "PlayerVotingStatusResponse",
    "RankingResponse",
    "RegistrationRequest",
    "ScoredVoteResponse",
    "TeamAssignmentResponse",
    "TeamPlayerResponse",
    "TeamsPayload",
    "VoteRequest",
    "VoteResponse",
    "VotingStatusResponse",
]
