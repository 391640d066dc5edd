"""Vote scoring, match ratings and summaries."""

from .aggregator import MatchHistoryItem, PlayerMatchRating, Ranking, RatingAggregator, ScoredVote
from .scoring import score_vote
from .summary import MatchSummary, build_match_summary

__all__ = [
    "MatchHistoryItem",
    "MatchSummary",
    "PlayerMatchRating",
    "Ranking",
    "RatingAggregator",
    "ScoredVote",
    "build_match_summary",
    "score_vote",
]
