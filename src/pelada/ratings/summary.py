"""Match summary as shown to a given viewer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from pelada.config import DEFAULT_RULES, MatchRules
from pelada.errors import NotFoundError
from pelada.models import MatchResult, Role, TeamAssignment
from pelada.persistence import MatchStore
from pelada.ratings.aggregator import PlayerMatchRating, RatingAggregator
from pelada.voting import VoteCompletionTracker


@dataclass(frozen=True)
class MatchSummary:
    match_id: str
    assignment: Optional[TeamAssignment]
    result: Optional[MatchResult]
    all_voted: bool
    voters_completed: int
    voters_total: int
    ratings_visible: bool
    anonymous: bool
    ratings: List[PlayerMatchRating]
    total_votes: int


def build_match_summary(
    store: MatchStore,
    match_id: str,
    *,
    role: Role = Role.PLAYER,
    rules: MatchRules = DEFAULT_RULES,
) -> MatchSummary:
    """Apply the reveal policy for ``role``.

    Ratings stay hidden until every participant has voted, except for super
    viewers, who also see who cast each vote.
    """

    if store.get_match(match_id) is None:
        raise NotFoundError(f"Match {match_id} not found", kind="match", key=match_id)

    record = store.get_assignment_record(match_id)
    tracker = VoteCompletionTracker(store)
    completed, total = tracker.voter_progress(match_id)
    all_voted = total > 0 and completed == total

    visible = all_voted or role.sees_voters
    ratings: List[PlayerMatchRating] = []
    total_votes = 0
    if visible:
        ratings = RatingAggregator(store, rules=rules).compute_match_ratings(
            match_id,
            include_voters=role.sees_voters,
        )
        total_votes = sum(rating.votes_count for rating in ratings)

    return MatchSummary(
        match_id=match_id,
        assignment=record.assignment if record else None,
        result=record.result if record else None,
        all_voted=all_voted,
        voters_completed=completed,
        voters_total=total,
        ratings_visible=visible,
        anonymous=not role.sees_voters,
        ratings=ratings,
        total_votes=total_votes,
    )
