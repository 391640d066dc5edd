"""Aggregate peer votes into match ratings and cumulative attributes."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from statistics import fmean
from typing import Callable, Dict, List, Optional

from pelada.config import DEFAULT_RULES, MatchRules
from pelada.errors import NotFoundError
from pelada.models import MatchStatus, Player, SkillAttributes, TeamSide, Vote, VoteRatings
from pelada.persistence import MatchStore
from pelada.ratings.scoring import score_vote, scored_attributes


logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)

OverallFormula = Callable[[Player, SkillAttributes], float]


@dataclass(frozen=True)
class ScoredVote:
    vote_id: str
    ratings: VoteRatings
    score: float
    voter_id: Optional[str] = None


@dataclass(frozen=True)
class PlayerMatchRating:
    player_id: str
    name: str
    is_goalkeeper: bool
    match_rating: float
    votes_count: int
    votes: List[ScoredVote] = field(default_factory=list)


@dataclass(frozen=True)
class Ranking:
    field_players: List[Player]
    goalkeepers: List[Player]


@dataclass(frozen=True)
class MatchHistoryItem:
    match_id: str
    match_date: date
    goals_team_a: Optional[int]
    goals_team_b: Optional[int]
    winner: Optional[str]
    team: Optional[TeamSide]
    match_rating: float
    votes_count: int


class RatingAggregator:
    """Read-only aggregation over stored votes.

    Voter identity is attached to scored votes only when a caller explicitly
    asks for it; deciding who may ask is left to the consuming view.
    """

    def __init__(self, store: MatchStore, *, rules: MatchRules = DEFAULT_RULES):
        self._store = store
        self._rules = rules

    def _score(self, vote: Vote, player: Player, include_voters: bool) -> ScoredVote:
        return ScoredVote(
            vote_id=vote.vote_id,
            ratings=vote.ratings,
            score=score_vote(vote.ratings, is_goalkeeper=player.is_goalkeeper, rules=self._rules),
            voter_id=vote.voter_id if include_voters else None,
        )

    def compute_match_ratings(self, match_id: str, *, include_voters: bool = False) -> List[PlayerMatchRating]:
        """Per-player ratings for one match, best first.

        Equal ratings keep the order in which targets were first voted on.
        """

        grouped: Dict[str, List[Vote]] = defaultdict(list)
        for vote in self._store.read_votes(match_id):
            grouped[vote.target_id].append(vote)

        players = {player.player_id: player for player in self._store.get_players(list(grouped))}
        ratings: List[PlayerMatchRating] = []
        for target_id, votes in grouped.items():
            player = players.get(target_id)
            if player is None:
                logger.debug("Skipping votes for removed player %s in match %s", target_id, match_id)
                continue
            scored = [self._score(vote, player, include_voters) for vote in votes]
            ratings.append(
                PlayerMatchRating(
                    player_id=target_id,
                    name=player.name,
                    is_goalkeeper=player.is_goalkeeper,
                    match_rating=fmean(item.score for item in scored),
                    votes_count=len(scored),
                    votes=scored,
                )
            )
        ratings.sort(key=lambda rating: rating.match_rating, reverse=True)
        return ratings

    def player_history(self, player_id: str) -> List[MatchHistoryItem]:
        player = self._store.get_player(player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not found", kind="player", key=player_id)

        votes_by_match: Dict[str, List[Vote]] = defaultdict(list)
        for vote in self._store.read_votes_for_target(player_id):
            votes_by_match[vote.match_id].append(vote)

        history: List[MatchHistoryItem] = []
        for match in self._store.list_player_matches(player_id, status=MatchStatus.FINISHED):
            record = self._store.get_assignment_record(match.match_id)
            if record is None:
                continue
            votes = votes_by_match.get(match.match_id, [])
            if votes:
                rating = fmean(
                    score_vote(vote.ratings, is_goalkeeper=player.is_goalkeeper, rules=self._rules)
                    for vote in votes
                )
            else:
                rating = player.overall * self._rules.score_scale
            result = record.result
            history.append(
                MatchHistoryItem(
                    match_id=match.match_id,
                    match_date=match.match_date,
                    goals_team_a=result.goals_team_a if result else None,
                    goals_team_b=result.goals_team_b if result else None,
                    winner=result.winner if result else None,
                    team=record.assignment.team_of(player_id),
                    match_rating=rating,
                    votes_count=len(votes),
                )
            )
        return history

    def fold_player_attributes(
        self,
        player_id: str,
        *,
        overall_formula: Optional[OverallFormula] = None,
    ) -> Player:
        """Recompute cumulative attributes from every vote the player received.

        ``overall`` only changes when a formula is supplied; the weighting
        lives outside this package.
        """

        player = self._store.get_player(player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not found", kind="player", key=player_id)
        votes = self._store.read_votes_for_target(player_id)
        if not votes:
            return player

        updates = {
            name: fmean(getattr(vote.ratings, name) for vote in votes)
            for name in scored_attributes(player.is_goalkeeper)
        }
        attributes = player.attributes.model_copy(update=updates)
        changes: Dict[str, object] = {"attributes": attributes}
        if overall_formula is not None:
            changes["overall"] = max(0.0, min(5.0, overall_formula(player, attributes)))
        folded = player.model_copy(update=changes)
        self._store.save_player(folded)
        logger.info("Folded %d votes into cumulative attributes for %s", len(votes), player_id)
        return folded

    def ranking(self) -> Ranking:
        """Global leaderboard by ``overall``, field players and goalkeepers apart.

        Equal overalls keep alphabetical order.
        """

        ordered = sorted(self._store.list_players(), key=lambda player: player.overall, reverse=True)
        return Ranking(
            field_players=[player for player in ordered if not player.is_goalkeeper],
            goalkeepers=[player for player in ordered if player.is_goalkeeper],
        )
