"""Accept peer votes between teammates."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping

from pydantic import ValidationError as PydanticValidationError

from pelada.config import DEFAULT_RULES, MatchRules
from pelada.errors import DuplicateVoteError, ValidationError
from pelada.models import TeamAssignment, Vote, VoteRatings
from pelada.persistence import MatchStore
from pelada.voting.tracker import VoteCompletionTracker


logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)


def _coerce_ratings(ratings: VoteRatings | Mapping[str, Any]) -> VoteRatings:
    if isinstance(ratings, VoteRatings):
        return ratings
    try:
        return VoteRatings.model_validate(dict(ratings))
    except PydanticValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ())) or None
        raise ValidationError(
            f"Invalid rating for {field or 'vote'}: {error['msg']}",
            check="ratings",
            field=field,
        ) from exc


class VoteCollector:
    """One immutable vote per (match, voter, target).

    Preconditions are checked in a fixed order and the first failure wins.
    The store's unique constraint is the final word on duplicates; a
    concurrent writer that loses the race gets the same error as a logical
    duplicate.
    """

    def __init__(self, store: MatchStore, *, rules: MatchRules = DEFAULT_RULES):
        self._store = store
        self._rules = rules
        self._tracker = VoteCompletionTracker(store)

    def _require_assignment(self, match_id: str) -> TeamAssignment:
        assignment = self._store.read_assignment(match_id)
        if assignment is None or not assignment.is_populated:
            raise ValidationError(
                f"Teams have not been drawn for match {match_id}",
                check="assignment",
                field="match_id",
            )
        return assignment

    def _check(self, match_id: str, voter_id: str, target_id: str) -> None:
        assignment = self._require_assignment(match_id)
        voter_team = assignment.team_of(voter_id)
        if voter_team is None or assignment.team_of(target_id) != voter_team:
            raise ValidationError(
                f"Player {voter_id!r} and {target_id!r} are not on the same team",
                check="same_team",
                field="target_id",
            )
        if voter_id == target_id:
            raise ValidationError("Players cannot rate themselves", check="self_vote", field="target_id")
        if self._store.read_votes(match_id, voter_id=voter_id, target_id=target_id):
            raise ValidationError(
                f"Player {voter_id!r} already rated {target_id!r} in match {match_id}",
                check="duplicate",
                field="target_id",
            )

    def submit(
        self,
        match_id: str,
        voter_id: str,
        target_id: str,
        ratings: VoteRatings | Mapping[str, Any],
    ) -> Vote:
        try:
            self._check(match_id, voter_id, target_id)
            coerced = _coerce_ratings(ratings)
        except ValidationError as exc:
            logger.warning("Rejected vote %s -> %s in match %s: %s", voter_id, target_id, match_id, exc.check)
            raise
        try:
            vote = self._store.write_vote(match_id, voter_id, target_id, coerced)
        except DuplicateVoteError as exc:
            logger.warning("Duplicate vote %s -> %s in match %s lost the race", voter_id, target_id, match_id)
            raise ValidationError(str(exc), check="duplicate", field="target_id") from exc
        logger.info("Recorded vote %s -> %s in match %s", voter_id, target_id, match_id)
        return vote

    def submit_default_for_remaining(self, match_id: str, voter_id: str) -> List[Vote]:
        """Fill every teammate ``voter_id`` has not rated with neutral votes.

        Irreversible; callers must authorize and confirm before invoking.
        """

        try:
            assignment = self._require_assignment(match_id)
            if assignment.team_of(voter_id) is None:
                raise ValidationError(
                    f"Player {voter_id!r} is not on either team of match {match_id}",
                    check="same_team",
                    field="voter_id",
                )
            missing = self._tracker.missing_votes(match_id, voter_id)
            for target_id in missing:
                self._check(match_id, voter_id, target_id)
        except ValidationError as exc:
            logger.warning("Rejected force-complete for %s in match %s: %s", voter_id, match_id, exc.check)
            raise
        if not missing:
            return []

        neutral = VoteRatings.uniform(self._rules.neutral_rating)
        try:
            votes = self._store.write_votes(match_id, [(voter_id, target_id, neutral) for target_id in missing])
        except DuplicateVoteError as exc:
            raise ValidationError(str(exc), check="duplicate", field="target_id") from exc
        logger.warning(
            "Force-completed voting for %s in match %s with %d neutral votes",
            voter_id,
            match_id,
            len(votes),
        )
        return votes
