"""Save, load, lock and hand-edit the team split of a match."""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from pelada.balancer import balance_teams
from pelada.config import DEFAULT_RULES, MatchRules
from pelada.errors import NotFoundError, ValidationError
from pelada.models import Player, TeamAssignment, TeamSide
from pelada.persistence import MatchStore


logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)


def is_populated(assignment: Optional[TeamAssignment]) -> bool:
    """An empty team A counts as "no teams yet" everywhere downstream."""

    return assignment is not None and assignment.is_populated


def move_player(assignment: TeamAssignment, player_id: str, from_team: TeamSide) -> TeamAssignment:
    """Return a copy of ``assignment`` with ``player_id`` moved to the other side."""

    source = assignment.team(from_team)
    if player_id not in source:
        raise ValidationError(
            f"Player {player_id!r} is not on team {from_team}",
            check="membership",
            field="player_id",
        )
    remaining = tuple(pid for pid in source if pid != player_id)
    if from_team == "A":
        return assignment.model_copy(update={"team_a": remaining, "team_b": assignment.team_b + (player_id,)})
    return assignment.model_copy(update={"team_a": assignment.team_a + (player_id,), "team_b": remaining})


class TeamAssignmentStore:
    """Authoritative team split per match.

    A saved split is locked immediately; it has to be unlocked before a new
    draw is accepted. ``save`` itself always overwrites (last writer wins).
    """

    def __init__(self, store: MatchStore, *, rules: MatchRules = DEFAULT_RULES):
        self._store = store
        self._rules = rules

    def save(self, match_id: str, team_a: Sequence[str], team_b: Sequence[str]) -> TeamAssignment:
        try:
            assignment = TeamAssignment(match_id=match_id, team_a=tuple(team_a), team_b=tuple(team_b))
        except PydanticValidationError as exc:
            raise ValidationError(
                f"Invalid team split for match {match_id}: {exc.errors()[0]['msg']}",
                check="roster",
                field="teams",
            ) from exc
        roster_ids = {player.player_id for player in self._store.read_roster(match_id)}
        split_ids = set(assignment.player_ids)
        if split_ids != roster_ids:
            missing = sorted(roster_ids - split_ids)
            unknown = sorted(split_ids - roster_ids)
            raise ValidationError(
                f"Team split for match {match_id} does not match its roster "
                f"(missing: {', '.join(missing) or '-'}; not registered: {', '.join(unknown) or '-'})",
                check="roster",
                field="teams",
            )
        record = self._store.write_assignment(match_id, assignment.team_a, assignment.team_b, locked=True)
        logger.info(
            "Saved teams for match %s (%d vs %d); split is locked",
            match_id,
            len(assignment.team_a),
            len(assignment.team_b),
        )
        return record.assignment

    def load(self, match_id: str) -> Optional[TeamAssignment]:
        return self._store.read_assignment(match_id)

    def is_populated(self, assignment: Optional[TeamAssignment]) -> bool:
        return is_populated(assignment)

    def is_locked(self, match_id: str) -> bool:
        record = self._store.get_assignment_record(match_id)
        if record is None or not record.assignment.is_populated:
            return False
        return record.locked

    def unlock(self, match_id: str) -> TeamAssignment:
        record = self._store.get_assignment_record(match_id)
        if record is None or not record.assignment.is_populated:
            raise NotFoundError(f"No teams saved for match {match_id}", kind="assignment", key=match_id)
        self._store.set_assignment_locked(match_id, False)
        logger.info("Unlocked teams for match %s", match_id)
        return record.assignment

    def draw(
        self,
        match_id: str,
        roster: Sequence[Player],
        *,
        rng: Optional[random.Random] = None,
    ) -> TeamAssignment:
        """Balance ``roster`` into a fresh, unsaved split."""

        if self.is_locked(match_id):
            raise ValidationError(
                f"Teams for match {match_id} are locked; unlock before drawing again",
                check="locked",
            )
        return balance_teams(roster, match_id=match_id, rng=rng, rules=self._rules)
