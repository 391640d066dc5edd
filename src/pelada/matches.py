"""Match lifecycle: creation, registration caps, result and deletion."""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from pelada.config import DEFAULT_RULES, MatchRules
from pelada.errors import CapacityError, NotFoundError, ValidationError
from pelada.models import MatchRecord, MatchResult, MatchStatus, Player
from pelada.persistence import MatchStore


logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)


class MatchService:
    """Registration-side collaborator that hands rosters to the balancer."""

    def __init__(self, store: MatchStore, *, rules: MatchRules = DEFAULT_RULES):
        self._store = store
        self._rules = rules

    def _require_match(self, match_id: str) -> MatchRecord:
        match = self._store.get_match(match_id)
        if match is None:
            raise NotFoundError(f"Match {match_id} not found", kind="match", key=match_id)
        return match

    def create_match(self, match_date: date, *, match_id: Optional[str] = None) -> MatchRecord:
        match = self._store.create_match(match_date, match_id=match_id)
        logger.info("Created match %s on %s", match.match_id, match.match_date.isoformat())
        return match

    def read_roster(self, match_id: str) -> List[Player]:
        self._require_match(match_id)
        return self._store.read_roster(match_id)

    def register_player(self, match_id: str, player_id: str) -> List[Player]:
        """Confirm ``player_id`` for a match, enforcing the roster caps."""

        match = self._require_match(match_id)
        if match.status is not MatchStatus.OPEN:
            raise ValidationError(f"Match {match_id} is no longer open", check="match_status", field="match_id")
        player = self._store.get_player(player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not found", kind="player", key=player_id)

        roster = self._store.read_roster(match_id)
        if any(existing.player_id == player_id for existing in roster):
            return roster

        if len(roster) >= self._rules.max_players:
            raise CapacityError(
                f"Match {match_id} already has {self._rules.max_players} players",
                limit=self._rules.max_players,
                slot="total",
            )
        goalkeepers = sum(1 for existing in roster if existing.is_goalkeeper)
        if player.is_goalkeeper and goalkeepers >= self._rules.max_goalkeepers:
            raise CapacityError(
                f"Match {match_id} already has {self._rules.max_goalkeepers} goalkeepers",
                limit=self._rules.max_goalkeepers,
                slot="goalkeeper",
            )
        if not player.is_goalkeeper and len(roster) - goalkeepers >= self._rules.max_field_players:
            raise CapacityError(
                f"Match {match_id} already has {self._rules.max_field_players} field players",
                limit=self._rules.max_field_players,
                slot="field",
            )

        self._store.register(match_id, player_id)
        return self._store.read_roster(match_id)

    def unregister_player(self, match_id: str, player_id: str) -> bool:
        self._require_match(match_id)
        return self._store.unregister(match_id, player_id)

    def finish_match(self, match_id: str, goals_team_a: int, goals_team_b: int) -> MatchResult:
        """Record the score and open voting; teams must have been saved."""

        self._require_match(match_id)
        if goals_team_a < 0 or goals_team_b < 0:
            raise ValidationError("Goals cannot be negative", check="result", field="goals")
        assignment = self._store.read_assignment(match_id)
        if assignment is None or not assignment.is_populated:
            raise NotFoundError(
                f"Teams must be drawn before finishing match {match_id}",
                kind="assignment",
                key=match_id,
            )
        result = MatchResult.from_score(goals_team_a, goals_team_b)
        self._store.write_result(match_id, result)
        self._store.set_match_status(match_id, MatchStatus.FINISHED)
        logger.info("Finished match %s: %d x %d (%s)", match_id, goals_team_a, goals_team_b, result.winner)
        return result

    def delete_match(self, match_id: str) -> None:
        if not self._store.delete_match(match_id):
            raise NotFoundError(f"Match {match_id} not found", kind="match", key=match_id)
        logger.info("Deleted match %s with its teams and votes", match_id)
