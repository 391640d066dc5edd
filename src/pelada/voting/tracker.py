"""Who still owes which votes for a match."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from pelada.models import MatchStatus, Player, TeamAssignment, TeamSide, Vote
from pelada.persistence import MatchStore


@dataclass(frozen=True)
class PlayerVotingStatus:
    player_id: str
    name: str
    is_goalkeeper: bool
    team: TeamSide | None
    total_teammates: int
    voted_count: int
    missing_votes: Tuple[str, ...]
    has_completed: bool


@dataclass(frozen=True)
class _MatchSnapshot:
    assignment: Optional[TeamAssignment]
    players: Dict[str, Player]
    votes: List[Vote]

    def teammates(self, player_id: str) -> Tuple[str, ...]:
        if self.assignment is None or not self.assignment.is_populated:
            return ()
        # Deleted accounts must not block completion forever.
        return tuple(pid for pid in self.assignment.teammates_of(player_id) if pid in self.players)

    def voted_targets(self, player_id: str) -> set[str]:
        return {
            vote.target_id
            for vote in self.votes
            if vote.voter_id == player_id and vote.target_id in self.players
        }

    def missing(self, player_id: str) -> Tuple[str, ...]:
        voted = self.voted_targets(player_id)
        return tuple(pid for pid in self.teammates(player_id) if pid not in voted)

    def completed(self, player_id: str) -> bool:
        teammates = self.teammates(player_id)
        return bool(teammates) and not self.missing(player_id)

    @property
    def participants(self) -> Tuple[str, ...]:
        if self.assignment is None or not self.assignment.is_populated:
            return ()
        return tuple(pid for pid in self.assignment.player_ids if pid in self.players)


class VoteCompletionTracker:
    """Read-only view over assignments and votes.

    A player with no teammates is never reported complete, and a match is
    only fully voted when every participant has completed.
    """

    def __init__(self, store: MatchStore):
        self._store = store

    def _snapshot(self, match_id: str) -> _MatchSnapshot:
        assignment = self._store.read_assignment(match_id)
        if assignment is None or not assignment.is_populated:
            return _MatchSnapshot(assignment=assignment, players={}, votes=[])
        players = {
            player.player_id: player for player in self._store.get_players(list(assignment.player_ids))
        }
        return _MatchSnapshot(
            assignment=assignment,
            players=players,
            votes=self._store.read_votes(match_id),
        )

    def teammates(self, match_id: str, player_id: str) -> Tuple[str, ...]:
        return self._snapshot(match_id).teammates(player_id)

    def missing_votes(self, match_id: str, player_id: str) -> Tuple[str, ...]:
        return self._snapshot(match_id).missing(player_id)

    def has_completed(self, match_id: str, player_id: str) -> bool:
        return self._snapshot(match_id).completed(player_id)

    def all_voted(self, match_id: str) -> bool:
        snapshot = self._snapshot(match_id)
        participants = snapshot.participants
        if not participants:
            return False
        return all(snapshot.completed(pid) for pid in participants)

    def voter_progress(self, match_id: str) -> Tuple[int, int]:
        """Return ``(completed, total)`` participant counts."""

        snapshot = self._snapshot(match_id)
        participants = snapshot.participants
        completed = sum(1 for pid in participants if snapshot.completed(pid))
        return completed, len(participants)

    def match_status(self, match_id: str) -> List[PlayerVotingStatus]:
        snapshot = self._snapshot(match_id)
        statuses: List[PlayerVotingStatus] = []
        for pid in snapshot.participants:
            player = snapshot.players[pid]
            teammates = snapshot.teammates(pid)
            missing = snapshot.missing(pid)
            statuses.append(
                PlayerVotingStatus(
                    player_id=pid,
                    name=player.name,
                    is_goalkeeper=player.is_goalkeeper,
                    team=snapshot.assignment.team_of(pid) if snapshot.assignment else None,
                    total_teammates=len(teammates),
                    voted_count=len(snapshot.voted_targets(pid) & set(teammates)),
                    missing_votes=missing,
                    has_completed=bool(teammates) and not missing,
                )
            )
        statuses.sort(key=lambda status: (status.has_completed, status.team or "Z", status.name))
        return statuses

    def pending_matches(self, player_id: str) -> List[str]:
        """Finished matches in which ``player_id`` still has teammates to rate."""

        pending: List[str] = []
        for match in self._store.list_player_matches(player_id, status=MatchStatus.FINISHED):
            if self._snapshot(match.match_id).missing(player_id):
                pending.append(match.match_id)
        return pending
