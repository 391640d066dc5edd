"""REST API for the pelada engine."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Sequence

from fastapi import FastAPI, HTTPException, Query

from pelada.api.schemas import (
    DrawRequest,
    ForceCompleteRequest,
    MatchCreateRequest,
    MatchHistoryResponse,
    MatchResponse,
    MatchResultRequest,
    MatchResultResponse,
    MatchSummaryResponse,
    MovePlayerRequest,
    PlayerRatingResponse,
    PlayerVotingStatusResponse,
    RankingResponse,
    RegistrationRequest,
    ScoredVoteResponse,
    TeamAssignmentResponse,
    TeamPlayerResponse,
    TeamsPayload,
    VoteRequest,
    VoteResponse,
    VotingStatusResponse,
)
from pelada.config import rules_from_env
from pelada.errors import CapacityError, NotFoundError, PeladaError, StoreError, ValidationError
from pelada.matches import MatchService
from pelada.models import MatchRecord, Player, Role, TeamAssignment, Vote
from pelada.persistence import MatchStore
from pelada.ratings import RatingAggregator, build_match_summary
from pelada.teams import TeamAssignmentStore, move_player
from pelada.voting import VoteCollector, VoteCompletionTracker


def _http_error(exc: PeladaError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=exc.to_dict())
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=exc.message)
    if isinstance(exc, CapacityError):
        return HTTPException(status_code=409, detail=exc.message)
    if isinstance(exc, StoreError):
        return HTTPException(status_code=503, detail="Storage unavailable")
    return HTTPException(status_code=500, detail=str(exc))


def _require_admin(role: Role) -> None:
    if not role.is_admin:
        raise HTTPException(status_code=403, detail="Administrator role required")


def _vote_to_response(vote: Vote) -> VoteResponse:
    return VoteResponse(
        vote_id=vote.vote_id,
        match_id=vote.match_id,
        voter_id=vote.voter_id,
        target_id=vote.target_id,
        ratings=vote.ratings.model_dump(),
        created_at=vote.created_at,
    )


def _team_players(ids: Sequence[str], players: dict[str, Player]) -> list[TeamPlayerResponse]:
    return [
        TeamPlayerResponse(
            player_id=players[pid].player_id,
            name=players[pid].name,
            is_goalkeeper=players[pid].is_goalkeeper,
            positions=[position.value for position in players[pid].positions],
            overall=players[pid].overall_display,
        )
        for pid in ids
        if pid in players
    ]


def create_app(db_path: Path | str | None = None) -> FastAPI:
    app = FastAPI(title="pelada")
    store = MatchStore(db_path or Path(__file__).resolve().parent.parent / "pelada.sqlite")
    rules = rules_from_env()
    app.state.match_store = store

    matches = MatchService(store, rules=rules)
    teams = TeamAssignmentStore(store, rules=rules)
    collector = VoteCollector(store, rules=rules)
    tracker = VoteCompletionTracker(store)
    aggregator = RatingAggregator(store, rules=rules)

    def assignment_to_response(assignment: TeamAssignment, *, saved: bool, locked: bool) -> TeamAssignmentResponse:
        players = {player.player_id: player for player in store.get_players(list(assignment.player_ids))}
        team_a_players = _team_players(assignment.team_a, players)
        team_b_players = _team_players(assignment.team_b, players)
        return TeamAssignmentResponse(
            match_id=assignment.match_id,
            team_a=list(assignment.team_a),
            team_b=list(assignment.team_b),
            locked=locked,
            saved=saved,
            team_a_players=team_a_players,
            team_b_players=team_b_players,
            team_a_overall=sum(player.overall for player in team_a_players),
            team_b_overall=sum(player.overall for player in team_b_players),
        )

    def match_to_response(match: MatchRecord) -> MatchResponse:
        return MatchResponse(
            match_id=match.match_id,
            match_date=match.match_date,
            status=match.status.value,
            player_count=len(store.read_roster(match.match_id)),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.put("/players/{player_id}", response_model=Player)
    async def save_player(player_id: str, player: Player):
        if player.player_id != player_id:
            raise HTTPException(status_code=400, detail="player_id in body does not match path")
        try:
            return store.save_player(player)
        except PeladaError as exc:
            raise _http_error(exc) from exc

    @app.get("/players/{player_id}", response_model=Player)
    async def get_player(player_id: str):
        player = store.get_player(player_id)
        if player is None:
            raise HTTPException(status_code=404, detail="Player not found")
        return player

    @app.get("/players/{player_id}/pending-votes")
    async def pending_votes(player_id: str):
        try:
            return {"player_id": player_id, "match_ids": tracker.pending_matches(player_id)}
        except PeladaError as exc:
            raise _http_error(exc) from exc

    @app.get("/players/{player_id}/history", response_model=list[MatchHistoryResponse])
    async def player_history(player_id: str):
        try:
            history = aggregator.player_history(player_id)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        return [
            MatchHistoryResponse(
                match_id=item.match_id,
                match_date=item.match_date,
                goals_team_a=item.goals_team_a,
                goals_team_b=item.goals_team_b,
                winner=item.winner,
                team=item.team,
                match_rating=item.match_rating,
                votes_count=item.votes_count,
            )
            for item in history
        ]

    @app.post("/players/{player_id}/fold", response_model=Player)
    async def fold_player(player_id: str, role: Role = Query(Role.PLAYER)):
        _require_admin(role)
        try:
            return aggregator.fold_player_attributes(player_id)
        except PeladaError as exc:
            raise _http_error(exc) from exc

    @app.get("/ranking", response_model=RankingResponse)
    async def ranking():
        try:
            board = aggregator.ranking()
        except PeladaError as exc:
            raise _http_error(exc) from exc
        by_id = {player.player_id: player for player in board.field_players + board.goalkeepers}
        return RankingResponse(
            field_players=_team_players([player.player_id for player in board.field_players], by_id),
            goalkeepers=_team_players([player.player_id for player in board.goalkeepers], by_id),
        )

    @app.post("/matches", response_model=MatchResponse)
    async def create_match(payload: MatchCreateRequest, role: Role = Query(Role.PLAYER)):
        _require_admin(role)
        try:
            match = matches.create_match(payload.match_date, match_id=payload.match_id)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        return match_to_response(match)

    @app.get("/matches", response_model=list[MatchResponse])
    async def list_matches(limit: int = 50):
        return [match_to_response(match) for match in store.list_matches(limit=limit)]

    @app.delete("/matches/{match_id}")
    async def delete_match(match_id: str, role: Role = Query(Role.PLAYER)):
        _require_admin(role)
        try:
            matches.delete_match(match_id)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        return {"match_id": match_id, "deleted": True}

    @app.get("/matches/{match_id}/players", response_model=list[Player])
    async def match_roster(match_id: str):
        try:
            return matches.read_roster(match_id)
        except PeladaError as exc:
            raise _http_error(exc) from exc

    @app.post("/matches/{match_id}/players", response_model=list[Player])
    async def register_player(match_id: str, payload: RegistrationRequest):
        try:
            return matches.register_player(match_id, payload.player_id)
        except PeladaError as exc:
            raise _http_error(exc) from exc

    @app.delete("/matches/{match_id}/players/{player_id}")
    async def unregister_player(match_id: str, player_id: str):
        try:
            removed = matches.unregister_player(match_id, player_id)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        return {"match_id": match_id, "player_id": player_id, "removed": removed}

    @app.get("/matches/{match_id}/teams", response_model=TeamAssignmentResponse)
    async def get_teams(match_id: str):
        assignment = teams.load(match_id)
        if not teams.is_populated(assignment):
            raise HTTPException(status_code=404, detail="Teams not defined yet")
        return assignment_to_response(assignment, saved=True, locked=teams.is_locked(match_id))

    @app.post("/matches/{match_id}/teams/draw", response_model=TeamAssignmentResponse)
    async def draw_teams(match_id: str, payload: DrawRequest | None = None, role: Role = Query(Role.PLAYER)):
        _require_admin(role)
        rng = random.Random(payload.seed) if payload and payload.seed is not None else None
        try:
            roster = matches.read_roster(match_id)
            assignment = teams.draw(match_id, roster, rng=rng)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        return assignment_to_response(assignment, saved=False, locked=False)

    @app.put("/matches/{match_id}/teams", response_model=TeamAssignmentResponse)
    async def save_teams(match_id: str, payload: TeamsPayload, role: Role = Query(Role.PLAYER)):
        _require_admin(role)
        try:
            assignment = teams.save(match_id, payload.team_a, payload.team_b)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        return assignment_to_response(assignment, saved=True, locked=True)

    @app.post("/matches/{match_id}/teams/unlock", response_model=TeamAssignmentResponse)
    async def unlock_teams(match_id: str, role: Role = Query(Role.PLAYER)):
        _require_admin(role)
        try:
            assignment = teams.unlock(match_id)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        return assignment_to_response(assignment, saved=True, locked=False)

    @app.post("/matches/{match_id}/teams/move", response_model=TeamAssignmentResponse)
    async def move_team_player(match_id: str, payload: MovePlayerRequest, role: Role = Query(Role.PLAYER)):
        _require_admin(role)
        try:
            if teams.is_locked(match_id):
                raise ValidationError("Teams are locked; unlock before editing", check="locked")
            current = TeamAssignment(match_id=match_id, team_a=tuple(payload.team_a), team_b=tuple(payload.team_b))
            moved = move_player(current, payload.player_id, payload.from_team)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return assignment_to_response(moved, saved=False, locked=False)

    @app.post("/matches/{match_id}/result", response_model=MatchResultResponse)
    async def finish_match(match_id: str, payload: MatchResultRequest, role: Role = Query(Role.PLAYER)):
        _require_admin(role)
        try:
            result = matches.finish_match(match_id, payload.goals_team_a, payload.goals_team_b)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        return MatchResultResponse(match_id=match_id, **result.model_dump())

    @app.post("/matches/{match_id}/votes", response_model=VoteResponse)
    async def submit_vote(match_id: str, payload: VoteRequest):
        try:
            vote = collector.submit(match_id, payload.voter_id, payload.target_id, payload.ratings)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        return _vote_to_response(vote)

    @app.post("/matches/{match_id}/votes/{voter_id}/complete", response_model=list[VoteResponse])
    async def force_complete(
        match_id: str,
        voter_id: str,
        payload: ForceCompleteRequest,
        role: Role = Query(Role.PLAYER),
    ):
        _require_admin(role)
        if not payload.confirm:
            raise HTTPException(status_code=400, detail="Force-complete is irreversible; resend with confirm=true")
        try:
            votes = collector.submit_default_for_remaining(match_id, voter_id)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        return [_vote_to_response(vote) for vote in votes]

    @app.get("/matches/{match_id}/voting-status", response_model=VotingStatusResponse)
    async def voting_status(match_id: str, role: Role = Query(Role.PLAYER)):
        _require_admin(role)
        try:
            statuses = tracker.match_status(match_id)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        completed = sum(1 for status in statuses if status.has_completed)
        total = len(statuses)
        return VotingStatusResponse(
            match_id=match_id,
            all_voted=total > 0 and completed == total,
            completed=completed,
            total=total,
            completion_percent=round(completed / total * 100) if total else 0,
            players=[
                PlayerVotingStatusResponse(
                    player_id=status.player_id,
                    name=status.name,
                    is_goalkeeper=status.is_goalkeeper,
                    team=status.team,
                    total_teammates=status.total_teammates,
                    voted_count=status.voted_count,
                    missing_votes=list(status.missing_votes),
                    has_completed=status.has_completed,
                )
                for status in statuses
            ],
        )

    @app.get("/matches/{match_id}/summary", response_model=MatchSummaryResponse)
    async def match_summary(match_id: str, role: Role = Query(Role.PLAYER)):
        try:
            summary = build_match_summary(store, match_id, role=role, rules=rules)
        except PeladaError as exc:
            raise _http_error(exc) from exc
        result = summary.result
        return MatchSummaryResponse(
            match_id=match_id,
            team_a=list(summary.assignment.team_a) if summary.assignment else [],
            team_b=list(summary.assignment.team_b) if summary.assignment else [],
            goals_team_a=result.goals_team_a if result else None,
            goals_team_b=result.goals_team_b if result else None,
            winner=result.winner if result else None,
            all_voted=summary.all_voted,
            voters_completed=summary.voters_completed,
            voters_total=summary.voters_total,
            ratings_visible=summary.ratings_visible,
            anonymous=summary.anonymous,
            total_votes=summary.total_votes,
            ratings=[
                PlayerRatingResponse(
                    rank=index + 1,
                    player_id=rating.player_id,
                    name=rating.name,
                    is_goalkeeper=rating.is_goalkeeper,
                    match_rating=rating.match_rating,
                    votes_count=rating.votes_count,
                    votes=[
                        ScoredVoteResponse(
                            vote_id=vote.vote_id,
                            ratings=vote.ratings.model_dump(),
                            score=vote.score,
                            voter_id=vote.voter_id,
                        )
                        for vote in rating.votes
                    ],
                )
                for index, rating in enumerate(summary.ratings)
            ],
        )

    return app
