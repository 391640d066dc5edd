"""Greedy position-aware team balancing."""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence

from pelada.config import DEFAULT_RULES, MatchRules
from pelada.errors import ValidationError
from pelada.models import Player, Position, TeamAssignment


logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)


def _position_count(team: Sequence[Player], position: Position) -> int:
    return sum(1 for player in team if player.plays(position))


def _formation_distance(team: Sequence[Player], rules: MatchRules) -> int:
    return sum(
        (_position_count(team, position) - ideal) ** 2
        for position, ideal in rules.ideal_formation.items()
    )


def _unmet_need(team: Sequence[Player], rules: MatchRules) -> int:
    return sum(
        max(0, ideal - _position_count(team, position))
        for position, ideal in rules.ideal_formation.items()
    )


def _by_overall(players: Sequence[Player]) -> List[Player]:
    return sorted(players, key=lambda player: player.overall, reverse=True)


def _assign_position_pool(
    pool: Sequence[Player],
    position: Position,
    team_a: List[Player],
    team_b: List[Player],
    rules: MatchRules,
) -> None:
    for player in _by_overall(pool):
        count_a = _position_count(team_a, position)
        count_b = _position_count(team_b, position)
        if count_a < count_b:
            team_a.append(player)
        elif count_b < count_a:
            team_b.append(player)
        else:
            distance_a = _formation_distance([*team_a, player], rules)
            distance_b = _formation_distance([*team_b, player], rules)
            if distance_a <= distance_b:
                team_a.append(player)
            else:
                team_b.append(player)


def _assign_unpositioned(
    pool: Sequence[Player],
    team_a: List[Player],
    team_b: List[Player],
    rules: MatchRules,
) -> None:
    for player in _by_overall(pool):
        need_a = _unmet_need(team_a, rules)
        need_b = _unmet_need(team_b, rules)
        if need_a > need_b:
            team_a.append(player)
        elif need_b > need_a:
            team_b.append(player)
        elif len(team_a) <= len(team_b):
            team_a.append(player)
        else:
            team_b.append(player)


def _check_unique(roster: Sequence[Player]) -> None:
    seen: set[str] = set()
    for player in roster:
        if player.player_id in seen:
            raise ValidationError(
                f"Player {player.player_id!r} appears more than once in the roster",
                check="roster",
                field="player_id",
            )
        seen.add(player.player_id)


def balance_teams(
    roster: Sequence[Player],
    *,
    match_id: str,
    rng: Optional[random.Random] = None,
    rules: MatchRules = DEFAULT_RULES,
) -> TeamAssignment:
    """Split a confirmed roster into two teams.

    The roster is shuffled first so repeated calls can yield different valid
    splits; pass a seeded ``rng`` to pin the outcome. Goalkeepers alternate
    between the teams, field players are spread pool by pool according to
    their primary position, and players without a declared position fill the
    side furthest from the ideal formation.
    """

    _check_unique(roster)
    rng = rng or random.Random()

    shuffled = list(roster)
    rng.shuffle(shuffled)

    goalkeepers = [player for player in shuffled if player.is_goalkeeper]
    field = [player for player in shuffled if not player.is_goalkeeper]

    team_a: List[Player] = []
    team_b: List[Player] = []
    for index, keeper in enumerate(goalkeepers):
        (team_a if index % 2 == 0 else team_b).append(keeper)

    pools: Dict[Position, List[Player]] = {position: [] for position in rules.balanced_positions}
    unpositioned: List[Player] = []
    for player in field:
        primary = player.primary_position
        if primary in pools:
            pools[primary].append(player)
        else:
            unpositioned.append(player)

    for position, pool in pools.items():
        _assign_position_pool(pool, position, team_a, team_b, rules)
    _assign_unpositioned(unpositioned, team_a, team_b, rules)

    assignment = TeamAssignment(
        match_id=match_id,
        team_a=tuple(player.player_id for player in team_a),
        team_b=tuple(player.player_id for player in team_b),
    )
    logger.info(
        "Balanced match %s: team A %d players (overall %.2f), team B %d players (overall %.2f)",
        match_id,
        len(team_a),
        team_overall(team_a),
        len(team_b),
        team_overall(team_b),
    )
    return assignment


def team_overall(team: Sequence[Player]) -> float:
    return sum(player.overall for player in team)
