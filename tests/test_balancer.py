import random

import pytest

from pelada.balancer import balance_teams, team_overall
from pelada.errors import ValidationError
from pelada.models import Player, Position


def _player(player_id: str, overall: float = 0.0, *positions: Position, keeper: bool = False) -> Player:
    return Player(
        player_id=player_id,
        name=player_id,
        is_goalkeeper=keeper,
        positions=positions,
        overall=overall,
    )


def _mixed_roster() -> list[Player]:
    return [
        _player("gk1", 3.0, keeper=True),
        _player("gk2", 2.0, keeper=True),
        _player("gk3", 1.0, keeper=True),
        _player("a1", 4.5, Position.ATTACK),
        _player("a2", 3.5, Position.ATTACK, Position.MIDFIELD),
        _player("a3", 2.5, Position.ATTACK),
        _player("m1", 4.0, Position.MIDFIELD),
        _player("m2", 3.0, Position.MIDFIELD, Position.DEFENSE),
        _player("d1", 3.8, Position.DEFENSE),
        _player("d2", 2.2, Position.DEFENSE),
        _player("d3", 1.1, Position.DEFENSE, Position.ATTACK),
        _player("x1", 2.7),
        _player("x2", 1.9),
    ]


def test_teams_partition_roster_across_seeds():
    roster = _mixed_roster()
    ids = {player.player_id for player in roster}

    for seed in range(25):
        assignment = balance_teams(roster, match_id="m", rng=random.Random(seed))
        assert set(assignment.team_a).isdisjoint(assignment.team_b)
        assert set(assignment.team_a) | set(assignment.team_b) == ids
        assert len(assignment.team_a) + len(assignment.team_b) == len(roster)


def test_goalkeepers_split_evenly():
    roster = _mixed_roster()
    keepers = {player.player_id for player in roster if player.is_goalkeeper}

    for seed in range(25):
        assignment = balance_teams(roster, match_id="m", rng=random.Random(seed))
        keepers_a = len(keepers & set(assignment.team_a))
        keepers_b = len(keepers & set(assignment.team_b))
        assert abs(keepers_a - keepers_b) <= 1


def test_two_keepers_and_unpositioned_field_players():
    by_id = {
        "A": _player("A", 2.0, keeper=True),
        "B": _player("B", 2.0, keeper=True),
    }
    for player_id, overall in zip("CDEFGH", (5, 4, 3, 2, 1, 0)):
        by_id[player_id] = _player(player_id, float(overall))

    for seed in range(10):
        assignment = balance_teams(list(by_id.values()), match_id="m", rng=random.Random(seed))
        team_a = [by_id[pid] for pid in assignment.team_a]
        team_b = [by_id[pid] for pid in assignment.team_b]

        assert sum(1 for player in team_a if player.is_goalkeeper) == 1
        assert sum(1 for player in team_b if player.is_goalkeeper) == 1
        assert team_overall([p for p in team_a if not p.is_goalkeeper]) == 9.0
        assert team_overall([p for p in team_b if not p.is_goalkeeper]) == 6.0
        assert "C" in assignment.team_a


def test_position_pool_alternates_by_overall():
    roster = [
        _player("a4", 1.0, Position.ATTACK),
        _player("a1", 4.0, Position.ATTACK),
        _player("a3", 2.0, Position.ATTACK),
        _player("a2", 3.0, Position.ATTACK),
    ]

    assignment = balance_teams(roster, match_id="m", rng=random.Random(1))

    assert set(assignment.team_a) == {"a1", "a3"}
    assert set(assignment.team_b) == {"a2", "a4"}


def test_seeded_draw_is_reproducible():
    roster = _mixed_roster()

    first = balance_teams(roster, match_id="m", rng=random.Random(42))
    second = balance_teams(roster, match_id="m", rng=random.Random(42))

    assert first == second


def test_empty_roster_gives_empty_teams():
    assignment = balance_teams([], match_id="m", rng=random.Random(0))

    assert assignment.team_a == ()
    assert assignment.team_b == ()
    assert not assignment.is_populated


def test_duplicate_players_rejected():
    roster = [_player("p1", 3.0), _player("p1", 2.0)]

    with pytest.raises(ValidationError) as excinfo:
        balance_teams(roster, match_id="m")

    assert excinfo.value.check == "roster"


def test_different_seeds_can_yield_different_splits():
    roster = _mixed_roster()

    splits = {
        (assignment.team_a, assignment.team_b)
        for assignment in (balance_teams(roster, match_id="m", rng=random.Random(seed)) for seed in range(25))
    }

    assert len(splits) > 1
