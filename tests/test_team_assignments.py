import random
from datetime import date

import pytest

from pelada.errors import NotFoundError, ValidationError
from pelada.models import Player, Position, TeamAssignment
from pelada.teams import TeamAssignmentStore, is_populated, move_player


def _roster() -> list[Player]:
    return [
        Player(player_id="gk1", name="Keeper One", is_goalkeeper=True, overall=3.0),
        Player(player_id="gk2", name="Keeper Two", is_goalkeeper=True, overall=2.5),
        Player(player_id="p1", name="Ana", positions=[Position.ATTACK], overall=4.0),
        Player(player_id="p2", name="Bia", positions=[Position.DEFENSE], overall=3.5),
        Player(player_id="p3", name="Caio", positions=[Position.MIDFIELD], overall=3.0),
        Player(player_id="p4", name="Duda", overall=2.0),
    ]


@pytest.fixture
def roster_match(store) -> str:
    store.create_match(date(2024, 5, 4), match_id="m1")
    for player in _roster():
        store.save_player(player)
        store.register("m1", player.player_id)
    return "m1"


def test_save_then_load_round_trip(store, roster_match):
    teams = TeamAssignmentStore(store)

    saved = teams.save(roster_match, ["gk1", "p1", "p2"], ["gk2", "p3", "p4"])
    loaded = teams.load(roster_match)

    assert loaded == saved
    assert loaded.team_a == ("gk1", "p1", "p2")
    assert teams.is_locked(roster_match)


def test_load_missing_match_returns_none(store):
    teams = TeamAssignmentStore(store)

    assert teams.load("missing") is None
    assert not teams.is_populated(teams.load("missing"))
    assert not teams.is_locked("missing")


def test_empty_team_a_is_not_populated(store, roster_match):
    teams = TeamAssignmentStore(store)
    teams.save(roster_match, [], ["gk1", "gk2", "p1", "p2", "p3", "p4"])

    assert not teams.is_populated(teams.load(roster_match))
    assert not teams.is_locked(roster_match)


def test_save_overwrites_previous_split(store, roster_match):
    teams = TeamAssignmentStore(store)
    teams.save(roster_match, ["gk1", "p1", "p2"], ["gk2", "p3", "p4"])
    teams.save(roster_match, ["gk2", "p3", "p4"], ["gk1", "p1", "p2"])

    assert teams.load(roster_match).team_a == ("gk2", "p3", "p4")


def test_save_rejects_overlapping_split(store, roster_match):
    teams = TeamAssignmentStore(store)

    with pytest.raises(ValidationError) as excinfo:
        teams.save(roster_match, ["gk1", "p1", "p2"], ["gk2", "p2", "p3", "p4"])

    assert excinfo.value.check == "roster"
    assert teams.load(roster_match) is None


def test_save_rejects_unregistered_player(store, roster_match):
    teams = TeamAssignmentStore(store)

    with pytest.raises(ValidationError) as excinfo:
        teams.save(roster_match, ["gk1", "p1", "p2", "ghost"], ["gk2", "p3", "p4"])

    assert excinfo.value.check == "roster"
    assert excinfo.value.field == "teams"
    assert teams.load(roster_match) is None


def test_save_rejects_split_missing_a_registered_player(store, roster_match):
    teams = TeamAssignmentStore(store)

    with pytest.raises(ValidationError) as excinfo:
        teams.save(roster_match, ["gk1", "p1", "p2"], ["gk2", "p3"])

    assert excinfo.value.check == "roster"
    assert teams.load(roster_match) is None


def test_draw_blocked_until_unlocked(store, roster_match):
    teams = TeamAssignmentStore(store)
    roster = store.read_roster(roster_match)
    drawn = teams.draw(roster_match, roster, rng=random.Random(3))
    teams.save(roster_match, drawn.team_a, drawn.team_b)

    with pytest.raises(ValidationError) as excinfo:
        teams.draw(roster_match, roster, rng=random.Random(4))
    assert excinfo.value.check == "locked"

    teams.unlock(roster_match)
    assert not teams.is_locked(roster_match)
    redrawn = teams.draw(roster_match, roster, rng=random.Random(3))
    assert redrawn == drawn


def test_draw_does_not_persist(store):
    teams = TeamAssignmentStore(store)

    teams.draw("m1", _roster(), rng=random.Random(0))

    assert teams.load("m1") is None


def test_unlock_without_teams_raises(store):
    with pytest.raises(NotFoundError):
        TeamAssignmentStore(store).unlock("m1")


def test_move_player_is_pure():
    original = TeamAssignment(match_id="m1", team_a=("p1", "p2"), team_b=("p3",))

    moved = move_player(original, "p2", "A")

    assert moved.team_a == ("p1",)
    assert moved.team_b == ("p3", "p2")
    assert original.team_a == ("p1", "p2")

    back = move_player(moved, "p2", "B")
    assert back.team_a == ("p1", "p2")
    assert back.team_b == ("p3",)


def test_move_player_requires_membership():
    assignment = TeamAssignment(match_id="m1", team_a=("p1",), team_b=("p3",))

    with pytest.raises(ValidationError) as excinfo:
        move_player(assignment, "p3", "A")

    assert excinfo.value.check == "membership"


def test_is_populated_helper():
    assert not is_populated(None)
    assert is_populated(TeamAssignment(match_id="m1", team_a=("p1",)))
