import pytest
from pydantic import ValidationError

from pelada.models import MatchResult, Player, Position, Role, TeamAssignment, VoteRatings


def test_player_is_frozen():
    player = Player(player_id="p1", name="Test Player", positions=[Position.ATTACK])

    assert player.positions == (Position.ATTACK,)
    with pytest.raises((TypeError, ValidationError)):
        player.name = "Other"  # type: ignore[misc]


def test_goalkeeper_position_is_implied():
    keeper = Player(player_id="gk", name="Keeper", is_goalkeeper=True)

    assert keeper.positions == (Position.GOALKEEPER,)
    assert keeper.primary_position is Position.GOALKEEPER


def test_goalkeeper_rejects_field_positions():
    with pytest.raises(ValidationError):
        Player(player_id="gk", name="Keeper", is_goalkeeper=True, positions=["Attack"])


def test_field_player_position_rules():
    with pytest.raises(ValidationError):
        Player(player_id="p", name="P", positions=["Goalkeeper"])
    with pytest.raises(ValidationError):
        Player(player_id="p", name="P", positions=["Attack", "Defense", "Midfield"])
    with pytest.raises(ValidationError):
        Player(player_id="p", name="P", positions=["Attack", "Attack"])


def test_overall_display_uses_hundred_scale():
    assert Player(player_id="p", name="P", overall=3.5).overall_display == 70


def test_vote_ratings_bounds():
    assert VoteRatings.uniform(3).passing == 3
    with pytest.raises(ValidationError):
        VoteRatings.uniform(0)
    with pytest.raises(ValidationError):
        VoteRatings(speed=5, finishing=5, passing=5, dribbling=5, defense=5, physical=6)


def test_team_assignment_rejects_overlap():
    with pytest.raises(ValidationError):
        TeamAssignment(match_id="m", team_a=("a", "b"), team_b=("b",))
    with pytest.raises(ValidationError):
        TeamAssignment(match_id="m", team_a=("a", "a"), team_b=())


def test_team_assignment_lookups():
    assignment = TeamAssignment(match_id="m", team_a=("a", "b", "c"), team_b=("d",))

    assert assignment.team_of("d") == "B"
    assert assignment.team_of("x") is None
    assert assignment.teammates_of("b") == ("a", "c")
    assert assignment.teammates_of("d") == ()
    assert not TeamAssignment(match_id="m", team_b=("d",)).is_populated


def test_match_result_winner():
    assert MatchResult.from_score(3, 1).winner == "A"
    assert MatchResult.from_score(0, 2).winner == "B"
    assert MatchResult.from_score(2, 2).winner == "draw"


def test_roles():
    assert not Role.PLAYER.is_admin
    assert Role.ADMIN.is_admin and not Role.ADMIN.sees_voters
    assert Role.SUPER.is_admin and Role.SUPER.sees_voters
