from datetime import date

from pelada.models import MatchStatus, Player, VoteRatings
from pelada.voting import VoteCompletionTracker


def _vote(store, match_id: str, voter: str, target: str) -> None:
    store.write_vote(match_id, voter, target, VoteRatings.uniform(5))


def test_player_completes_after_rating_every_teammate(store, played_match):
    tracker = VoteCompletionTracker(store)

    assert tracker.teammates(played_match, "P1") == ("P2", "P3")
    assert not tracker.has_completed(played_match, "P1")

    _vote(store, played_match, "P1", "P2")
    assert tracker.missing_votes(played_match, "P1") == ("P3",)

    _vote(store, played_match, "P1", "P3")
    assert tracker.missing_votes(played_match, "P1") == ()
    assert tracker.has_completed(played_match, "P1")


def test_lone_player_never_completes(store, played_match):
    tracker = VoteCompletionTracker(store)
    for voter, targets in (("P1", ("P2", "P3")), ("P2", ("P1", "P3")), ("P3", ("P1", "P2"))):
        for target in targets:
            _vote(store, played_match, voter, target)

    assert tracker.missing_votes(played_match, "P4") == ()
    assert not tracker.has_completed(played_match, "P4")
    assert not tracker.all_voted(played_match)
    assert tracker.voter_progress(played_match) == (3, 4)


def test_all_voted_when_every_participant_completes(store):
    for pid in ("a", "b", "c", "d"):
        store.save_player(Player(player_id=pid, name=pid))
    store.write_assignment("m2", ["a", "b"], ["c", "d"])
    tracker = VoteCompletionTracker(store)

    for voter, target in (("a", "b"), ("b", "a"), ("c", "d")):
        _vote(store, "m2", voter, target)
    assert not tracker.all_voted("m2")

    _vote(store, "m2", "d", "c")
    assert tracker.all_voted("m2")


def test_no_assignment_means_nothing_to_track(store):
    tracker = VoteCompletionTracker(store)

    assert tracker.teammates("missing", "P1") == ()
    assert not tracker.all_voted("missing")
    assert tracker.match_status("missing") == []
    assert tracker.voter_progress("missing") == (0, 0)


def test_deleted_teammate_does_not_block_completion(store, played_match):
    tracker = VoteCompletionTracker(store)
    _vote(store, played_match, "P1", "P2")

    store.delete_player("P3")

    assert tracker.teammates(played_match, "P1") == ("P2",)
    assert tracker.has_completed(played_match, "P1")


def test_match_status_lists_pending_players_first(store, played_match):
    tracker = VoteCompletionTracker(store)
    _vote(store, played_match, "P1", "P2")
    _vote(store, played_match, "P1", "P3")

    statuses = tracker.match_status(played_match)

    assert [status.player_id for status in statuses] == ["P2", "P3", "P4", "P1"]
    p2 = statuses[0]
    assert p2.team == "A"
    assert p2.total_teammates == 2
    assert p2.voted_count == 0
    assert p2.missing_votes == ("P1", "P3")
    assert statuses[-1].has_completed
    assert statuses[-1].voted_count == 2


def test_pending_matches_only_for_finished(store, played_match):
    tracker = VoteCompletionTracker(store)
    assert tracker.pending_matches("P1") == []

    store.set_match_status(played_match, MatchStatus.FINISHED)
    assert tracker.pending_matches("P1") == [played_match]
    assert tracker.pending_matches("P4") == []

    _vote(store, played_match, "P1", "P2")
    _vote(store, played_match, "P1", "P3")
    assert tracker.pending_matches("P1") == []


def test_pending_matches_across_several_games(store, played_match):
    store.set_match_status(played_match, MatchStatus.FINISHED)
    later = store.create_match(date(2024, 5, 11), match_id="m-later")
    for pid in ("P1", "P2"):
        store.register(later.match_id, pid)
    store.write_assignment(later.match_id, ["P1", "P2"], [])
    store.set_match_status(later.match_id, MatchStatus.FINISHED)

    assert VoteCompletionTracker(store).pending_matches("P2") == [played_match, "m-later"]


def test_voted_count_ignores_former_teammates(store, played_match):
    _vote(store, played_match, "P1", "P2")
    store.write_assignment(played_match, ["P1", "P3"], ["P2", "P4"])

    statuses = {status.player_id: status for status in VoteCompletionTracker(store).match_status(played_match)}

    assert statuses["P1"].total_teammates == 1
    assert statuses["P1"].voted_count == 0
    assert statuses["P1"].missing_votes == ("P3",)
