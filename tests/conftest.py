from __future__ import annotations

from datetime import date

import pytest

from pelada.models import Player, Position
from pelada.persistence import MatchStore


@pytest.fixture
def store(tmp_path, monkeypatch) -> MatchStore:
    monkeypatch.delenv("PELADA_DB_PATH", raising=False)
    return MatchStore(tmp_path / "pelada.sqlite")


@pytest.fixture
def played_match(store: MatchStore) -> str:
    """Finished match with teams {P1, P2, P3} vs {P4}."""

    for pid, keeper in (("P1", False), ("P2", False), ("P3", True), ("P4", False)):
        store.save_player(
            Player(
                player_id=pid,
                name=f"Player {pid[1:]}",
                is_goalkeeper=keeper,
                positions=() if keeper else (Position.MIDFIELD,),
                overall=3.0,
            )
        )
    match = store.create_match(date(2024, 5, 4), match_id="m1")
    for pid in ("P1", "P2", "P3", "P4"):
        store.register(match.match_id, pid)
    store.write_assignment(match.match_id, ["P1", "P2", "P3"], ["P4"])
    return match.match_id
