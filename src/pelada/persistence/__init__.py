"""Persistence layer for players, matches, team splits and votes."""

from __future__ import annotations

import json
import os
import sqlite3
import tempfile
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple
from uuid import uuid4

from pelada.errors import DuplicateVoteError, StoreError
from pelada.models import (
    ATTRIBUTE_NAMES,
    AssignmentRecord,
    MatchRecord,
    MatchResult,
    MatchStatus,
    Player,
    SkillAttributes,
    TeamAssignment,
    Vote,
    VoteRatings,
)

VoteEntry = Tuple[str, str, VoteRatings]


class MatchStore:
    """SQLite-backed store; each call opens its own connection."""

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        env_db = os.getenv("PELADA_DB_PATH")
        if env_db:
            if env_db.startswith("file:"):
                self.db_path: Path | str = env_db
                self._use_uri = True
            else:
                self.db_path = Path(env_db)
        elif isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(self.db_path)
            except sqlite3.OperationalError:
                fallback_dir = Path(tempfile.gettempdir()) / "pelada-runtime"
                fallback_dir.mkdir(parents=True, exist_ok=True)
                fallback = fallback_dir / "pelada.sqlite"
                conn = sqlite3.connect(fallback)
                self.db_path = fallback
                self._create_schema(conn)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise StoreError(f"Unable to open database {self.db_path}: {exc}") from exc
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._session() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS players (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                is_goalkeeper INTEGER NOT NULL DEFAULT 0,
                positions_json TEXT NOT NULL,
                attributes_json TEXT NOT NULL,
                overall REAL NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS matches (
                id TEXT PRIMARY KEY,
                match_date TEXT NOT NULL,
                status TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS match_players (
                match_id TEXT NOT NULL REFERENCES matches(id) ON DELETE CASCADE,
                player_id TEXT NOT NULL,
                created_at TEXT NOT NULL,
                PRIMARY KEY (match_id, player_id)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS assignments (
                match_id TEXT PRIMARY KEY,
                team_a_json TEXT NOT NULL,
                team_b_json TEXT NOT NULL,
                locked INTEGER NOT NULL DEFAULT 1,
                goals_team_a INTEGER,
                goals_team_b INTEGER,
                winner TEXT,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS votes (
                id TEXT PRIMARY KEY,
                match_id TEXT NOT NULL,
                voter_id TEXT NOT NULL,
                target_id TEXT NOT NULL,
                speed INTEGER NOT NULL,
                finishing INTEGER NOT NULL,
                passing INTEGER NOT NULL,
                dribbling INTEGER NOT NULL,
                defense INTEGER NOT NULL,
                physical INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                UNIQUE (match_id, voter_id, target_id)
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS votes_target_idx ON votes (target_id)")

    # Players -------------------------------------------------------------

    def save_player(self, player: Player) -> Player:
        now = datetime.now(timezone.utc).isoformat()
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO players (
                    id, name, is_goalkeeper, positions_json, attributes_json,
                    overall, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    is_goalkeeper = excluded.is_goalkeeper,
                    positions_json = excluded.positions_json,
                    attributes_json = excluded.attributes_json,
                    overall = excluded.overall,
                    updated_at = excluded.updated_at
                """,
                (
                    player.player_id,
                    player.name,
                    int(player.is_goalkeeper),
                    json.dumps([position.value for position in player.positions]),
                    player.attributes.model_dump_json(),
                    player.overall,
                    now,
                    now,
                ),
            )
        return player

    def get_player(self, player_id: str) -> Optional[Player]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM players WHERE id = ?", (player_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_player(row)

    def get_players(self, player_ids: Sequence[str]) -> List[Player]:
        """Return the players that still exist, in the order requested."""

        if not player_ids:
            return []
        placeholders = ", ".join("?" for _ in player_ids)
        with self._session() as conn:
            rows = conn.execute(
                f"SELECT * FROM players WHERE id IN ({placeholders})",
                tuple(player_ids),
            ).fetchall()
        by_id = {row["id"]: self._row_to_player(row) for row in rows}
        return [by_id[pid] for pid in player_ids if pid in by_id]

    def list_players(self) -> List[Player]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM players ORDER BY name").fetchall()
        return [self._row_to_player(row) for row in rows]

    def existing_player_ids(self, player_ids: Iterable[str]) -> set[str]:
        return {player.player_id for player in self.get_players(list(player_ids))}

    def delete_player(self, player_id: str) -> bool:
        with self._session() as conn:
            conn.execute("DELETE FROM match_players WHERE player_id = ?", (player_id,))
            cursor = conn.execute("DELETE FROM players WHERE id = ?", (player_id,))
        return cursor.rowcount > 0

    # Matches and registrations -------------------------------------------

    def create_match(self, match_date: date, *, match_id: Optional[str] = None) -> MatchRecord:
        match_id = match_id or uuid4().hex
        created_at = datetime.now(timezone.utc)
        with self._session() as conn:
            conn.execute(
                "INSERT INTO matches (id, match_date, status, created_at) VALUES (?, ?, ?, ?)",
                (match_id, match_date.isoformat(), MatchStatus.OPEN.value, created_at.isoformat()),
            )
        return MatchRecord(
            match_id=match_id,
            match_date=match_date,
            status=MatchStatus.OPEN,
            created_at=created_at,
        )

    def get_match(self, match_id: str) -> Optional[MatchRecord]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM matches WHERE id = ?", (match_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_match(row)

    def list_matches(self, *, status: MatchStatus | None = None, limit: int = 50) -> List[MatchRecord]:
        query = "SELECT * FROM matches"
        params: list[str | int] = []
        if status is not None:
            query += " WHERE status = ?"
            params.append(status.value)
        query += " ORDER BY match_date DESC LIMIT ?"
        params.append(limit)
        with self._session() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [self._row_to_match(row) for row in rows]

    def list_player_matches(self, player_id: str, *, status: MatchStatus | None = None) -> List[MatchRecord]:
        query = (
            "SELECT m.* FROM matches m JOIN match_players mp ON mp.match_id = m.id "
            "WHERE mp.player_id = ?"
        )
        params: list[str] = [player_id]
        if status is not None:
            query += " AND m.status = ?"
            params.append(status.value)
        query += " ORDER BY m.match_date ASC"
        with self._session() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [self._row_to_match(row) for row in rows]

    def set_match_status(self, match_id: str, status: MatchStatus) -> bool:
        with self._session() as conn:
            cursor = conn.execute(
                "UPDATE matches SET status = ? WHERE id = ?",
                (status.value, match_id),
            )
        return cursor.rowcount > 0

    def register(self, match_id: str, player_id: str) -> bool:
        """Add a player to a match roster; False when already registered."""

        with self._session() as conn:
            cursor = conn.execute(
                "INSERT OR IGNORE INTO match_players (match_id, player_id, created_at) VALUES (?, ?, ?)",
                (match_id, player_id, datetime.now(timezone.utc).isoformat()),
            )
        return cursor.rowcount > 0

    def unregister(self, match_id: str, player_id: str) -> bool:
        with self._session() as conn:
            cursor = conn.execute(
                "DELETE FROM match_players WHERE match_id = ? AND player_id = ?",
                (match_id, player_id),
            )
        return cursor.rowcount > 0

    def read_roster(self, match_id: str) -> List[Player]:
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT p.* FROM match_players mp
                JOIN players p ON p.id = mp.player_id
                WHERE mp.match_id = ?
                ORDER BY mp.created_at, mp.rowid
                """,
                (match_id,),
            ).fetchall()
        return [self._row_to_player(row) for row in rows]

    def delete_match(self, match_id: str) -> bool:
        with self._session() as conn:
            conn.execute("DELETE FROM votes WHERE match_id = ?", (match_id,))
            conn.execute("DELETE FROM assignments WHERE match_id = ?", (match_id,))
            conn.execute("DELETE FROM match_players WHERE match_id = ?", (match_id,))
            cursor = conn.execute("DELETE FROM matches WHERE id = ?", (match_id,))
        return cursor.rowcount > 0

    # Team assignments ----------------------------------------------------

    def read_assignment(self, match_id: str) -> Optional[TeamAssignment]:
        record = self.get_assignment_record(match_id)
        return record.assignment if record else None

    def get_assignment_record(self, match_id: str) -> Optional[AssignmentRecord]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM assignments WHERE match_id = ?", (match_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_assignment(row)

    def write_assignment(
        self,
        match_id: str,
        team_a: Sequence[str],
        team_b: Sequence[str],
        *,
        locked: bool = True,
    ) -> AssignmentRecord:
        assignment = TeamAssignment(match_id=match_id, team_a=tuple(team_a), team_b=tuple(team_b))
        now = datetime.now(timezone.utc).isoformat()
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO assignments (match_id, team_a_json, team_b_json, locked, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(match_id) DO UPDATE SET
                    team_a_json = excluded.team_a_json,
                    team_b_json = excluded.team_b_json,
                    locked = excluded.locked,
                    updated_at = excluded.updated_at
                """,
                (
                    match_id,
                    json.dumps(list(assignment.team_a)),
                    json.dumps(list(assignment.team_b)),
                    int(locked),
                    now,
                ),
            )
        record = self.get_assignment_record(match_id)
        if record is None:  # pragma: no cover
            raise StoreError(f"Assignment for match {match_id} not found after upsert")
        return record

    def set_assignment_locked(self, match_id: str, locked: bool) -> bool:
        with self._session() as conn:
            cursor = conn.execute(
                "UPDATE assignments SET locked = ?, updated_at = ? WHERE match_id = ?",
                (int(locked), datetime.now(timezone.utc).isoformat(), match_id),
            )
        return cursor.rowcount > 0

    def write_result(self, match_id: str, result: MatchResult) -> bool:
        with self._session() as conn:
            cursor = conn.execute(
                """
                UPDATE assignments
                SET goals_team_a = ?, goals_team_b = ?, winner = ?, updated_at = ?
                WHERE match_id = ?
                """,
                (
                    result.goals_team_a,
                    result.goals_team_b,
                    result.winner,
                    datetime.now(timezone.utc).isoformat(),
                    match_id,
                ),
            )
        return cursor.rowcount > 0

    # Votes ---------------------------------------------------------------

    def read_votes(
        self,
        match_id: str,
        *,
        voter_id: Optional[str] = None,
        target_id: Optional[str] = None,
    ) -> List[Vote]:
        query = "SELECT * FROM votes WHERE match_id = ?"
        params: list[str] = [match_id]
        if voter_id is not None:
            query += " AND voter_id = ?"
            params.append(voter_id)
        if target_id is not None:
            query += " AND target_id = ?"
            params.append(target_id)
        query += " ORDER BY created_at, rowid"
        with self._session() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [self._row_to_vote(row) for row in rows]

    def read_votes_for_target(self, target_id: str) -> List[Vote]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM votes WHERE target_id = ? ORDER BY created_at, rowid",
                (target_id,),
            ).fetchall()
        return [self._row_to_vote(row) for row in rows]

    def write_vote(self, match_id: str, voter_id: str, target_id: str, ratings: VoteRatings) -> Vote:
        return self.write_votes(match_id, [(voter_id, target_id, ratings)])[0]

    def write_votes(self, match_id: str, entries: Iterable[VoteEntry]) -> List[Vote]:
        """Insert votes in one transaction; any duplicate rolls back the batch."""

        created_at = datetime.now(timezone.utc)
        votes = [
            Vote(
                vote_id=uuid4().hex,
                match_id=match_id,
                voter_id=voter_id,
                target_id=target_id,
                ratings=ratings,
                created_at=created_at,
            )
            for voter_id, target_id, ratings in entries
        ]
        with self._session() as conn:
            for vote in votes:
                try:
                    conn.execute(
                        """
                        INSERT INTO votes (
                            id, match_id, voter_id, target_id, speed, finishing,
                            passing, dribbling, defense, physical, created_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            vote.vote_id,
                            vote.match_id,
                            vote.voter_id,
                            vote.target_id,
                            *(getattr(vote.ratings, name) for name in ATTRIBUTE_NAMES),
                            vote.created_at.isoformat(),
                        ),
                    )
                except sqlite3.IntegrityError as exc:
                    raise DuplicateVoteError(vote.match_id, vote.voter_id, vote.target_id) from exc
        return votes

    # Row mapping ---------------------------------------------------------

    def _row_to_player(self, row: sqlite3.Row) -> Player:
        return Player(
            player_id=row["id"],
            name=row["name"],
            is_goalkeeper=bool(row["is_goalkeeper"]),
            positions=tuple(json.loads(row["positions_json"])),
            attributes=SkillAttributes.model_validate_json(row["attributes_json"]),
            overall=row["overall"],
        )

    def _row_to_match(self, row: sqlite3.Row) -> MatchRecord:
        return MatchRecord(
            match_id=row["id"],
            match_date=date.fromisoformat(row["match_date"]),
            status=MatchStatus(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_assignment(self, row: sqlite3.Row) -> AssignmentRecord:
        result = None
        if row["winner"] is not None:
            result = MatchResult(
                goals_team_a=row["goals_team_a"],
                goals_team_b=row["goals_team_b"],
                winner=row["winner"],
            )
        return AssignmentRecord(
            assignment=TeamAssignment(
                match_id=row["match_id"],
                team_a=tuple(json.loads(row["team_a_json"])),
                team_b=tuple(json.loads(row["team_b_json"])),
            ),
            locked=bool(row["locked"]),
            result=result,
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_vote(self, row: sqlite3.Row) -> Vote:
        return Vote(
            vote_id=row["id"],
            match_id=row["match_id"],
            voter_id=row["voter_id"],
            target_id=row["target_id"],
            ratings=VoteRatings(**{name: row[name] for name in ATTRIBUTE_NAMES}),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


__all__ = ["MatchStore", "VoteEntry"]
