"""SQLite submission store for teams and their ordered selections."""

import hashlib
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence

from ..config.persistence import SqliteStoreConfig
from ..data.models import Asset, Prediction, Selection, Submission
from ..errors import PartialSubmissionError, PersistenceError
from ..logging.config import get_persistence_logger
from ..utils.time import format_timestamp, parse_timestamp, utc_now
from .base import SubmissionGateway

SCHEMA = """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        contest_id TEXT NOT NULL,
        wallet_address TEXT NOT NULL,
        team_name TEXT,
        submission_hash TEXT NOT NULL UNIQUE,
        submitted_at TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS team_tokens (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        team_id TEXT NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
        asset_id TEXT NOT NULL,
        token_symbol TEXT NOT NULL,
        token_name TEXT NOT NULL,
        logo_url TEXT,
        prediction TEXT NOT NULL,
        position INTEGER NOT NULL,
        UNIQUE(team_id, position),
        UNIQUE(team_id, asset_id)
    );

    CREATE INDEX IF NOT EXISTS idx_teams_contest_id ON teams(contest_id);
    CREATE INDEX IF NOT EXISTS idx_teams_wallet_address ON teams(wallet_address);
    CREATE INDEX IF NOT EXISTS idx_team_tokens_team_id ON team_tokens(team_id);
"""


def submission_hash(selections: Sequence[Selection], contest_id: str, owner_identity: str) -> str:
    """Deduplication key over owner, contest and the ordered roster."""
    picks = ",".join(f"{s.asset.id}={s.prediction.value}" for s in selections)
    key_data = f"{owner_identity.lower()}:{contest_id}:{picks}"
    return hashlib.sha256(key_data.encode()).hexdigest()[:32]


class SubmissionStore(SubmissionGateway):
    """
    SQLite-backed submission gateway.

    A team row and its team_tokens rows are written in one transaction. Saving
    the same owner/contest/roster twice returns the stored submission rather
    than creating a second entry, so a retry after a timed-out attempt is safe.

    The key has no notion of rounds: after reset_submission(), resubmitting an
    unchanged roster to the same contest returns the original team. A second
    entry in one contest needs at least one changed pick or prediction.
    """

    def __init__(
        self,
        config: Optional[SqliteStoreConfig] = None,
        clock: Callable = utc_now
    ):
        self.config = config or SqliteStoreConfig()
        self.db_path = Path(self.config.db_path)
        self.logger = get_persistence_logger(__name__).bind(db_path=str(self.db_path))
        self._clock = clock
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        try:
            with self._get_connection() as conn:
                conn.executescript(SCHEMA)
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to initialize submission store: {e}",
                operation="init",
                target=str(self.db_path)
            ) from e

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.config.connect_timeout_seconds)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", error=str(e))
            raise
        finally:
            if conn:
                conn.close()

    def save_submission(
        self,
        selections: Sequence[Selection],
        contest_id: str,
        owner_identity: str,
        team_name: str = "My Team"
    ) -> Submission:
        selections = tuple(selections)
        key = submission_hash(selections, contest_id, owner_identity)

        with self._lock:
            try:
                with self._get_connection() as conn:
                    existing = conn.execute(
                        "SELECT id FROM teams WHERE submission_hash = ?", (key,)
                    ).fetchone()
                    if existing is not None:
                        self.logger.info(
                            "Submission already stored",
                            submission_id=existing["id"],
                            contest_id=contest_id
                        )
                        return self._load_submission(conn, existing["id"])

                    team_id = str(uuid.uuid4())
                    submitted_at = self._clock()

                    conn.execute(
                        """
                        INSERT INTO teams (
                            id, contest_id, wallet_address, team_name,
                            submission_hash, submitted_at
                        ) VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (team_id, contest_id, owner_identity, team_name, key,
                         format_timestamp(submitted_at))
                    )

                    conn.executemany(
                        """
                        INSERT INTO team_tokens (
                            team_id, asset_id, token_symbol, token_name,
                            logo_url, prediction, position
                        ) VALUES (?, ?, ?, ?, ?, ?, ?)
                        """,
                        [
                            (team_id, s.asset.id, s.asset.symbol, s.asset.name,
                             s.asset.image, s.prediction.value, position)
                            for position, s in enumerate(selections)
                        ]
                    )

                    stored_rows = conn.execute(
                        "SELECT COUNT(*) FROM team_tokens WHERE team_id = ?", (team_id,)
                    ).fetchone()[0]
                    if stored_rows != len(selections):
                        conn.rollback()
                        raise PartialSubmissionError(
                            "Team stored without all of its selections",
                            expected_rows=len(selections),
                            stored_rows=stored_rows,
                            operation="save_submission",
                            target=str(self.db_path)
                        )

                    conn.commit()

            except sqlite3.Error as e:
                self.logger.error(
                    "Failed to store submission",
                    contest_id=contest_id,
                    error=str(e)
                )
                raise PersistenceError(
                    f"Failed to store submission: {e}",
                    operation="save_submission",
                    target=str(self.db_path)
                ) from e

        self.logger.info(
            "Submission stored",
            submission_id=team_id,
            contest_id=contest_id,
            selection_count=len(selections)
        )

        return Submission(
            submission_id=team_id,
            contest_id=contest_id,
            owner_identity=owner_identity,
            selections=selections,
            submitted_at=submitted_at,
            team_name=team_name,
        )

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        try:
            with self._get_connection() as conn:
                return self._load_submission(conn, submission_id)
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to load submission: {e}",
                operation="get_submission",
                target=str(self.db_path)
            ) from e

    def list_submissions(self, contest_id: str) -> list[Submission]:
        try:
            with self._get_connection() as conn:
                rows = conn.execute(
                    """
                    SELECT id FROM teams
                    WHERE contest_id = ?
                    ORDER BY submitted_at ASC, id ASC
                    """,
                    (contest_id,)
                ).fetchall()
                return [self._load_submission(conn, row["id"]) for row in rows]
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to list submissions: {e}",
                operation="list_submissions",
                target=str(self.db_path)
            ) from e

    def delete_submission(self, submission_id: str) -> bool:
        """Delete a team and its selections. Returns True if a team was removed."""
        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute("DELETE FROM teams WHERE id = ?", (submission_id,))
                    deleted = cursor.rowcount > 0
                    conn.commit()
            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to delete submission: {e}",
                    operation="delete_submission",
                    target=str(self.db_path)
                ) from e

        if deleted:
            self.logger.info("Submission deleted", submission_id=submission_id)
        return deleted

    def health_check(self) -> bool:
        try:
            with self._get_connection() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error:
            return False

    def _load_submission(self, conn: sqlite3.Connection, team_id: str) -> Optional[Submission]:
        team = conn.execute(
            """
            SELECT id, contest_id, wallet_address, team_name, submitted_at
            FROM teams WHERE id = ?
            """,
            (team_id,)
        ).fetchone()
        if team is None:
            return None

        tokens = conn.execute(
            """
            SELECT asset_id, token_symbol, token_name, logo_url, prediction
            FROM team_tokens WHERE team_id = ?
            ORDER BY position ASC
            """,
            (team_id,)
        ).fetchall()

        return Submission(
            submission_id=team["id"],
            contest_id=team["contest_id"],
            owner_identity=team["wallet_address"],
            selections=tuple(
                Selection(
                    asset=Asset(
                        id=row["asset_id"],
                        symbol=row["token_symbol"],
                        name=row["token_name"],
                        image=row["logo_url"],
                    ),
                    prediction=Prediction(row["prediction"]),
                )
                for row in tokens
            ),
            submitted_at=parse_timestamp(team["submitted_at"]),
            team_name=team["team_name"] or "",
        )
