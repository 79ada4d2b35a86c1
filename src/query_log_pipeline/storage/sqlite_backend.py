"""
SQLite session store.

Persists emitted session batches in a local SQLite database so that the
downstream clustering stage can select sessions by user or time range.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Sequence

from ..config.constants import DEFAULT_SQLITE_DB_PATH, TABLE_SEARCH_SESSIONS
from ..schemas.session import SearchSession
from .base import BatchEmitter, EmissionError, QueryError, StorageConnectionError

logger = logging.getLogger(__name__)


# =============================================================================
# SQLite Schema Definitions
# =============================================================================

SEARCH_SESSIONS_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE_SEARCH_SESSIONS} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    batch_number INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    session_start TEXT NOT NULL,
    session_end TEXT NOT NULL,
    query_count INTEGER NOT NULL,
    queries TEXT NOT NULL,  -- JSON array in arrival order
    _created_at TEXT NOT NULL
)
"""

INDEX_DEFINITIONS = [
    f"CREATE INDEX IF NOT EXISTS idx_sessions_user ON {TABLE_SEARCH_SESSIONS}(user_id)",
    f"CREATE INDEX IF NOT EXISTS idx_sessions_start ON {TABLE_SEARCH_SESSIONS}(session_start)",
]


class SQLiteSessionStore(BatchEmitter):
    """
    Batch emitter writing sessions to a SQLite table.

    Each accepted batch is written in a single transaction, so a failed
    batch leaves no partial rows behind.
    """

    def __init__(
        self,
        db_path: Path | str = DEFAULT_SQLITE_DB_PATH,
        *,
        timeout: float = 30.0,
    ):
        """
        Initialize SQLite store.

        Args:
            db_path: Path to SQLite database file
            timeout: Connection timeout in seconds
        """
        self.db_path = Path(db_path)
        self._timeout = timeout
        self._connection: Optional[sqlite3.Connection] = None
        self._batch_number = 0
        self._initialized = False

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def open_existing(cls, db_path: Path | str, **kwargs) -> "SQLiteSessionStore":
        """
        Store over a database that must already exist, for reading sessions back.

        Raises:
            FileNotFoundError: If db_path does not exist
        """
        if not Path(db_path).is_file():
            raise FileNotFoundError(f"SQLite session store not found: {db_path}")
        return cls(db_path, **kwargs)

    @property
    def emitter_type(self) -> str:
        return "sqlite"

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            try:
                self._connection = sqlite3.connect(
                    str(self.db_path),
                    timeout=self._timeout,
                )
                self._connection.row_factory = sqlite3.Row
                logger.debug(f"Connected to SQLite database: {self.db_path}")
            except sqlite3.Error as e:
                raise StorageConnectionError(
                    f"Failed to connect to SQLite database: {e}"
                ) from e
        return self._connection

    @contextmanager
    def _cursor(self):
        """Context manager for database cursor with automatic commit/rollback."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise QueryError(f"SQLite query failed: {e}") from e
        finally:
            cursor.close()

    def open(self) -> None:
        """
        Create the sessions table and indexes.

        Safe to call multiple times - uses IF NOT EXISTS.
        """
        if self._initialized:
            return

        logger.info(f"Initializing SQLite database: {self.db_path}")
        with self._cursor() as cursor:
            cursor.execute(SEARCH_SESSIONS_SCHEMA)
            for index_sql in INDEX_DEFINITIONS:
                cursor.execute(index_sql)

            cursor.execute(
                f"SELECT COALESCE(MAX(batch_number), -1) FROM {TABLE_SEARCH_SESSIONS}"
            )
            self._batch_number = cursor.fetchone()[0] + 1

        self._initialized = True

    def close(self) -> None:
        """Close database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            self._initialized = False
            logger.debug("SQLite connection closed")

    def accept(self, batch: Sequence[SearchSession]) -> None:
        self.open()

        created_at = datetime.now().astimezone().isoformat()
        rows = [
            (
                self._batch_number,
                session.user_id,
                session.start.isoformat(),
                session.end.isoformat(),
                session.query_count,
                json.dumps(session.queries, ensure_ascii=False),
                created_at,
            )
            for session in batch
        ]

        try:
            with self._cursor() as cursor:
                cursor.executemany(
                    f"""
                    INSERT INTO {TABLE_SEARCH_SESSIONS}
                        (batch_number, user_id, session_start, session_end,
                         query_count, queries, _created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    rows,
                )
        except (QueryError, StorageConnectionError) as e:
            raise EmissionError(
                f"Failed to store batch {self._batch_number}: {e}",
                batch_size=len(batch),
            ) from e

        logger.info(
            f"Stored batch {self._batch_number} with {len(rows):,} sessions "
            f"in {self.db_path}"
        )
        self._batch_number += 1

    def count_sessions(self, user_id: Optional[int] = None) -> int:
        """Count stored sessions, optionally for a single user."""
        self.open()
        sql = f"SELECT COUNT(*) FROM {TABLE_SEARCH_SESSIONS}"
        params: tuple = ()
        if user_id is not None:
            sql += " WHERE user_id = ?"
            params = (user_id,)

        with self._cursor() as cursor:
            cursor.execute(sql, params)
            return cursor.fetchone()[0]

    def iter_sessions(self, user_id: Optional[int] = None) -> Iterator[SearchSession]:
        """
        Iterate stored sessions in insertion order.

        Args:
            user_id: Restrict to one user (all users if None)
        """
        self.open()
        sql = (
            f"SELECT user_id, session_start, session_end, queries "
            f"FROM {TABLE_SEARCH_SESSIONS}"
        )
        params: tuple = ()
        if user_id is not None:
            sql += " WHERE user_id = ?"
            params = (user_id,)
        sql += " ORDER BY id"

        with self._cursor() as cursor:
            cursor.execute(sql, params)
            rows = cursor.fetchall()

        for row in rows:
            yield SearchSession(
                user_id=row["user_id"],
                start=datetime.fromisoformat(row["session_start"]),
                end=datetime.fromisoformat(row["session_end"]),
                queries=json.loads(row["queries"]),
            )
