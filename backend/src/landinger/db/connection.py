"""SQLite connection shared by the relational page store.

One connection is opened per process and shared across request threads, so
every statement runs under the connection's own lock. Driver errors leave
this module as DatabaseError.
"""

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

# Seconds a writer waits on a locked database file before giving up
DEFAULT_BUSY_TIMEOUT = 5.0


class DatabaseError(Exception):
    """A SQLite statement or transaction failed."""


class Database:
    """Thread-safe SQLite wrapper for the page table."""

    def __init__(self, db_path: Path, busy_timeout: float = DEFAULT_BUSY_TIMEOUT):
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(
                db_path, timeout=busy_timeout, check_same_thread=False
            )
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot open {db_path}: {e}") from e
        self._conn.row_factory = sqlite3.Row

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        """Execute a single statement without committing."""
        with self._lock:
            try:
                return self._conn.execute(sql, params)
            except sqlite3.Error as e:
                raise DatabaseError(str(e)) from e

    def fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Row | None:
        with self._lock:
            return self.execute(sql, params).fetchone()

    def fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self.execute(sql, params).fetchall()

    def executescript(self, sql: str) -> sqlite3.Cursor:
        """Execute multiple statements as a script (commits implicitly)."""
        with self._lock:
            try:
                return self._conn.executescript(sql)
            except sqlite3.Error as e:
                raise DatabaseError(str(e)) from e

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """Hold the lock for a read-check-write sequence.

        Commits when the block exits normally and rolls back when it raises.
        Any exception raised inside the block is re-raised unchanged, apart
        from sqlite3.Error which becomes DatabaseError.
        """
        with self._lock:
            try:
                yield self
                self._conn.commit()
            except Exception as e:
                self._conn.rollback()
                if isinstance(e, sqlite3.Error):
                    raise DatabaseError(str(e)) from e
                raise

    def commit(self) -> None:
        with self._lock:
            try:
                self._conn.commit()
            except sqlite3.Error as e:
                raise DatabaseError(str(e)) from e

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            self._conn.close()
