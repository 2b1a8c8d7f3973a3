"""Database layer for the relational page store."""

from landinger.db.connection import Database, DatabaseError
from landinger.db.migrations import run_migrations

__all__ = ["Database", "DatabaseError", "run_migrations"]
