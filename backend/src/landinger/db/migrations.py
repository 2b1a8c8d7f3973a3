"""Database migrations and schema management for the page table."""

from landinger.db.connection import Database, DatabaseError

# Schema version for tracking migrations
SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Published pages, one row per page
-- Rows are keyed by a generated UUID; name is the canonical page key.
-- html_content holds the document body, metadata the JSON sidecar as written
-- by the publisher. Either may be NULL while the other is present.
CREATE TABLE IF NOT EXISTS pages (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    title TEXT,
    instructions TEXT,
    html_content TEXT,
    metadata TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_pages_created_at ON pages(created_at);
"""


def run_migrations(db: Database) -> None:
    """Run database migrations to set up or upgrade schema.

    Args:
        db: Database connection to run migrations on.
    """
    try:
        result = db.fetch_one(
            "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
        )
        current_version = result[0] if result else 0
    except DatabaseError:
        # Table doesn't exist yet
        current_version = 0

    if current_version < SCHEMA_VERSION:
        # executescript auto-commits, so the version insert is handled separately
        db.executescript(SCHEMA_SQL)

        db.execute(
            "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
        db.commit()
