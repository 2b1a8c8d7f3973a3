"""Relational ObjectStore backed by the SQLite ``pages`` table.

The table holds one row per page rather than one row per object. Logical
keys map onto columns:

- ``pages/<name>.html``    -> ``html_content``
- ``metadata/<name>.json`` -> ``metadata`` (plus ``title``/``instructions``
  copied out for querying)

A row is removed once both columns have been deleted.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, UTC

from landinger.constants.storage import (
    HTML_SUFFIX,
    METADATA_PREFIX,
    METADATA_SUFFIX,
    PAGES_PREFIX,
)
from landinger.db.connection import Database, DatabaseError
from landinger.storage.base import (
    ObjectExistsError,
    ObjectNotFoundError,
    StorageBackendError,
    StoredObject,
)

logger = logging.getLogger(__name__)

# column name -> (key prefix, key suffix)
_COLUMN_KEYS = {
    "html_content": (PAGES_PREFIX, HTML_SUFFIX),
    "metadata": (METADATA_PREFIX, METADATA_SUFFIX),
}


def _parse_key(key: str) -> tuple[str, str]:
    """Split a logical key into (column, page name).

    Raises:
        StorageBackendError: If the key is not a page or metadata key.
    """
    for column, (prefix, suffix) in _COLUMN_KEYS.items():
        if key.startswith(prefix) and key.endswith(suffix):
            name = key[len(prefix) : -len(suffix)]
            if name and "/" not in name:
                return column, name
    raise StorageBackendError(f"Unsupported key for database store: {key!r}")


def _key_for(column: str, name: str) -> str:
    prefix, suffix = _COLUMN_KEYS[column]
    return f"{prefix}{name}{suffix}"


class DatabaseStore:
    """ObjectStore over a row-per-page SQLite table."""

    name = "database"

    def __init__(self, db: Database) -> None:
        self._db = db

    def url_for(self, key: str) -> str:
        return f"database://{key}"

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        allow_overwrite: bool = False,
    ) -> StoredObject:
        column, name = _parse_key(key)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StorageBackendError(f"Database store only accepts UTF-8 text: {key}") from e

        title = None
        instructions = None
        if column == "metadata":
            try:
                meta = json.loads(text)
            except json.JSONDecodeError as e:
                raise StorageBackendError(f"Metadata for {name} is not valid JSON") from e
            if not isinstance(meta, dict):
                raise StorageBackendError(f"Metadata for {name} must be a JSON object")
            title = meta.get("title")
            instructions = meta.get("instructions")

        now = datetime.now(UTC).isoformat()
        if column == "metadata":
            sql = """
                INSERT INTO pages (id, name, title, instructions, metadata, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    title = excluded.title,
                    instructions = excluded.instructions,
                    metadata = excluded.metadata,
                    updated_at = excluded.updated_at
            """
            params: tuple = (str(uuid.uuid4()), name, title, instructions, text, now)
        else:
            sql = """
                INSERT INTO pages (id, name, html_content, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    html_content = excluded.html_content,
                    updated_at = excluded.updated_at
            """
            params = (str(uuid.uuid4()), name, text, now)

        try:
            with self._db.transaction() as db:
                row = db.fetch_one(f"SELECT {column} FROM pages WHERE name = ?", (name,))
                if row is not None and row[column] is not None and not allow_overwrite:
                    raise ObjectExistsError(key)
                db.execute(sql, params)
        except DatabaseError as e:
            raise StorageBackendError(f"Failed to write {key}: {e}") from e

        return StoredObject(key=key, url=self.url_for(key))

    def get(self, key: str) -> bytes:
        column, name = _parse_key(key)
        try:
            row = self._db.fetch_one(f"SELECT {column} FROM pages WHERE name = ?", (name,))
        except DatabaseError as e:
            raise StorageBackendError(f"Failed to read {key}: {e}") from e
        if row is None or row[column] is None:
            raise ObjectNotFoundError(key)
        return str(row[column]).encode("utf-8")

    def get_row_id(self, name: str) -> str | None:
        """Generated row identifier for a page name."""
        try:
            row = self._db.fetch_one("SELECT id FROM pages WHERE name = ?", (name,))
        except DatabaseError as e:
            raise StorageBackendError(f"Failed to read row id for {name}: {e}") from e
        return row["id"] if row else None

    def list(self, prefix: str) -> list[StoredObject]:
        try:
            rows = self._db.fetch_all(
                """
                SELECT name,
                       html_content IS NOT NULL AS has_html,
                       metadata IS NOT NULL AS has_metadata
                FROM pages
                ORDER BY name
                """
            )
        except DatabaseError as e:
            raise StorageBackendError(f"Failed to list {prefix}: {e}") from e

        keys = []
        for row in rows:
            if row["has_html"]:
                keys.append(_key_for("html_content", row["name"]))
            if row["has_metadata"]:
                keys.append(_key_for("metadata", row["name"]))
        return [StoredObject(key=k, url=self.url_for(k)) for k in sorted(keys) if k.startswith(prefix)]

    def delete(self, keys: list[str]) -> None:
        parsed = [_parse_key(key) for key in keys]
        try:
            with self._db.transaction() as db:
                for column, name in parsed:
                    db.execute(f"UPDATE pages SET {column} = NULL WHERE name = ?", (name,))
                db.execute("DELETE FROM pages WHERE html_content IS NULL AND metadata IS NULL")
        except DatabaseError as e:
            raise StorageBackendError(f"Failed to delete {', '.join(keys)}: {e}") from e

    def ping(self) -> None:
        try:
            self._db.fetch_one("SELECT 1 FROM pages LIMIT 1")
        except DatabaseError as e:
            raise StorageBackendError(f"Database unreachable: {e}") from e
