"""SQLite page table store tests."""

import json

import pytest

from landinger.db.connection import Database, DatabaseError
from landinger.db.migrations import SCHEMA_VERSION, run_migrations
from landinger.storage import DatabaseStore, ObjectExistsError, ObjectNotFoundError
from landinger.storage.base import StorageBackendError

METADATA = json.dumps({"name": "home", "title": "Home", "instructions": "Make a page"}).encode()


@pytest.fixture
def store(temp_db: Database) -> DatabaseStore:
    return DatabaseStore(temp_db)


def test_migrations_create_pages_table(temp_db: Database):
    tables = temp_db.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    table_names = {row[0] for row in tables}

    assert "pages" in table_names
    assert "schema_version" in table_names


def test_migrations_are_idempotent(temp_db: Database):
    run_migrations(temp_db)

    version = temp_db.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]
    assert version == SCHEMA_VERSION


def test_body_and_metadata_share_one_row(store: DatabaseStore, temp_db: Database):
    """A page's body and metadata live in the same row."""
    store.put("pages/home.html", b"<html></html>", "text/html")
    store.put("metadata/home.json", METADATA, "application/json")

    rows = temp_db.execute("SELECT * FROM pages").fetchall()
    assert len(rows) == 1
    assert rows[0]["name"] == "home"
    assert rows[0]["title"] == "Home"
    assert rows[0]["instructions"] == "Make a page"
    assert rows[0]["html_content"] == "<html></html>"


def test_row_id_is_generated_and_stable(store: DatabaseStore):
    """The row keeps its generated id across updates."""
    store.put("pages/home.html", b"one", "text/html")
    row_id = store.get_row_id("home")

    store.put("pages/home.html", b"two", "text/html", allow_overwrite=True)

    assert row_id is not None and len(row_id) == 36
    assert store.get_row_id("home") == row_id


def test_get_round_trip(store: DatabaseStore):
    store.put("metadata/home.json", METADATA, "application/json")

    assert json.loads(store.get("metadata/home.json")) == json.loads(METADATA)


def test_get_missing_column_raises(store: DatabaseStore):
    """A row with metadata but no body reports the body as missing."""
    store.put("metadata/home.json", METADATA, "application/json")

    with pytest.raises(ObjectNotFoundError):
        store.get("pages/home.html")


def test_put_refuses_overwrite_by_default(store: DatabaseStore):
    store.put("pages/home.html", b"one", "text/html")

    with pytest.raises(ObjectExistsError):
        store.put("pages/home.html", b"two", "text/html")


def test_rejects_unknown_keys(store: DatabaseStore):
    with pytest.raises(StorageBackendError):
        store.put("assets/logo.png", b"x", "image/png")


def test_rejects_non_object_metadata(store: DatabaseStore):
    with pytest.raises(StorageBackendError):
        store.put("metadata/home.json", b"[1, 2]", "application/json")


def test_list_generates_logical_keys(store: DatabaseStore):
    store.put("pages/home.html", b"", "text/html")
    store.put("metadata/home.json", METADATA, "application/json")
    store.put("pages/lost.html", b"", "text/html")

    assert [o.key for o in store.list("pages/")] == ["pages/home.html", "pages/lost.html"]
    assert [o.key for o in store.list("metadata/")] == ["metadata/home.json"]


def test_delete_both_removes_row(store: DatabaseStore, temp_db: Database):
    store.put("pages/home.html", b"", "text/html")
    store.put("metadata/home.json", METADATA, "application/json")

    store.delete(["pages/home.html", "metadata/home.json"])

    assert temp_db.execute("SELECT COUNT(*) FROM pages").fetchone()[0] == 0


def test_delete_one_keeps_row(store: DatabaseStore):
    store.put("pages/home.html", b"", "text/html")
    store.put("metadata/home.json", METADATA, "application/json")

    store.delete(["pages/home.html"])

    assert [o.key for o in store.list("")] == ["metadata/home.json"]


def test_ping(store: DatabaseStore):
    store.ping()


def test_driver_errors_become_database_error(temp_db: Database):
    with pytest.raises(DatabaseError, match="no such table"):
        temp_db.execute("SELECT * FROM missing_table")


def test_transaction_rolls_back_on_error(temp_db: Database):
    """Statements inside a failed transaction are not committed."""
    with pytest.raises(ValueError):
        with temp_db.transaction() as db:
            db.execute("INSERT INTO pages (id, name) VALUES (?, ?)", ("1", "home"))
            raise ValueError("abort")

    assert temp_db.fetch_one("SELECT COUNT(*) FROM pages")[0] == 0


def test_transaction_commits(temp_db: Database):
    with temp_db.transaction() as db:
        db.execute("INSERT INTO pages (id, name) VALUES (?, ?)", ("1", "home"))

    assert temp_db.fetch_one("SELECT name FROM pages")["name"] == "home"


def test_refused_overwrite_leaves_row_unchanged(store: DatabaseStore):
    store.put("pages/home.html", b"one", "text/html")

    with pytest.raises(ObjectExistsError):
        store.put("pages/home.html", b"two", "text/html")

    assert store.get("pages/home.html") == b"one"


def test_missing_table_is_backend_error(store: DatabaseStore, temp_db: Database):
    """Every query path reports driver failures as StorageBackendError."""
    temp_db.executescript("DROP TABLE pages")

    with pytest.raises(StorageBackendError):
        store.get_row_id("home")
    with pytest.raises(StorageBackendError):
        store.get("pages/home.html")
    with pytest.raises(StorageBackendError):
        store.put("pages/home.html", b"x", "text/html")
    with pytest.raises(StorageBackendError):
        store.list("")
    with pytest.raises(StorageBackendError):
        store.delete(["pages/home.html"])
    with pytest.raises(StorageBackendError):
        store.ping()
