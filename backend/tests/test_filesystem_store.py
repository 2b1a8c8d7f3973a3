"""Filesystem object store tests, including git recording."""

from pathlib import Path
from unittest.mock import patch

import pytest
from git import Repo

from landinger.storage import (
    FilesystemStore,
    ObjectExistsError,
    ObjectNotFoundError,
    StorageBackendError,
)
from landinger.storage.filesystem import TEMP_PREFIX
from landinger.storage.git_repo import GitRepo


@pytest.fixture
def store(tmp_path: Path) -> FilesystemStore:
    return FilesystemStore(tmp_path / "site")


def test_put_writes_file(store: FilesystemStore):
    """Objects are plain files under the root."""
    stored = store.put("pages/home.html", b"<html></html>", "text/html")

    path = store.root / "pages" / "home.html"
    assert path.read_bytes() == b"<html></html>"
    assert stored.url == path.resolve().as_uri()


def test_put_leaves_no_temp_files(store: FilesystemStore):
    store.put("pages/home.html", b"one", "text/html")
    store.put("pages/home.html", b"two", "text/html", allow_overwrite=True)

    leftovers = [p for p in store.root.rglob("*") if p.name.startswith(TEMP_PREFIX)]
    assert leftovers == []
    assert store.get("pages/home.html") == b"two"


def test_put_refuses_overwrite_by_default(store: FilesystemStore):
    store.put("pages/home.html", b"one", "text/html")

    with pytest.raises(ObjectExistsError):
        store.put("pages/home.html", b"two", "text/html")

    assert store.get("pages/home.html") == b"one"


def test_failed_write_keeps_previous_content(store: FilesystemStore):
    """A failure during the atomic write leaves the old file intact."""
    store.put("pages/home.html", b"old", "text/html")

    with patch("landinger.storage.filesystem.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(StorageBackendError):
            store.put("pages/home.html", b"new", "text/html", allow_overwrite=True)

    assert store.get("pages/home.html") == b"old"
    assert not any(p.name.startswith(TEMP_PREFIX) for p in store.root.rglob("*"))


@pytest.mark.parametrize("key", ["../escape.html", "/abs.html", "pages/../../x", ".git/config", ""])
def test_rejects_keys_outside_root(store: FilesystemStore, key: str):
    with pytest.raises(StorageBackendError):
        store.put(key, b"x", "text/html")


def test_get_missing_raises(store: FilesystemStore):
    with pytest.raises(ObjectNotFoundError):
        store.get("pages/none.html")


def test_list_and_delete(store: FilesystemStore):
    store.put("pages/a.html", b"", "text/html")
    store.put("metadata/a.json", b"{}", "application/json")

    assert [o.key for o in store.list("metadata/")] == ["metadata/a.json"]

    store.delete(["pages/a.html", "metadata/a.json", "pages/missing.html"])

    assert store.list("") == []


def test_ping_succeeds_for_writable_root(store: FilesystemStore):
    store.ping()


# =============================================================================
# Git Recording Tests
# =============================================================================


def test_git_commit_records_each_change(tmp_path: Path):
    """With git_commit every put and delete becomes a commit."""
    store = FilesystemStore(tmp_path / "site", git_commit=True)

    store.put("pages/home.html", b"<html></html>", "text/html")
    store.delete(["pages/home.html"])

    repo = Repo(tmp_path / "site")
    messages = [c.message for c in repo.iter_commits()]
    assert messages == ["Delete pages/home.html", "Publish pages/home.html"]


def test_git_list_excludes_git_dir(tmp_path: Path):
    store = FilesystemStore(tmp_path / "site", git_commit=True)
    store.put("pages/home.html", b"", "text/html")

    assert [o.key for o in store.list("")] == ["pages/home.html"]


def test_git_repo_skips_empty_commit(tmp_path: Path):
    """Rewriting identical content does not create a commit."""
    repo = GitRepo(tmp_path / "site")
    (tmp_path / "site" / "a.txt").write_text("same")

    first = repo.commit_paths(["a.txt"], "add a")
    second = repo.commit_paths(["a.txt"], "add a again")

    assert first is not None and len(first) == 40
    assert second is None
    assert repo.get_head_commit() == first


def test_git_push_failure_does_not_fail_write(tmp_path: Path, caplog):
    """Pushing without a remote logs a warning and keeps the file."""
    store = FilesystemStore(tmp_path / "site", git_commit=True, git_push=True)

    stored = store.put("pages/home.html", b"<html></html>", "text/html")

    assert stored.key == "pages/home.html"
    assert store.get("pages/home.html") == b"<html></html>"
    assert "push" in caplog.text.lower()
