"""Filesystem object store.

Objects are plain files under a root directory, so the directory can be
served directly by a static host. Writes go to a temp file first and are
renamed into place, so a reader never sees a half-written page.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from git.exc import GitCommandError

from landinger.storage.base import (
    ObjectExistsError,
    ObjectNotFoundError,
    StorageBackendError,
    StoredObject,
)
from landinger.storage.git_repo import GitRepo

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".tmp-"


class FilesystemStore:
    """ObjectStore backed by a local directory, optionally versioned with git."""

    name = "filesystem"

    def __init__(
        self,
        root: Path,
        git_commit: bool = False,
        git_push: bool = False,
    ) -> None:
        """Initialize the store.

        Args:
            root: Directory holding the objects. Created if missing.
            git_commit: Commit each put/delete to a git repository at root.
            git_push: Push after each commit (only with git_commit).
        """
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        self._git = GitRepo(root) if git_commit else None
        self._git_push = git_commit and git_push

    def _path_for(self, key: str) -> Path:
        """Resolve a key to a path, rejecting keys that escape the root."""
        if not key or key.startswith("/") or "\\" in key:
            raise StorageBackendError(f"Invalid object key: {key!r}")
        parts = key.split("/")
        if any(part in ("", ".", "..", ".git") for part in parts):
            raise StorageBackendError(f"Invalid object key: {key!r}")
        return self.root.joinpath(*parts)

    def url_for(self, key: str) -> str:
        return self._path_for(key).resolve().as_uri()

    def _record(self, keys: list[str], message: str) -> None:
        if self._git is None:
            return
        # The files are already in place; a failed commit only loses history
        try:
            sha = self._git.commit_paths(keys, message)
        except GitCommandError as e:
            logger.warning(f"Git commit failed for {', '.join(keys)}: {e}")
            return
        if sha and self._git_push:
            self._git.push()

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        allow_overwrite: bool = False,
    ) -> StoredObject:
        path = self._path_for(key)
        if not allow_overwrite and path.exists():
            raise ObjectExistsError(key)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=path.parent)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageBackendError(f"Failed to write {key}: {e}") from e

        self._record([key], f"Publish {key}")
        return StoredObject(key=key, url=self.url_for(key))

    def get(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise ObjectNotFoundError(key) from None
        except OSError as e:
            raise StorageBackendError(f"Failed to read {key}: {e}") from e

    def list(self, prefix: str) -> list[StoredObject]:
        objects = []
        for path in sorted(self.root.rglob("*")):
            if not path.is_file() or path.name.startswith(TEMP_PREFIX):
                continue
            key = path.relative_to(self.root).as_posix()
            if key.startswith(".git/") or not key.startswith(prefix):
                continue
            objects.append(StoredObject(key=key, url=path.resolve().as_uri()))
        return objects

    def delete(self, keys: list[str]) -> None:
        removed = []
        for key in keys:
            path = self._path_for(key)
            try:
                path.unlink()
                removed.append(key)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageBackendError(f"Failed to delete {key}: {e}") from e
        if removed:
            self._record(removed, f"Delete {', '.join(removed)}")

    def ping(self) -> None:
        if not self.root.is_dir() or not os.access(self.root, os.W_OK):
            raise StorageBackendError(f"Storage directory not writable: {self.root}")
