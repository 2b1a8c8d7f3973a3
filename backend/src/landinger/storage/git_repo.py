"""Git repository wrapper using GitPython.

The filesystem backend can record every page change as a commit, and
optionally push it so a static host deploys the new version.
"""

import logging
from pathlib import Path

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

logger = logging.getLogger(__name__)


class GitRepo:
    """Wrapper for the git operations the filesystem backend needs."""

    def __init__(self, path: Path, remote: str = "origin"):
        """Open the repository at path, initializing one if needed.

        Args:
            path: Repository root (the filesystem backend's root directory).
            remote: Remote name used by push().
        """
        self.path = path
        self.remote = remote
        try:
            self._repo = Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError):
            path.mkdir(parents=True, exist_ok=True)
            self._repo = Repo.init(path)
            logger.info(f"Initialized git repository at {path}")

    def get_head_commit(self) -> str | None:
        """Get current HEAD commit hash.

        Returns:
            Full commit SHA, or None before the first commit.
        """
        if not self._repo.head.is_valid():
            return None
        return self._repo.head.commit.hexsha

    def commit_paths(self, paths: list[str], message: str) -> str | None:
        """Stage additions, modifications and deletions of paths and commit them.

        Args:
            paths: Paths relative to the repository root.
            message: Commit message.

        Returns:
            The new commit SHA, or None when nothing changed.
        """
        self._repo.git.add("--all", "--", *paths)
        if not self._repo.git.status("--porcelain", "--", *paths).strip():
            return None
        commit = self._repo.index.commit(message)
        return commit.hexsha

    def push(self) -> bool:
        """Push the current branch to the configured remote.

        Returns:
            True if the push succeeded, False otherwise. Failures are logged;
            the local commit is kept either way.
        """
        try:
            self._repo.remote(self.remote).push()
            return True
        except (ValueError, GitCommandError) as e:
            logger.warning(f"Git push to {self.remote} failed, manual push needed: {e}")
            return False
