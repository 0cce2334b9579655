"""Git repository access.

All history is read through the ``git`` binary. Commands are run
without a shell and their output is parsed from fixed formats, so
commit messages may contain any text.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from ccclog.core.version import parse_versions
from ccclog.exceptions import GitCommandError, NotAGitRepositoryError

if TYPE_CHECKING:
    from ccclog.core.version import Version

logger = logging.getLogger(__name__)

# Hash of git's empty tree; stands in for the root of history
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

SHORT_SHA_LENGTH = 7

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"

# sha, author name, author email, author timestamp, parents, raw message
_LOG_FORMAT = _FIELD_SEP.join(["%H", "%an", "%ae", "%at", "%P", "%B"]) + _RECORD_SEP


@dataclass(frozen=True)
class Commit:
    """A commit as read from git.

    Attributes:
        sha: Full commit hash
        message: Raw commit message
        author_name: Author name
        author_email: Author email
        date: Author date (UTC)
        parent_count: Number of parents; 0 for a root commit
        tag_names: Tags pointing exactly at this commit
    """

    sha: str
    message: str
    author_name: str
    author_email: str
    date: datetime
    parent_count: int = 1
    tag_names: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> Commit:
        """Placeholder for the root of history."""
        return cls(
            sha=EMPTY_TREE_SHA,
            message="",
            author_name="",
            author_email="",
            date=datetime.fromtimestamp(0, tz=UTC),
            parent_count=0,
        )

    @property
    def is_empty(self) -> bool:
        return self.sha == EMPTY_TREE_SHA

    @property
    def short_sha(self) -> str:
        return self.sha[:SHORT_SHA_LENGTH]

    @property
    def is_merge(self) -> bool:
        return self.parent_count > 1


class GitRepository:
    """Read-only view of a git repository.

    Example:
        repo = GitRepository(Path("."))
        for commit in repo.log():
            print(commit.short_sha, commit.message)
    """

    def __init__(self, path: Path | str, timeout: int = 60) -> None:
        """Open the repository containing ``path``.

        Raises:
            NotAGitRepositoryError: If path is not inside a git work tree
        """
        self.timeout = timeout
        path = Path(path)
        if not path.is_dir():
            raise NotAGitRepositoryError(str(path))

        try:
            top_level = self._git("rev-parse", "--show-toplevel", cwd=path)
        except GitCommandError as e:
            raise NotAGitRepositoryError(str(path)) from e

        self.path = Path(top_level)
        self._tags_by_commit: dict[str, tuple[str, ...]] | None = None

    def _git(self, *args: str, cwd: Path | None = None) -> str:
        cmd = ["git", *args]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd or self.path,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise GitCommandError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitCommandError(
                f"git {args[0]} failed with exit code {e.returncode}", stderr=e.stderr
            ) from e
        except subprocess.TimeoutExpired as e:
            raise GitCommandError(f"git {args[0]} timed out after {self.timeout}s") from e
        return result.stdout.strip("\n")

    def tag_names(self) -> list[str]:
        """Names of all tags in the repository."""
        output = self._git("tag", "--list")
        return [line for line in output.splitlines() if line]

    def versions(self) -> list[Version]:
        """Versions parsed from the tag names; other tags are skipped."""
        return parse_versions(self.tag_names())

    def tags_by_commit(self) -> dict[str, tuple[str, ...]]:
        """Map of commit hash to the tags pointing exactly at it.

        Annotated tags are peeled to their commit.
        """
        if self._tags_by_commit is None:
            output = self._git(
                "for-each-ref",
                f"--format=%(objectname){_FIELD_SEP}%(*objectname){_FIELD_SEP}%(refname:short)",
                "refs/tags",
            )
            mapping: dict[str, list[str]] = {}
            for line in output.splitlines():
                if not line:
                    continue
                object_sha, peeled_sha, name = line.split(_FIELD_SEP)
                mapping.setdefault(peeled_sha or object_sha, []).append(name)
            self._tags_by_commit = {sha: tuple(names) for sha, names in mapping.items()}
        return self._tags_by_commit

    def resolve_commit(self, revision: str) -> Commit:
        """Look up the commit a revision (tag, branch, hash) points to.

        Raises:
            GitCommandError: If the revision does not name a commit
        """
        sha = self._git("rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}")
        commits = self._read_log("-1", sha)
        return commits[0]

    def log(
        self,
        newest: str | None = None,
        oldest: str | None = None,
        *,
        include_merges: bool = False,
    ) -> list[Commit]:
        """Commits reachable from ``newest`` but not from ``oldest``.

        Args:
            newest: Revision to start from; HEAD when None
            oldest: Exclusive lower bound; the root of history when None
            include_merges: Also return commits with several parents

        Returns:
            Commits, newest first
        """
        args = []
        if not include_merges:
            args.append("--no-merges")
        args.append(newest or "HEAD")
        if oldest and oldest != EMPTY_TREE_SHA:
            args.append(f"^{oldest}")
        args.append("--")
        return self._read_log(*args)

    def remote_url(self, name: str = "origin") -> str | None:
        """URL of a remote, or None if it is not configured."""
        try:
            return self._git("remote", "get-url", name) or None
        except GitCommandError:
            return None

    def _read_log(self, *args: str) -> list[Commit]:
        output = self._git("log", f"--format={_LOG_FORMAT}", *args)
        tags = self.tags_by_commit()

        commits = []
        for record in output.split(_RECORD_SEP):
            record = record.lstrip("\n")
            if not record:
                continue
            sha, name, email, timestamp, parents, message = record.split(_FIELD_SEP, 5)
            commits.append(
                Commit(
                    sha=sha,
                    message=message,
                    author_name=name,
                    author_email=email,
                    date=datetime.fromtimestamp(int(timestamp), tz=UTC),
                    parent_count=len(parents.split()),
                    tag_names=tags.get(sha, ()),
                )
            )
        return commits
