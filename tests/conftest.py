"""Shared test fixtures."""

from __future__ import annotations

import os
import shutil
import subprocess
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from ccclog.core.commits import ParsedCommit
from ccclog.core.version import Version
from ccclog.vcs.git import Commit

if TYPE_CHECKING:
    from pathlib import Path

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

BASE_DATE = datetime(2020, 4, 1, 1, 1, 0, tzinfo=UTC)


def dummy_commit(
    n: int,
    message: str,
    *,
    tag: str | None = None,
    author: str = "Test User",
    email: str = "test-user@test.com",
    parent_count: int = 1,
) -> ParsedCommit:
    """Build a parsed commit.

    The short hash is ``n`` as 7 hex digits and the date is BASE_DATE + n seconds.
    """
    commit = Commit(
        sha=f"{n:07x}d185faf719f12292414c88872e3397fc5dc4"[:40],
        message=message,
        author_name=author,
        author_email=email,
        date=BASE_DATE + timedelta(seconds=n),
        parent_count=parent_count,
        tag_names=(tag,) if tag else (),
    )
    return ParsedCommit.from_commit(commit, Version.parse(tag) if tag else None)


@pytest.fixture
def feat_commit() -> Commit:
    return Commit(
        sha="feat123456789",
        message="feat: add user authentication",
        author_name="Test User",
        author_email="test@test.com",
        date=BASE_DATE,
    )


@pytest.fixture
def fix_commit() -> Commit:
    return Commit(
        sha="fix1234567890",
        message="fix(core): handle empty config",
        author_name="Test User",
        author_email="test@test.com",
        date=BASE_DATE,
    )


@pytest.fixture
def breaking_commit() -> Commit:
    return Commit(
        sha="break12345678",
        message="feat(api)!: drop v1 endpoints\n\nBREAKING CHANGE: v1 is gone",
        author_name="Test User",
        author_email="test@test.com",
        date=BASE_DATE,
    )


class GitRepoBuilder:
    """Creates commits and tags in a scratch repository with fixed dates."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._date = datetime(2020, 4, 29, 12, 0, 0, tzinfo=UTC)
        self.git("init", "-q")
        self.git("config", "user.name", "Test User")
        self.git("config", "user.email", "test-user@test.com")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")

    def git(self, *args: str) -> str:
        stamp = self._date.strftime("%Y-%m-%d %H:%M:%S +0000")
        env = {
            "GIT_AUTHOR_DATE": stamp,
            "GIT_COMMITTER_DATE": stamp,
            "GIT_CONFIG_NOSYSTEM": "1",
            "HOME": str(self.path),
            "PATH": os.environ.get("PATH", ""),
        }
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def commit(self, message: str, *, tag: str | None = None, annotated: bool = False) -> str:
        """Create an empty commit, optionally tagged, and return its hash."""
        self._date += timedelta(minutes=1)
        self.git("commit", "--allow-empty", "-q", "-m", message)
        if tag:
            self.tag(tag, annotated=annotated)
        return self.git("rev-parse", "HEAD")

    def tag(self, name: str, *, annotated: bool = False, revision: str = "HEAD") -> None:
        if annotated:
            self.git("tag", "-a", name, "-m", f"Release {name}", revision)
        else:
            self.git("tag", name, revision)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepoBuilder:
    """Empty scratch git repository."""
    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    return GitRepoBuilder(repo_dir)


@pytest.fixture
def repo_with_history(git_repo: GitRepoBuilder) -> tuple[GitRepoBuilder, dict[str, str]]:
    """Repository with two releases, 0.1.0 and 0.2.0.

    Returns the builder and the commit hashes by message.
    """
    shas = {}
    shas["add first files"] = git_repo.commit("feat: add first files")
    shas["add README"] = git_repo.commit("chore: add README", tag="0.1.0")
    shas["add build script"] = git_repo.commit("build: add build script")
    shas["fix build script"] = git_repo.commit("fix: fix build script")
    shas["new fun"] = git_repo.commit("feat: new fun", tag="0.2.0", annotated=True)
    return git_repo, shas


@pytest.fixture
def temp_git_repo_with_pyproject(git_repo: GitRepoBuilder) -> Path:
    """Repository containing a pyproject.toml with a [tool.ccclog] section."""
    (git_repo.path / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.ccclog.changelog]
root_indent_level = 3
ignore_types = ["chore"]

[tool.ccclog.git]
tag_prefix = "v"
"""
    )
    return git_repo.path
