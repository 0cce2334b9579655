"""Version control access for ccclog."""

from __future__ import annotations

from ccclog.vcs.git import Commit, GitRepository

__all__ = ["Commit", "GitRepository"]
