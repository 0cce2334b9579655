"""Core business logic for ccclog.

This module contains the fundamental building blocks:
- Version parsing and tag scheme selection
- Conventional commit classification
- Partitioning history into release buckets
"""

from __future__ import annotations

from ccclog.core.commits import (
    CommitKind,
    CommitType,
    ConventionalCommit,
    ParsedCommit,
    build_commit_filter,
    classify,
    parse_commits,
)
from ccclog.core.partition import (
    RangeMarker,
    Release,
    ReleaseBucket,
    ReleaseRange,
    Unreleased,
    group_by_type,
    partition_commits,
)
from ccclog.core.version import Version, parse_version, parse_versions, select_versions

__all__ = [
    # Commits
    "CommitKind",
    "CommitType",
    "ConventionalCommit",
    "ParsedCommit",
    # Partitioning
    "RangeMarker",
    "Release",
    "ReleaseBucket",
    "ReleaseRange",
    "Unreleased",
    # Version
    "Version",
    "build_commit_filter",
    "classify",
    "group_by_type",
    "parse_commits",
    "parse_version",
    "parse_versions",
    "partition_commits",
    "select_versions",
]
