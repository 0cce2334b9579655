"""Splitting a commit history into release buckets.

History is walked newest first. Every commit carrying a release tag
closes the bucket collected so far and starts the next (older) one,
of which the tagged commit is the first member.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ccclog.core.commits import CommitType, ParsedCommit, type_order_key

if TYPE_CHECKING:
    from datetime import datetime

    from ccclog.core.version import Version

CommitFilter = Callable[[ParsedCommit], bool]


@dataclass(frozen=True)
class RangeMarker:
    """One end of a release range: a release tag or a bare commit.

    Attributes:
        name: Tag name, or the short hash for untagged commits
        date: Date of the commit the marker points to
        version: The release version, if the marker is a tag
    """

    name: str
    date: datetime
    version: Version | None = None

    @classmethod
    def from_commit(cls, commit: ParsedCommit) -> RangeMarker:
        if commit.tag is not None:
            return cls(name=str(commit.tag), date=commit.date, version=commit.tag)
        return cls(name=commit.short_sha, date=commit.date)

    @property
    def date_str(self) -> str:
        return self.date.strftime("%Y-%m-%d")

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Release:
    """Commits after ``start`` up to and including the ``end`` release."""

    start: RangeMarker
    end: RangeMarker


@dataclass(frozen=True)
class Unreleased:
    """Commits after ``start`` that are not part of any release yet."""

    start: RangeMarker


ReleaseRange = Release | Unreleased


@dataclass
class ReleaseBucket:
    """The commits of one release range, grouped by commit type."""

    range: ReleaseRange
    commits_by_type: dict[CommitType, list[ParsedCommit]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not any(self.commits_by_type.values())

    @property
    def is_released(self) -> bool:
        return isinstance(self.range, Release)

    @property
    def commits(self) -> list[ParsedCommit]:
        """All commits of the bucket in section order."""
        return [c for group in self.commits_by_type.values() for c in group]


def group_by_type(
    commits: Iterable[ParsedCommit],
    *,
    reverse: bool = False,
    commit_filter: CommitFilter | None = None,
) -> dict[CommitType, list[ParsedCommit]]:
    """Group commits by type.

    Keys follow the fixed type order, then custom types in first-seen
    order, then ``Others``. Commits keep their input order within a
    group, or the reverse order when ``reverse`` is set.
    """
    groups: dict[CommitType, list[ParsedCommit]] = {}
    for commit in commits:
        if commit_filter is not None and not commit_filter(commit):
            continue
        groups.setdefault(commit.commit_type, []).append(commit)

    ordered = sorted(groups, key=type_order_key)
    if reverse:
        return {t: groups[t][::-1] for t in ordered}
    return {t: groups[t] for t in ordered}


def partition_commits(
    commits: Sequence[ParsedCommit],
    boundary: RangeMarker,
    *,
    reverse: bool = False,
    commit_filter: CommitFilter | None = None,
) -> list[ReleaseBucket]:
    """Split newest-first commits into release buckets.

    Args:
        commits: Commits, newest first, tagged where a release tag of the
            selected scheme points at them
        boundary: Oldest reference point; the start of the oldest range
        reverse: Reverse commit order within each type group
        commit_filter: Predicate selecting the commits to keep. Filtering
            happens after the ranges are determined, so tagged commits
            still delimit releases when they are filtered out.

    Returns:
        Buckets, newest first. An ``Unreleased`` bucket, if any, comes
        first. The result always holds at least one bucket.
    """

    def close(release_range: ReleaseRange, members: list[ParsedCommit]) -> None:
        grouped = group_by_type(members, reverse=reverse, commit_filter=commit_filter)
        buckets.append(ReleaseBucket(release_range, grouped))

    buckets: list[ReleaseBucket] = []
    latest: RangeMarker | None = None
    pending: list[ParsedCommit] = []

    for commit in commits:
        if commit.tag is None:
            pending.append(commit)
            continue

        current = RangeMarker.from_commit(commit)
        if latest is None:
            if pending:
                close(Unreleased(current), pending)
        else:
            close(Release(current, latest), pending)

        latest = current
        pending = [commit]

    if latest is None:
        close(Unreleased(boundary), pending)
    else:
        close(Release(boundary, latest), pending)

    return buckets
