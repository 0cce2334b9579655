"""Selecting the slice of history a changelog covers.

Either the range between the two newest release tags is detected
automatically, or an explicit two-dot revision range is given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ccclog.core.commits import parse_commits
from ccclog.core.partition import RangeMarker
from ccclog.core.version import latest_range, select_versions
from ccclog.exceptions import (
    AmbiguousVersionSchemeError,
    GitCommandError,
    InvalidRevisionSpecError,
    UnsupportedRevisionSpecShapeError,
)
from ccclog.vcs.git import Commit

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ccclog.core.commits import ParsedCommit
    from ccclog.core.version import Version
    from ccclog.vcs.git import GitRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanRange:
    """Commits after ``previous`` up to ``latest`` (HEAD when None)."""

    latest: Commit | None
    previous: Commit

    @property
    def latest_sha(self) -> str | None:
        return self.latest.sha if self.latest else None

    @property
    def previous_sha(self) -> str | None:
        return None if self.previous.is_empty else self.previous.sha


@dataclass(frozen=True)
class History:
    """Commits to partition and the boundary below them."""

    commits: list[ParsedCommit]
    boundary: RangeMarker


def detect_range(repo: GitRepository, versions: Iterable[Version]) -> ScanRange:
    """Range from the second newest release tag to the newest one.

    With a single tag the range starts at the root of history; without
    tags it covers everything up to HEAD.
    """
    latest, previous = latest_range(versions)
    latest_commit = repo.resolve_commit(f"refs/tags/{latest}") if latest else None
    previous_commit = repo.resolve_commit(f"refs/tags/{previous}") if previous else Commit.empty()
    return ScanRange(latest_commit, previous_commit)


def parse_range(repo: GitRepository, spec: str) -> ScanRange:
    """Resolve a two-dot revision range such as ``v1.0.0..v1.1.0``.

    As in git, an empty side means HEAD.

    Raises:
        UnsupportedRevisionSpecShapeError: If spec is not an ``A..B`` range
        InvalidRevisionSpecError: If an endpoint does not resolve
    """
    if not _is_two_dot_range(spec):
        raise UnsupportedRevisionSpecShapeError(spec)

    older, _, newer = spec.partition("..")

    def resolve(revision: str) -> Commit:
        try:
            return repo.resolve_commit(revision)
        except GitCommandError as e:
            raise InvalidRevisionSpecError(spec, revision) from e

    previous = resolve(older or "HEAD")
    latest = resolve(newer) if newer else None
    return ScanRange(latest, previous)


def _is_two_dot_range(spec: str) -> bool:
    if spec.count("..") != 1 or "..." in spec:
        return False
    if spec.startswith("^") or any(spec.endswith(s) for s in ("^@", "^!", "^-")):
        return False
    return not any(c.isspace() for c in spec)


def load_history(
    repo: GitRepository,
    revision_spec: str | None = None,
    tag_prefix: str | None = None,
    *,
    include_merges: bool = False,
) -> History:
    """Read the commits a changelog is built from.

    Args:
        repo: Repository to read
        revision_spec: Explicit ``A..B`` range; detected from tags when None
        tag_prefix: Tag naming scheme to use; see ``select_versions``
        include_merges: Keep merge commits

    Returns:
        Newest-first commits, tagged with versions of the selected
        scheme, and the boundary marker of the oldest range

    Raises:
        AmbiguousVersionSchemeError: If the tag scheme cannot be selected
            for automatic range detection
        UnsupportedRevisionSpecShapeError: If revision_spec is not a range
        InvalidRevisionSpecError: If an endpoint of revision_spec is unknown
    """
    if revision_spec is None:
        versions = select_versions(repo.versions(), tag_prefix)
        scan = detect_range(repo, versions)
    else:
        scan = parse_range(repo, revision_spec)
        versions = _versions_for_range(repo.versions(), revision_spec, tag_prefix)
    tags = {str(v): v for v in versions}
    logger.debug("scan range: %s..%s", scan.previous.short_sha, scan.latest_sha or "HEAD")

    raw = repo.log(scan.latest_sha, scan.previous_sha, include_merges=include_merges)
    commits = parse_commits(raw, tags)
    boundary = RangeMarker.from_commit(parse_commits([scan.previous], tags)[0])
    return History(commits=commits, boundary=boundary)


def _versions_for_range(
    versions: list[Version], spec: str, tag_prefix: str | None
) -> list[Version]:
    # With several schemes and no default, a version tag named by the range
    # picks the scheme. Without one no tags are annotated.
    if tag_prefix is not None:
        return select_versions(versions, tag_prefix)
    try:
        return select_versions(versions)
    except AmbiguousVersionSchemeError as e:
        by_name = {str(v): v for v in versions}
        older, _, newer = spec.partition("..")
        for endpoint in (newer, older):
            name = endpoint.removeprefix("refs/tags/")
            if name in by_name:
                prefix = by_name[name].prefix
                logger.debug("Tags use prefixes %s, using %r from %s", e.prefixes, prefix, spec)
                return select_versions(versions, prefix)
        logger.debug("Tags use prefixes %s, annotating no versions in %s", e.prefixes, spec)
        return []
