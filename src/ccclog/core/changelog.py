"""Markdown changelog generation.

Each release bucket becomes a heading, each commit type present in it a
sub-heading, and each commit a list item:

    ## 0.2.0 - 2020-04-29
    ### Feat
    - [9cd3662] new fun (Test User)

When the repository has a hosting URL, release headings and commit
hashes become reference links, listed at the end of the document.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ccclog.core.commits import build_commit_filter
from ccclog.core.partition import Release, partition_commits
from ccclog.vcs.remote import HostingUrl
from ccclog.vcs.scan import load_history

if TYPE_CHECKING:
    from ccclog.config.models import CcclogConfig, ChangelogConfig
    from ccclog.core.commits import Author, CommitType, ParsedCommit
    from ccclog.core.partition import ReleaseBucket, ReleaseRange
    from ccclog.vcs.git import GitRepository

logger = logging.getLogger(__name__)


def generate_changelog(
    repo: GitRepository,
    config: CcclogConfig,
    *,
    revision_spec: str | None = None,
) -> str:
    """Generate the markdown changelog of a repository.

    Args:
        repo: Git repository
        config: Configuration
        revision_spec: Explicit ``A..B`` range, detected from tags when None

    Returns:
        Changelog content

    Raises:
        AmbiguousVersionSchemeError: If the tag scheme cannot be selected
        RevisionSpecError: If revision_spec is unusable
        GitError: If git fails
    """
    history = load_history(
        repo,
        revision_spec,
        config.git.tag_prefix,
        include_merges=config.git.include_merges,
    )
    logger.debug("Partitioning %d commits", len(history.commits))

    buckets = partition_commits(
        history.commits,
        history.boundary,
        reverse=config.changelog.reverse,
        commit_filter=build_commit_filter(
            config.changelog.ignore_summary_pattern,
            config.changelog.ignored_commit_types,
        ),
    )

    remote = repo.remote_url(config.git.remote)
    url = HostingUrl.from_remote(remote) if remote else None
    return render_markdown(buckets, config.changelog, url)


def render_markdown(
    buckets: list[ReleaseBucket],
    config: ChangelogConfig,
    url: HostingUrl | None = None,
) -> str:
    """Render release buckets as markdown.

    Buckets without commits are left out entirely.
    """
    renderer = _MarkdownRenderer(config, url)
    sections = [renderer.bucket(b) for b in buckets if not b.is_empty]
    changelog = "\n".join(sections)

    if renderer.links:
        changelog = f"{changelog}\n" + "\n".join(renderer.links) + "\n"
    return changelog


class _MarkdownRenderer:
    def __init__(self, config: ChangelogConfig, url: HostingUrl | None) -> None:
        self.config = config
        self.url = url
        self.links: list[str] = []

    def bucket(self, bucket: ReleaseBucket) -> str:
        heading = self.heading(bucket.range)
        contents = "\n".join(
            self.section(commit_type, commits)
            for commit_type, commits in bucket.commits_by_type.items()
            if commits
        )
        return f"{heading}\n{contents}"

    def heading(self, release_range: ReleaseRange) -> str:
        if isinstance(release_range, Release):
            end = release_range.end
            if self.url:
                subject = f"[{end.name}] - {end.date_str}"
                link = self.url.compare(release_range.start.name, end.name)
                self.links.append(f"[{end.name}]: {link}")
            else:
                subject = f"{end.name} - {end.date_str}"
        elif self.url:
            subject = "[Unreleased]"
            self.links.append(f"[Unreleased]: {self.url.compare(release_range.start.name)}")
        else:
            subject = "Unreleased"
        return f"{'#' * self.config.root_indent_level} {subject}"

    def section(self, commit_type: CommitType, commits: list[ParsedCommit]) -> str:
        heading = f"{'#' * (self.config.root_indent_level + 1)} {commit_type.label}"
        items = "\n".join(self.item(c) for c in commits)
        return f"{heading}\n{items}\n"

    def item(self, commit: ParsedCommit) -> str:
        short = commit.short_sha
        author = self.author(commit.author)
        if self.url:
            self.links.append(f"[{short}]: {self.url.commit(commit.sha)}")
            return f"- [[{short}]] {commit.description} ({author})"
        return f"- [{short}] {commit.description} ({author})"

    def author(self, author: Author) -> str:
        if self.config.enable_email_link and author.email:
            return f"[{author.display_name}](mailto:{author.email})"
        return author.display_name
