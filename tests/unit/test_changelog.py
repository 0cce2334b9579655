"""Unit tests for changelog generation."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest

from ccclog.config.models import CcclogConfig, ChangelogConfig, GitConfig
from ccclog.core.changelog import generate_changelog, render_markdown
from ccclog.core.partition import RangeMarker, partition_commits
from ccclog.exceptions import AmbiguousVersionSchemeError
from ccclog.vcs.git import GitRepository
from ccclog.vcs.remote import HostingUrl
from ccclog.vcs.scan import History
from tests.conftest import dummy_commit

if TYPE_CHECKING:
    from pathlib import Path

URL = HostingUrl.from_remote("https://github.com/watawuwu/ccclog.git")
BASE = "https://github.com/watawuwu/ccclog"


def label(commit_type: str) -> str:
    return "CI" if commit_type == "ci" else commit_type.capitalize()


def render(commits, boundary_commit, config: ChangelogConfig | None = None, url=None) -> str:
    buckets = partition_commits(commits, RangeMarker.from_commit(boundary_commit))
    return render_markdown(buckets, config or ChangelogConfig(), url)


@pytest.fixture
def mock_repo(tmp_path: Path) -> MagicMock:
    """Create a mock GitRepository."""
    repo = MagicMock(spec=GitRepository)
    repo.path = tmp_path
    repo.remote_url.return_value = None
    return repo


class TestRenderMarkdown:
    """Tests for render_markdown()."""

    def test_all_commit_types(self):
        """Every fixed type gets a section, in fixed order, with links."""
        types = [
            "feat", "fix", "build", "doc", "chore", "ci",
            "style", "refactor", "perf", "test", "revert", "security",
        ]  # fmt: skip
        release = {12: "0.2.0"}
        commits = [
            dummy_commit(n, f"{t}: add {t}", author=f"Test User{n}", tag=release.get(n))
            for n, t in reversed(list(enumerate(types, start=1)))
        ]
        previous = dummy_commit(0, "feat: add zero", tag="0.1.0")

        markdown = render(commits, previous, url=URL)

        sections = [
            f"### {label(t)}\n- [[{n:07x}]] add {t} (Test User{n})\n"
            for n, t in enumerate(types, start=1)
        ]
        links = [f"[{c.short_sha}]: {BASE}/commit/{c.sha}" for c in reversed(commits)]
        expected = (
            "## [0.2.0] - 2020-04-01\n"
            + "\n".join(sections)
            + "\n"
            + f"[0.2.0]: {BASE}/compare/0.1.0...0.2.0\n"
            + "\n".join(links)
            + "\n"
        )
        assert markdown == expected

    def test_multi_item(self):
        """Several commits of one type are listed newest first."""
        commits = [
            dummy_commit(3, "feat: add feat3", author="Test User3", tag="1.0.0"),
            dummy_commit(2, "feat: add feat2", author="Test User2"),
            dummy_commit(1, "feat: add feat1", author="Test User1"),
        ]
        previous = dummy_commit(0, "feat: add zero", tag="0.1.0")

        markdown = render(commits, previous, url=URL)

        assert markdown == (
            "## [1.0.0] - 2020-04-01\n"
            "### Feat\n"
            "- [[0000003]] add feat3 (Test User3)\n"
            "- [[0000002]] add feat2 (Test User2)\n"
            "- [[0000001]] add feat1 (Test User1)\n"
            "\n"
            f"[1.0.0]: {BASE}/compare/0.1.0...1.0.0\n"
            f"[0000003]: {BASE}/commit/{commits[0].sha}\n"
            f"[0000002]: {BASE}/commit/{commits[1].sha}\n"
            f"[0000001]: {BASE}/commit/{commits[2].sha}\n"
        )

    def test_without_url(self):
        """Without a hosting URL there are no links."""
        commits = [
            dummy_commit(3, "feat: new fun", tag="0.2.0"),
            dummy_commit(2, "fix: fix build script"),
            dummy_commit(1, "build: add build script"),
        ]
        previous = dummy_commit(0, "chore: add README", tag="0.1.0")

        markdown = render(commits, previous)

        assert markdown == (
            "## 0.2.0 - 2020-04-01\n"
            "### Feat\n"
            "- [0000003] new fun (Test User)\n"
            "\n"
            "### Fix\n"
            "- [0000002] fix build script (Test User)\n"
            "\n"
            "### Build\n"
            "- [0000001] add build script (Test User)\n"
        )

    def test_multiple_releases(self):
        """Releases are rendered newest first."""
        commits = [
            dummy_commit(3, "feat: three", tag="0.2.0"),
            dummy_commit(2, "fix: two"),
            dummy_commit(1, "feat: one", tag="0.1.0"),
        ]
        previous = dummy_commit(0, "feat: zero")

        markdown = render(commits, previous)

        assert markdown == (
            "## 0.2.0 - 2020-04-01\n"
            "### Feat\n"
            "- [0000003] three (Test User)\n"
            "\n"
            "### Fix\n"
            "- [0000002] two (Test User)\n"
            "\n"
            "## 0.1.0 - 2020-04-01\n"
            "### Feat\n"
            "- [0000001] one (Test User)\n"
        )

    def test_unreleased(self):
        """Unreleased changes get their own heading and a link to HEAD."""
        commits = [dummy_commit(2, "fix: pending")]
        previous = dummy_commit(1, "feat: released", tag="0.1.0")

        assert render(commits, previous).startswith("## Unreleased\n### Fix\n")

        linked = render(commits, previous, url=URL)
        assert linked.startswith("## [Unreleased]\n")
        assert f"[Unreleased]: {BASE}/compare/0.1.0...HEAD\n" in linked

    def test_root_indent_level(self):
        """Heading levels follow root_indent_level."""
        commits = [dummy_commit(1, "feat: one", tag="0.1.0")]
        previous = dummy_commit(0, "feat: zero")

        markdown = render(commits, previous, ChangelogConfig(root_indent_level=1))

        assert markdown.startswith("# 0.1.0 - 2020-04-01\n## Feat\n")

    def test_email_link(self):
        """Authors link to their email when enabled."""
        commits = [dummy_commit(1, "feat: one", tag="0.1.0", author="Ann", email="ann@test.com")]
        previous = dummy_commit(0, "feat: zero")

        markdown = render(commits, previous, ChangelogConfig(enable_email_link=True))

        assert "- [0000001] one ([Ann](mailto:ann@test.com))" in markdown

    def test_empty_bucket_omitted(self):
        """Releases without remaining commits are not rendered."""
        commits = [
            dummy_commit(2, "chore: bump", tag="0.2.0"),
            dummy_commit(1, "feat: one", tag="0.1.0"),
        ]
        previous = dummy_commit(0, "feat: zero")
        config = ChangelogConfig(ignore_types=["chore"])
        buckets = partition_commits(
            commits,
            RangeMarker.from_commit(previous),
            commit_filter=lambda c: c.commit_type not in config.ignored_commit_types,
        )

        markdown = render_markdown(buckets, config)

        assert "0.2.0" not in markdown
        assert markdown.startswith("## 0.1.0 - 2020-04-01\n")

    def test_nothing_to_render(self):
        """No commits render as an empty document."""
        markdown = render([], dummy_commit(0, "feat: zero", tag="0.1.0"))

        assert markdown == ""

    def test_custom_and_others_sections(self):
        """Custom types and non-conventional commits follow the fixed types."""
        commits = [
            dummy_commit(3, "Update docs", tag="0.1.0"),
            dummy_commit(2, "deps: bump click"),
            dummy_commit(1, "fix: typo"),
        ]
        previous = dummy_commit(0, "feat: zero")

        markdown = render(commits, previous)

        assert markdown.index("### Fix") < markdown.index("### Deps") < markdown.index("### Others")
        assert "- [0000003] Update docs (Test User)" in markdown


class TestGenerateChangelog:
    """Tests for generate_changelog()."""

    def test_generate_changelog_success(self, mock_repo: MagicMock):
        """Generate a changelog from the loaded history."""
        history = History(
            commits=[dummy_commit(2, "feat: new fun", tag="0.2.0"), dummy_commit(1, "chore: tidy")],
            boundary=RangeMarker.from_commit(dummy_commit(0, "feat: zero", tag="0.1.0")),
        )

        with patch("ccclog.core.changelog.load_history", return_value=history) as mock_load:
            result = generate_changelog(mock_repo, CcclogConfig())

        assert result.startswith("## 0.2.0 - 2020-04-01\n### Feat\n")
        assert "### Chore" in result
        mock_load.assert_called_once_with(mock_repo, None, None, include_merges=False)

    def test_generate_changelog_applies_config(self, mock_repo: MagicMock):
        """Options from the configuration reach history loading and rendering."""
        history = History(
            commits=[
                dummy_commit(2, "feat: new fun", tag="v0.2.0"),
                dummy_commit(1, "chore: tidy"),
            ],
            boundary=RangeMarker.from_commit(dummy_commit(0, "feat: zero", tag="v0.1.0")),
        )
        config = CcclogConfig(
            changelog=ChangelogConfig(ignore_types=["chore"], root_indent_level=3),
            git=GitConfig(tag_prefix="v", include_merges=True),
        )

        with patch("ccclog.core.changelog.load_history", return_value=history) as mock_load:
            result = generate_changelog(mock_repo, config, revision_spec="v0.1.0..v0.2.0")

        assert "### v0.2.0 - 2020-04-01\n#### Feat\n" in result
        assert "Chore" not in result
        mock_load.assert_called_once_with(mock_repo, "v0.1.0..v0.2.0", "v", include_merges=True)

    def test_generate_changelog_with_remote(self, mock_repo: MagicMock):
        """A configured remote turns hashes into links."""
        mock_repo.remote_url.return_value = "git@github.com:watawuwu/ccclog.git"
        history = History(
            commits=[dummy_commit(1, "feat: one", tag="0.1.0")],
            boundary=RangeMarker.from_commit(dummy_commit(0, "feat: zero")),
        )

        with patch("ccclog.core.changelog.load_history", return_value=history):
            result = generate_changelog(mock_repo, CcclogConfig())

        mock_repo.remote_url.assert_called_once_with("origin")
        assert f"[0.1.0]: {BASE}/compare/0000000...0.1.0" in result

    def test_generate_changelog_propagates_errors(self, mock_repo: MagicMock):
        """Errors from history loading are not swallowed."""
        error = AmbiguousVersionSchemeError(["web-", "api-"])

        with (
            patch("ccclog.core.changelog.load_history", side_effect=error),
            pytest.raises(AmbiguousVersionSchemeError),
        ):
            generate_changelog(mock_repo, CcclogConfig())
