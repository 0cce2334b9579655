"""Conventional commit classification.

Parses commit messages following the Conventional Commits format:
    <type>[optional scope][!]: <description>

    [optional body]

    [optional footer(s)]

Messages that do not follow the format are still accepted; they are
classified as ``Others`` with the raw summary as description.

See: https://www.conventionalcommits.org/
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from ccclog.core.version import Version
    from ccclog.vcs.git import Commit

# Regex for parsing the summary line of a conventional commit
# Groups: type, scope (optional), breaking (optional !), description
CONVENTIONAL_COMMIT_PATTERN = re.compile(
    r"^(?P<type>[^(:]+?)"
    r"(?:\((?P<scope>[^)]*)\))?"
    r"(?P<breaking>!)?"
    r": (?P<description>.+)$"
)

# Footer line flagging a breaking change in the message body
BREAKING_CHANGE_PATTERN = re.compile(r"^BREAKING[ -]CHANGE: ", re.MULTILINE)


class CommitKind(Enum):
    """Kinds of commit types, in changelog display order."""

    FEAT = "feat"
    FIX = "fix"
    BUILD = "build"
    DOC = "doc"
    CHORE = "chore"
    CI = "ci"
    STYLE = "style"
    REFACTOR = "refactor"
    PERF = "perf"
    TEST = "test"
    REVERT = "revert"
    SECURITY = "security"
    CUSTOM = "custom"
    OTHERS = "others"


# Changelog section order of the fixed commit types
CANONICAL_ORDER: tuple[CommitKind, ...] = (
    CommitKind.FEAT,
    CommitKind.FIX,
    CommitKind.BUILD,
    CommitKind.DOC,
    CommitKind.CHORE,
    CommitKind.CI,
    CommitKind.STYLE,
    CommitKind.REFACTOR,
    CommitKind.PERF,
    CommitKind.TEST,
    CommitKind.REVERT,
    CommitKind.SECURITY,
)

_CANONICAL_BY_NAME = {kind.value: kind for kind in CANONICAL_ORDER}

# Labels that are not simply the capitalized type name
_LABEL_OVERRIDES = {CommitKind.CI: "CI"}


@dataclass(frozen=True)
class CommitType:
    """The type of a commit.

    Either one of the fixed kinds, ``CUSTOM`` with the type token as
    written in the commit, or ``OTHERS`` for non-conventional commits.
    """

    kind: CommitKind
    name: str | None = None

    @classmethod
    def parse(cls, token: str) -> CommitType:
        """Map a type token to a CommitType.

        Fixed types match case-insensitively, anything else becomes a
        custom type keeping the token verbatim.
        """
        key = token.strip().lower()
        if key in _CANONICAL_BY_NAME:
            return cls(_CANONICAL_BY_NAME[key])
        if key == CommitKind.OTHERS.value:
            return OTHERS
        return cls.custom(token.strip())

    @classmethod
    def custom(cls, name: str) -> CommitType:
        return cls(CommitKind.CUSTOM, name)

    @property
    def is_custom(self) -> bool:
        return self.kind is CommitKind.CUSTOM

    @property
    def label(self) -> str:
        """Human readable section title, e.g. "Feat", "CI", "Breaking Change"."""
        if self.kind in _LABEL_OVERRIDES:
            return _LABEL_OVERRIDES[self.kind]
        text = self.name if self.is_custom and self.name else self.kind.value
        words = re.split(r"[-_\s]+", text)
        return " ".join(w.capitalize() for w in words if w) or text

    def __str__(self) -> str:
        return self.label


FEAT = CommitType(CommitKind.FEAT)
FIX = CommitType(CommitKind.FIX)
BUILD = CommitType(CommitKind.BUILD)
DOC = CommitType(CommitKind.DOC)
CHORE = CommitType(CommitKind.CHORE)
CI = CommitType(CommitKind.CI)
STYLE = CommitType(CommitKind.STYLE)
REFACTOR = CommitType(CommitKind.REFACTOR)
PERF = CommitType(CommitKind.PERF)
TEST = CommitType(CommitKind.TEST)
REVERT = CommitType(CommitKind.REVERT)
SECURITY = CommitType(CommitKind.SECURITY)
OTHERS = CommitType(CommitKind.OTHERS)


def type_order_key(commit_type: CommitType) -> tuple[int, int]:
    """Sort key placing fixed types first, then custom types, then others.

    Custom types all share one key; a stable sort keeps them in the
    order they were first seen.
    """
    if commit_type.kind is CommitKind.OTHERS:
        return (2, 0)
    if commit_type.is_custom:
        return (1, 0)
    return (0, CANONICAL_ORDER.index(commit_type.kind))


@dataclass(frozen=True)
class ConventionalCommit:
    """Classification of a single commit message."""

    type: CommitType
    description: str
    scope: str | None = None
    breaking: bool = False

    @property
    def is_conventional(self) -> bool:
        return self.type.kind is not CommitKind.OTHERS


def split_message(message: str) -> tuple[str, str]:
    """Split a commit message into its summary line and body."""
    summary, _, body = message.partition("\n")
    return summary.removesuffix("\r"), body


def classify(message: str) -> ConventionalCommit:
    """Classify a commit message.

    Never fails: a summary that does not follow the conventional commit
    grammar yields type ``OTHERS`` and the summary as description.

    Args:
        message: Full commit message

    Returns:
        The classification of the message
    """
    summary, body = split_message(message)
    body_breaking = bool(BREAKING_CHANGE_PATTERN.search(body))

    match = CONVENTIONAL_COMMIT_PATTERN.match(summary)
    if not match:
        return ConventionalCommit(type=OTHERS, description=summary, breaking=body_breaking)

    scope = match.group("scope")
    return ConventionalCommit(
        type=CommitType.parse(match.group("type")),
        description=match.group("description").strip(),
        scope=scope.strip() if scope else None,
        breaking=bool(match.group("breaking")) or body_breaking,
    )


@dataclass(frozen=True)
class Author:
    """Commit author. The name falls back to "Unknown"."""

    name: str | None = None
    email: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or "Unknown"


@dataclass(frozen=True)
class ParsedCommit:
    """A commit with its classification and release tag.

    ``tag`` is only set when the commit is exactly the target of a tag
    belonging to the selected version scheme.
    """

    commit: Commit
    conventional: ConventionalCommit
    tag: Version | None = None

    @classmethod
    def from_commit(cls, commit: Commit, tag: Version | None = None) -> ParsedCommit:
        """Classify a raw commit."""
        return cls(commit=commit, conventional=classify(commit.message), tag=tag)

    @property
    def sha(self) -> str:
        return self.commit.sha

    @property
    def short_sha(self) -> str:
        return self.commit.short_sha

    @property
    def author(self) -> Author:
        return Author(name=self.commit.author_name or None, email=self.commit.author_email or None)

    @property
    def date(self) -> datetime:
        return self.commit.date

    @property
    def parent_count(self) -> int:
        return self.commit.parent_count

    @property
    def commit_type(self) -> CommitType:
        return self.conventional.type

    @property
    def scope(self) -> str | None:
        return self.conventional.scope

    @property
    def description(self) -> str:
        """Description shown in the changelog."""
        return self.conventional.description

    @property
    def is_breaking(self) -> bool:
        return self.conventional.breaking


def parse_commits(
    commits: Iterable[Commit],
    tags: dict[str, Version] | None = None,
) -> list[ParsedCommit]:
    """Classify commits and attach release tags.

    Args:
        commits: Raw commits
        tags: Selected versions keyed by tag name. A commit is tagged
            when one of its tag names is in this mapping.

    Returns:
        Parsed commits in input order
    """
    tags = tags or {}
    parsed = []
    for commit in commits:
        tag = next((tags[name] for name in commit.tag_names if name in tags), None)
        parsed.append(ParsedCommit.from_commit(commit, tag))
    return parsed


def build_commit_filter(
    ignore_summary: re.Pattern[str] | None = None,
    ignore_types: Iterable[CommitType] | None = None,
) -> Callable[[ParsedCommit], bool] | None:
    """Build a predicate keeping commits not matched by the ignore options.

    Returns None when nothing is ignored.
    """
    ignored = frozenset(ignore_types or ())
    if ignore_summary is None and not ignored:
        return None

    def keep(commit: ParsedCommit) -> bool:
        if ignore_summary is not None and ignore_summary.search(commit.description):
            return False
        return commit.commit_type not in ignored

    return keep
