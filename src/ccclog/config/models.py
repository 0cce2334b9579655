"""Configuration models.

Configuration lives in ``[tool.ccclog]`` of pyproject.toml:

    [tool.ccclog.changelog]
    reverse = true
    ignore_types = ["chore", "ci"]

    [tool.ccclog.git]
    tag_prefix = "v"
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ccclog.core.commits import CommitType


class ChangelogConfig(BaseModel):
    """How the changelog is rendered."""

    model_config = ConfigDict(extra="forbid")

    reverse: bool = False
    root_indent_level: int = Field(default=2, ge=1, le=6)
    ignore_summary: str | None = None
    ignore_types: list[str] = Field(default_factory=list)
    enable_email_link: bool = False

    @field_validator("ignore_summary")
    @classmethod
    def _check_regex(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid regular expression {value!r}: {e}") from e
        return value

    @property
    def ignore_summary_pattern(self) -> re.Pattern[str] | None:
        return re.compile(self.ignore_summary) if self.ignore_summary else None

    @property
    def ignored_commit_types(self) -> frozenset[CommitType]:
        return frozenset(CommitType.parse(t) for t in self.ignore_types if t.strip())


class GitConfig(BaseModel):
    """Which part of the history is read."""

    model_config = ConfigDict(extra="forbid")

    tag_prefix: str | None = None
    include_merges: bool = False
    remote: str = "origin"


class CcclogConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra="forbid")

    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    git: GitConfig = Field(default_factory=GitConfig)
