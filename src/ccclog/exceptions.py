"""Exception hierarchy for ccclog.

Every error raised by the library derives from CcclogError and carries
the offending input so the CLI can report it verbatim.
"""

from __future__ import annotations


class CcclogError(Exception):
    """Base class for all ccclog errors."""


# =============================================================================
# Versions
# =============================================================================


class VersionError(CcclogError):
    """Base class for version related errors."""


class NotASemanticVersionError(VersionError):
    """A string does not end in a semantic version."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Can't find semver format. value: {value}")


class AmbiguousVersionSchemeError(VersionError):
    """Tags use more than one naming prefix and none could be preferred."""

    def __init__(self, prefixes: list[str]) -> None:
        self.prefixes = prefixes
        shown = ", ".join(repr(p) for p in prefixes)
        super().__init__(
            f"Tags use multiple version prefixes ({shown}). "
            "Select one with --tag-prefix or [tool.ccclog.git] tag_prefix."
        )


# =============================================================================
# Revision specs
# =============================================================================


class RevisionSpecError(CcclogError):
    """Base class for revision spec errors."""

    def __init__(self, message: str, spec: str) -> None:
        self.spec = spec
        super().__init__(message)


class UnsupportedRevisionSpecShapeError(RevisionSpecError):
    """The revision spec is not a two-dot range."""

    def __init__(self, spec: str) -> None:
        super().__init__(
            f"Unsupported revision spec: {spec!r}. Only two-dot ranges (A..B) are supported",
            spec,
        )


class InvalidRevisionSpecError(RevisionSpecError):
    """An endpoint of the revision spec does not resolve to a commit."""

    def __init__(self, spec: str, revision: str) -> None:
        self.revision = revision
        super().__init__(f"Invalid revision spec: {spec!r} ({revision!r} not found)", spec)


# =============================================================================
# Git
# =============================================================================


class GitError(CcclogError):
    """Base class for git errors."""


class NotAGitRepositoryError(GitError):
    """The path is not inside a git work tree."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Not found git repository path: {path}")


class GitCommandError(GitError):
    """A git command exited with a non-zero status."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        self.stderr = stderr
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(CcclogError):
    """Base class for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml was found."""


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""
