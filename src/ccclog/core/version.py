"""Semantic versions parsed from tag names.

A tag name is split into a free-form prefix and a trailing semantic
version, so ``v1.2.0``, ``web-1.2.0`` and ``1.2.0`` all parse. Versions
order by semver precedence; the prefix is only a tie-breaker.

Repositories sometimes mix several tag naming schemes. Before versions
are compared, ``select_versions`` keeps exactly one scheme.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ccclog.exceptions import AmbiguousVersionSchemeError, NotASemanticVersionError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

_IDENTIFIER = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"

SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    rf"(?:-(?P<prerelease>{_IDENTIFIER}(?:\.{_IDENTIFIER})*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$",
    re.ASCII,
)

# Positions where a version may start: a digit at the start of the string
# or directly after a non-digit.
_CANDIDATE_START = re.compile(r"(?<!\d)\d", re.ASCII)

# Prefixes preferred, in order, when a repository mixes tag schemes
DEFAULT_PREFIXES = ("", "v")


@dataclass(frozen=True)
class Version:
    """A semantic version with the tag prefix it was found under.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        prerelease: Dot separated pre-release identifiers, e.g. ("rc", "1")
        build: Dot separated build metadata identifiers
        prefix: Literal text before the version in the tag name
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()
    prefix: str = ""

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a tag name such as ``v1.2.3`` or ``api-2.0.0-rc.1``.

        The prefix is the shortest leading text after which the remainder
        is a complete semantic version.

        Raises:
            NotASemanticVersionError: If no trailing semantic version exists
        """
        for candidate in _CANDIDATE_START.finditer(value):
            start = candidate.start()
            match = SEMVER_PATTERN.match(value[start:])
            if match is None:
                continue

            prefix = value[:start]
            logger.debug("prefix: %r, version: %s", prefix, value[start:])
            return cls(
                major=int(match.group("major")),
                minor=int(match.group("minor")),
                patch=int(match.group("patch")),
                prerelease=_split(match.group("prerelease")),
                build=_split(match.group("build")),
                prefix=prefix,
            )

        raise NotASemanticVersionError(value)

    @property
    def semver(self) -> str:
        """The version without its prefix."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def __str__(self) -> str:
        return f"{self.prefix}{self.semver}"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return _precedence_key(self) < _precedence_key(other)

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return _precedence_key(self) <= _precedence_key(other)

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return _precedence_key(self) > _precedence_key(other)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return _precedence_key(self) >= _precedence_key(other)


def _split(identifiers: str | None) -> tuple[str, ...]:
    return tuple(identifiers.split(".")) if identifiers else ()


def _precedence_key(version: Version) -> tuple:
    # A release sorts after all of its pre-releases. Numeric identifiers
    # sort before alphanumeric ones; a shorter identifier list sorts first.
    if version.prerelease:
        prerelease = (
            0,
            tuple((0, int(i), "") if i.isdigit() else (1, 0, i) for i in version.prerelease),
        )
    else:
        prerelease = (1, ())
    return (version.major, version.minor, version.patch, prerelease, version.prefix)


def parse_version(value: str) -> Version:
    """Parse a tag name into a Version.

    Raises:
        NotASemanticVersionError: If the value has no semantic version
    """
    return Version.parse(value)


def parse_versions(tag_names: Iterable[str]) -> list[Version]:
    """Parse every tag name that carries a semantic version.

    Tags without one are skipped.
    """
    versions = []
    for name in tag_names:
        try:
            versions.append(Version.parse(name))
        except NotASemanticVersionError:
            logger.debug("Skipping non-version tag: %s", name)
    return versions


def distinct_prefixes(versions: Iterable[Version]) -> list[str]:
    """Distinct prefixes in first-seen order."""
    return list(dict.fromkeys(v.prefix for v in versions))


def select_versions(versions: Iterable[Version], prefix: str | None = None) -> list[Version]:
    """Keep the versions of a single tag naming scheme.

    Args:
        versions: Versions parsed from the repository's tags
        prefix: Explicit prefix to keep. Versions with any other prefix
            are dropped, which may leave nothing.

    Returns:
        Versions sharing one prefix

    Raises:
        AmbiguousVersionSchemeError: If no prefix was given, several
            prefixes are present and neither "" nor "v" is among them
    """
    versions = list(versions)

    if prefix is not None:
        return [v for v in versions if v.prefix == prefix]

    prefixes = distinct_prefixes(versions)
    if len(prefixes) <= 1:
        return versions

    for default in DEFAULT_PREFIXES:
        if default in prefixes:
            logger.debug("Multiple tag prefixes %s, using %r", prefixes, default)
            return [v for v in versions if v.prefix == default]

    raise AmbiguousVersionSchemeError(prefixes)


def latest_range(versions: Iterable[Version]) -> tuple[Version | None, Version | None]:
    """Return the newest version and the one before it."""
    ordered = sorted(versions, reverse=True)
    latest = ordered[0] if ordered else None
    previous = ordered[1] if len(ordered) > 1 else None
    return latest, previous
