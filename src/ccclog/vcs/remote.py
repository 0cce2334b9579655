"""Web URLs for repositories hosted on GitHub-style services."""

from __future__ import annotations

import re
from dataclasses import dataclass

_SSH_URL = re.compile(r"^(?:ssh://)?git@(?P<host>[^/:]+)[/:](?P<repo>.+?)(?:\.git)?/?$")
_HTTP_URL = re.compile(
    r"^(?P<scheme>https?://)(?:[^@/]+@)?(?P<host>[^/]+)/(?P<repo>.+?)(?:\.git)?/?$"
)


def web_base_url(remote_url: str) -> str:
    """Convert a git remote URL to the repository's web URL.

    ``git@github.com:owner/repo.git`` and ``ssh://git@github.com/owner/repo.git``
    become ``https://github.com/owner/repo``. HTTP(S) remotes keep their
    scheme. Anything else is returned unchanged.
    """
    remote_url = remote_url.strip()

    http = _HTTP_URL.match(remote_url)
    if http:
        return f"{http.group('scheme')}{http.group('host')}/{http.group('repo')}"

    ssh = _SSH_URL.match(remote_url)
    if ssh:
        return f"https://{ssh.group('host')}/{ssh.group('repo')}"

    return remote_url


@dataclass(frozen=True)
class HostingUrl:
    """Builds compare and commit links below a repository web URL."""

    base_url: str

    @classmethod
    def from_remote(cls, remote_url: str) -> HostingUrl:
        return cls(web_base_url(remote_url))

    def compare(self, start: str, end: str | None = None) -> str:
        """Link comparing two revisions; ``end`` defaults to HEAD."""
        return f"{self.base_url}/compare/{start}...{end or 'HEAD'}"

    def commit(self, sha: str) -> str:
        return f"{self.base_url}/commit/{sha}"
