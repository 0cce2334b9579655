"""ccclog - Generate changelogs from conventional commits."""

from __future__ import annotations

__version__ = "0.4.0"
