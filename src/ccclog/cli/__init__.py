"""Command line interface for ccclog."""

from __future__ import annotations

from ccclog.cli.main import cli

__all__ = ["cli"]
