"""Configuration management for ccclog."""

from __future__ import annotations

from ccclog.config.loader import load_config
from ccclog.config.models import (
    CcclogConfig,
    ChangelogConfig,
    GitConfig,
)

__all__ = [
    "CcclogConfig",
    "ChangelogConfig",
    "GitConfig",
    "load_config",
]
