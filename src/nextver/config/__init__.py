"""Configuration management for nextver."""

from __future__ import annotations

from nextver.config.loader import load_config
from nextver.config.models import (
    CommitParserConfig,
    HistoryConfig,
    NextverConfig,
    ProjectConfig,
    VersionConfig,
)

__all__ = [
    "CommitParserConfig",
    "HistoryConfig",
    "NextverConfig",
    "ProjectConfig",
    "VersionConfig",
    "load_config",
]
