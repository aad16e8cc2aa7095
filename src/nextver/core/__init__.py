"""Core business logic for nextver.

This module contains the fundamental building blocks:
- Semantic version parsing and ordering
- Prerelease label sequencing
- Conventional commit classification
- Next-version calculation
- Release history resolution
"""

from __future__ import annotations

from nextver.core.commits import (
    ClassifiedCommit,
    CommitNote,
    CommitParser,
    IssueReference,
    classify_commit,
    parse_commits,
)
from nextver.core.history import (
    HistoryOptions,
    ReleaseBaseline,
    ReleaseHistory,
    ReleaseHistoryResolver,
    resolve_history,
)
from nextver.core.increment import (
    VersionIncrementStrategy,
    VersionPolicy,
    calculate_next_version,
    calculate_version_impact,
    next_version,
)
from nextver.core.prerelease import PrereleaseIdentifier
from nextver.core.version import SemanticVersion, VersionImpact, parse_version

__all__ = [
    "ClassifiedCommit",
    "CommitNote",
    "CommitParser",
    "HistoryOptions",
    "IssueReference",
    "PrereleaseIdentifier",
    "ReleaseBaseline",
    "ReleaseHistory",
    "ReleaseHistoryResolver",
    "SemanticVersion",
    "VersionImpact",
    "VersionIncrementStrategy",
    "VersionPolicy",
    "calculate_next_version",
    "calculate_version_impact",
    "classify_commit",
    "next_version",
    "parse_commits",
    "parse_version",
    "resolve_history",
]
