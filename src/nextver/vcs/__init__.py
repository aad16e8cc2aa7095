"""Version control access for nextver."""

from __future__ import annotations

from nextver.vcs.git import Commit, GitRepository, RepositoryView, Tag

__all__ = [
    "Commit",
    "GitRepository",
    "RepositoryView",
    "Tag",
]
