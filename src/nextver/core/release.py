"""Release planning.

Ties the core together for one project: resolve the release history,
classify its commits and compute the next version.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nextver.core.commits import ClassifiedCommit, CommitParser
from nextver.core.history import HistoryOptions, resolve_history
from nextver.core.increment import VersionPolicy, calculate_next_version, calculate_version_impact
from nextver.core.version import SemanticVersion, VersionImpact

if TYPE_CHECKING:
    from nextver.config.models import NextverConfig
    from nextver.vcs.git import RepositoryView

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleasePlan:
    """Outcome of planning the next release.

    Attributes:
        previous_version: Newest released version (prereleases included), if known
        next_version: Version to release
        commits: Classified commits of the release, newest first
        is_first_release: No earlier release was found
        impact: Highest version impact of the commits
        tag_name: Tag the release will be published under
    """

    previous_version: SemanticVersion | None
    next_version: SemanticVersion
    commits: list[ClassifiedCommit]
    is_first_release: bool
    impact: VersionImpact
    tag_name: str


def build_policy(config: NextverConfig, release_as: str | None = None) -> VersionPolicy:
    """Release policy described by ``config``."""
    return VersionPolicy(
        prerelease=config.version.pre_release,
        ignore_insignificant_commits=config.version.ignore_insignificant_commits,
        exit_insignificant_commits=config.version.exit_insignificant_commits,
        release_as=release_as,
        initial_version=config.version.initial_version,
    )


def plan_release(
    repo: RepositoryView,
    config: NextverConfig,
    *,
    current_version: SemanticVersion | None = None,
    release_as: str | None = None,
) -> ReleasePlan:
    """Plan the next release of the configured project.

    Args:
        repo: Repository to read history from
        config: Loaded configuration
        current_version: Version to bump from; defaults to the newest
            release found in the history, prereleases included
        release_as: Explicit version overriding the calculation

    Returns:
        The release plan

    Raises:
        VersionUnaffectedError: If insignificant commits are ignored and
            nothing changes the version
        VersionConflictError: If the next version would be lower than the
            current one
        InvalidPrereleaseIdentifierError: If the current prerelease version
            cannot be continued
    """
    history = resolve_history(repo, config.project, HistoryOptions.from_config(config.history))
    parser = CommitParser.from_config(config.commits)
    commits = parser.parse_all(history.commits)
    logger.debug("Classified %d commit(s) since last release", len(commits))

    # The range starts at the baseline; the version continues from the newest release
    current = current_version or history.latest_version
    is_first_release = history.latest_version is None
    policy = build_policy(config, release_as)
    next_version = calculate_next_version(
        current,
        commits,
        policy,
        is_first_release=is_first_release,
    )
    logger.debug("Next version: %s -> %s", current, next_version)

    return ReleasePlan(
        previous_version=current,
        next_version=next_version,
        commits=commits,
        is_first_release=is_first_release,
        impact=calculate_version_impact(commits, policy.insignificant_commits_affect_version),
        tag_name=config.project.tag_name(next_version),
    )
