"""Next-version calculation.

The engine (:func:`next_version`) is a pure function of the current
version and the classified commits of the release. It handles the four
transitions between stable and prerelease versions:

- stable -> stable: plain major/minor/patch bump
- stable -> prerelease: bumped version with ``-<label>.0``
- prerelease -> prerelease: continue the sequence while the bump stays
  within the range the prerelease already covers, else start a new one
- prerelease -> stable: release the prerelease core when within range

:func:`calculate_next_version` layers the release policy on top: first
releases, insignificant commits, explicit overrides and conflict checks.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from nextver.core.commits import ClassifiedCommit
from nextver.core.prerelease import increment_patch_version, increment_prerelease
from nextver.core.version import SemanticVersion, VersionImpact
from nextver.exceptions import VersionConflictError, VersionError, VersionUnaffectedError


def commit_impact(
    commit: ClassifiedCommit,
    insignificant_commits_affect_version: bool = True,
) -> VersionImpact:
    """Version impact of a single commit.

    Breaking changes always yield MAJOR, whatever the type.
    """
    if commit.is_breaking_change:
        return VersionImpact.MAJOR
    if commit.is_feature:
        return VersionImpact.MINOR
    if commit.is_fix:
        return VersionImpact.PATCH
    if insignificant_commits_affect_version:
        return VersionImpact.PATCH
    return VersionImpact.NONE


def calculate_version_impact(
    commits: Iterable[ClassifiedCommit],
    insignificant_commits_affect_version: bool = True,
) -> VersionImpact:
    """Highest impact across ``commits`` (NONE for no commits)."""
    return max(
        (commit_impact(c, insignificant_commits_affect_version) for c in commits),
        default=VersionImpact.NONE,
    )


def is_within_prerelease_range(version: SemanticVersion, impact: VersionImpact) -> bool:
    """Whether a prerelease already covers a bump of ``impact``.

    ``1.1.0-alpha.0`` covers minor and patch bumps (it is already a minor
    release candidate) but not a major one; ``2.0.0-alpha.0`` covers all.
    """
    if impact == VersionImpact.MINOR:
        return version.patch == 0
    if impact == VersionImpact.MAJOR:
        return version.minor == 0 and version.patch == 0
    return True


def next_version(
    current: SemanticVersion,
    commits: Iterable[ClassifiedCommit],
    prerelease_label: str | None = None,
    insignificant_commits_affect_version: bool = True,
) -> SemanticVersion:
    """Compute the next version.

    Args:
        current: Currently released version (stable or prerelease)
        commits: Classified commits of the release
        prerelease_label: Target prerelease label, ``None`` for a stable release
        insignificant_commits_affect_version: Let commits that are neither
            ``feat`` nor ``fix`` bump the patch version

    Returns:
        The next version; ``current`` itself for an empty commit list, and
        when no commit has an impact unless a prerelease is released as
        stable

    Raises:
        InvalidPrereleaseIdentifierError: If a prerelease sequence must be
            continued but ``current`` is not ``<label>.<number>`` shaped
    """
    commits = list(commits)
    if not commits:
        return current

    impact = calculate_version_impact(commits, insignificant_commits_affect_version)
    target_prerelease = bool(prerelease_label)

    if impact == VersionImpact.NONE:
        # Releasing a prerelease as stable needs no further bump
        if current.is_prerelease and not target_prerelease:
            return current.as_release()
        return current

    bumped = current.bump(impact)

    if current.is_prerelease and target_prerelease:
        if is_within_prerelease_range(current, impact):
            return increment_prerelease(current, prerelease_label)
        return bumped.as_prerelease(prerelease_label, 0)

    if target_prerelease:
        return bumped.as_prerelease(prerelease_label, 0)

    if current.is_prerelease:
        return current.as_release() if is_within_prerelease_range(current, impact) else bumped

    return bumped


class VersionIncrementStrategy:
    """Next-version calculation bound to the commits of one release."""

    def __init__(self, commits: Sequence[ClassifiedCommit]) -> None:
        self._commits = list(commits)

    def version_impact(self, insignificant_commits_affect_version: bool = True) -> VersionImpact:
        return calculate_version_impact(self._commits, insignificant_commits_affect_version)

    def next_version(
        self,
        current: SemanticVersion,
        prerelease_label: str | None = None,
        insignificant_commits_affect_version: bool = True,
    ) -> SemanticVersion:
        return next_version(
            current,
            self._commits,
            prerelease_label,
            insignificant_commits_affect_version,
        )


# =============================================================================
# Release policy
# =============================================================================


@dataclass(frozen=True)
class VersionPolicy:
    """Caller-side rules applied around the increment engine.

    Attributes:
        prerelease: Target prerelease label, ``None`` for stable releases
        ignore_insignificant_commits: Report an unaffected version (exit 0)
            instead of forcing a patch bump
        exit_insignificant_commits: Like ``ignore_insignificant_commits`` but
            signals failure (exit 1)
        release_as: Explicit version that overrides the calculation
        initial_version: Version used for the first release
    """

    prerelease: str | None = None
    ignore_insignificant_commits: bool = False
    exit_insignificant_commits: bool = False
    release_as: str | None = None
    initial_version: str = "1.0.0"

    @property
    def insignificant_commits_affect_version(self) -> bool:
        return not (self.ignore_insignificant_commits or self.exit_insignificant_commits)


def calculate_next_version(
    current: SemanticVersion | None,
    commits: Sequence[ClassifiedCommit],
    policy: VersionPolicy | None = None,
    *,
    is_first_release: bool = False,
) -> SemanticVersion:
    """Compute the version of the next release under ``policy``.

    Args:
        current: Current version, ``None`` if nothing was released yet
        commits: Classified commits of the release
        policy: Release policy, defaults to :class:`VersionPolicy`
        is_first_release: No earlier release exists

    Returns:
        The version to release

    Raises:
        VersionUnaffectedError: If insignificant commits are ignored and the
            version would not change
        VersionConflictError: If the result is lower than ``current``
        VersionError: If ``release_as`` is not a valid version
    """
    policy = policy or VersionPolicy()

    if is_first_release or current is None:
        result = current if current is not None else SemanticVersion.parse(policy.initial_version)
    else:
        result = next_version(
            current,
            commits,
            policy.prerelease,
            policy.insignificant_commits_affect_version,
        )
        if result == current and current.is_prerelease and not policy.prerelease:
            result = current.as_release()
        elif result == current:
            if not policy.insignificant_commits_affect_version:
                raise VersionUnaffectedError(
                    f"Version was not affected by commits since last release ({current})",
                    exit_code=1 if policy.exit_insignificant_commits else 0,
                )
            result = increment_patch_version(result)

    if policy.release_as:
        override = SemanticVersion.try_parse(policy.release_as)
        if override is None:
            raise VersionError(f"Could not parse release version {policy.release_as!r}")
        result = override

    if current is not None and result < current:
        raise VersionConflictError(
            f"Next version {result} is lower than current version {current}"
        )

    return result
