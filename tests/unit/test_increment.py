"""Tests for next-version calculation."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from nextver.core.commits import ClassifiedCommit, classify_commit
from nextver.core.increment import (
    VersionIncrementStrategy,
    VersionPolicy,
    calculate_next_version,
    calculate_version_impact,
    commit_impact,
    is_within_prerelease_range,
    next_version,
)
from nextver.core.version import SemanticVersion, VersionImpact, parse_version
from nextver.exceptions import (
    InvalidPrereleaseIdentifierError,
    VersionConflictError,
    VersionError,
    VersionUnaffectedError,
)


def commits(*messages: str) -> list[ClassifiedCommit]:
    return [classify_commit(f"sha{i}", message) for i, message in enumerate(messages)]


FEAT = "feat: add feature"
FIX = "fix: fix bug"
CHORE = "chore: tidy up"
BREAKING_FEAT = "feat: new api\n\nBREAKING CHANGE: old api removed"


class TestCalculateVersionImpact:
    """Tests for calculate_version_impact()."""

    def test_empty_commits_returns_none(self):
        """Empty commit list has no impact."""
        assert calculate_version_impact([]) == VersionImpact.NONE

    def test_feat_returns_minor(self):
        """feat commit triggers MINOR."""
        assert calculate_version_impact(commits(FEAT)) == VersionImpact.MINOR

    def test_fix_returns_patch(self):
        """fix commit triggers PATCH."""
        assert calculate_version_impact(commits(FIX)) == VersionImpact.PATCH

    def test_feat_takes_precedence_over_fix(self):
        """The highest impact wins."""
        assert calculate_version_impact(commits(FIX, FEAT, FIX)) == VersionImpact.MINOR

    def test_breaking_takes_precedence(self):
        """A breaking change yields MAJOR regardless of other commits."""
        assert calculate_version_impact(commits(FIX, FEAT, BREAKING_FEAT)) == VersionImpact.MAJOR

    def test_breaking_chore_is_major(self):
        """A chore with a BREAKING CHANGE note forces MAJOR."""
        chore = commits("chore: drop py38\n\nBREAKING CHANGE: python 3.8 unsupported")

        assert calculate_version_impact(chore, insignificant_commits_affect_version=False) == (
            VersionImpact.MAJOR
        )

    def test_insignificant_commits_bump_patch(self):
        """By default any commit at all bumps the patch version."""
        assert calculate_version_impact(commits(CHORE)) == VersionImpact.PATCH
        assert calculate_version_impact(commits("Update README")) == VersionImpact.PATCH

    def test_insignificant_commits_ignored(self):
        """Untyped and non feat/fix commits have no impact when ignored."""
        assert (
            calculate_version_impact(
                commits(CHORE, "Update README", ""), insignificant_commits_affect_version=False
            )
            == VersionImpact.NONE
        )

    def test_commit_impact_per_commit(self):
        """commit_impact() classifies a single commit."""
        assert commit_impact(commits("docs: x")[0], False) == VersionImpact.NONE
        assert commit_impact(commits("perf!: x")[0], False) == VersionImpact.MAJOR


class TestWithinPrereleaseRange:
    """Tests for is_within_prerelease_range()."""

    @pytest.mark.parametrize(
        ("version", "impact", "expected"),
        [
            ("1.1.1-alpha.0", VersionImpact.PATCH, True),
            ("1.1.0-alpha.0", VersionImpact.MINOR, True),
            ("1.1.1-alpha.0", VersionImpact.MINOR, False),
            ("2.0.0-alpha.0", VersionImpact.MAJOR, True),
            ("1.1.0-alpha.0", VersionImpact.MAJOR, False),
            ("2.0.1-alpha.0", VersionImpact.MAJOR, False),
        ],
    )
    def test_range(self, version: str, impact: VersionImpact, expected: bool):
        """Range is derived from the zero-ness of minor and patch."""
        assert is_within_prerelease_range(parse_version(version), impact) is expected


class TestNextVersion:
    """Tests for the stable/prerelease transition matrix."""

    @pytest.mark.parametrize(
        ("current", "messages", "label", "expected"),
        [
            # stable -> stable
            ("1.0.0", [FIX], None, "1.0.1"),
            ("1.0.0", [FEAT], None, "1.1.0"),
            ("1.2.3", [BREAKING_FEAT], None, "2.0.0"),
            # stable -> prerelease
            ("1.0.0", [FEAT], "alpha", "1.1.0-alpha.0"),
            ("1.0.0", [FIX], "beta", "1.0.1-beta.0"),
            # prerelease -> prerelease, within range
            ("1.1.0-alpha.0", [FIX], "alpha", "1.1.0-alpha.1"),
            ("1.1.0-alpha.1", [FEAT], "alpha", "1.1.0-alpha.2"),
            ("1.1.0-alpha.3", [FEAT], "beta", "1.1.0-beta.0"),
            ("2.0.0-rc.0", [BREAKING_FEAT], "rc", "2.0.0-rc.1"),
            # prerelease -> prerelease, out of range
            ("1.1.0-alpha.0", [BREAKING_FEAT], "alpha", "2.0.0-alpha.0"),
            ("1.0.1-alpha.4", [FEAT], "alpha", "1.1.0-alpha.0"),
            # prerelease -> stable
            ("2.0.0-alpha.2", [FEAT], None, "2.0.0"),
            ("1.1.0-beta.1", [FIX], None, "1.1.0"),
            ("1.0.1-beta.1", [FEAT], None, "1.1.0"),
            ("1.1.0-beta.1", [BREAKING_FEAT], None, "2.0.0"),
        ],
    )
    def test_transition_matrix(
        self, current: str, messages: list[str], label: str | None, expected: str
    ):
        """Each transition class produces the documented version."""
        result = next_version(parse_version(current), commits(*messages), label)

        assert str(result) == expected

    @pytest.mark.parametrize("current", ["1.0.0", "1.1.0-alpha.0"])
    @pytest.mark.parametrize("label", [None, "alpha", "beta"])
    def test_empty_commits_keep_version(self, current: str, label: str | None):
        """No commits means no change, regardless of prerelease flags."""
        version = parse_version(current)

        assert next_version(version, [], label) == version

    def test_insignificant_commits_ignored_keep_version(self):
        """Ignored insignificant commits leave the version unchanged."""
        version = parse_version("1.0.0")

        assert next_version(version, commits(CHORE), None, False) == version

    def test_insignificant_commits_release_prerelease_as_stable(self):
        """A stable release of a prerelease needs no significant commit."""
        result = next_version(parse_version("2.0.0-alpha.2"), commits(CHORE), None, False)

        assert result == parse_version("2.0.0")

    def test_insignificant_commits_keep_running_prerelease(self):
        """Without impact a running prerelease sequence is not advanced."""
        version = parse_version("2.0.0-alpha.2")

        assert next_version(version, commits(CHORE), "alpha", False) == version

    def test_breaking_widens_running_minor_prerelease(self):
        """A breaking change lands mid-sequence of a minor prerelease."""
        version = parse_version("1.1.0-alpha.0")
        version = next_version(version, commits(FIX), "alpha")
        assert str(version) == "1.1.0-alpha.1"

        version = next_version(version, commits(BREAKING_FEAT), "alpha")
        assert str(version) == "2.0.0-alpha.0"

        version = next_version(version, commits(FEAT), "alpha")
        assert str(version) == "2.0.0-alpha.1"

        version = next_version(version, commits(FIX), None)
        assert str(version) == "2.0.0"

    def test_zero_minor_and_patch_alias_to_major_range(self):
        """A minor prerelease of x.0.0 already counts as covering MAJOR.

        The range is re-derived from the version alone, so 1.0.0-alpha.0
        started for a feature absorbs a later breaking change.
        """
        result = next_version(parse_version("1.0.0-alpha.0"), commits(BREAKING_FEAT), "alpha")

        assert str(result) == "1.0.0-alpha.1"

    def test_malformed_prerelease_propagates(self):
        """Continuing a malformed prerelease raises."""
        with pytest.raises(InvalidPrereleaseIdentifierError):
            next_version(parse_version("2.0.0-alpha"), commits(FIX), "alpha")

    def test_strategy_object(self):
        """VersionIncrementStrategy binds commits to the calculation."""
        strategy = VersionIncrementStrategy(commits(FEAT))

        assert strategy.version_impact() == VersionImpact.MINOR
        assert str(strategy.next_version(parse_version("0.3.1"), "rc")) == "0.4.0-rc.0"


messages = st.sampled_from([FEAT, FIX, CHORE, BREAKING_FEAT, "Update README", "docs: typo"])
stable_versions = st.builds(
    SemanticVersion,
    st.integers(0, 20),
    st.integers(0, 20),
    st.integers(0, 20),
)


@st.composite
def current_versions(draw: st.DrawFn) -> SemanticVersion:
    version = draw(stable_versions)
    if draw(st.booleans()):
        return version.as_prerelease("alpha", draw(st.integers(0, 20)))
    return version


class TestNextVersionProperties:
    """Property-based tests for next_version()."""

    @settings(max_examples=500)
    @given(
        current=current_versions(),
        batch=st.lists(messages, min_size=1, max_size=8),
        label=st.sampled_from([None, "alpha"]),
        insignificant=st.booleans(),
    )
    def test_monotonic(self, current, batch, label, insignificant):
        """The next version is never lower than the current one."""
        result = next_version(current, commits(*batch), label, insignificant)

        assert result >= current

    @settings(max_examples=300)
    @given(current=current_versions(), batch=st.lists(messages, max_size=8))
    def test_breaking_change_forces_major(self, current, batch):
        """Any breaking commit makes the impact MAJOR."""
        assert calculate_version_impact(commits(*batch, BREAKING_FEAT)) == VersionImpact.MAJOR


class TestCalculateNextVersion:
    """Tests for calculate_next_version() release policy."""

    def test_first_release_uses_initial_version(self):
        """Without a current version the initial version is used."""
        result = calculate_next_version(None, commits(FEAT), is_first_release=True)

        assert result == parse_version("1.0.0")

    def test_first_release_custom_initial_version(self):
        """initial_version is configurable."""
        policy = VersionPolicy(initial_version="0.1.0")

        assert calculate_next_version(None, [], policy) == parse_version("0.1.0")

    def test_first_release_keeps_current(self):
        """A known current version is released as-is on the first release."""
        current = parse_version("0.5.0")

        assert calculate_next_version(current, commits(FEAT), is_first_release=True) == current

    def test_regular_bump(self):
        """Normal releases delegate to the increment engine."""
        result = calculate_next_version(parse_version("1.0.0"), commits(FEAT))

        assert result == parse_version("1.1.0")

    def test_unchanged_version_forces_patch(self):
        """Without commits the patch version is forced forward."""
        assert calculate_next_version(parse_version("1.0.0"), []) == parse_version("1.0.1")

    def test_unchanged_prerelease_forces_prerelease_number(self):
        """A prerelease without changes advances its counter."""
        result = calculate_next_version(
            parse_version("1.1.0-rc.0"), [], VersionPolicy(prerelease="rc")
        )

        assert result == parse_version("1.1.0-rc.1")

    def test_unchanged_prerelease_released_as_stable(self):
        """Without a prerelease label an unchanged prerelease is released as stable."""
        result = calculate_next_version(parse_version("2.0.0-alpha.2"), [], VersionPolicy())

        assert result == parse_version("2.0.0")
        assert not result.is_prerelease

    def test_stable_release_of_prerelease_is_not_unaffected(self):
        """Promoting a prerelease is a change even when insignificant commits are ignored."""
        policy = VersionPolicy(ignore_insignificant_commits=True)

        result = calculate_next_version(parse_version("2.0.0-alpha.2"), commits(CHORE), policy)

        assert result == parse_version("2.0.0")

    def test_ignore_insignificant_reports_unaffected(self):
        """Ignored insignificant commits report an unaffected version with exit code 0."""
        policy = VersionPolicy(ignore_insignificant_commits=True)

        with pytest.raises(VersionUnaffectedError) as exc_info:
            calculate_next_version(parse_version("1.0.0"), commits(CHORE), policy)

        assert exc_info.value.exit_code == 0

    def test_exit_insignificant_reports_failure(self):
        """exit_insignificant_commits signals exit code 1."""
        policy = VersionPolicy(exit_insignificant_commits=True)

        with pytest.raises(VersionUnaffectedError) as exc_info:
            calculate_next_version(parse_version("1.0.0"), commits(CHORE), policy)

        assert exc_info.value.exit_code == 1

    def test_release_as_overrides(self):
        """release_as replaces the calculated version."""
        policy = VersionPolicy(release_as="3.0.0")

        assert calculate_next_version(parse_version("1.0.0"), commits(FIX), policy) == (
            parse_version("3.0.0")
        )

    def test_release_as_invalid(self):
        """An unparsable release_as raises VersionError."""
        with pytest.raises(VersionError, match="Could not parse"):
            calculate_next_version(
                parse_version("1.0.0"), commits(FIX), VersionPolicy(release_as="three")
            )

    def test_release_as_lower_conflicts(self):
        """Releasing below the current version is a conflict."""
        with pytest.raises(VersionConflictError):
            calculate_next_version(
                parse_version("2.0.0"), commits(FIX), VersionPolicy(release_as="1.9.0")
            )
