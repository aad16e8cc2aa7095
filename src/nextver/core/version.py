"""Semantic version parsing and arithmetic.

A thin, immutable layer over :class:`semver.Version`, which implements the
SemVer 2.0.0 grammar and precedence rules. Prerelease identifiers are
exposed as a tuple so the prerelease sequencing code can work on them
directly. Build metadata is carried along for display but never
participates in ordering or equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from functools import total_ordering

import semver

from nextver.exceptions import VersionParseError


class VersionImpact(IntEnum):
    """How far a set of commits moves the version, ordered by precedence."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    def __str__(self) -> str:
        return self.name.lower()


@total_ordering
@dataclass(frozen=True, eq=False)
class SemanticVersion:
    """An immutable semantic version.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        prerelease: Dot-separated prerelease identifiers, empty for a release
        build: Build metadata, ignored by comparisons
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str | None = None
    _version: semver.Version = field(init=False, repr=False)

    def __post_init__(self) -> None:
        # Accept any iterable of identifiers, store as tuple
        prerelease = tuple(str(p) for p in self.prerelease)
        object.__setattr__(self, "prerelease", prerelease)
        try:
            version = semver.Version(
                self.major,
                self.minor,
                self.patch,
                prerelease=".".join(prerelease) or None,
                build=self.build,
            )
        except ValueError as e:
            raise VersionParseError(
                f"Invalid version {self.major}.{self.minor}.{self.patch}: {e}"
            ) from e
        object.__setattr__(self, "_version", version)

    @classmethod
    def from_semver(cls, version: semver.Version) -> SemanticVersion:
        prerelease = version.prerelease
        return cls(
            major=version.major,
            minor=version.minor,
            patch=version.patch,
            prerelease=tuple(prerelease.split(".")) if prerelease else (),
            build=version.build,
        )

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        """Parse a version string.

        Args:
            text: Version string such as ``1.2.3-alpha.1+build.5``

        Returns:
            Parsed version

        Raises:
            VersionParseError: If the string is not a valid semantic version
        """
        try:
            version = semver.Version.parse(text.strip())
        except ValueError as e:
            raise VersionParseError(f"Invalid semantic version: {text!r}") from e
        return cls.from_semver(version)

    @classmethod
    def try_parse(cls, text: str) -> SemanticVersion | None:
        """Parse a version string, returning ``None`` when it is invalid."""
        try:
            return cls.parse(text)
        except VersionParseError:
            return None

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def as_release(self) -> SemanticVersion:
        """Return this version with prerelease and build metadata stripped."""
        return SemanticVersion.from_semver(self._version.finalize_version())

    def as_prerelease(self, label: str, number: int) -> SemanticVersion:
        """Return ``major.minor.patch-label.number``."""
        return SemanticVersion(self.major, self.minor, self.patch, (label, str(number)))

    def bump(self, impact: VersionImpact) -> SemanticVersion:
        """Apply release-only arithmetic for the given impact.

        The result never carries prerelease identifiers or build metadata.
        """
        if impact == VersionImpact.MAJOR:
            return SemanticVersion.from_semver(self._version.bump_major())
        if impact == VersionImpact.MINOR:
            return SemanticVersion.from_semver(self._version.bump_minor())
        if impact == VersionImpact.PATCH:
            return SemanticVersion.from_semver(self._version.bump_patch())
        return self.as_release()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._version.compare(other._version) == 0

    def __lt__(self, other: SemanticVersion) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._version.compare(other._version) < 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.prerelease))

    def __str__(self) -> str:
        return str(self._version)


def parse_version(text: str) -> SemanticVersion:
    """Parse a version string (shortcut for :meth:`SemanticVersion.parse`)."""
    return SemanticVersion.parse(text)
