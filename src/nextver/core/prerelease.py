"""Prerelease label handling.

nextver encodes every prerelease as exactly ``<label>.<number>``
(e.g. ``1.2.0-beta.3``). Versions that do not follow this shape cannot
be continued and are rejected rather than guessed at.
"""

from __future__ import annotations

from dataclasses import dataclass

from nextver.core.version import SemanticVersion
from nextver.exceptions import InvalidPrereleaseIdentifierError


@dataclass(frozen=True)
class PrereleaseIdentifier:
    """Label and counter of a prerelease version.

    Attributes:
        label: Prerelease label, e.g. ``alpha``
        number: Monotonic counter within the label, starting at 0
    """

    label: str
    number: int

    @classmethod
    def parse(cls, version: SemanticVersion) -> PrereleaseIdentifier:
        """Extract the prerelease identifier of a version.

        Args:
            version: A prerelease version

        Returns:
            The label and number of the version

        Raises:
            InvalidPrereleaseIdentifierError: If the version does not carry
                at least ``<label>.<number>`` prerelease identifiers
        """
        labels = version.prerelease
        if len(labels) < 2 or not labels[1].isdigit():
            raise InvalidPrereleaseIdentifierError(
                f"Could not parse prerelease labels of version {version}. "
                "Expected format: <label>.<number>"
            )
        return cls(label=labels[0], number=int(labels[1]))

    def apply_label(self, label: str) -> PrereleaseIdentifier:
        """Continue the sequence under ``label``.

        The number increments when the label is unchanged and resets to 0
        when it differs.
        """
        if label == self.label:
            return PrereleaseIdentifier(label, self.number + 1)
        return PrereleaseIdentifier(label, 0)

    def build_labels(self) -> tuple[str, str]:
        return (self.label, str(self.number))


def increment_prerelease(version: SemanticVersion, label: str) -> SemanticVersion:
    """Advance the prerelease of ``version`` under ``label``.

    Raises:
        InvalidPrereleaseIdentifierError: If ``version`` is not a
            well-formed prerelease
    """
    identifier = PrereleaseIdentifier.parse(version).apply_label(label)
    return SemanticVersion(
        version.major,
        version.minor,
        version.patch,
        identifier.build_labels(),
    )


def increment_patch_version(version: SemanticVersion) -> SemanticVersion:
    """Smallest forward step: next prerelease number, or next patch release."""
    if version.is_prerelease:
        identifier = PrereleaseIdentifier.parse(version)
        return increment_prerelease(version, identifier.label)
    return SemanticVersion(version.major, version.minor, version.patch + 1)
