"""Exception hierarchy for nextver.

All errors raised by nextver derive from :class:`NextverError`, so callers
can catch a single base class. Subclasses group errors by the layer that
raises them: configuration, version arithmetic and git access.
"""

from __future__ import annotations


class NextverError(Exception):
    """Base class for all nextver errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(NextverError):
    """Configuration could not be loaded or is invalid."""


class ConfigNotFoundError(ConfigError):
    """No configuration file (pyproject.toml) was found."""


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""


# =============================================================================
# Versions
# =============================================================================


class VersionError(NextverError):
    """Version arithmetic failed."""


class VersionParseError(VersionError):
    """A string is not a valid semantic version."""


class InvalidPrereleaseIdentifierError(VersionError):
    """A prerelease version does not follow the ``<label>.<number>`` shape."""


class VersionConflictError(VersionError):
    """The computed version is lower than the current version."""


class VersionUnaffectedError(VersionError):
    """No commit in the release range changes the version.

    Attributes:
        exit_code: Process exit code the CLI should terminate with
    """

    def __init__(self, message: str, exit_code: int = 0) -> None:
        super().__init__(message)
        self.exit_code = exit_code


# =============================================================================
# Git
# =============================================================================


class GitError(NextverError):
    """A git command failed.

    Attributes:
        stderr: Captured standard error of the failed command, if any
    """

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr:
            return f"{base}: {self.stderr.strip()}"
        return base


class NotARepositoryError(GitError):
    """The path is not inside a git working tree."""
