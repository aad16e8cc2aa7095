"""Configuration models.

All settings live under ``[tool.nextver]`` in pyproject.toml and are
validated with pydantic. Every field has a default, so an absent section
yields a working single-project configuration.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nextver.core.commits import DEFAULT_RELEASE_COMMIT_PREFIX
from nextver.core.version import SemanticVersion

_NAME_PLACEHOLDER = re.compile(re.escape("{name}"), re.IGNORECASE)
_VERSION_PLACEHOLDER = re.compile(re.escape("{version}"), re.IGNORECASE)


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


def _validate_patterns(patterns: list[str]) -> list[str]:
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValueError(f"Invalid regular expression {pattern!r}: {e}") from e
    return patterns


class CommitParserConfig(_StrictModel):
    """How commit messages are classified.

    Custom patterns are tried before the built-in Conventional Commits
    patterns, in the order given.
    """

    header_patterns: list[str] = Field(
        default_factory=list,
        description="Regexes with named groups type, scope, subject and optionally breaking",
    )
    issue_patterns: list[str] = Field(
        default_factory=list,
        description="Regexes with named groups token and id",
    )

    @field_validator("header_patterns", "issue_patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        return _validate_patterns(value)


class ProjectConfig(_StrictModel):
    """A versioned project, possibly one of several in a monorepo.

    Attributes:
        name: Project name, substituted for ``{name}`` in the tag template
        path: Subtree of the repository owned by the project (empty = all)
        tag_template: Tag naming template with ``{name}``/``{version}``
        omit_v_prefix: Drop the conventional ``v`` from the default template
    """

    name: str = ""
    path: str = ""
    tag_template: str | None = None
    omit_v_prefix: bool = False

    @field_validator("tag_template")
    @classmethod
    def _check_template(cls, value: str | None) -> str | None:
        if value is not None and not _VERSION_PLACEHOLDER.search(value):
            raise ValueError("tag_template must contain a {version} placeholder")
        return value

    @property
    def effective_tag_template(self) -> str:
        """Tag template in effect, falling back to the conventional defaults."""
        if self.tag_template is not None:
            return self.tag_template
        version = "{version}" if self.omit_v_prefix else "v{version}"
        return f"{{name}}/{version}" if self.name else version

    @property
    def tag_prefix(self) -> str:
        """Tag name with the version placeholder removed."""
        return self._render("")

    def tag_name(self, version: SemanticVersion | str) -> str:
        """Tag name this project uses for ``version``."""
        return self._render(str(version))

    def extract_tag_version(self, tag_name: str) -> SemanticVersion | None:
        """Map a tag name back to a version.

        Returns:
            The version, or ``None`` if the tag belongs to another project
            or its suffix is not a valid semantic version
        """
        prefix = self.tag_prefix
        if not tag_name.startswith(prefix):
            return None
        return SemanticVersion.try_parse(tag_name[len(prefix) :])

    def _render(self, version: str) -> str:
        template = _NAME_PLACEHOLDER.sub(lambda _: self.name, self.effective_tag_template)
        return _VERSION_PLACEHOLDER.sub(lambda _: version, template)


class VersionConfig(_StrictModel):
    """Version calculation policy."""

    initial_version: str = "1.0.0"
    pre_release: str | None = None
    ignore_insignificant_commits: bool = False
    exit_insignificant_commits: bool = False

    @field_validator("initial_version")
    @classmethod
    def _check_initial_version(cls, value: str) -> str:
        if SemanticVersion.try_parse(value) is None:
            raise ValueError(f"initial_version is not a semantic version: {value!r}")
        return value

    @field_validator("pre_release")
    @classmethod
    def _check_pre_release(cls, value: str | None) -> str | None:
        if value is not None and not re.fullmatch(r"[0-9A-Za-z-]+", value):
            raise ValueError(f"pre_release must be a single identifier: {value!r}")
        return value


class HistoryConfig(_StrictModel):
    """Which commits belong to the next release."""

    aggregate_prereleases: bool = False
    first_parent_only: bool = False
    find_release_commit_via_message: bool = False
    release_commit_prefix: str = DEFAULT_RELEASE_COMMIT_PREFIX


class NextverConfig(_StrictModel):
    """Root configuration (``[tool.nextver]``)."""

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    commits: CommitParserConfig = Field(default_factory=CommitParserConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
