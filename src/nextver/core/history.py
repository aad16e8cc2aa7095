"""Release history resolution.

Decides which commits belong to the next release of a project: everything
reachable from HEAD that is not reachable from the last release. The last
release (the *baseline*) is found either from the project's tags or, for
workflows that do not tag every release, from the newest release commit.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nextver.core.commits import DEFAULT_RELEASE_COMMIT_PREFIX, is_release_commit
from nextver.core.version import SemanticVersion

if TYPE_CHECKING:
    from collections.abc import Iterator

    from nextver.config.models import HistoryConfig, ProjectConfig
    from nextver.vcs.git import Commit, RepositoryView, Tag

logger = logging.getLogger(__name__)

# A semantic version embedded in free text, e.g. "chore(release): 1.2.0"
_EMBEDDED_VERSION = re.compile(
    r"(?:^|[^\d.])(?P<version>\d+\.\d+\.\d+(?:-[0-9A-Za-z\-.]+)?(?:\+[0-9A-Za-z\-.]+)?)"
)


@dataclass(frozen=True)
class HistoryOptions:
    """How the commit range of a release is determined.

    Attributes:
        aggregate_prereleases: Diff against the last stable release, so that
            consecutive prereleases are released together
        first_parent_only: Ignore commits merged in from side branches
        find_release_commit_via_message: Use the newest release commit as
            baseline instead of tags
        release_commit_prefix: Message prefix identifying release commits
    """

    aggregate_prereleases: bool = False
    first_parent_only: bool = False
    find_release_commit_via_message: bool = False
    release_commit_prefix: str = DEFAULT_RELEASE_COMMIT_PREFIX

    @classmethod
    def from_config(cls, config: HistoryConfig) -> HistoryOptions:
        return cls(
            aggregate_prereleases=config.aggregate_prereleases,
            first_parent_only=config.first_parent_only,
            find_release_commit_via_message=config.find_release_commit_via_message,
            release_commit_prefix=config.release_commit_prefix,
        )


@dataclass(frozen=True)
class ReleaseBaseline:
    """The release a computation diffs against.

    Attributes:
        version: Version of the release, ``None`` if it cannot be determined
            (a release commit without a version in its header)
        ref: Commit SHA of the release
        tag: Tag name, when the baseline came from a tag
    """

    version: SemanticVersion | None
    ref: str
    tag: str | None = None


@dataclass(frozen=True)
class ReleaseHistory:
    """Commits of the next release and the baseline they were diffed against.

    Attributes:
        baseline: Release the commit range starts after, ``None`` if the
            range covers the full history
        commits: Commits of the next release, newest first
        latest_version: Highest released version, prereleases included.
            Differs from the baseline version when prereleases are
            aggregated into the next stable release.
    """

    baseline: ReleaseBaseline | None
    commits: list[Commit] = field(default_factory=list)
    latest_version: SemanticVersion | None = None

    @property
    def is_first_release(self) -> bool:
        return self.baseline is None

    @property
    def baseline_version(self) -> SemanticVersion | None:
        return self.baseline.version if self.baseline else None


def extract_version(text: str) -> SemanticVersion | None:
    """Find the first semantic version embedded in ``text``."""
    for match in _EMBEDDED_VERSION.finditer(text):
        version = SemanticVersion.try_parse(match.group("version"))
        if version is not None:
            return version
    return None


class ReleaseHistoryResolver:
    """Resolves the release history of one project in a repository.

    Args:
        repo: Read-only repository view
        project: Project scope (path filter and tag template)
        options: Range selection options
    """

    def __init__(
        self,
        repo: RepositoryView,
        project: ProjectConfig,
        options: HistoryOptions | None = None,
    ) -> None:
        self.repo = repo
        self.project = project
        self.options = options or HistoryOptions()

    def version_tags(self) -> list[tuple[SemanticVersion, Tag]]:
        """All tags of this project with their versions, highest version first.

        Tags of other projects and tags whose version part does not parse
        are skipped.
        """
        tags = []
        for tag in self.repo.list_tags():
            version = self.project.extract_tag_version(tag.name)
            if version is None:
                logger.debug("Skipping tag %s: not a version tag of this project", tag.name)
                continue
            tags.append((version, tag))

        tags.sort(key=lambda item: item[0], reverse=True)
        return tags

    def candidate_tags(self) -> list[tuple[SemanticVersion, Tag]]:
        """Tags eligible as baseline, highest version first.

        With ``aggregate_prereleases`` only stable versions are kept.
        """
        if not self.options.aggregate_prereleases:
            return self.version_tags()
        return [
            (version, tag) for version, tag in self.version_tags() if not version.is_prerelease
        ]

    def latest_version(self, baseline: ReleaseBaseline | None) -> SemanticVersion | None:
        """Highest released version, prereleases included."""
        if self.options.find_release_commit_via_message:
            return baseline.version if baseline else None
        tags = self.version_tags()
        return tags[0][0] if tags else None

    def select_baseline(self) -> ReleaseBaseline | None:
        """The last release, or ``None`` if the project was never released."""
        if self.options.find_release_commit_via_message:
            return self._release_commit_baseline()

        candidates = self.candidate_tags()
        if not candidates:
            return None
        version, tag = candidates[0]
        return ReleaseBaseline(version=version, ref=tag.target, tag=tag.name)

    def resolve(self) -> ReleaseHistory:
        """Baseline and the commits since it, newest first."""
        baseline = self.select_baseline()
        if baseline is None:
            logger.debug("No previous release found, using the full history")
            commits = list(self._commits())
        else:
            logger.debug("Resolving commits since %s", baseline.tag or baseline.ref)
            commits = list(self._commits(exclude=(baseline.ref,)))
        return ReleaseHistory(
            baseline=baseline,
            commits=commits,
            latest_version=self.latest_version(baseline),
        )

    def _commits(self, exclude: tuple[str, ...] = ()) -> Iterator[Commit]:
        return self.repo.iter_commits(
            exclude=exclude,
            path=self.project.path or None,
            first_parent=self.options.first_parent_only,
        )

    def _release_commit_baseline(self) -> ReleaseBaseline | None:
        prefix = self.options.release_commit_prefix
        for commit in self._commits():
            if is_release_commit(commit.message, prefix):
                header = commit.message.splitlines()[0] if commit.message else ""
                return ReleaseBaseline(version=extract_version(header), ref=commit.sha)
        return None


def resolve_history(
    repo: RepositoryView,
    project: ProjectConfig,
    options: HistoryOptions | None = None,
) -> ReleaseHistory:
    """Resolve the commits of the next release of ``project``."""
    return ReleaseHistoryResolver(repo, project, options).resolve()


def find_version_tag(
    repo: RepositoryView,
    project: ProjectConfig,
    version: SemanticVersion,
) -> Tag | None:
    """The tag this project uses for exactly ``version``, if it exists."""
    name = project.tag_name(version)
    return next((tag for tag in repo.list_tags() if tag.name == name), None)


def version_tag_exists(
    repo: RepositoryView,
    project: ProjectConfig,
    version: SemanticVersion,
) -> bool:
    return find_version_tag(repo, project, version) is not None
