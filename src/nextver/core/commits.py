"""Conventional commit classification.

Turns raw commit messages into :class:`ClassifiedCommit` records. Every
commit classifies to *something*: a header that matches no pattern keeps
the whole first line as its subject and simply carries no type.

Supported format::

    <type>[(scope)][!]: <subject>

    [body]

    [BREAKING CHANGE: <text>]
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nextver.config.models import CommitParserConfig
    from nextver.vcs.git import Commit

BREAKING_CHANGE = "BREAKING CHANGE"

NOTE_KEYWORDS: tuple[str, ...] = (BREAKING_CHANGE,)

DEFAULT_HEADER_PATTERN = r"^(?P<type>\w*)(?:\((?P<scope>[^)]*)\))?(?P<breaking>!)?: (?P<subject>.*)$"

DEFAULT_ISSUE_PATTERN = r"(?P<token>#(?P<id>\d+))"

DEFAULT_RELEASE_COMMIT_PREFIX = "chore(release):"

_LINE_SEPARATORS = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class CommitNote:
    """A footer note such as ``BREAKING CHANGE: ...``."""

    title: str
    text: str


@dataclass(frozen=True)
class IssueReference:
    """An issue mentioned in the subject, e.g. token ``#42`` with id ``42``."""

    token: str
    id: str


@dataclass(frozen=True)
class ClassifiedCommit:
    """A commit message broken into its conventional parts.

    Attributes:
        sha: Commit SHA
        type: Commit type (``feat``, ``fix``, ...) or empty when untyped
        scope: Optional scope, empty when absent
        subject: Header text after the prefix, or the whole header
        notes: Footer notes in message order
        issues: Issue references found in the subject
    """

    sha: str
    type: str = ""
    scope: str = ""
    subject: str = ""
    notes: tuple[CommitNote, ...] = ()
    issues: tuple[IssueReference, ...] = ()

    @property
    def is_feature(self) -> bool:
        return self.type == "feat"

    @property
    def is_fix(self) -> bool:
        return self.type == "fix"

    @property
    def is_breaking_change(self) -> bool:
        return any(note.title == BREAKING_CHANGE for note in self.notes)

    @property
    def is_conventional(self) -> bool:
        return bool(self.type)


def _group(match: re.Match[str], name: str) -> str | None:
    try:
        return match.group(name)
    except IndexError:
        return None


class CommitParser:
    """Reusable classifier with pre-compiled header and issue patterns.

    Custom patterns are tried before the defaults; the first header pattern
    that matches wins. Issue patterns are all applied, in order.
    """

    def __init__(
        self,
        header_patterns: Sequence[str] = (),
        issue_patterns: Sequence[str] = (),
    ) -> None:
        self._header_patterns = [
            re.compile(p, re.DOTALL) for p in [*header_patterns, DEFAULT_HEADER_PATTERN]
        ]
        self._issue_patterns = [
            re.compile(p, re.DOTALL) for p in [*issue_patterns, DEFAULT_ISSUE_PATTERN]
        ]

    @classmethod
    def from_config(cls, config: CommitParserConfig) -> CommitParser:
        return cls(config.header_patterns, config.issue_patterns)

    def classify(self, sha: str, message: str) -> ClassifiedCommit:
        """Classify a single commit message.

        Args:
            sha: Commit SHA
            message: Full commit message

        Returns:
            Classified commit; never raises for any message
        """
        lines = [line.strip() for line in _LINE_SEPARATORS.split(message)]
        lines = [line for line in lines if line]

        if not lines:
            return ClassifiedCommit(sha=sha)

        header = lines[0]
        notes: list[CommitNote] = []
        issues: list[IssueReference] = []

        match = self._match_header(header)
        if match is not None:
            commit_type = _group(match, "type") or ""
            scope = _group(match, "scope") or ""
            subject = _group(match, "subject") or ""

            if _group(match, "breaking"):
                notes.append(CommitNote(title=BREAKING_CHANGE, text=""))

            for pattern in self._issue_patterns:
                for issue in pattern.finditer(subject):
                    issues.append(
                        IssueReference(
                            token=_group(issue, "token") or issue.group(0),
                            id=_group(issue, "id") or "",
                        )
                    )
        else:
            commit_type, scope, subject = "", "", header

        for line in lines[1:]:
            for keyword in NOTE_KEYWORDS:
                marker = f"{keyword}:"
                if line.startswith(marker):
                    notes.append(CommitNote(title=keyword, text=line[len(marker) :].strip()))

        return ClassifiedCommit(
            sha=sha,
            type=commit_type,
            scope=scope,
            subject=subject,
            notes=tuple(notes),
            issues=tuple(issues),
        )

    def parse(self, commit: Commit) -> ClassifiedCommit:
        return self.classify(commit.sha, commit.message)

    def parse_all(self, commits: Iterable[Commit]) -> list[ClassifiedCommit]:
        return [self.parse(commit) for commit in commits]

    def _match_header(self, header: str) -> re.Match[str] | None:
        for pattern in self._header_patterns:
            match = pattern.search(header)
            if match:
                return match
        return None


def classify_commit(
    sha: str,
    message: str,
    header_patterns: Sequence[str] = (),
    issue_patterns: Sequence[str] = (),
) -> ClassifiedCommit:
    """Classify a commit message (one-shot form of :class:`CommitParser`)."""
    return CommitParser(header_patterns, issue_patterns).classify(sha, message)


def parse_commits(
    commits: Iterable[Commit],
    config: CommitParserConfig | None = None,
) -> list[ClassifiedCommit]:
    """Classify a sequence of raw commits, preserving order."""
    parser = CommitParser.from_config(config) if config is not None else CommitParser()
    return parser.parse_all(commits)


def is_release_commit(message: str, prefix: str = DEFAULT_RELEASE_COMMIT_PREFIX) -> bool:
    """Whether ``message`` is a release commit created by a previous run."""
    return message.startswith(prefix)
