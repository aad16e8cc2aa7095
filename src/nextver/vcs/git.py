"""Read-only git repository access.

Wraps the ``git`` command line via subprocess. nextver never writes to
the repository; only tags and the commit graph are queried.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from nextver.exceptions import GitError, NotARepositoryError

logger = logging.getLogger(__name__)

# Field and record separators in git output, and how formats spell them
_FIELD_SEP = "\x00"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = "%H%x00%P%x00%B%x1e"
_TAG_FORMAT = "%(refname:short)%00%(objectname)%00%(*objectname)"


@dataclass(frozen=True)
class Commit:
    """A raw commit as read from the repository.

    Attributes:
        sha: Full commit SHA
        message: Full commit message (header and body)
        parents: Parent SHAs, first parent first
    """

    sha: str
    message: str
    parents: tuple[str, ...] = ()


@dataclass(frozen=True)
class Tag:
    """A tag and the commit it points to (annotated tags are peeled)."""

    name: str
    target: str


@runtime_checkable
class RepositoryView(Protocol):
    """Read-only queries release history resolution needs."""

    def list_tags(self) -> list[Tag]: ...

    def iter_commits(
        self,
        *,
        exclude: Iterable[str] = (),
        path: str | None = None,
        first_parent: bool = False,
    ) -> Iterator[Commit]: ...


class GitRepository:
    """A git working tree accessed through the ``git`` executable.

    Args:
        path: Any directory inside the working tree

    Raises:
        NotARepositoryError: If ``path`` is not inside a git working tree
    """

    def __init__(self, path: Path | str | None = None) -> None:
        start = Path(path) if path is not None else Path.cwd()
        if not start.is_dir():
            raise NotARepositoryError(f"Not a directory: {start}")
        try:
            toplevel = self._git(start, "rev-parse", "--show-toplevel")
        except GitError as e:
            raise NotARepositoryError(f"Not a git repository: {start}", stderr=e.stderr) from e
        self.path = Path(toplevel.strip())

    def head(self) -> str | None:
        """SHA of HEAD, or ``None`` for a repository without commits."""
        try:
            return self._run("rev-parse", "--verify", "--quiet", "HEAD").strip() or None
        except GitError:
            return None

    def list_tags(self) -> list[Tag]:
        """All tags with the commit they point to."""
        output = self._run(
            "for-each-ref",
            f"--format={_TAG_FORMAT}",
            "refs/tags",
        )
        tags = []
        for line in output.splitlines():
            if not line:
                continue
            name, objectname, peeled = line.split(_FIELD_SEP)
            tags.append(Tag(name=name, target=peeled or objectname))
        return tags

    def iter_commits(
        self,
        *,
        exclude: Iterable[str] = (),
        path: str | None = None,
        first_parent: bool = False,
    ) -> Iterator[Commit]:
        """Commits reachable from HEAD, newest first.

        Args:
            exclude: Refs whose reachable commits are left out
            path: Only commits touching this path (relative to the root)
            first_parent: Follow only the first parent of merge commits

        Yields:
            Commits in reverse chronological, topologically consistent order
        """
        if self.head() is None:
            return

        args = [
            "log",
            "--date-order",
            f"--format={_LOG_FORMAT}",
        ]
        if first_parent:
            args.append("--first-parent")
        args.append("HEAD")
        args.extend(f"^{ref}" for ref in exclude)
        args.append("--")
        if path:
            args.append(path)

        output = self._run(*args)
        for record in output.split(_RECORD_SEP):
            record = record.lstrip("\n")
            if not record:
                continue
            sha, parents, message = record.split(_FIELD_SEP, 2)
            yield Commit(sha=sha, message=message.rstrip("\n"), parents=tuple(parents.split()))

    def _run(self, *args: str) -> str:
        return self._git(self.path, *args)

    @staticmethod
    def _git(cwd: Path, *args: str) -> str:
        logger.debug("git %s", " ".join(args))
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=True,
                cwd=cwd,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {args[0]} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        return result.stdout
