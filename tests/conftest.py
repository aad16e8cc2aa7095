"""Shared fixtures for nextver tests."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Iterable, Iterator
from pathlib import Path

import pytest

from nextver.vcs.git import Commit, Tag


class FakeRepository:
    """In-memory commit graph implementing the repository view.

    Commits are ordered by creation; the newest reachable commit comes
    first, matching ``git log --date-order`` for a graph built in time order.
    """

    def __init__(self) -> None:
        self._commits: dict[str, Commit] = {}
        self._order: dict[str, int] = {}
        self._paths: dict[str, tuple[str, ...]] = {}
        self._tags: list[Tag] = []
        self.head: str | None = None

    def commit(
        self,
        message: str,
        paths: Iterable[str] = ("README.md",),
        parents: Iterable[str] | None = None,
    ) -> str:
        """Add a commit on top of HEAD (or on ``parents``) and move HEAD to it."""
        index = len(self._commits)
        sha = f"{index + 1:040x}"
        if parents is None:
            parents = (self.head,) if self.head else ()
        self._commits[sha] = Commit(sha=sha, message=message, parents=tuple(parents))
        self._order[sha] = index
        self._paths[sha] = tuple(paths)
        self.head = sha
        return sha

    def tag(self, name: str, sha: str | None = None) -> None:
        self._tags.append(Tag(name=name, target=sha or self.head))

    def list_tags(self) -> list[Tag]:
        return list(self._tags)

    def iter_commits(
        self,
        *,
        exclude: Iterable[str] = (),
        path: str | None = None,
        first_parent: bool = False,
    ) -> Iterator[Commit]:
        if self.head is None:
            return
        excluded: set[str] = set()
        for ref in exclude:
            excluded |= self._reachable(ref, first_parent=False)

        reachable = self._reachable(self.head, first_parent=first_parent) - excluded
        for sha in sorted(reachable, key=self._order.__getitem__, reverse=True):
            if path and not any(p.startswith(path) for p in self._paths[sha]):
                continue
            yield self._commits[sha]

    def _reachable(self, start: str, *, first_parent: bool) -> set[str]:
        seen: set[str] = set()
        stack = [start]
        while stack:
            sha = stack.pop()
            if sha in seen:
                continue
            seen.add(sha)
            parents = self._commits[sha].parents
            stack.extend(parents[:1] if first_parent else parents)
        return seen


@pytest.fixture
def fake_repo() -> FakeRepository:
    """Empty in-memory repository."""
    return FakeRepository()


@pytest.fixture
def feat_commit() -> Commit:
    return Commit(sha="feat123", message="feat: add user authentication")


@pytest.fixture
def fix_commit() -> Commit:
    return Commit(sha="fix456", message="fix(core): handle empty config")


@pytest.fixture
def breaking_commit() -> Commit:
    return Commit(
        sha="break789",
        message="refactor(api): rework client\n\nBREAKING CHANGE: Client.connect() was removed",
    )


@pytest.fixture
def sample_commits(feat_commit: Commit, fix_commit: Commit, breaking_commit: Commit) -> list[Commit]:
    return [
        feat_commit,
        fix_commit,
        Commit(sha="docs000", message="docs: update README"),
        Commit(sha="chore00", message="chore: bump dependencies"),
        breaking_commit,
    ]


# =============================================================================
# Real git repositories
# =============================================================================


def git(path: Path, *args: str) -> str:
    """Run a git command in ``path`` and return its stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def git_commit(path: Path, message: str, filename: str = "file.txt") -> str:
    """Append to ``filename``, commit it and return the new SHA."""
    target = path / filename
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("a") as f:
        f.write(f"{message}\n")
    git(path, "add", filename)
    git(path, "commit", "-q", "-m", message)
    return git(path, "rev-parse", "HEAD")


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Path:
    """An empty git repository with committer identity configured."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q", "-b", "main")
    git(repo, "config", "user.name", "Test User")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "commit.gpgsign", "false")
    git(repo, "config", "tag.gpgsign", "false")
    return repo


@pytest.fixture
def temp_git_repo_with_pyproject(temp_git_repo: Path) -> Path:
    """Git repository with a pyproject.toml carrying nextver configuration."""
    (temp_git_repo / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.nextver.version]
initial_version = "0.1.0"
"""
    )
    git(temp_git_repo, "add", "pyproject.toml")
    git(temp_git_repo, "commit", "-q", "-m", "chore: initial commit")
    return temp_git_repo
