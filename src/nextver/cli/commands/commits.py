"""Implementation of the 'commits' command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

from nextver.cli.commands.next import load_project
from nextver.core.commits import CommitParser
from nextver.core.history import HistoryOptions, resolve_history
from nextver.core.increment import commit_impact
from nextver.exceptions import GitError

if TYPE_CHECKING:
    from rich.console import Console

    from nextver.core.commits import ClassifiedCommit
    from nextver.core.version import VersionImpact


def commit_row(commit: ClassifiedCommit, impact: VersionImpact) -> tuple[str, ...]:
    """Table cells for one commit; untyped commits show ``-`` as type."""
    subject = escape(commit.subject)
    if commit.is_breaking_change:
        subject = f"[red]![/] {subject}"
    return (
        commit.sha[:7],
        commit.type if commit.is_conventional else "-",
        escape(commit.scope),
        subject,
        str(impact),
    )


def run_commits(
    path: str | None,
    aggregate_prereleases: bool,
    first_parent_only: bool,
    console: Console,
    err_console: Console,
) -> None:
    """List the classified commits since the last release.

    Args:
        path: Optional path to project directory
        aggregate_prereleases: Diff against the last stable release
        first_parent_only: Follow only first parents
        console: Console for standard output
        err_console: Console for error output
    """
    config, repo = load_project(path, err_console)

    options = HistoryOptions.from_config(config.history)
    options = HistoryOptions(
        aggregate_prereleases=aggregate_prereleases or options.aggregate_prereleases,
        first_parent_only=first_parent_only or options.first_parent_only,
        find_release_commit_via_message=options.find_release_commit_via_message,
        release_commit_prefix=options.release_commit_prefix,
    )

    try:
        history = resolve_history(repo, config.project, options)
    except GitError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if not history.commits:
        console.print("[yellow]No commits found since last release.[/]")
        return

    if history.baseline is None:
        since = "the beginning"
    else:
        since = history.baseline.tag or history.baseline.ref[:7]
    table = Table(title=f"Commits since {since}")
    table.add_column("SHA", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Scope")
    table.add_column("Subject")
    table.add_column("Impact", style="green")

    parser = CommitParser.from_config(config.commits)
    insignificant = not (
        config.version.ignore_insignificant_commits or config.version.exit_insignificant_commits
    )
    for commit in parser.parse_all(history.commits):
        table.add_row(*commit_row(commit, commit_impact(commit, insignificant)))

    console.print(table)
