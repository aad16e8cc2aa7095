"""Implementation of the 'next' command.

The next command computes the version of the next release. It only reads
the repository; nothing is written.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError
from rich.panel import Panel

from nextver.config import HistoryConfig, VersionConfig, load_config
from nextver.core.release import plan_release
from nextver.exceptions import ConfigError, GitError, VersionError, VersionUnaffectedError
from nextver.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from nextver.config.models import NextverConfig
    from nextver.core.release import ReleasePlan


@dataclass(frozen=True)
class NextOptions:
    """Command line overrides for the 'next' command."""

    prerelease: str | None = None
    aggregate_prereleases: bool = False
    first_parent_only: bool = False
    find_release_commit_via_message: bool = False
    ignore_insignificant_commits: bool = False
    exit_insignificant_commits: bool = False
    release_as: str | None = None
    as_json: bool = False


def apply_overrides(config: NextverConfig, options: NextOptions) -> NextverConfig:
    """Merge command line flags into the loaded configuration.

    Flags only switch settings on; they never disable what the
    configuration enables.
    """
    version = VersionConfig.model_validate(
        config.version.model_dump()
        | {
            "pre_release": options.prerelease or config.version.pre_release,
            "ignore_insignificant_commits": (
                options.ignore_insignificant_commits or config.version.ignore_insignificant_commits
            ),
            "exit_insignificant_commits": (
                options.exit_insignificant_commits or config.version.exit_insignificant_commits
            ),
        }
    )
    history = HistoryConfig.model_validate(
        config.history.model_dump()
        | {
            "aggregate_prereleases": (
                options.aggregate_prereleases or config.history.aggregate_prereleases
            ),
            "first_parent_only": options.first_parent_only or config.history.first_parent_only,
            "find_release_commit_via_message": (
                options.find_release_commit_via_message
                or config.history.find_release_commit_via_message
            ),
        }
    )
    return config.model_copy(update={"version": version, "history": history})


def load_project(path: str | None, err_console: Console) -> tuple[NextverConfig, GitRepository]:
    """Load configuration and open the repository, exiting on failure."""
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    try:
        repo = GitRepository(project_path)
    except GitError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    return config, repo


def plan_to_dict(plan: ReleasePlan) -> dict[str, object]:
    return {
        "previous_version": str(plan.previous_version) if plan.previous_version else None,
        "next_version": str(plan.next_version),
        "tag": plan.tag_name,
        "impact": str(plan.impact),
        "is_first_release": plan.is_first_release,
        "commits": [
            {
                "sha": c.sha,
                "type": c.type,
                "scope": c.scope,
                "subject": c.subject,
                "breaking": c.is_breaking_change,
                "issues": [issue.id for issue in c.issues],
            }
            for c in plan.commits
        ],
    }


def run_next(
    path: str | None,
    options: NextOptions,
    console: Console,
    err_console: Console,
) -> None:
    """Run the next command.

    Args:
        path: Optional path to project directory
        options: Command line overrides
        console: Console for standard output
        err_console: Console for error output
    """
    config, repo = load_project(path, err_console)
    try:
        config = apply_overrides(config, options)
    except ValidationError as e:
        err_console.print(f"[red]Invalid option:[/] {e}")
        raise SystemExit(1) from e

    try:
        plan = plan_release(repo, config, release_as=options.release_as)
    except VersionUnaffectedError as e:
        err_console.print(f"[yellow]{e}[/]")
        raise SystemExit(e.exit_code) from e
    except (VersionError, GitError) as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if options.as_json:
        console.print_json(json.dumps(plan_to_dict(plan)))
        return

    if plan.is_first_release:
        console.print(
            Panel(
                f"First release: [green]{plan.next_version}[/] "
                f"({len(plan.commits)} commit(s))",
                title="[green]nextver[/]",
                border_style="green",
            )
        )
    else:
        console.print(
            Panel(
                f"[cyan]{plan.previous_version}[/] -> [green]{plan.next_version}[/]\n"
                f"Impact: [bold]{plan.impact!s}[/], {len(plan.commits)} commit(s)\n"
                f"Tag: [cyan]{plan.tag_name}[/]",
                title="[green]nextver[/]",
                border_style="green",
            )
        )
