"""nextver command-line entry point."""

from __future__ import annotations

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from nextver import __version__
from nextver.cli.commands.commits import run_commits
from nextver.cli.commands.next import NextOptions, run_next

app = typer.Typer(
    name="nextver",
    help="Compute the next release version from Conventional Commits.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

PathArgument = Annotated[
    str | None,
    typer.Argument(help="Project directory (default: current directory)"),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")]


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"nextver {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Compute the next release version from Conventional Commits."""


@app.command("next")
def next_command(
    path: PathArgument = None,
    prerelease: Annotated[
        str | None, typer.Option("--prerelease", "-p", help="Prerelease label, e.g. alpha")
    ] = None,
    aggregate_prereleases: Annotated[
        bool,
        typer.Option(help="Diff against the last stable release instead of the last prerelease"),
    ] = False,
    first_parent_only: Annotated[
        bool, typer.Option(help="Ignore commits merged in from side branches")
    ] = False,
    release_commit_via_message: Annotated[
        bool, typer.Option(help="Find the last release from release commit messages")
    ] = False,
    ignore_insignificant_commits: Annotated[
        bool, typer.Option(help="Do not bump for commits that are neither feat nor fix")
    ] = False,
    exit_insignificant_commits: Annotated[
        bool, typer.Option(help="Like --ignore-insignificant-commits, but exit with 1")
    ] = False,
    release_as: Annotated[
        str | None, typer.Option("--release-as", help="Release as this exact version")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the plan as JSON")] = False,
    verbose: VerboseOption = False,
) -> None:
    """Print the next release version."""
    _setup_logging(verbose)
    run_next(
        path,
        NextOptions(
            prerelease=prerelease,
            aggregate_prereleases=aggregate_prereleases,
            first_parent_only=first_parent_only,
            find_release_commit_via_message=release_commit_via_message,
            ignore_insignificant_commits=ignore_insignificant_commits,
            exit_insignificant_commits=exit_insignificant_commits,
            release_as=release_as,
            as_json=as_json,
        ),
        console,
        err_console,
    )


@app.command("commits")
def commits_command(
    path: PathArgument = None,
    aggregate_prereleases: Annotated[
        bool,
        typer.Option(help="Diff against the last stable release instead of the last prerelease"),
    ] = False,
    first_parent_only: Annotated[
        bool, typer.Option(help="Ignore commits merged in from side branches")
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """List the classified commits of the next release."""
    _setup_logging(verbose)
    run_commits(path, aggregate_prereleases, first_parent_only, console, err_console)


if __name__ == "__main__":
    app()
