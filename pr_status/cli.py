"""Typer CLI for listing pull request review states."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

import typer

from pr_status.errors import ReviewListError
from pr_status.github_client import (
    GitHubAuthError,
    GitHubInputError,
    build_github_client,
    parse_repo_full_name,
    validate_pr_number,
)
from pr_status.listing import list_reviews
from pr_status.local_commits import LocalChangeRecord, read_local_commits
from pr_status.output import TerminalSink

DEFAULT_BASE_REF = "origin/main"
REPO_ENV_VAR = "PR_STATUS_REPO"
BASE_REF_ENV_VAR = "PR_STATUS_BASE"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = typer.Typer(help="Show the review state of pull requests for local commits.")


@app.callback()
def main() -> None:
    """Pull request review status tools."""


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


async def _run_list(
    *,
    owner: str,
    repo: str,
    records: list[LocalChangeRecord],
    fail_fast: bool,
    timeout_seconds: int,
    trust_env: bool,
) -> int:
    async with build_github_client(timeout_seconds=timeout_seconds, trust_env=trust_env) as client:
        return await list_reviews(
            client=client,
            owner=owner,
            repo=repo,
            records=records,
            sink=TerminalSink(),
            fail_fast=fail_fast,
        )


@app.command("list")
def list_command(
    repo: Annotated[
        str,
        typer.Option(envvar=REPO_ENV_VAR, help="Repository in owner/repo format."),
    ],
    base: Annotated[
        str,
        typer.Option(envvar=BASE_REF_ENV_VAR, help="Base ref; commits in base..HEAD are listed."),
    ] = DEFAULT_BASE_REF,
    pr: Annotated[
        list[int] | None,
        typer.Option(help="Pull request number to look up instead of reading git history."),
    ] = None,
    fail_fast: Annotated[
        bool,
        typer.Option(
            "--fail-fast/--keep-going",
            help="Abort on the first failed lookup, or skip failed lookups.",
        ),
    ] = True,
    timeout_seconds: Annotated[
        int, typer.Option(help="GitHub API timeout in seconds for each lookup.")
    ] = 20,
    trust_env: Annotated[
        bool,
        typer.Option(
            "--trust-env/--no-trust-env",
            help="Use proxy/SSL environment variables from the current shell.",
        ),
    ] = True,
    verbose: Annotated[bool, typer.Option(help="Log lookup progress to stderr.")] = False,
) -> None:
    """Print one review line per local commit that has a pull request."""
    _configure_logging(verbose)

    try:
        owner, repo_name = parse_repo_full_name(repo)
        if pr:
            records = [
                LocalChangeRecord(commit_id=f"#{number}", pull_request_number=number)
                for number in map(validate_pr_number, pr)
            ]
        else:
            records = read_local_commits(base, owner=owner, repo=repo_name)
        asyncio.run(
            _run_list(
                owner=owner,
                repo=repo_name,
                records=records,
                fail_fast=fail_fast,
                timeout_seconds=timeout_seconds,
                trust_env=trust_env,
            )
        )
    except GitHubInputError as error:
        raise typer.BadParameter(str(error)) from error
    except GitHubAuthError as error:
        typer.echo(f"Review listing failed: {error}", err=True)
        raise typer.Exit(code=1) from error
    except ReviewListError as error:
        typer.echo(f"Review listing failed: {error}", err=True)
        raise typer.Exit(code=1) from error
    except ImportError as error:
        typer.echo(
            "Review listing failed: proxy transport dependency is missing. "
            "Try `pr-status list --no-trust-env`, or install `httpx[socks]`.",
            err=True,
        )
        raise typer.Exit(code=1) from error
