"""Local commit discovery from git history."""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

from pr_status.errors import LocalCommitError
from pr_status.github_client import GITHUB_WEB_BASE_URL

PULL_REQUEST_LINE_PATTERN = re.compile(r"^pull request:\s*(?P<value>\S+)\s*$", re.IGNORECASE)
PULL_REQUEST_REF_PATTERN = re.compile(r"^#?(?P<number>[1-9]\d*)$")
RECORD_SEPARATOR = "\x1e"
FIELD_SEPARATOR = "\x00"
GIT_LOG_FORMAT = "--format=%H%x00%B%x1e"


@dataclass(frozen=True, slots=True)
class LocalChangeRecord:
    """A local commit, with the pull request it was published as (if any)."""

    commit_id: str
    pull_request_number: int | None = None


def _pull_request_url_pattern(owner: str, repo: str) -> re.Pattern[str]:
    """Match pull request URLs of one repository only."""
    prefix = re.escape(f"{GITHUB_WEB_BASE_URL}/{owner}/{repo}/pull/")
    return re.compile(rf"^{prefix}(?P<number>[1-9]\d*)/?$", re.IGNORECASE)


def parse_pull_request_number(message: str, *, owner: str, repo: str) -> int | None:
    """Read the pull request number from a commit message's ``Pull Request:`` line.

    URLs count only when they point at ``owner/repo``; ``#<n>`` and ``<n>``
    refer to that repository implicitly.
    """
    url_pattern = _pull_request_url_pattern(owner, repo)
    for line in message.splitlines():
        line_match = PULL_REQUEST_LINE_PATTERN.match(line.strip())
        if line_match is None:
            continue
        value = line_match.group("value")
        number_match = url_pattern.match(value) or PULL_REQUEST_REF_PATTERN.match(value)
        if number_match is None:
            return None
        return int(number_match.group("number"))
    return None


def parse_git_log_output(output: str, *, owner: str, repo: str) -> list[LocalChangeRecord]:
    """Parse ``git log`` output written with the record/field separators."""
    records: list[LocalChangeRecord] = []
    for chunk in output.split(RECORD_SEPARATOR):
        entry = chunk.strip("\n")
        if not entry:
            continue
        commit_id, _separator, message = entry.partition(FIELD_SEPARATOR)
        records.append(
            LocalChangeRecord(
                commit_id=commit_id.strip(),
                pull_request_number=parse_pull_request_number(message, owner=owner, repo=repo),
            )
        )
    return records


def read_local_commits(
    base_ref: str,
    *,
    owner: str,
    repo: str,
    cwd: Path | str | None = None,
) -> list[LocalChangeRecord]:
    """Return commits in ``base_ref..HEAD`` of the ``owner/repo`` checkout, oldest first."""
    if not base_ref:
        raise LocalCommitError("Invalid base ref ''. Expected a non-empty git ref.")
    command = [
        "git",
        "log",
        "--reverse",
        GIT_LOG_FORMAT,
        f"{base_ref}..HEAD",
    ]
    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as error:
        raise LocalCommitError("git executable not found.") from error
    except subprocess.CalledProcessError as error:
        detail = (error.stderr or "").strip() or f"exit status {error.returncode}"
        raise LocalCommitError(f"git log failed for '{base_ref}..HEAD': {detail}") from error
    return parse_git_log_output(completed.stdout, owner=owner, repo=repo)
