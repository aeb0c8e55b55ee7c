"""Review listing orchestration entrypoints."""

from __future__ import annotations

from collections.abc import Sequence

import httpx

from pr_status.fetcher import fetch_review_responses, pull_request_numbers
from pr_status.local_commits import LocalChangeRecord
from pr_status.output import LineSink, present_reviews


async def list_reviews(
    *,
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    records: Sequence[LocalChangeRecord],
    sink: LineSink,
    fail_fast: bool = True,
    styled: bool = True,
) -> int:
    """Fetch and print the review state of every published local commit.

    Returns the number of lines written. Lookup failures raise
    ``ReviewLookupError`` before anything is written; output failures raise
    ``OutputWriteError``.
    """
    pr_numbers = pull_request_numbers(records)
    if not pr_numbers:
        return 0
    responses = await fetch_review_responses(
        client=client,
        owner=owner,
        repo=repo,
        pr_numbers=pr_numbers,
        fail_fast=fail_fast,
    )
    return present_reviews(responses, sink, styled=styled)
