"""Concurrent review lookups for a batch of pull requests."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import httpx

from pr_status.errors import ReviewLookupError
from pr_status.github_client import GitHubApiError, LookupRequest, lookup_review
from pr_status.local_commits import LocalChangeRecord
from pr_status.schema import LookupReviewResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RequestFailed:
    """Lookup that failed while the batch kept going."""

    pr_number: int
    cause: BaseException


FetchedResponse = LookupReviewResponse | RequestFailed


def pull_request_numbers(records: Iterable[LocalChangeRecord]) -> list[int]:
    """Return pull request numbers of the records that have one, in order."""
    return [
        record.pull_request_number
        for record in records
        if record.pull_request_number is not None
    ]


async def _lookup_one(client: httpx.AsyncClient, request: LookupRequest) -> LookupReviewResponse:
    try:
        response = await lookup_review(client, request)
    except (httpx.HTTPError, GitHubApiError) as error:
        raise ReviewLookupError(
            f"Review lookup failed for pull request #{request.number}: {error}",
            pr_number=request.number,
        ) from error
    logger.debug("Fetched review state for %s", request.url)
    return response


async def fetch_review_responses(
    *,
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    pr_numbers: Sequence[int],
    fail_fast: bool = True,
) -> list[FetchedResponse]:
    """Look up all pull requests concurrently, one response per number, in input order.

    With ``fail_fast`` the first failed lookup aborts the batch with
    ``ReviewLookupError``; lookups still in flight are left to finish on their own.
    Otherwise each failed lookup is returned in its slot as ``RequestFailed``.
    """
    requests = [LookupRequest(owner=owner, repo=repo, number=number) for number in pr_numbers]
    if not requests:
        return []

    logger.debug("Looking up %d pull request(s) in %s/%s", len(requests), owner, repo)
    lookups = [_lookup_one(client, request) for request in requests]

    if fail_fast:
        return list(await asyncio.gather(*lookups))

    settled = await asyncio.gather(*lookups, return_exceptions=True)
    results: list[FetchedResponse] = []
    for request, outcome in zip(requests, settled, strict=True):
        if isinstance(outcome, ReviewLookupError):
            logger.warning("%s", outcome)
            cause = outcome.__cause__ or outcome
            results.append(RequestFailed(pr_number=request.number, cause=cause))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.append(outcome)
    return results
