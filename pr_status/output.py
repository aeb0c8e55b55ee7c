"""Review state classification and terminal rendering."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import typer

from pr_status.errors import OutputWriteError
from pr_status.fetcher import FetchedResponse, RequestFailed
from pr_status.schema import (
    LookupReviewResponse,
    ReviewDecision,
    UnrecognizedDecision,
    parse_review_decision,
)

logger = logging.getLogger(__name__)


class DisplayCategory(Enum):
    """Display bucket for a review decision, with its label and color."""

    ACCEPTED = ("Accepted", typer.colors.GREEN)
    CHANGES_NEEDED = ("Changes Needed", typer.colors.RED)
    PENDING = ("Pending", None)

    def __init__(self, label: str, color: str | None) -> None:
        self.label = label
        self.color = color


@dataclass(frozen=True, slots=True)
class PullRequestSummary:
    """Fields of a pull request needed for one review line."""

    title: str
    url: str
    review_decision: ReviewDecision | UnrecognizedDecision | None = None


@dataclass(frozen=True, slots=True)
class Found:
    """Lookup that resolved to a pull request."""

    summary: PullRequestSummary


@dataclass(frozen=True, slots=True)
class NotAPullRequest:
    """Lookup that resolved to some other kind of resource."""

    typename: str


@dataclass(frozen=True, slots=True)
class Missing:
    """Lookup that returned no usable resource."""


LookupResult = Found | NotAPullRequest | Missing | RequestFailed


class LineSink(Protocol):
    """Line-oriented text output."""

    def write_line(self, text: str) -> None:
        """Write one line; raise ``OSError`` when the output is broken."""


class TerminalSink:
    """Writes lines to stdout, dropping styles when stdout is not a terminal."""

    def write_line(self, text: str) -> None:
        typer.echo(text)


def classify_response(response: FetchedResponse) -> LookupResult:
    """Classify one fetched response envelope."""
    if isinstance(response, RequestFailed):
        return response
    if response.data is None or response.data.resource is None:
        return Missing()
    resource = response.data.resource
    if not resource.is_pull_request:
        return NotAPullRequest(typename=resource.typename)
    if not resource.title or not resource.url:
        return Missing()
    return Found(
        summary=PullRequestSummary(
            title=resource.title,
            url=resource.url,
            review_decision=parse_review_decision(resource.review_decision),
        )
    )


def classify_decision(
    decision: ReviewDecision | UnrecognizedDecision | None,
) -> DisplayCategory:
    """Map a review decision onto its display category."""
    if decision == ReviewDecision.APPROVED:
        return DisplayCategory.ACCEPTED
    if decision == ReviewDecision.CHANGES_REQUESTED:
        return DisplayCategory.CHANGES_NEEDED
    return DisplayCategory.PENDING


def format_review_line(summary: PullRequestSummary, *, styled: bool = True) -> str:
    """Render ``<category> <title> <url>`` for one pull request."""
    category = classify_decision(summary.review_decision)
    if not styled:
        return f"{category.label} {summary.title} {summary.url}"
    label = typer.style(category.label, fg=category.color)
    title = typer.style(summary.title, bold=True)
    url = typer.style(summary.url, dim=True)
    return f"{label} {title} {url}"


def _log_graphql_errors(response: FetchedResponse) -> None:
    if isinstance(response, LookupReviewResponse) and response.errors:
        messages = "; ".join(error.message for error in response.errors)
        logger.warning("GitHub GraphQL reported errors: %s", messages)


def present_reviews(
    responses: Iterable[FetchedResponse],
    sink: LineSink,
    *,
    styled: bool = True,
) -> int:
    """Write one review line per pull request, in order; return the number of lines."""
    written = 0
    for response in responses:
        _log_graphql_errors(response)
        result = classify_response(response)
        if isinstance(result, RequestFailed):
            logger.warning("Skipping pull request #%d: lookup failed", result.pr_number)
            continue
        if isinstance(result, NotAPullRequest):
            logger.debug("Skipping resource of type %s", result.typename)
            continue
        if isinstance(result, Missing):
            logger.debug("Skipping lookup without a resource")
            continue

        decision = result.summary.review_decision
        if isinstance(decision, UnrecognizedDecision):
            logger.debug("Unrecognized review decision '%s' shown as pending", decision.raw)
        line = format_review_line(result.summary, styled=styled)
        try:
            sink.write_line(line)
        except OSError as error:
            raise OutputWriteError(f"Failed to write review line: {error}") from error
        written += 1
    return written
