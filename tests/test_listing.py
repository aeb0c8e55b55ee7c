"""Scenario tests for the fetch-then-print review listing."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest
from pr_status.errors import ReviewListError, ReviewLookupError
from pr_status.listing import list_reviews
from pr_status.local_commits import LocalChangeRecord

RESOURCES: dict[int, dict[str, object] | None] = {
    101: {
        "__typename": "PullRequest",
        "title": "Fix bug",
        "url": "https://github.com/acme/rocket/pull/101",
        "reviewDecision": "APPROVED",
    },
}


class ListSink:
    """Sink that collects written lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def write_line(self, text: str) -> None:
        self.lines.append(text)


async def run_listing(
    handler: Callable[[httpx.Request], httpx.Response],
    records: list[LocalChangeRecord],
    sink: ListSink,
    *,
    fail_fast: bool = True,
) -> int:
    """Run the listing pipeline against a mock transport."""
    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(base_url="https://api.github.com", transport=transport) as client:
        return await list_reviews(
            client=client,
            owner="acme",
            repo="rocket",
            records=records,
            sink=sink,
            fail_fast=fail_fast,
            styled=False,
        )


def requested_number(request: httpx.Request) -> int:
    body = json.loads(request.content)
    return int(body["variables"]["url"].rsplit("/", 1)[1])


@pytest.mark.unit
@pytest.mark.asyncio
async def test_single_approved_pull_request_prints_accepted_line() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"data": {"resource": RESOURCES[101]}})

    sink = ListSink()
    written = await run_listing(handler, [LocalChangeRecord("1", 101)], sink)

    assert written == 1
    assert sink.lines == ["Accepted Fix bug https://github.com/acme/rocket/pull/101"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_resource_contributes_no_line() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if requested_number(request) == 101:
            resource = dict(RESOURCES[101] or {}, reviewDecision="CHANGES_REQUESTED")
            return httpx.Response(status_code=200, json={"data": {"resource": resource}})
        return httpx.Response(status_code=200, json={"data": {"resource": None}})

    sink = ListSink()
    written = await run_listing(
        handler,
        [LocalChangeRecord("1", 101), LocalChangeRecord("2", 102)],
        sink,
    )

    assert written == 1
    assert sink.lines == ["Changes Needed Fix bug https://github.com/acme/rocket/pull/101"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_transport_error_fails_without_printing() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if requested_number(request) == 102:
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(status_code=200, json={"data": {"resource": RESOURCES[101]}})

    sink = ListSink()
    with pytest.raises(ReviewLookupError) as error_info:
        await run_listing(
            handler,
            [LocalChangeRecord("1", 101), LocalChangeRecord("2", 102)],
            sink,
        )

    assert isinstance(error_info.value, ReviewListError)
    assert sink.lines == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_keep_going_prints_the_lookups_that_succeeded() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if requested_number(request) == 102:
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(status_code=200, json={"data": {"resource": RESOURCES[101]}})

    sink = ListSink()
    written = await run_listing(
        handler,
        [LocalChangeRecord("1", 101), LocalChangeRecord("2", 102)],
        sink,
        fail_fast=False,
    )

    assert written == 1
    assert sink.lines == ["Accepted Fix bug https://github.com/acme/rocket/pull/101"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unpublished_commits_trigger_no_requests() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("No request expected")

    sink = ListSink()
    written = await run_listing(handler, [LocalChangeRecord("1"), LocalChangeRecord("2")], sink)

    assert written == 0
    assert sink.lines == []
