"""GitHub GraphQL wrapper and auth helpers."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
from dotenv import load_dotenv
from pydantic import ValidationError

from pr_status.schema import LookupReviewResponse

logger = logging.getLogger(__name__)

GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_GRAPHQL_ENDPOINT = "/graphql"
GITHUB_WEB_BASE_URL = "https://github.com"
GITHUB_API_VERSION = "2022-11-28"
REPO_PART_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

LOOKUP_REVIEW_QUERY = """
query LookupReview($url: URI!) {
  resource(url: $url) {
    __typename
    ... on PullRequest {
      title
      url
      reviewDecision
    }
  }
}
""".strip()


class GitHubAuthError(RuntimeError):
    """Raised when required GitHub authentication is missing."""


class GitHubInputError(ValueError):
    """Raised when repository or PR input values are invalid."""


class GitHubApiError(RuntimeError):
    """Raised when a GitHub API request fails."""

    def __init__(self, message: str, *, status_code: int, endpoint: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


@dataclass(frozen=True, slots=True)
class LookupRequest:
    """Reference to one pull request whose review state is looked up."""

    owner: str
    repo: str
    number: int

    @property
    def url(self) -> str:
        """Canonical web URL of the pull request."""
        return pull_request_url(self.owner, self.repo, self.number)

    def to_body(self) -> dict[str, Any]:
        """Build the GraphQL request body."""
        return {"query": LOOKUP_REVIEW_QUERY, "variables": {"url": self.url}}


def pull_request_url(owner: str, repo: str, number: int) -> str:
    """Return the canonical pull request URL."""
    return f"{GITHUB_WEB_BASE_URL}/{owner}/{repo}/pull/{number}"


def _ensure_mapping(value: object, *, context: str, status_code: int) -> dict[str, Any]:
    """Ensure a response body is a JSON object."""
    if not isinstance(value, dict):
        raise GitHubApiError(
            f"Expected JSON object for {context}.",
            status_code=status_code,
            endpoint=context,
        )
    return value


def _raise_http_error(response: httpx.Response, endpoint: str) -> None:
    """Raise a typed error for a non-success GitHub API response."""
    raise GitHubApiError(
        f"GitHub API request failed with status {response.status_code} for '{endpoint}'.",
        status_code=response.status_code,
        endpoint=endpoint,
    )


async def post_graphql(client: httpx.AsyncClient, body: dict[str, Any]) -> dict[str, Any]:
    """POST one GraphQL document and return the decoded JSON envelope."""
    endpoint = GITHUB_GRAPHQL_ENDPOINT
    response = await client.post(endpoint, json=body)
    if response.status_code >= 400:
        _raise_http_error(response, endpoint)
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as error:
        raise GitHubApiError(
            "GitHub GraphQL response body is not valid JSON.",
            status_code=response.status_code,
            endpoint=endpoint,
        ) from error
    return _ensure_mapping(payload, context=endpoint, status_code=response.status_code)


async def lookup_review(client: httpx.AsyncClient, request: LookupRequest) -> LookupReviewResponse:
    """Run the review lookup query for one pull request."""
    payload = await post_graphql(client, request.to_body())
    try:
        return LookupReviewResponse.model_validate(payload)
    except ValidationError as error:
        raise GitHubApiError(
            f"Unexpected GraphQL response shape for '{request.url}'.",
            status_code=200,
            endpoint=GITHUB_GRAPHQL_ENDPOINT,
        ) from error


def parse_repo_full_name(repo_full_name: str) -> tuple[str, str]:
    """Parse and validate repository input in owner/repo format."""
    owner, separator, repo = repo_full_name.strip().partition("/")
    if not separator or not owner or not repo or "/" in repo:
        raise GitHubInputError(
            f"Invalid repo '{repo_full_name}'. Expected format is owner/repo."
        )
    if not REPO_PART_PATTERN.fullmatch(owner) or not REPO_PART_PATTERN.fullmatch(repo):
        raise GitHubInputError(
            f"Invalid repo '{repo_full_name}'. Owner and name may only contain "
            "letters, digits, '-', '_' and '.'."
        )
    return owner, repo


def validate_pr_number(pr_number: int) -> int:
    """Validate and normalize pull request number input."""
    if pr_number <= 0:
        raise GitHubInputError(f"Invalid PR number '{pr_number}'. Expected a positive integer.")
    return pr_number


def get_github_token_with_source() -> tuple[str, str]:
    """Read GitHub token and return token value with environment source key."""
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    github_token = os.getenv("GITHUB_TOKEN")
    if github_token:
        return github_token, "GITHUB_TOKEN"

    gh_token = os.getenv("GH_TOKEN")
    if gh_token:
        return gh_token, "GH_TOKEN"

    message = "Missing GitHub token. Set GITHUB_TOKEN (preferred) or GH_TOKEN."
    raise GitHubAuthError(message)


def build_github_client(
    timeout_seconds: int = 20,
    *,
    trust_env: bool = True,
) -> httpx.AsyncClient:
    """Build an authenticated async GitHub HTTP client."""
    token, token_source = get_github_token_with_source()
    logger.debug("Using GitHub token from %s", token_source)
    headers = {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    return httpx.AsyncClient(
        base_url=GITHUB_API_BASE_URL,
        headers=headers,
        timeout=timeout_seconds,
        trust_env=trust_env,
    )
