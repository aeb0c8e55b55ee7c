"""Wire contract for the pull request review lookup query."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

PULL_REQUEST_TYPENAME = "PullRequest"


class ReviewDecision(StrEnum):
    """Review decisions known to this client."""

    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"


@dataclass(frozen=True, slots=True)
class UnrecognizedDecision:
    """Review decision value the server sent that this client does not know."""

    raw: str


def parse_review_decision(value: str | None) -> ReviewDecision | UnrecognizedDecision | None:
    """Map a raw ``reviewDecision`` value onto the known decisions."""
    if value is None:
        return None
    try:
        return ReviewDecision(value)
    except ValueError:
        return UnrecognizedDecision(raw=value)


class ResourcePayload(BaseModel):
    """Resource resolved from a URL; only pull requests carry review fields."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    typename: str = Field(alias="__typename", min_length=1)
    title: str | None = None
    url: str | None = None
    review_decision: str | None = Field(default=None, alias="reviewDecision")

    @property
    def is_pull_request(self) -> bool:
        """Return whether the resource is a pull request."""
        return self.typename == PULL_REQUEST_TYPENAME


class LookupReviewData(BaseModel):
    """``data`` member of the lookup response."""

    model_config = ConfigDict(extra="ignore")

    resource: ResourcePayload | None = None


class GraphQLErrorPayload(BaseModel):
    """One entry of a GraphQL ``errors`` list."""

    model_config = ConfigDict(extra="ignore")

    message: str = ""


class LookupReviewResponse(BaseModel):
    """Response envelope for one review lookup."""

    model_config = ConfigDict(extra="ignore")

    data: LookupReviewData | None = None
    errors: list[GraphQLErrorPayload] = Field(default_factory=list)

    @field_validator("errors", mode="before")
    @classmethod
    def validate_errors(cls, value: object) -> object:
        """Treat an explicit null error list as empty."""
        if value is None:
            return []
        return value
