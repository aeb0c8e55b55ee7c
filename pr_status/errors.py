"""Error types shared across the review listing pipeline."""

from __future__ import annotations


class ReviewListError(RuntimeError):
    """Raised when the review listing could not be produced."""


class ReviewLookupError(ReviewListError):
    """Raised when one or more pull request lookups in a batch fail."""

    def __init__(self, message: str, *, pr_number: int | None = None) -> None:
        super().__init__(message)
        self.pr_number = pr_number


class OutputWriteError(ReviewListError):
    """Raised when a review line could not be written to the output."""


class LocalCommitError(ReviewListError):
    """Raised when local commits could not be read from git."""
