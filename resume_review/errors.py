"""Error types raised by the upload and analysis pipeline."""

from typing import Optional


class ResumeReviewError(Exception):
    """Base class for every failure surfaced to the user."""


class InputError(ResumeReviewError):
    """Uploaded file has the wrong type or is too large."""


class RecoveryError(ResumeReviewError):
    """Text recovery yielded too little readable content."""


class AnalysisError(ResumeReviewError):
    """Base for failures of the structured extraction request."""


class NetworkError(AnalysisError):
    """Request failed in transport or returned a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitExhausted(AnalysisError):
    """Generation API kept throttling after all retries."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class ParseError(AnalysisError):
    """No JSON object found, or invalid JSON, in the service response."""


class ShapeError(AnalysisError):
    """Parsed result is missing required fields."""


class StorageError(ResumeReviewError):
    """History could not be written to disk."""
