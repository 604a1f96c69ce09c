"""Typed upstream errors and the classifier that produces them."""

from typing import Any, Optional

from .constants import HTTP_BAD_REQUEST, HTTP_TOO_MANY_REQUESTS, HTTP_UNAUTHORIZED
from .models import UpstreamError

AUTHENTICATION_FAILED_MESSAGE = "Authentication failed. Please check your API credentials."
TOKEN_EXCHANGE_FAILED_MESSAGE = "Failed to authenticate with upstream API"
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a moment and try again."
INVALID_REQUEST_MESSAGE = "Invalid request parameters"
GENERIC_UPSTREAM_MESSAGE = "Failed to fetch data from upstream API. Please try again."
MISSING_CREDENTIALS_MESSAGE = "Upstream API credentials are not configured"
DEADLINE_EXCEEDED_MESSAGE = "Upstream request deadline exceeded"


class ClassifiedError(Exception):
    """Base class for every error the client surfaces to callers."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class ConfigurationError(ClassifiedError):
    """Credentials are missing or invalid."""


class AuthenticationError(ClassifiedError):
    """Upstream rejected our credentials or token."""


class RateLimitError(ClassifiedError):
    """Upstream returned 429."""


class ValidationError(ClassifiedError):
    """Upstream rejected the request parameters (400)."""


class GenericUpstreamError(ClassifiedError):
    """Any other upstream failure, including no response at all."""


class DeadlineExceededError(GenericUpstreamError):
    """The caller-supplied timeout ran out before the call completed."""


def _first_error_detail(raw_body: Any) -> Optional[str]:
    """Return ``errors[0].detail`` from an upstream error body, if present."""
    if not isinstance(raw_body, dict):
        return None
    errors = raw_body.get("errors")
    if not isinstance(errors, list) or not errors:
        return None
    first = errors[0]
    if not isinstance(first, dict):
        return None
    detail = first.get("detail")
    return detail if isinstance(detail, str) and detail else None


def classify(error: UpstreamError) -> ClassifiedError:
    """Map a failed upstream call to its typed error. Pure, no retries."""
    status = error.http_status

    if status == HTTP_UNAUTHORIZED:
        return AuthenticationError(AUTHENTICATION_FAILED_MESSAGE, status)
    if status == HTTP_TOO_MANY_REQUESTS:
        return RateLimitError(RATE_LIMIT_MESSAGE, status)
    if status == HTTP_BAD_REQUEST:
        detail = _first_error_detail(error.raw_body)
        return ValidationError(detail or INVALID_REQUEST_MESSAGE, status)
    return GenericUpstreamError(GENERIC_UPSTREAM_MESSAGE, status)
