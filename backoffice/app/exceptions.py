"""Custom exceptions for the back office application."""

from typing import Sequence


class BackofficeException(Exception):
    """Base class for back office exceptions with HTTP status code.

    All custom exceptions should inherit from this class and define
    their specific status_code for consistent HTTP response handling.
    The client-visible body is always ``{"error": message}``.
    """
    status_code: int = 500

    def __init__(self, message: str = "Internal server error", headers: dict[str, str] | None = None):
        self.message = message
        self.headers = headers
        super().__init__(message)


class RateLimitExceededError(BackofficeException):
    """Raised when a client exhausts its fixed-window quota.

    Maps to HTTP 429 Too Many Requests.
    """
    status_code = 429

    def __init__(
        self,
        limit: int,
        retry_after: int,
        reset_time: int | None = None,
        message: str = "Too many requests. Please try again later.",
    ):
        self.limit = limit
        self.retry_after = retry_after
        self.reset_time = reset_time
        headers = {
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": "0",
        }
        if reset_time is not None:
            headers["X-RateLimit-Reset"] = str(reset_time)
        super().__init__(message, headers=headers)


class AuthenticationError(BackofficeException):
    """Raised when the admin bearer token is rejected.

    The failure tag is kept for logging only; clients always see the
    same message regardless of the cause.

    Maps to HTTP 401 Unauthorized.
    """
    status_code = 401

    def __init__(self, failure: str | None = None, detail: str = "Admin authentication required"):
        self.failure = failure
        self.detail = detail
        super().__init__(detail)


class BadRequestError(BackofficeException):
    """Maps to HTTP 400 Bad Request."""
    status_code = 400

    def __init__(self, message: str = "Bad request"):
        super().__init__(message)


class ValidationFailedError(BadRequestError):
    """Raised when one or more fields violate their validation rules.

    Maps to HTTP 400 Bad Request with every violation joined in the message.
    """

    def __init__(self, errors: Sequence[str], malicious_fields: Sequence[str] = ()):
        self.errors = list(errors)
        self.malicious_fields = list(malicious_fields)
        super().__init__(", ".join(self.errors) or "Invalid request")

    @property
    def is_malicious(self) -> bool:
        return bool(self.malicious_fields)


class PayloadTooLargeError(BackofficeException):
    """Maps to HTTP 413 Payload Too Large."""
    status_code = 413

    def __init__(self, message: str = "Payload too large"):
        super().__init__(message)


class NotFoundError(BackofficeException):
    """Maps to HTTP 404 Not Found."""
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        self.resource = resource
        super().__init__(f"{resource} not found")


class GateTimeoutError(BackofficeException):
    """Raised when a request exceeds its processing deadline.

    Maps to HTTP 504 Gateway Timeout.
    """
    status_code = 504

    def __init__(self, message: str = "Request timed out"):
        super().__init__(message)


class StoreFailureError(BackofficeException):
    """Raised when a resource store operation fails.

    The underlying cause is logged server-side and never returned to the
    client; the message is a resource-specific generic text such as
    "Failed to create faculty".

    Maps to HTTP 500 Internal Server Error.
    """
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
