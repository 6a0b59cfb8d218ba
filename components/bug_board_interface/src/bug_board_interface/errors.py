"""Error taxonomy shared by every bug service client."""

from __future__ import annotations

__all__ = [
    "BugAuthorizationError",
    "BugNetworkError",
    "BugNotFoundError",
    "BugRequestTimeoutError",
    "BugServiceError",
    "BugTrackerError",
    "BugValidationError",
    "DuplicateBugError",
]


class BugTrackerError(Exception):
    """Base exception for anything that goes wrong talking to the bug service.

    Args:
        message:        Text for logs and tracebacks.
        server_message: The ``message`` field of the service's error body, or None
                        when no body was received (network failures, client-side checks).
        status_code:    HTTP status of the failed response, when there was one.
    """

    def __init__(self, message: str, *, server_message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.server_message = server_message
        self.status_code = status_code


class BugNotFoundError(BugTrackerError):
    """Raised when a bug with the requested id does not exist."""


class BugValidationError(BugTrackerError):
    """Raised for malformed or missing fields, whether caught locally or by the service."""

    def __init__(self, message: str, *, errors: list[dict] | None = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        #each entry is {"field": ..., "message": ...}
        self.errors: list[dict] = list(errors or [])


class BugAuthorizationError(BugTrackerError):
    """Raised when the credential is missing, expired or not allowed to do this."""


class DuplicateBugError(BugTrackerError):
    """Raised when the service reports a duplicate record (HTTP 409)."""


class BugServiceError(BugTrackerError):
    """Raised when the service returns an unexpected or internal error."""


class BugNetworkError(BugTrackerError):
    """Raised when no response was received at all."""


class BugRequestTimeoutError(BugNetworkError):
    """Raised when a request exceeds its time limit."""
