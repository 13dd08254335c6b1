# typed errors raised at the gateway boundary
from __future__ import annotations

from typing import Dict, Optional


class StorefrontError(Exception):
    """Base class for every error the client surfaces to callers.

    ``message`` is always a stable, human-readable string the UI can show as is.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(StorefrontError):
    """The gateway could not be reached (connection refused, DNS, timeout)."""


class MalformedPayload(StorefrontError):
    """A response body did not have the expected shape."""


class ApiError(StorefrontError):
    """The gateway answered with a non-success status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ValidationError(ApiError):
    pass


class NotFound(ApiError):
    pass


class ServerError(ApiError):
    pass


class AuthError(ApiError):
    """Credentials were rejected."""


class Unauthorized(AuthError):
    """401. Raised by the auth middleware after it has torn the session down."""


class Forbidden(AuthError):
    pass


# client-side precondition failures, raised before any request is sent


class NotAuthenticated(StorefrontError):
    def __init__(self, message: str = "You need to log in first."):
        super().__init__(message)


class EmptyCartError(StorefrontError):
    def __init__(self, message: str = "Cart is empty. Add products before placing an order."):
        super().__init__(message)


class SubmissionInProgress(StorefrontError):
    def __init__(self, message: str = "An order is already being placed."):
        super().__init__(message)


DEFAULT_MESSAGES: Dict[int, str] = {
    400: "The request was rejected by the server.",
    401: "Your session has expired. Please log in again.",
    403: "You are not allowed to do that.",
    404: "The requested resource was not found.",
    500: "Service unavailable. Please try again later.",
}


def error_for_status(
    status_code: int, messages: Optional[Dict[int, str]] = None
) -> ApiError:
    """
    Build the typed error for an HTTP status.

    ``messages`` overrides the default wording per status, so each service can
    keep its own user-facing strings. Any 5xx falls back to the 500 entry.
    """
    table = dict(DEFAULT_MESSAGES)
    table.update(messages or {})

    key = 500 if status_code >= 500 else status_code
    message = table.get(key, f"Unexpected response from server (HTTP {status_code}).")

    if status_code == 400:
        return ValidationError(message, status_code)
    if status_code == 401:
        return Unauthorized(message, status_code)
    if status_code == 403:
        return Forbidden(message, status_code)
    if status_code == 404:
        return NotFound(message, status_code)
    if status_code >= 500:
        return ServerError(message, status_code)
    return ApiError(message, status_code)
