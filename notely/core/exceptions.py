"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Every failure surfaced to a store's ``error`` field goes through
``describe_error`` so the UI only ever sees one human-readable string.
"""

from typing import Any


class ApplicationError(Exception):
    """Base exception for all application errors."""

    server_message: str | None = None

    def __init__(
        self,
        message: str,
        code: str = "SYS_INTERNAL_ERROR",
        status_code: int | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found."""

    def __init__(self, message: str = "Resource not found", status_code: int | None = None) -> None:
        super().__init__(message, code="RES_NOT_FOUND", status_code=status_code)


class ValidationError(ApplicationError):
    """Raised when validation fails, locally or on the server."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR", status_code=status_code)


class AuthenticationError(ApplicationError):
    """Raised when authentication fails or the session has expired."""

    def __init__(self, message: str = "Authentication required", status_code: int | None = 401) -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED", status_code=status_code)


class AuthorizationError(ApplicationError):
    """Raised when authorization fails."""

    def __init__(self, message: str = "Permission denied", status_code: int | None = 403) -> None:
        super().__init__(message, code="AUTHZ_FORBIDDEN", status_code=status_code)


class ConflictError(ApplicationError):
    """Raised when there is a state conflict (e.g. duplicate email or username)."""

    def __init__(self, message: str = "Resource conflict", status_code: int | None = 409) -> None:
        super().__init__(message, code="RES_CONFLICT", status_code=status_code)


class ServerError(ApplicationError):
    """Raised when the API answers with a 5xx status."""

    def __init__(self, message: str = "Server error", status_code: int | None = 500) -> None:
        super().__init__(message, code="SYS_SERVER_ERROR", status_code=status_code)


class NetworkError(ApplicationError):
    """Raised when the API cannot be reached."""

    def __init__(self, message: str = "Network error") -> None:
        super().__init__(message, code="NET_UNREACHABLE")


class RequestTimeoutError(NetworkError):
    """Raised when a request exceeds the configured timeout."""

    def __init__(self, message: str = "Request timed out") -> None:
        super().__init__(message)
        self.code = "NET_TIMEOUT"


class InvalidResponseError(ApplicationError):
    """Raised when a successful response body does not match the expected schema."""

    def __init__(self, message: str = "Unexpected response from server") -> None:
        super().__init__(message, code="SYS_INVALID_RESPONSE")


class NotConfiguredError(ApplicationError):
    """Raised when an optional integration is used without configuration."""

    def __init__(self, message: str = "Feature not configured") -> None:
        super().__init__(message, code="CFG_NOT_CONFIGURED")


class ExternalServiceError(ApplicationError):
    """Raised when a third-party service call fails."""

    def __init__(self, message: str = "External service error") -> None:
        super().__init__(message, code="SYS_EXTERNAL_SERVICE_ERROR")


_GENERIC_MESSAGES: dict[type[ApplicationError], str] = {
    NetworkError: "Network error. Please check your connection.",
    RequestTimeoutError: "The request timed out. Please try again.",
    ServerError: "Server error. Please try again later.",
    AuthenticationError: "Your session has expired. Please log in again.",
    AuthorizationError: "You do not have permission to do that.",
    InvalidResponseError: "Unexpected response from server. Please try again later.",
}


def describe_error(
    exc: BaseException,
    fallback: str,
    status_messages: dict[int, str] | None = None,
) -> str:
    """
    Turn any failure into the single string shown to the user.

    Precedence: the server's own message, then a caller-supplied message for
    the HTTP status, then a generic message for the error class, then the
    fallback.

    Args:
        exc: The exception raised by the HTTP layer or a service
        fallback: Message used when nothing more specific is known
        status_messages: Optional per-status overrides (e.g. {401: "Invalid password"})
    """
    if not isinstance(exc, ApplicationError):
        return fallback

    if exc.server_message:
        return exc.server_message

    if status_messages and exc.status_code in status_messages:
        return status_messages[exc.status_code]

    if isinstance(exc, ValidationError) and exc.details:
        return "; ".join(str(message) for message in exc.details.values())

    for error_cls in type(exc).__mro__:
        if error_cls in _GENERIC_MESSAGES:
            return _GENERIC_MESSAGES[error_cls]

    if isinstance(exc, NotConfiguredError):
        return exc.message

    return fallback
