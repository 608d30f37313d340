"""Unit tests for notely.core.exceptions."""

import pytest

from notely.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    ConflictError,
    InvalidResponseError,
    NetworkError,
    NotConfiguredError,
    NotFoundError,
    RequestTimeoutError,
    ServerError,
    ValidationError,
    describe_error,
)


class TestExceptionCodes:
    @pytest.mark.parametrize(
        "exc, code",
        [
            (NotFoundError(), "RES_NOT_FOUND"),
            (ValidationError(), "VAL_VALIDATION_ERROR"),
            (AuthenticationError(), "AUTH_UNAUTHORIZED"),
            (ConflictError(), "RES_CONFLICT"),
            (ServerError(), "SYS_SERVER_ERROR"),
            (NetworkError(), "NET_UNREACHABLE"),
            (RequestTimeoutError(), "NET_TIMEOUT"),
            (NotConfiguredError(), "CFG_NOT_CONFIGURED"),
            (InvalidResponseError(), "SYS_INVALID_RESPONSE"),
        ],
    )
    def test_codes(self, exc, code):
        assert exc.code == code

    def test_timeout_is_a_network_error(self):
        assert isinstance(RequestTimeoutError(), NetworkError)

    def test_validation_error_keeps_details(self):
        exc = ValidationError("Invalid", details={"title": "Title is required"})
        assert exc.details == {"title": "Title is required"}
        assert str(exc) == "Invalid"


class TestDescribeError:
    """Precedence: server message, status override, field details, class default, fallback."""

    def test_non_application_error_uses_fallback(self):
        assert describe_error(RuntimeError("boom"), "Something failed") == "Something failed"

    def test_server_message_wins(self):
        exc = AuthenticationError("HTTP 401")
        exc.server_message = "Token revoked"
        assert describe_error(exc, "fallback", {401: "Invalid password"}) == "Token revoked"

    def test_status_override_beats_class_default(self):
        exc = AuthenticationError("HTTP 401")
        assert describe_error(exc, "fallback", {401: "Invalid password"}) == "Invalid password"

    def test_validation_details_are_joined(self):
        exc = ValidationError("Invalid", details={"title": "Title is required", "content": "Content is required"})
        assert describe_error(exc, "fallback") == "Title is required; Content is required"

    def test_class_default_for_network_errors(self):
        assert describe_error(NetworkError(), "fallback") == "Network error. Please check your connection."

    def test_timeout_has_its_own_message(self):
        assert describe_error(RequestTimeoutError(), "fallback") == "The request timed out. Please try again."

    def test_server_error_default(self):
        assert describe_error(ServerError(status_code=503), "fallback") == "Server error. Please try again later."

    def test_not_configured_uses_own_message(self):
        assert describe_error(NotConfiguredError("Upload is off"), "fallback") == "Upload is off"

    def test_plain_application_error_uses_fallback(self):
        exc = ApplicationError("HTTP 418", code="HTTP_ERROR", status_code=418)
        assert describe_error(exc, "Failed to load notes") == "Failed to load notes"

    def test_not_found_without_server_message_uses_fallback(self):
        assert describe_error(NotFoundError(status_code=404), "Failed to load note") == "Failed to load note"

    def test_invalid_response_default(self):
        expected = "Unexpected response from server. Please try again later."
        assert describe_error(InvalidResponseError(), "Failed to load notes") == expected
