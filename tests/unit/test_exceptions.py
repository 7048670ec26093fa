"""Unit tests for the error taxonomy."""

import pytest

from monet.utils.exceptions import (
    CalendarTokenExpired,
    DuplicateSettlement,
    ExternalServiceFailure,
    InvalidStateError,
    NotFoundError,
    PaymentProcessingFailed,
    PayoutDestinationMissing,
    UnauthorizedError,
    ValidationError,
    error_response,
    is_client_error,
    is_retryable,
)


class TestErrorResponse:
    """Test mapping errors to responses."""

    @pytest.mark.parametrize(
        "exc,status",
        [
            (ValidationError(), 400),
            (UnauthorizedError(), 403),
            (NotFoundError(), 404),
            (InvalidStateError(), 409),
            (DuplicateSettlement(), 409),
            (PayoutDestinationMissing(), 400),
            (PaymentProcessingFailed(), 502),
            (ExternalServiceFailure(), 502),
        ],
    )
    def test_status_codes(self, exc, status):
        """Each error maps to its HTTP-equivalent status."""
        _, status_code = error_response(exc)
        assert status_code == status

    def test_body_has_code_and_message(self):
        """Body carries a stable code and the message."""
        body, _ = error_response(NotFoundError("Session not found", session_id=7))

        assert body == {"error": "not_found", "message": "Session not found"}

    def test_unknown_exception_hidden(self):
        """Unexpected errors never leak their message."""
        body, status = error_response(RuntimeError("db password is hunter2"))

        assert status == 500
        assert "hunter2" not in body["message"]


class TestErrorCategories:
    """Test handling categories."""

    def test_duplicate_is_invalid_state(self):
        """Duplicate settlement is a kind of invalid state."""
        assert isinstance(DuplicateSettlement(), InvalidStateError)
        assert is_client_error(DuplicateSettlement())

    def test_calendar_token_is_external(self):
        """Expired calendar token is an upstream failure."""
        assert is_retryable(CalendarTokenExpired())
        assert not is_client_error(CalendarTokenExpired())

    def test_context_kept(self):
        """Keyword context is kept for logging."""
        exc = InvalidStateError("nope", current="completed")

        assert exc.context == {"current": "completed"}
        assert str(exc) == "nope"
