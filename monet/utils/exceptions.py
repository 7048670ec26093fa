"""
Exception handling utilities.

Defines the error taxonomy surfaced by the settlement and lifecycle
services. Every error carries a stable code and an HTTP-equivalent status
so the transport layer can render it without inspecting messages.
"""

from typing import Any


class MonetError(Exception):
    """Base class for all domain errors."""

    code: str = "internal_error"
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self, message: str | None = None, **context: Any
    ) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_response(self) -> dict[str, str]:
        """
        Render error as a response body.

        Returns:
            Dict with stable error code and message
        """
        return {"error": self.code, "message": self.message}


class ValidationError(MonetError):
    """Bad input shape or values."""

    code = "validation_error"
    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(MonetError):
    """Actor does not own the resource."""

    code = "unauthorized"
    status_code = 403
    default_message = "Unauthorized"


class NotFoundError(MonetError):
    """Missing session, offer or user."""

    code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class InvalidStateError(MonetError):
    """Transition not legal from the current status."""

    code = "invalid_state"
    status_code = 409
    default_message = "Operation not allowed in current state"


class DuplicateSettlement(InvalidStateError):
    """Settlement was already performed for this session."""

    code = "duplicate_settlement"
    default_message = "Feedback already submitted for this session"


class PayoutDestinationMissing(MonetError):
    """Recipient cannot receive funds yet."""

    code = "payout_destination_missing"
    status_code = 400
    default_message = (
        "Professional must complete payout onboarding before receiving payments"
    )


class PaymentProcessingFailed(MonetError):
    """A required transfer or charge was rejected."""

    code = "payment_processing_failed"
    status_code = 502
    default_message = "Payment processing failed. Please try again."


class ExternalServiceFailure(MonetError):
    """Meeting or calendar provider call failed."""

    code = "external_service_failure"
    status_code = 502
    default_message = "External service unavailable"


class CalendarTokenExpired(ExternalServiceFailure):
    """Calendar credential was rejected by the provider."""

    code = "calendar_token_expired"
    default_message = "Calendar access token expired"


class PaymentProviderError(Exception):
    """Raised by payout gateways when the provider rejects a call."""

    def __init__(self, message: str, provider_code: str | None = None) -> None:
        self.provider_code = provider_code
        super().__init__(message)


class ReferralLookupError(Exception):
    """Raised when the referred-by lookup itself fails."""


# Exception categories based on handling strategy

# Rejected before any side effect happens
CLIENT_ERRORS = (
    ValidationError,
    UnauthorizedError,
    NotFoundError,
    InvalidStateError,
    PayoutDestinationMissing,
)

# Third party failed; caller may retry later
UPSTREAM_ERRORS = (
    PaymentProcessingFailed,
    ExternalServiceFailure,
)


def is_client_error(exc: Exception) -> bool:
    """
    Check if exception was caused by the caller's input or state.

    Args:
        exc: Exception to check

    Returns:
        True if exception is a client error
    """
    return isinstance(exc, CLIENT_ERRORS)


def is_retryable(exc: Exception) -> bool:
    """
    Check if the operation may succeed when retried unchanged.

    Args:
        exc: Exception to check

    Returns:
        True if exception came from an upstream provider
    """
    return isinstance(exc, UPSTREAM_ERRORS)


def error_response(exc: Exception) -> tuple[dict[str, str], int]:
    """
    Map any exception to a response body and status code.

    Unknown exceptions never leak their message.

    Args:
        exc: Exception to render

    Returns:
        Tuple of (body, status_code)
    """
    if isinstance(exc, MonetError):
        return exc.to_response(), exc.status_code
    return MonetError().to_response(), MonetError.status_code
