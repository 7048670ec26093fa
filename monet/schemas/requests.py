"""
Request schemas.

Raw request bodies are validated into these models before they reach the
services. Money fields are strict integers (cents); a float never passes.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Literal, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    StrictInt,
    ValidationError as PydanticValidationError,
    field_validator,
)

from monet.config.business_constants import (
    DEFAULT_SESSION_DURATION_MINUTES,
    FEEDBACK_MAX_LENGTH,
    FEEDBACK_MIN_LENGTH,
    INTERNAL_NOTES_MAX_LENGTH,
    RATING_MAX,
    RATING_MIN,
)
from monet.utils.datetime_utils import ensure_utc
from monet.utils.exceptions import ValidationError


RequestT = TypeVar("RequestT", bound=BaseModel)

Rating = StrictInt


class RequestModel(BaseModel):
    """Base for all request bodies."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        frozen=True,
    )


class BookSessionRequest(RequestModel):
    """Candidate books a professional."""

    candidate_id: PositiveInt
    professional_id: PositiveInt
    scheduled_at: datetime
    duration_minutes: int = Field(
        default=DEFAULT_SESSION_DURATION_MINUTES, ge=15, le=240
    )
    request_message: str | None = Field(default=None, max_length=500)
    referrer_pro_id: PositiveInt | None = None

    @field_validator("scheduled_at")
    @classmethod
    def normalize_scheduled_at(cls, v: datetime) -> datetime:
        """Store all start times in UTC."""
        return ensure_utc(v)


class ConfirmSessionRequest(RequestModel):
    """Professional accepts or declines a requested session."""

    professional_id: PositiveInt
    action: Literal["accept", "decline"]
    decline_reason: str | None = Field(default=None, max_length=500)
    alternative_slots: list[datetime] = Field(default_factory=list, max_length=10)


class CancelSessionRequest(RequestModel):
    """Either party cancels a session."""

    actor_id: PositiveInt
    reason: str = Field(min_length=1, max_length=500)


class SubmitFeedbackRequest(RequestModel):
    """Professional submits feedback, which settles the session."""

    session_id: PositiveInt
    professional_id: PositiveInt
    cultural_fit_rating: Rating = Field(ge=RATING_MIN, le=RATING_MAX)
    interest_rating: Rating = Field(ge=RATING_MIN, le=RATING_MAX)
    technical_rating: Rating = Field(ge=RATING_MIN, le=RATING_MAX)
    feedback: str = Field(
        min_length=FEEDBACK_MIN_LENGTH, max_length=FEEDBACK_MAX_LENGTH
    )
    internal_notes: str | None = Field(
        default=None, max_length=INTERNAL_NOTES_MAX_LENGTH
    )


class ReportOfferRequest(RequestModel):
    """A party reports a job offer for a candidate."""

    candidate_id: PositiveInt
    firm_id: str = Field(min_length=1, max_length=255)
    position: str = Field(min_length=1, max_length=255)
    salary_cents: StrictInt | None = Field(default=None, ge=0)
    equity: str | None = Field(default=None, max_length=255)
    reported_by: PositiveInt


class AcceptOfferRequest(RequestModel):
    """Candidate accepts an offer."""

    offer_id: PositiveInt
    candidate_id: PositiveInt


def parse_request(
    model: type[RequestT], payload: Mapping[str, Any]
) -> RequestT:
    """
    Validate a raw request body into a typed request.

    Args:
        model: Request model class
        payload: Decoded request body

    Returns:
        Validated request instance

    Raises:
        ValidationError: If the payload does not match the model
    """
    try:
        return model.model_validate(dict(payload))
    except PydanticValidationError as e:
        errors = e.errors(include_url=False)
        first = errors[0]
        field = ".".join(str(part) for part in first["loc"])
        message = f"{field}: {first['msg']}" if field else first["msg"]
        raise ValidationError(message, errors=errors) from e
