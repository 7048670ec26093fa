"""Request schemas."""

from monet.schemas.requests import (
    AcceptOfferRequest,
    BookSessionRequest,
    CancelSessionRequest,
    ConfirmSessionRequest,
    ReportOfferRequest,
    SubmitFeedbackRequest,
    parse_request,
)


__all__ = [
    "AcceptOfferRequest",
    "BookSessionRequest",
    "CancelSessionRequest",
    "ConfirmSessionRequest",
    "ReportOfferRequest",
    "SubmitFeedbackRequest",
    "parse_request",
]
