"""
Initialization - Services Module.

Builds the database, payment gateway and external providers from
settings, and hands out services bound to one database session.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from types import TracebackType

from loguru import logger

from monet.config.settings import Settings
from monet.db.database import Database
from monet.services.calendar import CalendarProvider, GoogleCalendarProvider
from monet.services.lifecycle import BookingService, SessionLifecycleService
from monet.services.meetings import MeetingProvider, ZoomMeetingProvider
from monet.services.offers import OfferService
from monet.services.payments import PayoutGateway, StripePayoutGateway
from monet.services.settlement import (
    OfferSettlementService,
    SessionSettlementService,
)


@dataclass
class Services:
    """Services sharing one database session."""

    booking: BookingService
    lifecycle: SessionLifecycleService
    session_settlement: SessionSettlementService
    offer_settlement: OfferSettlementService
    offers: OfferService


def validate_environment(settings: Settings) -> None:
    """Warn about settings that make some operations fail at runtime."""
    if "your_" in settings.stripe_secret_key.lower():
        logger.error("STRIPE_SECRET_KEY is not properly configured")
    if not settings.zoom_configured:
        logger.warning(
            "Zoom credentials are not configured. "
            "Session confirmation will fail until they are set."
        )


class ServiceContainer:
    """
    Owns process-wide resources.

    Usage:
        async with ServiceContainer(settings) as container:
            async with container.session_scope() as services:
                await services.session_settlement.submit_feedback(request)
    """

    def __init__(
        self,
        settings: Settings,
        database: Database | None = None,
        payout_gateway: PayoutGateway | None = None,
        meeting_provider: MeetingProvider | None = None,
        calendar_provider: CalendarProvider | None = None,
    ) -> None:
        """
        Initialize container.

        Collaborators not passed in are built from settings.

        Args:
            settings: Application settings
            database: Database override
            payout_gateway: Payout gateway override
            meeting_provider: Meeting provider override
            calendar_provider: Calendar provider override
        """
        self.settings = settings
        self.database = database or Database(
            settings.database_url, echo=settings.database_echo
        )
        self.payout_gateway = payout_gateway or StripePayoutGateway(
            api_key=settings.stripe_secret_key,
            currency=settings.payout_currency,
        )
        self.meeting_provider = meeting_provider or ZoomMeetingProvider(
            account_id=settings.zoom_account_id or "",
            client_id=settings.zoom_client_id or "",
            client_secret=settings.zoom_client_secret or "",
            api_base_url=settings.zoom_api_base_url,
            oauth_url=settings.zoom_oauth_url,
            timeout_seconds=settings.external_http_timeout_seconds,
        )
        self.calendar_provider = calendar_provider or GoogleCalendarProvider(
            api_base_url=settings.google_calendar_api_base_url,
            timeout_seconds=settings.external_http_timeout_seconds,
        )

    async def __aenter__(self) -> "ServiceContainer":
        validate_environment(self.settings)
        logger.info("Service container started")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[Services]:
        """
        Open a database session and build services on it.

        Yields:
            Services bound to the session
        """
        async with self.database.session() as session:
            yield Services(
                booking=BookingService(session, self.payout_gateway),
                lifecycle=SessionLifecycleService(
                    session,
                    self.payout_gateway,
                    self.meeting_provider,
                    self.calendar_provider,
                ),
                session_settlement=SessionSettlementService(
                    session,
                    self.payout_gateway,
                    fee_rate=self.settings.platform_fee_rate,
                    max_depth=self.settings.referral_max_depth,
                ),
                offer_settlement=OfferSettlementService(
                    session,
                    self.payout_gateway,
                    fee_rate=self.settings.platform_fee_rate,
                ),
                offers=OfferService(session),
            )

    async def close(self) -> None:
        """Graceful shutdown: close HTTP sessions and dispose the engine."""
        logger.info("Graceful shutdown initiated...")

        for provider in (self.meeting_provider, self.calendar_provider):
            close = getattr(provider, "close", None)
            if close is not None:
                await close()

        await self.database.dispose()
        logger.info("Graceful shutdown complete")
