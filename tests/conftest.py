"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for Settings() at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_monet_placeholder")
os.environ.setdefault("ENVIRONMENT", "test")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from datetime import UTC, datetime, timedelta
from itertools import count
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from monet.db import Database
from monet.models.chat_session import ChatSession
from monet.models.enums import SessionStatus, UserRole
from monet.models.offer import Offer
from monet.models.user import User
from monet.services.calendar import CalendarEventInfo
from monet.services.meetings import MeetingInfo
from monet.utils.exceptions import PaymentProviderError


NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


class FakePayoutGateway:
    """In-process PayoutGateway that records every call."""

    def __init__(self) -> None:
        self.transfers: list[dict] = []
        self.payment_intents: list[dict] = []
        # Destinations whose transfers are rejected
        self.failing_destinations: set[str] = set()
        self.fail_payment_intents = False
        self._ids = count(1)

    async def payout_destination(self, user: User) -> str | None:
        return user.stripe_account_id or None

    async def has_payout_destination(self, user: User) -> bool:
        return await self.payout_destination(user) is not None

    async def transfer(
        self,
        destination_id: str,
        amount_cents: int,
        metadata: dict[str, str],
        idempotency_key: str | None = None,
    ) -> str:
        if destination_id in self.failing_destinations:
            raise PaymentProviderError(
                "Insufficient funds in platform balance",
                provider_code="balance_insufficient",
            )
        transfer_id = f"tr_{next(self._ids)}"
        self.transfers.append(
            {
                "id": transfer_id,
                "destination": destination_id,
                "amount_cents": amount_cents,
                "metadata": metadata,
                "idempotency_key": idempotency_key,
            }
        )
        return transfer_id

    async def create_payment_intent(
        self,
        amount_cents: int,
        metadata: dict[str, str],
        description: str | None = None,
    ) -> str:
        if self.fail_payment_intents:
            raise PaymentProviderError("Your card was declined.", "card_declined")
        intent_id = f"pi_{next(self._ids)}"
        self.payment_intents.append(
            {"id": intent_id, "amount_cents": amount_cents, "metadata": metadata}
        )
        return intent_id


@pytest.fixture
def clock():
    """Fixed clock for services."""
    return MagicMock(return_value=NOW)


@pytest.fixture
def payout_gateway():
    """Fake payout gateway."""
    return FakePayoutGateway()


@pytest.fixture
def meeting_provider():
    """Mock MeetingProvider."""
    provider = AsyncMock()
    provider.create_meeting = AsyncMock(
        return_value=MeetingInfo(id="85012345678", join_url="https://zoom.us/j/85012345678")
    )
    provider.delete_meeting = AsyncMock(return_value=None)
    return provider


@pytest.fixture
def calendar_provider():
    """Mock CalendarProvider."""
    provider = AsyncMock()
    provider.create_event = AsyncMock(
        return_value=CalendarEventInfo(
            id="evt_123", html_link="https://calendar.google.com/event?eid=evt_123"
        )
    )
    provider.delete_event = AsyncMock(return_value=None)
    return provider


@pytest_asyncio.fixture
async def database(tmp_path):
    """File-backed SQLite database with all tables created."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'monet_test.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """Database session for one test."""
    async with database.session() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """Factory creating users in the test database."""
    emails = count(1)

    async def _make_user(
        role: UserRole = UserRole.PROFESSIONAL, **overrides
    ) -> User:
        n = next(emails)
        fields = {
            "email": f"user{n}@example.com",
            "name": f"User {n}",
            "role": role.value,
        }
        if role == UserRole.PROFESSIONAL:
            fields.update(
                company="Acme Capital",
                session_rate_cents=10000,
                stripe_account_id=f"acct_{n}",
            )
        fields.update(overrides)
        user = User(**fields)
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_chat_session(db_session):
    """Factory creating chat sessions in the test database."""

    async def _make_chat_session(
        candidate: User,
        professional: User,
        status: SessionStatus = SessionStatus.CONFIRMED,
        **overrides,
    ) -> ChatSession:
        fields = {
            "candidate_id": candidate.id,
            "professional_id": professional.id,
            "firm_id": professional.company or "unknown",
            "scheduled_at": NOW + timedelta(days=1),
            "duration_minutes": 30,
            "rate_cents": professional.session_rate_cents or 10000,
            "offer_bonus_cents": candidate.offer_bonus_cents or 0,
            "status": status.value,
            "transfer_ids": [],
        }
        fields.update(overrides)
        chat = ChatSession(**fields)
        db_session.add(chat)
        await db_session.commit()
        return chat

    return _make_chat_session


@pytest.fixture
def make_offer(db_session):
    """Factory creating offers in the test database."""

    async def _make_offer(candidate: User, **overrides) -> Offer:
        fields = {
            "candidate_id": candidate.id,
            "firm_id": "Acme Capital",
            "position": "Investment Banking Analyst",
            "status": "pending",
            "bonus_cents": 0,
            "reported_by_id": candidate.id,
        }
        fields.update(overrides)
        offer = Offer(**fields)
        db_session.add(offer)
        await db_session.commit()
        return offer

    return _make_offer
