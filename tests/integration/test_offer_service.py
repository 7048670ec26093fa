"""Integration tests for offer reporting, declining and listing."""

from datetime import timedelta

import pytest
import pytest_asyncio

from monet.models.enums import OfferStatus, SessionStatus, UserRole
from monet.schemas import ReportOfferRequest
from monet.services.offers import OfferService
from monet.utils.exceptions import (
    InvalidStateError,
    UnauthorizedError,
    ValidationError,
)


@pytest_asyncio.fixture
async def candidate(make_user):
    """Candidate pledging a $500 offer bonus."""
    return await make_user(UserRole.CANDIDATE, offer_bonus_cents=50000)


@pytest.fixture
def service(db_session, clock):
    """Offer service with a fixed clock."""
    return OfferService(db_session, clock=clock)


def report(candidate, reported_by=None, firm_id="Acme Capital"):
    return ReportOfferRequest(
        candidate_id=candidate.id,
        firm_id=firm_id,
        position="Analyst",
        salary_cents=11000000,
        reported_by=reported_by or candidate.id,
    )


class TestReportOffer:
    """Test offer reporting."""

    @pytest.mark.asyncio
    async def test_first_chat_professional_credited(
        self, service, candidate, make_user, make_chat_session, clock
    ):
        """Earliest held session at the firm wins, with its bonus snapshot."""
        first_pro = await make_user(name="First")
        second_pro = await make_user(name="Second")
        await make_chat_session(
            candidate, first_pro, status=SessionStatus.COMPLETED, offer_bonus_cents=30000
        )
        await make_chat_session(
            candidate,
            second_pro,
            status=SessionStatus.CONFIRMED,
            scheduled_at=clock.return_value + timedelta(days=3),
        )

        result = await service.report_offer(report(candidate))

        assert result.offer.first_chat_pro_id == first_pro.id
        assert result.offer.bonus_cents == 30000
        assert result.offer.status == OfferStatus.PENDING
        assert result.requires_confirmation is False

    @pytest.mark.asyncio
    async def test_cancelled_sessions_do_not_count(
        self, service, candidate, make_user, make_chat_session
    ):
        """Only confirmed or completed sessions make a first chat."""
        pro = await make_user()
        await make_chat_session(candidate, pro, status=SessionStatus.CANCELLED)

        result = await service.report_offer(report(candidate))

        assert result.offer.first_chat_pro_id is None
        assert result.offer.bonus_cents == 0

    @pytest.mark.asyncio
    async def test_other_firm_does_not_count(
        self, service, candidate, make_user, make_chat_session
    ):
        """First chat is per firm."""
        pro = await make_user(company="Other Bank")
        await make_chat_session(candidate, pro)

        result = await service.report_offer(report(candidate))

        assert result.offer.first_chat_pro_id is None

    @pytest.mark.asyncio
    async def test_reported_by_professional(self, service, candidate, make_user):
        """Reports by someone else need the candidate to confirm."""
        pro = await make_user()

        result = await service.report_offer(report(candidate, reported_by=pro.id))

        assert result.requires_confirmation is True
        assert result.to_dict()["requires_confirmation"] is True

    @pytest.mark.asyncio
    async def test_invalid_candidate(self, service, make_user):
        """Offers are reported for candidates only."""
        pro = await make_user()

        with pytest.raises(ValidationError):
            await service.report_offer(report(pro))

    @pytest.mark.asyncio
    async def test_unknown_reporter(self, service, candidate):
        """Reporter must exist."""
        with pytest.raises(ValidationError):
            await service.report_offer(report(candidate, reported_by=777777))


class TestDeclineOffer:
    """Test offer decline."""

    @pytest.mark.asyncio
    async def test_decline(self, service, make_offer, candidate, clock):
        """Pending offers can be declined by their candidate."""
        offer = await make_offer(candidate)

        declined = await service.decline_offer(offer.id, candidate.id)

        assert declined.status == OfferStatus.DECLINED
        assert declined.declined_at == clock.return_value

    @pytest.mark.asyncio
    async def test_decline_by_other(self, service, make_offer, candidate, make_user):
        """Only the candidate decides."""
        offer = await make_offer(candidate)
        other = await make_user(UserRole.CANDIDATE)

        with pytest.raises(UnauthorizedError):
            await service.decline_offer(offer.id, other.id)

    @pytest.mark.asyncio
    async def test_decline_accepted(self, service, make_offer, candidate):
        """Accepted offers are final."""
        offer = await make_offer(candidate, status="accepted")

        with pytest.raises(InvalidStateError):
            await service.decline_offer(offer.id, candidate.id)


class TestListOffers:
    """Test offer listing."""

    @pytest.mark.asyncio
    async def test_by_candidate_and_professional(
        self, service, make_offer, make_user, candidate
    ):
        """Candidates see their offers, professionals the ones crediting them."""
        pro = await make_user()
        credited = await make_offer(candidate, first_chat_pro_id=pro.id)
        await make_offer(candidate)

        assert len(await service.list_offers(candidate_id=candidate.id)) == 2
        assert [o.id for o in await service.list_offers(professional_id=pro.id)] == [
            credited.id
        ]

    @pytest.mark.asyncio
    async def test_requires_a_filter(self, service):
        """One of the two ids is required."""
        with pytest.raises(ValidationError):
            await service.list_offers()
