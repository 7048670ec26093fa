"""
Offer service.

Reporting, declining and listing offers. Acceptance moves money and lives
in OfferSettlementService.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from monet.models.enums import OfferStatus, UserRole
from monet.models.offer import Offer
from monet.repositories.chat_session_repository import ChatSessionRepository
from monet.repositories.offer_repository import OfferRepository
from monet.repositories.user_repository import UserRepository
from monet.schemas.requests import ReportOfferRequest
from monet.services.lifecycle.state_machine import ensure_offer_transition
from monet.utils.datetime_utils import utc_now
from monet.utils.exceptions import NotFoundError, UnauthorizedError, ValidationError


@dataclass(frozen=True)
class OfferReport:
    """A newly reported offer."""

    offer: Offer
    # Reported by someone other than the candidate
    requires_confirmation: bool

    def to_dict(self) -> dict[str, Any]:
        """Serialize for responses."""
        return {
            "offer_id": self.offer.id,
            "status": self.offer.status,
            "first_chat_pro_id": self.offer.first_chat_pro_id,
            "bonus_cents": self.offer.bonus_cents,
            "requires_confirmation": self.requires_confirmation,
        }


class OfferService:
    """Offer reporting and candidate decisions that move no money."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize offer service.

        Args:
            session: Database session
            clock: Current time source
        """
        self.session = session
        self.offer_repo = OfferRepository(session)
        self.user_repo = UserRepository(session)
        self.session_repo = ChatSessionRepository(session)
        self.clock = clock

    async def report_offer(self, request: ReportOfferRequest) -> OfferReport:
        """
        Record a job offer and attribute it to the first-chat professional.

        The first-chat professional and bonus are captured here from the
        candidate's earliest held session at the firm and never change.

        Args:
            request: Validated report request

        Returns:
            OfferReport

        Raises:
            ValidationError: Candidate or reporter is invalid
        """
        candidate = await self.user_repo.get_by_id(request.candidate_id)
        if candidate is None or candidate.role != UserRole.CANDIDATE:
            raise ValidationError(
                "Invalid candidate", candidate_id=request.candidate_id
            )

        reporter = await self.user_repo.get_by_id(request.reported_by)
        if reporter is None:
            raise ValidationError("Invalid reporter", reported_by=request.reported_by)

        first_chat = await self.session_repo.find_first_chat_at_firm(
            request.candidate_id, request.firm_id
        )

        offer = await self.offer_repo.create(
            candidate_id=request.candidate_id,
            firm_id=request.firm_id,
            first_chat_pro_id=first_chat.professional_id if first_chat else None,
            position=request.position,
            salary_cents=request.salary_cents,
            equity=request.equity,
            status=OfferStatus.PENDING.value,
            bonus_cents=first_chat.offer_bonus_cents if first_chat else 0,
            reported_by_id=request.reported_by,
        )
        await self.session.commit()

        logger.info(
            "Offer reported",
            extra={
                "offer_id": offer.id,
                "candidate_id": offer.candidate_id,
                "firm_id": offer.firm_id,
                "first_chat_pro_id": offer.first_chat_pro_id,
                "bonus_cents": offer.bonus_cents,
                "reported_by": request.reported_by,
            },
        )
        return OfferReport(
            offer=offer,
            requires_confirmation=request.reported_by != request.candidate_id,
        )

    async def decline_offer(self, offer_id: int, candidate_id: int) -> Offer:
        """
        Decline a pending offer.

        Args:
            offer_id: Offer ID
            candidate_id: Acting candidate

        Returns:
            Declined offer

        Raises:
            NotFoundError: Offer does not exist
            UnauthorizedError: Actor is not the offer's candidate
            InvalidStateError: Offer is not pending
        """
        offer = await self.offer_repo.get_by_id_for_update(offer_id)
        if offer is None:
            raise NotFoundError("Offer not found", offer_id=offer_id)

        if offer.candidate_id != candidate_id:
            raise UnauthorizedError("Unauthorized - not your offer")

        ensure_offer_transition(offer.status, OfferStatus.DECLINED)

        offer.status = OfferStatus.DECLINED.value
        offer.declined_at = self.clock()
        await self.session.commit()

        logger.info(
            "Offer declined",
            extra={"offer_id": offer.id, "candidate_id": candidate_id},
        )
        return offer

    async def list_offers(
        self,
        candidate_id: int | None = None,
        professional_id: int | None = None,
    ) -> list[Offer]:
        """
        List a candidate's offers or a first-chat professional's offers.

        Raises:
            ValidationError: Neither id given
        """
        if candidate_id is not None:
            return await self.offer_repo.find_for_candidate(candidate_id)
        if professional_id is not None:
            return await self.offer_repo.find_for_first_chat_pro(professional_id)
        raise ValidationError(
            "Either candidate_id or professional_id is required"
        )
