"""
Offer settlement.

Accepting an offer is committed before any money moves. The first-chat
professional's bonus (minus the platform fee) is then transferred; if
that fails the offer stays accepted with bonus_paid_at unset and the
payout can be retried later. At most one transfer per offer is in flight
at any time.
"""

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from monet.config.business_constants import PLATFORM_FEE_RATE
from monet.models.enums import OfferStatus, TransferType
from monet.models.offer import Offer
from monet.repositories.offer_repository import OfferRepository
from monet.repositories.user_repository import UserRepository
from monet.schemas.requests import AcceptOfferRequest
from monet.services.lifecycle.state_machine import ensure_offer_transition
from monet.services.payments.base import PayoutGateway
from monet.services.payout.money import net_of_platform_fee
from monet.services.settlement.results import OfferAcceptanceResult
from monet.utils.datetime_utils import utc_now
from monet.utils.exceptions import (
    InvalidStateError,
    NotFoundError,
    PaymentProcessingFailed,
    PaymentProviderError,
    PayoutDestinationMissing,
    UnauthorizedError,
)


class OfferSettlementService:
    """Accepts offers and pays the first-chat bonus."""

    def __init__(
        self,
        session: AsyncSession,
        payout_gateway: PayoutGateway,
        fee_rate: Decimal | float | str = PLATFORM_FEE_RATE,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize offer settlement service.

        Args:
            session: Database session
            payout_gateway: Money movement
            fee_rate: Platform fee rate applied to the bonus
            clock: Current time source
        """
        self.session = session
        self.offer_repo = OfferRepository(session)
        self.user_repo = UserRepository(session)
        self.payout_gateway = payout_gateway
        self.fee_rate = fee_rate
        self.clock = clock

    async def accept_offer(
        self, request: AcceptOfferRequest
    ) -> OfferAcceptanceResult:
        """
        Accept a pending offer and try to pay the first-chat bonus.

        A failed bonus transfer does not fail the acceptance.

        Args:
            request: Validated accept request

        Returns:
            OfferAcceptanceResult

        Raises:
            NotFoundError: Offer does not exist
            UnauthorizedError: Actor is not the offer's candidate
            InvalidStateError: Offer is not pending
        """
        offer = await self.offer_repo.get_by_id_for_update(request.offer_id)
        if offer is None:
            raise NotFoundError("Offer not found", offer_id=request.offer_id)

        if offer.candidate_id != request.candidate_id:
            raise UnauthorizedError("Unauthorized - not your offer")

        ensure_offer_transition(offer.status, OfferStatus.ACCEPTED)

        offer.status = OfferStatus.ACCEPTED.value
        offer.accepted_at = self.clock()
        offer.confirmed_by_id = request.candidate_id
        await self.session.commit()

        logger.info(
            "Offer accepted",
            extra={
                "offer_id": offer.id,
                "candidate_id": offer.candidate_id,
                "first_chat_pro_id": offer.first_chat_pro_id,
                "bonus_cents": offer.bonus_cents,
            },
        )

        if not _bonus_owed(offer):
            return OfferAcceptanceResult(
                offer_id=offer.id,
                bonus_paid=False,
                bonus_cents=offer.bonus_cents,
                reason="no_bonus",
            )

        professional = await self.user_repo.get_by_id(offer.first_chat_pro_id)
        destination = (
            await self.payout_gateway.payout_destination(professional)
            if professional is not None
            else None
        )
        if destination is None:
            logger.warning(
                "First-chat professional has no payout destination, "
                "bonus left unpaid",
                extra={
                    "offer_id": offer.id,
                    "professional_id": offer.first_chat_pro_id,
                },
            )
            return OfferAcceptanceResult(
                offer_id=offer.id,
                bonus_paid=False,
                bonus_cents=offer.bonus_cents,
                reason="payout_destination_missing",
            )

        offer_id = offer.id
        bonus_cents = offer.bonus_cents
        try:
            result = await self._pay_bonus(offer, destination)
        except PaymentProviderError:
            return OfferAcceptanceResult(
                offer_id=offer_id,
                bonus_paid=False,
                bonus_cents=bonus_cents,
                reason="transfer_failed",
            )

        if result is None:
            return OfferAcceptanceResult(
                offer_id=offer_id,
                bonus_paid=False,
                bonus_cents=bonus_cents,
                reason="payout_in_progress",
            )
        return result

    async def retry_bonus_payout(self, offer_id: int) -> OfferAcceptanceResult:
        """
        Retry the bonus transfer of an accepted, unpaid offer.

        Args:
            offer_id: Offer ID

        Returns:
            OfferAcceptanceResult with bonus_paid True

        Raises:
            NotFoundError: Offer does not exist
            InvalidStateError: Offer not accepted, no bonus owed, already paid
                or a payout already in progress
            PayoutDestinationMissing: Professional cannot be paid
            PaymentProcessingFailed: Transfer rejected again
        """
        offer = await self.offer_repo.get_by_id_for_update(offer_id)
        if offer is None:
            raise NotFoundError("Offer not found", offer_id=offer_id)

        if offer.status != OfferStatus.ACCEPTED:
            raise InvalidStateError(
                "Offer is not accepted", offer_id=offer_id, current=offer.status
            )
        if offer.is_bonus_paid:
            raise InvalidStateError("Offer bonus already paid", offer_id=offer_id)
        if not _bonus_owed(offer):
            raise InvalidStateError("No bonus owed for offer", offer_id=offer_id)
        if offer.is_bonus_payout_in_flight:
            raise InvalidStateError(
                "Offer bonus payout already in progress", offer_id=offer_id
            )

        professional = await self.user_repo.get_by_id(offer.first_chat_pro_id)
        destination = (
            await self.payout_gateway.payout_destination(professional)
            if professional is not None
            else None
        )
        if destination is None:
            raise PayoutDestinationMissing(
                "First-chat professional has no payout destination",
                offer_id=offer_id,
                professional_id=offer.first_chat_pro_id,
            )

        try:
            result = await self._pay_bonus(offer, destination)
        except PaymentProviderError as e:
            raise PaymentProcessingFailed(
                "Offer bonus transfer failed", offer_id=offer_id
            ) from e

        if result is None:
            raise InvalidStateError(
                "Offer bonus payout already in progress", offer_id=offer_id
            )
        return result

    async def find_unpaid_bonuses(self, limit: int = 100) -> list[Offer]:
        """
        List accepted offers whose bonus is owed but unpaid.

        Args:
            limit: Max number of offers

        Returns:
            Offers ordered by acceptance time
        """
        return await self.offer_repo.find_unpaid_accepted(limit=limit)

    async def _pay_bonus(
        self, offer: Offer, destination: str
    ) -> OfferAcceptanceResult | None:
        """
        Transfer the bonus net of fee and record it.

        Returns None when another attempt already holds the payout claim.
        A provider rejection releases the claim so the bonus can be retried;
        any other failure keeps it, since the transfer may have gone through.
        """
        offer_id = offer.id
        payout_cents = net_of_platform_fee(offer.bonus_cents, self.fee_rate)

        attempt = await self.offer_repo.claim_bonus_payout(offer_id, self.clock())
        if attempt is None:
            await self.session.rollback()
            logger.info(
                "Offer bonus payout already in progress, skipping",
                extra={"offer_id": offer_id},
            )
            return None
        await self.session.commit()
        await self.session.refresh(offer)

        try:
            transfer_id = await self.payout_gateway.transfer(
                destination,
                payout_cents,
                metadata={
                    "offer_id": str(offer_id),
                    "type": TransferType.OFFER_BONUS.value,
                    "professional_id": str(offer.first_chat_pro_id),
                    "candidate_id": str(offer.candidate_id),
                },
                idempotency_key=(
                    f"offer-{offer_id}-{TransferType.OFFER_BONUS.value}-{attempt}"
                ),
            )
        except PaymentProviderError as e:
            logger.warning(
                "Offer bonus transfer failed, left for retry",
                extra={
                    "offer_id": offer_id,
                    "amount_cents": payout_cents,
                    "attempt": attempt,
                    "provider_code": e.provider_code,
                    "error": str(e),
                },
            )
            await self._release_claim(offer)
            raise
        except Exception as e:
            logger.error(
                "Offer bonus transfer outcome unknown, reconcile manually",
                extra={
                    "offer_id": offer_id,
                    "attempt": attempt,
                    "error": str(e),
                },
            )
            raise

        offer.transfer_id = transfer_id
        offer.bonus_paid_at = self.clock()
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.error(
                "Offer bonus transferred but not recorded, reconcile manually",
                extra={"offer_id": offer_id, "transfer_id": transfer_id},
            )
            raise

        logger.info(
            "Offer bonus paid",
            extra={
                "offer_id": offer_id,
                "professional_id": offer.first_chat_pro_id,
                "payout_cents": payout_cents,
                "transfer_id": transfer_id,
            },
        )
        return OfferAcceptanceResult(
            offer_id=offer_id,
            bonus_paid=True,
            bonus_cents=offer.bonus_cents,
            payout_cents=payout_cents,
            transfer_id=transfer_id,
        )

    async def _release_claim(self, offer: Offer) -> None:
        """Clear the in-flight marker after a rejected transfer."""
        offer_id = offer.id
        try:
            await self.offer_repo.release_bonus_payout_claim(offer_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Offer bonus claim not released, clear it manually",
                extra={"offer_id": offer_id, "error": str(e)},
            )
            return

        await self.session.refresh(offer)


def _bonus_owed(offer: Offer) -> bool:
    return offer.first_chat_pro_id is not None and offer.bonus_cents > 0
