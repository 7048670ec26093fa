"""
Session settlement.

Feedback submission is what completes a session and pays for it:

1. Validate (ownership, status, not yet settled, payout destination).
2. Record the feedback and claim the session in one commit. The claim is
   a compare-and-swap on the session row, so a second submission loses
   even when both pass validation concurrently.
3. Compute the breakdown by walking the referral chain.
4. Pay the professional. If computing or paying fails for any reason
   the feedback is deleted and the session goes back to confirmed, so
   the professional can resubmit.
5. Pay referral bonuses one by one. A failed bonus is logged and skipped;
   it never undoes the professional's payment.
6. Record successful transfer ids and the payout time.
"""

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from monet.config.business_constants import PLATFORM_FEE_RATE, REFERRAL_MAX_DEPTH
from monet.models.chat_session import ChatSession
from monet.models.enums import SessionStatus, TransferType
from monet.models.feedback import ProfessionalFeedback
from monet.models.referral_transfer import ReferralTransfer
from monet.repositories.chat_session_repository import ChatSessionRepository
from monet.repositories.feedback_repository import FeedbackRepository
from monet.repositories.user_repository import UserRepository
from monet.schemas.requests import SubmitFeedbackRequest
from monet.services.payments.base import PayoutGateway
from monet.services.payout.calculator import (
    LevelBonus,
    PayoutBreakdown,
    PayoutCalculator,
)
from monet.services.settlement.results import (
    ReferralPayout,
    SessionSettlementResult,
    SkippedReferral,
)
from monet.utils.datetime_utils import utc_now
from monet.utils.exceptions import (
    DuplicateSettlement,
    InvalidStateError,
    NotFoundError,
    PaymentProcessingFailed,
    PaymentProviderError,
    PayoutDestinationMissing,
    UnauthorizedError,
)


class SessionSettlementService:
    """Settles a confirmed session when the professional submits feedback."""

    def __init__(
        self,
        session: AsyncSession,
        payout_gateway: PayoutGateway,
        fee_rate: Decimal | float | str = PLATFORM_FEE_RATE,
        max_depth: int = REFERRAL_MAX_DEPTH,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize session settlement service.

        Args:
            session: Database session
            payout_gateway: Money movement
            fee_rate: Platform fee rate
            max_depth: Referral levels paid
            clock: Current time source
        """
        self.session = session
        self.session_repo = ChatSessionRepository(session)
        self.feedback_repo = FeedbackRepository(session)
        self.user_repo = UserRepository(session)
        self.payout_gateway = payout_gateway
        self.calculator = PayoutCalculator(
            self.user_repo.get_referrer_id,
            fee_rate=fee_rate,
            max_depth=max_depth,
        )
        self.clock = clock

    async def submit_feedback(
        self, request: SubmitFeedbackRequest
    ) -> SessionSettlementResult:
        """
        Record feedback, complete the session and pay everyone.

        Args:
            request: Validated feedback request

        Returns:
            SessionSettlementResult

        Raises:
            NotFoundError: Session does not exist
            UnauthorizedError: Actor is not the session's professional
            DuplicateSettlement: Feedback already submitted
            InvalidStateError: Session is not confirmed
            PayoutDestinationMissing: Professional cannot be paid
            PaymentProcessingFailed: Payout computation or professional payment
                failed; the session is back to confirmed
        """
        parties = await self.session_repo.find_with_parties(request.session_id)
        if parties is None:
            raise NotFoundError("Session not found", session_id=request.session_id)

        chat = parties.session
        professional = parties.professional

        if chat.professional_id != request.professional_id:
            raise UnauthorizedError("Unauthorized - not your session")

        if chat.feedback_submitted_at is not None:
            raise DuplicateSettlement(
                "Feedback already submitted", session_id=chat.id
            )

        if chat.status != SessionStatus.CONFIRMED:
            raise InvalidStateError(
                "Session must be confirmed to submit feedback",
                session_id=chat.id,
                current=chat.status,
            )

        destination = await self.payout_gateway.payout_destination(professional)
        if destination is None:
            raise PayoutDestinationMissing(
                "Professional has no payout destination",
                professional_id=professional.id,
            )

        session_id = chat.id
        feedback = await self._record_feedback_and_claim(chat, request)
        await self.session.refresh(chat)

        try:
            breakdown = await self.calculator.calculate(
                chat.rate_cents, chat.referrer_pro_id
            )
        except Exception as e:
            logger.error(
                "Payout computation failed, settlement aborted",
                extra={"session_id": session_id, "error": repr(e)},
            )
            await self._roll_back_claim(chat, feedback)
            raise PaymentProcessingFailed(
                "Payout could not be computed; no payment was made",
                session_id=session_id,
            ) from e

        primary_transfer_id = await self._pay_professional(
            chat, feedback, destination, breakdown
        )

        result = SessionSettlementResult(
            session_id=chat.id,
            feedback_id=feedback.id,
            breakdown=breakdown,
            primary_transfer_id=primary_transfer_id,
            candidate_offer_bonus_cents=chat.offer_bonus_cents,
        )

        for bonus in breakdown.per_level_bonuses:
            await self._pay_referral(chat, feedback, bonus, result)

        await self._record_transfers(chat, result)

        logger.info(
            "Session settled",
            extra={
                "session_id": chat.id,
                "professional_id": professional.id,
                "gross_cents": breakdown.gross_cents,
                "recipient_net_cents": breakdown.recipient_net_cents,
                "referral_payouts": len(result.referral_payouts),
                "skipped_referrals": len(result.skipped_referrals),
            },
        )
        return result

    async def _record_feedback_and_claim(
        self, chat: ChatSession, request: SubmitFeedbackRequest
    ) -> ProfessionalFeedback:
        """Insert feedback and win the completion claim, or raise duplicate."""
        session_id = chat.id
        try:
            feedback = await self.feedback_repo.create(
                session_id=chat.id,
                professional_id=chat.professional_id,
                candidate_id=chat.candidate_id,
                cultural_fit_rating=request.cultural_fit_rating,
                interest_rating=request.interest_rating,
                technical_rating=request.technical_rating,
                feedback=request.feedback,
                internal_notes=request.internal_notes,
            )
            claimed = await self.session_repo.claim_for_settlement(
                session_id, self.clock()
            )
            if not claimed:
                await self.session.rollback()
                raise DuplicateSettlement(
                    "Feedback already submitted", session_id=session_id
                )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateSettlement(
                "Feedback already submitted", session_id=session_id
            ) from e

        return feedback

    async def _pay_professional(
        self,
        chat: ChatSession,
        feedback: ProfessionalFeedback,
        destination: str,
        breakdown: PayoutBreakdown,
    ) -> str | None:
        """Transfer the professional's net; undo the claim on failure."""
        session_id = chat.id
        if breakdown.recipient_net_cents <= 0:
            logger.info(
                "Nothing to pay professional, skipping transfer",
                extra={"session_id": chat.id},
            )
            return None

        try:
            return await self.payout_gateway.transfer(
                destination,
                breakdown.recipient_net_cents,
                metadata={
                    "session_id": str(chat.id),
                    "type": TransferType.SESSION_FEE.value,
                    "professional_id": str(chat.professional_id),
                },
                idempotency_key=_idempotency_key(
                    chat, feedback, TransferType.SESSION_FEE
                ),
            )
        except Exception as e:
            logger.error(
                "Professional payout failed, settlement rolled back",
                extra={
                    "session_id": session_id,
                    "amount_cents": breakdown.recipient_net_cents,
                    "provider_code": getattr(e, "provider_code", None),
                    "error": repr(e),
                },
            )
            await self._roll_back_claim(chat, feedback)
            raise PaymentProcessingFailed(
                "Payment processing failed. Please try again.",
                session_id=session_id,
            ) from e

    async def _pay_referral(
        self,
        chat: ChatSession,
        feedback: ProfessionalFeedback,
        bonus: LevelBonus,
        result: SessionSettlementResult,
    ) -> None:
        """Transfer one referral bonus; failures are logged and skipped."""
        referrer = await self.user_repo.get_by_id(bonus.referrer_id)
        destination = (
            await self.payout_gateway.payout_destination(referrer)
            if referrer is not None
            else None
        )

        if destination is None:
            logger.warning(
                "Referrer has no payout destination, bonus skipped",
                extra={
                    "session_id": chat.id,
                    "referrer_id": bonus.referrer_id,
                    "level": bonus.level,
                },
            )
            result.skipped_referrals.append(
                _skipped(bonus, "payout_destination_missing")
            )
            return

        try:
            transfer_id = await self.payout_gateway.transfer(
                destination,
                bonus.bonus_cents,
                metadata={
                    "session_id": str(chat.id),
                    "type": TransferType.REFERRAL_BONUS.value,
                    "referrer_id": str(bonus.referrer_id),
                    "level": str(bonus.level),
                },
                idempotency_key=_idempotency_key(
                    chat, feedback, TransferType.REFERRAL_BONUS, bonus.level
                ),
            )
        except PaymentProviderError as e:
            logger.warning(
                "Referral payout failed, continuing with next level",
                extra={
                    "session_id": chat.id,
                    "referrer_id": bonus.referrer_id,
                    "level": bonus.level,
                    "amount_cents": bonus.bonus_cents,
                    "provider_code": e.provider_code,
                    "error": str(e),
                },
            )
            result.skipped_referrals.append(_skipped(bonus, "transfer_failed"))
            return

        result.referral_payouts.append(
            ReferralPayout(
                referrer_id=bonus.referrer_id,
                level=bonus.level,
                bonus_cents=bonus.bonus_cents,
                transfer_id=transfer_id,
            )
        )

    async def _record_transfers(
        self, chat: ChatSession, result: SessionSettlementResult
    ) -> None:
        """Persist transfer ids; money has moved, so failures need an operator."""
        session_id = chat.id
        paid_at = self.clock()

        for payout in result.referral_payouts:
            self.session.add(
                ReferralTransfer(
                    session_id=chat.id,
                    referrer_pro_id=payout.referrer_id,
                    level=payout.level,
                    bonus_cents=payout.bonus_cents,
                    transfer_id=payout.transfer_id,
                    paid_at=paid_at,
                )
            )

        chat.transfer_ids = list(result.transfer_ids)
        chat.paid_at = paid_at

        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.error(
                "Transfers executed but not recorded, reconcile manually",
                extra={
                    "session_id": session_id,
                    "transfer_ids": result.transfer_ids,
                },
            )
            raise

        result.paid_at = paid_at

    async def _roll_back_claim(
        self, chat: ChatSession, feedback: ProfessionalFeedback
    ) -> None:
        """Delete the feedback and return the session to confirmed."""
        session_id = chat.id
        try:
            # Clear a transaction aborted by the failed step
            await self.session.rollback()
            await self.session.delete(feedback)
            await self.session_repo.release_settlement_claim(session_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Settlement rollback failed, session needs manual repair",
                extra={"session_id": session_id, "error": str(e)},
            )
            return

        await self.session.refresh(chat)
        logger.info(
            "Settlement rolled back, feedback can be resubmitted",
            extra={"session_id": session_id},
        )


def _idempotency_key(
    chat: ChatSession,
    feedback: ProfessionalFeedback,
    transfer_type: TransferType,
    level: int | None = None,
) -> str:
    # Feedback id changes on resubmission, so a retry is a new request
    key = f"session-{chat.id}-feedback-{feedback.id}-{transfer_type.value}"
    if level is not None:
        key = f"{key}-{level}"
    return key


def _skipped(bonus: LevelBonus, reason: str) -> SkippedReferral:
    return SkippedReferral(
        referrer_id=bonus.referrer_id,
        level=bonus.level,
        bonus_cents=bonus.bonus_cents,
        reason=reason,
    )
