"""
Stripe payout gateway.

Transfers to Stripe Connect accounts and payment intents for bookings,
using the async methods of the stripe SDK.
"""

from typing import Any

import stripe
from loguru import logger

from monet.models.user import User
from monet.utils.exceptions import PaymentProviderError
from monet.utils.formatters import format_cents


class StripePayoutGateway:
    """PayoutGateway backed by Stripe Connect."""

    def __init__(
        self,
        api_key: str,
        currency: str = "usd",
    ) -> None:
        """
        Initialize Stripe gateway.

        Args:
            api_key: Stripe secret key
            currency: Lowercase ISO currency for all transfers
        """
        self.api_key = api_key
        self.currency = currency

    async def payout_destination(self, user: User) -> str | None:
        """
        Get the Connect account id that receives the user's payouts.

        Args:
            user: Recipient user

        Returns:
            Stripe account id or None if onboarding is incomplete
        """
        return user.stripe_account_id or None

    async def has_payout_destination(self, user: User) -> bool:
        """Check whether the user can receive funds."""
        return await self.payout_destination(user) is not None

    async def transfer(
        self,
        destination_id: str,
        amount_cents: int,
        metadata: dict[str, str],
        idempotency_key: str | None = None,
    ) -> str:
        """
        Create a transfer to a connected account.

        Args:
            destination_id: Stripe account id
            amount_cents: Amount in cents, must be positive
            metadata: String metadata attached to the transfer
            idempotency_key: Provider-side dedup key for retries

        Returns:
            Stripe transfer id

        Raises:
            PaymentProviderError: If Stripe rejects the transfer
        """
        if amount_cents <= 0:
            raise PaymentProviderError("Transfer amount must be positive")

        params: dict[str, Any] = {
            "amount": amount_cents,
            "currency": self.currency,
            "destination": destination_id,
            "metadata": metadata,
            "api_key": self.api_key,
        }
        if idempotency_key:
            params["idempotency_key"] = idempotency_key

        try:
            transfer = await stripe.Transfer.create_async(**params)
        except stripe.StripeError as e:
            logger.error(
                "Stripe transfer failed",
                extra={
                    "destination": destination_id,
                    "amount_cents": amount_cents,
                    "stripe_code": e.code,
                    "error": str(e),
                },
            )
            raise PaymentProviderError(
                e.user_message or str(e), provider_code=e.code
            ) from e

        logger.info(
            f"Stripe transfer created: {format_cents(amount_cents)}",
            extra={
                "transfer_id": transfer.id,
                "destination": destination_id,
                "amount_cents": amount_cents,
                "type": metadata.get("type"),
            },
        )
        return transfer.id

    async def create_payment_intent(
        self,
        amount_cents: int,
        metadata: dict[str, str],
        description: str | None = None,
    ) -> str:
        """
        Create a payment intent charging the candidate.

        Args:
            amount_cents: Amount in cents
            metadata: String metadata
            description: Statement description

        Returns:
            PaymentIntent id

        Raises:
            PaymentProviderError: If Stripe rejects the request
        """
        params: dict[str, Any] = {
            "amount": amount_cents,
            "currency": self.currency,
            "metadata": metadata,
            "api_key": self.api_key,
        }
        if description:
            params["description"] = description

        try:
            intent = await stripe.PaymentIntent.create_async(**params)
        except stripe.StripeError as e:
            logger.error(
                "Stripe payment intent failed",
                extra={
                    "amount_cents": amount_cents,
                    "stripe_code": e.code,
                    "error": str(e),
                },
            )
            raise PaymentProviderError(
                e.user_message or str(e), provider_code=e.code
            ) from e

        return intent.id
