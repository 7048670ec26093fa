"""
Payout gateway contract.

The settlement services only talk to money movement through this
protocol; StripePayoutGateway is the production implementation.
"""

from typing import Protocol

from monet.models.user import User


class PayoutGateway(Protocol):
    """External payment processor used for payouts and charges."""

    async def payout_destination(self, user: User) -> str | None:
        """Return the user's payout destination id, or None."""
        ...

    async def has_payout_destination(self, user: User) -> bool:
        """Check whether the user can receive funds."""
        ...

    async def transfer(
        self,
        destination_id: str,
        amount_cents: int,
        metadata: dict[str, str],
        idempotency_key: str | None = None,
    ) -> str:
        """Move amount_cents to destination_id and return the transfer id.

        Raises PaymentProviderError on rejection.
        """
        ...

    async def create_payment_intent(
        self,
        amount_cents: int,
        metadata: dict[str, str],
        description: str | None = None,
    ) -> str:
        """Create a charge for amount_cents and return its id."""
        ...
