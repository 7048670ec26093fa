"""Payment processor adapters."""

from monet.services.payments.base import PayoutGateway
from monet.services.payments.stripe_gateway import StripePayoutGateway


__all__ = ["PayoutGateway", "StripePayoutGateway"]
