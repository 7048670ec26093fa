"""
Business constants.

Single source of truth for the money rules of the marketplace.
These are product decisions, not deployment settings.
"""

from decimal import Decimal


# Platform fee charged on the post-referral amount of a session and on
# offer bonuses.
PLATFORM_FEE_RATE = Decimal("0.05")

# Referral program: level L earns REFERRAL_BASE_RATE * REFERRAL_LEVEL_DECAY ** (L - 1)
# of the gross session amount (10%, 1%, 0.1%, ...).
REFERRAL_BASE_RATE = Decimal("0.10")
REFERRAL_LEVEL_DECAY = Decimal("0.10")

# Hard cap on referral chain depth. The referred-by graph is not acyclic by
# construction, so the walk must always stop here.
REFERRAL_MAX_DEPTH = 10

# Session booking
DEFAULT_SESSION_DURATION_MINUTES = 30
MIN_BOOKING_LEAD_TIME_HOURS = 2
UNKNOWN_FIRM_ID = "unknown"

# Feedback
FEEDBACK_MIN_LENGTH = 20
FEEDBACK_MAX_LENGTH = 500
INTERNAL_NOTES_MAX_LENGTH = 1000
RATING_MIN = 1
RATING_MAX = 5

# Default reasons
DECLINED_BY_PROFESSIONAL_REASON = "Declined by professional"
PAYMENT_FAILED_REASON = "Payment failed"
