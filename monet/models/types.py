"""
Standard type definitions for database models.

Money is stored as integer cents. Never use floating point or DECIMAL
currency columns for amounts.
"""

from sqlalchemy import BigInteger, Integer, String

# Amount in the smallest currency unit (cents)
CentsType = BigInteger().with_variant(Integer(), "sqlite")

# Status columns hold StrEnum values
StatusType = String(20)

# External provider identifiers (Stripe, Zoom, Google)
ProviderIdType = String(255)
