"""
Monet marketplace core.

Session lifecycle, referral payouts and settlement for paid coffee chats
between candidates and professionals.
"""

__version__ = "1.0.0"
