"""
Services package.

Business logic for the marketplace core:
- payout: money utilities, referral chain walk, payout breakdown
- payments / meetings / calendar: external provider adapters
- lifecycle: session booking and status transitions
- settlement: session feedback and offer acceptance settlement
- offers: offer reporting
"""
