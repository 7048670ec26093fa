#!/usr/bin/env python3
"""
Retry unpaid offer bonuses.

Finds accepted offers whose first-chat bonus transfer failed or was never
attempted, and retries each one. Offers that fail again stay unpaid and
are reported.

Usage:
    python scripts/retry_offer_bonuses.py --dry-run   # List offers only
    python scripts/retry_offer_bonuses.py             # Retry transfers
    python scripts/retry_offer_bonuses.py --limit 20
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from monet.config.settings import settings
from monet.initialization import ServiceContainer
from monet.utils.exceptions import MonetError
from monet.utils.formatters import format_cents


# Configure logger
logger.remove()
logger.add(sys.stderr, level="INFO", format="{time:HH:mm:ss} | {level} | {message}")


async def retry_offer_bonuses(dry_run: bool = True, limit: int = 100) -> int:
    """
    Retry bonus transfers of accepted, unpaid offers.

    Args:
        dry_run: Only list the offers
        limit: Max offers to process

    Returns:
        Number of offers still unpaid
    """
    async with ServiceContainer(settings) as container:
        async with container.session_scope() as services:
            offers = await services.offer_settlement.find_unpaid_bonuses(limit)

            if not offers:
                logger.info("No unpaid offer bonuses")
                return 0

            logger.info(f"Found {len(offers)} unpaid offer bonus(es)")
            for offer in offers:
                logger.info(
                    f"  offer #{offer.id}: {format_cents(offer.bonus_cents)} "
                    f"to professional #{offer.first_chat_pro_id} "
                    f"(attempts: {offer.bonus_payout_attempts})"
                )

            if dry_run:
                logger.warning("DRY RUN - no transfers made")
                return len(offers)

            failed = 0
            for offer in offers:
                try:
                    result = await services.offer_settlement.retry_bonus_payout(
                        offer.id
                    )
                except MonetError as e:
                    failed += 1
                    logger.error(f"Offer #{offer.id}: {e.message}")
                    continue

                logger.success(
                    f"Offer #{offer.id}: paid {format_cents(result.payout_cents)} "
                    f"(transfer {result.transfer_id})"
                )

            logger.info(f"Done: {len(offers) - failed} paid, {failed} still unpaid")
            return failed


def main() -> None:
    parser = argparse.ArgumentParser(description="Retry unpaid offer bonuses")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List unpaid offers without transferring",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=100,
        help="Max offers to process (default: 100)",
    )
    args = parser.parse_args()

    unpaid = asyncio.run(retry_offer_bonuses(dry_run=args.dry_run, limit=args.limit))
    sys.exit(1 if unpaid and not args.dry_run else 0)


if __name__ == "__main__":
    main()
