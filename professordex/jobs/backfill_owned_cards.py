"""
Rebuild owned-card index rows and master sets from collection entries.

Run once for users whose collections predate the owned-card index, or
after repairing ownership data by hand.
"""

import argparse
import asyncio
import logging

from professordex.db.database import async_session_factory
from professordex.db.operations import get_variant_membership
from professordex.models.session import UserSession
from professordex.services.ownership import BackfillResult, OwnershipReconciler

logger = logging.getLogger(__name__)


async def run_backfill(user_ids: list[str]) -> dict[str, BackfillResult]:
    """
    Backfill each user in its own transaction.

    A failing user is logged and skipped; users already committed stay
    committed.

    Returns:
        Dict mapping user id to what its backfill touched
    """
    results: dict[str, BackfillResult] = {}

    for user_id in user_ids:
        logger.info("Backfilling owned cards for %s...", user_id)
        try:
            async with async_session_factory() as session:
                membership = await get_variant_membership(session)
                reconciler = OwnershipReconciler(session, UserSession(user_id), membership)
                results[user_id] = await reconciler.backfill()
                await session.commit()
        except Exception as e:
            logger.error("Backfill failed for %s: %s", user_id, e)
            continue

        logger.info("Backfilled %d entries for %s", results[user_id].entries, user_id)

    return results


def main() -> None:
    """CLI entry point for running the backfill."""
    parser = argparse.ArgumentParser(description="Backfill owned cards from collections")
    parser.add_argument("user_ids", nargs="+", help="User ids to backfill")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_backfill(args.user_ids))


if __name__ == "__main__":
    main()
