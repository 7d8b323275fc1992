"""
Load pattern-variant membership lists from a JSON file.

The file maps a pattern variant to the card ids printed with it:

    {"pokeBallPattern": ["sv8pt5-1", ...], "masterBallPattern": [...]}

Lists in the file replace the stored lists; variants missing from the file
are left alone.
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from professordex.db.database import async_session_factory
from professordex.db.operations import set_variant_membership
from professordex.services.variants import PATTERN_VARIANTS

logger = logging.getLogger(__name__)


def read_membership_file(path: Path) -> dict[str, list[str]]:
    """
    Read and check a membership file.

    Raises:
        ValueError: If the file names an unknown variant or a list is malformed
    """
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError("Membership file must contain a JSON object")

    lists: dict[str, list[str]] = {}
    for variant, card_ids in data.items():
        if variant not in PATTERN_VARIANTS:
            raise ValueError(f"Unknown pattern variant: {variant}")
        if not isinstance(card_ids, list) or not all(isinstance(c, str) for c in card_ids):
            raise ValueError(f"Card ids for {variant} must be a list of strings")
        lists[variant] = card_ids
    return lists


async def load_membership(lists: dict[str, list[str]]) -> dict[str, int]:
    """
    Store membership lists in one transaction.

    Returns:
        Dict mapping variant to the number of card ids stored
    """
    counts: dict[str, int] = {}
    async with async_session_factory() as session:
        for variant, card_ids in lists.items():
            row = await set_variant_membership(session, variant, card_ids)
            counts[variant] = len(row.card_ids)
            logger.info("Stored %d cards for %s", counts[variant], variant)
        await session.commit()
    return counts


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Load pattern-variant membership lists")
    parser.add_argument("path", type=Path, help="JSON file of variant -> card ids")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(load_membership(read_membership_file(args.path)))


if __name__ == "__main__":
    main()
