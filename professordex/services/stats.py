"""
Collection statistics.

Counts shown on the dashboard, on a collection page and on a master-set
page. Everything here works on rows already loaded by the caller; nothing
queries the store on its own except build_dashboard.
"""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from professordex.db.operations import (
    count_completed_master_sets,
    count_decks,
    count_owned_cards,
    list_owned_cards,
)
from professordex.models.card import Card
from professordex.models.db import OwnedCardDB
from professordex.models.ownership import OwnershipEntry, VariantMembership
from professordex.models.session import UserSession
from professordex.services.variants import ALL_VARIANTS, EMPTY_MEMBERSHIP, classify, ordered

# Symbol shown next to each rarity; anything unlisted gets DEFAULT_RARITY_SYMBOL
RARITY_SYMBOLS: dict[str, str] = {
    "Common": "●",
    "Uncommon": "◆",
    "Rare": "★",
    "Double Rare": "★★",
    "Ultra Rare": "☆☆",
    "Illustration Rare": "★",
    "Special Illustration Rare": "★★",
    "Hyper Rare": "★",
}
DEFAULT_RARITY_SYMBOL = "•"

SUPERTYPES: tuple[str, ...] = ("Pokémon", "Trainer", "Energy")


@dataclass
class RarityCount:
    rarity: str
    symbol: str
    count: int


@dataclass
class DashboardStats:
    """Headline numbers for a user's dashboard."""

    total_cards_owned: int
    total_decks: int
    master_sets_completed: int
    by_type: dict[str, int] = field(default_factory=dict)
    by_rarity: list[RarityCount] = field(default_factory=list)


@dataclass
class VariantStat:
    variant: str
    owned: int
    total: int


def type_counts(rows: Iterable[OwnedCardDB]) -> dict[str, int]:
    """Owned cards per supertype. Every supertype is present."""
    counts = dict.fromkeys(SUPERTYPES, 0)
    for row in rows:
        if row.owned and row.supertype in counts:
            counts[row.supertype] += 1
    return counts


def rarity_counts(rows: Iterable[OwnedCardDB]) -> list[RarityCount]:
    """Owned cards per rarity, in first-seen order."""
    counter: Counter[str] = Counter(row.rarity or "Unknown" for row in rows if row.owned)
    return [
        RarityCount(rarity, RARITY_SYMBOLS.get(rarity, DEFAULT_RARITY_SYMBOL), count)
        for rarity, count in counter.items()
    ]


async def build_dashboard(session: AsyncSession, user: UserSession) -> DashboardStats:
    """Gather the dashboard counters for a user."""
    rows = await list_owned_cards(session, user.user_id, owned_only=True)
    return DashboardStats(
        total_cards_owned=await count_owned_cards(session, user.user_id),
        total_decks=await count_decks(session, user.user_id),
        master_sets_completed=await count_completed_master_sets(session, user.user_id),
        by_type=type_counts(rows),
        by_rarity=rarity_counts(rows),
    )


def collection_variant_totals(entries: Iterable[OwnershipEntry]) -> dict[str, int]:
    """
    Number of entries owning each variant.

    Only variants owned at least once appear, in display order.
    """
    counter: Counter[str] = Counter()
    for entry in entries:
        counter.update(variant for variant, owned in entry.owned.items() if owned is True)
    return {variant: counter[variant] for variant in ordered(counter)}


def owned_variant_cards(
    entries: Iterable[OwnershipEntry], membership: VariantMembership = EMPTY_MEMBERSHIP
) -> list[tuple[Card, str]]:
    """
    One (card, variant) pair per owned variant, for the "owned" gallery.

    Only variants the card still carries are listed.
    """
    pairs = []
    for entry in entries:
        for variant in ordered(classify(entry.card, membership)):
            if entry.owns(variant):
                pairs.append((entry.card, variant))
    return pairs


def set_variant_stats(
    set_cards: Iterable[Card],
    entries: Iterable[OwnershipEntry],
    membership: VariantMembership = EMPTY_MEMBERSHIP,
) -> list[VariantStat]:
    """
    Owned and total counts per variant for one set.

    Totals count set cards carrying the variant; variants no card in the set
    carries are left out.
    """
    totals: Counter[str] = Counter()
    for card in set_cards:
        totals.update(classify(card, membership))

    owned: Counter[str] = Counter()
    for entry in entries:
        owned.update(variant for variant, flag in entry.owned.items() if flag is True)

    return [
        VariantStat(variant=variant, owned=owned[variant], total=totals[variant])
        for variant in ALL_VARIANTS
        if totals[variant] > 0
    ]
