"""
Database CRUD operations.

Provides async functions for reading and merge-writing the per-user rows:
collections and their card entries, master-set entries, the owned-card
index, master-set summaries, decks, and the shared pattern-variant lists.

"Merge" writers create the row when it is missing and otherwise only touch
the columns they are given, so writers updating different columns of the
same row do not clobber each other. Creation uses INSERT ... ON CONFLICT DO
NOTHING, so two requests creating the same row concurrently both proceed
and the later commit wins.
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import case, delete, func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from professordex.models.card import Card
from professordex.models.db import (
    Base,
    CollectionCardDB,
    DeckDB,
    MasterSetCardDB,
    MasterSetSummaryDB,
    OwnedCardDB,
    UserCollectionDB,
    VariantMembershipDB,
)
from professordex.models.deck import Deck, DeckCard
from professordex.models.ownership import MasterSetSummary, OwnershipEntry, VariantMembership


def _dialect_insert(session: AsyncSession) -> Any:
    """The dialect's INSERT construct, which supports ON CONFLICT."""
    if session.get_bind().dialect.name == "postgresql":
        return postgresql_insert
    return sqlite_insert


async def _insert_missing(
    session: AsyncSession, model: type[Base], keys: dict[str, Any], **values: Any
) -> None:
    """
    Create a row unless one with the same unique key already exists.

    Two requests creating the same row at once both get past this: the
    second insert does nothing and that request updates the first one's row.
    """
    insert = _dialect_insert(session)
    await session.execute(
        insert(model).values(**keys, **values).on_conflict_do_nothing(index_elements=list(keys))
    )


# --- Collection Operations ---


async def list_collections(session: AsyncSession, user_id: str) -> list[UserCollectionDB]:
    """Get all of a user's collections, ordered by name."""
    result = await session.execute(
        select(UserCollectionDB)
        .where(UserCollectionDB.user_id == user_id)
        .order_by(UserCollectionDB.name)
    )
    return list(result.scalars().all())


async def get_collection(
    session: AsyncSession, user_id: str, collection_id: str
) -> UserCollectionDB | None:
    """
    Get one of a user's collections.

    Returns None if it does not exist or belongs to another user.
    """
    result = await session.execute(
        select(UserCollectionDB).where(
            UserCollectionDB.id == collection_id,
            UserCollectionDB.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def create_collection(session: AsyncSession, user_id: str, name: str) -> UserCollectionDB:
    """Create a new, empty collection."""
    collection = UserCollectionDB(user_id=user_id, name=name)
    session.add(collection)
    await session.flush()
    return collection


async def rename_collection(
    session: AsyncSession, user_id: str, collection_id: str, name: str
) -> UserCollectionDB | None:
    """Rename a collection. Returns None if not found."""
    collection = await get_collection(session, user_id, collection_id)
    if collection is None:
        return None

    collection.name = name
    await session.flush()
    return collection


async def delete_collection(session: AsyncSession, user_id: str, collection_id: str) -> bool:
    """
    Delete a collection and its card entries.

    Owned-card index rows are left alone; they may still be referenced by
    other collections or master sets.

    Returns True if deleted, False if not found.
    """
    collection = await get_collection(session, user_id, collection_id)
    if collection is None:
        return False

    await session.execute(
        delete(CollectionCardDB).where(CollectionCardDB.collection_id == collection_id)
    )
    await session.delete(collection)
    await session.flush()
    return True


async def collection_card_counts(
    session: AsyncSession, collection_ids: Iterable[str]
) -> dict[str, tuple[int, int]]:
    """
    Count entries per collection.

    Returns:
        Dict mapping collection id to (total entries, entries with quantity > 0)
    """
    ids = list(collection_ids)
    if not ids:
        return {}

    result = await session.execute(
        select(
            CollectionCardDB.collection_id,
            func.count(CollectionCardDB.id),
            func.sum(case((CollectionCardDB.quantity > 0, 1), else_=0)),
        )
        .where(CollectionCardDB.collection_id.in_(ids))
        .group_by(CollectionCardDB.collection_id)
    )
    counts = {collection_id: (int(total), int(held)) for collection_id, total, held in result.all()}
    return {collection_id: counts.get(collection_id, (0, 0)) for collection_id in ids}


# --- Collection Card Operations ---


async def list_collection_cards(
    session: AsyncSession, collection_id: str
) -> list[CollectionCardDB]:
    """Get every card entry of a collection, in insertion order."""
    result = await session.execute(
        select(CollectionCardDB)
        .where(CollectionCardDB.collection_id == collection_id)
        .order_by(CollectionCardDB.id)
    )
    return list(result.scalars().all())


async def get_collection_card(
    session: AsyncSession, collection_id: str, card_id: str
) -> CollectionCardDB | None:
    """Get one card entry of a collection."""
    result = await session.execute(
        select(CollectionCardDB).where(
            CollectionCardDB.collection_id == collection_id,
            CollectionCardDB.card_id == card_id,
        )
    )
    return result.scalar_one_or_none()


async def merge_collection_card(
    session: AsyncSession,
    collection_id: str,
    card: Card,
    owned: dict[str, bool],
) -> CollectionCardDB:
    """
    Write a card entry's owned map, creating the entry if needed.

    A new entry copies the card's catalog snapshot and starts at quantity 0.
    An existing entry keeps its snapshot and quantity.
    """
    entry = await get_collection_card(session, collection_id, card.id)
    if entry is None:
        await _insert_missing(
            session,
            CollectionCardDB,
            {"collection_id": collection_id, "card_id": card.id},
            card=card.to_snapshot(),
            owned=dict(owned),
            quantity=0,
        )
        entry = await get_collection_card(session, collection_id, card.id)

    entry.owned = dict(owned)
    await session.flush()
    return entry


async def set_collection_card_quantity(
    session: AsyncSession, collection_id: str, card_id: str, quantity: int
) -> CollectionCardDB | None:
    """Set the quantity of an existing entry. Returns None if not found."""
    entry = await get_collection_card(session, collection_id, card_id)
    if entry is None:
        return None

    entry.quantity = quantity
    await session.flush()
    return entry


def collection_card_to_entry(row: CollectionCardDB) -> OwnershipEntry:
    """Convert a database card entry to a domain model."""
    return OwnershipEntry(
        card=Card.from_api(row.card),
        owned=dict(row.owned or {}),
        quantity=row.quantity,
    )


# --- Master Set Operations ---


async def list_master_set_cards(
    session: AsyncSession, user_id: str, set_id: str
) -> list[MasterSetCardDB]:
    """Get every entry of a user's master set."""
    result = await session.execute(
        select(MasterSetCardDB)
        .where(MasterSetCardDB.user_id == user_id, MasterSetCardDB.set_id == set_id)
        .order_by(MasterSetCardDB.id)
    )
    return list(result.scalars().all())


async def get_master_set_card(
    session: AsyncSession, user_id: str, set_id: str, card_id: str
) -> MasterSetCardDB | None:
    """Get one entry of a user's master set."""
    result = await session.execute(
        select(MasterSetCardDB).where(
            MasterSetCardDB.user_id == user_id,
            MasterSetCardDB.set_id == set_id,
            MasterSetCardDB.card_id == card_id,
        )
    )
    return result.scalar_one_or_none()


async def merge_master_set_card(
    session: AsyncSession,
    user_id: str,
    set_id: str,
    card: Card,
    owned: dict[str, bool],
) -> MasterSetCardDB:
    """Write a master-set entry's owned map, creating the entry if needed."""
    entry = await get_master_set_card(session, user_id, set_id, card.id)
    if entry is None:
        await _insert_missing(
            session,
            MasterSetCardDB,
            {"user_id": user_id, "set_id": set_id, "card_id": card.id},
            card=card.to_snapshot(),
            owned=dict(owned),
        )
        entry = await get_master_set_card(session, user_id, set_id, card.id)

    entry.owned = dict(owned)
    await session.flush()
    return entry


def master_set_card_to_entry(row: MasterSetCardDB) -> OwnershipEntry:
    """Convert a database master-set entry to a domain model."""
    return OwnershipEntry(card=Card.from_api(row.card), owned=dict(row.owned or {}))


# --- Owned Card Index Operations ---


async def get_owned_card(session: AsyncSession, user_id: str, card_id: str) -> OwnedCardDB | None:
    """Get a card's owned-index row."""
    result = await session.execute(
        select(OwnedCardDB).where(OwnedCardDB.user_id == user_id, OwnedCardDB.card_id == card_id)
    )
    return result.scalar_one_or_none()


async def list_owned_cards(
    session: AsyncSession, user_id: str, owned_only: bool = False
) -> list[OwnedCardDB]:
    """Get a user's owned-index rows, optionally only those with an owned variant."""
    query = select(OwnedCardDB).where(OwnedCardDB.user_id == user_id)
    if owned_only:
        query = query.where(OwnedCardDB.owned.is_(True))
    result = await session.execute(query.order_by(OwnedCardDB.name, OwnedCardDB.card_id))
    return list(result.scalars().all())


async def upsert_owned_card(
    session: AsyncSession,
    user_id: str,
    card: Card,
    variants: dict[str, bool],
    collections: list[str],
) -> OwnedCardDB:
    """
    Write a card's owned-index row.

    The caller supplies the already-merged variants map and source list;
    `owned` is derived here so it always agrees with `variants`.
    """
    row = await get_owned_card(session, user_id, card.id)
    if row is None:
        await _insert_missing(session, OwnedCardDB, {"user_id": user_id, "card_id": card.id})
        row = await get_owned_card(session, user_id, card.id)

    row.name = card.name
    row.images = dict(card.images)
    row.supertype = card.supertype
    row.rarity = card.rarity
    row.variants = dict(variants)
    row.owned = any(variants.values())
    row.collections = list(collections)

    await session.flush()
    return row


async def count_owned_cards(session: AsyncSession, user_id: str) -> int:
    """Number of distinct cards with at least one owned variant."""
    result = await session.execute(
        select(func.count(OwnedCardDB.id)).where(
            OwnedCardDB.user_id == user_id, OwnedCardDB.owned.is_(True)
        )
    )
    return int(result.scalar_one())


# --- Master Set Summary Operations ---


async def get_master_set_summary(
    session: AsyncSession, user_id: str, set_id: str
) -> MasterSetSummaryDB | None:
    """Get the stored summary of one master set."""
    result = await session.execute(
        select(MasterSetSummaryDB).where(
            MasterSetSummaryDB.user_id == user_id, MasterSetSummaryDB.set_id == set_id
        )
    )
    return result.scalar_one_or_none()


async def list_master_set_summaries(
    session: AsyncSession, user_id: str
) -> list[MasterSetSummaryDB]:
    """Get all of a user's master-set summaries."""
    result = await session.execute(
        select(MasterSetSummaryDB)
        .where(MasterSetSummaryDB.user_id == user_id)
        .order_by(MasterSetSummaryDB.set_id)
    )
    return list(result.scalars().all())


async def upsert_master_set_summary(
    session: AsyncSession, user_id: str, summary: MasterSetSummary
) -> MasterSetSummaryDB:
    """Insert or update a master-set summary."""
    row = await get_master_set_summary(session, user_id, summary.set_id)
    if row is None:
        await _insert_missing(
            session, MasterSetSummaryDB, {"user_id": user_id, "set_id": summary.set_id}
        )
        row = await get_master_set_summary(session, user_id, summary.set_id)

    row.owned = summary.owned
    row.total = summary.total
    row.completed = summary.completed

    await session.flush()
    return row


async def count_completed_master_sets(session: AsyncSession, user_id: str) -> int:
    """Number of master sets marked completed."""
    result = await session.execute(
        select(func.count(MasterSetSummaryDB.id)).where(
            MasterSetSummaryDB.user_id == user_id,
            MasterSetSummaryDB.completed.is_(True),
        )
    )
    return int(result.scalar_one())


def summary_to_model(row: MasterSetSummaryDB) -> MasterSetSummary:
    """Convert a database summary to a domain model."""
    return MasterSetSummary(set_id=row.set_id, owned=row.owned, total=row.total)


# --- Deck Operations ---


async def list_decks(session: AsyncSession, user_id: str) -> list[DeckDB]:
    """Get all of a user's decks, oldest first."""
    result = await session.execute(
        select(DeckDB).where(DeckDB.user_id == user_id).order_by(DeckDB.created_at, DeckDB.id)
    )
    return list(result.scalars().all())


async def get_deck(session: AsyncSession, user_id: str, deck_id: str) -> DeckDB | None:
    """Get one of a user's decks."""
    result = await session.execute(
        select(DeckDB).where(DeckDB.id == deck_id, DeckDB.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def create_deck(session: AsyncSession, user_id: str, name: str) -> DeckDB:
    """Create a new, empty deck."""
    deck = DeckDB(user_id=user_id, name=name, cards=[])
    session.add(deck)
    await session.flush()
    return deck


async def save_deck(
    session: AsyncSession,
    user_id: str,
    deck_id: str,
    cards: list[DeckCard],
    name: str | None = None,
) -> DeckDB | None:
    """
    Replace a deck's card list, and optionally its name.

    Returns None if not found.
    """
    deck = await get_deck(session, user_id, deck_id)
    if deck is None:
        return None

    deck.cards = [stack.to_document() for stack in cards]
    if name is not None:
        deck.name = name

    await session.flush()
    return deck


async def delete_deck(session: AsyncSession, user_id: str, deck_id: str) -> bool:
    """
    Delete a deck.

    Returns True if deleted, False if not found.
    """
    deck = await get_deck(session, user_id, deck_id)
    if deck is None:
        return False

    await session.delete(deck)
    await session.flush()
    return True


async def count_decks(session: AsyncSession, user_id: str) -> int:
    """Number of decks a user has created."""
    result = await session.execute(select(func.count(DeckDB.id)).where(DeckDB.user_id == user_id))
    return int(result.scalar_one())


def deck_to_model(row: DeckDB) -> Deck:
    """Convert a database deck to a domain model."""
    return Deck(
        id=row.id,
        name=row.name,
        cards=[DeckCard.from_document(data) for data in row.cards or []],
    )


# --- Variant Membership Operations ---


async def list_variant_memberships(session: AsyncSession) -> list[VariantMembershipDB]:
    """Get every stored pattern-variant list."""
    result = await session.execute(
        select(VariantMembershipDB).order_by(VariantMembershipDB.variant)
    )
    return list(result.scalars().all())


async def get_variant_membership(session: AsyncSession) -> VariantMembership:
    """Load the pattern-variant lists as a classifier input."""
    rows = await list_variant_memberships(session)
    return VariantMembership.from_lists({row.variant: row.card_ids for row in rows})


async def set_variant_membership(
    session: AsyncSession, variant: str, card_ids: Iterable[str]
) -> VariantMembershipDB:
    """Replace the card ids listed for a pattern variant."""
    # Keep first-seen order, drop duplicates
    unique_ids: list[str] = list(dict.fromkeys(card_ids))

    row = await session.get(VariantMembershipDB, variant)
    if row is None:
        row = VariantMembershipDB(variant=variant, card_ids=unique_ids)
        session.add(row)
    else:
        row.card_ids = unique_ids

    await session.flush()
    return row

