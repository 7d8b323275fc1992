"""
Ownership reconciliation.

A variant toggle lands in up to three rows that must agree:

1. The primary entry: a collection card entry or a master-set entry
2. The user's owned-card index row for the card
3. The master-set summary (master-set toggles only)

The reconciler is the only writer of ownership state. All of its writes go
through the request's session and commit together; nothing is written when
validation fails.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from professordex.db.operations import (
    get_collection,
    get_collection_card,
    get_master_set_card,
    get_master_set_summary,
    get_owned_card,
    list_collection_cards,
    list_collections,
    list_master_set_cards,
    merge_collection_card,
    merge_master_set_card,
    set_collection_card_quantity,
    upsert_master_set_summary,
    upsert_owned_card,
)
from professordex.models.card import Card
from professordex.models.failure import FailureKind, KnownError, NotFoundError
from professordex.models.ownership import (
    MasterSetSummary,
    ScopeKind,
    ScopeRef,
    VariantMembership,
)
from professordex.models.session import UserSession
from professordex.services.variants import EMPTY_MEMBERSHIP, classify, label, ordered

logger = logging.getLogger(__name__)

# Master-set bucket for snapshots that carry no set id
UNKNOWN_SET_ID = "unknown"


class VariantNotAvailableError(KnownError):
    """Raised when toggling a variant the card was never printed in."""

    def __init__(self, card: Card, variant: str):
        self.card_id = card.id
        self.variant = variant
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"{card.name} has no {label(variant)} variant",
            detail=f"Card '{card.id}' does not carry variant '{variant}'",
        )


@dataclass
class BackfillResult:
    """What a backfill touched."""

    entries: int
    master_sets: list[str]
    summaries: int


class OwnershipReconciler:
    """
    Applies ownership changes for one user.

    Args:
        session: Request session; the caller commits
        user: The user whose rows are written
        membership: Pattern-variant lists used for classification
    """

    def __init__(
        self,
        session: AsyncSession,
        user: UserSession,
        membership: VariantMembership = EMPTY_MEMBERSHIP,
    ) -> None:
        self.session = session
        self.user = user
        self.membership = membership

    async def _require_collection(self, collection_id: str) -> None:
        collection = await get_collection(self.session, self.user.user_id, collection_id)
        if collection is None:
            raise NotFoundError("Collection", collection_id)

    async def toggle_variant(
        self,
        scope: ScopeRef,
        card: Card,
        variant: str,
        set_total: int | None = None,
    ) -> dict[str, bool]:
        """
        Flip one variant of one card in a collection or master set.

        Args:
            scope: Collection or master set the toggle comes from
            card: Catalog card being toggled
            variant: Variant key to flip
            set_total: Card count of the set, when the caller knows it.
                Only used for master-set scopes.

        Returns:
            The owned map written to the primary entry

        Raises:
            VariantNotAvailableError: If the card does not carry the variant
            NotFoundError: If the collection does not exist
        """
        available = classify(card, self.membership)
        if variant not in available:
            raise VariantNotAvailableError(card, variant)

        if scope.kind is ScopeKind.COLLECTION:
            await self._require_collection(scope.scope_id)
            entry = await get_collection_card(self.session, scope.scope_id, card.id)
            current = dict(entry.owned) if entry is not None else {}
            # Collection entries keep keys they do not know about
            written = {**current, variant: not current.get(variant, False)}
            await merge_collection_card(self.session, scope.scope_id, card, written)
        else:
            master_entry = await get_master_set_card(
                self.session, self.user.user_id, scope.scope_id, card.id
            )
            current = dict(master_entry.owned) if master_entry is not None else {}
            # Master-set entries are rebuilt from the classified list
            written = {v: current.get(v, False) for v in ordered(available)}
            written[variant] = not current.get(variant, False)
            await merge_master_set_card(
                self.session, self.user.user_id, scope.scope_id, card, written
            )

        await self._sync_owned_index(card, written, scope.scope_id)

        if scope.kind is ScopeKind.MASTER_SET:
            await self.refresh_master_set_summary(scope.scope_id, set_total)

        logger.info(
            "User %s toggled %s on %s in %s %s -> %s",
            self.user.user_id,
            variant,
            card.id,
            scope.kind.value,
            scope.scope_id,
            written[variant],
        )
        return written

    async def _sync_owned_index(self, card: Card, written: dict[str, bool], source_id: str) -> None:
        """Merge a written owned map into the card's owned-index row."""
        row = await get_owned_card(self.session, self.user.user_id, card.id)
        variants = dict(row.variants or {}) if row is not None else {}
        variants.update(written)

        sources = list(row.collections or []) if row is not None else []
        if source_id not in sources:
            sources.append(source_id)

        await upsert_owned_card(self.session, self.user.user_id, card, variants, sources)

    async def update_quantity(self, collection_id: str, card_id: str, delta: int) -> int:
        """
        Adjust the copies on hand of an existing collection entry.

        The quantity never goes below zero.

        Returns:
            The new quantity

        Raises:
            NotFoundError: If the collection or entry does not exist
        """
        await self._require_collection(collection_id)
        entry = await get_collection_card(self.session, collection_id, card_id)
        if entry is None:
            raise NotFoundError("Card", card_id)

        quantity = max(0, entry.quantity + delta)
        await set_collection_card_quantity(self.session, collection_id, card_id, quantity)
        return quantity

    async def mark_all(self, collection_id: str, owned: bool) -> int:
        """
        Mark every variant of every entry in a collection owned or not owned.

        Returns:
            Number of entries written
        """
        await self._require_collection(collection_id)
        rows = await list_collection_cards(self.session, collection_id)

        for row in rows:
            card = Card.from_api(row.card)
            written = {v: owned for v in ordered(classify(card, self.membership))}
            await merge_collection_card(self.session, collection_id, card, written)
            await self._sync_owned_index(card, written, collection_id)

        logger.info(
            "User %s marked %d entries in %s as %s",
            self.user.user_id,
            len(rows),
            collection_id,
            "owned" if owned else "not owned",
        )
        return len(rows)

    async def recalculate_collection(self, collection_id: str) -> int:
        """
        Rebuild every entry's owned map from the classifier.

        Keys the card no longer carries are dropped and new ones start as not
        owned. Existing values are kept.

        Returns:
            Number of entries whose map changed
        """
        await self._require_collection(collection_id)
        rows = await list_collection_cards(self.session, collection_id)

        changed = 0
        for row in rows:
            card = Card.from_api(row.card)
            current = dict(row.owned or {})
            written = {v: current.get(v, False) for v in ordered(classify(card, self.membership))}
            if written != current:
                changed += 1
                await merge_collection_card(self.session, collection_id, card, written)
            await self._sync_owned_index(card, written, collection_id)

        logger.info(
            "Recalculated %d entries in %s for user %s (%d changed)",
            len(rows),
            collection_id,
            self.user.user_id,
            changed,
        )
        return changed

    async def backfill(self) -> BackfillResult:
        """
        Rebuild the owned-card index and master sets from collection entries.

        Each collection entry is merged into the owned-card index and into
        the master set of its card's set. Master-set maps keep only the
        card's classified variants, with collection values winning. Summaries
        are refreshed for the master sets whose total is already known.
        """
        entries = 0
        touched: list[str] = []

        for collection in await list_collections(self.session, self.user.user_id):
            for row in await list_collection_cards(self.session, collection.id):
                card = Card.from_api(row.card)
                owned = dict(row.owned or {})
                await self._sync_owned_index(card, owned, collection.id)

                set_id = card.set_id or UNKNOWN_SET_ID
                master_entry = await get_master_set_card(
                    self.session, self.user.user_id, set_id, card.id
                )
                existing = dict(master_entry.owned or {}) if master_entry is not None else {}
                merged = {
                    v: owned.get(v, existing.get(v, False))
                    for v in ordered(classify(card, self.membership))
                }
                await merge_master_set_card(self.session, self.user.user_id, set_id, card, merged)

                entries += 1
                if set_id not in touched:
                    touched.append(set_id)

        summaries = 0
        for set_id in touched:
            if await self.refresh_master_set_summary(set_id) is not None:
                summaries += 1

        logger.info(
            "Backfilled %d entries into %d master sets for user %s",
            entries,
            len(touched),
            self.user.user_id,
        )
        return BackfillResult(entries=entries, master_sets=touched, summaries=summaries)

    async def refresh_master_set_summary(
        self, set_id: str, total: int | None = None
    ) -> MasterSetSummary | None:
        """
        Recompute a master set's completion counts.

        Args:
            set_id: Catalog set id
            total: Card count of the set. Falls back to the stored summary's
                total; with neither, nothing is written.

        Returns:
            The stored summary, or None when no total is known
        """
        if total is None:
            stored = await get_master_set_summary(self.session, self.user.user_id, set_id)
            if stored is None:
                logger.debug("No known total for master set %s, summary skipped", set_id)
                return None
            total = stored.total

        rows = await list_master_set_cards(self.session, self.user.user_id, set_id)
        owned = sum(1 for row in rows if any((row.owned or {}).values()))

        summary = MasterSetSummary(set_id=set_id, owned=owned, total=total)
        await upsert_master_set_summary(self.session, self.user.user_id, summary)
        return summary
