"""Tests for collection statistics."""

from professordex.db.operations import create_deck, upsert_master_set_summary, upsert_owned_card
from professordex.models.db import OwnedCardDB
from professordex.models.ownership import MasterSetSummary, OwnershipEntry, VariantMembership
from professordex.models.session import UserSession
from professordex.services.stats import (
    build_dashboard,
    collection_variant_totals,
    owned_variant_cards,
    rarity_counts,
    set_variant_stats,
    type_counts,
)


def index_row(supertype: str, rarity: str | None, owned: bool = True) -> OwnedCardDB:
    return OwnedCardDB(supertype=supertype, rarity=rarity, owned=owned)


class TestIndexCounts:
    def test_type_counts_include_every_supertype(self) -> None:
        rows = [
            index_row("Pokémon", "Common"),
            index_row("Pokémon", "Rare"),
            index_row("Trainer", "Uncommon", owned=False),
        ]

        assert type_counts(rows) == {"Pokémon": 2, "Trainer": 0, "Energy": 0}

    def test_rarity_symbols(self) -> None:
        rows = [
            index_row("Pokémon", "Common"),
            index_row("Pokémon", "Promo"),
            index_row("Pokémon", None),
            index_row("Pokémon", "Common"),
        ]

        counts = [(r.rarity, r.symbol, r.count) for r in rarity_counts(rows)]

        assert counts == [("Common", "●", 2), ("Promo", "•", 1), ("Unknown", "•", 1)]


class TestCollectionCounts:
    def test_variant_totals_in_display_order(self, make_card) -> None:
        first = make_card(card_id="a-1")
        second = make_card(card_id="a-2")
        entries = [
            OwnershipEntry(card=first, owned={"reverseHolo": True, "normal": True}),
            OwnershipEntry(card=second, owned={"normal": True, "holo": False}),
        ]

        totals = collection_variant_totals(entries)

        assert list(totals.items()) == [("normal", 2), ("reverseHolo", 1)]

    def test_owned_variant_cards_skips_stale_keys(self, make_card) -> None:
        card = make_card()
        entry = OwnershipEntry(card=card, owned={"cosmosHolo": True, "reverseHolo": True})

        assert owned_variant_cards([entry]) == [(card, "reverseHolo")]

    def test_set_variant_stats(self, make_card) -> None:
        cards = [
            make_card(card_id="s-1"),
            make_card(card_id="s-2", prices={"holofoil": {}}),
        ]
        membership = VariantMembership.from_lists({"pokeBallPattern": ["s-1"]})
        entries = [OwnershipEntry(card=cards[0], owned={"normal": True, "pokeBallPattern": True})]

        stats = set_variant_stats(cards, entries, membership)

        assert [(s.variant, s.owned, s.total) for s in stats] == [
            ("normal", 1, 1),
            ("reverseHolo", 0, 1),
            ("holo", 0, 1),
            ("pokeBallPattern", 1, 1),
        ]


class TestBuildDashboard:
    async def test_counts(self, session, make_card) -> None:
        user = UserSession("user-1")
        await upsert_owned_card(session, "user-1", make_card(card_id="a-1"), {"normal": True}, [])
        await upsert_owned_card(session, "user-1", make_card(card_id="a-2"), {"normal": False}, [])
        await upsert_master_set_summary(session, "user-1", MasterSetSummary("sv1", 5, 5))
        await create_deck(session, "user-1", "Deck")
        await create_deck(session, "user-2", "Other")

        stats = await build_dashboard(session, user)

        assert stats.total_cards_owned == 1
        assert stats.total_decks == 1
        assert stats.master_sets_completed == 1
        assert stats.by_type["Pokémon"] == 1
