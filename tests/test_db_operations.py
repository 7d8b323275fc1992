"""Tests for database operations."""

from professordex.db.operations import (
    collection_card_counts,
    collection_card_to_entry,
    count_completed_master_sets,
    count_decks,
    count_owned_cards,
    create_collection,
    create_deck,
    delete_collection,
    delete_deck,
    deck_to_model,
    get_collection,
    get_collection_card,
    get_deck,
    get_variant_membership,
    list_collection_cards,
    list_collections,
    list_decks,
    list_owned_cards,
    merge_collection_card,
    rename_collection,
    save_deck,
    set_collection_card_quantity,
    set_variant_membership,
    upsert_master_set_summary,
    upsert_owned_card,
)
from professordex.models.deck import DeckCard
from professordex.models.ownership import MasterSetSummary


class TestCollectionOperations:
    async def test_create_and_list(self, session) -> None:
        """Collections are listed by name and scoped to their user."""
        await create_collection(session, "user-1", "Trade pile")
        await create_collection(session, "user-1", "Binder")
        await create_collection(session, "user-2", "Other")

        collections = await list_collections(session, "user-1")

        assert [c.name for c in collections] == ["Binder", "Trade pile"]

    async def test_get_other_users_collection(self, session) -> None:
        collection = await create_collection(session, "user-1", "Binder")

        assert await get_collection(session, "user-2", collection.id) is None

    async def test_rename(self, session) -> None:
        collection = await create_collection(session, "user-1", "Binder")

        renamed = await rename_collection(session, "user-1", collection.id, "Binder 2")

        assert renamed is not None
        assert renamed.name == "Binder 2"
        assert await rename_collection(session, "user-1", "missing", "x") is None

    async def test_delete_removes_entries(self, session, make_card) -> None:
        collection = await create_collection(session, "user-1", "Binder")
        await merge_collection_card(session, collection.id, make_card(), {"normal": True})

        assert await delete_collection(session, "user-1", collection.id) is True
        assert await list_collection_cards(session, collection.id) == []
        assert await delete_collection(session, "user-1", collection.id) is False

    async def test_card_counts(self, session, make_card) -> None:
        binder = await create_collection(session, "user-1", "Binder")
        empty = await create_collection(session, "user-1", "Empty")
        await merge_collection_card(session, binder.id, make_card(card_id="a-1"), {})
        await merge_collection_card(session, binder.id, make_card(card_id="a-2"), {})
        await set_collection_card_quantity(session, binder.id, "a-2", 3)

        counts = await collection_card_counts(session, [binder.id, empty.id])

        assert counts == {binder.id: (2, 1), empty.id: (0, 0)}


class TestCollectionCardOperations:
    async def test_merge_creates_with_snapshot(self, session, make_card) -> None:
        collection = await create_collection(session, "user-1", "Binder")
        card = make_card(card_id="sv3pt5-1", name="Bulbasaur")

        await merge_collection_card(session, collection.id, card, {"normal": True})
        row = await get_collection_card(session, collection.id, "sv3pt5-1")

        assert row is not None
        assert row.card["name"] == "Bulbasaur"
        assert row.owned == {"normal": True}
        assert row.quantity == 0

    async def test_merge_keeps_quantity(self, session, make_card) -> None:
        collection = await create_collection(session, "user-1", "Binder")
        card = make_card()
        await merge_collection_card(session, collection.id, card, {"normal": True})
        await set_collection_card_quantity(session, collection.id, card.id, 2)

        row = await merge_collection_card(session, collection.id, card, {"normal": False})

        assert row.quantity == 2
        assert row.owned == {"normal": False}

    async def test_to_entry(self, session, make_card) -> None:
        collection = await create_collection(session, "user-1", "Binder")
        row = await merge_collection_card(
            session, collection.id, make_card(rarity="Rare"), {"holo": True}
        )

        entry = collection_card_to_entry(row)

        assert entry.card.rarity == "Rare"
        assert entry.owns("holo")
        assert entry.owns_any()

    async def test_quantity_missing_entry(self, session) -> None:
        assert await set_collection_card_quantity(session, "c", "nope", 1) is None


class TestOwnedCardOperations:
    async def test_owned_flag_follows_variants(self, session, make_card) -> None:
        card = make_card()

        row = await upsert_owned_card(session, "user-1", card, {"normal": False}, ["c1"])
        assert row.owned is False

        row = await upsert_owned_card(
            session, "user-1", card, {"normal": False, "reverseHolo": True}, ["c1"]
        )
        assert row.owned is True
        assert row.collections == ["c1"]

    async def test_list_and_count_owned(self, session, make_card) -> None:
        owned = make_card(card_id="a-1", name="B")
        not_owned = make_card(card_id="a-2", name="A")
        await upsert_owned_card(session, "user-1", owned, {"normal": True}, [])
        await upsert_owned_card(session, "user-1", not_owned, {"normal": False}, [])

        all_rows = await list_owned_cards(session, "user-1")
        owned_rows = await list_owned_cards(session, "user-1", owned_only=True)

        assert [r.card_id for r in all_rows] == ["a-2", "a-1"]
        assert [r.card_id for r in owned_rows] == ["a-1"]
        assert await count_owned_cards(session, "user-1") == 1


class TestMasterSetSummaryOperations:
    async def test_upsert_updates_in_place(self, session) -> None:
        await upsert_master_set_summary(session, "user-1", MasterSetSummary("sv1", 10, 258))
        row = await upsert_master_set_summary(session, "user-1", MasterSetSummary("sv1", 258, 258))

        assert row.completed is True
        assert await count_completed_master_sets(session, "user-1") == 1


class TestDeckOperations:
    async def test_create_save_load(self, session, make_card) -> None:
        deck = await create_deck(session, "user-1", "Charizard ex")
        card = make_card(card_id="sv3-26", name="Charmander")

        await save_deck(session, "user-1", deck.id, [DeckCard(card=card, quantity=3)])
        row = await get_deck(session, "user-1", deck.id)
        model = deck_to_model(row)

        assert model.name == "Charizard ex"
        assert model.cards[0].card.name == "Charmander"
        assert model.total_cards() == 3

    async def test_save_renames(self, session) -> None:
        deck = await create_deck(session, "user-1", "Old")

        row = await save_deck(session, "user-1", deck.id, [], name="New")

        assert row is not None
        assert row.name == "New"

    async def test_list_count_delete(self, session) -> None:
        first = await create_deck(session, "user-1", "One")
        await create_deck(session, "user-1", "Two")

        assert {d.name for d in await list_decks(session, "user-1")} == {"One", "Two"}
        assert await count_decks(session, "user-1") == 2
        assert await delete_deck(session, "user-1", first.id) is True
        assert await delete_deck(session, "user-1", first.id) is False
        assert await count_decks(session, "user-1") == 1

    async def test_other_users_deck_hidden(self, session) -> None:
        deck = await create_deck(session, "user-1", "Mine")

        assert await get_deck(session, "user-2", deck.id) is None
        assert await save_deck(session, "user-2", deck.id, []) is None


class TestVariantMembershipOperations:
    async def test_set_dedupes_and_replaces(self, session) -> None:
        await set_variant_membership(session, "pokeBallPattern", ["a-1", "a-2", "a-1"])
        row = await set_variant_membership(session, "pokeBallPattern", ["a-3", "a-1"])

        assert row.card_ids == ["a-3", "a-1"]

    async def test_load_as_membership(self, session) -> None:
        await set_variant_membership(session, "masterBallPattern", ["a-1"])

        membership = await get_variant_membership(session)

        assert membership.has("masterBallPattern", "a-1")
        assert not membership.has("pokeBallPattern", "a-1")
