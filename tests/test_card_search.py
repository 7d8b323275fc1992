"""Tests for deck-builder search normalization and filtering."""

import httpx
import respx

from professordex.services.card_search import (
    ENERGY_TYPES,
    deck_search,
    filter_energy_type,
    filter_legal_groups,
    match_filter,
    normalize_input,
)
from professordex.services.tcg_api import TcgApiClient

BASE_URL = "https://tcg.test/v2"


class TestNormalizeInput:
    def test_strips_diacritics_and_lowercases(self) -> None:
        assert normalize_input("Flabébé") == "flabebe"

    def test_rewrites_leading_poke(self) -> None:
        assert normalize_input("Pokemon Center Lady") == "pokémon center lady"

    def test_accented_poke_round_trips(self) -> None:
        assert normalize_input("Poké Ball") == "poké ball"

    def test_poke_elsewhere_untouched(self) -> None:
        assert normalize_input("Slowpoke") == "slowpoke"


class TestFilterLegalGroups:
    def test_keeps_all_printings_when_one_is_legal(self, make_card) -> None:
        old = make_card(card_id="base1-58", name="Pikachu", regulation_mark=None)
        new = make_card(card_id="sv3pt5-25", name="Pikachu", regulation_mark="G")

        assert filter_legal_groups([old, new]) == [old, new]

    def test_drops_names_without_legal_printing(self, make_card) -> None:
        old = make_card(card_id="swsh1-1", name="Celebi V", regulation_mark="D")

        assert filter_legal_groups([old]) == []

    def test_basic_energy_always_legal(self, make_card) -> None:
        energy = make_card(
            card_id="base1-98",
            name="Fire Energy",
            supertype="Energy",
            subtypes=["Basic"],
            regulation_mark=None,
        )

        assert filter_legal_groups([energy]) == [energy]

    def test_later_marks_are_legal(self, make_card) -> None:
        card = make_card(card_id="sv5-1", name="Iron Thorns", regulation_mark="H")

        assert filter_legal_groups([card]) == [card]


class TestMatchFilter:
    def test_substring_match(self, make_card) -> None:
        card = make_card(name="Radiant Charizard")

        assert match_filter([card], "chariz") == [card]

    def test_accent_insensitive(self, make_card) -> None:
        card = make_card(name="Flabébé")

        assert match_filter([card], "flabe") == [card]

    def test_non_match_dropped(self, make_card) -> None:
        card = make_card(name="Squirtle")

        assert match_filter([card], "bulba") == []


class TestFilterEnergyType:
    def test_filters_by_type(self, make_card) -> None:
        fire = make_card(card_id="sve-2", name="Fire Energy", supertype="Energy", types=["Fire"])
        water = make_card(card_id="sve-3", name="Water Energy", supertype="Energy", types=["Water"])

        assert filter_energy_type([fire, water], "energy", "Fire") == [fire]

    def test_name_mention_counts(self, make_card) -> None:
        card = make_card(name="Double Fire Energy", supertype="Energy", types=[])

        assert filter_energy_type([card], "energy", "Fire") == [card]

    def test_all_passes_through(self, make_card) -> None:
        fire = make_card(name="Fire Energy", supertype="Energy", types=["Fire"])

        assert filter_energy_type([fire], "energy", "All") == [fire]

    def test_only_applies_to_energy_term(self, make_card) -> None:
        card = make_card(name="Charmander", types=["Fire"])

        assert filter_energy_type([card], "char", "Water") == [card]

    def test_energy_types_start_with_all(self) -> None:
        assert ENERGY_TYPES[0] == "All"
        assert "Darkness" in ENERGY_TYPES


class TestDeckSearch:
    @respx.mock
    async def test_queries_folded_prefix(self, make_payload) -> None:
        route = respx.get(f"{BASE_URL}/cards").mock(
            return_value=httpx.Response(
                200,
                json={
                    "data": [
                        make_payload(card_id="sv3pt5-25", name="Pikachu"),
                        make_payload(card_id="swsh4-43", name="Pikachu V", regulation_mark="D"),
                    ],
                    "totalCount": 2,
                },
            )
        )
        client = TcgApiClient(base_url=BASE_URL, api_key="")

        cards = await deck_search(client, "  Pikachu ")

        assert route.called
        assert route.calls.last.request.url.params["q"] == 'name:"pikachu*"'
        assert [c.id for c in cards] == ["sv3pt5-25"]

    async def test_blank_term_skips_catalog(self) -> None:
        client = TcgApiClient(base_url=BASE_URL, api_key="")

        assert await deck_search(client, "   ") == []
