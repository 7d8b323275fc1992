"""Tests for plain-text deck list export."""

from professordex.models.deck import Deck, DeckCard, PlayerInfo
from professordex.services.deck_export import (
    export_filename,
    generate_event_export_text,
    generate_export_text,
)


def charizard_deck(make_card) -> Deck:
    charmander = make_card(card_id="sv3-26", name="Charmander", set_id="sv3", number="26")
    rare_candy = make_card(
        card_id="sv1-191", name="Rare Candy", supertype="Trainer", set_id="sv1", number="191"
    )
    fire = make_card(
        card_id="sve-2", name="Fire Energy", supertype="Energy", set_id="sve", number="2"
    )
    return Deck(
        id="deck-1",
        name="Charizard ex",
        cards=[
            DeckCard(card=fire, quantity=10),
            DeckCard(card=charmander, quantity=3),
            DeckCard(card=rare_candy, quantity=4),
        ],
    )


class TestGenerateExportText:
    def test_sections_in_display_order(self, make_card) -> None:
        text = generate_export_text(charizard_deck(make_card))

        assert text == (
            "Deck: Charizard ex\n"
            "\n"
            "Pokémon (3)\n"
            "3x Charmander (sv3 #26)\n"
            "\n"
            "Trainer (4)\n"
            "4x Rare Candy (sv1 #191)\n"
            "\n"
            "Energy (10)\n"
            "10x Fire Energy (sve #2)\n"
        )

    def test_empty_sections_skipped(self, make_card) -> None:
        card = make_card(card_id="sv3-26", name="Charmander", set_id="sv3", number="26")
        deck = Deck(id="d", name="Mono", cards=[DeckCard(card=card, quantity=2)])

        text = generate_export_text(deck)

        assert "Trainer" not in text
        assert "Energy" not in text

    def test_empty_deck(self) -> None:
        assert generate_export_text(Deck(id="d", name="Empty")) == "Deck: Empty\n"


class TestGenerateEventExportText:
    def test_player_header_first(self, make_card) -> None:
        player = PlayerInfo(
            name="Ash Ketchum",
            dob="1997-04-01",
            player_id="123456",
            event_name="Regional Championship",
            event_date="2024-05-18",
        )

        text = generate_event_export_text(charizard_deck(make_card), player)

        assert text.startswith(
            "Player Name: Ash Ketchum\n"
            "DOB: 1997-04-01\n"
            "Player ID: 123456\n"
            "Event: Regional Championship\n"
            "Date: 2024-05-18\n"
            "\n"
            "Deck: Charizard ex\n"
        )


class TestExportFilename:
    def test_uses_deck_name(self) -> None:
        assert export_filename(Deck(id="d", name="Lost Box")) == "Lost Box.txt"

    def test_blank_name_falls_back(self) -> None:
        assert export_filename(Deck(id="d", name="")) == "deck.txt"
