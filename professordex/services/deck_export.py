"""Plain-text deck lists for sharing and tournament registration."""

from professordex.models.deck import Deck, PlayerInfo
from professordex.services.deck_rules import categorize


def generate_export_text(deck: Deck) -> str:
    """
    Render a deck as a plain-text list.

    Example:
        Deck: Charizard ex

        Pokémon (3)
        3x Charmander (sv3 #26)

        Energy (10)
        10x Fire Energy (sve #2)
    """
    lines = [f"Deck: {deck.name}", ""]
    for category, stacks in categorize(deck.cards).items():
        if not stacks:
            continue
        count = sum(stack.quantity for stack in stacks)
        lines.append(f"{category} ({count})")
        for stack in stacks:
            card = stack.card
            lines.append(f"{stack.quantity}x {card.name} ({card.set_id} #{card.number})")
        lines.append("")
    return "\n".join(lines)


def generate_event_export_text(deck: Deck, player: PlayerInfo) -> str:
    """Render a deck list with the player details an event organizer asks for."""
    header = [
        f"Player Name: {player.name}",
        f"DOB: {player.dob}",
        f"Player ID: {player.player_id}",
        f"Event: {player.event_name}",
        f"Date: {player.event_date}",
        "",
    ]
    return "\n".join(header) + generate_export_text(deck)


def export_filename(deck: Deck) -> str:
    return f"{deck.name or 'deck'}.txt"
