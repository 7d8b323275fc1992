"""
Deck-builder card search.

The catalog matches names accent-sensitively and users rarely type the é in
"Pokémon", so search terms are folded before querying and results are
filtered again locally against the folded term.
"""

import unicodedata
from collections.abc import Iterable
from typing import Literal, get_args

from professordex.models.card import Card
from professordex.services.tcg_api import TcgApiClient

# Regulation marks at or after this letter are Standard-legal
MIN_REGULATION_MARK = "G"

DECK_SUPERTYPES = frozenset({"Pokémon", "Trainer", "Energy"})

EnergyType = Literal[
    "All",
    "Grass",
    "Fire",
    "Water",
    "Lightning",
    "Psychic",
    "Fighting",
    "Darkness",
    "Metal",
    "Fairy",
    "Dragon",
    "Colorless",
]

ENERGY_TYPES: tuple[str, ...] = get_args(EnergyType)


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


def normalize_input(term: str) -> str:
    """
    Fold a search term: strip diacritics, lower-case, and restore the accent
    on a leading "poke" so it matches catalog names like "Poké Ball".
    """
    folded = _fold(term)
    if folded.startswith("poke"):
        return "poké" + folded[len("poke") :]
    return folded


def _is_legal_printing(card: Card) -> bool:
    if card.is_basic_energy:
        return True
    return bool(card.regulation_mark) and card.regulation_mark >= MIN_REGULATION_MARK


def filter_legal_groups(cards: Iterable[Card]) -> list[Card]:
    """
    Keep every printing of a name when any printing of that name is legal.

    Groups keep first-seen order. A group is also dropped when its first
    printing is not a Pokémon, Trainer or Energy card.
    """
    groups: dict[str, list[Card]] = {}
    for card in cards:
        groups.setdefault(card.name, []).append(card)

    kept: list[Card] = []
    for group in groups.values():
        if group[0].supertype not in DECK_SUPERTYPES:
            continue
        if any(_is_legal_printing(card) for card in group):
            kept.extend(group)
    return kept


def match_filter(cards: Iterable[Card], term: str) -> list[Card]:
    """Keep cards whose folded name contains the term or has a word starting with it."""
    kept = []
    for card in cards:
        name = normalize_input(card.name)
        if term in name or any(word.startswith(term) for word in name.split(" ")):
            kept.append(card)
    return kept


def filter_energy_type(cards: Iterable[Card], term: str, energy_type: str) -> list[Card]:
    """
    Narrow an "energy" search to one energy type.

    Only applies when the folded term is exactly "energy" and a type other
    than "All" is picked; otherwise cards pass through unchanged.
    """
    cards = list(cards)
    if term != "energy" or energy_type == "All":
        return cards
    wanted = energy_type.lower()
    return [card for card in cards if energy_type in card.types or wanted in card.name.lower()]


async def deck_search(catalog: TcgApiClient, term: str, energy_type: str = "All") -> list[Card]:
    """
    Search the catalog for cards to add to a deck.

    Args:
        catalog: Catalog client
        term: Raw user input
        energy_type: Energy type filter, one of ENERGY_TYPES

    Returns:
        Matching printings, grouped by name in catalog order
    """
    term = term.strip()
    if not term:
        return []

    normalized = normalize_input(term)
    page = await catalog.search_cards(f'name:"{normalized}*"')

    results = filter_legal_groups(page.cards)
    results = match_filter(results, normalized)
    return filter_energy_type(results, normalized, energy_type)
