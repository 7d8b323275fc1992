"""
Deck-building rules.

Limits are counted by card name across every printing in the deck:

- At most 4 copies of any name. Basic energy is unlimited.
- At most 1 ACE SPEC card per deck. A card counts as ACE SPEC when its
  name contains "ACE SPEC".

All functions here are pure. They take the current stacks and return new
ones; persisting the result is the caller's job.
"""

from dataclasses import dataclass

from professordex.config import MAX_ACE_SPEC_CARDS, MAX_COPIES_PER_NAME
from professordex.models.card import Card
from professordex.models.deck import DeckCard
from professordex.models.failure import FailureKind, RefusalError

ACE_SPEC_MARKER = "ACE SPEC"

# Display order of deck sections
CATEGORIES: tuple[str, ...] = ("Pokémon", "Trainer", "Energy")


@dataclass(frozen=True)
class DeckDecision:
    """Outcome of checking one card against the deck rules."""

    allowed: bool
    reason: str | None = None


class DeckRuleError(RefusalError):
    """Raised when adding a card would break a deck rule."""

    def __init__(self, card: Card, reason: str):
        self.card_id = card.id
        super().__init__(
            kind=FailureKind.DECK_RULE_VIOLATION,
            message=reason,
            detail=f"Card '{card.id}' was not added",
            suggestion="Remove a copy before adding another.",
        )


def copies_by_name(cards: list[DeckCard], name: str) -> int:
    """Total copies of a name across all printings in the deck."""
    return sum(stack.quantity for stack in cards if stack.name == name)


def _is_ace_spec(name: str) -> bool:
    return ACE_SPEC_MARKER in name


def can_add(cards: list[DeckCard], candidate: Card) -> DeckDecision:
    """
    Check whether one more copy of a card may be added.

    The first rule that fails decides the reason.
    """
    total = copies_by_name(cards, candidate.name)

    if candidate.is_energy:
        if not candidate.is_basic_energy and total >= MAX_COPIES_PER_NAME:
            return DeckDecision(
                False, f"Max {MAX_COPIES_PER_NAME} copies of special energy: {candidate.name}"
            )
    elif total >= MAX_COPIES_PER_NAME:
        return DeckDecision(False, f"Max {MAX_COPIES_PER_NAME} copies of {candidate.name}")

    if _is_ace_spec(candidate.name):
        ace_stacks = sum(1 for stack in cards if _is_ace_spec(stack.name))
        if ace_stacks >= MAX_ACE_SPEC_CARDS:
            return DeckDecision(False, f"Only {MAX_ACE_SPEC_CARDS} ACE SPEC card allowed")

    return DeckDecision(True)


def add_card(cards: list[DeckCard], candidate: Card) -> list[DeckCard]:
    """
    Add one copy of a card.

    Joins the stack with the same card id, or appends a new stack.

    Raises:
        DeckRuleError: If a deck rule forbids the copy
    """
    decision = can_add(cards, candidate)
    if not decision.allowed:
        raise DeckRuleError(candidate, decision.reason or "Card not allowed")

    updated: list[DeckCard] = []
    found = False
    for stack in cards:
        if stack.card.id == candidate.id:
            updated.append(DeckCard(card=stack.card, quantity=stack.quantity + 1))
            found = True
        else:
            updated.append(stack)

    if not found:
        updated.append(DeckCard(card=candidate, quantity=1))
    return updated


def remove_card(cards: list[DeckCard], card_id: str) -> list[DeckCard]:
    """Remove one copy of a card. Stacks that reach zero are dropped."""
    updated = []
    for stack in cards:
        quantity = stack.quantity
        if stack.card.id == card_id:
            quantity = max(0, quantity - 1)
        if quantity > 0:
            updated.append(DeckCard(card=stack.card, quantity=quantity))
    return updated


def total_cards(cards: list[DeckCard]) -> int:
    return sum(stack.quantity for stack in cards)


def categorize(cards: list[DeckCard]) -> dict[str, list[DeckCard]]:
    """
    Split stacks into Pokémon, Trainer and Energy sections.

    Every category is present, possibly empty. Stacks with any other
    supertype are left out.
    """
    sections: dict[str, list[DeckCard]] = {category: [] for category in CATEGORIES}
    for stack in cards:
        if stack.card.supertype in sections:
            sections[stack.card.supertype].append(stack)
    return sections
