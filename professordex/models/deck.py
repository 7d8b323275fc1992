from dataclasses import dataclass, field
from typing import Any

from professordex.models.card import Card


@dataclass
class DeckCard:
    """
    One stack in a deck: a specific printing and how many copies of it.

    Stacks are keyed by card id, so two printings of the same name are two
    stacks. Copy limits count across stacks by name.
    """

    card: Card
    quantity: int = 1

    @property
    def name(self) -> str:
        return self.card.name

    def to_document(self) -> dict[str, Any]:
        """Stored shape: the catalog snapshot with a quantity alongside."""
        return {**self.card.to_snapshot(), "quantity": self.quantity}

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "DeckCard":
        return cls(card=Card.from_api(data), quantity=int(data.get("quantity") or 0))


@dataclass
class Deck:
    """
    A user-built deck.

    Attributes:
        id: Deck id
        name: User-chosen name
        cards: Ordered stacks, in the order they were first added
    """

    id: str
    name: str
    cards: list[DeckCard] = field(default_factory=list)

    def total_cards(self) -> int:
        """Total copies across all stacks."""
        return sum(stack.quantity for stack in self.cards)


@dataclass(frozen=True)
class PlayerInfo:
    """Player details printed at the top of a tournament deck registration."""

    name: str = ""
    dob: str = ""
    player_id: str = ""
    event_name: str = ""
    event_date: str = ""
