from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from professordex.models.card import Card


class ScopeKind(str, Enum):
    """Where a primary ownership record lives."""

    COLLECTION = "collection"
    MASTER_SET = "masterSet"


@dataclass(frozen=True)
class ScopeRef:
    """
    Reference to the primary ownership scope of a toggle.

    scope_id is a collection id for COLLECTION and a catalog set id for
    MASTER_SET. Either one is what lands in the owned-card index's
    `collections` list.
    """

    kind: ScopeKind
    scope_id: str

    @classmethod
    def collection(cls, collection_id: str) -> "ScopeRef":
        return cls(ScopeKind.COLLECTION, collection_id)

    @classmethod
    def master_set(cls, set_id: str) -> "ScopeRef":
        return cls(ScopeKind.MASTER_SET, set_id)


@dataclass
class OwnershipEntry:
    """
    Ownership state of one card within one scope.

    Attributes:
        card: Catalog snapshot the entry was created from
        owned: Variant key -> owned flag
        quantity: Copies on hand (collections only)
    """

    card: Card
    owned: dict[str, bool] = field(default_factory=dict)
    quantity: int = 0

    def owns_any(self) -> bool:
        return any(self.owned.values())

    def owns(self, variant: str) -> bool:
        return self.owned.get(variant) is True


@dataclass(frozen=True)
class MasterSetSummary:
    """Completion of one master set."""

    set_id: str
    owned: int
    total: int

    @property
    def completed(self) -> bool:
        return self.owned == self.total

    @property
    def completion_percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return round(self.owned / self.total * 100, 1)


@dataclass(frozen=True)
class VariantMembership:
    """
    Card ids that carry each pattern variant (Poké Ball, Master Ball).

    Loaded from the store; an empty membership means no card gets a
    pattern variant.
    """

    card_ids: Mapping[str, frozenset[str]] = field(default_factory=dict)

    @classmethod
    def from_lists(cls, lists: Mapping[str, Iterable[str]]) -> "VariantMembership":
        return cls({variant: frozenset(ids) for variant, ids in lists.items()})

    def has(self, variant: str, card_id: str) -> bool:
        return card_id in self.card_ids.get(variant, frozenset())
