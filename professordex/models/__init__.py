from professordex.models.card import Card, CardSet
from professordex.models.deck import Deck, DeckCard, PlayerInfo
from professordex.models.failure import (
    ApiResponse,
    FailureDetail,
    FailureKind,
    KnownError,
    NotFoundError,
    OutcomeType,
    RefusalError,
    ServiceError,
)
from professordex.models.ownership import (
    MasterSetSummary,
    OwnershipEntry,
    ScopeKind,
    ScopeRef,
    VariantMembership,
)
from professordex.models.session import UserSession

__all__ = [
    "ApiResponse",
    "Card",
    "CardSet",
    "Deck",
    "DeckCard",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "MasterSetSummary",
    "NotFoundError",
    "OutcomeType",
    "OwnershipEntry",
    "PlayerInfo",
    "RefusalError",
    "ScopeKind",
    "ScopeRef",
    "ServiceError",
    "UserSession",
    "VariantMembership",
]
