from professordex.api.cards import router as cards_router
from professordex.api.collections import router as collections_router
from professordex.api.decks import router as decks_router
from professordex.api.health import router as health_router
from professordex.api.master_sets import router as master_sets_router
from professordex.api.owned_cards import router as owned_cards_router

__all__ = [
    "cards_router",
    "collections_router",
    "decks_router",
    "health_router",
    "master_sets_router",
    "owned_cards_router",
]
