"""
ProfessorDex services.

Business logic for variant tracking, ownership and deck building.
"""

from professordex.services.card_search import deck_search, normalize_input
from professordex.services.deck_export import (
    export_filename,
    generate_event_export_text,
    generate_export_text,
)
from professordex.services.deck_rules import (
    DeckDecision,
    DeckRuleError,
    add_card,
    can_add,
    categorize,
    remove_card,
    total_cards,
)
from professordex.services.name_validation import InvalidNameError, validate_name
from professordex.services.ownership import (
    BackfillResult,
    OwnershipReconciler,
    VariantNotAvailableError,
)
from professordex.services.subscriptions import ChangeFeed, get_change_feed
from professordex.services.tcg_api import CatalogError, TcgApiClient, get_tcg_client
from professordex.services.variants import classify

__all__ = [
    # Catalog
    "CatalogError",
    "TcgApiClient",
    "get_tcg_client",
    "deck_search",
    "normalize_input",
    # Variants and ownership
    "classify",
    "BackfillResult",
    "OwnershipReconciler",
    "VariantNotAvailableError",
    # Decks
    "DeckDecision",
    "DeckRuleError",
    "add_card",
    "can_add",
    "categorize",
    "remove_card",
    "total_cards",
    "export_filename",
    "generate_event_export_text",
    "generate_export_text",
    # Names
    "InvalidNameError",
    "validate_name",
    # Change feed
    "ChangeFeed",
    "get_change_feed",
]
