from professordex.db.database import get_session, init_db
from professordex.db.operations import (
    collection_card_counts,
    collection_card_to_entry,
    count_completed_master_sets,
    count_decks,
    count_owned_cards,
    create_collection,
    create_deck,
    deck_to_model,
    delete_collection,
    delete_deck,
    get_collection,
    get_collection_card,
    get_deck,
    get_master_set_card,
    get_master_set_summary,
    get_owned_card,
    get_variant_membership,
    list_collection_cards,
    list_collections,
    list_decks,
    list_master_set_cards,
    list_master_set_summaries,
    list_owned_cards,
    list_variant_memberships,
    master_set_card_to_entry,
    rename_collection,
    save_deck,
    set_variant_membership,
    summary_to_model,
)

__all__ = [
    "collection_card_counts",
    "collection_card_to_entry",
    "count_completed_master_sets",
    "count_decks",
    "count_owned_cards",
    "create_collection",
    "create_deck",
    "deck_to_model",
    "delete_collection",
    "delete_deck",
    "get_collection",
    "get_collection_card",
    "get_deck",
    "get_master_set_card",
    "get_master_set_summary",
    "get_owned_card",
    "get_session",
    "get_variant_membership",
    "init_db",
    "list_collection_cards",
    "list_collections",
    "list_decks",
    "list_master_set_cards",
    "list_master_set_summaries",
    "list_owned_cards",
    "list_variant_memberships",
    "master_set_card_to_entry",
    "rename_collection",
    "save_deck",
    "set_variant_membership",
    "summary_to_model",
]
