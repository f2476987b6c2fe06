from riftdeck.db.database import get_session, init_db
from riftdeck.db.operations import (
    card_to_model,
    create_deck,
    deck_state_from_db,
    deck_to_model,
    delete_deck,
    delete_entry,
    entry_to_model,
    get_cards_by_ids,
    get_deck,
    get_deck_by_share_token,
    get_entry,
    list_decks,
    list_entries,
    patch_deck_references,
    touch_deck,
    update_deck,
    upsert_card,
    upsert_entry,
)

__all__ = [
    "card_to_model",
    "create_deck",
    "deck_state_from_db",
    "deck_to_model",
    "delete_deck",
    "delete_entry",
    "entry_to_model",
    "get_cards_by_ids",
    "get_deck",
    "get_deck_by_share_token",
    "get_entry",
    "get_session",
    "init_db",
    "list_decks",
    "list_entries",
    "patch_deck_references",
    "touch_deck",
    "update_deck",
    "upsert_card",
    "upsert_entry",
]
