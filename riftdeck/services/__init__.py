"""
Riftdeck services.

Deck construction rules, validation, and the client-side mutation
coordinator, plus the server-side deck service that persists placements.
"""

from riftdeck.services.card_catalog import (
    CardCatalog,
    InMemoryCardCatalog,
    SqlCardCatalog,
    require_card,
)
from riftdeck.services.coordinator import DeckStore, MutationCoordinator
from riftdeck.services.http_store import HttpCardCatalog, HttpDeckStore
from riftdeck.services.mutations import (
    MutationResult,
    add_card,
    check_add,
    confirm_entry,
    remove_entry,
    set_quantity,
)
from riftdeck.services.validation import validate_deck

__all__ = [
    "CardCatalog",
    "DeckStore",
    "HttpCardCatalog",
    "HttpDeckStore",
    "InMemoryCardCatalog",
    "MutationCoordinator",
    "MutationResult",
    "SqlCardCatalog",
    "add_card",
    "check_add",
    "confirm_entry",
    "remove_entry",
    "require_card",
    "set_quantity",
    "validate_deck",
]
