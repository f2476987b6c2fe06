from riftdeck.api.cards import router as cards_router
from riftdeck.api.deck_cards import router as deck_cards_router
from riftdeck.api.decks import router as decks_router
from riftdeck.api.health import router as health_router
from riftdeck.api.shared import router as shared_router

__all__ = [
    "cards_router",
    "deck_cards_router",
    "decks_router",
    "health_router",
    "shared_router",
]
