"""
Request and response bodies shared by the deck endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from riftdeck.models.card import Card
from riftdeck.models.db import DeckDB
from riftdeck.models.deck import DeckCardEntry
from riftdeck.models.validation import DeckStatus, ValidationResult
from riftdeck.models.zone import Zone


class CardResponse(BaseModel):
    """A catalog card."""

    card_id: str
    name: str
    category: str
    domains: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    energy: int | None = None
    power: int | None = None
    might: int | None = None
    rarity: str | None = None

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            card_id=card.card_id,
            name=card.name,
            category=card.category.value,
            domains=sorted(card.domains),
            tags=list(card.tags),
            energy=card.energy,
            power=card.power,
            might=card.might,
            rarity=card.rarity,
        )


class EntryResponse(BaseModel):
    """A card placement."""

    id: str
    card_id: str
    zone: Zone
    quantity: int

    @classmethod
    def from_entry(cls, entry: DeckCardEntry) -> "EntryResponse":
        return cls(
            id=entry.entry_id,
            card_id=entry.card_id,
            zone=entry.zone,
            quantity=entry.quantity,
        )


class DeckResponse(BaseModel):
    """Deck header, without placements."""

    id: str
    user_id: str
    name: str
    description: str | None = None
    legend_card_id: str | None = None
    champion_card_id: str | None = None
    is_public: bool = False
    share_token: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_db(cls, deck: DeckDB) -> "DeckResponse":
        return cls(
            id=deck.id,
            user_id=deck.user_id,
            name=deck.name,
            description=deck.description,
            legend_card_id=deck.legend_card_id,
            champion_card_id=deck.champion_card_id,
            is_public=deck.is_public,
            share_token=deck.share_token,
            created_at=deck.created_at,
            updated_at=deck.updated_at,
        )


class DeckDetailResponse(DeckResponse):
    """Deck header with placements and its derived status."""

    cards: list[EntryResponse] = Field(default_factory=list)
    status: DeckStatus = DeckStatus.DRAFT
    validation: ValidationResult | None = None


class DeckListResponse(BaseModel):
    """A user's decks."""

    decks: list[DeckResponse]
    count: int


class EntryListResponse(BaseModel):
    """A deck's placements."""

    deck_id: str
    cards: list[EntryResponse]
    count: int
