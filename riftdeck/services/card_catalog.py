"""
Card catalog access.

The catalog is a read-only lookup from card id to card metadata. Both the
validation engine and the mutation rules consume it through the narrow
CardCatalog protocol, so the same code runs against the database, the
HTTP API or an in-memory fixture.
"""

from collections.abc import Iterable
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from riftdeck.db.operations import card_to_model, get_cards_by_ids
from riftdeck.models.card import Card
from riftdeck.models.failure import CardNotFoundError


class CardCatalog(Protocol):
    """Read-only card lookup."""

    async def get_cards_by_ids(self, card_ids: Iterable[str]) -> dict[str, Card]:
        """Return {card_id: Card} for every known id; unknown ids are absent."""
        ...


class InMemoryCardCatalog:
    """Card catalog backed by a dict. Used for fixtures and tests."""

    def __init__(self, cards: Iterable[Card] = ()):
        self._cards = {card.card_id: card for card in cards}

    def add(self, card: Card) -> None:
        self._cards[card.card_id] = card

    async def get_cards_by_ids(self, card_ids: Iterable[str]) -> dict[str, Card]:
        return {
            card_id: self._cards[card_id] for card_id in set(card_ids) if card_id in self._cards
        }


class SqlCardCatalog:
    """Card catalog reading the cards table through an open session."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_cards_by_ids(self, card_ids: Iterable[str]) -> dict[str, Card]:
        rows = await get_cards_by_ids(self._session, card_ids)
        return {row.card_id: card_to_model(row) for row in rows}


async def require_card(catalog: CardCatalog, card_id: str) -> Card:
    """
    Fetch a single card.

    Raises:
        CardNotFoundError: If the catalog does not know the card
    """
    cards = await catalog.get_cards_by_ids({card_id})
    card = cards.get(card_id)
    if card is None:
        raise CardNotFoundError(card_id)
    return card
