"""
Database CRUD operations.

Provides async functions for reading and writing catalog cards, decks and
deck card placements. These are plain data access: deck construction rules
are enforced by the deck service before any of them is called.
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from riftdeck.models.card import Card, CardCategory
from riftdeck.models.db import CardDB, DeckCardDB, DeckDB
from riftdeck.models.deck import Deck, DeckCardEntry, DeckState
from riftdeck.models.zone import Zone

# --- Card Operations ---


async def get_cards_by_ids(session: AsyncSession, card_ids: Iterable[str]) -> list[CardDB]:
    """Get catalog cards by id. Unknown ids are simply absent from the result."""
    ids = set(card_ids)
    if not ids:
        return []
    result = await session.execute(select(CardDB).where(CardDB.card_id.in_(ids)))
    return list(result.scalars().all())


async def upsert_card(session: AsyncSession, card: Card) -> CardDB:
    """
    Insert or update a catalog card.

    If a card with the same card_id exists, updates it.
    Otherwise creates a new record.
    """
    existing = await session.get(CardDB, card.card_id)
    values: dict[str, Any] = {
        "name": card.name,
        "category": card.category.value,
        "domains": sorted(card.domains),
        "tags": list(card.tags),
        "energy": card.energy,
        "power": card.power,
        "might": card.might,
        "rarity": card.rarity,
    }

    if existing:
        for key, value in values.items():
            setattr(existing, key, value)
        await session.flush()
        return existing

    db_card = CardDB(card_id=card.card_id, **values)
    session.add(db_card)
    await session.flush()
    return db_card


def card_to_model(db_card: CardDB) -> Card:
    """Convert a database card to a domain model."""
    return Card(
        card_id=db_card.card_id,
        name=db_card.name,
        category=CardCategory.parse(db_card.category),
        domains=frozenset(db_card.domains or ()),
        tags=tuple(db_card.tags or ()),
        energy=db_card.energy,
        power=db_card.power,
        might=db_card.might,
        rarity=db_card.rarity,
    )


# --- Deck Operations ---


async def create_deck(
    session: AsyncSession,
    user_id: str,
    name: str | None = None,
    description: str | None = None,
) -> DeckDB:
    """Create a new, empty deck owned by user_id."""
    deck = DeckDB(user_id=user_id, name=name or "Untitled Deck", description=description)
    session.add(deck)
    await session.flush()
    await session.refresh(deck, attribute_names=["cards"])
    return deck


async def get_deck(
    session: AsyncSession, deck_id: str, *, for_update: bool = False
) -> DeckDB | None:
    """
    Get a deck with its card placements.

    With for_update, the deck row stays locked until the transaction ends,
    serializing concurrent writers to the same deck.

    Returns None if no deck exists with this id.
    """
    stmt = (
        select(DeckDB)
        .where(DeckDB.id == deck_id)
        .options(selectinload(DeckDB.cards))
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_deck_by_share_token(session: AsyncSession, token: str) -> DeckDB | None:
    """Get a shared deck by its share token."""
    result = await session.execute(
        select(DeckDB).where(DeckDB.share_token == token).options(selectinload(DeckDB.cards))
    )
    return result.scalar_one_or_none()


async def list_decks(session: AsyncSession, user_id: str) -> list[DeckDB]:
    """Get all of a user's decks, most recently updated first."""
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.user_id == user_id)
        .options(selectinload(DeckDB.cards))
        .order_by(DeckDB.updated_at.desc(), DeckDB.created_at.desc())
    )
    return list(result.scalars().all())


async def update_deck(session: AsyncSession, deck: DeckDB, **fields: Any) -> DeckDB:
    """Apply field updates to a deck. Only known columns may be set."""
    for key, value in fields.items():
        if not hasattr(DeckDB, key):
            msg = f"Unknown deck field: {key}"
            raise ValueError(msg)
        setattr(deck, key, value)
    touch_deck(deck)
    await session.flush()
    return deck


def touch_deck(deck: DeckDB) -> None:
    """Mark a deck as updated now (used when its placements change)."""
    deck.updated_at = func.now()  # type: ignore[assignment]


async def delete_deck(session: AsyncSession, deck_id: str) -> bool:
    """
    Delete a deck and its card placements.

    Returns True if deleted, False if not found.
    """
    deck = await get_deck(session, deck_id)
    if not deck:
        return False

    await session.delete(deck)
    await session.flush()
    return True


def deck_to_model(db_deck: DeckDB) -> Deck:
    """Convert a database deck header to a domain model."""
    return Deck(
        deck_id=db_deck.id,
        owner_id=db_deck.user_id,
        name=db_deck.name,
        description=db_deck.description,
        legend_card_id=db_deck.legend_card_id,
        champion_card_id=db_deck.champion_card_id,
        is_public=db_deck.is_public,
        share_token=db_deck.share_token,
    )


def entry_to_model(db_entry: DeckCardDB) -> DeckCardEntry:
    """Convert a database card placement to a domain model."""
    return DeckCardEntry(
        entry_id=db_entry.id,
        card_id=db_entry.card_id,
        zone=Zone(db_entry.zone),
        quantity=db_entry.quantity,
    )


def deck_state_from_db(db_deck: DeckDB) -> DeckState:
    """Build the deck aggregate from a deck loaded with its placements."""
    return DeckState.build(deck_to_model(db_deck), (entry_to_model(e) for e in db_deck.cards))


# --- Deck Card Operations ---


async def list_entries(session: AsyncSession, deck_id: str) -> list[DeckCardDB]:
    """Get a deck's card placements in insertion order."""
    result = await session.execute(
        select(DeckCardDB).where(DeckCardDB.deck_id == deck_id).order_by(DeckCardDB.position)
    )
    return list(result.scalars().all())


async def get_entry(session: AsyncSession, deck_id: str, entry_id: str) -> DeckCardDB | None:
    """Get a single placement, scoped to its deck."""
    result = await session.execute(
        select(DeckCardDB).where(DeckCardDB.id == entry_id, DeckCardDB.deck_id == deck_id)
    )
    return result.scalar_one_or_none()


async def upsert_entry(
    session: AsyncSession,
    deck_id: str,
    card_id: str,
    zone: Zone,
    quantity: int,
) -> tuple[DeckCardDB, bool]:
    """
    Store the quantity of a card in a zone.

    Updates the existing (deck, card, zone) row or creates a new one.

    Returns:
        Tuple of (entry, created) where created is True if new.
    """
    result = await session.execute(
        select(DeckCardDB).where(
            DeckCardDB.deck_id == deck_id,
            DeckCardDB.card_id == card_id,
            DeckCardDB.zone == zone.value,
        )
    )
    existing = result.scalar_one_or_none()

    if existing:
        existing.quantity = quantity
        await session.flush()
        return existing, False

    position = await session.scalar(
        select(func.coalesce(func.max(DeckCardDB.position), -1)).where(
            DeckCardDB.deck_id == deck_id
        )
    )
    entry = DeckCardDB(
        deck_id=deck_id,
        card_id=card_id,
        zone=zone.value,
        quantity=quantity,
        position=int(position if position is not None else -1) + 1,
    )
    session.add(entry)
    await session.flush()
    return entry, True


async def delete_entry(session: AsyncSession, deck_id: str, entry_id: str) -> bool:
    """
    Delete a card placement.

    Returns True if deleted, False if not found.
    """
    entry = await get_entry(session, deck_id, entry_id)
    if not entry:
        return False

    await session.delete(entry)
    await session.flush()
    return True


async def patch_deck_references(
    session: AsyncSession,
    deck: DeckDB,
    references: dict[str, str | None],
) -> DeckDB:
    """
    Set the legend and/or champion reference of a deck.

    Args:
        references: Subset of {"legend_card_id", "champion_card_id"}; keys
            that are absent are left unchanged, None clears a reference.
    """
    unknown = set(references) - {"legend_card_id", "champion_card_id"}
    if unknown:
        msg = f"Not a deck reference: {sorted(unknown)}"
        raise ValueError(msg)
    return await update_deck(session, deck, **references)
