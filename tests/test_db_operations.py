"""Tests for database CRUD operations."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from riftdeck.db.operations import (
    card_to_model,
    create_deck,
    deck_state_from_db,
    delete_deck,
    delete_entry,
    get_cards_by_ids,
    get_deck,
    get_deck_by_share_token,
    list_decks,
    list_entries,
    patch_deck_references,
    update_deck,
    upsert_card,
    upsert_entry,
)
from riftdeck.models.card import Card, CardCategory
from riftdeck.models.db import Base
from riftdeck.models.zone import Zone


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


class TestCardOperations:
    async def test_upsert_and_read_card(self, session: AsyncSession, legend: Card) -> None:
        """A stored card converts back to the same domain model."""
        await upsert_card(session, legend)
        await session.commit()

        rows = await get_cards_by_ids(session, [legend.card_id, "missing"])

        assert len(rows) == 1
        assert card_to_model(rows[0]) == legend

    async def test_upsert_updates_existing(self, session: AsyncSession) -> None:
        card = Card(card_id="X", name="Old", category=CardCategory.UNIT)
        await upsert_card(session, card)
        await upsert_card(session, Card(card_id="X", name="New", category=CardCategory.SPELL))
        await session.commit()

        rows = await get_cards_by_ids(session, ["X"])

        assert rows[0].name == "New"
        assert rows[0].category == "spell"

    async def test_empty_lookup(self, session: AsyncSession) -> None:
        assert await get_cards_by_ids(session, []) == []


class TestDeckOperations:
    async def test_create_deck_defaults(self, session: AsyncSession) -> None:
        """New decks are empty, private and named 'Untitled Deck'."""
        deck = await create_deck(session, "user-1")

        assert deck.id is not None
        assert deck.name == "Untitled Deck"
        assert deck.is_public is False
        assert deck.cards == []

    async def test_get_deck(self, session: AsyncSession) -> None:
        created = await create_deck(session, "user-1", name="Sett Aggro")
        await session.commit()

        deck = await get_deck(session, created.id)

        assert deck is not None
        assert deck.name == "Sett Aggro"
        assert await get_deck(session, "missing") is None

    async def test_get_deck_for_update(self, session: AsyncSession) -> None:
        """Row locking is a no-op on SQLite but the query still works."""
        created = await create_deck(session, "user-1")

        deck = await get_deck(session, created.id, for_update=True)

        assert deck is not None

    async def test_list_decks_scoped_to_user(self, session: AsyncSession) -> None:
        await create_deck(session, "user-1", name="A")
        await create_deck(session, "user-1", name="B")
        await create_deck(session, "user-2", name="C")
        await session.commit()

        decks = await list_decks(session, "user-1")

        assert {d.name for d in decks} == {"A", "B"}

    async def test_update_deck(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-1")

        await update_deck(session, deck, name="Renamed", is_public=True)
        await session.commit()

        reloaded = await get_deck(session, deck.id)
        assert reloaded is not None
        assert reloaded.name == "Renamed"
        assert reloaded.is_public is True

    async def test_update_unknown_field(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-1")
        with pytest.raises(ValueError, match="Unknown deck field"):
            await update_deck(session, deck, colour="red")

    async def test_share_token_lookup(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-1")
        await update_deck(session, deck, share_token="tok-123")
        await session.commit()

        shared = await get_deck_by_share_token(session, "tok-123")

        assert shared is not None
        assert shared.id == deck.id
        assert await get_deck_by_share_token(session, "nope") is None

    async def test_delete_deck_cascades(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-1")
        await upsert_entry(session, deck.id, "OGN-U01", Zone.MAIN, 2)
        await session.commit()

        assert await delete_deck(session, deck.id) is True
        await session.commit()

        assert await get_deck(session, deck.id) is None
        assert await list_entries(session, deck.id) == []
        assert await delete_deck(session, deck.id) is False

    async def test_patch_references(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-1")

        await patch_deck_references(session, deck, {"legend_card_id": "OGN-L01"})
        await session.commit()

        reloaded = await get_deck(session, deck.id)
        assert reloaded is not None
        assert reloaded.legend_card_id == "OGN-L01"
        assert reloaded.champion_card_id is None

    async def test_patch_references_rejects_other_fields(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-1")
        with pytest.raises(ValueError, match="Not a deck reference"):
            await patch_deck_references(session, deck, {"name": "x"})


class TestEntryOperations:
    async def test_upsert_creates_then_updates(self, session: AsyncSession) -> None:
        """One row per (deck, card, zone); upsert stores the given quantity."""
        deck = await create_deck(session, "user-1")

        entry, created = await upsert_entry(session, deck.id, "OGN-U01", Zone.MAIN, 1)
        assert created is True

        again, created = await upsert_entry(session, deck.id, "OGN-U01", Zone.MAIN, 3)
        assert created is False
        assert again.id == entry.id
        assert again.quantity == 3

    async def test_same_card_other_zone_is_new_row(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-1")
        await upsert_entry(session, deck.id, "OGN-U01", Zone.MAIN, 1)
        _, created = await upsert_entry(session, deck.id, "OGN-U01", Zone.SIDE, 1)
        assert created is True

    async def test_entries_keep_insertion_order(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-1")
        for card_id in ("C", "A", "B"):
            await upsert_entry(session, deck.id, card_id, Zone.MAIN, 1)
        await session.commit()

        entries = await list_entries(session, deck.id)

        assert [e.card_id for e in entries] == ["C", "A", "B"]
        assert [e.position for e in entries] == [0, 1, 2]

    async def test_delete_entry(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-1")
        entry, _ = await upsert_entry(session, deck.id, "OGN-U01", Zone.MAIN, 1)

        assert await delete_entry(session, deck.id, entry.id) is True
        assert await delete_entry(session, deck.id, entry.id) is False
        assert await delete_entry(session, "other-deck", "nope") is False

    async def test_deck_state_from_db(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-1")
        await upsert_entry(session, deck.id, "OGN-L01", Zone.LEGEND, 1)
        await patch_deck_references(session, deck, {"legend_card_id": "OGN-L01"})
        await session.commit()

        loaded = await get_deck(session, deck.id)
        assert loaded is not None
        state = deck_state_from_db(loaded)

        assert state.deck.legend_card_id == "OGN-L01"
        assert state.zone_count(Zone.LEGEND) == 1
        assert state.reference_problems() == []
