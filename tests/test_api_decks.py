"""Tests for deck API endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from riftdeck.db import upsert_card
from riftdeck.db.database import get_session
from riftdeck.main import app
from riftdeck.models.card import Card
from riftdeck.models.db import Base

OWNER = {"X-User-Id": "user-1"}
STRANGER = {"X-User-Id": "user-2"}


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
async def client(async_engine, all_cards: list[Card]):
    """Provide an async test client over a database seeded with the card catalog."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        for card in all_cards:
            await upsert_card(session, card)
        await session.commit()

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def _create_deck(client: AsyncClient, **body) -> dict:
    response = await client.post("/decks", json=body, headers=OWNER)
    assert response.status_code == 201
    return response.json()


class TestIdentity:
    async def test_missing_user_header(self, client: AsyncClient) -> None:
        """Deck endpoints require the caller identity header."""
        response = await client.get("/decks")

        assert response.status_code == 401

    async def test_blank_user_header(self, client: AsyncClient) -> None:
        response = await client.get("/decks", headers={"X-User-Id": "  "})

        assert response.status_code == 401


class TestDeckCrud:
    async def test_create_deck(self, client: AsyncClient) -> None:
        """New decks are drafts with default name."""
        data = await _create_deck(client)

        assert data["name"] == "Untitled Deck"
        assert data["user_id"] == "user-1"
        assert data["status"] == "draft"
        assert data["cards"] == []
        assert data["validation"]["valid"] is False
        assert data["validation"]["checks"]["hasLegend"] is False

    async def test_list_decks(self, client: AsyncClient) -> None:
        await _create_deck(client, name="A")
        await _create_deck(client, name="B")

        response = await client.get("/decks", headers=OWNER)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert {d["name"] for d in data["decks"]} == {"A", "B"}

        other = await client.get("/decks", headers=STRANGER)
        assert other.json()["count"] == 0

    async def test_get_deck(self, client: AsyncClient) -> None:
        created = await _create_deck(client, name="Sett Aggro", description="Fast")

        response = await client.get(f"/decks/{created['id']}", headers=OWNER)

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Sett Aggro"
        assert data["description"] == "Fast"

    async def test_get_unknown_deck(self, client: AsyncClient) -> None:
        response = await client.get("/decks/missing", headers=OWNER)

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "Deck not found"
        assert data["failure"]["kind"] == "not_found"

    async def test_private_deck_forbidden(self, client: AsyncClient) -> None:
        created = await _create_deck(client)

        response = await client.get(f"/decks/{created['id']}", headers=STRANGER)

        assert response.status_code == 403
        assert response.json()["failure"]["kind"] == "access_denied"

    async def test_public_deck_visible(self, client: AsyncClient) -> None:
        created = await _create_deck(client)

        update = await client.patch(
            f"/decks/{created['id']}", json={"is_public": True}, headers=OWNER
        )
        assert update.status_code == 200
        assert update.json()["is_public"] is True

        response = await client.get(f"/decks/{created['id']}", headers=STRANGER)
        assert response.status_code == 200

    async def test_stranger_cannot_update(self, client: AsyncClient) -> None:
        created = await _create_deck(client)

        response = await client.patch(
            f"/decks/{created['id']}", json={"name": "Mine now"}, headers=STRANGER
        )

        assert response.status_code == 403

    async def test_rename_deck(self, client: AsyncClient) -> None:
        created = await _create_deck(client)

        response = await client.patch(
            f"/decks/{created['id']}", json={"name": "Renamed"}, headers=OWNER
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"

    async def test_delete_deck(self, client: AsyncClient) -> None:
        created = await _create_deck(client)

        response = await client.delete(f"/decks/{created['id']}", headers=OWNER)
        assert response.status_code == 204

        missing = await client.get(f"/decks/{created['id']}", headers=OWNER)
        assert missing.status_code == 404


class TestValidateEndpoint:
    async def test_validate_new_deck(self, client: AsyncClient) -> None:
        """Validation of a draft is a 200 with camelCase check names."""
        created = await _create_deck(client)

        response = await client.get(f"/decks/{created['id']}/validate", headers=OWNER)

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert "No legend selected" in data["errors"]
        assert set(data["checks"]) == {
            "hasLegend",
            "hasChampion",
            "championMatchesLegend",
            "runesComplete",
            "runesDomainMatch",
            "battlefieldsComplete",
            "mainBoardComplete",
            "cardLimitsValid",
        }

    async def test_validate_complete_deck(
        self, client: AsyncClient, complete_placements: list
    ) -> None:
        created = await _create_deck(client)
        for card_id, zone, quantity in complete_placements:
            response = await client.post(
                f"/decks/{created['id']}/cards",
                json={"card_id": card_id, "zone": zone.value, "quantity": quantity},
                headers=OWNER,
            )
            assert response.status_code == 201

        response = await client.get(f"/decks/{created['id']}/validate", headers=OWNER)

        assert response.json() == {
            "valid": True,
            "errors": [],
            "checks": {
                "hasLegend": True,
                "hasChampion": True,
                "championMatchesLegend": True,
                "runesComplete": True,
                "runesDomainMatch": True,
                "battlefieldsComplete": True,
                "mainBoardComplete": True,
                "cardLimitsValid": True,
            },
        }

        deck = await client.get(f"/decks/{created['id']}", headers=OWNER)
        assert deck.json()["status"] == "valid"


class TestReferences:
    async def test_reference_must_match_zone(self, client: AsyncClient, legend: Card) -> None:
        created = await _create_deck(client)

        response = await client.patch(
            f"/decks/{created['id']}/references",
            json={"legend_card_id": legend.card_id},
            headers=OWNER,
        )

        assert response.status_code == 409

    async def test_reference_set_after_add(self, client: AsyncClient, legend: Card) -> None:
        created = await _create_deck(client)
        await client.post(
            f"/decks/{created['id']}/cards",
            json={"card_id": legend.card_id, "zone": "legend"},
            headers=OWNER,
        )

        response = await client.patch(
            f"/decks/{created['id']}/references",
            json={"legend_card_id": legend.card_id},
            headers=OWNER,
        )

        assert response.status_code == 200
        assert response.json()["legend_card_id"] == legend.card_id


class TestSharing:
    async def test_share_and_view(self, client: AsyncClient) -> None:
        """A shared draft can be viewed without identity."""
        created = await _create_deck(client, name="Shared")

        share = await client.post(f"/decks/{created['id']}/share", headers=OWNER)
        assert share.status_code == 200
        token = share.json()["share_token"]

        response = await client.get(f"/shared/{token}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Shared"
        assert data["status"] == "draft"

    async def test_unknown_token(self, client: AsyncClient) -> None:
        response = await client.get("/shared/bogus")

        assert response.status_code == 404

    async def test_stranger_cannot_share(self, client: AsyncClient) -> None:
        created = await _create_deck(client)

        response = await client.post(f"/decks/{created['id']}/share", headers=STRANGER)

        assert response.status_code == 403
