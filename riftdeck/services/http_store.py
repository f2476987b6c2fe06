"""
HTTP implementations of the DeckStore and CardCatalog interfaces.

Talk to the riftdeck API as the system of record. Transport and HTTP
failures are mapped to KnownError subclasses so the coordinator can treat
them uniformly. No retries happen here.
"""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx

from riftdeck.config import settings
from riftdeck.models.card import Card, CardCategory
from riftdeck.models.deck import Deck, DeckCardEntry
from riftdeck.models.failure import DeckNotFoundError, PersistenceError
from riftdeck.models.zone import Zone


def card_from_payload(data: dict[str, Any]) -> Card:
    """Build a Card from its API representation."""
    return Card(
        card_id=data["card_id"],
        name=data.get("name") or data["card_id"],
        category=CardCategory.parse(data["category"]),
        domains=frozenset(data.get("domains") or ()),
        tags=tuple(data.get("tags") or ()),
        energy=data.get("energy"),
        power=data.get("power"),
        might=data.get("might"),
        rarity=data.get("rarity"),
    )


def deck_from_payload(data: dict[str, Any]) -> Deck:
    """Build a Deck header from its API representation."""
    return Deck(
        deck_id=data["id"],
        owner_id=data["user_id"],
        name=data.get("name") or "Untitled Deck",
        description=data.get("description"),
        legend_card_id=data.get("legend_card_id"),
        champion_card_id=data.get("champion_card_id"),
        is_public=bool(data.get("is_public", False)),
        share_token=data.get("share_token"),
    )


def entry_from_payload(data: dict[str, Any]) -> DeckCardEntry:
    """Build a DeckCardEntry from its API representation."""
    return DeckCardEntry(
        entry_id=data["id"],
        card_id=data["card_id"],
        zone=Zone(data["zone"]),
        quantity=int(data["quantity"]),
    )


class _ApiClient:
    """Shared request handling for the riftdeck API."""

    def __init__(
        self,
        user_id: str,
        base_url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self.user_id = user_id
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._client = client

    async def request(
        self,
        method: str,
        path: str,
        *,
        deck_id: str | None = None,
        params: Any = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises:
            DeckNotFoundError: 404 when deck_id is given
            PersistenceError: Network errors, other HTTP errors, bad JSON
        """
        url = f"{self.base_url}{path}"
        headers = {settings.user_id_header: self.user_id}

        try:
            if self._client is not None:
                response = await self._client.request(
                    method, url, params=params, json=body, headers=headers
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method, url, params=params, json=body, headers=headers
                    )
        except httpx.RequestError as exc:
            raise PersistenceError(f"Network error talking to {self.base_url}", str(exc)) from exc

        if response.status_code == 404 and deck_id is not None:
            raise DeckNotFoundError(deck_id)
        if not response.is_success:
            raise PersistenceError(
                _error_message(response),
                detail=f"{method} {path}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise PersistenceError(f"Invalid JSON response: {response.text}") from exc


@contextmanager
def _payload(what: str) -> Iterator[None]:
    """Turn a response body of the wrong shape into a PersistenceError."""
    try:
        yield
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise PersistenceError(f"Malformed {what} in response", detail=repr(exc)) from exc


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except json.JSONDecodeError:
        return f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        return str(payload.get("error") or payload.get("detail") or payload)
    return str(payload)


class HttpDeckStore(_ApiClient):
    """DeckStore backed by the riftdeck HTTP API."""

    async def get_deck(self, deck_id: str) -> Deck:
        data = await self.request("GET", f"/decks/{deck_id}", deck_id=deck_id)
        with _payload("deck"):
            deck = deck_from_payload(data)
        return deck

    async def list_entries(self, deck_id: str) -> list[DeckCardEntry]:
        data = await self.request("GET", f"/decks/{deck_id}/cards")
        with _payload("entry list"):
            entries = [entry_from_payload(item) for item in data["cards"]]
        return entries

    async def upsert_entry(
        self, deck_id: str, card_id: str, zone: Zone, quantity: int
    ) -> DeckCardEntry:
        data = await self.request(
            "POST",
            f"/decks/{deck_id}/cards",
            body={"card_id": card_id, "zone": zone.value, "quantity": quantity},
        )
        with _payload("entry"):
            entry = entry_from_payload(data)
        return entry

    async def set_entry_quantity(
        self, deck_id: str, entry_id: str, quantity: int
    ) -> DeckCardEntry | None:
        data = await self.request(
            "PATCH",
            f"/decks/{deck_id}/cards/{entry_id}",
            body={"quantity": quantity},
        )
        with _payload("entry"):
            payload = data["entry"]
            entry = entry_from_payload(payload) if payload else None
        return entry

    async def delete_entry(self, deck_id: str, entry_id: str) -> None:
        await self.request("DELETE", f"/decks/{deck_id}/cards/{entry_id}")

    async def patch_deck_references(
        self, deck_id: str, references: dict[Zone, str | None]
    ) -> Deck:
        body = {f"{zone.value}_card_id": card_id for zone, card_id in references.items()}
        data = await self.request("PATCH", f"/decks/{deck_id}/references", body=body)
        with _payload("deck"):
            deck = deck_from_payload(data)
        return deck


class HttpCardCatalog(_ApiClient):
    """CardCatalog backed by the riftdeck HTTP API."""

    async def get_cards_by_ids(self, card_ids: Any) -> dict[str, Card]:
        ids = sorted(set(card_ids))
        if not ids:
            return {}
        data = await self.request("GET", "/cards", params={"ids": ids})
        with _payload("card list"):
            cards = [card_from_payload(item) for item in data["cards"]]
        return {card.card_id: card for card in cards}
