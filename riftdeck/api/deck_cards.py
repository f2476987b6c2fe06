"""
Deck card placement endpoints.

Every write re-checks the construction preconditions against the stored
deck inside the request transaction; a rejected mutation returns 400 with a
reason code and writes nothing. Quantities are checked by the mutation
rules, so an out-of-range quantity is an invalid_quantity rejection.
"""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel, Field

from riftdeck.api.deps import SessionDep, UserIdDep
from riftdeck.api.schemas import EntryListResponse, EntryResponse
from riftdeck.db import deck_state_from_db
from riftdeck.models.zone import Zone
from riftdeck.services.deck_service import (
    StoredMutation,
    add_card_to_deck,
    find_entry_id,
    load_owned_deck,
    load_viewable_deck,
    remove_card_from_deck,
    set_entry_quantity,
)

router = APIRouter(prefix="/decks/{deck_id}/cards", tags=["deck cards"])


class AddCardRequest(BaseModel):
    """Add copies of a card to a zone."""

    card_id: str = Field(..., min_length=1)
    zone: Zone
    quantity: int = 1


class SetQuantityRequest(BaseModel):
    """Set the quantity of an entry addressed by (card_id, zone). 0 removes it."""

    card_id: str = Field(..., min_length=1)
    zone: Zone
    quantity: int


class EntryQuantityRequest(BaseModel):
    """Set the quantity of an entry addressed by id. 0 removes it."""

    quantity: int


class EntryMutationResponse(BaseModel):
    """The affected entry after a write; entry is null once deleted."""

    deck_id: str
    entry: EntryResponse | None = None
    deleted: bool = False


def _mutation_response(deck_id: str, stored: StoredMutation) -> EntryMutationResponse:
    if stored.entry is None:
        return EntryMutationResponse(deck_id=deck_id, deleted=True)
    return EntryMutationResponse(deck_id=deck_id, entry=EntryResponse.from_entry(stored.entry))


@router.get("", response_model=EntryListResponse)
async def list_cards(deck_id: str, session: SessionDep, user_id: UserIdDep) -> EntryListResponse:
    """List a deck's placements in deck order."""
    deck = await load_viewable_deck(session, deck_id, user_id)
    entries = [EntryResponse.from_entry(e) for e in deck_state_from_db(deck).entries]
    return EntryListResponse(deck_id=deck_id, cards=entries, count=len(entries))


@router.post(
    "",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": EntryResponse, "description": "Existing entry incremented"}},
)
async def add_card(
    deck_id: str,
    request: AddCardRequest,
    response: Response,
    session: SessionDep,
    user_id: UserIdDep,
) -> EntryResponse:
    """
    Add copies of a card to a zone.

    Returns 201 when a new entry is created and 200 when an existing
    (card, zone) entry is incremented.
    """
    stored = await add_card_to_deck(
        session, deck_id, user_id, request.card_id, request.zone, request.quantity
    )
    if stored.entry is None:
        msg = f"Adding {request.card_id} to deck {deck_id} stored no entry"
        raise RuntimeError(msg)
    if not stored.created:
        response.status_code = status.HTTP_200_OK
    return EntryResponse.from_entry(stored.entry)


@router.patch("", response_model=EntryMutationResponse)
async def set_card_quantity(
    deck_id: str,
    request: SetQuantityRequest,
    session: SessionDep,
    user_id: UserIdDep,
) -> EntryMutationResponse:
    """Set the quantity of a card in a zone. Increases are checked like adds."""
    deck = await load_owned_deck(session, deck_id, user_id)
    entry_id = find_entry_id(deck, request.card_id, request.zone)
    stored = await set_entry_quantity(session, deck_id, user_id, entry_id, request.quantity)
    return _mutation_response(deck_id, stored)


@router.delete("", response_model=EntryMutationResponse)
async def remove_card(
    deck_id: str,
    session: SessionDep,
    user_id: UserIdDep,
    card_id: Annotated[str, Query(min_length=1)],
    zone: Zone,
    quantity: int | None = None,
) -> EntryMutationResponse:
    """
    Remove copies of a card from a zone.

    Without quantity the whole entry is removed.
    """
    deck = await load_owned_deck(session, deck_id, user_id)
    entry_id = find_entry_id(deck, card_id, zone)
    stored = await remove_card_from_deck(session, deck_id, user_id, entry_id, quantity)
    return _mutation_response(deck_id, stored)


@router.patch("/{entry_id}", response_model=EntryMutationResponse)
async def set_entry(
    deck_id: str,
    entry_id: str,
    request: EntryQuantityRequest,
    session: SessionDep,
    user_id: UserIdDep,
) -> EntryMutationResponse:
    """Set an entry to an exact quantity."""
    stored = await set_entry_quantity(session, deck_id, user_id, entry_id, request.quantity)
    return _mutation_response(deck_id, stored)


@router.delete("/{entry_id}", response_model=EntryMutationResponse)
async def remove_entry(
    deck_id: str,
    entry_id: str,
    session: SessionDep,
    user_id: UserIdDep,
    quantity: int | None = None,
) -> EntryMutationResponse:
    """Remove copies from an entry, or the whole entry without quantity."""
    stored = await remove_card_from_deck(session, deck_id, user_id, entry_id, quantity)
    return _mutation_response(deck_id, stored)
