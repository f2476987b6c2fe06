"""
Deck API endpoints.

Create, read, update and delete a user's decks, set their legend/champion
references, validate them and issue share links. Card placements live in
riftdeck.api.deck_cards.
"""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from riftdeck.api.deps import SessionDep, UserIdDep
from riftdeck.api.schemas import (
    DeckDetailResponse,
    DeckListResponse,
    DeckResponse,
    EntryResponse,
)
from riftdeck.db import deck_state_from_db, list_decks
from riftdeck.models.db import DeckDB
from riftdeck.models.validation import ValidationResult
from riftdeck.models.zone import Zone
from riftdeck.services.deck_service import (
    edit_deck,
    issue_share_token,
    load_viewable_deck,
    remove_deck,
    set_references,
    start_deck,
    validate_stored_deck,
)

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckCreateRequest(BaseModel):
    """Request body for creating a deck."""

    name: str | None = Field(default=None, max_length=255)
    description: str | None = None


class DeckUpdateRequest(BaseModel):
    """Request body for updating deck metadata. Absent fields are unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    is_public: bool | None = None


class ReferencesRequest(BaseModel):
    """
    Legend/champion references. Absent fields are unchanged; null clears.
    """

    legend_card_id: str | None = None
    champion_card_id: str | None = None


class ShareResponse(BaseModel):
    """A freshly issued share token."""

    deck_id: str
    share_token: str


async def build_detail(session: AsyncSession, deck: DeckDB) -> DeckDetailResponse:
    """Deck header plus placements and the derived validation result."""
    state = deck_state_from_db(deck)
    validation = await validate_stored_deck(session, deck)
    return DeckDetailResponse(
        **DeckResponse.from_db(deck).model_dump(),
        cards=[EntryResponse.from_entry(entry) for entry in state.entries],
        status=validation.status,
        validation=validation,
    )


@router.post("", response_model=DeckDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_deck(
    request: DeckCreateRequest,
    session: SessionDep,
    user_id: UserIdDep,
) -> DeckDetailResponse:
    """Create an empty deck. New decks start as drafts."""
    deck = await start_deck(session, user_id, name=request.name, description=request.description)
    return await build_detail(session, deck)


@router.get("", response_model=DeckListResponse)
async def get_decks(session: SessionDep, user_id: UserIdDep) -> DeckListResponse:
    """List the caller's decks, most recently updated first."""
    decks = [DeckResponse.from_db(deck) for deck in await list_decks(session, user_id)]
    return DeckListResponse(decks=decks, count=len(decks))


@router.get("/{deck_id}", response_model=DeckDetailResponse)
async def get_deck(deck_id: str, session: SessionDep, user_id: UserIdDep) -> DeckDetailResponse:
    """
    Get a deck with its placements.

    Visible to the owner, or to anyone if the deck is public.
    """
    deck = await load_viewable_deck(session, deck_id, user_id)
    return await build_detail(session, deck)


@router.patch("/{deck_id}", response_model=DeckDetailResponse)
async def update_deck(
    deck_id: str,
    request: DeckUpdateRequest,
    session: SessionDep,
    user_id: UserIdDep,
) -> DeckDetailResponse:
    """Update name, description or visibility of an owned deck."""
    fields = request.model_dump(exclude_unset=True)
    if fields.get("is_public") is None:
        fields.pop("is_public", None)
    if "name" in fields and fields["name"] is None:
        del fields["name"]
    deck = await edit_deck(session, deck_id, user_id, **fields)
    return await build_detail(session, deck)


@router.delete("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(deck_id: str, session: SessionDep, user_id: UserIdDep) -> Response:
    """Delete an owned deck and all of its placements."""
    await remove_deck(session, deck_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{deck_id}/references", response_model=DeckResponse)
async def update_references(
    deck_id: str,
    request: ReferencesRequest,
    session: SessionDep,
    user_id: UserIdDep,
) -> DeckResponse:
    """
    Set or clear the legend/champion references.

    A reference must name the card in its zone; returns 409 otherwise.
    """
    fields = request.model_dump(exclude_unset=True)
    references: dict[Zone, str | None] = {}
    if "legend_card_id" in fields:
        references[Zone.LEGEND] = fields["legend_card_id"]
    if "champion_card_id" in fields:
        references[Zone.CHAMPION] = fields["champion_card_id"]
    deck = await set_references(session, deck_id, user_id, references)
    return DeckResponse.from_db(deck)


@router.get("/{deck_id}/validate", response_model=ValidationResult)
async def validate_deck(deck_id: str, session: SessionDep, user_id: UserIdDep) -> ValidationResult:
    """
    Validate a deck against the construction rules.

    Always 200: an invalid deck is a draft, not an error.
    """
    deck = await load_viewable_deck(session, deck_id, user_id)
    return await validate_stored_deck(session, deck)


@router.post("/{deck_id}/share", response_model=ShareResponse)
async def share_deck(deck_id: str, session: SessionDep, user_id: UserIdDep) -> ShareResponse:
    """Issue a share token for an owned deck. Drafts can be shared too."""
    token = await issue_share_token(session, deck_id, user_id)
    return ShareResponse(deck_id=deck_id, share_token=token)
