"""
Read-only shared deck view.

Anyone holding a share token may view the deck; no caller identity is
required and nothing can be changed through this route.
"""

from fastapi import APIRouter

from riftdeck.api.decks import build_detail
from riftdeck.api.deps import SessionDep
from riftdeck.api.schemas import DeckDetailResponse
from riftdeck.services.deck_service import load_shared_deck

router = APIRouter(prefix="/shared", tags=["shared"])


@router.get("/{token}", response_model=DeckDetailResponse)
async def get_shared_deck(token: str, session: SessionDep) -> DeckDetailResponse:
    """Get a shared deck with its placements and validation status."""
    deck = await load_shared_deck(session, token)
    return await build_detail(session, deck)
