"""
Card catalog endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel

from riftdeck.api.deps import SessionDep
from riftdeck.api.schemas import CardResponse
from riftdeck.services.card_catalog import SqlCardCatalog

router = APIRouter(prefix="/cards", tags=["cards"])


class CardListResponse(BaseModel):
    """Cards found for a lookup. Unknown ids are listed in missing."""

    cards: list[CardResponse]
    missing: list[str]


@router.get("", response_model=CardListResponse)
async def get_cards(
    session: SessionDep,
    ids: Annotated[list[str], Query()],
) -> CardListResponse:
    """Look up catalog cards by id."""
    found = await SqlCardCatalog(session).get_cards_by_ids(ids)
    return CardListResponse(
        cards=[CardResponse.from_card(found[card_id]) for card_id in sorted(found)],
        missing=sorted(set(ids) - set(found)),
    )
