"""
Server-side deck service.

The system of record for deck placements. Each public function runs inside
the caller's session (one request, one transaction) and re-checks every
mutation precondition against the authoritative deck state at write time,
whatever the client may already have checked.
"""

import logging
import secrets
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from riftdeck.db.operations import (
    create_deck,
    deck_state_from_db,
    delete_deck,
    entry_to_model,
    get_deck,
    get_deck_by_share_token,
    patch_deck_references,
    touch_deck,
    update_deck,
    upsert_entry,
)
from riftdeck.db.operations import delete_entry as delete_entry_row
from riftdeck.models.db import DeckDB
from riftdeck.models.deck import DeckCardEntry, DeckState
from riftdeck.models.failure import (
    AccessDeniedError,
    DeckNotFoundError,
    EntryNotFoundError,
    FailureKind,
    KnownError,
)
from riftdeck.models.validation import ValidationResult
from riftdeck.models.zone import SINGLE_CARD_ZONES, Zone
from riftdeck.services.card_catalog import SqlCardCatalog, require_card
from riftdeck.services.mutations import MutationResult, add_card, remove_entry, set_quantity
from riftdeck.services.validation import validate_deck

logger = logging.getLogger(__name__)

_REFERENCE_FIELDS = {Zone.LEGEND: "legend_card_id", Zone.CHAMPION: "champion_card_id"}


@dataclass(frozen=True, slots=True)
class StoredMutation:
    """Result of a committed mutation: the stored entry (None if deleted)."""

    entry: DeckCardEntry | None
    created: bool
    state: DeckState


# --- Access ---


async def load_deck(session: AsyncSession, deck_id: str, *, for_update: bool = False) -> DeckDB:
    """
    Load a deck with its placements.

    Raises:
        DeckNotFoundError: If no deck exists with this id
    """
    deck = await get_deck(session, deck_id, for_update=for_update)
    if deck is None:
        raise DeckNotFoundError(deck_id)
    return deck


async def load_owned_deck(
    session: AsyncSession, deck_id: str, user_id: str, *, for_update: bool = False
) -> DeckDB:
    """Load a deck the caller owns. Raises AccessDeniedError otherwise."""
    deck = await load_deck(session, deck_id, for_update=for_update)
    if deck.user_id != user_id:
        raise AccessDeniedError()
    return deck


async def load_viewable_deck(session: AsyncSession, deck_id: str, user_id: str) -> DeckDB:
    """Load a deck the caller owns or that is public."""
    deck = await load_deck(session, deck_id)
    if deck.user_id != user_id and not deck.is_public:
        raise AccessDeniedError()
    return deck


# --- Deck lifecycle ---


async def start_deck(
    session: AsyncSession,
    user_id: str,
    name: str | None = None,
    description: str | None = None,
) -> DeckDB:
    """Create a new, empty deck (Draft)."""
    deck = await create_deck(session, user_id, name=name, description=description)
    logger.info("Created deck %s for user %s", deck.id, user_id)
    return await load_deck(session, deck.id)


async def edit_deck(
    session: AsyncSession,
    deck_id: str,
    user_id: str,
    **fields: str | bool | None,
) -> DeckDB:
    """Update name, description or visibility of an owned deck."""
    deck = await load_owned_deck(session, deck_id, user_id)
    allowed = {"name", "description", "is_public"}
    unknown = set(fields) - allowed
    if unknown:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message=f"Cannot update deck fields: {sorted(unknown)}",
        )
    if fields:
        await update_deck(session, deck, **fields)
    return await load_deck(session, deck_id)


async def remove_deck(session: AsyncSession, deck_id: str, user_id: str) -> None:
    """Delete an owned deck and all of its placements."""
    await load_owned_deck(session, deck_id, user_id)
    await delete_deck(session, deck_id)
    logger.info("Deleted deck %s", deck_id)


async def issue_share_token(session: AsyncSession, deck_id: str, user_id: str) -> str:
    """
    Generate and store a share token for an owned deck.

    Sharing is orthogonal to validity: draft decks can be shared too.
    Re-issuing replaces the previous token.
    """
    deck = await load_owned_deck(session, deck_id, user_id)
    token = secrets.token_urlsafe(16)
    await update_deck(session, deck, share_token=token)
    logger.info("Issued share token for deck %s", deck_id)
    return token


async def load_shared_deck(session: AsyncSession, token: str) -> DeckDB:
    """Load a deck by share token. No ownership required."""
    deck = await get_deck_by_share_token(session, token)
    if deck is None:
        raise DeckNotFoundError(token)
    return deck


# --- Validation ---


async def validate_stored_deck(session: AsyncSession, deck: DeckDB) -> ValidationResult:
    """Validate the authoritative state of a loaded deck."""
    state = deck_state_from_db(deck)
    cards = await SqlCardCatalog(session).get_cards_by_ids(state.card_ids())
    return validate_deck(state, cards)


# --- Placements ---


async def add_card_to_deck(
    session: AsyncSession,
    deck_id: str,
    user_id: str,
    card_id: str,
    zone: Zone,
    quantity: int = 1,
) -> StoredMutation:
    """
    Add copies of a card to a zone (create or increment).

    Preconditions are evaluated against the stored deck; a rejection raises
    before anything is written.
    """
    deck = await load_owned_deck(session, deck_id, user_id, for_update=True)
    card = await require_card(SqlCardCatalog(session), card_id)
    result = add_card(deck_state_from_db(deck), card, zone, quantity)
    return await _store(session, deck, result)


async def remove_card_from_deck(
    session: AsyncSession,
    deck_id: str,
    user_id: str,
    entry_id: str,
    quantity: int | None = 1,
) -> StoredMutation:
    """
    Remove copies from an entry; the entry is deleted when it reaches zero.

    A quantity of None removes the whole entry.
    """
    deck = await load_owned_deck(session, deck_id, user_id, for_update=True)
    state = deck_state_from_db(deck)
    if quantity is None:
        existing = state.entry_by_id(entry_id)
        if existing is None:
            raise EntryNotFoundError(entry_id)
        quantity = existing.quantity
    result = remove_entry(state, entry_id, quantity)
    return await _store(session, deck, result)


async def set_entry_quantity(
    session: AsyncSession,
    deck_id: str,
    user_id: str,
    entry_id: str,
    quantity: int,
) -> StoredMutation:
    """Set an entry to an exact quantity (0 deletes it)."""
    deck = await load_owned_deck(session, deck_id, user_id, for_update=True)
    state = deck_state_from_db(deck)
    existing = state.entry_by_id(entry_id)
    if existing is None:
        raise EntryNotFoundError(entry_id)
    card = await require_card(SqlCardCatalog(session), existing.card_id)
    result = set_quantity(state, card, entry_id, quantity)
    return await _store(session, deck, result)


def find_entry_id(deck: DeckDB, card_id: str, zone: Zone) -> str:
    """
    Resolve (card_id, zone) to an entry id.

    Raises:
        EntryNotFoundError: If the card is not in that zone
    """
    entry = deck_state_from_db(deck).find_entry(card_id, zone)
    if entry is None:
        raise EntryNotFoundError(f"{card_id} in {zone.value}")
    return entry.entry_id


async def set_references(
    session: AsyncSession,
    deck_id: str,
    user_id: str,
    references: dict[Zone, str | None],
) -> DeckDB:
    """
    Point the legend/champion reference at the card in that zone, or clear it.

    A reference may only name the card occupying its zone, and may only be
    cleared when the zone is empty; anything else would let the reference
    and the zone drift apart.
    """
    deck = await load_owned_deck(session, deck_id, user_id, for_update=True)
    state = deck_state_from_db(deck)
    updates: dict[str, str | None] = {}
    for zone, card_id in references.items():
        if zone not in SINGLE_CARD_ZONES:
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message=f"The {zone.value} zone has no deck reference",
            )
        occupant = state.occupant(zone)
        expected = occupant.card_id if occupant else None
        if card_id != expected:
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message=f"The {zone.value} reference must match the card in the {zone.value} zone",
                detail=f"expected {expected}, got {card_id}",
                status_code=409,
            )
        updates[_REFERENCE_FIELDS[zone]] = card_id
    if updates:
        await patch_deck_references(session, deck, updates)
    return await load_deck(session, deck_id)


async def _store(session: AsyncSession, deck: DeckDB, result: MutationResult) -> StoredMutation:
    """Write one mutation result: the affected entry and any reference change."""
    stored: DeckCardEntry | None = None
    created = False

    if result.entry is not None:
        row, created = await upsert_entry(
            session, deck.id, result.entry.card_id, result.entry.zone, result.entry.quantity
        )
        stored = entry_to_model(row)
    elif result.previous is not None:
        await delete_entry_row(session, deck.id, result.previous.entry_id)

    if result.reference_zone is not None:
        field = _REFERENCE_FIELDS[result.reference_zone]
        await patch_deck_references(
            session, deck, {field: result.state.deck.reference_for(result.reference_zone)}
        )
    else:
        touch_deck(deck)
        await session.flush()

    reloaded = await load_deck(session, deck.id)
    return StoredMutation(entry=stored, created=created, state=deck_state_from_db(reloaded))
