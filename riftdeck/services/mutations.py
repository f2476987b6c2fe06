"""
Deck mutation rules.

Pure transformations over DeckState. Each operation checks its
preconditions first and raises a MutationRejected subclass before producing
anything, so a rejected mutation never has a partial effect. The same
functions run in the client-side coordinator (optimistic apply) and in the
server-side deck service (authoritative re-check at write time).
"""

import logging
import uuid
from dataclasses import dataclass, replace

from riftdeck.models.card import Card
from riftdeck.models.deck import PROVISIONAL_ID_PREFIX, DeckCardEntry, DeckState
from riftdeck.models.failure import (
    CardLimitExceeded,
    EntryNotFoundError,
    FailureKind,
    InvalidQuantity,
    InvalidZoneForCategory,
    KnownError,
    MutationRejected,
    SingleCardZoneOccupied,
    ZoneCapacityExceeded,
)
from riftdeck.models.zone import MAX_COPIES, CapacityPolicy, Zone, zone_rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MutationResult:
    """
    Outcome of applying one mutation to a DeckState.

    Attributes:
        state: The deck state after the mutation
        entry: The resulting entry, or None if it was deleted
        previous: The entry before the mutation, or None if it was created
        reference_zone: Legend/champion zone whose deck reference changed
    """

    state: DeckState
    entry: DeckCardEntry | None
    previous: DeckCardEntry | None
    reference_zone: Zone | None = None

    @property
    def created(self) -> bool:
        return self.previous is None and self.entry is not None

    @property
    def deleted(self) -> bool:
        return self.entry is None


def provisional_id() -> str:
    """Local identifier for an entry the system of record has not confirmed yet."""
    return f"{PROVISIONAL_ID_PREFIX}{uuid.uuid4().hex}"


def check_add(state: DeckState, card: Card, zone: Zone, quantity: int) -> None:
    """
    Check the preconditions for adding `quantity` copies of `card` to `zone`.

    Checked in order; the first failure is raised:
    1. The card's category is eligible for the zone
    2. Single-card zones hold no different card, and never more than one copy
    3. Main + side copies of the card stay within MAX_COPIES
    4. At-most zones stay within their capacity

    Raises:
        InvalidQuantity: quantity < 1
        InvalidZoneForCategory, SingleCardZoneOccupied, CardLimitExceeded,
        ZoneCapacityExceeded: as above
    """
    if quantity < 1:
        raise InvalidQuantity(quantity)

    rule = zone_rule(zone)

    if not rule.accepts(card.category):
        raise InvalidZoneForCategory(card.name, card.category.value, zone)

    if rule.single_card:
        occupant = state.occupant(zone)
        if occupant is not None and occupant.card_id != card.card_id:
            raise SingleCardZoneOccupied(zone, occupant.card_id)
        if state.zone_count(zone) + quantity > rule.capacity:
            raise SingleCardZoneOccupied(zone, card.card_id)
        return

    if rule.copy_limited:
        resulting = state.copies(card.card_id) + quantity
        if resulting > MAX_COPIES:
            raise CardLimitExceeded(card.name, resulting)

    if rule.policy is CapacityPolicy.AT_MOST:
        resulting = state.zone_count(zone) + quantity
        if resulting > rule.capacity:
            raise ZoneCapacityExceeded(zone, rule.capacity, resulting)


def add_card(
    state: DeckState,
    card: Card,
    zone: Zone,
    quantity: int = 1,
    entry_id: str | None = None,
) -> MutationResult:
    """
    Check preconditions, then add copies of a card to a zone.

    Increments the existing (card, zone) entry or creates a new one. A new
    entry gets `entry_id` if supplied, otherwise a provisional id. Adding to
    the legend/champion zone also points the deck reference at the card.
    """
    try:
        check_add(state, card, zone, quantity)
    except MutationRejected as e:
        logger.info(
            "Rejected add of %s x%d to %s in deck %s: %s",
            card.card_id,
            quantity,
            zone.value,
            state.deck_id,
            e.reason.value,
        )
        raise

    existing = state.find_entry(card.card_id, zone)
    if existing is not None:
        entry = replace(existing, quantity=existing.quantity + quantity)
        entries = tuple(entry if e is existing else e for e in state.entries)
    else:
        entry = DeckCardEntry(
            entry_id=entry_id or provisional_id(),
            card_id=card.card_id,
            zone=zone,
            quantity=quantity,
        )
        entries = (*state.entries, entry)

    deck = state.deck
    reference_zone: Zone | None = None
    if zone_rule(zone).single_card:
        deck = deck.with_reference(zone, card.card_id)
        reference_zone = zone

    return MutationResult(
        state=DeckState(deck=deck, entries=entries),
        entry=entry,
        previous=existing,
        reference_zone=reference_zone,
    )


def remove_entry(state: DeckState, entry_id: str, quantity: int = 1) -> MutationResult:
    """
    Remove copies from an entry.

    The entry is deleted once its quantity reaches zero (removing more copies
    than the entry holds deletes it). Deleting the legend/champion entry
    clears the matching deck reference.

    Raises:
        InvalidQuantity: quantity < 1
        EntryNotFoundError: entry_id is not in the deck
    """
    if quantity < 1:
        raise InvalidQuantity(quantity)

    existing = state.entry_by_id(entry_id)
    if existing is None:
        raise EntryNotFoundError(entry_id)

    remaining = existing.quantity - quantity
    deck = state.deck
    reference_zone: Zone | None = None

    if remaining > 0:
        entry: DeckCardEntry | None = replace(existing, quantity=remaining)
        entries = tuple(entry if e is existing else e for e in state.entries)
    else:
        entry = None
        entries = tuple(e for e in state.entries if e is not existing)
        owned_reference = deck.reference_for(existing.zone) == existing.card_id
        if zone_rule(existing.zone).single_card and owned_reference:
            deck = deck.with_reference(existing.zone, None)
            reference_zone = existing.zone

    return MutationResult(
        state=DeckState(deck=deck, entries=entries),
        entry=entry,
        previous=existing,
        reference_zone=reference_zone,
    )


def set_quantity(state: DeckState, card: Card, entry_id: str, quantity: int) -> MutationResult:
    """
    Set an entry to an exact quantity.

    Zero deletes the entry. Increases are checked exactly like an add of the
    difference; they are rejected, never clamped.

    Raises:
        InvalidQuantity: quantity < 0
        EntryNotFoundError: entry_id is not in the deck
        KnownError: card is not the card held by the entry
        MutationRejected: the increase breaks a precondition
    """
    if quantity < 0:
        raise InvalidQuantity(quantity, minimum=0)

    existing = state.entry_by_id(entry_id)
    if existing is None:
        raise EntryNotFoundError(entry_id)
    if card.card_id != existing.card_id:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message=f"Entry {entry_id} holds {existing.card_id}, not {card.card_id}",
        )

    delta = quantity - existing.quantity
    if delta > 0:
        return add_card(state, card, existing.zone, delta)
    if delta < 0:
        return remove_entry(state, entry_id, -delta)
    return MutationResult(state=state, entry=existing, previous=existing)


def confirm_entry(state: DeckState, local_id: str, stored: DeckCardEntry) -> DeckState:
    """
    Reconcile a local entry with the one returned by the system of record.

    Replaces the provisional id (and quantity) of the local entry. If the
    local entry is gone the state is returned unchanged.
    """
    entries = tuple(
        replace(e, entry_id=stored.entry_id, quantity=stored.quantity)
        if e.entry_id == local_id
        else e
        for e in state.entries
    )
    return replace(state, entries=entries)
