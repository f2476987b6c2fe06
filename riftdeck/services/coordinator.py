"""
Mutation coordinator.

Client-side owner of the deck being edited. Every add/remove goes through
the same protocol:

1. Resolve the card and check the mutation preconditions against the
   current local state. A rejection raises and changes nothing.
2. Apply the change to local state optimistically, so readers see it at once.
3. Write it to the system of record through the DeckStore.
4. On success, swap provisional entry ids for the stored ids.
   On failure, drop the local state, reload it from the store, re-derive the
   validation result and raise ConsistencyConflictError. Local state is never
   patched back by hand.

Mutations are sequenced per deck: a deck's next mutation starts only after
the previous one has been confirmed or reloaded.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

from riftdeck.models.deck import Deck, DeckCardEntry, DeckState
from riftdeck.models.failure import (
    ConsistencyConflictError,
    EntryNotFoundError,
    KnownError,
    PersistenceError,
)
from riftdeck.models.validation import ValidationResult
from riftdeck.models.zone import Zone
from riftdeck.services.card_catalog import CardCatalog, require_card
from riftdeck.services.mutations import (
    MutationResult,
    add_card,
    confirm_entry,
    remove_entry,
    set_quantity,
)
from riftdeck.services.validation import validate_deck

logger = logging.getLogger(__name__)

StateListener = Callable[[DeckState], None]

T = TypeVar("T")


class DeckStore(Protocol):
    """Persistence interface for deck placements (the system of record)."""

    async def get_deck(self, deck_id: str) -> Deck:
        """Deck header. Raises DeckNotFoundError for unknown decks."""
        ...

    async def list_entries(self, deck_id: str) -> list[DeckCardEntry]:
        """All placements of a deck, in deck order."""
        ...

    async def upsert_entry(
        self, deck_id: str, card_id: str, zone: Zone, quantity: int
    ) -> DeckCardEntry:
        """Create the (card, zone) entry or increment it by quantity."""
        ...

    async def set_entry_quantity(
        self, deck_id: str, entry_id: str, quantity: int
    ) -> DeckCardEntry | None:
        """Set an entry's quantity. Returns None if the entry was deleted."""
        ...

    async def delete_entry(self, deck_id: str, entry_id: str) -> None:
        """Delete an entry outright."""
        ...

    async def patch_deck_references(
        self, deck_id: str, references: dict[Zone, str | None]
    ) -> Deck:
        """Set or clear the legend/champion references."""
        ...


class MutationCoordinator:
    """
    Applies deck mutations optimistically and reconciles with a DeckStore.

    Holds one DeckState per deck. States are immutable values; the
    coordinator swaps in a new one on every change and notifies listeners.
    """

    def __init__(self, store: DeckStore, catalog: CardCatalog):
        self._store = store
        self._catalog = catalog
        self._states: dict[str, DeckState] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._listeners: list[StateListener] = []

    # --- State access ---

    def state(self, deck_id: str) -> DeckState | None:
        """Current local state of a deck, or None if not loaded."""
        return self._states.get(deck_id)

    def subscribe(self, listener: StateListener) -> None:
        """Call listener with the new state after every local change."""
        self._listeners.append(listener)

    async def load(self, deck_id: str) -> DeckState:
        """Load (or reload) a deck from the system of record."""
        async with self._lock(deck_id):
            return await self._reload(deck_id)

    async def validate(self, deck_id: str) -> ValidationResult:
        """
        Derive the validation result for the current local state.

        Never bundled into a mutation: callers invoke it after each one.
        """
        state = self._states.get(deck_id) or await self.load(deck_id)
        return await self._validate(state)

    # --- Mutations ---

    async def add(
        self, deck_id: str, card_id: str, zone: Zone, quantity: int = 1
    ) -> DeckCardEntry:
        """
        Add copies of a card to a zone.

        Raises:
            CardNotFoundError: The catalog does not know the card
            MutationRejected: A precondition failed; nothing changed
            ConsistencyConflictError: The write failed; state was reloaded
        """
        async with self._lock(deck_id):
            state = await self._current(deck_id)
            card = await require_card(self._catalog, card_id)
            result = add_card(state, card, zone, quantity)
            local = result.entry
            if local is None:
                msg = f"Adding {card_id} to deck {deck_id} produced no entry"
                raise RuntimeError(msg)
            self._set(result.state)

            async def write() -> DeckCardEntry:
                stored = await self._store.upsert_entry(deck_id, card_id, zone, quantity)
                await self._persist_reference(deck_id, result)
                return stored

            stored = await self._persist(deck_id, "add", write)
            self._set(confirm_entry(self._states[deck_id], local.entry_id, stored))
            logger.debug("Added %s x%d to %s in deck %s", card_id, quantity, zone.value, deck_id)
            return stored

    async def remove(self, deck_id: str, entry_id: str, quantity: int = 1) -> DeckCardEntry | None:
        """
        Remove copies from an entry. Returns the remaining entry, or None
        if it was deleted.
        """
        async with self._lock(deck_id):
            state = await self._current(deck_id)
            return await self._remove(state, entry_id, quantity)

    async def remove_card(
        self, deck_id: str, card_id: str, zone: Zone, quantity: int = 1
    ) -> DeckCardEntry | None:
        """Remove copies of a card from a zone, addressed by (card_id, zone)."""
        async with self._lock(deck_id):
            state = await self._current(deck_id)
            entry = state.find_entry(card_id, zone)
            if entry is None:
                raise EntryNotFoundError(f"{card_id} in {zone.value}")
            return await self._remove(state, entry.entry_id, quantity)

    async def set_quantity(
        self, deck_id: str, entry_id: str, quantity: int
    ) -> DeckCardEntry | None:
        """Set an entry to an exact quantity; 0 deletes it. Increases are re-checked."""
        async with self._lock(deck_id):
            state = await self._current(deck_id)
            existing = state.entry_by_id(entry_id)
            if existing is None:
                raise EntryNotFoundError(entry_id)
            card = await require_card(self._catalog, existing.card_id)
            result = set_quantity(state, card, entry_id, quantity)
            return await self._write_quantity(deck_id, entry_id, result)

    # --- Internals ---

    async def _remove(
        self, state: DeckState, entry_id: str, quantity: int
    ) -> DeckCardEntry | None:
        result = remove_entry(state, entry_id, quantity)
        return await self._write_quantity(state.deck_id, entry_id, result)

    async def _write_quantity(
        self, deck_id: str, entry_id: str, result: MutationResult
    ) -> DeckCardEntry | None:
        self._set(result.state)

        async def write() -> DeckCardEntry | None:
            stored: DeckCardEntry | None = None
            if result.entry is None:
                await self._store.delete_entry(deck_id, entry_id)
            else:
                stored = await self._store.set_entry_quantity(
                    deck_id, entry_id, result.entry.quantity
                )
            await self._persist_reference(deck_id, result)
            return stored

        stored = await self._persist(deck_id, "update", write)

        if stored is not None:
            self._set(confirm_entry(self._states[deck_id], entry_id, stored))
        return stored

    async def _persist(
        self, deck_id: str, operation: str, write: Callable[[], Awaitable[T]]
    ) -> T:
        """
        Run a store write for an optimistically applied mutation.

        Any failure discards the local state. Exceptions reload it and raise
        ConsistencyConflictError; cancellation leaves the deck unloaded so the
        next operation reloads it.
        """
        try:
            return await write()
        except KnownError as e:
            raise await self._conflict(deck_id, operation, e) from e
        except Exception as e:
            cause = PersistenceError(f"Deck store failed: {e}", detail=type(e).__name__)
            raise await self._conflict(deck_id, operation, cause) from e
        except BaseException:
            self._states.pop(deck_id, None)
            logger.warning("Deck %s %s interrupted; local state dropped", deck_id, operation)
            raise

    async def _persist_reference(self, deck_id: str, result: MutationResult) -> None:
        zone = result.reference_zone
        if zone is None:
            return
        await self._store.patch_deck_references(
            deck_id, {zone: result.state.deck.reference_for(zone)}
        )

    async def _conflict(
        self, deck_id: str, operation: str, cause: KnownError
    ) -> ConsistencyConflictError:
        """Discard local state, reload from the store and build the error to raise."""
        self._states.pop(deck_id, None)
        logger.warning("Deck %s %s failed (%s); reloading", deck_id, operation, cause.message)

        state: DeckState | None = None
        validation: ValidationResult | None = None
        try:
            state = await self._reload(deck_id)
            validation = await self._validate(state)
        except Exception as reload_error:
            logger.error("Reload of deck %s failed: %s", deck_id, reload_error)

        return ConsistencyConflictError(
            f"Could not save the change to deck {deck_id}",
            state=state,
            validation=validation,
            cause=cause,
        )

    async def _current(self, deck_id: str) -> DeckState:
        state = self._states.get(deck_id)
        if state is None:
            state = await self._reload(deck_id)
        return state

    async def _reload(self, deck_id: str) -> DeckState:
        deck = await self._store.get_deck(deck_id)
        entries = await self._store.list_entries(deck_id)
        state = DeckState.build(deck, entries)
        self._set(state)
        return state

    async def _validate(self, state: DeckState) -> ValidationResult:
        cards = await self._catalog.get_cards_by_ids(state.card_ids())
        return validate_deck(state, cards)

    def _set(self, state: DeckState) -> None:
        self._states[state.deck_id] = state
        for listener in self._listeners:
            listener(state)

    def _lock(self, deck_id: str) -> asyncio.Lock:
        lock = self._locks.get(deck_id)
        if lock is None:
            lock = self._locks[deck_id] = asyncio.Lock()
        return lock
