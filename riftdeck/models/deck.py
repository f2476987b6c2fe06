"""
Deck state models.

DeckState is an explicit, immutable value: every mutation produces a new
DeckState rather than editing one in place. The coordinator owns the
current value per deck.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from riftdeck.models.zone import COPY_LIMITED_ZONES, Zone

PROVISIONAL_ID_PREFIX = "temp-"


@dataclass(frozen=True, slots=True)
class DeckCardEntry:
    """
    One card placement in a deck.

    At most one entry exists per (card_id, zone); repeated adds increment
    quantity. Quantity is always >= 1; an entry reaching 0 is deleted.

    Attributes:
        entry_id: Identifier from the system of record, or a provisional
            "temp-" id while a create is in flight
        card_id: Catalog card identifier
        zone: Zone the card sits in
        quantity: Number of copies in that zone
    """

    entry_id: str
    card_id: str
    zone: Zone
    quantity: int

    @property
    def is_provisional(self) -> bool:
        """True while the entry has not been confirmed by the system of record."""
        return self.entry_id.startswith(PROVISIONAL_ID_PREFIX)


@dataclass(frozen=True, slots=True)
class Deck:
    """Deck header: identity, ownership and legend/champion references."""

    deck_id: str
    owner_id: str
    name: str = "Untitled Deck"
    description: str | None = None
    legend_card_id: str | None = None
    champion_card_id: str | None = None
    is_public: bool = False
    share_token: str | None = None

    def reference_for(self, zone: Zone) -> str | None:
        """The card id referenced for a single-card zone."""
        if zone is Zone.LEGEND:
            return self.legend_card_id
        if zone is Zone.CHAMPION:
            return self.champion_card_id
        return None

    def with_reference(self, zone: Zone, card_id: str | None) -> "Deck":
        """Return a copy with the legend/champion reference for zone set."""
        if zone is Zone.LEGEND:
            return replace(self, legend_card_id=card_id)
        if zone is Zone.CHAMPION:
            return replace(self, champion_card_id=card_id)
        return self


@dataclass(frozen=True, slots=True)
class DeckState:
    """
    A deck together with its ordered card placements.

    This is the aggregate the validation engine reads and the
    coordinator transforms.
    """

    deck: Deck
    entries: tuple[DeckCardEntry, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, deck: Deck, entries: Iterable[DeckCardEntry]) -> "DeckState":
        """Build a state from any iterable of entries."""
        return cls(deck=deck, entries=tuple(entries))

    @property
    def deck_id(self) -> str:
        return self.deck.deck_id

    def find_entry(self, card_id: str, zone: Zone) -> DeckCardEntry | None:
        """Find the entry for (card_id, zone), if any."""
        for entry in self.entries:
            if entry.card_id == card_id and entry.zone is zone:
                return entry
        return None

    def entry_by_id(self, entry_id: str) -> DeckCardEntry | None:
        """Find an entry by its identifier."""
        for entry in self.entries:
            if entry.entry_id == entry_id:
                return entry
        return None

    def zone_entries(self, zone: Zone) -> list[DeckCardEntry]:
        """All entries in a zone, in deck order."""
        return [entry for entry in self.entries if entry.zone is zone]

    def zone_count(self, zone: Zone) -> int:
        """Total quantity across a zone."""
        return sum(entry.quantity for entry in self.entries if entry.zone is zone)

    def copies(self, card_id: str) -> int:
        """Copies of a card counted against the copy limit (main + side)."""
        return sum(
            entry.quantity
            for entry in self.entries
            if entry.card_id == card_id and entry.zone in COPY_LIMITED_ZONES
        )

    def occupant(self, zone: Zone) -> DeckCardEntry | None:
        """First entry in a zone (the occupant of a single-card zone)."""
        return next((entry for entry in self.entries if entry.zone is zone), None)

    def card_ids(self) -> set[str]:
        """Every card id the deck references, including legend/champion."""
        ids = {entry.card_id for entry in self.entries}
        for card_id in (self.deck.legend_card_id, self.deck.champion_card_id):
            if card_id:
                ids.add(card_id)
        return ids

    def reference_problems(self) -> list[str]:
        """
        Describe any drift between legend/champion references and zone entries.

        Returns an empty list when the references mirror the zone occupants.
        """
        problems: list[str] = []
        for zone in (Zone.LEGEND, Zone.CHAMPION):
            reference = self.deck.reference_for(zone)
            occupant = self.occupant(zone)
            if reference and (occupant is None or occupant.card_id != reference):
                problems.append(f"{zone.value} reference {reference} has no {zone.value} entry")
            if occupant is not None and occupant.card_id != reference:
                problems.append(f"{zone.value} entry {occupant.card_id} is not referenced")
        return problems
