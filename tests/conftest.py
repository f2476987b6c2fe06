from collections.abc import Callable

import pytest

from riftdeck.models.card import Card, CardCategory
from riftdeck.models.deck import Deck, DeckCardEntry, DeckState
from riftdeck.models.zone import Zone
from riftdeck.services.card_catalog import InMemoryCardCatalog

Placement = tuple[str, Zone, int]


@pytest.fixture
def legend() -> Card:
    """Legend in Fury/Body that pairs with Sett."""
    return Card(
        card_id="OGN-L01",
        name="Sett, The Boss",
        category=CardCategory.LEGEND,
        domains=frozenset({"Fury", "Body"}),
        tags=("Legend", "Sett"),
    )


@pytest.fixture
def champion() -> Card:
    return Card(
        card_id="OGN-C01",
        name="Sett, Kingpin",
        category=CardCategory.CHAMPION,
        domains=frozenset({"Fury"}),
        tags=("Sett",),
        energy=5,
        might=5,
    )


@pytest.fixture
def other_champion() -> Card:
    return Card(
        card_id="OGN-C02",
        name="Jinx, Rebel",
        category=CardCategory.CHAMPION,
        domains=frozenset({"Chaos"}),
        tags=("Jinx",),
    )


@pytest.fixture
def battlefields() -> list[Card]:
    return [
        Card(card_id=f"OGN-B0{i}", name=f"Battlefield {i}", category=CardCategory.BATTLEFIELD)
        for i in range(1, 4)
    ]


@pytest.fixture
def fury_rune() -> Card:
    return Card(
        card_id="OGN-R01",
        name="Fury Rune",
        category=CardCategory.RUNE,
        domains=frozenset({"Fury"}),
    )


@pytest.fixture
def calm_rune() -> Card:
    return Card(
        card_id="OGN-R02",
        name="Calm Rune",
        category=CardCategory.RUNE,
        domains=frozenset({"Calm"}),
    )


@pytest.fixture
def units() -> list[Card]:
    """Thirteen distinct units: three copies each fill the main board."""
    return [
        Card(
            card_id=f"OGN-U{i:02d}",
            name=f"Unit {i}",
            category=CardCategory.UNIT,
            domains=frozenset({"Fury"}),
            energy=2,
            might=2,
        )
        for i in range(1, 14)
    ]


@pytest.fixture
def spell() -> Card:
    return Card(card_id="OGN-S01", name="Brawl", category=CardCategory.SPELL)


@pytest.fixture
def all_cards(
    legend: Card,
    champion: Card,
    other_champion: Card,
    battlefields: list[Card],
    fury_rune: Card,
    calm_rune: Card,
    units: list[Card],
    spell: Card,
) -> list[Card]:
    return [
        legend,
        champion,
        other_champion,
        *battlefields,
        fury_rune,
        calm_rune,
        *units,
        spell,
    ]


@pytest.fixture
def cards_by_id(all_cards: list[Card]) -> dict[str, Card]:
    return {card.card_id: card for card in all_cards}


@pytest.fixture
def catalog(all_cards: list[Card]) -> InMemoryCardCatalog:
    return InMemoryCardCatalog(all_cards)


@pytest.fixture
def make_state() -> Callable[..., DeckState]:
    """
    Build a DeckState from (card_id, zone, quantity) placements.

    Legend/champion references follow the legend/champion placements unless
    given explicitly.
    """

    def _make(
        *placements: Placement,
        legend_card_id: str | None = None,
        champion_card_id: str | None = None,
        deck_id: str = "deck-1",
    ) -> DeckState:
        entries = [
            DeckCardEntry(entry_id=f"e{i}", card_id=card_id, zone=zone, quantity=qty)
            for i, (card_id, zone, qty) in enumerate(placements, start=1)
        ]
        if legend_card_id is None:
            legend_card_id = next((e.card_id for e in entries if e.zone is Zone.LEGEND), None)
        if champion_card_id is None:
            champion_card_id = next((e.card_id for e in entries if e.zone is Zone.CHAMPION), None)
        deck = Deck(
            deck_id=deck_id,
            owner_id="user-1",
            legend_card_id=legend_card_id,
            champion_card_id=champion_card_id,
        )
        return DeckState.build(deck, entries)

    return _make


@pytest.fixture
def complete_placements(
    legend: Card,
    champion: Card,
    battlefields: list[Card],
    fury_rune: Card,
    units: list[Card],
) -> list[Placement]:
    """Placements for a deck that satisfies every construction rule."""
    return [
        (legend.card_id, Zone.LEGEND, 1),
        (champion.card_id, Zone.CHAMPION, 1),
        *[(bf.card_id, Zone.BATTLEFIELD, 1) for bf in battlefields],
        (fury_rune.card_id, Zone.RUNE, 12),
        *[(unit.card_id, Zone.MAIN, 3) for unit in units],
    ]
