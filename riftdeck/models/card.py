"""
Card models.

Cards are read-only catalog data. Once fetched they are never mutated;
the catalog owns them and decks only reference them by card_id.
"""

from dataclasses import dataclass, field
from enum import Enum


class CardCategory(str, Enum):
    """Card category as used by the deck construction rules."""

    LEGEND = "legend"
    CHAMPION = "champion"
    BATTLEFIELD = "battlefield"
    RUNE = "rune"

    # Generic playable categories (main deck / sideboard)
    UNIT = "unit"
    SPELL = "spell"
    GEAR = "gear"

    @classmethod
    def parse(cls, label: str) -> "CardCategory":
        """
        Convert a catalog category label to a CardCategory.

        Accepts both the enum values and the catalog's display labels
        (e.g. "Champion Unit", "Legend"), case-insensitively.

        Raises:
            ValueError: If the label is not a known category
        """
        normalized = label.strip().lower()
        if normalized in _CATEGORY_ALIASES:
            return _CATEGORY_ALIASES[normalized]
        try:
            return cls(normalized)
        except ValueError:
            msg = f"Unknown card category: {label!r}"
            raise ValueError(msg) from None


_CATEGORY_ALIASES: dict[str, CardCategory] = {
    "champion unit": CardCategory.CHAMPION,
    "signature unit": CardCategory.UNIT,
    "signature spell": CardCategory.SPELL,
    "signature gear": CardCategory.GEAR,
    "token unit": CardCategory.UNIT,
}


@dataclass(frozen=True, slots=True)
class Card:
    """
    A card as returned by the card catalog.

    Attributes:
        card_id: Catalog identifier (e.g., "OGN-001")
        name: Display name
        category: Construction category
        domains: Domain tags (e.g., {"Fury", "Calm"}); gate rune eligibility
        tags: Free-form tags in catalog order. A legend's first non-"legend"
            tag names the champion it pairs with.
        energy: Energy cost, absent for non-combat cards
        power: Power cost, absent for non-combat cards
        might: Might, absent for non-unit cards
        rarity: Rarity label (common, uncommon, rare, epic, ...)
    """

    card_id: str
    name: str
    category: CardCategory
    domains: frozenset[str] = field(default_factory=frozenset)
    tags: tuple[str, ...] = ()
    energy: int | None = None
    power: int | None = None
    might: int | None = None
    rarity: str | None = None

    def has_tag(self, tag: str) -> bool:
        """Exact (case-sensitive) tag membership."""
        return tag in self.tags

    @property
    def champion_affinity_tag(self) -> str | None:
        """
        The champion tag carried by a legend.

        First tag that is not the literal "legend" (case-insensitive).
        None if the card carries no such tag.
        """
        return next((tag for tag in self.tags if tag.lower() != "legend"), None)
