"""
Zone registry.

Static rules table for the six deck zones: display name, target or maximum
quantity, and which card categories may occupy each zone. The table is a
closed constant of the game, not configuration.
"""

from dataclasses import dataclass
from enum import Enum

from riftdeck.models.card import CardCategory


class Zone(str, Enum):
    """The six fixed deck zones."""

    LEGEND = "legend"
    CHAMPION = "champion"
    BATTLEFIELD = "battlefield"
    RUNE = "rune"
    MAIN = "main"
    SIDE = "side"


class CapacityPolicy(str, Enum):
    """How a zone's capacity is interpreted."""

    EXACT = "exact"  # must equal capacity for the deck to be valid
    AT_MOST = "at_most"  # may hold up to capacity, never more


@dataclass(frozen=True, slots=True)
class ZoneRule:
    """Capacity policy and category eligibility for one zone."""

    zone: Zone
    display_name: str
    capacity: int
    policy: CapacityPolicy
    categories: frozenset[CardCategory]

    @property
    def single_card(self) -> bool:
        """True for zones that hold exactly one card (legend, champion)."""
        return self.zone in SINGLE_CARD_ZONES

    @property
    def copy_limited(self) -> bool:
        """True for zones counted against the per-card copy limit."""
        return self.zone in COPY_LIMITED_ZONES

    def accepts(self, category: CardCategory) -> bool:
        """Check whether a card category may enter this zone."""
        return category in self.categories


# Per-card copy limit, summed across main + side
MAX_COPIES = 3

SINGLE_CARD_ZONES = frozenset({Zone.LEGEND, Zone.CHAMPION})
COPY_LIMITED_ZONES = frozenset({Zone.MAIN, Zone.SIDE})

_PLAYABLE = frozenset(
    {CardCategory.CHAMPION, CardCategory.UNIT, CardCategory.SPELL, CardCategory.GEAR}
)

ZONE_RULES: dict[Zone, ZoneRule] = {
    Zone.LEGEND: ZoneRule(
        zone=Zone.LEGEND,
        display_name="Legend",
        capacity=1,
        policy=CapacityPolicy.EXACT,
        categories=frozenset({CardCategory.LEGEND}),
    ),
    Zone.CHAMPION: ZoneRule(
        zone=Zone.CHAMPION,
        display_name="Chosen Champion",
        capacity=1,
        policy=CapacityPolicy.EXACT,
        categories=frozenset({CardCategory.CHAMPION}),
    ),
    Zone.BATTLEFIELD: ZoneRule(
        zone=Zone.BATTLEFIELD,
        display_name="Battlefields",
        capacity=3,
        policy=CapacityPolicy.EXACT,
        categories=frozenset({CardCategory.BATTLEFIELD}),
    ),
    Zone.RUNE: ZoneRule(
        zone=Zone.RUNE,
        display_name="Runes",
        capacity=12,
        policy=CapacityPolicy.EXACT,
        categories=frozenset({CardCategory.RUNE}),
    ),
    Zone.MAIN: ZoneRule(
        zone=Zone.MAIN,
        display_name="Main Deck",
        capacity=39,
        policy=CapacityPolicy.EXACT,
        categories=_PLAYABLE,
    ),
    Zone.SIDE: ZoneRule(
        zone=Zone.SIDE,
        display_name="Sideboard",
        capacity=8,
        policy=CapacityPolicy.AT_MOST,
        categories=_PLAYABLE,
    ),
}


def zone_rule(zone: Zone) -> ZoneRule:
    """
    Look up the rule for a zone.

    Raises:
        KeyError: If zone is not one of the six fixed zones
    """
    return ZONE_RULES[zone]
