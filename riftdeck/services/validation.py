"""
Deck validation engine.

Maps (DeckState, catalog cards) to a ValidationResult. Pure and synchronous:
no I/O, no mutation of its inputs, and the same inputs always give the same
result. Every check is computed independently so the user sees the full list
of outstanding problems at once.
"""

from collections.abc import Mapping

from riftdeck.models.card import Card, CardCategory
from riftdeck.models.deck import DeckState
from riftdeck.models.validation import ValidationChecks, ValidationResult
from riftdeck.models.zone import COPY_LIMITED_ZONES, MAX_COPIES, ZONE_RULES, Zone

RUNE_TARGET = ZONE_RULES[Zone.RUNE].capacity
BATTLEFIELD_TARGET = ZONE_RULES[Zone.BATTLEFIELD].capacity
MAIN_TARGET = ZONE_RULES[Zone.MAIN].capacity


def validate_deck(state: DeckState, cards: Mapping[str, Card]) -> ValidationResult:
    """
    Validate a deck against the construction rules.

    Args:
        state: Snapshot of the deck and its placements
        cards: Catalog cards for (at least) every id the deck references;
            ids missing from the mapping are treated as unknown cards

    Returns:
        ValidationResult with all eight checks and one error per failure
    """
    checks = ValidationChecks()
    errors: list[str] = []
    deck = state.deck

    # 1. Legend
    legend: Card | None = None
    if deck.legend_card_id:
        legend = cards.get(deck.legend_card_id)
        if legend is None:
            errors.append("Legend card not found")
        else:
            checks.has_legend = True
    else:
        errors.append("No legend selected")

    legend_domains = legend.domains if legend else frozenset()
    affinity_tag = legend.champion_affinity_tag if legend else None

    # 2. Champion and champion/legend pairing
    if deck.champion_card_id:
        champion = cards.get(deck.champion_card_id)
        if champion is None:
            errors.append("Champion card not found")
        elif champion.category is CardCategory.CHAMPION:
            checks.has_champion = True
            if affinity_tag and champion.has_tag(affinity_tag):
                checks.champion_matches_legend = True
            else:
                errors.append(
                    f"Champion must match legend's champion type ({affinity_tag or 'unknown'})"
                )
        else:
            errors.append("Selected champion is not a Champion card")
    else:
        errors.append("No champion selected")

    # 3. Rune count
    rune_entries = state.zone_entries(Zone.RUNE)
    rune_count = sum(entry.quantity for entry in rune_entries)
    if rune_count == RUNE_TARGET:
        checks.runes_complete = True
    else:
        errors.append(
            f"Rune deck must have exactly {RUNE_TARGET} cards (currently {rune_count})"
        )

    # 4. Rune domains: any overlap with the legend's domains is enough.
    # Without a resolved legend the check stays failed; the legend error covers it.
    if legend is not None and not legend_domains:
        checks.runes_domain_match = True
    elif legend_domains:
        invalid = [
            entry
            for entry in rune_entries
            if not _overlaps(cards.get(entry.card_id), legend_domains)
        ]
        if invalid:
            errors.append(
                f"All runes must match legend domains ({', '.join(sorted(legend_domains))})"
            )
        else:
            checks.runes_domain_match = True

    # 5. Battlefield count
    battlefield_count = state.zone_count(Zone.BATTLEFIELD)
    if battlefield_count == BATTLEFIELD_TARGET:
        checks.battlefields_complete = True
    else:
        errors.append(
            f"Battlefield deck must have exactly {BATTLEFIELD_TARGET} cards "
            f"(currently {battlefield_count})"
        )

    # 6. Main board count
    main_count = state.zone_count(Zone.MAIN)
    if main_count == MAIN_TARGET:
        checks.main_board_complete = True
    else:
        errors.append(f"Main board must have exactly {MAIN_TARGET} cards (currently {main_count})")

    # 7. Copy limits across main + side only
    over_limit = [
        (card_id, count) for card_id, count in copy_counts(state).items() if count > MAX_COPIES
    ]
    if over_limit:
        for card_id, count in over_limit:
            card = cards.get(card_id)
            label = card.name if card and card.name else card_id
            errors.append(f"{label} exceeds limit ({count}/{MAX_COPIES})")
    else:
        checks.card_limits_valid = True

    # 8. Overall
    return ValidationResult(valid=checks.all_passed(), errors=errors, checks=checks)


def copy_counts(state: DeckState) -> dict[str, int]:
    """Summed quantity per card id across copy-limited zones, in deck order."""
    counts: dict[str, int] = {}
    for entry in state.entries:
        if entry.zone in COPY_LIMITED_ZONES:
            counts[entry.card_id] = counts.get(entry.card_id, 0) + entry.quantity
    return counts


def _overlaps(card: Card | None, legend_domains: frozenset[str]) -> bool:
    if card is None or not card.domains:
        return False
    return not card.domains.isdisjoint(legend_domains)
