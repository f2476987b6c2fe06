import pytest

from riftdeck.models.card import Card, CardCategory
from riftdeck.models.deck import Deck, DeckCardEntry, DeckState
from riftdeck.models.validation import DeckStatus, ValidationChecks, ValidationResult
from riftdeck.models.zone import (
    COPY_LIMITED_ZONES,
    MAX_COPIES,
    ZONE_RULES,
    CapacityPolicy,
    Zone,
    zone_rule,
)


class TestCardCategory:
    def test_parse_enum_values(self) -> None:
        assert CardCategory.parse("legend") is CardCategory.LEGEND
        assert CardCategory.parse("gear") is CardCategory.GEAR

    def test_parse_is_case_insensitive(self) -> None:
        assert CardCategory.parse("  Battlefield ") is CardCategory.BATTLEFIELD

    def test_parse_display_labels(self) -> None:
        assert CardCategory.parse("Champion Unit") is CardCategory.CHAMPION
        assert CardCategory.parse("Signature Spell") is CardCategory.SPELL

    def test_parse_unknown_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown card category"):
            CardCategory.parse("token")


class TestCard:
    def test_card_immutable(self) -> None:
        card = Card(card_id="X", name="X", category=CardCategory.UNIT)
        with pytest.raises(AttributeError):
            card.name = "Y"  # type: ignore[misc]

    def test_has_tag_is_exact(self) -> None:
        card = Card(card_id="X", name="X", category=CardCategory.CHAMPION, tags=("Sett",))
        assert card.has_tag("Sett") is True
        assert card.has_tag("sett") is False

    def test_champion_affinity_skips_legend_tag(self) -> None:
        card = Card(card_id="L", name="L", category=CardCategory.LEGEND, tags=("LEGEND", "Jinx"))
        assert card.champion_affinity_tag == "Jinx"

    def test_champion_affinity_missing(self) -> None:
        card = Card(card_id="L", name="L", category=CardCategory.LEGEND, tags=("legend",))
        assert card.champion_affinity_tag is None


class TestZoneRegistry:
    def test_six_zones(self) -> None:
        assert set(ZONE_RULES) == set(Zone)

    @pytest.mark.parametrize(
        ("zone", "capacity", "policy"),
        [
            (Zone.LEGEND, 1, CapacityPolicy.EXACT),
            (Zone.CHAMPION, 1, CapacityPolicy.EXACT),
            (Zone.BATTLEFIELD, 3, CapacityPolicy.EXACT),
            (Zone.RUNE, 12, CapacityPolicy.EXACT),
            (Zone.MAIN, 39, CapacityPolicy.EXACT),
            (Zone.SIDE, 8, CapacityPolicy.AT_MOST),
        ],
    )
    def test_capacities(self, zone: Zone, capacity: int, policy: CapacityPolicy) -> None:
        rule = zone_rule(zone)
        assert rule.capacity == capacity
        assert rule.policy is policy

    def test_eligibility(self) -> None:
        assert zone_rule(Zone.LEGEND).accepts(CardCategory.LEGEND)
        assert not zone_rule(Zone.LEGEND).accepts(CardCategory.CHAMPION)
        assert zone_rule(Zone.MAIN).accepts(CardCategory.CHAMPION)
        assert zone_rule(Zone.SIDE).accepts(CardCategory.GEAR)
        assert not zone_rule(Zone.MAIN).accepts(CardCategory.RUNE)
        assert not zone_rule(Zone.RUNE).accepts(CardCategory.BATTLEFIELD)

    def test_single_card_and_copy_limited(self) -> None:
        assert zone_rule(Zone.LEGEND).single_card
        assert zone_rule(Zone.CHAMPION).single_card
        assert not zone_rule(Zone.MAIN).single_card
        assert COPY_LIMITED_ZONES == {Zone.MAIN, Zone.SIDE}
        assert MAX_COPIES == 3

    def test_unknown_zone_raises(self) -> None:
        with pytest.raises(KeyError):
            zone_rule("graveyard")  # type: ignore[arg-type]


class TestDeckState:
    def _state(self) -> DeckState:
        deck = Deck(deck_id="d", owner_id="u", legend_card_id="L")
        return DeckState.build(
            deck,
            [
                DeckCardEntry("e1", "L", Zone.LEGEND, 1),
                DeckCardEntry("e2", "X", Zone.MAIN, 2),
                DeckCardEntry("e3", "X", Zone.SIDE, 1),
                DeckCardEntry("e4", "Y", Zone.MAIN, 3),
            ],
        )

    def test_zone_count(self) -> None:
        assert self._state().zone_count(Zone.MAIN) == 5
        assert self._state().zone_count(Zone.RUNE) == 0

    def test_copies_span_main_and_side(self) -> None:
        assert self._state().copies("X") == 3

    def test_find_entry_by_card_and_zone(self) -> None:
        entry = self._state().find_entry("X", Zone.SIDE)
        assert entry is not None
        assert entry.entry_id == "e3"

    def test_card_ids_include_references(self) -> None:
        state = DeckState.build(Deck(deck_id="d", owner_id="u", champion_card_id="C"), [])
        assert state.card_ids() == {"C"}

    def test_reference_problems_none_when_mirrored(self) -> None:
        assert self._state().reference_problems() == []

    def test_reference_problems_detect_drift(self) -> None:
        deck = Deck(deck_id="d", owner_id="u", champion_card_id="C")
        state = DeckState.build(deck, [DeckCardEntry("e1", "L", Zone.LEGEND, 1)])
        problems = state.reference_problems()
        assert len(problems) == 2

    def test_provisional_entry(self) -> None:
        assert DeckCardEntry("temp-abc", "X", Zone.MAIN, 1).is_provisional
        assert not DeckCardEntry("abc", "X", Zone.MAIN, 1).is_provisional


class TestValidationResult:
    def test_default_is_draft(self) -> None:
        result = ValidationResult()
        assert result.valid is False
        assert result.status is DeckStatus.DRAFT

    def test_json_uses_camel_case_checks(self) -> None:
        result = ValidationResult(checks=ValidationChecks(has_legend=True))
        data = result.model_dump(by_alias=True)
        assert data["checks"]["hasLegend"] is True
        assert "mainBoardComplete" in data["checks"]
        assert '"runesDomainMatch":false' in result.to_json()

    def test_all_passed(self) -> None:
        fields = dict.fromkeys(ValidationChecks.model_fields, True)
        assert ValidationChecks(**fields).all_passed()
        fields["card_limits_valid"] = False
        assert not ValidationChecks(**fields).all_passed()
