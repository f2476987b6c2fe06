"""
Validation result models.

A ValidationResult is derived, never persisted: it is recomputed from a
deck state and the card catalog whenever it is needed.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ValidationChecks(BaseModel):
    """The eight named construction checks. Serialized in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    has_legend: bool = False
    has_champion: bool = False
    champion_matches_legend: bool = False
    runes_complete: bool = False
    runes_domain_match: bool = False
    battlefields_complete: bool = False
    main_board_complete: bool = False
    card_limits_valid: bool = False

    def all_passed(self) -> bool:
        """True only if every named check passed."""
        return all(getattr(self, name) for name in type(self).model_fields)


class DeckStatus(str, Enum):
    """Conceptual deck state. Not persisted; follows from validation."""

    DRAFT = "draft"
    VALID = "valid"


class ValidationResult(BaseModel):
    """
    Report of which construction rules a deck currently satisfies.

    JSON shape: {valid, errors, checks: {hasLegend, ...}}.
    """

    model_config = ConfigDict(populate_by_name=True)

    valid: bool = False
    errors: list[str] = Field(default_factory=list)
    checks: ValidationChecks = Field(default_factory=ValidationChecks)

    @property
    def status(self) -> DeckStatus:
        return DeckStatus.VALID if self.valid else DeckStatus.DRAFT

    def to_json(self) -> str:
        """Serialize with camelCase check names."""
        return self.model_dump_json(by_alias=True)
