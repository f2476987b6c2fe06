"""
Failure classification.

Every error the core reports to a caller is a KnownError with a FailureKind,
a user-appropriate message and an HTTP status code. The API layer renders
them through a single exception handler.

Taxonomy:
- Validation failures are NOT exceptions. They are entries in
  ValidationResult.errors.
- MutationRejected: a precondition failed before any state change.
- ConsistencyConflictError: persistence failed after an optimistic update;
  local state has been reloaded from the system of record.
- *NotFoundError: unknown deck, card or entry.
- AccessDeniedError: caller is not allowed to touch the deck.
"""

from enum import Enum

from pydantic import BaseModel, Field

from riftdeck.models.deck import DeckState
from riftdeck.models.validation import ValidationResult
from riftdeck.models.zone import MAX_COPIES, Zone


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"

    # Constraint violations
    MUTATION_REJECTED = "mutation_rejected"

    # Consistency / service failures
    CONSISTENCY_CONFLICT = "consistency_conflict"
    PERSISTENCE_ERROR = "persistence_error"

    UNKNOWN = "unknown"


class RejectionReason(str, Enum):
    """Reason codes for rejected mutations, so callers can target a message."""

    INVALID_ZONE_FOR_CATEGORY = "invalid_zone_for_category"
    SINGLE_CARD_ZONE_OCCUPIED = "single_card_zone_occupied"
    CARD_LIMIT_EXCEEDED = "card_limit_exceeded"
    ZONE_CAPACITY_EXCEEDED = "zone_capacity_exceeded"
    INVALID_QUANTITY = "invalid_quantity"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ErrorResponse(BaseModel):
    """Body returned for any KnownError."""

    error: str
    failure: FailureDetail
    reason: RejectionReason | None = None


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )

    def to_response(self) -> ErrorResponse:
        """Convert to the error body sent over HTTP."""
        return ErrorResponse(error=self.message, failure=self.to_detail())


# --- Precondition rejections ---


class MutationRejected(KnownError):
    """
    A deck mutation was refused before any state change.

    The operation is a no-op: local and persisted state are untouched.
    """

    reason: RejectionReason

    def __init__(
        self,
        reason: RejectionReason,
        message: str,
        suggestion: str | None = None,
    ):
        self.reason = reason
        super().__init__(
            kind=FailureKind.MUTATION_REJECTED,
            message=message,
            detail=reason.value,
            suggestion=suggestion,
            status_code=400,
        )

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.message, failure=self.to_detail(), reason=self.reason)


class InvalidZoneForCategory(MutationRejected):
    def __init__(self, card_name: str, category: str, zone: Zone):
        self.zone = zone
        super().__init__(
            RejectionReason.INVALID_ZONE_FOR_CATEGORY,
            f"{card_name} ({category}) cannot be placed in the {zone.value} zone",
            suggestion="Pick a zone that accepts this card's category.",
        )


class SingleCardZoneOccupied(MutationRejected):
    def __init__(self, zone: Zone, occupant_card_id: str):
        self.zone = zone
        self.occupant_card_id = occupant_card_id
        super().__init__(
            RejectionReason.SINGLE_CARD_ZONE_OCCUPIED,
            f"Only one {zone.value} allowed in deck",
            suggestion=f"Remove the current {zone.value} first.",
        )


class CardLimitExceeded(MutationRejected):
    def __init__(self, card_name: str, resulting: int):
        self.resulting = resulting
        super().__init__(
            RejectionReason.CARD_LIMIT_EXCEEDED,
            f'You can only have {MAX_COPIES} copies of "{card_name}" in your deck '
            f"(would have {resulting})",
            suggestion="Main deck and sideboard copies count together.",
        )


class ZoneCapacityExceeded(MutationRejected):
    def __init__(self, zone: Zone, capacity: int, resulting: int):
        self.zone = zone
        super().__init__(
            RejectionReason.ZONE_CAPACITY_EXCEEDED,
            f"The {zone.value} zone holds at most {capacity} cards (would have {resulting})",
        )


class InvalidQuantity(MutationRejected):
    def __init__(self, quantity: int, minimum: int = 1):
        super().__init__(
            RejectionReason.INVALID_QUANTITY,
            f"Quantity must be at least {minimum} (got {quantity})",
        )


# --- Lookup and access failures ---


class DeckNotFoundError(KnownError):
    def __init__(self, deck_id: str):
        self.deck_id = deck_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message="Deck not found",
            detail=deck_id,
            status_code=404,
        )


class CardNotFoundError(KnownError):
    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Card {card_id} not found",
            detail=card_id,
            status_code=404,
        )


class EntryNotFoundError(KnownError):
    def __init__(self, description: str):
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message="Card is not in this deck",
            detail=description,
            status_code=404,
        )


class AccessDeniedError(KnownError):
    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            kind=FailureKind.ACCESS_DENIED,
            message=message,
            status_code=403,
        )


# --- Persistence failures ---


class PersistenceError(KnownError):
    """The system of record could not complete a read or write."""

    def __init__(self, message: str, detail: str | None = None, status_code: int = 502):
        super().__init__(
            kind=FailureKind.PERSISTENCE_ERROR,
            message=message,
            detail=detail,
            status_code=status_code,
        )


class ConsistencyConflictError(KnownError):
    """
    Persistence failed after an optimistic local update.

    Local state has already been discarded and reloaded; `state` and
    `validation` carry the authoritative values.
    """

    def __init__(
        self,
        message: str,
        state: DeckState | None,
        validation: ValidationResult | None,
        cause: KnownError | None = None,
    ):
        self.state = state
        self.validation = validation
        self.cause = cause
        super().__init__(
            kind=FailureKind.CONSISTENCY_CONFLICT,
            message=message,
            detail=cause.message if cause else None,
            suggestion="The deck was reloaded. Review it and try again.",
            status_code=409,
        )
