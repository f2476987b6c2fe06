from riftdeck.models.card import Card, CardCategory
from riftdeck.models.deck import PROVISIONAL_ID_PREFIX, Deck, DeckCardEntry, DeckState
from riftdeck.models.failure import (
    AccessDeniedError,
    CardLimitExceeded,
    CardNotFoundError,
    ConsistencyConflictError,
    DeckNotFoundError,
    EntryNotFoundError,
    ErrorResponse,
    FailureDetail,
    FailureKind,
    InvalidQuantity,
    InvalidZoneForCategory,
    KnownError,
    MutationRejected,
    PersistenceError,
    RejectionReason,
    SingleCardZoneOccupied,
    ZoneCapacityExceeded,
)
from riftdeck.models.validation import DeckStatus, ValidationChecks, ValidationResult
from riftdeck.models.zone import (
    COPY_LIMITED_ZONES,
    MAX_COPIES,
    SINGLE_CARD_ZONES,
    ZONE_RULES,
    CapacityPolicy,
    Zone,
    ZoneRule,
    zone_rule,
)

__all__ = [
    "COPY_LIMITED_ZONES",
    "MAX_COPIES",
    "PROVISIONAL_ID_PREFIX",
    "SINGLE_CARD_ZONES",
    "ZONE_RULES",
    "AccessDeniedError",
    "CapacityPolicy",
    "Card",
    "CardCategory",
    "CardLimitExceeded",
    "CardNotFoundError",
    "ConsistencyConflictError",
    "Deck",
    "DeckCardEntry",
    "DeckNotFoundError",
    "DeckState",
    "DeckStatus",
    "EntryNotFoundError",
    "ErrorResponse",
    "FailureDetail",
    "FailureKind",
    "InvalidQuantity",
    "InvalidZoneForCategory",
    "KnownError",
    "MutationRejected",
    "PersistenceError",
    "RejectionReason",
    "SingleCardZoneOccupied",
    "ValidationChecks",
    "ValidationResult",
    "Zone",
    "ZoneCapacityExceeded",
    "ZoneRule",
    "zone_rule",
]
