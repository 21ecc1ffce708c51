"""
Application-level exceptions.

All errors raised by dotrepute derive from ReputationError and carry a
category string for logging. Validation errors are always returned to the
caller; nothing in the scoring core corrects input silently.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

CATEGORY_VALIDATION = "VALIDATION"
CATEGORY_STORAGE = "STORAGE"
CATEGORY_CONFIGURATION = "CONFIGURATION"


class ValidationErrorKind(str, Enum):
    INVALID_GOVERNANCE_VOTES = "invalid_governance_votes"
    INVALID_GOVERNANCE_PROPOSALS = "invalid_governance_proposals"
    INVALID_IDENTITY_JUDGEMENTS = "invalid_identity_judgements"
    SUSPICIOUS_UPVOTE_RATIO = "suspicious_upvote_ratio"
    INVALID_STAKING_DATA = "invalid_staking_data"
    INVALID_WEIGHTS = "invalid_weights"
    NEGATIVE_COUNTER = "negative_counter"
    INVALID_ACCOUNT_ID = "invalid_account_id"
    OUT_OF_ORDER_TIMESTAMP = "out_of_order_timestamp"
    INVALID_METRICS = "invalid_metrics"


class ReputationError(Exception):
    """Base exception for dotrepute."""

    category = "GENERAL"


class ValidationError(ReputationError):
    """
    Raised when input is malformed or out of bounds.

    kind identifies the failed rule; field, value and limit describe the
    offending input so callers can report it without parsing the message.
    """

    category = CATEGORY_VALIDATION

    def __init__(
        self,
        kind: ValidationErrorKind,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        limit: Any = None,
    ) -> None:
        self.kind = kind
        self.field = field
        self.value = value
        self.limit = limit
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "kind": self.kind.value,
            "message": str(self),
            "field": self.field,
            "value": self.value,
            "limit": self.limit,
        }


class InvalidWeightsError(ValidationError):
    """Raised when a weight configuration does not sum to 100 or has a negative weight."""

    def __init__(self, message: str, *, value: Any = None) -> None:
        super().__init__(
            ValidationErrorKind.INVALID_WEIGHTS,
            message,
            field="weights",
            value=value,
            limit=100,
        )


class HistoryStoreError(ReputationError):
    """Raised when the score history store cannot complete an operation."""

    category = CATEGORY_STORAGE


class HistoryOrderError(HistoryStoreError):
    """Raised when an append would break the timestamp order of an account's history."""

    def __init__(self, account_id: str, timestamp: int, latest_timestamp: int) -> None:
        self.account_id = account_id
        self.timestamp = timestamp
        self.latest_timestamp = latest_timestamp
        super().__init__(
            f"Snapshot timestamp {timestamp} is earlier than latest stored "
            f"timestamp {latest_timestamp} for account {account_id}"
        )


class ConfigurationError(ReputationError):
    """Raised when configuration is invalid."""

    category = CATEGORY_CONFIGURATION
