"""
Data validation and normalization for raw metrics.

validate() rejects out-of-range or self-contradictory input with a typed
ValidationError. normalize() is a separate, explicitly invoked step that
clamps the same fields instead of failing; it is idempotent.
"""

from __future__ import annotations

from dataclasses import replace

from dotrepute.core.exceptions import ValidationError, ValidationErrorKind
from dotrepute.scoring.math_utils import saturating_mul
from dotrepute.scoring.models import RawMetrics

MAX_GOVERNANCE_VOTES = 10_000
MAX_GOVERNANCE_PROPOSALS = 1_000
MAX_IDENTITY_JUDGEMENTS = 10
MAX_UPVOTES_PER_POST = 100

COUNTER_FIELDS = (
    "governance_votes",
    "governance_proposals",
    "staking_amount",
    "staking_duration",
    "identity_judgements",
    "community_posts",
    "community_upvotes",
    "timestamp",
)


def max_upvotes(posts: int) -> int:
    return saturating_mul(posts, MAX_UPVOTES_PER_POST)


def _require_raw_metrics(raw: object) -> None:
    if not isinstance(raw, RawMetrics):
        raise ValidationError(
            ValidationErrorKind.INVALID_METRICS,
            f"Expected RawMetrics, got {type(raw).__name__}",
            field="metrics",
            value=type(raw).__name__,
        )


def validate(raw: RawMetrics) -> None:
    """
    Check raw metrics; raise ValidationError on the first failed rule.

    Input that is not a RawMetrics fails first with INVALID_METRICS.
    Order: negative counters, governance votes, governance proposals,
    identity judgements, upvote ratio, staking consistency.
    """
    _require_raw_metrics(raw)
    for name in COUNTER_FIELDS:
        value = getattr(raw, name)
        if value < 0:
            raise ValidationError(
                ValidationErrorKind.NEGATIVE_COUNTER,
                f"{name} must be non-negative, got {value}",
                field=name,
                value=value,
                limit=0,
            )
    if raw.governance_votes > MAX_GOVERNANCE_VOTES:
        raise ValidationError(
            ValidationErrorKind.INVALID_GOVERNANCE_VOTES,
            f"Unrealistic governance votes count: {raw.governance_votes} > {MAX_GOVERNANCE_VOTES}",
            field="governance_votes",
            value=raw.governance_votes,
            limit=MAX_GOVERNANCE_VOTES,
        )
    if raw.governance_proposals > MAX_GOVERNANCE_PROPOSALS:
        raise ValidationError(
            ValidationErrorKind.INVALID_GOVERNANCE_PROPOSALS,
            f"Unrealistic proposals count: {raw.governance_proposals} > {MAX_GOVERNANCE_PROPOSALS}",
            field="governance_proposals",
            value=raw.governance_proposals,
            limit=MAX_GOVERNANCE_PROPOSALS,
        )
    if raw.identity_judgements > MAX_IDENTITY_JUDGEMENTS:
        raise ValidationError(
            ValidationErrorKind.INVALID_IDENTITY_JUDGEMENTS,
            f"Unrealistic judgements count: {raw.identity_judgements} > {MAX_IDENTITY_JUDGEMENTS}",
            field="identity_judgements",
            value=raw.identity_judgements,
            limit=MAX_IDENTITY_JUDGEMENTS,
        )
    upvote_limit = max_upvotes(raw.community_posts)
    if raw.community_upvotes > upvote_limit:
        raise ValidationError(
            ValidationErrorKind.SUSPICIOUS_UPVOTE_RATIO,
            f"Suspicious upvote ratio: {raw.community_upvotes} upvotes for {raw.community_posts} posts",
            field="community_upvotes",
            value=raw.community_upvotes,
            limit=upvote_limit,
        )
    if raw.staking_amount == 0 and raw.staking_duration > 0:
        raise ValidationError(
            ValidationErrorKind.INVALID_STAKING_DATA,
            "Invalid staking data: duration without amount",
            field="staking_duration",
            value=raw.staking_duration,
            limit=0,
        )


def is_valid(raw: RawMetrics) -> bool:
    try:
        validate(raw)
    except ValidationError:
        return False
    return True


def normalize(raw: RawMetrics) -> RawMetrics:
    """
    Return a copy with out-of-range fields clamped into their valid range.

    Negative counters become 0; votes, proposals and judgements are capped;
    upvotes are capped at posts * 100; duration is zeroed without stake.
    normalize(normalize(x)) == normalize(x).
    """
    _require_raw_metrics(raw)
    fields = {name: max(getattr(raw, name), 0) for name in COUNTER_FIELDS}
    fields["governance_votes"] = min(fields["governance_votes"], MAX_GOVERNANCE_VOTES)
    fields["governance_proposals"] = min(fields["governance_proposals"], MAX_GOVERNANCE_PROPOSALS)
    fields["identity_judgements"] = min(fields["identity_judgements"], MAX_IDENTITY_JUDGEMENTS)
    fields["community_upvotes"] = min(
        fields["community_upvotes"], max_upvotes(fields["community_posts"])
    )
    if fields["staking_amount"] == 0:
        fields["staking_duration"] = 0
    return replace(raw, identity_verified=bool(raw.identity_verified), **fields)


def validate_and_normalize(raw: RawMetrics) -> RawMetrics:
    """
    Validate raw metrics and return their normalized form.

    Raises ValidationError for invalid input; valid input is returned in
    canonical form (validation guarantees normalize changes no counter).
    """
    validate(raw)
    return normalize(raw)


def validate_account_id(account_id: str) -> str:
    """Return the stripped account id; raise ValidationError if it is empty."""
    stripped = (account_id or "").strip() if isinstance(account_id, str) else ""
    if not stripped:
        raise ValidationError(
            ValidationErrorKind.INVALID_ACCOUNT_ID,
            "account_id must be a non-empty string",
            field="account_id",
            value=account_id,
        )
    return stripped
