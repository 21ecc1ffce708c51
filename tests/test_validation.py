"""
Tests for raw metric validation (reject by default) and explicit normalization.
"""

from __future__ import annotations

import pytest

from dotrepute.core.exceptions import ValidationError, ValidationErrorKind
from dotrepute.scoring.models import RawMetrics
from dotrepute.scoring.validation import (
    is_valid,
    normalize,
    validate,
    validate_account_id,
    validate_and_normalize,
)
from tests.factories import make_metrics


def test_reference_metrics_valid():
    validate(make_metrics())
    assert is_valid(make_metrics())
    assert is_valid(RawMetrics())


@pytest.mark.parametrize(
    "overrides, kind, field",
    [
        ({"governance_votes": 10_001}, ValidationErrorKind.INVALID_GOVERNANCE_VOTES, "governance_votes"),
        ({"governance_proposals": 1_001}, ValidationErrorKind.INVALID_GOVERNANCE_PROPOSALS, "governance_proposals"),
        ({"identity_judgements": 11}, ValidationErrorKind.INVALID_IDENTITY_JUDGEMENTS, "identity_judgements"),
        ({"community_posts": 0, "community_upvotes": 1}, ValidationErrorKind.SUSPICIOUS_UPVOTE_RATIO, "community_upvotes"),
        ({"community_posts": 100, "community_upvotes": 10_001}, ValidationErrorKind.SUSPICIOUS_UPVOTE_RATIO, "community_upvotes"),
        ({"staking_amount": 0, "staking_duration": 1}, ValidationErrorKind.INVALID_STAKING_DATA, "staking_duration"),
        ({"community_posts": -1}, ValidationErrorKind.NEGATIVE_COUNTER, "community_posts"),
        ({"staking_amount": -5}, ValidationErrorKind.NEGATIVE_COUNTER, "staking_amount"),
    ],
)
def test_validation_failures(overrides, kind, field):
    """Each rule raises a typed error naming the offending field."""
    with pytest.raises(ValidationError) as exc_info:
        validate(make_metrics(**overrides))
    assert exc_info.value.kind == kind
    assert exc_info.value.field == field
    assert not is_valid(make_metrics(**overrides))


def test_validation_boundaries_accepted():
    """Values exactly at each limit are valid."""
    validate(
        make_metrics(
            governance_votes=10_000,
            governance_proposals=1_000,
            identity_judgements=10,
            community_posts=100,
            community_upvotes=10_000,
        )
    )


def test_validation_reports_first_failed_rule():
    """Votes are checked before judgements; negatives before everything."""
    with pytest.raises(ValidationError) as exc_info:
        validate(make_metrics(governance_votes=20_000, identity_judgements=50))
    assert exc_info.value.kind == ValidationErrorKind.INVALID_GOVERNANCE_VOTES

    with pytest.raises(ValidationError) as exc_info:
        validate(make_metrics(governance_votes=20_000, community_posts=-1))
    assert exc_info.value.kind == ValidationErrorKind.NEGATIVE_COUNTER


def test_validation_error_to_dict():
    with pytest.raises(ValidationError) as exc_info:
        validate(make_metrics(governance_votes=10_001))
    data = exc_info.value.to_dict()
    assert data["category"] == "VALIDATION"
    assert data["kind"] == "invalid_governance_votes"
    assert data["value"] == 10_001
    assert data["limit"] == 10_000


def test_normalize_clamps_out_of_range_fields():
    raw = RawMetrics(
        governance_votes=20_000,
        governance_proposals=5_000,
        staking_amount=0,
        staking_duration=100,
        identity_judgements=-3,
        community_posts=1,
        community_upvotes=500,
    )
    out = normalize(raw)
    assert out.governance_votes == 10_000
    assert out.governance_proposals == 1_000
    assert out.staking_duration == 0
    assert out.identity_judgements == 0
    assert out.community_upvotes == 100
    assert is_valid(out)
    # Input is never mutated.
    assert raw.governance_votes == 20_000


def test_normalize_idempotent():
    raw = RawMetrics(governance_votes=99_999, community_posts=-2, community_upvotes=7, staking_duration=9)
    once = normalize(raw)
    assert normalize(once) == once


def test_normalize_leaves_valid_input_unchanged():
    raw = make_metrics()
    assert normalize(raw) == raw
    assert validate_and_normalize(raw) == raw


def test_validate_and_normalize_rejects_invalid():
    with pytest.raises(ValidationError):
        validate_and_normalize(make_metrics(identity_judgements=11))


def test_validate_account_id():
    assert validate_account_id("  abc  ") == "abc"
    for bad in ("", "   ", None):
        with pytest.raises(ValidationError) as exc_info:
            validate_account_id(bad)
        assert exc_info.value.kind == ValidationErrorKind.INVALID_ACCOUNT_ID


@pytest.mark.parametrize("raw", [{"governance_votes": 1}, None, 42])
def test_non_metrics_input_rejected(raw):
    """Anything other than RawMetrics is a typed validation error, not an AttributeError."""
    with pytest.raises(ValidationError) as exc_info:
        validate(raw)
    assert exc_info.value.kind == ValidationErrorKind.INVALID_METRICS
    assert not is_valid(raw)
    with pytest.raises(ValidationError):
        normalize(raw)
