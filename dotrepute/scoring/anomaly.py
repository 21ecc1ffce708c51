"""
Rule-based anomaly detection for raw reputation metrics.

Flags high governance activity, suspicious engagement, inconsistent
identity and extreme staking. Advisory only: flags never block scoring.
Each flag carries a rule name, severity and a human-readable reason with
threshold vs actual; thresholds are configurable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from dotrepute.scoring.math_utils import saturating_mul
from dotrepute.scoring.models import RawMetrics


class AnomalySeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnomalyKind(str, Enum):
    HIGH_GOVERNANCE_ACTIVITY = "high_governance_activity"
    SUSPICIOUS_ENGAGEMENT = "suspicious_engagement"
    INCONSISTENT_IDENTITY = "inconsistent_identity"
    EXTREME_STAKING = "extreme_staking"


@dataclass(frozen=True)
class AnomalyFlag:
    """
    Single explainable anomaly flag.

    Every flag is tied to a rule and includes the exact reason
    (threshold vs actual) so callers can interpret it.
    """

    kind: AnomalyKind
    severity: AnomalySeverity
    message: str
    rule_name: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
            "rule_name": self.rule_name,
            "details": self.details,
        }


@dataclass(frozen=True)
class AnomalyConfig:
    """
    Configurable thresholds for anomaly rules.

    All thresholds are strict: a value must exceed the threshold to be flagged.
    """

    high_governance_votes: int = 5_000
    suspicious_upvotes_per_post: int = 50
    # Judgements above this count without identity verification are inconsistent.
    unverified_judgements: int = 5
    extreme_staking_amount: int = 1_000_000_000_000_000


def _check_high_governance(raw: RawMetrics, config: AnomalyConfig) -> AnomalyFlag | None:
    if raw.governance_votes <= config.high_governance_votes:
        return None
    return AnomalyFlag(
        kind=AnomalyKind.HIGH_GOVERNANCE_ACTIVITY,
        severity=AnomalySeverity.MEDIUM,
        message=(
            f"Unusually high governance votes: {raw.governance_votes} "
            f"(threshold: {config.high_governance_votes})"
        ),
        rule_name="high_governance_votes",
        details={
            "governance_votes": raw.governance_votes,
            "threshold": config.high_governance_votes,
        },
    )


def _check_suspicious_engagement(raw: RawMetrics, config: AnomalyConfig) -> AnomalyFlag | None:
    limit = saturating_mul(raw.community_posts, config.suspicious_upvotes_per_post)
    if raw.community_upvotes <= limit:
        return None
    return AnomalyFlag(
        kind=AnomalyKind.SUSPICIOUS_ENGAGEMENT,
        severity=AnomalySeverity.HIGH,
        message=(
            f"Suspicious upvote ratio: {raw.community_upvotes} upvotes for "
            f"{raw.community_posts} posts (threshold: {config.suspicious_upvotes_per_post} per post)"
        ),
        rule_name="suspicious_upvotes_per_post",
        details={
            "community_upvotes": raw.community_upvotes,
            "community_posts": raw.community_posts,
            "threshold_per_post": config.suspicious_upvotes_per_post,
        },
    )


def _check_inconsistent_identity(raw: RawMetrics, config: AnomalyConfig) -> AnomalyFlag | None:
    if raw.identity_verified or raw.identity_judgements <= config.unverified_judgements:
        return None
    return AnomalyFlag(
        kind=AnomalyKind.INCONSISTENT_IDENTITY,
        severity=AnomalySeverity.MEDIUM,
        message=(
            f"Judgements without verification: {raw.identity_judgements} judgements "
            f"on an unverified identity (threshold: {config.unverified_judgements})"
        ),
        rule_name="unverified_judgements",
        details={
            "identity_judgements": raw.identity_judgements,
            "identity_verified": raw.identity_verified,
            "threshold": config.unverified_judgements,
        },
    )


def _check_extreme_staking(raw: RawMetrics, config: AnomalyConfig) -> AnomalyFlag | None:
    if raw.staking_amount <= config.extreme_staking_amount:
        return None
    return AnomalyFlag(
        kind=AnomalyKind.EXTREME_STAKING,
        severity=AnomalySeverity.LOW,
        message=(
            f"Extreme staking amount: {raw.staking_amount} "
            f"(threshold: {config.extreme_staking_amount})"
        ),
        rule_name="extreme_staking_amount",
        details={
            "staking_amount": raw.staking_amount,
            "threshold": config.extreme_staking_amount,
        },
    )


_CHECKS: tuple[Callable[[RawMetrics, AnomalyConfig], AnomalyFlag | None], ...] = (
    _check_high_governance,
    _check_suspicious_engagement,
    _check_inconsistent_identity,
    _check_extreme_staking,
)


def detect_anomaly_flags(
    raw: RawMetrics,
    config: AnomalyConfig | None = None,
) -> list[AnomalyFlag]:
    """
    Run all anomaly rules on raw metrics.

    Each rule is independent and explainable: flags include message and
    details (threshold vs actual).

    Args:
        raw: Raw metrics as received (validated or not).
        config: Thresholds for each rule; uses defaults if None.

    Returns:
        Flags in rule order; empty when nothing is implausible.
    """
    cfg = config or AnomalyConfig()
    flags: list[AnomalyFlag] = []
    for check in _CHECKS:
        flag = check(raw, cfg)
        if flag is not None:
            flags.append(flag)
    return flags


def detect_anomalies(
    raw: RawMetrics,
    config: AnomalyConfig | None = None,
) -> list[AnomalyKind]:
    """Return the kinds of anomalies present in raw metrics (advisory, never raises on valid types)."""
    return [flag.kind for flag in detect_anomaly_flags(raw, config)]
