"""
Penalties for absent or negative signals.

Penalties are additive and independently triggered; they are bounded only
by the final score clamp, never by an internal ceiling.
"""

from __future__ import annotations

from dataclasses import dataclass

from dotrepute.scoring.math_utils import saturating_sub
from dotrepute.scoring.models import RawMetrics

UNVERIFIED_IDENTITY_PENALTY = 5
NO_GOVERNANCE_PENALTY = 3
NO_STAKE_PENALTY = 2
NO_COMMUNITY_POSTS_PENALTY = 1


def compute_penalty(raw: RawMetrics) -> int:
    """Sum of penalty points for the missing signals in raw."""
    penalty = 0
    if not raw.identity_verified:
        penalty += UNVERIFIED_IDENTITY_PENALTY
    if raw.governance_votes == 0 and raw.governance_proposals == 0:
        penalty += NO_GOVERNANCE_PENALTY
    if raw.staking_amount == 0:
        penalty += NO_STAKE_PENALTY
    if raw.community_posts == 0:
        penalty += NO_COMMUNITY_POSTS_PENALTY
    return penalty


def apply_penalty(score: int, penalty: int) -> int:
    """Subtract penalty points without going below 0."""
    return saturating_sub(score, penalty)


@dataclass(frozen=True)
class PenaltyModel:
    """Penalty policy; when disabled every penalty is 0."""

    enabled: bool = True

    def compute(self, raw: RawMetrics) -> int:
        if not self.enabled:
            return 0
        return compute_penalty(raw)

    def apply(self, score: int, penalty: int) -> int:
        return apply_penalty(score, penalty)
