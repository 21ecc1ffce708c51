"""
Time decay: multiplicative attenuation based on time since the previous snapshot.

Factors are whole percents in [0, 100]. Decay compounds once per full day
elapsed using integer arithmetic, so the same inputs always produce the
same factor.
"""

from __future__ import annotations

from dataclasses import dataclass

from dotrepute.scoring.math_utils import (
    saturating_mul,
    saturating_sub,
    seconds_to_days,
)

FULL_FACTOR = 100
NO_FACTOR = 0


def decay_factor(elapsed_seconds: int, decay_rate_percent: int) -> int:
    """
    Return the decay factor for elapsed_seconds at a daily decay rate.

    Rules:
    - rate >= 100: factor 0 (a full daily decay is total loss).
    - fewer than one full day elapsed: factor 100.
    - otherwise: start at 100 and apply factor = factor * (100 - rate) // 100
      once per elapsed day, stopping early once the factor reaches 0.
    """
    if decay_rate_percent >= 100:
        return NO_FACTOR
    days = seconds_to_days(max(elapsed_seconds, 0))
    if days == 0 or decay_rate_percent <= 0:
        return FULL_FACTOR
    retention = 100 - decay_rate_percent
    factor = FULL_FACTOR
    for _ in range(days):
        factor = saturating_mul(factor, retention) // 100
        if factor == 0:
            break
    return factor


def apply_decay(score: int, factor: int) -> int:
    """score * factor // 100 with saturating multiplication."""
    return saturating_mul(score, factor) // 100


@dataclass(frozen=True)
class TimeDecayModel:
    """
    Decay policy bound to a daily rate.

    decay_rate_percent: percent lost per full day (retention = 100 - rate).
    enabled: when False every factor is 100.
    """

    decay_rate_percent: int = 5
    enabled: bool = True

    def factor_between(self, previous_timestamp: int | None, current_timestamp: int) -> int:
        """
        Factor for a snapshot at current_timestamp given the previous snapshot.

        No previous snapshot (cold start) always yields 100.
        """
        if not self.enabled or previous_timestamp is None:
            return FULL_FACTOR
        elapsed = saturating_sub(current_timestamp, previous_timestamp)
        return decay_factor(elapsed, self.decay_rate_percent)

    def apply(self, score: int, factor: int) -> int:
        return apply_decay(score, factor)
