"""
Reputation memory: a read-only view over an account's score history.

One snapshot says little on its own; the summary combines the latest
final score with 7-day and 30-day rolling means, a trend label and the
spread of recent scores. Never writes to the store.
"""

from __future__ import annotations

import statistics
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from dotrepute.scoring.math_utils import SECONDS_PER_DAY
from dotrepute.scoring.models import ScoreSnapshot

SHORT_WINDOW_DAYS = 7
LONG_WINDOW_DAYS = 30

# Points the current score must move away from the reference mean to leave "stable".
TREND_THRESHOLD_POINTS = 3.0


class Trend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DEGRADING = "degrading"


@dataclass(frozen=True)
class ReputationSummary:
    """
    Account history as of a point in time.

    current_score is None without history. avg_7d / avg_30d are None for an
    empty window; volatility (population std dev over 30 days) needs at
    least two scores.
    """

    account_id: str
    current_score: int | None
    avg_7d: float | None
    avg_30d: float | None
    trend: Trend
    volatility: float | None
    snapshot_count: int

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.__dict__)
        data["trend"] = self.trend.value
        return data


def _scores_since(snapshots: Sequence[ScoreSnapshot], now: int, days: int) -> list[int]:
    start = now - days * SECONDS_PER_DAY
    return [s.final_score for s in snapshots if start <= s.timestamp <= now]


def _mean(scores: list[int]) -> float | None:
    return round(statistics.mean(scores), 2) if scores else None


def classify_trend(current: float, reference: float | None) -> Trend:
    """Compare current against the reference mean; no reference means stable."""
    if reference is None:
        return Trend.STABLE
    if current - reference >= TREND_THRESHOLD_POINTS:
        return Trend.IMPROVING
    if reference - current >= TREND_THRESHOLD_POINTS:
        return Trend.DEGRADING
    return Trend.STABLE


def summarize_history(
    account_id: str,
    snapshots: Sequence[ScoreSnapshot],
    now: int,
) -> ReputationSummary:
    """
    Summarize chronological snapshots as of now.

    Snapshots later than now are ignored. The trend reference is the
    30-day mean, falling back to the 7-day mean. Means and volatility are
    rounded to 2 decimals.
    """
    visible = [s for s in snapshots if s.timestamp <= now]
    if not visible:
        return ReputationSummary(account_id, None, None, None, Trend.STABLE, None, 0)

    long_window = _scores_since(visible, now, LONG_WINDOW_DAYS)
    avg_7d = _mean(_scores_since(visible, now, SHORT_WINDOW_DAYS))
    avg_30d = _mean(long_window)
    current = visible[-1].final_score
    return ReputationSummary(
        account_id=account_id,
        current_score=current,
        avg_7d=avg_7d,
        avg_30d=avg_30d,
        trend=classify_trend(current, avg_30d if avg_30d is not None else avg_7d),
        volatility=round(statistics.pstdev(long_window), 2) if len(long_window) > 1 else None,
        snapshot_count=len(visible),
    )
