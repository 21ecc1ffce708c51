"""
Metric transforms: one pure function per signal source.

Each transform maps RawMetrics to an integer component score in [0, 100].
The set of sources is closed (governance, staking, identity, community);
every component is capped at 100 so no single source can dominate the
weighted sum regardless of weights.
"""

from __future__ import annotations

from concurrent.futures import Executor
from enum import Enum
from typing import Callable

from dotrepute.scoring.math_utils import (
    integer_log2,
    integer_sqrt,
    saturating_add,
    saturating_mul,
    seconds_to_days,
)
from dotrepute.scoring.models import ComponentScores, RawMetrics
from dotrepute.scoring.weights import WeightConfig

COMPONENT_MAX = 100

GOVERNANCE_VOTE_MULTIPLIER = 2
GOVERNANCE_VOTE_CAP = 50
GOVERNANCE_PROPOSAL_MULTIPLIER = 5
GOVERNANCE_PROPOSAL_CAP = 50

STAKING_AMOUNT_MULTIPLIER = 10
STAKING_AMOUNT_CAP = 60
STAKING_DURATION_MULTIPLIER = 5
STAKING_DURATION_CAP = 40

IDENTITY_VERIFIED_POINTS = 50
IDENTITY_JUDGEMENT_MULTIPLIER = 10
IDENTITY_JUDGEMENT_CAP = 50

COMMUNITY_POST_CAP = 40
COMMUNITY_UPVOTE_DIVISOR = 2
COMMUNITY_UPVOTE_CAP = 60


class MetricSource(str, Enum):
    GOVERNANCE = "governance"
    STAKING = "staking"
    IDENTITY = "identity"
    COMMUNITY = "community"


def governance_score(raw: RawMetrics) -> int:
    """min(votes*2, 50) + min(proposals*5, 50)."""
    votes = min(saturating_mul(raw.governance_votes, GOVERNANCE_VOTE_MULTIPLIER), GOVERNANCE_VOTE_CAP)
    proposals = min(
        saturating_mul(raw.governance_proposals, GOVERNANCE_PROPOSAL_MULTIPLIER),
        GOVERNANCE_PROPOSAL_CAP,
    )
    return votes + proposals


def staking_score(raw: RawMetrics) -> int:
    """0 without stake; else min(log2(amount)*10, 60) + min(sqrt(days)*5, 40)."""
    if raw.staking_amount <= 0:
        return 0
    amount = min(
        saturating_mul(integer_log2(raw.staking_amount), STAKING_AMOUNT_MULTIPLIER),
        STAKING_AMOUNT_CAP,
    )
    duration_days = seconds_to_days(max(raw.staking_duration, 0))
    duration = min(
        saturating_mul(integer_sqrt(duration_days), STAKING_DURATION_MULTIPLIER),
        STAKING_DURATION_CAP,
    )
    return amount + duration


def identity_score(raw: RawMetrics) -> int:
    """50 when verified, plus min(judgements*10, 50)."""
    verified = IDENTITY_VERIFIED_POINTS if raw.identity_verified else 0
    judgements = min(
        saturating_mul(raw.identity_judgements, IDENTITY_JUDGEMENT_MULTIPLIER),
        IDENTITY_JUDGEMENT_CAP,
    )
    return verified + judgements


def community_score(raw: RawMetrics) -> int:
    """min(posts, 40) + min(upvotes // 2, 60)."""
    posts = min(raw.community_posts, COMMUNITY_POST_CAP)
    upvotes = min(raw.community_upvotes // COMMUNITY_UPVOTE_DIVISOR, COMMUNITY_UPVOTE_CAP)
    return posts + upvotes


TRANSFORMS: tuple[tuple[MetricSource, Callable[[RawMetrics], int]], ...] = (
    (MetricSource.GOVERNANCE, governance_score),
    (MetricSource.STAKING, staking_score),
    (MetricSource.IDENTITY, identity_score),
    (MetricSource.COMMUNITY, community_score),
)


def weighted_combination(scores: dict[MetricSource, int], weights: WeightConfig) -> int:
    """
    Sum of score * weight over the four sources, divided by the weight total.

    A zero weight total is a legitimate "nothing weighted" state and yields 0.
    """
    total_weight = weights.total
    if total_weight <= 0:
        return 0
    acc = 0
    for source, weight in zip(MetricSource, weights.as_tuple()):
        acc = saturating_add(acc, saturating_mul(scores[source], weight))
    return acc // total_weight


def compute_components(
    raw: RawMetrics,
    weights: WeightConfig,
    executor: Executor | None = None,
) -> ComponentScores:
    """
    Run the four transforms and combine them under weights.

    Transforms are independent; with an executor they fan out and are
    joined in source order. Without one they run inline.
    """
    if executor is None:
        scores = {source: fn(raw) for source, fn in TRANSFORMS}
    else:
        futures = {source: executor.submit(fn, raw) for source, fn in TRANSFORMS}
        scores = {source: fut.result() for source, fut in futures.items()}

    total = sum(scores.values())
    return ComponentScores(
        governance=scores[MetricSource.GOVERNANCE],
        staking=scores[MetricSource.STAKING],
        identity=scores[MetricSource.IDENTITY],
        community=scores[MetricSource.COMMUNITY],
        total=total,
        weighted=weighted_combination(scores, weights),
    )
