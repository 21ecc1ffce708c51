"""
Tests for the four metric transforms and the weighted combination.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from itertools import product

import pytest

from dotrepute.scoring.metrics import (
    MetricSource,
    community_score,
    compute_components,
    governance_score,
    identity_score,
    staking_score,
    weighted_combination,
)
from dotrepute.scoring.weights import WeightConfig
from tests.factories import make_metrics


def test_reference_account_components():
    """Reference account: governance 75, staking 85, identity 70, community 100, weighted 82."""
    raw = make_metrics()
    assert governance_score(raw) == 75  # min(100, 50) + min(25, 50)
    assert staking_score(raw) == 85  # min(39*10, 60) + min(sqrt(30)=5 * 5, 40)
    assert identity_score(raw) == 70  # 50 + 20
    assert community_score(raw) == 100  # 40 + 60

    components = compute_components(raw, WeightConfig())
    assert components.total == 330
    # (75*30 + 85*30 + 70*20 + 100*20) // 100
    assert components.weighted == 82


def test_zero_staking_is_zero():
    """No stake means staking component exactly 0."""
    assert staking_score(make_metrics(staking_amount=0, staking_duration=0)) == 0


def test_staking_amount_one_scores_duration_only():
    """log2(1) = 0, so only duration contributes."""
    assert staking_score(make_metrics(staking_amount=1, staking_duration=0)) == 0
    assert staking_score(make_metrics(staking_amount=1, staking_duration=16 * 86_400)) == 20


def test_staking_monotonic_in_amount():
    """Increasing staking amount with fixed duration never lowers the staking score."""
    amounts = [1, 2, 3, 7, 8, 1_000, 65_535, 65_536, 10**6, 10**12, 2**40, 2**63, 2**64 - 1]
    scores = [staking_score(make_metrics(staking_amount=a)) for a in amounts]
    assert scores == sorted(scores)


def test_component_caps():
    """Each component saturates at its caps regardless of how large the inputs are."""
    raw = make_metrics(
        governance_votes=10_000,
        governance_proposals=1_000,
        staking_amount=2**64 - 1,
        staking_duration=10_000 * 86_400,
        identity_judgements=10,
        community_posts=1_000,
        community_upvotes=100_000,
    )
    assert governance_score(raw) == 100
    assert staking_score(raw) == 100
    assert identity_score(raw) == 100
    assert community_score(raw) == 100


def test_unverified_identity_only_judgements():
    assert identity_score(make_metrics(identity_verified=False, identity_judgements=3)) == 30


def test_community_upvotes_floor_division():
    assert community_score(make_metrics(community_posts=0, community_upvotes=0)) == 0
    assert community_score(make_metrics(community_posts=5, community_upvotes=7)) == 5 + 3


@pytest.mark.parametrize(
    "overrides",
    [
        {},
        {"governance_votes": 0, "governance_proposals": 0},
        {"staking_amount": 0, "staking_duration": 0},
        {"identity_verified": False, "identity_judgements": 0},
        {"community_posts": 0, "community_upvotes": 0},
        {"governance_votes": 10_000, "community_posts": 1_000, "community_upvotes": 100_000},
    ],
)
def test_components_within_bounds(overrides):
    """Every component is within [0, 100] for valid input."""
    components = compute_components(make_metrics(**overrides), WeightConfig())
    for value in (components.governance, components.staking, components.identity, components.community):
        assert 0 <= value <= 100


def test_weighted_combination_bounded_for_valid_weights():
    """Any weights summing to 100 keep the weighted combination within [0, 100]."""
    scores = {source: 100 for source in MetricSource}
    zero_scores = {source: 0 for source in MetricSource}
    for weights in product(range(0, 101, 25), repeat=4):
        if sum(weights) != 100:
            continue
        config = WeightConfig.from_tuple(weights)
        assert weighted_combination(scores, config) == 100
        assert weighted_combination(zero_scores, config) == 0


def test_weighted_combination_zero_weight_total():
    """A zero weight total is a defined 'nothing weighted' state, not an error."""
    scores = {source: 80 for source in MetricSource}
    assert weighted_combination(scores, WeightConfig(0, 0, 0, 0)) == 0


def test_compute_components_with_executor_matches_inline():
    """Fanning transforms out to worker threads produces the same components."""
    raw = make_metrics()
    with ThreadPoolExecutor(max_workers=4) as executor:
        parallel = compute_components(raw, WeightConfig(), executor=executor)
    assert parallel == compute_components(raw, WeightConfig())
