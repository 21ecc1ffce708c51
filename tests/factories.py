"""
Shared test data: reference accounts, timestamps and metric/snapshot builders.
"""

from __future__ import annotations

from dotrepute.scoring.models import ComponentScores, RawMetrics, ScoreSnapshot

ACCOUNT = "5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY"
ACCOUNT_2 = "5FHneW46xGXgs5mUiveU4sbTyGBzmstUspZC92UhjJM694ty"
BASE_TS = 1_699_430_400
DAY = 86_400


def make_metrics(**overrides) -> RawMetrics:
    """Reference account: active governance, 1e12 staked for 30 days, verified, engaged."""
    fields = {
        "governance_votes": 50,
        "governance_proposals": 5,
        "staking_amount": 1_000_000_000_000,
        "staking_duration": 2_592_000,
        "identity_verified": True,
        "identity_judgements": 2,
        "community_posts": 100,
        "community_upvotes": 500,
        "timestamp": BASE_TS,
    }
    fields.update(overrides)
    return RawMetrics(**fields)


def make_snapshot(final_score: int, timestamp: int, account_id: str = ACCOUNT) -> ScoreSnapshot:
    """Snapshot with the given final score; components are placeholders."""
    return ScoreSnapshot(
        account_id=account_id,
        components=ComponentScores(
            governance=final_score,
            staking=final_score,
            identity=final_score,
            community=final_score,
            total=final_score * 4,
            weighted=final_score,
        ),
        weighted_total=final_score,
        decay_factor=100,
        penalty=0,
        final_score=final_score,
        timestamp=timestamp,
    )
