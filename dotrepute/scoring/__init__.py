"""
Scoring package: reputation score computation and history.

Consumes raw per-account metrics, validates them, applies the four metric
transforms, weights, time decay and penalties, and records immutable
snapshots in a per-account history store.
"""

from dotrepute.scoring.anomaly import (
    AnomalyConfig,
    AnomalyFlag,
    AnomalyKind,
    AnomalySeverity,
    detect_anomalies,
    detect_anomaly_flags,
)
from dotrepute.scoring.decay import TimeDecayModel, apply_decay, decay_factor
from dotrepute.scoring.engine import ScoringEngine
from dotrepute.scoring.history import InMemoryScoreHistoryStore, ScoreHistoryStore
from dotrepute.scoring.metrics import (
    MetricSource,
    community_score,
    compute_components,
    governance_score,
    identity_score,
    staking_score,
)
from dotrepute.scoring.models import BatchItemResult, ComponentScores, RawMetrics, ScoreSnapshot
from dotrepute.scoring.penalty import PenaltyModel, apply_penalty, compute_penalty
from dotrepute.scoring.reputation_memory import ReputationSummary, Trend, summarize_history
from dotrepute.scoring.validation import normalize, validate, validate_and_normalize
from dotrepute.scoring.weights import WeightConfig

__all__ = [
    "AnomalyConfig",
    "AnomalyFlag",
    "AnomalyKind",
    "AnomalySeverity",
    "detect_anomalies",
    "detect_anomaly_flags",
    "TimeDecayModel",
    "apply_decay",
    "decay_factor",
    "ScoringEngine",
    "InMemoryScoreHistoryStore",
    "ScoreHistoryStore",
    "MetricSource",
    "community_score",
    "compute_components",
    "governance_score",
    "identity_score",
    "staking_score",
    "BatchItemResult",
    "ComponentScores",
    "RawMetrics",
    "ScoreSnapshot",
    "PenaltyModel",
    "apply_penalty",
    "compute_penalty",
    "ReputationSummary",
    "Trend",
    "summarize_history",
    "normalize",
    "validate",
    "validate_and_normalize",
    "WeightConfig",
]
