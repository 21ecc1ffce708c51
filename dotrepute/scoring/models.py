"""
Data models for reputation scoring.

RawMetrics is the per-account input; ComponentScores and ScoreSnapshot are
derived, immutable results. All models expose to_dict() for collaborators
that serialize them.
"""

from __future__ import annotations

import hashlib
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dotrepute.core.exceptions import ReputationError
    from dotrepute.scoring.anomaly import AnomalyKind
    from dotrepute.scoring.weights import WeightConfig


@dataclass(frozen=True)
class RawMetrics:
    """
    Raw behavioral counters for one account at one logical timestamp.

    Counters are non-negative integers. staking_duration is in seconds.
    Constructed by the caller per scoring request; never mutated by the engine.
    """

    governance_votes: int = 0
    governance_proposals: int = 0
    staking_amount: int = 0
    staking_duration: int = 0
    identity_verified: bool = False
    identity_judgements: int = 0
    community_posts: int = 0
    community_upvotes: int = 0
    timestamp: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def digest(self, weights: WeightConfig | None = None) -> str:
        """SHA-256 over the canonical field values (and weights, when given)."""
        parts = [
            str(self.governance_votes),
            str(self.governance_proposals),
            str(self.staking_amount),
            str(self.staking_duration),
            "1" if self.identity_verified else "0",
            str(self.identity_judgements),
            str(self.community_posts),
            str(self.community_upvotes),
            str(self.timestamp),
        ]
        if weights is not None:
            parts.extend(str(w) for w in weights.as_tuple())
        return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class ComponentScores:
    """
    Per-source component scores, each in [0, 100].

    total: unweighted sum of the four components (0-400).
    weighted: weighted combination in [0, 100] for weights summing to 100.
    """

    governance: int
    staking: int
    identity: int
    community: int
    total: int
    weighted: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreSnapshot:
    """
    One immutable, timestamped scoring result for one account.

    weighted_total: weighted combination before decay and penalty.
    decay_factor: percent in [0, 100] applied to weighted_total.
    penalty: points subtracted after decay.
    final_score: clamped result in [0, 100].
    anomalies: advisory anomaly kinds detected on the input; never block scoring.
    input_digest: SHA-256 of the scored input and weights, for auditing and
        idempotent recomputation.
    """

    account_id: str
    components: ComponentScores
    weighted_total: int
    decay_factor: int
    penalty: int
    final_score: int
    timestamp: int
    weights: tuple[int, int, int, int] = (30, 30, 20, 20)
    anomalies: tuple[AnomalyKind, ...] = field(default_factory=tuple)
    input_digest: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "components": self.components.to_dict(),
            "weighted_total": self.weighted_total,
            "decay_factor": self.decay_factor,
            "penalty": self.penalty,
            "final_score": self.final_score,
            "timestamp": self.timestamp,
            "weights": list(self.weights),
            "anomalies": [a.value for a in self.anomalies],
            "input_digest": self.input_digest,
        }


@dataclass(frozen=True)
class BatchItemResult:
    """Outcome of one item in a batch: exactly one of snapshot or error is set."""

    index: int
    account_id: str
    snapshot: ScoreSnapshot | None = None
    error: ReputationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "index": self.index,
            "account_id": self.account_id,
            "ok": self.ok,
            "snapshot": self.snapshot.to_dict() if self.snapshot else None,
            "error": None,
        }
        if self.error is not None:
            to_dict = getattr(self.error, "to_dict", None)
            out["error"] = to_dict() if to_dict else {
                "category": self.error.category,
                "message": str(self.error),
            }
        return out
