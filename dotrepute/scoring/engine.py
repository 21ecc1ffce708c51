"""
Scoring engine: orchestrates one reputation computation per account.

Per invocation: validate -> transform -> weight -> decay -> penalize ->
clamp -> store. A validation failure stops the pipeline before any
transform runs and leaves the history store untouched; only a complete
snapshot is ever appended.

The engine owns no global state: history lives in the store instance it
is given, weights are immutable and shared, and time comes from the
metrics' logical timestamp (or an injected clock), never from the wall
clock.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Callable

from dotrepute.config.settings import ScoringSettings, get_settings
from dotrepute.core.exceptions import ReputationError, ValidationError, ValidationErrorKind
from dotrepute.repute_logging import get_logger
from dotrepute.scoring.anomaly import AnomalyConfig, AnomalyKind, detect_anomaly_flags
from dotrepute.scoring.decay import TimeDecayModel
from dotrepute.scoring.history import InMemoryScoreHistoryStore, ScoreHistoryStore
from dotrepute.scoring.math_utils import clamp
from dotrepute.scoring.metrics import compute_components
from dotrepute.scoring.models import BatchItemResult, RawMetrics, ScoreSnapshot
from dotrepute.scoring.penalty import PenaltyModel
from dotrepute.scoring.reputation_memory import ReputationSummary, summarize_history
from dotrepute.scoring.validation import normalize, validate, validate_account_id
from dotrepute.scoring.weights import WeightConfig

logger = get_logger(__name__)

SCORE_MIN = 0
SCORE_MAX = 100


class ScoringEngine:
    """
    Computes, stores and reads reputation score snapshots.

    Usage:
        engine = ScoringEngine()
        snapshot = engine.compute_score("5Grw...", RawMetrics(governance_votes=50, timestamp=ts))
        history = engine.get_history("5Grw...")
    """

    def __init__(
        self,
        store: ScoreHistoryStore | None = None,
        settings: ScoringSettings | None = None,
        *,
        weights: WeightConfig | None = None,
        anomaly_config: AnomalyConfig | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._settings = settings or ScoringSettings()
        self._store = store if store is not None else InMemoryScoreHistoryStore()
        self._weights = weights or WeightConfig.from_tuple(self._settings.weights)
        self._decay = TimeDecayModel(
            decay_rate_percent=self._settings.decay_rate_percent,
            enabled=self._settings.time_decay_enabled,
        )
        self._penalty = PenaltyModel(enabled=self._settings.penalties_enabled)
        self._anomaly_config = anomaly_config or AnomalyConfig()
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: ScoringSettings | None = None,
        **kwargs,
    ) -> ScoringEngine:
        """
        Build an engine from settings (environment when None).

        Uses SqlScoreHistoryStore when history_db_url is set, else in-memory history.
        """
        settings = settings or get_settings()
        store: ScoreHistoryStore
        if settings.history_db_url:
            from dotrepute.database.history_store import SqlScoreHistoryStore

            store = SqlScoreHistoryStore(settings.history_db_url)
        else:
            store = InMemoryScoreHistoryStore()
        return cls(store, settings, **kwargs)

    @property
    def store(self) -> ScoreHistoryStore:
        return self._store

    @property
    def weights(self) -> WeightConfig:
        return self._weights

    @property
    def settings(self) -> ScoringSettings:
        return self._settings

    def _resolve_timestamp(self, raw: RawMetrics) -> RawMetrics:
        if raw.timestamp == 0 and self._clock is not None:
            return replace(raw, timestamp=int(self._clock()))
        return raw

    def _validated(
        self,
        account_id: str,
        raw: RawMetrics,
        weights: WeightConfig,
    ) -> tuple[str, RawMetrics]:
        try:
            account_id = validate_account_id(account_id)
            weights.validate()
            validate(raw)
        except ValidationError as e:
            logger.warning(
                "score_validation_failed",
                account_id=account_id if isinstance(account_id, str) else repr(account_id),
                kind=e.kind.value,
                field=e.field,
                value=e.value,
                limit=e.limit,
            )
            raise
        return account_id, self._resolve_timestamp(normalize(raw))

    def compute_score(
        self,
        account_id: str,
        raw: RawMetrics,
        weights: WeightConfig | None = None,
    ) -> ScoreSnapshot:
        """
        Score one account and append the snapshot to its history.

        Args:
            account_id: Non-empty account identifier.
            raw: Raw metrics; must pass validation (use validate_and_normalize
                explicitly to clamp out-of-range input first).
            weights: Weight configuration; the engine default when None.

        Returns:
            The new snapshot, or the latest stored snapshot unchanged when the
            same input and weights were already scored at the same timestamp.

        Raises:
            ValidationError: invalid account id, weights (InvalidWeightsError),
                metrics, or a timestamp earlier than the latest snapshot.
            HistoryStoreError: the store failed to read or append.
        """
        weights = weights or self._weights
        account_id, raw = self._validated(account_id, raw, weights)
        flags = detect_anomaly_flags(raw, self._anomaly_config)
        anomalies: tuple[AnomalyKind, ...] = tuple(f.kind for f in flags)
        digest = raw.digest(weights)

        with self._store.account_lock(account_id):
            previous = self._store.latest(account_id)
            if previous is not None and raw.timestamp < previous.timestamp:
                logger.warning(
                    "score_validation_failed",
                    account_id=account_id,
                    kind=ValidationErrorKind.OUT_OF_ORDER_TIMESTAMP.value,
                    timestamp=raw.timestamp,
                    latest_timestamp=previous.timestamp,
                )
                raise ValidationError(
                    ValidationErrorKind.OUT_OF_ORDER_TIMESTAMP,
                    f"Timestamp {raw.timestamp} is earlier than latest snapshot "
                    f"timestamp {previous.timestamp}",
                    field="timestamp",
                    value=raw.timestamp,
                    limit=previous.timestamp,
                )
            if (
                previous is not None
                and previous.timestamp == raw.timestamp
                and previous.input_digest == digest
            ):
                logger.debug("score_recomputed_idempotent", account_id=account_id, timestamp=raw.timestamp)
                return previous

            components = compute_components(raw, weights)
            decay_factor = self._decay.factor_between(
                previous.timestamp if previous is not None else None,
                raw.timestamp,
            )
            decayed = self._decay.apply(components.weighted, decay_factor)
            penalty = self._penalty.compute(raw)
            final_score = clamp(self._penalty.apply(decayed, penalty), SCORE_MIN, SCORE_MAX)

            snapshot = ScoreSnapshot(
                account_id=account_id,
                components=components,
                weighted_total=components.weighted,
                decay_factor=decay_factor,
                penalty=penalty,
                final_score=final_score,
                timestamp=raw.timestamp,
                weights=weights.as_tuple(),
                anomalies=anomalies,
                input_digest=digest,
            )
            self._store.append(snapshot)

        if flags:
            logger.info(
                "anomalies_detected",
                account_id=account_id,
                anomaly_flags=[f.to_dict() for f in flags],
            )
        logger.info(
            "score_computed",
            account_id=account_id,
            governance=components.governance,
            staking=components.staking,
            identity=components.identity,
            community=components.community,
            weighted_total=components.weighted,
            decay_factor=decay_factor,
            penalty=penalty,
            final_score=final_score,
            timestamp=raw.timestamp,
        )
        return snapshot

    def _score_group(
        self,
        indices: list[int],
        account_ids: Sequence[str],
        metrics: Sequence[RawMetrics],
        weights: WeightConfig | None,
    ) -> list[BatchItemResult]:
        results: list[BatchItemResult] = []
        for i in indices:
            try:
                snapshot = self.compute_score(account_ids[i], metrics[i], weights)
                results.append(BatchItemResult(index=i, account_id=snapshot.account_id, snapshot=snapshot))
            except ReputationError as e:
                results.append(BatchItemResult(index=i, account_id=str(account_ids[i]), error=e))
        return results

    def compute_batch(
        self,
        account_ids: Sequence[str],
        metrics: Sequence[RawMetrics],
        weights: WeightConfig | None = None,
    ) -> list[BatchItemResult]:
        """
        Score many accounts; one item's failure never aborts the others.

        Items for the same account are scored in input order on one worker;
        distinct accounts run concurrently. Results come back in input order.

        Raises:
            ValueError: account_ids and metrics differ in length.
        """
        if len(account_ids) != len(metrics):
            raise ValueError(
                f"account_ids and metrics must have the same length "
                f"({len(account_ids)} != {len(metrics)})"
            )
        if not account_ids:
            return []

        groups: dict[str, list[int]] = defaultdict(list)
        for i, account_id in enumerate(account_ids):
            key = account_id.strip() if isinstance(account_id, str) else ""
            groups[key].append(i)

        results: list[BatchItemResult] = []
        max_workers = max(1, min(self._settings.batch_concurrency, len(groups)))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(self._score_group, indices, account_ids, metrics, weights)
                for indices in groups.values()
            ]
            for fut in as_completed(futures):
                results.extend(fut.result())
        results.sort(key=lambda r: r.index)

        failed = sum(1 for r in results if not r.ok)
        logger.info("batch_scored", items=len(results), ok=len(results) - failed, failed=failed)
        return results

    def get_history(self, account_id: str) -> list[ScoreSnapshot]:
        """Chronological snapshots for the account (empty when none)."""
        return self._store.get_history(account_id)

    def prune_history(self, account_id: str, max_age_seconds: int, now: int) -> int:
        """Remove the account's snapshots older than max_age_seconds at now; return count removed."""
        return self._store.prune(account_id, max_age_seconds, now)

    def prune_all_history(self, max_age_seconds: int, now: int) -> int:
        """Apply the retention window to every account; return total removed."""
        return self._store.prune_all(max_age_seconds, now)

    def summarize(self, account_id: str, now: int) -> ReputationSummary:
        """Rolling averages, trend and volatility of the account's history as of now."""
        return summarize_history(account_id, self._store.get_history(account_id), now)

    def detect_anomalies(self, raw: RawMetrics) -> list[AnomalyKind]:
        """Advisory anomaly kinds for raw metrics under this engine's thresholds."""
        return [f.kind for f in detect_anomaly_flags(raw, self._anomaly_config)]
