"""
SQLAlchemy-backed score history (append-only, one row per snapshot).

Uses the URL passed in, else DOTREPUTE_HISTORY_DB_URL, else a local SQLite
file. Each store owns its engine and session factory; there is no
module-level connection state. Driver errors surface as HistoryStoreError.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Column, Index, Integer, String, Text, create_engine, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from dotrepute.config.env import get_str, load_repute_env
from dotrepute.core.exceptions import HistoryStoreError
from dotrepute.repute_logging import get_logger
from dotrepute.scoring.anomaly import AnomalyKind
from dotrepute.scoring.history import ScoreHistoryStore
from dotrepute.scoring.math_utils import saturating_sub
from dotrepute.scoring.models import ComponentScores, ScoreSnapshot

logger = get_logger(__name__)

Base = declarative_base()

DEFAULT_SQLITE_PATH = "dotrepute_history.db"


class ScoreSnapshotRow(Base):
    """
    One stored score snapshot. Rows are inserted and deleted, never updated.
    """

    __tablename__ = "score_snapshots"
    __table_args__ = (Index("ix_score_snapshots_account_ts", "account_id", "timestamp"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(String(128), nullable=False, index=True)
    timestamp = Column(Integer, nullable=False)  # logical timestamp (Unix seconds)
    governance = Column(Integer, nullable=False)
    staking = Column(Integer, nullable=False)
    identity = Column(Integer, nullable=False)
    community = Column(Integer, nullable=False)
    component_total = Column(Integer, nullable=False)
    weighted_total = Column(Integer, nullable=False)
    decay_factor = Column(Integer, nullable=False)
    penalty = Column(Integer, nullable=False)
    final_score = Column(Integer, nullable=False)
    weights = Column(String(32), nullable=False)  # "gov,stake,id,comm"
    anomalies = Column(Text, nullable=True)  # JSON array of anomaly kind values
    input_digest = Column(String(64), nullable=False, default="")

    @classmethod
    def from_snapshot(cls, snapshot: ScoreSnapshot) -> ScoreSnapshotRow:
        return cls(
            account_id=snapshot.account_id,
            timestamp=snapshot.timestamp,
            governance=snapshot.components.governance,
            staking=snapshot.components.staking,
            identity=snapshot.components.identity,
            community=snapshot.components.community,
            component_total=snapshot.components.total,
            weighted_total=snapshot.weighted_total,
            decay_factor=snapshot.decay_factor,
            penalty=snapshot.penalty,
            final_score=snapshot.final_score,
            weights=",".join(str(w) for w in snapshot.weights),
            anomalies=json.dumps([a.value for a in snapshot.anomalies]) if snapshot.anomalies else None,
            input_digest=snapshot.input_digest,
        )

    def to_snapshot(self) -> ScoreSnapshot:
        anomalies = tuple(AnomalyKind(v) for v in json.loads(self.anomalies)) if self.anomalies else ()
        governance, staking, identity, community = (int(w) for w in self.weights.split(","))
        return ScoreSnapshot(
            account_id=self.account_id,
            components=ComponentScores(
                governance=self.governance,
                staking=self.staking,
                identity=self.identity,
                community=self.community,
                total=self.component_total,
                weighted=self.weighted_total,
            ),
            weighted_total=self.weighted_total,
            decay_factor=self.decay_factor,
            penalty=self.penalty,
            final_score=self.final_score,
            timestamp=self.timestamp,
            weights=(governance, staking, identity, community),
            anomalies=anomalies,
            input_digest=self.input_digest or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            **self.to_snapshot().to_dict(),
        }


def resolve_database_url(url: str | None = None) -> str:
    """Return url, else DOTREPUTE_HISTORY_DB_URL, else a local SQLite file URL."""
    if url:
        return url
    load_repute_env()
    return get_str("DOTREPUTE_HISTORY_DB_URL") or f"sqlite:///{DEFAULT_SQLITE_PATH}"


class SqlScoreHistoryStore(ScoreHistoryStore):
    """
    Score history in a relational database.

    Per-account locks serialize appends within this process; the
    (account_id, timestamp) index keeps history reads ordered and cheap.
    """

    def __init__(self, url: str | None = None, *, create_tables: bool = True) -> None:
        super().__init__()
        self._url = resolve_database_url(url)
        connect_args: dict[str, Any] = {}
        if self._url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        try:
            self._engine = create_engine(self._url, connect_args=connect_args, pool_pre_ping=True)
            self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
            if create_tables:
                Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as e:
            logger.exception("history_store_init_failed", url=self._safe_url, error=str(e))
            raise HistoryStoreError(f"Could not initialize history store: {e}") from e
        logger.info("history_store_ready", url=self._safe_url)

    @property
    def _safe_url(self) -> str:
        return self._url.split("?")[0].split("//")[-1].split("@")[-1]

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        """Single session. Commits on success, rolls back on error, wraps driver errors."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception("history_store_operation_failed", error=str(e))
            raise HistoryStoreError(f"History store operation failed: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()

    def _latest_row(self, session: Session, account_id: str) -> ScoreSnapshotRow | None:
        return (
            session.query(ScoreSnapshotRow)
            .filter(ScoreSnapshotRow.account_id == account_id)
            .order_by(ScoreSnapshotRow.timestamp.desc(), ScoreSnapshotRow.id.desc())
            .first()
        )

    def append(self, snapshot: ScoreSnapshot) -> None:
        with self.account_lock(snapshot.account_id):
            with self._session_scope() as session:
                latest = self._latest_row(session, snapshot.account_id)
                self._check_order(snapshot, latest.to_snapshot() if latest else None)
                session.add(ScoreSnapshotRow.from_snapshot(snapshot))
        logger.debug(
            "history_store_appended",
            account_id=snapshot.account_id,
            timestamp=snapshot.timestamp,
            final_score=snapshot.final_score,
        )

    def get_history(self, account_id: str) -> list[ScoreSnapshot]:
        with self._session_scope() as session:
            rows = (
                session.query(ScoreSnapshotRow)
                .filter(ScoreSnapshotRow.account_id == account_id)
                .order_by(ScoreSnapshotRow.timestamp.asc(), ScoreSnapshotRow.id.asc())
                .all()
            )
            return [r.to_snapshot() for r in rows]

    def latest(self, account_id: str) -> ScoreSnapshot | None:
        with self._session_scope() as session:
            row = self._latest_row(session, account_id)
            return row.to_snapshot() if row else None

    def prune(self, account_id: str, max_age_seconds: int, now: int) -> int:
        # Rows with timestamp >= now - max_age are kept; future rows are always kept.
        cutoff = saturating_sub(now, max_age_seconds)
        with self.account_lock(account_id):
            with self._session_scope() as session:
                removed = (
                    session.query(ScoreSnapshotRow)
                    .filter(
                        ScoreSnapshotRow.account_id == account_id,
                        ScoreSnapshotRow.timestamp < cutoff,
                    )
                    .delete(synchronize_session=False)
                )
                remaining = (
                    session.query(ScoreSnapshotRow.id)
                    .filter(ScoreSnapshotRow.account_id == account_id)
                    .first()
                )
            if remaining is None:
                self._discard_lock(account_id)
        if removed:
            logger.info("history_pruned", account_id=account_id, removed=removed)
        return int(removed)

    def accounts(self) -> list[str]:
        with self._session_scope() as session:
            rows = (
                session.query(ScoreSnapshotRow.account_id)
                .group_by(ScoreSnapshotRow.account_id)
                .order_by(func.min(ScoreSnapshotRow.id))
                .all()
            )
            return [r[0] for r in rows]
