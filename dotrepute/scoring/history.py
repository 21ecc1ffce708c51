"""
Score history stores: per-account, append-only, timestamp-ordered snapshots.

ScoreHistoryStore defines the interface the scoring engine depends on and
the per-account locking it relies on. InMemoryScoreHistoryStore keeps
history in process memory; the SQL-backed store lives in
dotrepute.database.history_store.

Appends for one account are serialized by that account's lock; distinct
accounts never contend. A lock is dropped once pruning empties its account,
so the lock map holds at most one entry per account with history. Existing
entries are never edited, only pruned.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from dotrepute.core.exceptions import HistoryOrderError
from dotrepute.repute_logging import get_logger
from dotrepute.scoring.math_utils import saturating_sub
from dotrepute.scoring.models import ScoreSnapshot

logger = get_logger(__name__)


def is_within_retention(timestamp: int, max_age_seconds: int, now: int) -> bool:
    """True if a snapshot at timestamp is no older than max_age_seconds at now."""
    return saturating_sub(now, timestamp) <= max_age_seconds


class ScoreHistoryStore(ABC):
    """
    Interface for per-account score history.

    Implementations must raise HistoryOrderError when an append would place
    a snapshot before the account's latest one, and HistoryStoreError for
    backend failures.
    """

    def __init__(self) -> None:
        self._locks_guard = threading.Lock()
        self._account_locks: dict[str, threading.RLock] = {}

    def _lock(self, account_id: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._account_locks.get(account_id)
            if lock is None:
                lock = threading.RLock()
                self._account_locks[account_id] = lock
            return lock

    @contextmanager
    def account_lock(self, account_id: str) -> Iterator[None]:
        """Hold the account's lock: serializes read-latest + append sequences for one account."""
        while True:
            lock = self._lock(account_id)
            lock.acquire()
            with self._locks_guard:
                current = self._account_locks.setdefault(account_id, lock)
            if current is lock:
                break
            # Discarded while we waited and replaced by a newer lock.
            lock.release()
        try:
            yield
        finally:
            lock.release()

    def _discard_lock(self, account_id: str) -> None:
        """Forget the lock of an account whose history is gone. Call while holding that lock."""
        with self._locks_guard:
            self._account_locks.pop(account_id, None)

    @abstractmethod
    def append(self, snapshot: ScoreSnapshot) -> None:
        """Append a snapshot to its account's history."""

    @abstractmethod
    def get_history(self, account_id: str) -> list[ScoreSnapshot]:
        """Return the account's snapshots in chronological order (a copy)."""

    @abstractmethod
    def latest(self, account_id: str) -> ScoreSnapshot | None:
        """Return the most recent snapshot for the account, or None."""

    @abstractmethod
    def prune(self, account_id: str, max_age_seconds: int, now: int) -> int:
        """Remove snapshots older than max_age_seconds at now; return the count removed."""

    @abstractmethod
    def accounts(self) -> list[str]:
        """Return the account ids that currently have history."""

    def prune_all(self, max_age_seconds: int, now: int) -> int:
        """Apply the retention window to every account; return the total removed."""
        return sum(self.prune(account_id, max_age_seconds, now) for account_id in self.accounts())

    @staticmethod
    def _check_order(snapshot: ScoreSnapshot, latest: ScoreSnapshot | None) -> None:
        if latest is not None and snapshot.timestamp < latest.timestamp:
            raise HistoryOrderError(snapshot.account_id, snapshot.timestamp, latest.timestamp)


class InMemoryScoreHistoryStore(ScoreHistoryStore):
    """Process-local history store backed by a dict of lists."""

    def __init__(self) -> None:
        super().__init__()
        self._history: dict[str, list[ScoreSnapshot]] = {}

    def append(self, snapshot: ScoreSnapshot) -> None:
        with self.account_lock(snapshot.account_id):
            entries = self._history.setdefault(snapshot.account_id, [])
            self._check_order(snapshot, entries[-1] if entries else None)
            entries.append(snapshot)

    def get_history(self, account_id: str) -> list[ScoreSnapshot]:
        with self.account_lock(account_id):
            return list(self._history.get(account_id, ()))

    def latest(self, account_id: str) -> ScoreSnapshot | None:
        with self.account_lock(account_id):
            entries = self._history.get(account_id)
            return entries[-1] if entries else None

    def prune(self, account_id: str, max_age_seconds: int, now: int) -> int:
        with self.account_lock(account_id):
            entries = self._history.get(account_id)
            if not entries:
                return 0
            kept = [s for s in entries if is_within_retention(s.timestamp, max_age_seconds, now)]
            removed = len(entries) - len(kept)
            if kept:
                self._history[account_id] = kept
            else:
                del self._history[account_id]
                self._discard_lock(account_id)
        if removed:
            logger.info("history_pruned", account_id=account_id, removed=removed, kept=len(kept))
        return removed

    def accounts(self) -> list[str]:
        return [a for a, entries in list(self._history.items()) if entries]
