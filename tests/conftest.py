"""
Pytest fixtures for dotrepute tests. In-memory history by default; temporary SQLite DB for the SQL store.
"""

from __future__ import annotations

import pytest

from dotrepute.config.settings import ScoringSettings, reset_settings_cache
from dotrepute.scoring.engine import ScoringEngine
from dotrepute.scoring.history import InMemoryScoreHistoryStore
from dotrepute.scoring.models import RawMetrics
from tests.factories import make_metrics

ENV_VARS = (
    "DOTREPUTE_WEIGHTS",
    "DOTREPUTE_DECAY_RATE_PERCENT",
    "DOTREPUTE_TIME_DECAY_ENABLED",
    "DOTREPUTE_PENALTIES_ENABLED",
    "DOTREPUTE_BATCH_CONCURRENCY",
    "DOTREPUTE_HISTORY_DB_URL",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Unset DOTREPUTE_* variables and drop cached settings around every test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def metrics() -> RawMetrics:
    return make_metrics()


@pytest.fixture
def store() -> InMemoryScoreHistoryStore:
    return InMemoryScoreHistoryStore()


@pytest.fixture
def engine(store) -> ScoringEngine:
    """Engine with default settings (weights 30/30/20/20, 5% daily decay) over an in-memory store."""
    return ScoringEngine(store, ScoringSettings())


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'history.db'}"


@pytest.fixture
def sql_store(sqlite_url):
    from dotrepute.database.history_store import SqlScoreHistoryStore

    s = SqlScoreHistoryStore(sqlite_url)
    yield s
    s.dispose()
