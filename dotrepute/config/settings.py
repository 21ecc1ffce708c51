"""
Scoring settings and environment configuration.

Settings are resolved once (get_settings caches them) and handed to the
scoring engine at construction; scoring itself never reads the environment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache

from dotrepute.config.env import (
    get_bool,
    get_int,
    get_int_list,
    get_str,
    load_repute_env,
)
from dotrepute.core.exceptions import ConfigurationError

DEFAULT_WEIGHTS = (30, 30, 20, 20)
DEFAULT_DECAY_RATE_PERCENT = 5
DEFAULT_BATCH_CONCURRENCY = 8
MIN_BATCH_CONCURRENCY = 1


@dataclass(frozen=True)
class ScoringSettings:
    """
    Engine-wide scoring configuration.

    weights: default (governance, staking, identity, community) weights in percent.
    decay_rate_percent: daily decay rate; retention per day is 100 - rate.
    time_decay_enabled: when False the decay factor is always 100.
    penalties_enabled: when False the penalty is always 0.
    batch_concurrency: worker threads used by compute_batch.
    history_db_url: SQLAlchemy URL for SqlScoreHistoryStore; None keeps history in memory.
    """

    weights: tuple[int, int, int, int] = DEFAULT_WEIGHTS
    decay_rate_percent: int = DEFAULT_DECAY_RATE_PERCENT
    time_decay_enabled: bool = True
    penalties_enabled: bool = True
    batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY
    history_db_url: str | None = field(default=None)

    def __post_init__(self) -> None:
        if len(self.weights) != 4:
            raise ConfigurationError(
                f"weights must have exactly 4 entries (governance, staking, identity, community), "
                f"got {len(self.weights)}"
            )
        if self.decay_rate_percent < 0:
            raise ConfigurationError(
                f"decay_rate_percent must be non-negative, got {self.decay_rate_percent}"
            )
        if self.batch_concurrency < MIN_BATCH_CONCURRENCY:
            raise ConfigurationError(
                f"batch_concurrency must be at least {MIN_BATCH_CONCURRENCY}, got {self.batch_concurrency}"
            )

    @classmethod
    def from_env(cls) -> ScoringSettings:
        """Build settings from DOTREPUTE_* environment variables (and .env)."""
        load_repute_env()
        return cls(
            weights=get_int_list("DOTREPUTE_WEIGHTS", DEFAULT_WEIGHTS),
            decay_rate_percent=get_int("DOTREPUTE_DECAY_RATE_PERCENT", DEFAULT_DECAY_RATE_PERCENT),
            time_decay_enabled=get_bool("DOTREPUTE_TIME_DECAY_ENABLED", True),
            penalties_enabled=get_bool("DOTREPUTE_PENALTIES_ENABLED", True),
            batch_concurrency=get_int("DOTREPUTE_BATCH_CONCURRENCY", DEFAULT_BATCH_CONCURRENCY),
            history_db_url=get_str("DOTREPUTE_HISTORY_DB_URL"),
        )


@lru_cache(maxsize=1)
def get_settings() -> ScoringSettings:
    """
    Return the current scoring settings.

    Returns:
        ScoringSettings built from the environment on first call, cached afterwards.
    """
    return ScoringSettings.from_env()


def reset_settings_cache() -> None:
    """Drop cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
