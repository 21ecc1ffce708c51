"""
Environment variable loading and parsing for dotrepute.

- DOTREPUTE_WEIGHTS: default weights "gov,stake,id,comm" (default: 30,30,20,20)
- DOTREPUTE_DECAY_RATE_PERCENT: daily decay rate in percent (default: 5)
- DOTREPUTE_TIME_DECAY_ENABLED / DOTREPUTE_PENALTIES_ENABLED: feature toggles
- DOTREPUTE_BATCH_CONCURRENCY: worker threads for batch scoring
- DOTREPUTE_HISTORY_DB_URL: SQLAlchemy URL for the SQL history store
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from dotrepute.core.exceptions import ConfigurationError

# Project root: config is dotrepute/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def load_repute_env() -> None:
    """Load .env from project root. Existing environment variables win. Safe to call multiple times."""
    load_dotenv(_ENV_PATH, override=False)


def _raw(name: str) -> str:
    return (os.getenv(name) or "").strip()


def get_str(name: str, default: str | None = None) -> str | None:
    """Return a stripped string variable, or default when unset or blank."""
    value = _raw(name)
    return value if value else default


def get_int(name: str, default: int) -> int:
    """Return an integer variable; raise ConfigurationError if it does not parse."""
    value = _raw(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


def get_bool(name: str, default: bool) -> bool:
    """Return a boolean variable (1/true/yes/on vs 0/false/no/off)."""
    value = _raw(name).lower()
    if not value:
        return default
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def get_int_list(name: str, default: tuple[int, ...]) -> tuple[int, ...]:
    """Return a comma-separated list of integers."""
    value = _raw(name)
    if not value:
        return default
    try:
        return tuple(int(part.strip()) for part in value.split(","))
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be a comma-separated list of integers, got {value!r}"
        ) from e
