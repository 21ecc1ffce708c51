"""
Tests for settings loaded from DOTREPUTE_* environment variables.
"""

from __future__ import annotations

import pytest

from dotrepute.config.env import get_bool, get_int, get_int_list, get_str
from dotrepute.config.settings import ScoringSettings, get_settings, reset_settings_cache
from dotrepute.core.exceptions import ConfigurationError


def test_defaults_when_unset():
    settings = ScoringSettings.from_env()
    assert settings == ScoringSettings()
    assert settings.weights == (30, 30, 20, 20)
    assert settings.decay_rate_percent == 5
    assert settings.time_decay_enabled
    assert settings.penalties_enabled
    assert settings.batch_concurrency == 8
    assert settings.history_db_url is None


def test_from_env_overrides(monkeypatch):
    monkeypatch.setenv("DOTREPUTE_WEIGHTS", "40, 30, 20, 10")
    monkeypatch.setenv("DOTREPUTE_DECAY_RATE_PERCENT", "10")
    monkeypatch.setenv("DOTREPUTE_TIME_DECAY_ENABLED", "false")
    monkeypatch.setenv("DOTREPUTE_PENALTIES_ENABLED", "no")
    monkeypatch.setenv("DOTREPUTE_BATCH_CONCURRENCY", "2")
    monkeypatch.setenv("DOTREPUTE_HISTORY_DB_URL", "sqlite:///history.db")
    settings = ScoringSettings.from_env()
    assert settings.weights == (40, 30, 20, 10)
    assert settings.decay_rate_percent == 10
    assert not settings.time_decay_enabled
    assert not settings.penalties_enabled
    assert settings.batch_concurrency == 2
    assert settings.history_db_url == "sqlite:///history.db"


@pytest.mark.parametrize(
    "name, value",
    [
        ("DOTREPUTE_DECAY_RATE_PERCENT", "fast"),
        ("DOTREPUTE_DECAY_RATE_PERCENT", "-1"),
        ("DOTREPUTE_WEIGHTS", "30,30,40"),
        ("DOTREPUTE_WEIGHTS", "30,x,20,20"),
        ("DOTREPUTE_TIME_DECAY_ENABLED", "maybe"),
        ("DOTREPUTE_BATCH_CONCURRENCY", "0"),
    ],
)
def test_invalid_values_raise(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        ScoringSettings.from_env()


def test_get_settings_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("DOTREPUTE_DECAY_RATE_PERCENT", "20")
    assert get_settings() is first
    reset_settings_cache()
    assert get_settings().decay_rate_percent == 20


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("DOTREPUTE_TEST_STR", "  value  ")
    monkeypatch.setenv("DOTREPUTE_TEST_BLANK", "   ")
    monkeypatch.setenv("DOTREPUTE_TEST_BOOL", "ON")
    assert get_str("DOTREPUTE_TEST_STR") == "value"
    assert get_str("DOTREPUTE_TEST_BLANK", "fallback") == "fallback"
    assert get_bool("DOTREPUTE_TEST_BOOL", False) is True
    assert get_int("DOTREPUTE_TEST_MISSING", 7) == 7
    assert get_int_list("DOTREPUTE_TEST_MISSING", (1, 2)) == (1, 2)
