"""
Configuration management for dotrepute.

Loads and validates settings from environment variables and an optional
.env file. Exposes a single source of truth for scoring configuration.
"""

from dotrepute.config.settings import ScoringSettings, get_settings, reset_settings_cache

__all__ = ["ScoringSettings", "get_settings", "reset_settings_cache"]
