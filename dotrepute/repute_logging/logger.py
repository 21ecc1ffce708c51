"""
Structured logging for scoring events: event_type, account_id, timestamp.

structlog renders one JSON object per line by default (LOG_FORMAT=json) or
a console line for local work. Level comes from LOG_LEVEL. Modules log a
snake_case event name plus keyword context:

    logger = get_logger(__name__)
    logger.info("score_computed", account_id=acct, final_score=82)

Imports nothing from dotrepute so any module can use it.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

import structlog

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "json"

ACCOUNT_ID_LOG_LENGTH = 16


def _level_value(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL") or DEFAULT_LEVEL).strip().upper()
    return getattr(logging, name, logging.INFO)


def _format_name(fmt: str | None) -> str:
    return (fmt or os.getenv("LOG_FORMAT") or DEFAULT_FORMAT).strip().lower()


def _stamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """UTC ISO-8601 timestamp unless the caller passed one."""
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Expose structlog's 'event' as event_type; mirror it into message."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "event_type" in event_dict:
        event_dict.setdefault("message", str(event_dict["event_type"]))
    return event_dict


def _shorten_account_id(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """SS58 addresses are long; keep a readable prefix."""
    account_id = event_dict.get("account_id")
    if isinstance(account_id, str) and len(account_id) > ACCOUNT_ID_LOG_LENGTH:
        event_dict["account_id"] = f"{account_id[:ACCOUNT_ID_LOG_LENGTH]}..."
    return event_dict


def configure_logging(
    level: str | None = None,
    fmt: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    (Re)configure structlog for dotrepute.

    Args:
        level: Level name; LOG_LEVEL (default INFO) when None.
        fmt: "json" or "console"; LOG_FORMAT (default json) when None.
        stream: Output stream; stdout when None.
    """
    renderer: Any
    if _format_name(fmt) == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _stamp,
            _event_type,
            _shorten_account_id,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_value(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """Structured logger with the module name bound as 'logger'."""
    return structlog.get_logger(name).bind(logger=name)


def bind_account(account_id: str) -> structlog.BoundLogger:
    """Logger with account_id bound to every subsequent call."""
    return get_logger("dotrepute").bind(account_id=account_id)
