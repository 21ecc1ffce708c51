"""
Test that repute_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from repute_logging and use the logger."""
    from dotrepute.repute_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_bind_account_logger():
    """bind_account returns a logger that accepts calls with long account ids."""
    from dotrepute.repute_logging import bind_account

    logger = bind_account("5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY")
    logger.info("account_event", score=10)


def test_processors_shape_event_dict():
    """event becomes event_type; long account ids are shortened; timestamp is added."""
    from dotrepute.repute_logging.logger import (
        ACCOUNT_ID_LOG_LENGTH,
        _event_type,
        _shorten_account_id,
        _stamp,
    )

    account_id = "5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY"
    event_dict = {"event": "score_computed", "account_id": account_id}
    for processor in (_stamp, _event_type, _shorten_account_id):
        event_dict = processor(None, "info", event_dict)
    assert event_dict["event_type"] == "score_computed"
    assert event_dict["message"] == "score_computed"
    assert "event" not in event_dict
    assert event_dict["account_id"] == account_id[:ACCOUNT_ID_LOG_LENGTH] + "..."
    assert "timestamp" in event_dict


def test_short_account_id_kept():
    from dotrepute.repute_logging.logger import _shorten_account_id

    assert _shorten_account_id(None, "info", {"account_id": "alice"})["account_id"] == "alice"
