"""
Structured logging for dotrepute.

JSON logs with timestamp, account_id and event_type.
Use get_logger() in all modules for aggregation-friendly output.
"""

from dotrepute.repute_logging.logger import bind_account, configure_logging, get_logger

__all__ = ["bind_account", "configure_logging", "get_logger"]
