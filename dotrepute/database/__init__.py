"""
Durable score history storage.

SqlScoreHistoryStore implements the ScoreHistoryStore interface on
SQLAlchemy; any SQLAlchemy URL works (SQLite by default, PostgreSQL in
production).
"""

from dotrepute.database.history_store import ScoreSnapshotRow, SqlScoreHistoryStore

__all__ = ["ScoreSnapshotRow", "SqlScoreHistoryStore"]
