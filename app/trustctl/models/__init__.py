"""Data models for trustctl.

This module exports the history models used to record trust store changes.
"""

from trustctl.models.history import HistoryActionType, HistoryEntry, create_history_entry

__all__ = ["HistoryActionType", "HistoryEntry", "create_history_entry"]
