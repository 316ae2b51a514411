"""History entry model for tracking trust store changes.

This module defines data structures for recording trust store mutations
in a history file, providing an audit trail of what was added, deleted
or rehashed.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class HistoryActionType(str, Enum):
    """Type of action recorded in history.

    Attributes:
        TRUST_ADD: Files added to the trust store.
        TRUST_DELETE: Records deleted by path prefix.
        TRUST_UPDATE: Records rehashed by path prefix.
    """

    TRUST_ADD = "trust_add"
    TRUST_DELETE = "trust_delete"
    TRUST_UPDATE = "trust_update"


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Record of a single trust store mutation.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the action occurred (ISO 8601 format with timezone).
        action_type: Type of action (add, delete, update).
        paths: Paths or path prefixes the action was requested for.
        count: Number of trust records affected.
        success: Whether the action completed successfully.
        metadata: Additional context (command, trust file, etc.).
    """

    id: str
    timestamp: str
    action_type: HistoryActionType
    paths: tuple[str, ...]
    count: int = 0
    success: bool = True
    metadata: dict[str, Any] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.id:
            msg = "History entry ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)
        if self.count < 0:
            msg = f"Count must be non-negative, got {self.count}"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Returns:
            Dictionary representation of the history entry.
        """
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "action_type": self.action_type.value,
            "paths": list(self.paths),
            "count": self.count,
            "success": self.success,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        """Deserialize from dictionary.

        Args:
            data: Dictionary containing entry data.

        Returns:
            HistoryEntry instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If action_type or count is invalid.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            action_type=HistoryActionType(data["action_type"]),
            paths=tuple(data["paths"]),
            count=int(data.get("count", 0)),
            success=bool(data.get("success", True)),
            metadata=dict(data.get("metadata", {})),
        )

    def to_json_line(self) -> str:
        """Serialize to JSON line for JSONL storage.

        Returns:
            Single JSON line (no trailing newline).
        """
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> "HistoryEntry":
        """Deserialize from JSON line.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        data = json.loads(line.strip())
        return cls.from_dict(data)


def create_history_entry(
    action_type: HistoryActionType,
    paths: list[str],
    count: int,
    metadata: dict[str, Any] | None = None,
) -> HistoryEntry:
    """Factory function to create a new HistoryEntry.

    Automatically generates a unique ID and current timestamp.

    Args:
        action_type: Type of action being recorded.
        paths: Paths or prefixes the action was requested for.
        count: Number of trust records affected.
        metadata: Optional additional context.

    Returns:
        New HistoryEntry with auto-generated ID and timestamp.
    """
    return HistoryEntry(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(UTC).isoformat(),
        action_type=action_type,
        paths=tuple(paths),
        count=count,
        success=True,
        metadata=metadata or {},
    )
