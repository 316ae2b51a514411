"""Unit tests for History models.

Tests for the HistoryEntry and HistoryActionType data structures.
"""

import json
from datetime import UTC, datetime

import pytest
from trustctl.models.history import HistoryActionType, HistoryEntry, create_history_entry


class TestHistoryActionType:
    """Tests for HistoryActionType enum."""

    def test_action_type_values(self) -> None:
        """HistoryActionType has expected values."""
        assert HistoryActionType.TRUST_ADD.value == "trust_add"
        assert HistoryActionType.TRUST_DELETE.value == "trust_delete"
        assert HistoryActionType.TRUST_UPDATE.value == "trust_update"
        assert len(HistoryActionType) == 3

    def test_action_type_is_str_enum(self) -> None:
        """HistoryActionType inherits from str for JSON serialization."""
        assert isinstance(HistoryActionType.TRUST_ADD, str)
        assert HistoryActionType.TRUST_ADD == "trust_add"


class TestHistoryEntry:
    """Tests for HistoryEntry dataclass."""

    def _entry(self, **overrides: object) -> HistoryEntry:
        data: dict[str, object] = {
            "id": "abc123456789",
            "timestamp": "2026-10-18T09:00:00+00:00",
            "action_type": HistoryActionType.TRUST_DELETE,
            "paths": ("/opt/app",),
            "count": 4,
        }
        data.update(overrides)
        return HistoryEntry(**data)  # type: ignore[arg-type]

    def test_create_entry(self) -> None:
        """Can create an entry with defaults for optional fields."""
        entry = self._entry()

        assert entry.success is True
        assert entry.metadata == {}

    def test_entry_is_frozen(self) -> None:
        """HistoryEntry is immutable."""
        entry = self._entry()
        with pytest.raises(AttributeError):
            entry.count = 5  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("id", "", "ID cannot be empty"),
            ("timestamp", "", "Timestamp cannot be empty"),
            ("count", -1, "non-negative"),
        ],
    )
    def test_validation(self, field: str, value: object, message: str) -> None:
        """Invalid fields raise ValueError."""
        with pytest.raises(ValueError, match=message):
            self._entry(**{field: value})

    def test_to_dict(self) -> None:
        """to_dict serializes enum values and tuples."""
        data = self._entry(metadata={"trust_file": "app.trust"}).to_dict()

        assert data == {
            "id": "abc123456789",
            "timestamp": "2026-10-18T09:00:00+00:00",
            "action_type": "trust_delete",
            "paths": ["/opt/app"],
            "count": 4,
            "success": True,
            "metadata": {"trust_file": "app.trust"},
        }

    def test_json_line_roundtrip(self) -> None:
        """A JSON line restores the same entry."""
        entry = self._entry(metadata={"command": "trustctl file delete"})

        line = entry.to_json_line()

        assert "\n" not in line
        assert HistoryEntry.from_json_line(line) == entry

    def test_from_dict_defaults(self) -> None:
        """Missing optional fields get defaults."""
        entry = HistoryEntry.from_dict(
            {
                "id": "abc123456789",
                "timestamp": "2026-10-18T09:00:00+00:00",
                "action_type": "trust_add",
                "paths": ["/bin/ls"],
            }
        )

        assert entry.count == 0
        assert entry.success is True
        assert entry.paths == ("/bin/ls",)

    def test_from_dict_missing_field_raises(self) -> None:
        """Missing required fields raise KeyError."""
        with pytest.raises(KeyError):
            HistoryEntry.from_dict({"id": "abc"})

    def test_from_json_line_invalid_action(self) -> None:
        """Unknown action types raise ValueError."""
        line = json.dumps(
            {"id": "a", "timestamp": "t", "action_type": "install", "paths": []}
        )
        with pytest.raises(ValueError):
            HistoryEntry.from_json_line(line)


class TestCreateHistoryEntry:
    """Tests for create_history_entry factory."""

    def test_generates_id_and_timestamp(self) -> None:
        """A 12-character ID and a timezone-aware timestamp are generated."""
        before = datetime.now(UTC)

        entry = create_history_entry(HistoryActionType.TRUST_ADD, ["/bin/ls"], 1)

        assert len(entry.id) == 12
        assert datetime.fromisoformat(entry.timestamp) >= before
        assert entry.paths == ("/bin/ls",)
        assert entry.count == 1

    def test_unique_ids(self) -> None:
        """Each entry gets its own ID."""
        first = create_history_entry(HistoryActionType.TRUST_ADD, [], 0)
        second = create_history_entry(HistoryActionType.TRUST_ADD, [], 0)

        assert first.id != second.id

    def test_metadata(self) -> None:
        """Metadata is stored as given."""
        entry = create_history_entry(
            HistoryActionType.TRUST_UPDATE, [""], 2, metadata={"trust_file": "x"}
        )

        assert entry.metadata == {"trust_file": "x"}
