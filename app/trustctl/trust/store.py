"""In-memory trust store.

An ordered collection of TrustRecord values keyed by path. Insertion
order is preserved and no two records ever share a path.
"""

import logging
from collections.abc import Iterator

from trustctl.trust.errors import DuplicateKeyError
from trustctl.trust.models import TrustRecord

logger = logging.getLogger(__name__)


class TrustStore:
    """Ordered, duplicate-free collection of trust records.

    Used as the per-call working set of every trust file operation and
    as the accumulation buffer of a multi-file load.
    """

    def __init__(self, records: list[TrustRecord] | None = None) -> None:
        """Initialize the store.

        Args:
            records: Optional initial records, appended in order.

        Raises:
            DuplicateKeyError: If two initial records share a path.
        """
        self._records: dict[str, TrustRecord] = {}
        for record in records or ():
            self.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TrustRecord]:
        return iter(list(self._records.values()))

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __repr__(self) -> str:
        return f"TrustStore({len(self._records)} records)"

    def contains(self, key: str) -> bool:
        """Check if a record exists for a path."""
        return key in self._records

    def get(self, key: str) -> TrustRecord | None:
        """Get the record for a path, or None."""
        return self._records.get(key)

    def paths(self) -> list[str]:
        """All paths in insertion order."""
        return list(self._records)

    def append(self, record: TrustRecord) -> None:
        """Append a record at the end of the store.

        Raises:
            DuplicateKeyError: If a record for the same path already exists.
        """
        if record.path in self._records:
            raise DuplicateKeyError(record.path)
        self._records[record.path] = record

    def replace(self, record: TrustRecord) -> None:
        """Swap the value of an existing record, keeping its position.

        Raises:
            KeyError: If no record exists for the path.
        """
        if record.path not in self._records:
            raise KeyError(record.path)
        self._records[record.path] = record

    def remove(self, key: str) -> bool:
        """Remove the record for a path.

        Returns:
            True if a record was removed.
        """
        return self._records.pop(key, None) is not None

    def select_prefix(self, prefix: str) -> list[TrustRecord]:
        """Records whose path starts with a literal prefix.

        The match is character-based, not path-segment aware: ``/a/b``
        selects ``/a/bc`` as well as ``/a/b/c``.
        """
        return [r for path, r in self._records.items() if path.startswith(prefix)]

    def remove_prefix(self, prefix: str) -> int:
        """Remove every record whose path starts with a literal prefix.

        Returns:
            Number of records removed.
        """
        doomed = [path for path in self._records if path.startswith(prefix)]
        for path in doomed:
            del self._records[path]
        return len(doomed)

    def merge_into(self, other: "TrustStore") -> int:
        """Move every record of this store into another store.

        Records whose path already exists in ``other`` are dropped with a
        warning; the record already in ``other`` wins. This store is empty
        afterwards.

        Returns:
            Number of records moved.
        """
        moved = 0
        for path, record in self._records.items():
            if path in other._records:
                logger.warning("Dropping duplicate trust record for %s", path)
                continue
            other._records[path] = record
            moved += 1
        self._records.clear()
        return moved

    def clear(self) -> None:
        """Remove all records."""
        self._records.clear()
