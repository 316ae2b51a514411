"""Whole trust store operations.

The trust store on disk is the union of one primary trust file and every
regular file below the fragment directory. TrustFileManager runs the
single-file operations of ``trustctl.trust.trust_file`` across all of
them, visiting the primary file first.

Every call owns its working stores; nothing is shared between calls, so
operations are reentrant. Mutating operations hold the advisory lock
when a lock file is configured; otherwise callers must ensure a single
writer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from trustctl.trust.codec import make_record_for_path
from trustctl.trust.errors import TrustError
from trustctl.trust.hashing import HashProvider, get_hash_from_fd
from trustctl.trust.locking import trust_lock
from trustctl.trust.store import TrustStore
from trustctl.trust.trust_file import (
    append_records,
    append_trust_file,
    delete_path,
    load_trust_file,
    remove_duplicates,
    update_path,
)
from trustctl.trust.walker import DEFAULT_MAX_OPEN_FDS, iter_regular_files

if TYPE_CHECKING:
    from trustctl.core.config import TrustConfig

logger = logging.getLogger(__name__)

# Single-file operation: trust file path -> affected record count
FileOperation = Callable[[Path], int]


class MismatchKind(str, Enum):
    """Why a trust record no longer matches its file.

    Attributes:
        MISSING: The file cannot be opened or hashed.
        SIZE: The file size differs from the recorded size.
        HASH: The size matches but the content hash differs.
    """

    MISSING = "missing"
    SIZE = "size"
    HASH = "hash"


@dataclass(frozen=True, slots=True)
class TrustMismatch:
    """A trust record that disagrees with the live filesystem.

    Attributes:
        path: Trusted file path.
        kind: Kind of disagreement.
        expected: Recorded value (size or hash), None for missing files.
        actual: Live value (size or hash), or the error for missing files.
    """

    path: str
    kind: MismatchKind
    expected: str | None = None
    actual: str | None = None


@dataclass(slots=True)
class AddResult:
    """Outcome of adding files to the trust store.

    Attributes:
        requested: Number of distinct readable files considered.
        already_trusted: Paths skipped because a record already exists.
        added: Number of records appended.
        destination: Trust file the records were appended to.
    """

    requested: int
    already_trusted: list[str] = field(default_factory=list)
    added: int = 0
    destination: Path | None = None


class TrustFileManager:
    """Operations over the primary trust file and the fragment directory.

    Args:
        primary_file: The primary trust file.
        fragment_dir: Directory tree of trust fragment files.
        max_open_fds: Directory handle ceiling of the fragment walk.
        atomic_rewrite: Rewrite trust files through a temp file and rename.
        lock_file: Advisory lock file for mutations, or None.
        hasher: Hash provider used for new and refreshed records.
    """

    def __init__(
        self,
        primary_file: Path,
        fragment_dir: Path,
        *,
        max_open_fds: int = DEFAULT_MAX_OPEN_FDS,
        atomic_rewrite: bool = True,
        lock_file: Path | None = None,
        hasher: HashProvider = get_hash_from_fd,
    ) -> None:
        self.primary_file = Path(primary_file)
        self.fragment_dir = Path(fragment_dir)
        self._max_open_fds = max_open_fds
        self._atomic = atomic_rewrite
        self._lock_file = lock_file
        self._hasher = hasher

    @classmethod
    def from_config(
        cls,
        config: TrustConfig,
        *,
        hasher: HashProvider = get_hash_from_fd,
    ) -> TrustFileManager:
        """Create a manager from a loaded configuration."""
        return cls(
            config.primary_file,
            config.fragment_dir,
            max_open_fds=config.max_open_fds,
            atomic_rewrite=config.atomic_rewrite,
            lock_file=config.lock_file,
            hasher=hasher,
        )

    # =========================================================================
    # Traversal
    # =========================================================================

    def iter_fragment_files(self) -> Iterator[Path]:
        """Yield every regular file below the fragment directory."""
        return iter_regular_files(self.fragment_dir, max_open_fds=self._max_open_fds)

    def iter_trust_files(self) -> Iterator[Path]:
        """Yield the primary trust file, then every fragment file."""
        yield self.primary_file
        yield from self.iter_fragment_files()

    def resolve_trust_file(self, name: str) -> Path:
        """Resolve a fragment file name to its path in the fragment directory.

        Args:
            name: File name relative to the fragment directory. May name a
                fragment in a subdirectory, such as ``vendor/app.trust``.

        Returns:
            Path of the fragment file.

        Raises:
            ValueError: If the name is empty, absolute, or has a ``..``
                component.
        """
        relative = Path(name)
        if not name or relative.is_absolute() or not relative.parts or ".." in relative.parts:
            msg = f"Invalid trust file name: {name!r}"
            raise ValueError(msg)
        return self.fragment_dir.joinpath(*relative.parts)

    # =========================================================================
    # Load and deduplicate
    # =========================================================================

    def load_all(self, out: TrustStore | None = None) -> TrustStore:
        """Load the whole trust store.

        Records are accumulated in visiting order; a path seen again in a
        later file is dropped with a warning. A file that fails to load
        is logged; records read before a malformed line are kept and the
        remaining files are still loaded.

        Args:
            out: Store to merge the result into. Records already present
                in ``out`` win over loaded ones. A new store if None.

        Returns:
            The store holding the loaded records.
        """
        result = out if out is not None else TrustStore()
        accumulated = TrustStore()
        for trust_file in self.iter_trust_files():
            try:
                load_trust_file(trust_file, accumulated)
            except TrustError as e:
                logger.error("%s", e)
        accumulated.merge_into(result)
        return result

    def remove_duplicates_all(self, candidates: TrustStore) -> None:
        """Drop from a candidate store every path already in the trust store.

        Trust files are scanned in visiting order and scanning stops as
        soon as no candidate is left.

        Args:
            candidates: Store to prune in place.
        """
        walk = self.iter_trust_files()
        try:
            for trust_file in walk:
                if not candidates:
                    break
                try:
                    remove_duplicates(trust_file, candidates)
                except TrustError as e:
                    logger.error("%s", e)
        finally:
            walk.close()

    # =========================================================================
    # Mutations
    # =========================================================================

    def delete_path_all(self, prefix: str) -> int:
        """Delete records matching a path prefix from every trust file.

        Returns:
            Total number of records removed.
        """
        return self.delete_path(prefix)

    def update_path_all(self, prefix: str) -> int:
        """Rehash records matching a path prefix in every trust file.

        Returns:
            Total number of records updated.
        """
        return self.update_path(prefix)

    def delete_path(self, prefix: str, trust_file: str | None = None) -> int:
        """Delete records matching a path prefix.

        Args:
            prefix: Literal path prefix.
            trust_file: Fragment file name to restrict the operation to.
                Every trust file if None.

        Returns:
            Number of records removed.
        """

        def _delete(path: Path) -> int:
            return delete_path(path, prefix, atomic=self._atomic)

        with trust_lock(self._lock_file):
            return sum(self._apply(_delete, trust_file))

    def update_path(self, prefix: str, trust_file: str | None = None) -> int:
        """Rehash records matching a path prefix.

        Args:
            prefix: Literal path prefix; empty to update every record.
            trust_file: Fragment file name to restrict the operation to.
                Every trust file if None.

        Returns:
            Number of records updated.
        """

        def _update(path: Path) -> int:
            return update_path(path, prefix, hasher=self._hasher, atomic=self._atomic)

        with trust_lock(self._lock_file):
            return sum(self._apply(_update, trust_file))

    def append(self, paths: Iterable[str], trust_file: str | None = None) -> int:
        """Append records for files without checking for existing records.

        Args:
            paths: Files to trust.
            trust_file: Fragment file name to append to. The primary file
                if None.

        Returns:
            Number of records written.

        Raises:
            TrustFileWriteError: If the destination cannot be written.
            ValueError: If the trust file name is invalid.
        """
        destination = self._destination(trust_file)
        with trust_lock(self._lock_file):
            destination.parent.mkdir(parents=True, exist_ok=True)
            return append_trust_file(destination, paths, hasher=self._hasher)

    def add_paths(self, paths: Iterable[str | Path], trust_file: str | None = None) -> AddResult:
        """Trust files that are not in the trust store yet.

        Directories are expanded to the regular files below them and
        every file is hashed. Paths already recorded in any trust file
        are skipped; the rest are appended to the destination. Files that
        cannot be read are logged and skipped.

        Args:
            paths: Files or directories to trust.
            trust_file: Fragment file name to append to. The primary file
                if None.

        Returns:
            AddResult describing what was added.

        Raises:
            TrustFileWriteError: If the destination cannot be written.
            ValueError: If the trust file name is invalid.
        """
        destination = self._destination(trust_file)
        candidates = TrustStore()
        for path in self._collect_candidates(paths):
            try:
                candidates.append(make_record_for_path(path, hasher=self._hasher))
            except (TrustError, ValueError) as e:
                logger.error("Skipping %s: %s", path, e)
        requested = candidates.paths()

        with trust_lock(self._lock_file):
            self.remove_duplicates_all(candidates)
            result = AddResult(
                requested=len(requested),
                already_trusted=[p for p in requested if p not in candidates],
                destination=destination,
            )
            if candidates:
                destination.parent.mkdir(parents=True, exist_ok=True)
                result.added = append_records(destination, candidates)
        return result

    # =========================================================================
    # Verification
    # =========================================================================

    def verify_all(self) -> list[TrustMismatch]:
        """Compare every trust record with the file it describes.

        Returns:
            Mismatches in trust store order; empty if everything matches.
        """
        mismatches: list[TrustMismatch] = []
        for record in self.load_all():
            try:
                live = make_record_for_path(record.path, hasher=self._hasher)
            except TrustError as e:
                mismatches.append(TrustMismatch(record.path, MismatchKind.MISSING, actual=str(e)))
                continue
            if live.size != record.size:
                mismatches.append(
                    TrustMismatch(record.path, MismatchKind.SIZE, str(record.size), str(live.size))
                )
            elif live.hash.lower() != record.hash.lower():
                mismatches.append(
                    TrustMismatch(record.path, MismatchKind.HASH, record.hash, live.hash)
                )
        return mismatches

    # =========================================================================
    # Helpers
    # =========================================================================

    def _apply(self, operation: FileOperation, trust_file: str | None) -> Iterator[int]:
        """Run a single-file operation on one fragment or on every trust file."""
        if trust_file is not None:
            yield operation(self.resolve_trust_file(trust_file))
            return
        walk = self.iter_trust_files()
        try:
            for path in walk:
                try:
                    yield operation(path)
                except TrustError as e:
                    logger.error("%s", e)
        finally:
            walk.close()

    def _destination(self, trust_file: str | None) -> Path:
        if trust_file is None:
            return self.primary_file
        return self.resolve_trust_file(trust_file)

    def _collect_candidates(self, paths: Iterable[str | Path]) -> list[str]:
        """Expand directories and drop repeated paths, keeping first-seen order."""
        seen: dict[str, None] = {}
        for path in paths:
            for file_path in iter_regular_files(path, max_open_fds=self._max_open_fds):
                seen.setdefault(str(file_path), None)
        return list(seen)
