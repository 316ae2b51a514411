"""Single trust file operations.

Each function works on exactly one trust file: the primary file or one
fragment. Whole-store variants live in ``trustctl.trust.manager`` and
call these once per file.

Files are read and written as UTF-8 with ``surrogateescape`` so that
arbitrary path bytes survive a load/rewrite cycle unchanged.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from tempfile import NamedTemporaryFile

from trustctl.trust.codec import is_comment, make_record_for_path, parse_line, render_header
from trustctl.trust.errors import (
    MalformedRecordError,
    RecordIOError,
    TrustError,
    TrustFileNotFoundError,
    TrustFileWriteError,
)
from trustctl.trust.hashing import HashProvider, get_hash_from_fd
from trustctl.trust.models import TrustRecord
from trustctl.trust.store import TrustStore

logger = logging.getLogger(__name__)

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def load_trust_file(path: Path, store: TrustStore) -> int:
    """Load the records of a trust file into a store.

    Comment lines are skipped. A record whose path is already in the
    store is dropped with a warning; the earlier record wins.

    Args:
        path: Trust file to read.
        store: Store receiving the records.

    Returns:
        Number of records added to the store.

    Raises:
        TrustFileNotFoundError: If the file does not exist.
        RecordIOError: If the file cannot be opened or read.
        MalformedRecordError: On the first unparsable line. Records read
            before that line stay in the store; the rest of the file is
            not read.
    """
    added = 0
    try:
        with path.open(encoding=_ENCODING, errors=_ERRORS) as f:
            for line_num, line in enumerate(f, start=1):
                if is_comment(line):
                    continue
                try:
                    record = parse_line(line)
                except MalformedRecordError as e:
                    logger.warning("Can't parse %s:%d: %s", path, line_num, e.line)
                    raise MalformedRecordError(line, path=path, line_number=line_num) from e

                if store.contains(record.path):
                    logger.warning("%s contains a duplicate %s", path, record.path)
                    continue
                store.append(record)
                added += 1
    except FileNotFoundError as e:
        raise TrustFileNotFoundError(path, "Cannot open") from e
    except OSError as e:
        raise RecordIOError(path, f"Cannot read ({e.strerror})") from e

    logger.debug("Loaded %d records from %s", added, path)
    return added


def write_trust_file(path: Path, store: TrustStore, *, atomic: bool = True) -> None:
    """Replace the content of a trust file with a header and a store's records.

    With ``atomic`` set, the content is written to a temporary file in
    the same directory which then replaces the original, keeping its
    permission bits. A symlinked trust file is written through: the link
    target is replaced and the link is kept. Otherwise the file is
    truncated and rewritten in place.

    Args:
        path: Trust file to write.
        store: Records to write, in order.
        atomic: Write through a temporary file and rename.

    Raises:
        TrustFileWriteError: If the file cannot be written.
    """
    content = render_header() + "".join(record.to_text_line() for record in store)

    if not atomic:
        try:
            with path.open("w", encoding=_ENCODING, errors=_ERRORS) as f:
                f.write(content)
        except OSError as e:
            raise TrustFileWriteError(path, f"Cannot write ({e.strerror})") from e
        return

    target = path.resolve()
    tmp_path: Path | None = None
    try:
        try:
            mode: int | None = target.stat().st_mode & 0o7777
        except FileNotFoundError:
            mode = None
        with NamedTemporaryFile(
            mode="w",
            encoding=_ENCODING,
            errors=_ERRORS,
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp_path, mode)
        # os.replace() is atomic on POSIX
        os.replace(tmp_path, target)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise TrustFileWriteError(path, f"Cannot write ({e.strerror})") from e


def append_records(path: Path, records: Iterable[TrustRecord]) -> int:
    """Append records to a trust file.

    The trust file is created with mode 0600 if missing; an empty file
    gets the header first. Existing content is never rewritten.

    Args:
        path: Trust file to append to.
        records: Records to write, in order.

    Returns:
        Number of records written.

    Raises:
        TrustFileWriteError: If the trust file cannot be opened or written.
    """
    try:
        fd = os.open(path, os.O_CREAT | os.O_WRONLY | os.O_APPEND, 0o600)
    except OSError as e:
        raise TrustFileWriteError(path, f"Cannot open ({e.strerror})") from e

    written = 0
    try:
        if os.fstat(fd).st_size == 0:
            _write_all(fd, render_header())
        for record in records:
            _write_all(fd, record.to_text_line())
            written += 1
    except OSError as e:
        raise TrustFileWriteError(path, f"Failed writing to ({e.strerror})") from e
    finally:
        os.close(fd)

    logger.debug("Appended %d records to %s", written, path)
    return written


def append_trust_file(
    path: Path,
    paths: Iterable[str],
    *,
    hasher: HashProvider = get_hash_from_fd,
) -> int:
    """Hash files and append their records to a trust file.

    Each file is hashed as it is now. Files that cannot be read are
    logged and skipped.

    Args:
        path: Trust file to append to.
        paths: Files to trust.
        hasher: Hash provider for the new records.

    Returns:
        Number of records written.

    Raises:
        TrustFileWriteError: If the trust file cannot be opened or written.
    """
    records: list[TrustRecord] = []
    for file_path in paths:
        try:
            records.append(make_record_for_path(file_path, hasher=hasher))
        except (TrustError, ValueError) as e:
            logger.error("Skipping %s: %s", file_path, e)
    return append_records(path, records)


def delete_path(path: Path, prefix: str, *, atomic: bool = True) -> int:
    """Remove every record whose path starts with a prefix from one trust file.

    The file is rewritten only if at least one record was removed. A
    file that cannot be fully loaded is logged and left untouched.

    Args:
        path: Trust file to edit.
        prefix: Literal path prefix (``/a/b`` also matches ``/a/bc``).
        atomic: Rewrite through a temporary file and rename.

    Returns:
        Number of records removed.

    Raises:
        TrustFileWriteError: If the rewrite fails.
    """
    store = _load_for_update(path)
    if store is None:
        return 0

    count = store.remove_prefix(prefix)
    if count:
        write_trust_file(path, store, atomic=atomic)
        logger.info("Deleted %d records matching %s from %s", count, prefix, path)
    return count


def update_path(
    path: Path,
    prefix: str,
    *,
    hasher: HashProvider = get_hash_from_fd,
    atomic: bool = True,
) -> int:
    """Rehash every record whose path starts with a prefix in one trust file.

    Size and hash are re-derived from the live file. A record whose
    file is missing or unreadable is logged and kept as it was. The
    trust file is rewritten only if at least one record changed.
    A rewrite renders every record in canonical ``path size hash``
    form, so an unmatched record keeps its bytes only if it was already
    written that way; extra spaces or tabs between its fields are
    collapsed. The same holds for ``delete_path``.

    Args:
        path: Trust file to edit.
        prefix: Literal path prefix; an empty prefix selects every record.
        hasher: Hash provider for the refreshed records.
        atomic: Rewrite through a temporary file and rename.

    Returns:
        Number of records updated.

    Raises:
        TrustFileWriteError: If the rewrite fails.
    """
    store = _load_for_update(path)
    if store is None:
        return 0

    count = 0
    for record in store.select_prefix(prefix):
        try:
            fresh = make_record_for_path(record.path, source=record.source, hasher=hasher)
        except TrustError as e:
            logger.error("Cannot update %s: %s", record.path, e)
            continue
        store.replace(fresh)
        count += 1

    if count:
        write_trust_file(path, store, atomic=atomic)
        logger.info("Updated %d records matching %s in %s", count, prefix, path)
    return count


def remove_duplicates(path: Path, candidates: TrustStore) -> None:
    """Drop from a candidate store every path recorded in one trust file.

    Reading stops as soon as the candidate store is empty.

    Args:
        path: Trust file to scan.
        candidates: Store to prune in place.

    Raises:
        TrustFileNotFoundError: If the file does not exist.
        RecordIOError: If the file cannot be opened or read.
        MalformedRecordError: On the first unparsable line, after the
            removals for earlier lines.
    """
    try:
        with path.open(encoding=_ENCODING, errors=_ERRORS) as f:
            for line_num, line in enumerate(f, start=1):
                if not candidates:
                    break
                if is_comment(line):
                    continue
                try:
                    record = parse_line(line)
                except MalformedRecordError as e:
                    logger.warning("Can't parse %s:%d: %s", path, line_num, e.line)
                    raise MalformedRecordError(line, path=path, line_number=line_num) from e
                candidates.remove(record.path)
    except FileNotFoundError as e:
        raise TrustFileNotFoundError(path, "Cannot open") from e
    except OSError as e:
        raise RecordIOError(path, f"Cannot read ({e.strerror})") from e


def _load_for_update(path: Path) -> TrustStore | None:
    """Load a trust file that is about to be rewritten.

    Returns:
        The loaded store, or None if the file could not be read in full.
    """
    store = TrustStore()
    try:
        load_trust_file(path, store)
    except TrustError as e:
        logger.error("Leaving %s unchanged: %s", path, e)
        return None
    return store


def _write_all(fd: int, text: str) -> None:
    data = text.encode(_ENCODING, errors=_ERRORS)
    while data:
        written = os.write(fd, data)
        data = data[written:]
