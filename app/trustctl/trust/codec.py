"""Trust file line codec.

Converts between trust file text lines and TrustRecord values, renders
the fixed comment header, and builds fresh records from files on disk.

Trust file format::

    # This file contains a list of trusted files
    #
    #  FULL PATH        SIZE                             SHA256
    # /home/user/my-ls 157984 61a9960bf7d255a85811f4afcac51067b8f2e4c75e21cf4f2af95319d4ed1b87
    <path> <decimal-size> <hex-hash>
"""

import logging
import os
from pathlib import Path

from trustctl.trust.errors import (
    HashProviderError,
    MalformedRecordError,
    RecordNotFoundError,
    RecordUnreadableError,
)
from trustctl.trust.hashing import HashProvider, get_hash_from_fd
from trustctl.trust.models import (
    MAX_PATH_LENGTH,
    TrustRecord,
    TrustSource,
    is_control_char,
    is_decimal,
    is_hex_digest,
    path_byte_length,
)

logger = logging.getLogger(__name__)

HEADER_LINES: tuple[str, ...] = (
    "# This file contains a list of trusted files\n",
    "#\n",
    "#  FULL PATH        SIZE                             SHA256\n",
    "# /home/user/my-ls 157984 61a9960bf7d255a85811f4afcac51067b8f2e4c75e21cf4f2af95319d4ed1b87\n",
)


def is_comment(line: str) -> bool:
    """Check if a trust file line carries no record.

    Blank lines, lines starting with a control character (including a
    bare line terminator) and lines starting with ``#`` are skipped.
    """
    return not line or line[0] == "#" or is_control_char(line[0])


def parse_line(line: str, source: TrustSource = TrustSource.FILE_DB) -> TrustRecord:
    """Parse a trust file record line.

    Args:
        line: ``"<path> <size> <hash>"`` with or without a line terminator.
            Comment lines must be filtered out by the caller.
        source: Source tag for the resulting record.

    Returns:
        Parsed TrustRecord.

    Raises:
        MalformedRecordError: If the line is not exactly three tokens, the
            size is not an unsigned decimal, the hash is not a hex token of
            at most 64 characters, or the path is longer than 4096 bytes.
    """
    tokens = line.split()
    if len(tokens) != 3:
        raise MalformedRecordError(line)

    path, size, digest = tokens
    if path_byte_length(path) > MAX_PATH_LENGTH:
        raise MalformedRecordError(line)
    if not is_decimal(size) or not is_hex_digest(digest):
        raise MalformedRecordError(line)

    try:
        return TrustRecord(path=path, size=int(size), hash=digest, source=source)
    except ValueError as e:
        raise MalformedRecordError(line) from e


def render_line(record: TrustRecord) -> str:
    """Render a record as a trust file line (source tag is not written)."""
    return record.to_text_line()


def render_header() -> str:
    """Render the comment block written at the top of every rewritten file."""
    return "".join(HEADER_LINES)


def make_record_for_path(
    path: str | Path,
    source: TrustSource = TrustSource.FILE_DB,
    hasher: HashProvider = get_hash_from_fd,
) -> TrustRecord:
    """Build a record describing the current state of a file.

    The file is opened read-only, its size taken from fstat and its
    digest from the hash provider. Both encodings are then available via
    ``record.to_text_line()`` and ``record.to_data()``.

    Args:
        path: File to describe.
        source: Source tag for the record.
        hasher: Hash provider called with the open descriptor.

    Returns:
        TrustRecord for the file.

    Raises:
        RecordNotFoundError: If the file does not exist.
        RecordUnreadableError: If the file cannot be opened or stat'd.
        HashProviderError: If the hash provider fails.
        ValueError: If the path cannot be represented in a trust file.
    """
    path_str = str(path)
    try:
        fd = os.open(path_str, os.O_RDONLY)
    except FileNotFoundError as e:
        raise RecordNotFoundError(path_str, "Cannot open") from e
    except OSError as e:
        raise RecordUnreadableError(path_str, "Cannot open") from e

    try:
        try:
            size = os.fstat(fd).st_size
        except OSError as e:
            raise RecordUnreadableError(path_str, "Cannot stat") from e
        try:
            digest = hasher(fd)
        except OSError as e:
            raise HashProviderError(f"Cannot hash {path_str}: {e}") from e
    finally:
        os.close(fd)

    logger.debug("Hashed %s (%d bytes)", path_str, size)
    return TrustRecord(path=path_str, size=size, hash=digest, source=source)
