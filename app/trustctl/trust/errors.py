"""Trust store exceptions.

Library code raises these; whole-store operations catch them per file or
per record, log them, and carry on with the remaining trust files.
"""

from pathlib import Path


class TrustError(Exception):
    """Base exception for trust store errors."""


class RecordIOError(TrustError):
    """Raised when a file cannot be opened, stat'd, read or written.

    Attributes:
        path: The file the operation failed on.
    """

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = str(path)
        super().__init__(f"{message} {self.path}")


class RecordNotFoundError(RecordIOError):
    """Raised when a file to be hashed does not exist."""


class RecordUnreadableError(RecordIOError):
    """Raised when a file to be hashed cannot be opened or stat'd."""


class TrustFileNotFoundError(RecordIOError):
    """Raised when a trust file does not exist."""


class TrustFileWriteError(RecordIOError):
    """Raised when a trust file cannot be written."""


class MalformedRecordError(TrustError):
    """Raised when a trust file line does not parse as a record.

    Attributes:
        line: The offending line, without its line terminator.
        path: Trust file the line was read from, if known.
        line_number: 1-based line number within that file, if known.
    """

    def __init__(
        self,
        line: str,
        *,
        path: str | Path | None = None,
        line_number: int | None = None,
    ) -> None:
        self.line = line.rstrip("\n")
        self.path = str(path) if path is not None else None
        self.line_number = line_number
        location = f"{self.path}:{line_number}: " if self.path and line_number else ""
        super().__init__(f"{location}Can't parse {self.line!r}")


class DuplicateKeyError(TrustError):
    """Raised when a record is appended under a path that already exists.

    Attributes:
        key: The duplicated path.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Duplicate trust record for {key}")


class HashProviderError(TrustError):
    """Raised when the content hash of a file cannot be computed."""
