"""Trust domain models.

This module defines the trust record, the single value every other trust
component passes around, together with its two serialized forms: the
on-disk text line and the internal data string consumed by the backend
database loader.
"""

from dataclasses import dataclass
from enum import IntEnum

# Column limits of the on-disk format
MAX_PATH_LENGTH = 4096
MAX_HASH_LENGTH = 64

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class TrustSource(IntEnum):
    """Origin of a trust record.

    Only carried in the internal data encoding, never in trust files.

    Attributes:
        UNKNOWN: Origin could not be determined.
        RPM: Record derived from the RPM database.
        FILE_DB: Record loaded from the primary trust file or a fragment.
        DEB: Record derived from the dpkg database.
    """

    UNKNOWN = 0
    RPM = 1
    FILE_DB = 2
    DEB = 3


def is_control_char(char: str) -> bool:
    """Check if a character is an ASCII control character."""
    code = ord(char)
    return code < 0x20 or code == 0x7F


def path_byte_length(path: str) -> int:
    """Length of a path as stored on disk, in bytes."""
    return len(path.encode("utf-8", errors="surrogateescape"))


def is_decimal(value: str) -> bool:
    """Check if a value is an unsigned ASCII decimal number."""
    return value.isascii() and value.isdigit()


def is_hex_digest(value: str) -> bool:
    """Check if a value is a non-empty hex token within the hash column limit."""
    return 0 < len(value) <= MAX_HASH_LENGTH and all(c in _HEX_DIGITS for c in value)


@dataclass(frozen=True, slots=True)
class TrustRecord:
    """A trusted file with its expected size and content hash.

    Attributes:
        path: Absolute path of the trusted file. Unique key in a trust store.
        size: Byte length of the file when the record was written.
        hash: Hex digest of the file content.
        source: Origin of the record.
    """

    path: str
    size: int
    hash: str
    source: TrustSource = TrustSource.FILE_DB

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.path:
            msg = "Trust record path cannot be empty"
            raise ValueError(msg)
        if self.path[0] == "#" or is_control_char(self.path[0]):
            msg = f"Trust record path cannot start with a comment marker: {self.path!r}"
            raise ValueError(msg)
        if any(c.isspace() for c in self.path):
            msg = f"Trust record path cannot contain whitespace: {self.path!r}"
            raise ValueError(msg)
        if path_byte_length(self.path) > MAX_PATH_LENGTH:
            msg = f"Trust record path exceeds {MAX_PATH_LENGTH} bytes"
            raise ValueError(msg)
        if self.size < 0:
            msg = f"Trust record size must be non-negative, got {self.size}"
            raise ValueError(msg)
        if not is_hex_digest(self.hash):
            msg = f"Trust record hash must be 1-{MAX_HASH_LENGTH} hex characters"
            raise ValueError(msg)

    def to_text_line(self) -> str:
        """Serialize to a trust file line.

        Returns:
            ``"<path> <size> <hash>\\n"``. The source is never written.
        """
        return f"{self.path} {self.size} {self.hash}\n"

    def to_data(self) -> str:
        """Serialize to the internal data string used by the backend.

        Returns:
            ``"<source> <size> <hash>"``. The first two characters are the
            source tag and its separator.
        """
        return f"{self.source.value} {self.size} {self.hash}"

    @classmethod
    def from_data(cls, path: str, data: str) -> "TrustRecord":
        """Deserialize from the internal data string.

        Args:
            path: Key the data string was stored under.
            data: ``"<source> <size> <hash>"`` string.

        Returns:
            TrustRecord instance.

        Raises:
            ValueError: If the data string is malformed.
        """
        parts = data.split()
        if len(parts) != 3 or not is_decimal(parts[0]) or not is_decimal(parts[1]):
            msg = f"Invalid trust data for {path}: {data!r}"
            raise ValueError(msg)
        return cls(
            path=path,
            size=int(parts[1]),
            hash=parts[2],
            source=TrustSource(int(parts[0])),
        )

    def with_source(self, source: TrustSource) -> "TrustRecord":
        """Return a copy of this record tagged with another source."""
        return TrustRecord(path=self.path, size=self.size, hash=self.hash, source=source)
