"""Default content hash provider.

Given a readable file descriptor, produces the SHA-256 hex digest of the
whole file. The trust codec treats the digest as an opaque hex token.
"""

import hashlib
import os
from collections.abc import Callable

from trustctl.trust.errors import HashProviderError

# Signature of a hash provider: readable fd -> hex digest
HashProvider = Callable[[int], str]

_CHUNK_SIZE = 1024 * 1024


def get_hash_from_fd(fd: int) -> str:
    """Compute the SHA-256 digest of an open file.

    Hashing always starts at offset 0, regardless of the descriptor's
    current position.

    Args:
        fd: File descriptor opened for reading.

    Returns:
        64-character lowercase hex digest.

    Raises:
        HashProviderError: If the descriptor cannot be read.
    """
    h = hashlib.sha256()
    offset = 0
    try:
        while chunk := os.pread(fd, _CHUNK_SIZE, offset):
            h.update(chunk)
            offset += len(chunk)
    except OSError as e:
        raise HashProviderError(f"Cannot hash fd {fd}: {e}") from e
    return h.hexdigest()
