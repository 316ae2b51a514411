"""Advisory locking around trust file mutations.

Trust file rewrites replace whole files, so two concurrent writers can
lose each other's changes. When a lock file is configured, every
load-mutate-rewrite sequence holds an exclusive ``flock`` on it. Without
a lock file, callers must guarantee a single writer.
"""

import fcntl
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from trustctl.trust.errors import RecordIOError

logger = logging.getLogger(__name__)


@contextmanager
def trust_lock(lock_file: Path | None) -> Iterator[None]:
    """Hold an exclusive advisory lock for the duration of the block.

    Blocks until the lock is available. The lock file is created if it
    does not exist and is left in place afterwards.

    Args:
        lock_file: Path of the lock file, or None to skip locking.

    Raises:
        RecordIOError: If the lock file cannot be opened or locked.
    """
    if lock_file is None:
        yield
        return

    try:
        lock_file.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(lock_file, os.O_CREAT | os.O_RDWR, 0o600)
    except OSError as e:
        raise RecordIOError(lock_file, f"Cannot open lock file ({e})") from e

    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError as e:
            raise RecordIOError(lock_file, f"Cannot lock ({e})") from e
        logger.debug("Acquired trust lock %s", lock_file)
        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)
