"""Unit tests for advisory trust locking."""

import fcntl
import os
from pathlib import Path

import pytest
from trustctl.trust.errors import RecordIOError
from trustctl.trust.locking import trust_lock


class TestTrustLock:
    """Tests for trust_lock."""

    def test_no_lock_file(self) -> None:
        """Without a lock file the block simply runs."""
        ran = False
        with trust_lock(None):
            ran = True

        assert ran

    def test_lock_held_during_block(self, tmp_path: Path) -> None:
        """The lock file is exclusively locked inside the block and released after."""
        lock_file = tmp_path / "locks" / "trust.lock"

        with trust_lock(lock_file):
            fd = os.open(lock_file, os.O_RDWR)
            try:
                with pytest.raises(BlockingIOError):
                    fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            finally:
                os.close(fd)

        fd = os.open(lock_file, os.O_RDWR)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)

    def test_lock_released_on_error(self, tmp_path: Path) -> None:
        """Exceptions in the block release the lock."""
        lock_file = tmp_path / "trust.lock"

        with pytest.raises(RuntimeError), trust_lock(lock_file):
            raise RuntimeError("boom")

        with trust_lock(lock_file):
            pass

    def test_unopenable_lock_file_raises(self, tmp_path: Path) -> None:
        """A lock file that cannot be created raises RecordIOError."""
        blocker = tmp_path / "file"
        blocker.write_text("x")

        with (
            pytest.raises(RecordIOError, match="Cannot open lock file"),
            trust_lock(blocker / "trust.lock"),
        ):
            pass
