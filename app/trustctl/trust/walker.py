"""Trust fragment directory traversal.

Yields the regular files below a root directory without following
symbolic links, with a ceiling on the number of directory handles held
open at the same time.
"""

import logging
import os
import stat
from collections.abc import Iterator
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_OPEN_FDS = 1024


class _DirLevel:
    """One directory listing on the walk stack."""

    __slots__ = ("entries", "handle")

    def __init__(self, handle: Any) -> None:
        self.handle = handle
        self.entries: Iterator[os.DirEntry[str]] = handle

    @property
    def is_open(self) -> bool:
        return self.handle is not None

    def materialize(self) -> None:
        """Read the remaining entries into memory and release the handle."""
        try:
            remaining = list(self.handle)
        except OSError as e:
            logger.warning("Error reading directory entries: %s", e)
            remaining = []
        self.close()
        self.entries = iter(remaining)

    def close(self) -> None:
        if self.handle is not None:
            self.handle.close()
            self.handle = None


def iter_regular_files(
    root: str | Path,
    *,
    max_open_fds: int = DEFAULT_MAX_OPEN_FDS,
) -> Iterator[Path]:
    """Walk a directory tree and yield every regular file, depth first.

    Symbolic links are never followed or yielded, so the walk cannot
    escape the tree. Sockets, FIFOs and device nodes are ignored.
    Directories that cannot be listed are logged and skipped. Order
    within a directory is the filesystem's entry order.

    When descending would hold more than ``max_open_fds`` directory
    handles, the oldest open listing is read into memory and its handle
    closed. Closing the generator early releases every handle.

    Args:
        root: Directory to walk. A regular file is yielded as-is; a
            missing root yields nothing.
        max_open_fds: Maximum number of directory handles open at once.

    Yields:
        Path of each regular file found.

    Raises:
        ValueError: If max_open_fds is less than 1.
    """
    if max_open_fds < 1:
        msg = f"max_open_fds must be at least 1, got {max_open_fds}"
        raise ValueError(msg)

    root_str = os.fspath(root)
    try:
        mode = os.lstat(root_str).st_mode
    except FileNotFoundError:
        logger.debug("Trust directory does not exist: %s", root_str)
        return
    except OSError as e:
        logger.warning("Cannot stat %s: %s", root_str, e)
        return

    if stat.S_ISREG(mode):
        yield Path(root_str)
        return
    if not stat.S_ISDIR(mode):
        return

    stack: list[_DirLevel] = []

    def _push(path: str) -> None:
        try:
            stack.append(_DirLevel(os.scandir(path)))
        except OSError as e:
            logger.warning("Cannot read directory %s: %s", path, e)

    try:
        _push(root_str)
        while stack:
            level = stack[-1]
            try:
                entry = next(level.entries, None)
            except OSError as e:
                logger.warning("Error reading directory entries: %s", e)
                entry = None
            if entry is None:
                stack.pop().close()
                continue

            try:
                if entry.is_dir(follow_symlinks=False):
                    if sum(1 for lvl in stack if lvl.is_open) >= max_open_fds:
                        next(lvl for lvl in stack if lvl.is_open).materialize()
                    _push(entry.path)
                elif entry.is_file(follow_symlinks=False):
                    yield Path(entry.path)
            except OSError as e:
                logger.warning("Cannot determine type of %s: %s", entry.path, e)
    finally:
        for level in stack:
            level.close()
