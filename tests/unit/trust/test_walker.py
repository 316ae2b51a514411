"""Unit tests for trust fragment directory traversal."""

import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from trustctl.trust.walker import iter_regular_files

_real_scandir = os.scandir


class _CountingScandir:
    """os.scandir replacement that tracks how many handles are open."""

    def __init__(self) -> None:
        self.open_now = 0
        self.peak = 0

    def __call__(self, path: Any) -> "_Handle":
        handle = _Handle(self, _real_scandir(path))
        self.open_now += 1
        self.peak = max(self.peak, self.open_now)
        return handle


class _Handle:
    def __init__(self, owner: _CountingScandir, inner: Any) -> None:
        self._owner = owner
        self._inner = inner
        self._closed = False

    def __iter__(self) -> Iterator[os.DirEntry[str]]:
        return self

    def __next__(self) -> os.DirEntry[str]:
        return next(self._inner)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._owner.open_now -= 1
            self._inner.close()


def _make_deep_tree(root: Path, depth: int) -> list[Path]:
    """Create a chain of nested directories with one file per level."""
    files = []
    current = root
    for level in range(depth):
        current = current / f"d{level}"
        current.mkdir(parents=True)
        target = current / f"f{level}"
        target.write_text("x")
        files.append(target)
    return files


class TestIterRegularFiles:
    """Tests for iter_regular_files."""

    def test_yields_nested_regular_files(self, files_dir: Path) -> None:
        """Every regular file below the root is yielded."""
        found = set(iter_regular_files(files_dir))

        assert found == {
            files_dir / "bin" / "ls",
            files_dir / "bin" / "cat",
            files_dir / "bin" / "catalog",
            files_dir / "lib" / "libc.so",
        }

    def test_depth_first(self, tmp_path: Path) -> None:
        """A directory's subtree is finished before its parent continues."""
        files = _make_deep_tree(tmp_path, 3)

        found = list(iter_regular_files(tmp_path))

        assert sorted(found) == sorted(files)
        assert len(found) == 3

    def test_missing_root_yields_nothing(self, tmp_path: Path) -> None:
        """A missing directory is an empty fragment set."""
        assert list(iter_regular_files(tmp_path / "missing")) == []

    def test_regular_file_root(self, tmp_path: Path) -> None:
        """A regular file given as root is yielded as-is."""
        target = tmp_path / "single"
        target.write_text("x")

        assert list(iter_regular_files(target)) == [target]

    def test_symlinks_not_followed(self, tmp_path: Path) -> None:
        """Symbolic links to files and directories are neither yielded nor entered."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret").write_text("x")
        root = tmp_path / "root"
        root.mkdir()
        (root / "real").write_text("x")
        (root / "dir-link").symlink_to(outside)
        (root / "file-link").symlink_to(outside / "secret")

        assert list(iter_regular_files(root)) == [root / "real"]

    def test_symlink_root_yields_nothing(self, tmp_path: Path) -> None:
        """A root that is itself a symbolic link is not followed."""
        target = tmp_path / "dir"
        target.mkdir()
        (target / "file").write_text("x")
        link = tmp_path / "link"
        link.symlink_to(target)

        assert list(iter_regular_files(link)) == []

    def test_special_files_ignored(self, tmp_path: Path) -> None:
        """FIFOs are not regular files."""
        os.mkfifo(tmp_path / "pipe")
        (tmp_path / "file").write_text("x")

        assert list(iter_regular_files(tmp_path)) == [tmp_path / "file"]

    def test_invalid_ceiling_raises(self, tmp_path: Path) -> None:
        """The handle ceiling must be positive."""
        with pytest.raises(ValueError, match="at least 1"):
            list(iter_regular_files(tmp_path, max_open_fds=0))

    @pytest.mark.parametrize("ceiling", [1, 2, 3])
    def test_handle_ceiling(self, tmp_path: Path, ceiling: int) -> None:
        """Trees deeper than the ceiling are walked fully within the ceiling."""
        files = _make_deep_tree(tmp_path, 6)
        counter = _CountingScandir()

        with patch("trustctl.trust.walker.os.scandir", counter):
            found = list(iter_regular_files(tmp_path, max_open_fds=ceiling))

        assert sorted(found) == sorted(files)
        assert counter.peak <= ceiling
        assert counter.open_now == 0

    def test_early_stop_releases_handles(self, tmp_path: Path) -> None:
        """Closing the generator early closes every open directory."""
        _make_deep_tree(tmp_path, 4)
        counter = _CountingScandir()

        with patch("trustctl.trust.walker.os.scandir", counter):
            walk = iter_regular_files(tmp_path)
            first = next(walk)
            walk.close()

        assert first.is_file()
        assert counter.open_now == 0

    def test_unreadable_directory_skipped(self, tmp_path: Path) -> None:
        """Directories that cannot be listed are skipped."""
        (tmp_path / "ok").write_text("x")
        (tmp_path / "locked").mkdir()
        (tmp_path / "locked" / "hidden").write_text("x")

        def scandir(path: Any) -> Any:
            if str(path).endswith("locked"):
                raise PermissionError(13, "Permission denied")
            return _real_scandir(path)

        with patch("trustctl.trust.walker.os.scandir", scandir):
            found = list(iter_regular_files(tmp_path))

        assert found == [tmp_path / "ok"]
