"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import hashlib
from pathlib import Path

import pytest
from trustctl.trust.hashing import HashProvider
from trustctl.trust.manager import TrustFileManager

# Hash used in hand-written trust file fixtures
SAMPLE_HASH = "61a9960bf7d255a85811f4afcac51067b8f2e4c75e21cf4f2af95319d4ed1b87"


def sha256_of(path: Path) -> str:
    """SHA256 hex digest of a file's content."""
    return hashlib.sha256(path.read_bytes()).hexdigest()


def trust_line(path: Path | str, size: int = 157984, digest: str = SAMPLE_HASH) -> str:
    """A trust file record line."""
    return f"{path} {size} {digest}\n"


def live_trust_line(path: Path) -> str:
    """A trust file record line matching the current state of a file."""
    return trust_line(path, path.stat().st_size, sha256_of(path))


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config and state directories at a throwaway location."""
    base = tmp_path_factory.mktemp("xdg")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(base / "state"))
    return base


@pytest.fixture
def trust_root(tmp_path: Path) -> Path:
    """Directory holding a primary trust file and a trust.d fragment directory."""
    root = tmp_path / "fapolicyd"
    (root / "trust.d").mkdir(parents=True)
    return root


@pytest.fixture
def primary_file(trust_root: Path) -> Path:
    """Path of the (not yet created) primary trust file."""
    return trust_root / "fapolicyd.trust"


@pytest.fixture
def fragment_dir(trust_root: Path) -> Path:
    """Path of the trust fragment directory."""
    return trust_root / "trust.d"


@pytest.fixture
def manager(primary_file: Path, fragment_dir: Path) -> TrustFileManager:
    """TrustFileManager over the temporary trust store."""
    return TrustFileManager(primary_file, fragment_dir)


@pytest.fixture
def files_dir(tmp_path: Path) -> Path:
    """Directory with a few real files to trust."""
    root = tmp_path / "files"
    (root / "bin").mkdir(parents=True)
    (root / "bin" / "ls").write_bytes(b"ls binary")
    (root / "bin" / "cat").write_bytes(b"cat binary content")
    (root / "bin" / "catalog").write_bytes(b"catalog")
    (root / "lib").mkdir()
    (root / "lib" / "libc.so").write_bytes(b"\x7fELF libc")
    return root


@pytest.fixture
def fixed_hasher() -> HashProvider:
    """Hash provider that ignores file content."""

    def _hasher(fd: int) -> str:
        return SAMPLE_HASH

    return _hasher
