"""Trust store configuration.

This module provides the configuration model and I/O functions for
trustctl. The configuration names the trust store locations and tunes
how trust files are traversed and rewritten.

Configuration is stored in ~/.config/trustctl/config.toml
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from trustctl.core.paths import (
    DEFAULT_TRUST_DIR,
    DEFAULT_TRUST_FILE,
    ensure_config_dir,
    get_config_path,
)
from trustctl.trust.walker import DEFAULT_MAX_OPEN_FDS


class TrustConfig(BaseModel):
    """Configuration for trust store synchronization.

    Attributes:
        primary_file: The primary trust file.
        fragment_dir: Directory tree holding trust fragment files.
        max_open_fds: Directory handle ceiling while walking fragments.
        atomic_rewrite: Rewrite trust files through a temp file and rename.
        lock_file: Advisory lock file held during mutations (None = no locking).
        record_history: Record mutations to the history file.
    """

    model_config = ConfigDict(extra="forbid")

    primary_file: Annotated[
        Path,
        Field(description="Primary trust file"),
    ] = DEFAULT_TRUST_FILE
    fragment_dir: Annotated[
        Path,
        Field(description="Trust fragment directory"),
    ] = DEFAULT_TRUST_DIR
    max_open_fds: Annotated[
        int,
        Field(ge=1, le=65536, description="Open directory handle ceiling (1-65536)"),
    ] = DEFAULT_MAX_OPEN_FDS
    atomic_rewrite: Annotated[
        bool,
        Field(description="Replace rewritten trust files atomically"),
    ] = True
    lock_file: Annotated[
        Path | None,
        Field(description="Advisory lock file (None = single writer assumed)"),
    ] = None
    record_history: Annotated[
        bool,
        Field(description="Record trust store changes to history"),
    ] = True


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> TrustConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated TrustConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return TrustConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> TrustConfig:
    """Load configuration, falling back to defaults if the file is missing.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        return TrustConfig()


def save_config(config: TrustConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The TrustConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    if path is None:
        config_path = ensure_config_dir() / get_config_path().name
    else:
        config_path = path
        config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        # os.replace() is atomic on POSIX
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def config_to_dict(config: TrustConfig) -> dict[str, object]:
    """Convert TrustConfig to a dictionary for TOML serialization.

    TOML has no null, so an unset lock file is omitted.

    Args:
        config: The TrustConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    result: dict[str, object] = {
        "primary_file": str(config.primary_file),
        "fragment_dir": str(config.fragment_dir),
        "max_open_fds": config.max_open_fds,
        "atomic_rewrite": config.atomic_rewrite,
        "record_history": config.record_history,
    }
    if config.lock_file is not None:
        result["lock_file"] = str(config.lock_file)
    return result
