"""icloudy configuration and settings.

This module provides the configuration model and I/O functions for
discovery scoring, probe timeouts and copy behavior.

Configuration is stored in ~/.config/icloudy/config.toml. Every key is
optional; a missing file means "use the defaults".

Example config.toml:

    [scoring]
    markers = 20

    [discovery]
    include_all_users = false

    [transfer]
    min_score = 10
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from icloudy.core.paths import get_config_path

logger = logging.getLogger(__name__)


class ScoringConfig(BaseModel):
    """Additive score constants used by the path evaluator.

    A path that exists earns ``exists``; a directory adds ``directory``;
    a directory listing containing iCloud markers adds ``markers``.

    Attributes:
        exists: Credit for a path that can be stat'ed.
        directory: Extra credit when the path is a directory.
        markers: Extra credit when the listing contains iCloud marker entries.
        inaccessible: Score for a path that exists but raised a permission error.
        invalid_path: Score for strings that are not filesystem paths at all.
        root_min_score: Minimum score for a root to be expanded into children.
        fallback_skip_score: Any entry above this makes fallback registry keys unnecessary.
        app_storage_root_bonus: Added to app-storage children of an accessible root.
    """

    model_config = ConfigDict(extra="forbid")

    exists: int = 8
    directory: int = 5
    markers: int = 15
    inaccessible: Annotated[int, Field(ge=0)] = 2
    invalid_path: Annotated[int, Field(le=0)] = -100
    root_min_score: int = 13
    fallback_skip_score: int = 20
    app_storage_root_bonus: int = 0


class DiscoveryConfig(BaseModel):
    """Settings for the platform discovery adapters.

    Attributes:
        command_timeout_seconds: Timeout for each external command (reg, dscl).
        include_all_users: Probe other local accounts on macOS.
        include_containers: Probe sandboxed app containers on macOS.
    """

    model_config = ConfigDict(extra="forbid")

    command_timeout_seconds: Annotated[
        float,
        Field(gt=0, le=300, description="Timeout in seconds for external commands"),
    ] = 10.0
    include_all_users: bool = True
    include_containers: bool = True


class TransferConfig(BaseModel):
    """Settings for the copy pipeline.

    Attributes:
        min_score: Reliability floor for target paths.
        chunk_size: Bytes read per stream-copy iteration.
    """

    model_config = ConfigDict(extra="forbid")

    min_score: int = 10
    chunk_size: Annotated[int, Field(ge=1024)] = 64 * 1024


class IcloudyConfig(BaseModel):
    """Top-level icloudy configuration."""

    model_config = ConfigDict(extra="forbid")

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    transfer: TransferConfig = Field(default_factory=TransferConfig)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> IcloudyConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated IcloudyConfig object.

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
        return IcloudyConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> IcloudyConfig:
    """Load configuration, falling back to defaults if no file exists.

    Parse and schema errors still propagate so a broken file is not
    silently ignored.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Loaded or default IcloudyConfig.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file, using defaults")
        return IcloudyConfig()


def save_config(config: IcloudyConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The IcloudyConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json")

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
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
