"""User configuration for torrentprune.

Configuration is stored in ~/.config/torrentprune/config.toml and holds
the defaults for reconciliation options. Command-line flags override
these defaults for a single run.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from torrentprune.core.diff import DiffOptions
from torrentprune.core.paths import get_config_path


class PruneConfig(BaseModel):
    """Configuration for torrentprune.

    Attributes:
        surface: Treat undeclared files in the torrent root as deletion candidates.
        empty_dir: Also delete directories left without files.
        confirm: Ask for confirmation before deleting.
        follow_symlinks: Follow symbolic links while walking directories.
        exclude: Glob patterns of paths that are never deleted.
    """

    model_config = ConfigDict(extra="forbid")

    surface: Annotated[
        bool,
        Field(description="Include undeclared root-level files"),
    ] = False
    empty_dir: Annotated[
        bool,
        Field(description="Delete directories left without files"),
    ] = False
    confirm: Annotated[
        bool,
        Field(description="Ask before deleting"),
    ] = True
    follow_symlinks: Annotated[
        bool,
        Field(description="Follow symbolic links while walking"),
    ] = True
    exclude: Annotated[
        list[str],
        Field(default_factory=list, description="Glob patterns never deleted"),
    ]

    def diff_options(self, *, surface: bool = False, empty_dir: bool = False) -> DiffOptions:
        """Build diff options, letting command-line flags switch options on.

        Args:
            surface: Flag value from the command line.
            empty_dir: Flag value from the command line.

        Returns:
            DiffOptions combining config defaults and flags.
        """
        return DiffOptions(surface=self.surface or surface, empty_dir=self.empty_dir or empty_dir)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> PruneConfig:
    """Load configuration from a TOML file.

    A missing file yields the default configuration.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated PruneConfig object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return PruneConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return PruneConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def save_config(config: PruneConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The PruneConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config.model_dump(), f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
