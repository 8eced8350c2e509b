"""Configuration loading and merging for datasync.

Settings come from three layers, merged field by field with the precedence
command line > config file > built-in defaults. The config file is a JSON
object stored in the repository root::

    {
        "direction": "push",
        "folderName": "data",
        "cleanRemote": false,
        "cleanLocal": false,
        "dryRun": false,
        "exclusions": ["*.tmp", "scratch/*"],
        "maxRetries": 3,
        "retryDelay": 1.0,
        "logFile": "datasync.log"
    }
"""

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .exceptions import ConfigError
from .sync.modes import SyncDirection
from .utils import (
    DEFAULT_CONFIG_FILE_NAME,
    DEFAULT_FOLDER_NAME,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
)

logger = logging.getLogger(__name__)

# JSON key -> SyncSettings field
CONFIG_KEYS: dict[str, str] = {
    "direction": "direction",
    "cleanRemote": "clean_remote",
    "cleanLocal": "clean_local",
    "folderName": "folder_name",
    "dryRun": "dry_run",
    "exclusions": "exclusions",
    "maxRetries": "max_retries",
    "retryDelay": "retry_delay",
    "logFile": "log_file",
}


@dataclass
class SyncSettings:
    """Typed, merged configuration for one run."""

    direction: SyncDirection = SyncDirection.PUSH
    """Default direction for ``datasync sync``"""

    clean_remote: bool = False
    """Erase the remote data folder before a push"""

    clean_local: bool = False
    """Erase the local data folder before a pull"""

    folder_name: str = DEFAULT_FOLDER_NAME
    """Name of the data folder on both sides"""

    dry_run: bool = False
    """Only show what would be done"""

    exclusions: list[str] = field(default_factory=list)
    """Glob patterns excluded from the sync"""

    max_retries: int = DEFAULT_MAX_RETRIES
    """Total attempts per entry"""

    retry_delay: float = DEFAULT_RETRY_DELAY
    """Seconds between attempts"""

    log_file: Optional[Path] = None
    """Append-only log file (disabled when None)"""

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigError: If a value is out of range
        """
        try:
            self.direction = SyncDirection.from_string(self.direction)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if self.max_retries < 1:
            raise ConfigError(f"maxRetries must be at least 1, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ConfigError(f"retryDelay cannot be negative, got {self.retry_delay}")
        name = self.folder_name
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise ConfigError(f"folderName must be a plain folder name, got {name!r}")

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to the JSON config file format."""
        data: dict[str, Any] = {}
        for key, name in CONFIG_KEYS.items():
            value = getattr(self, name)
            if isinstance(value, SyncDirection):
                value = value.value
            elif isinstance(value, Path):
                value = str(value)
            elif isinstance(value, list):
                value = list(value)
            data[key] = value
        return data


def _check_type(key: str, value: Any, expected: tuple, label: str) -> None:
    # bool is a subclass of int; never accept it for numeric fields
    if isinstance(value, bool) and bool not in expected:
        raise ConfigError(f"{key} must be {label}, got {value!r}")
    if not isinstance(value, expected):
        raise ConfigError(f"{key} must be {label}, got {value!r}")


def parse_config_data(
    data: Mapping[str, Any], base_dir: Optional[Path] = None
) -> dict[str, Any]:
    """Convert a decoded config object into SyncSettings field overrides.

    Args:
        data: Decoded JSON object
        base_dir: Directory that relative ``logFile`` paths are resolved against

    Returns:
        Mapping of SyncSettings field name to value

    Raises:
        ConfigError: If a value has the wrong type
    """
    overrides: dict[str, Any] = {}
    for key, value in data.items():
        name = CONFIG_KEYS.get(key)
        if name is None:
            logger.warning(f"Ignoring unknown config key: {key}")
            continue
        if value is None:
            continue

        if name == "direction":
            _check_type(key, value, (str,), "a string")
            try:
                value = SyncDirection.from_string(value)
            except ValueError as e:
                raise ConfigError(str(e)) from e
        elif name in ("clean_remote", "clean_local", "dry_run"):
            _check_type(key, value, (bool,), "true or false")
        elif name == "folder_name":
            _check_type(key, value, (str,), "a string")
        elif name == "exclusions":
            if isinstance(value, str):
                value = [value]
            _check_type(key, value, (list,), "a list of strings")
            for pattern in value:
                _check_type(key, pattern, (str,), "a list of strings")
            value = list(value)
        elif name == "max_retries":
            _check_type(key, value, (int,), "an integer")
        elif name == "retry_delay":
            _check_type(key, value, (int, float), "a number")
            value = float(value)
        elif name == "log_file":
            _check_type(key, value, (str,), "a path string")
            value = Path(value).expanduser()
            if base_dir is not None and not value.is_absolute():
                value = base_dir / value

        overrides[name] = value
    return overrides


def load_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Load setting overrides from a JSON config file.

    Args:
        path: Path to the config file

    Returns:
        Field overrides; empty if the file does not exist

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"No config file at {path}")
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    overrides = parse_config_data(data, base_dir=path.parent)
    logger.debug(f"Loaded {len(overrides)} setting(s) from {path}")
    return overrides


def merge_settings(
    file_overrides: Optional[Mapping[str, Any]] = None,
    cli_overrides: Optional[Mapping[str, Any]] = None,
    defaults: Optional[SyncSettings] = None,
) -> SyncSettings:
    """Merge settings layers field by field.

    ``None`` values mean "not given" and never override a lower layer.

    Args:
        file_overrides: Overrides from the config file
        cli_overrides: Overrides from the command line
        defaults: Base settings (built-in defaults if omitted)

    Returns:
        Validated SyncSettings

    Raises:
        ConfigError: On unknown fields or invalid values

    Examples:
        >>> settings = merge_settings({"max_retries": 5}, {"max_retries": 2})
        >>> settings.max_retries
        2
    """
    valid_names = {f.name for f in fields(SyncSettings)}
    values: dict[str, Any] = {}
    for layer in (file_overrides or {}, cli_overrides or {}):
        for name, value in layer.items():
            if name not in valid_names:
                raise ConfigError(f"Unknown setting: {name}")
            if value is None:
                continue
            values[name] = list(value) if name == "exclusions" else value

    settings = replace(defaults or SyncSettings(), **values)
    settings.validate()
    return settings


def default_config_path(repository: Union[str, Path]) -> Path:
    """Config file location for a repository."""
    return Path(repository) / DEFAULT_CONFIG_FILE_NAME


def save_config_file(settings: SyncSettings, path: Union[str, Path]) -> Path:
    """Write settings to a JSON config file.

    Args:
        settings: Settings to store
        path: Destination file

    Returns:
        Path that was written

    Raises:
        ConfigError: If the file cannot be written
    """
    path = Path(path)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)
            f.write("\n")
    except OSError as e:
        raise ConfigError(f"Cannot write config file {path}: {e}") from e
    logger.debug(f"Saved config to {path}")
    return path
