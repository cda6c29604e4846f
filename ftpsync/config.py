"""Configuration loading and validation for ftpsync.

The config lives in ``sync.json`` in the directory being synced::

    {
      "ftp": {"host": "ftp.example.com", "port": 21, "user": "me", "pass": "secret"},
      "sync": {"url": "https://shop.example.com", "path": "theme", "ignore": []}
    }

An optional ``reload`` section names the browser-sync server that is told
to refresh connected browsers after style, markup or script uploads.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigValidationError
from .utils import DEFAULT_FTP_PORT, DEFAULT_RELOAD_URL

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "sync.json"

# Answers from ``ftpsync init`` are merged over this
CONFIG_BLUEPRINT: dict[str, Any] = {
    "ftp": {
        "host": "",
        "port": DEFAULT_FTP_PORT,
        "user": "",
        "pass": "",
    },
    "sync": {
        "url": "",
        "path": "",
        "ignore": [],
    },
}


class FtpConfig(BaseModel):
    """Connection credentials for the FTP server."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str
    port: int
    user: str
    password: str = Field(alias="pass")


class SyncSettings(BaseModel):
    """What to sync and where."""

    model_config = ConfigDict(frozen=True)

    url: str
    """Public URL of the site served from the remote path"""

    path: str
    """Remote root directory, relative to the FTP login directory"""

    ignore: tuple[str, ...]
    """User ignore patterns, added to the built-in ones"""


class ReloadSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = DEFAULT_RELOAD_URL
    enabled: bool = True


class SyncerConfig(BaseModel):
    """Validated, immutable syncer configuration."""

    model_config = ConfigDict(frozen=True)

    ftp: FtpConfig
    sync: SyncSettings
    reload: ReloadSettings = Field(default_factory=ReloadSettings)


def config_path(base_dir: Optional[Path] = None) -> Path:
    """Return the config file location for a directory (defaults to cwd)."""
    return (base_dir or Path.cwd()) / CONFIG_FILE_NAME


def load_config_data(path: Optional[Path] = None) -> dict[str, Any]:
    """Read the raw config document.

    Args:
        path: Config file path (defaults to ``./sync.json``)

    Returns:
        The parsed JSON object, not yet validated

    Raises:
        ConfigValidationError: If the file is missing or is not a JSON object
    """
    path = path or config_path()
    if not path.exists():
        raise ConfigValidationError(
            f"Config file not found: {path}. Run `ftpsync init` first."
        )

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigValidationError(f"Could not read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigValidationError(f"Config {path} must contain a JSON object")

    logger.debug(f"Loaded config from {path}")
    return data


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


def validate_config(data: Any) -> SyncerConfig:
    """Validate a raw config document against the schema.

    Args:
        data: Raw config (usually from :func:`load_config_data`)

    Returns:
        Frozen SyncerConfig

    Raises:
        ConfigValidationError: If a required field is missing or mistyped
    """
    if isinstance(data, SyncerConfig):
        return data
    try:
        return SyncerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(
            f"Invalid config: {_format_validation_error(e)}"
        ) from e


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def make_config(data: dict[str, Any]) -> str:
    """Create config file content from user answers.

    Args:
        data: Partial config, merged over the blueprint

    Returns:
        JSON document indented with two spaces
    """
    config = _merge(copy.deepcopy(CONFIG_BLUEPRINT), data)
    return json.dumps(config, indent=2)


def write_config(data: dict[str, Any], path: Optional[Path] = None) -> Path:
    """Write user answers into the config file.

    Returns:
        Path the config was written to
    """
    path = path or config_path()
    with open(path, "w", encoding="utf-8") as f:
        f.write(make_config(data))
        f.write("\n")
    logger.debug(f"Wrote config to {path}")
    return path
