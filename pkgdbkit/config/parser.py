"""YAML configuration parser for pkgdbkit.

This module provides parsing and validation for the pkgdbkit configuration
file (``config.yaml`` in the user directory by default).
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from pkgdbkit.core.directory import get_user_dir
from pkgdbkit.core.exceptions import PkgDBKitError

logger = logging.getLogger(__name__)

CONFIG_ENV = "PKGDBKIT_CONFIG"
CONFIG_FILE_NAME = "config.yaml"

VALID_BACKENDS = ["standard", "directory", "memory", "http"]


class ConfigError(PkgDBKitError):
    """Configuration parsing or validation error."""

    pass


@dataclass
class DatabaseConfig:
    """Package database selection."""

    name: str = "packages"
    backend: str = "standard"  # 'standard', 'directory', 'memory', 'http'
    global_path: Optional[str] = None  # Path, or URL for the http backend
    user_dir: Optional[str] = None  # Overrides the per-user root directory
    json_indent: Optional[int] = 2


@dataclass
class LockingConfig:
    """Cross-process locking of mutating operations."""

    enabled: bool = False
    timeout: float = 30.0


@dataclass
class RemoteConfig:
    """HTTP backend settings."""

    timeout: float = 10.0


@dataclass
class RegistryConfig:
    """Complete pkgdbkit configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    locking: LockingConfig = field(default_factory=LockingConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)

    @property
    def lock_timeout(self) -> Optional[float]:
        """Timeout to pass to registry operations, None when locking is off."""
        return self.locking.timeout if self.locking.enabled else None


def get_default_config_path() -> Path:
    """Config file location: ``$PKGDBKIT_CONFIG`` or ``<user-dir>/config.yaml``."""
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return get_user_dir() / CONFIG_FILE_NAME


def parse_config(config_path: Path) -> RegistryConfig:
    """
    Parse a pkgdbkit configuration file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {config_path}: {e}") from e

    # An empty file means "all defaults"
    if data is None:
        return RegistryConfig()

    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    return _parse_and_validate(data)


def load_config(config_path: Optional[Path] = None) -> RegistryConfig:
    """
    Load configuration, falling back to defaults.

    An explicitly given file must exist; the default file is optional.

    Args:
        config_path: Explicit configuration file (default: see
            ``get_default_config_path``)
    """
    if config_path is not None:
        return parse_config(Path(config_path))

    default_path = get_default_config_path()
    if not default_path.exists():
        logger.debug(f"Config file not found (optional): {default_path}")
        return RegistryConfig()

    logger.debug(f"Loading configuration from {default_path}")
    return parse_config(default_path)


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _parse_and_validate(data: dict) -> RegistryConfig:
    """Parse and validate configuration data."""
    return RegistryConfig(
        database=_parse_database_config(_section(data, "database")),
        locking=_parse_locking_config(_section(data, "locking")),
        remote=_parse_remote_config(_section(data, "remote")),
    )


def _parse_database_config(data: dict) -> DatabaseConfig:
    """Parse database configuration."""
    name = data.get("name", "packages")
    if not isinstance(name, str) or not name:
        raise ConfigError("database.name must be a non-empty string")
    if "/" in name or "\\" in name:
        raise ConfigError(f"database.name must not contain path separators: {name}")

    backend = data.get("backend", "standard")
    if backend not in VALID_BACKENDS:
        raise ConfigError(
            f"Invalid database backend: {backend} (expected one of {VALID_BACKENDS})"
        )

    for key in ("global_path", "user_dir"):
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"database.{key} must be a string")

    json_indent = data.get("json_indent", 2)
    if json_indent is not None and (
        isinstance(json_indent, bool) or not isinstance(json_indent, int)
    ):
        raise ConfigError("database.json_indent must be an integer or null")

    return DatabaseConfig(
        name=name,
        backend=backend,
        global_path=data.get("global_path"),
        user_dir=data.get("user_dir"),
        json_indent=json_indent,
    )


def _parse_timeout(value, name: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{name} must be a positive number")
    return float(value)


def _parse_locking_config(data: dict) -> LockingConfig:
    """Parse locking configuration."""
    enabled = data.get("enabled", False)
    if not isinstance(enabled, bool):
        raise ConfigError("locking.enabled must be a boolean")

    return LockingConfig(
        enabled=enabled,
        timeout=_parse_timeout(data.get("timeout"), "locking.timeout", 30.0),
    )


def _parse_remote_config(data: dict) -> RemoteConfig:
    """Parse HTTP backend configuration."""
    return RemoteConfig(
        timeout=_parse_timeout(data.get("timeout"), "remote.timeout", 10.0)
    )
