"""Configuration module for pkgdbkit.

This module provides YAML configuration parsing and validation.
"""

from pkgdbkit.config.parser import (
    DatabaseConfig,
    LockingConfig,
    RemoteConfig,
    RegistryConfig,
    ConfigError,
    get_default_config_path,
    parse_config,
    load_config,
)

__all__ = [
    "DatabaseConfig",
    "LockingConfig",
    "RemoteConfig",
    "RegistryConfig",
    "ConfigError",
    "get_default_config_path",
    "parse_config",
    "load_config",
]
