"""
Per-user directory resolution for pkgdbkit.

The user package database and the default configuration file live in the
per-user application data directory:

    Windows:      %APPDATA%\\pkgdbkit\\
    Linux/macOS:  ~/.pkgdbkit/

The ``PKGDBKIT_USER_DIR`` environment variable overrides the platform default.
"""

import os
from functools import lru_cache
from pathlib import Path

APP_NAME = "pkgdbkit"
USER_DIR_ENV = "PKGDBKIT_USER_DIR"


class DirectoryError(Exception):
    """Base exception for directory-related errors."""

    pass


def get_app_user_data_dir(app_name: str = APP_NAME) -> Path:
    """
    Get the platform-specific per-user application data directory.

    Args:
        app_name: Application name, used as the directory name

    Returns:
        Path: The application data directory path.
            - Windows: %APPDATA%\\<app_name>
            - Linux/macOS: ~/.<app_name>

    Raises:
        DirectoryError: If APPDATA is not set on Windows

    Example:
        >>> get_app_user_data_dir()
        PosixPath('/home/user/.pkgdbkit')  # on Linux
    """
    if os.name == "nt":  # Windows
        app_data = os.environ.get("APPDATA")
        if not app_data:
            raise DirectoryError(
                "APPDATA environment variable is not set. "
                "Cannot determine user data directory."
            )
        return Path(app_data) / app_name
    else:  # Linux/macOS
        return Path.home() / f".{app_name}"


@lru_cache(maxsize=None)
def get_user_dir() -> Path:
    """
    Get the pkgdbkit per-user root directory.

    Resolved once per process; honours ``PKGDBKIT_USER_DIR``.
    """
    override = os.environ.get(USER_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return get_app_user_data_dir()


def clear_user_dir_cache() -> None:
    """Forget the memoized user directory (for tests and config reloads)."""
    get_user_dir.cache_clear()
