"""
Backend selection from configuration.

Maps the ``database`` section of ``RegistryConfig`` to a backend class and a
matching ``DatabaseLocator``.
"""

import logging
from pathlib import Path
from typing import Type

from pkgdbkit.config.parser import ConfigError, RegistryConfig
from pkgdbkit.db.base import PackageDB
from pkgdbkit.db.directory import directory_db
from pkgdbkit.db.locator import DatabaseLocator, get_default_locator
from pkgdbkit.db.memory import memory_db
from pkgdbkit.db.remote import http_db
from pkgdbkit.db.standard import standard_db

logger = logging.getLogger(__name__)


def db_type_from_config(config: RegistryConfig) -> Type[PackageDB]:
    """
    Build the backend class described by ``config.database``.

    Raises:
        ConfigError: If the backend is unknown or the name is invalid
    """
    db_config = config.database
    backend = db_config.backend

    try:
        if backend == "standard":
            db_type = standard_db(
                db_config.name, db_config.global_path, db_config.json_indent
            )
        elif backend == "directory":
            db_type = directory_db(db_config.name, db_config.global_path)
        elif backend == "memory":
            db_type = memory_db(db_config.name, db_config.global_path)
        elif backend == "http":
            db_type = http_db(
                db_config.name, db_config.global_path, config.remote.timeout
            )
        else:
            raise ConfigError(f"Unknown database backend: {backend}")
    except ValueError as e:
        raise ConfigError(str(e)) from e

    logger.debug(f"Using {backend} backend for database '{db_config.name}'")
    return db_type


def locator_from_config(config: RegistryConfig) -> DatabaseLocator:
    """Build a locator honouring ``database.user_dir``."""
    user_dir = config.database.user_dir
    if user_dir is None:
        return get_default_locator()

    user_path = Path(user_dir).expanduser()
    return DatabaseLocator(lambda: user_path)
