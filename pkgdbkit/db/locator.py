"""
Database references and their resolution.

Callers name a database with one of three references:

- ``GlobalPackageDB()``: the system-wide database, if the backend has one
- ``UserPackageDB()``: the per-user database, ``<user-dir>/<name>.db``
- ``SpecificPackageDB(path)``: the database at an explicit location

``DatabaseLocator`` turns a reference into a backend handle. The per-user
root directory comes from an injected resolver so tests can pin it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Type, Union

from pkgdbkit.core.directory import get_user_dir
from pkgdbkit.db.base import PackageDB, validate_db_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobalPackageDB:
    """Reference to the global package database."""

    def __str__(self) -> str:
        return "global"


@dataclass(frozen=True)
class UserPackageDB:
    """Reference to the per-user package database."""

    def __str__(self) -> str:
        return "user"


@dataclass(frozen=True)
class SpecificPackageDB:
    """Reference to the package database at an explicit location."""

    path: Union[str, Path]

    def __str__(self) -> str:
        return str(self.path)


PackageDBRef = Union[GlobalPackageDB, UserPackageDB, SpecificPackageDB]

UserDirResolver = Callable[[], Path]


class DatabaseLocator:
    """
    Resolves database references into backend handles.

    Example:
        >>> locator = DatabaseLocator(lambda: Path("/home/user/.pkgdbkit"))
        >>> locator.locate(StandardDB, UserPackageDB())
        StandardDB('/home/user/.pkgdbkit/packages.db')
    """

    def __init__(self, user_dir_resolver: Optional[UserDirResolver] = None):
        """
        Initialize locator.

        Args:
            user_dir_resolver: Returns the per-user root directory
                (default: platform user data directory)
        """
        self.user_dir_resolver = user_dir_resolver or get_user_dir

    def user_db_path(self, db_type: Type[PackageDB]) -> Path:
        """Path of the per-user database for ``db_type``."""
        name = validate_db_name(db_type.db_name())
        return Path(self.user_dir_resolver()) / f"{name}.db"

    def locate(
        self, db_type: Type[PackageDB], ref: PackageDBRef
    ) -> Optional[PackageDB]:
        """
        Resolve a database reference.

        Args:
            db_type: Backend class to instantiate
            ref: Database reference

        Returns:
            Backend handle, or None when ``ref`` is the global database and
            the backend has none
        """
        if isinstance(ref, GlobalPackageDB):
            db = db_type.global_db()
            if db is None:
                logger.debug(f"No global database for {db_type.db_name()}")
            return db
        if isinstance(ref, UserPackageDB):
            return db_type.from_path(self.user_db_path(db_type))
        if isinstance(ref, SpecificPackageDB):
            return db_type.from_path(ref.path)
        raise TypeError(f"Unknown package database reference: {ref!r}")


_default_locator = DatabaseLocator()


def get_default_locator() -> DatabaseLocator:
    """Get the process-wide locator using the platform user directory."""
    return _default_locator
