"""
Package database abstraction for pkgdbkit.

Every storage backend (single JSON file, directory, in-memory, HTTP) derives
from ``PackageDB``. The registry operations in ``pkgdbkit.registry`` only
ever talk to this interface, so backends are interchangeable.

Classes:
    MaybeInitDB: Whether a missing database should be created on read
    PackageDB: Abstract base class for package database backends
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pkgdbkit.packages.model import Packages


def validate_db_name(name: str) -> str:
    """
    Check that a database name can be used as a file name.

    Raises:
        ValueError: If the name is empty or contains a path separator
    """
    if not name:
        raise ValueError("Database name cannot be empty")
    if "/" in name or "\\" in name or name in (".", ".."):
        raise ValueError(f"Database name must not contain path separators: {name!r}")
    return name


class MaybeInitDB(Enum):
    """Tells ``PackageDB.read`` whether to create a missing database."""

    INIT = "init"
    DONT_INIT = "dont-init"


class PackageDB(ABC):
    """
    Abstract base class for package database backends.

    A ``PackageDB`` instance is a handle on exactly one storage location.
    Handles are cheap, perform no I/O when created, and are not cached
    between registry operations.

    Abstract Methods:
        db_name(): Short database name used to build default paths
        read(): Read all records
        write(): Replace all records atomically
        global_db(): Handle on the global database, if there is one
        from_path(): Handle on the database at an explicit location
        location: Human-readable location for messages

    Example:
        class MyDB(PackageDB):
            def __init__(self, path):
                self.path = Path(path)

            @classmethod
            def db_name(cls) -> str:
                return 'mydb'

            def read(self, init: MaybeInitDB) -> Packages:
                ...

            def write(self, packages: Packages) -> None:
                ...

            @classmethod
            def global_db(cls):
                return None

            @classmethod
            def from_path(cls, path):
                return cls(path)

            @property
            def location(self) -> str:
                return str(self.path)
    """

    @classmethod
    @abstractmethod
    def db_name(cls) -> str:
        """
        Get the database name.

        Used to construct the user database path (``<user-dir>/<name>.db``),
        so it must not contain path separators.
        """
        pass

    @abstractmethod
    def read(self, init: MaybeInitDB) -> Packages:
        """
        Read all package records.

        Args:
            init: With ``MaybeInitDB.INIT`` a missing database is created
                empty; with ``MaybeInitDB.DONT_INIT`` it is an error.

        Returns:
            All stored records

        Raises:
            DatabaseMissingError: Database absent and ``DONT_INIT`` given
            DatabaseReadError: Database exists but could not be read
            DatabaseCorruptError: Database was read but could not be parsed
        """
        pass

    @abstractmethod
    def write(self, packages: Packages) -> None:
        """
        Replace the database content with ``packages``.

        Implementations must be atomic: a concurrent reader sees either the
        previous content or the new content, never a mix.

        Raises:
            DatabaseWriteError: If the content could not be persisted
        """
        pass

    @classmethod
    @abstractmethod
    def global_db(cls) -> Optional["PackageDB"]:
        """Get the global database handle, or None if this backend has none."""
        pass

    @classmethod
    @abstractmethod
    def from_path(cls, path: Union[str, Path]) -> "PackageDB":
        """Create a handle on the database at ``path`` without touching it."""
        pass

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable location of this database."""
        pass

    @property
    def lock_path(self) -> Optional[Path]:
        """Lock file used by ``database_lock``, or None when there is none."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.location!r})"
