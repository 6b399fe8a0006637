"""
In-memory package database.

Useful for tests and for tools that build a throwaway registry. Stores live
in a class-level table keyed by location, so two handles created from the
same location see the same data for the lifetime of the process.
"""

import logging
from pathlib import Path
from typing import ClassVar, Dict, Optional, Tuple, Type, Union

from pkgdbkit.core.exceptions import DatabaseMissingError
from pkgdbkit.db.base import MaybeInitDB, PackageDB, validate_db_name
from pkgdbkit.packages.model import PackageRecord, Packages

logger = logging.getLogger(__name__)


class MemoryDB(PackageDB):
    """
    Package database held in process memory.

    Each store is an immutable tuple that ``write`` swaps out in one
    assignment, so there are no partial updates.
    """

    database_name: ClassVar[str] = "packages"
    global_location: ClassVar[Optional[str]] = None
    _stores: ClassVar[Dict[str, Tuple[PackageRecord, ...]]] = {}

    def __init__(self, location: Union[str, Path]):
        self._location = str(location)

    @classmethod
    def db_name(cls) -> str:
        return cls.database_name

    def read(self, init: MaybeInitDB) -> Packages:
        stores = type(self)._stores
        if self._location not in stores:
            if init is not MaybeInitDB.INIT:
                raise DatabaseMissingError(self._location)
            # setdefault keeps a store another handle created first
            stores.setdefault(self._location, ())
            logger.debug(f"Initialized empty in-memory database {self._location}")
        return list(stores[self._location])

    def write(self, packages: Packages) -> None:
        type(self)._stores[self._location] = tuple(packages)
        logger.debug(f"Wrote {len(packages)} package(s) to memory:{self._location}")

    @classmethod
    def global_db(cls) -> Optional["MemoryDB"]:
        if cls.global_location is None:
            return None
        return cls.from_path(cls.global_location)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "MemoryDB":
        return cls(path)

    @property
    def location(self) -> str:
        return self._location

    @classmethod
    def reset(cls) -> None:
        """Drop every store of this database type."""
        cls._stores.clear()


def memory_db(name: str, global_location: Optional[str] = None) -> Type[MemoryDB]:
    """
    Create a ``MemoryDB`` subclass with its own, isolated store table.

    Args:
        name: Database name (no path separators)
        global_location: Location key of the global database, if any
    """
    validate_db_name(name)
    return type(
        f"MemoryDB_{name}",
        (MemoryDB,),
        {
            "database_name": name,
            "global_location": global_location,
            "_stores": {},
        },
    )
