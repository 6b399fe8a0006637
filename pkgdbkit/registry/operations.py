"""
Registry operations over any package database backend.

These functions hold all registry policy: replace-on-register, exact and
wildcard unregister, vacuous listing and all-or-nothing batch lookup. They
only use the ``PackageDB`` interface, so any backend works:

    >>> from pkgdbkit.db import standard_db, UserPackageDB
    >>> MyDB = standard_db("mycompiler")
    >>> register(MyDB, UserPackageDB(), record)
    >>> [p.id for p in list_packages(MyDB, UserPackageDB())]
    ['foo-1.0-3f2a']

Each call resolves its database reference afresh and re-reads the store, so
changes made by other processes are visible immediately.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Type

from pkgdbkit.core.exceptions import (
    DatabaseMissingError,
    NullDatabaseError,
    PackageNotFoundError,
)
from pkgdbkit.core.locking import database_lock
from pkgdbkit.db.base import MaybeInitDB, PackageDB
from pkgdbkit.db.locator import DatabaseLocator, PackageDBRef, get_default_locator
from pkgdbkit.packages.model import PackageRecord, Packages
from pkgdbkit.packages.selectors import Selector

logger = logging.getLogger(__name__)


@dataclass
class UnregisterResult:
    """
    Outcome of an unregister operation.

    Attributes:
        removed: Records that matched the selector and were removed
        remaining: Records left in the database
    """

    removed: Packages = field(default_factory=list)
    remaining: Packages = field(default_factory=list)

    @property
    def nothing_removed(self) -> bool:
        return not self.removed


def _resolve(
    db_type: Type[PackageDB],
    ref: PackageDBRef,
    locator: Optional[DatabaseLocator],
) -> Optional[PackageDB]:
    return (locator or get_default_locator()).locate(db_type, ref)


@contextmanager
def _maybe_locked(db: PackageDB, lock_timeout: Optional[float]):
    if lock_timeout is None:
        yield
    else:
        with database_lock(db, lock_timeout):
            yield


def remove_package(package_id: str, packages: Packages) -> Packages:
    """Return ``packages`` without the record whose id is ``package_id``."""
    return [package for package in packages if package.id != package_id]


# =============================================================================
# Querying
# =============================================================================


def get_installed_packages(
    db_type: Type[PackageDB],
    ref: PackageDBRef,
    init: MaybeInitDB = MaybeInitDB.INIT,
    locator: Optional[DatabaseLocator] = None,
) -> Packages:
    """
    Get all packages registered in a database.

    Args:
        db_type: Backend class
        ref: Database reference
        init: Whether to create the database if it is missing
        locator: Reference resolver (default: process-wide locator)

    Returns:
        Registered records; empty when the reference resolves to no database
    """
    db = _resolve(db_type, ref, locator)
    if db is None:
        return []
    return db.read(init)


def list_packages(
    db_type: Type[PackageDB],
    ref: PackageDBRef,
    locator: Optional[DatabaseLocator] = None,
) -> Packages:
    """
    List the packages in a database.

    A database that is not configured or does not exist yet lists as empty,
    and listing never creates one. Read and parse errors still propagate.

    Args:
        db_type: Backend class
        ref: Database reference
        locator: Reference resolver (default: process-wide locator)

    Returns:
        Registered records
    """
    db = _resolve(db_type, ref, locator)
    if db is None:
        return []

    try:
        return db.read(MaybeInitDB.DONT_INIT)
    except DatabaseMissingError:
        logger.debug(f"Package database {db.location} does not exist yet")
        return []


def read_packages_info(
    db_type: Type[PackageDB],
    refs: Iterable[PackageDBRef],
    package_ids: Iterable[str],
    init: MaybeInitDB = MaybeInitDB.INIT,
    locator: Optional[DatabaseLocator] = None,
) -> Packages:
    """
    Look up records for a set of package ids across several databases.

    The lookup is all-or-nothing: if any id is missing from every database,
    ``PackageNotFoundError`` is raised for the first such id and no records
    are returned.

    Args:
        db_type: Backend class
        refs: Databases to search
        package_ids: Ids to look up
        init: Whether to create missing databases while reading
        locator: Reference resolver (default: process-wide locator)

    Returns:
        One record per requested id, in the requested order

    Raises:
        PackageNotFoundError: If an id is not registered anywhere
    """
    package_map: Dict[str, PackageRecord] = {}
    for ref in refs:
        for package in get_installed_packages(db_type, ref, init, locator):
            package_map[package.id] = package

    found = []
    for package_id in package_ids:
        package = package_map.get(package_id)
        if package is None:
            raise PackageNotFoundError(package_id)
        found.append(package)
    return found


# =============================================================================
# Mutating
# =============================================================================


def register(
    db_type: Type[PackageDB],
    ref: PackageDBRef,
    package: PackageRecord,
    locator: Optional[DatabaseLocator] = None,
    lock_timeout: Optional[float] = None,
) -> None:
    """
    Register a package in a database.

    A package with the same id that is already registered is replaced.

    Args:
        db_type: Backend class
        ref: Database reference
        package: Record to register
        locator: Reference resolver (default: process-wide locator)
        lock_timeout: If given, hold the database lock (seconds to wait)

    Raises:
        NullDatabaseError: If the reference resolves to no database
    """
    db = _resolve(db_type, ref, locator)
    if db is None:
        raise NullDatabaseError()

    with _maybe_locked(db, lock_timeout):
        packages = db.read(MaybeInitDB.INIT)
        replaced = len(packages)
        packages = remove_package(package.id, packages)
        replaced -= len(packages)

        packages.append(package)
        db.write(packages)

    if replaced:
        logger.info(f"Replaced package {package.id} in {db.location}")
    else:
        logger.info(f"Registered package {package.id} in {db.location}")


def unregister(
    db_type: Type[PackageDB],
    ref: PackageDBRef,
    selector: Selector,
    locator: Optional[DatabaseLocator] = None,
    lock_timeout: Optional[float] = None,
) -> UnregisterResult:
    """
    Unregister every package matching ``selector``.

    A name selector with ``AnyVersion`` removes all builds of that name.
    When nothing matches, the database is left untouched and the result has
    an empty ``removed`` list.

    Args:
        db_type: Backend class
        ref: Database reference
        selector: Which records to remove
        locator: Reference resolver (default: process-wide locator)
        lock_timeout: If given, hold the database lock (seconds to wait)

    Returns:
        Removed and remaining records

    Raises:
        NullDatabaseError: If the reference resolves to no database
    """
    db = _resolve(db_type, ref, locator)
    if db is None:
        raise NullDatabaseError()

    with _maybe_locked(db, lock_timeout):
        packages = db.read(MaybeInitDB.INIT)

        result = UnregisterResult()
        for package in packages:
            if selector.matches(package):
                result.removed.append(package)
            else:
                result.remaining.append(package)

        if result.removed:
            db.write(result.remaining)

    if result.nothing_removed:
        logger.info(f"No packages removed from {db.location} (selector: {selector})")
    else:
        logger.info(f"Packages removed from {db.location}:")
        for package in result.removed:
            logger.info(f"  {package.id}")

    return result
