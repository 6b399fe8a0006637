"""
Centralized exception hierarchy for pkgdbkit.

Every error carries a human-readable message prefixed with ``ERR_PREFIX``
so command-line callers can print ``str(error)`` directly.
"""

from pathlib import Path
from typing import Optional, Union

ERR_PREFIX = "pkgdbkit package manager"

Location = Union[str, Path]


# ============================================================================
# Base Exceptions
# ============================================================================


class PkgDBKitError(Exception):
    """Base exception for all pkgdbkit errors."""

    pass


# ============================================================================
# Package Database Exceptions
# ============================================================================


class PackageDBError(PkgDBKitError):
    """Base exception for package database errors."""

    pass


class DatabaseMissingError(PackageDBError):
    """Raised when a database does not exist and initialization was not requested."""

    def __init__(self, location: Location):
        self.location = str(location)
        super().__init__(f"{ERR_PREFIX}: package database does not exist: {location}")


class DatabaseReadError(PackageDBError):
    """Raised when an existing database could not be read."""

    def __init__(self, location: Location, cause: Optional[BaseException] = None):
        self.location = str(location)
        self.cause = cause
        super().__init__(
            f"{ERR_PREFIX}: package db at {location} could not be read: {cause}"
        )


class DatabaseCorruptError(PackageDBError):
    """Raised when a database was read but its content could not be parsed."""

    def __init__(self, location: Location, reason: str = ""):
        self.location = str(location)
        self.reason = reason
        msg = f"{ERR_PREFIX}: bad package database at {location}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class DatabaseWriteError(PackageDBError):
    """Raised when a database could not be written."""

    def __init__(self, location: Location, cause: Optional[BaseException] = None):
        self.location = str(location)
        self.cause = cause
        super().__init__(
            f"{ERR_PREFIX}: package db at {location} could not be written: {cause}"
        )


class NullDatabaseError(PackageDBError):
    """Raised when registering into a database that does not exist on this system."""

    def __init__(self):
        super().__init__(f"{ERR_PREFIX}: attempt to register in a null global db")


class DatabaseLockTimeout(PackageDBError):
    """Raised when a database lock cannot be acquired within timeout."""

    def __init__(self, location: Location, timeout: float):
        self.location = str(location)
        self.timeout = timeout
        super().__init__(
            f"{ERR_PREFIX}: could not lock package db at {location} "
            f"within {timeout} seconds"
        )


# ============================================================================
# Package Exceptions
# ============================================================================


class PackageInfoError(PkgDBKitError):
    """Base exception for package lookup errors."""

    pass


class PackageNotFoundError(PackageInfoError):
    """Raised when a requested package id is absent from every searched database."""

    def __init__(self, package_id: str):
        self.package_id = package_id
        super().__init__(f"{ERR_PREFIX}: package not found: {package_id}")


class InvalidPackageRecordError(PkgDBKitError):
    """Raised when a package record has missing or malformed fields."""

    pass


class InvalidSelectorError(PkgDBKitError, ValueError):
    """Raised when a package selector string cannot be parsed."""

    pass
