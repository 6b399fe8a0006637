"""
Core functionality for pkgdbkit.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    get_app_user_data_dir,
    get_user_dir,
    clear_user_dir_cache,
    DirectoryError,
)

from .filesystem import (
    atomic_write,
    atomic_create,
    safe_rmtree,
    FilesystemError,
)

from .locking import database_lock

from .exceptions import (
    PkgDBKitError,
    PackageDBError,
    DatabaseMissingError,
    DatabaseReadError,
    DatabaseCorruptError,
    DatabaseWriteError,
    NullDatabaseError,
    DatabaseLockTimeout,
    PackageInfoError,
    PackageNotFoundError,
    InvalidPackageRecordError,
    InvalidSelectorError,
)

__all__ = [
    "get_app_user_data_dir",
    "get_user_dir",
    "clear_user_dir_cache",
    "DirectoryError",
    "atomic_write",
    "atomic_create",
    "safe_rmtree",
    "FilesystemError",
    "database_lock",
    "PkgDBKitError",
    "PackageDBError",
    "DatabaseMissingError",
    "DatabaseReadError",
    "DatabaseCorruptError",
    "DatabaseWriteError",
    "NullDatabaseError",
    "DatabaseLockTimeout",
    "PackageInfoError",
    "PackageNotFoundError",
    "InvalidPackageRecordError",
    "InvalidSelectorError",
]
