"""
pkgdbkit - pluggable registry of installed package metadata.

Example Usage:
-------------
    from pkgdbkit import PackageRecord, UserPackageDB, register, standard_db

    MyDB = standard_db("mycompiler")
    register(MyDB, UserPackageDB(), PackageRecord(id="foo-1.0-3f2a", name="foo", version="1.0"))
"""

from pkgdbkit.packages import (
    PackageRecord,
    Packages,
    ExactVersion,
    AnyVersion,
    PackageSelector,
    PackageIdSelector,
    parse_selector,
)
from pkgdbkit.db import (
    MaybeInitDB,
    PackageDB,
    StandardDB,
    standard_db,
    DirectoryDB,
    directory_db,
    MemoryDB,
    memory_db,
    HttpDB,
    http_db,
    GlobalPackageDB,
    UserPackageDB,
    SpecificPackageDB,
    DatabaseLocator,
)
from pkgdbkit.registry import (
    UnregisterResult,
    get_installed_packages,
    list_packages,
    read_packages_info,
    register,
    unregister,
)

__all__ = [
    "PackageRecord",
    "Packages",
    "ExactVersion",
    "AnyVersion",
    "PackageSelector",
    "PackageIdSelector",
    "parse_selector",
    "MaybeInitDB",
    "PackageDB",
    "StandardDB",
    "standard_db",
    "DirectoryDB",
    "directory_db",
    "MemoryDB",
    "memory_db",
    "HttpDB",
    "http_db",
    "GlobalPackageDB",
    "UserPackageDB",
    "SpecificPackageDB",
    "DatabaseLocator",
    "UnregisterResult",
    "get_installed_packages",
    "list_packages",
    "read_packages_info",
    "register",
    "unregister",
]
