"""
Package database backends for pkgdbkit.

Available Components:
--------------------
- PackageDB: Abstract base class every backend implements
- MaybeInitDB: Create-if-missing flag for reads
- StandardDB / standard_db: One JSON file per database
- DirectoryDB / directory_db: One JSON file per package
- MemoryDB / memory_db: Process-local store
- HttpDB / http_db: JSON document behind a URL
- GlobalPackageDB, UserPackageDB, SpecificPackageDB: Database references
- DatabaseLocator: Resolves references into backend handles

Example Usage:
-------------
    from pkgdbkit.db import standard_db, UserPackageDB, DatabaseLocator

    MyDB = standard_db("mycompiler")
    db = DatabaseLocator().locate(MyDB, UserPackageDB())
    packages = db.read(MaybeInitDB.INIT)
"""

from pkgdbkit.db.base import MaybeInitDB, PackageDB, validate_db_name
from pkgdbkit.db.standard import (
    StandardDB,
    standard_db,
    read_db,
    write_db,
    encode_packages,
    decode_packages,
)
from pkgdbkit.db.directory import DirectoryDB, directory_db
from pkgdbkit.db.memory import MemoryDB, memory_db
from pkgdbkit.db.remote import HttpDB, http_db
from pkgdbkit.db.locator import (
    GlobalPackageDB,
    UserPackageDB,
    SpecificPackageDB,
    PackageDBRef,
    DatabaseLocator,
    get_default_locator,
)
from pkgdbkit.db.factory import db_type_from_config, locator_from_config

__all__ = [
    "MaybeInitDB",
    "PackageDB",
    "validate_db_name",
    "StandardDB",
    "standard_db",
    "read_db",
    "write_db",
    "encode_packages",
    "decode_packages",
    "DirectoryDB",
    "directory_db",
    "MemoryDB",
    "memory_db",
    "HttpDB",
    "http_db",
    "GlobalPackageDB",
    "UserPackageDB",
    "SpecificPackageDB",
    "PackageDBRef",
    "DatabaseLocator",
    "get_default_locator",
    "db_type_from_config",
    "locator_from_config",
]
