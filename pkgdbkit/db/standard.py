"""
Standard single-file package database.

``StandardDB`` keeps a whole database in one UTF-8 JSON file: a top-level
array of package record objects, one object per record, keyed by the record
attribute names. There is no envelope or version header.

``read_db`` and ``write_db`` implement the encoding and are public so other
file-based backends can reuse them.

Example:
    >>> SchemaDB = standard_db("json-schema-tools")
    >>> db = SchemaDB.from_path("/tmp/packages.db")
    >>> db.read(MaybeInitDB.INIT)
    []
"""

import json
import logging
import os
from pathlib import Path
from typing import ClassVar, Optional, Type, Union

from pkgdbkit.core.exceptions import (
    DatabaseCorruptError,
    DatabaseMissingError,
    DatabaseReadError,
    DatabaseWriteError,
    InvalidPackageRecordError,
)
from pkgdbkit.core.filesystem import atomic_create, atomic_write
from pkgdbkit.db.base import MaybeInitDB, PackageDB, validate_db_name
from pkgdbkit.packages.model import PackageRecord, Packages

logger = logging.getLogger(__name__)


# =============================================================================
# Encoding
# =============================================================================


def encode_packages(packages: Packages, indent: Optional[int] = 2) -> str:
    """Serialize records to the JSON array form."""
    return json.dumps(
        [package.to_dict() for package in packages], indent=indent, ensure_ascii=False
    )


def decode_packages(raw: Union[str, bytes], location: Union[str, Path]) -> Packages:
    """
    Parse the JSON array form back into records.

    Args:
        raw: Database content
        location: Database location, used in error messages

    Raises:
        DatabaseCorruptError: If the content is not a valid record array
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DatabaseCorruptError(location, str(e)) from e

    if not isinstance(data, list):
        raise DatabaseCorruptError(
            location, f"expected a JSON array, got {type(data).__name__}"
        )

    try:
        return [PackageRecord.from_dict(item) for item in data]
    except InvalidPackageRecordError as e:
        raise DatabaseCorruptError(location, str(e)) from e


# =============================================================================
# Auxiliary functions
# =============================================================================


def write_db(
    path: Union[str, Path], packages: Packages, indent: Optional[int] = 2
) -> None:
    """
    Write a package database file atomically.

    Args:
        path: Database file path
        packages: Records to store; replaces any previous content
        indent: JSON indentation (None for compact output)

    Raises:
        DatabaseWriteError: If the file could not be written
    """
    path = Path(path)
    content = encode_packages(packages, indent)

    try:
        atomic_write(path, content)
    except OSError as e:
        logger.debug(f"Failed to write package database {path}: {e}")
        raise DatabaseWriteError(path, e) from e

    logger.debug(f"Wrote {len(packages)} package(s) to {path}")


def read_db(init: MaybeInitDB, path: Union[str, Path]) -> Packages:
    """
    Read a package database file.

    Args:
        init: Whether to create an empty database if the file is missing
        path: Database file path

    Returns:
        Stored records

    Raises:
        DatabaseMissingError: File missing and ``DONT_INIT`` given
        DatabaseReadError: File could not be read
        DatabaseCorruptError: File content is not a valid database
    """
    path = Path(path)

    if init is MaybeInitDB.INIT and not path.exists():
        # A dangling symlink is a broken database, not a missing one
        if os.path.lexists(path):
            raise DatabaseReadError(
                path, FileNotFoundError(f"dangling symlink: {path}")
            )
        try:
            if atomic_create(path, "[]"):
                logger.info(f"Initialized empty package database at {path}")
        except OSError as e:
            raise DatabaseWriteError(path, e) from e

    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        raise DatabaseMissingError(path) from e
    except OSError as e:
        logger.debug(f"Failed to read package database {path}: {e}")
        raise DatabaseReadError(path, e) from e

    packages = decode_packages(raw, path)
    logger.debug(f"Read {len(packages)} package(s) from {path}")
    return packages


# =============================================================================
# StandardDB
# =============================================================================


class StandardDB(PackageDB):
    """
    Package database stored as a single JSON file.

    The database name and the optional global database location are
    class-level settings; use ``standard_db()`` to create a configured
    subclass instead of subclassing by hand.

    Attributes:
        path: Database file path
    """

    database_name: ClassVar[str] = "packages"
    global_path: ClassVar[Optional[Path]] = None
    json_indent: ClassVar[Optional[int]] = 2

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @classmethod
    def db_name(cls) -> str:
        return cls.database_name

    def read(self, init: MaybeInitDB) -> Packages:
        return read_db(init, self.path)

    def write(self, packages: Packages) -> None:
        write_db(self.path, packages, self.json_indent)

    @classmethod
    def global_db(cls) -> Optional["StandardDB"]:
        if cls.global_path is None:
            return None
        return cls.from_path(cls.global_path)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "StandardDB":
        return cls(path)

    @property
    def location(self) -> str:
        return str(self.path)

    @property
    def lock_path(self) -> Path:
        return self.path.with_name(self.path.name + ".lock")


def standard_db(
    name: str,
    global_path: Optional[Union[str, Path]] = None,
    json_indent: Optional[int] = 2,
) -> Type[StandardDB]:
    """
    Create a ``StandardDB`` subclass for a named database.

    Args:
        name: Database name (no path separators)
        global_path: Location of the global database, if this system has one
        json_indent: JSON indentation used when writing

    Returns:
        A new ``StandardDB`` subclass

    Example:
        >>> MyDB = standard_db("mycompiler", global_path="/usr/lib/mycompiler/packages.db")
        >>> MyDB.global_db().path
        PosixPath('/usr/lib/mycompiler/packages.db')
    """
    validate_db_name(name)
    return type(
        f"StandardDB_{name}",
        (StandardDB,),
        {
            "database_name": name,
            "global_path": Path(global_path) if global_path is not None else None,
            "json_indent": json_indent,
        },
    )
