"""
Directory-based package database.

A database is a directory holding one JSON file per package record:

    <root>/
        CURRENT               : name of the live generation directory
        gen-k2j4x9/           : one generation (a complete record set)
            000000-foo-1.0-3f2a.json
            000001-bar-2.1-9c1d.json
        .lock                 : used by database_lock()

``write`` builds a complete new generation next to the live one and then
replaces ``CURRENT`` atomically, so a reader resolves either the previous or
the new record set, never a mix. The previous generation is removed after
the switch. Record file names carry the position so the record order
survives a round trip.
"""

import json
import logging
import tempfile
from pathlib import Path
from typing import ClassVar, List, Optional, Type, Union
from urllib.parse import quote

from pkgdbkit.core.exceptions import (
    DatabaseCorruptError,
    DatabaseMissingError,
    DatabaseReadError,
    DatabaseWriteError,
    InvalidPackageRecordError,
)
from pkgdbkit.core.filesystem import (
    FilesystemError,
    atomic_create,
    atomic_write,
    safe_rmtree,
)
from pkgdbkit.db.base import MaybeInitDB, PackageDB, validate_db_name
from pkgdbkit.packages.model import PackageRecord, Packages

logger = logging.getLogger(__name__)

POINTER_FILE = "CURRENT"
GENERATION_PREFIX = "gen-"

# A reader can lose a race with a writer removing the generation it resolved
_MAX_READ_ATTEMPTS = 5


class _GenerationVanished(Exception):
    """The generation directory disappeared while it was being read."""


class DirectoryDB(PackageDB):
    """
    Package database stored as a directory of per-package JSON files.

    Attributes:
        root: Database directory
    """

    database_name: ClassVar[str] = "packages"
    global_path: ClassVar[Optional[Path]] = None

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    @property
    def pointer(self) -> Path:
        return self.root / POINTER_FILE

    @classmethod
    def db_name(cls) -> str:
        return cls.database_name

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def read(self, init: MaybeInitDB) -> Packages:
        if init is MaybeInitDB.INIT and not self.pointer.exists():
            self._initialize()

        for attempt in range(_MAX_READ_ATTEMPTS):
            generation = self._current_generation()
            if generation is None:
                raise DatabaseMissingError(self.root)
            try:
                packages = self._read_generation(self.root / generation)
            except _GenerationVanished:
                logger.debug(
                    f"Generation {generation} of {self.root} was replaced "
                    f"while reading (attempt {attempt + 1})"
                )
                continue
            logger.debug(f"Read {len(packages)} package(s) from {self.root}")
            return packages

        raise DatabaseCorruptError(
            self.root, "live generation directory keeps disappearing"
        )

    def _current_generation(self) -> Optional[str]:
        try:
            name = self.pointer.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise DatabaseReadError(self.root, e) from e

        if not name.startswith(GENERATION_PREFIX) or "/" in name or "\\" in name:
            raise DatabaseCorruptError(
                self.root, f"invalid generation name in {POINTER_FILE}: {name!r}"
            )
        return name

    def _read_generation(self, generation_dir: Path) -> Packages:
        try:
            entries = [p for p in generation_dir.iterdir() if p.suffix == ".json"]
        except FileNotFoundError as e:
            raise _GenerationVanished() from e
        except OSError as e:
            raise DatabaseReadError(self.root, e) from e

        indexed = []
        for entry in entries:
            index, _, _ = entry.name.partition("-")
            if not index.isdigit():
                raise DatabaseCorruptError(
                    self.root, f"unexpected record file name: {entry.name}"
                )
            indexed.append((int(index), entry))
        indexed.sort()

        packages = []
        for _, entry in indexed:
            try:
                raw = entry.read_bytes()
            except FileNotFoundError as e:
                raise _GenerationVanished() from e
            except OSError as e:
                raise DatabaseReadError(self.root, e) from e

            try:
                data = json.loads(raw.decode("utf-8"))
                packages.append(PackageRecord.from_dict(data))
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                raise DatabaseCorruptError(self.root, f"{entry.name}: {e}") from e
            except InvalidPackageRecordError as e:
                raise DatabaseCorruptError(self.root, f"{entry.name}: {e}") from e

        return packages

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def _initialize(self) -> None:
        try:
            generation_dir = self._build_generation([])
        except (OSError, FilesystemError) as e:
            raise DatabaseWriteError(self.root, e) from e

        created = False
        try:
            created = atomic_create(self.pointer, generation_dir.name)
        except OSError as e:
            raise DatabaseWriteError(self.root, e) from e
        finally:
            if not created:
                self._discard(generation_dir)

        if created:
            logger.info(f"Initialized empty package database at {self.root}")

    def _build_generation(self, packages: Packages) -> Path:
        """Write a complete, not yet visible generation directory."""
        self.root.mkdir(parents=True, exist_ok=True)
        generation_dir = Path(
            tempfile.mkdtemp(dir=self.root, prefix=GENERATION_PREFIX)
        )

        complete = False
        try:
            for index, package in enumerate(packages):
                file_name = f"{index:06d}-{quote(package.id, safe='')}.json"
                (generation_dir / file_name).write_text(
                    json.dumps(package.to_dict(), indent=2, ensure_ascii=False),
                    encoding="utf-8",
                )
            complete = True
        finally:
            if not complete:
                self._discard(generation_dir)

        return generation_dir

    def _discard(self, generation_dir: Path) -> None:
        """Remove a generation that never became live."""
        try:
            safe_rmtree(generation_dir, require_prefix=self.root)
        except FilesystemError as e:
            logger.warning(
                f"Could not remove unused generation {generation_dir}: {e}"
            )

    def write(self, packages: Packages) -> None:
        try:
            previous = self._current_generation()
        except (DatabaseReadError, DatabaseCorruptError):
            previous = None

        try:
            generation_dir = self._build_generation(packages)
        except (OSError, FilesystemError) as e:
            logger.debug(f"Failed to write package database {self.root}: {e}")
            raise DatabaseWriteError(self.root, e) from e

        # Until CURRENT names it, the new generation is only reachable from here
        switched = False
        try:
            atomic_write(self.pointer, generation_dir.name)
            switched = True
        except OSError as e:
            logger.debug(f"Failed to switch package database {self.root}: {e}")
            raise DatabaseWriteError(self.root, e) from e
        finally:
            if not switched:
                self._discard(generation_dir)

        if previous is not None and previous != generation_dir.name:
            try:
                safe_rmtree(self.root / previous, require_prefix=self.root)
            except FilesystemError as e:
                logger.warning(f"Could not remove old generation {previous}: {e}")

        logger.debug(f"Wrote {len(packages)} package(s) to {self.root}")

    # -------------------------------------------------------------------------
    # Location
    # -------------------------------------------------------------------------

    @classmethod
    def global_db(cls) -> Optional["DirectoryDB"]:
        if cls.global_path is None:
            return None
        return cls.from_path(cls.global_path)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "DirectoryDB":
        return cls(path)

    @property
    def location(self) -> str:
        return str(self.root)

    @property
    def lock_path(self) -> Path:
        return self.root / ".lock"

    def generations(self) -> List[str]:
        """Names of all generation directories present on disk."""
        if not self.root.is_dir():
            return []
        return sorted(
            p.name
            for p in self.root.iterdir()
            if p.is_dir() and p.name.startswith(GENERATION_PREFIX)
        )


def directory_db(
    name: str, global_path: Optional[Union[str, Path]] = None
) -> Type[DirectoryDB]:
    """
    Create a ``DirectoryDB`` subclass for a named database.

    Args:
        name: Database name (no path separators)
        global_path: Directory of the global database, if this system has one
    """
    validate_db_name(name)
    return type(
        f"DirectoryDB_{name}",
        (DirectoryDB,),
        {
            "database_name": name,
            "global_path": Path(global_path) if global_path is not None else None,
        },
    )
