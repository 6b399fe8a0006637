"""
Installed package record model.

A ``PackageRecord`` describes one installed *build* of a package. The ``id``
distinguishes builds: rebuilding ``foo-1.0`` yields a new record with the
same name and version but a different id. Everything other than
``id``/``name``/``version`` is descriptive payload that the registry stores
and returns unchanged.

Example:
    >>> record = PackageRecord(id="foo-1.0-3f2a", name="foo", version="1.0")
    >>> record.source_id
    'foo-1.0'
    >>> PackageRecord.from_dict(record.to_dict()) == record
    True
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple

from pkgdbkit.core.exceptions import InvalidPackageRecordError

_REQUIRED_FIELDS = ("id", "name", "version")


@dataclass(frozen=True, eq=False)
class PackageRecord:
    """
    Metadata for one installed build of a package.

    Records are compared and hashed by ``id`` only: two records with the same
    id are the same stored entity, whatever their other fields say.

    Attributes:
        id: Unique identifier of this build
        name: Package name
        version: Package version (opaque string)
        license: License name
        copyright: Copyright notice
        maintainer: Maintainer contact
        author: Author
        homepage: Project homepage URL
        synopsis: One-line summary
        description: Long description
        category: Package category
        exposed: Whether the package is visible by default
        exposed_modules: Modules the package exports
        hidden_modules: Modules internal to the package
        import_dirs: Directories with interface files
        library_dirs: Directories with library files
        libraries: Library names to link against
        include_dirs: Directories with header files
        includes: Header files
        depends: Ids of the builds this package depends on
    """

    id: str
    name: str
    version: str
    license: Optional[str] = None
    copyright: Optional[str] = None
    maintainer: Optional[str] = None
    author: Optional[str] = None
    homepage: Optional[str] = None
    synopsis: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    exposed: bool = True
    exposed_modules: Tuple[str, ...] = field(default_factory=tuple)
    hidden_modules: Tuple[str, ...] = field(default_factory=tuple)
    import_dirs: Tuple[str, ...] = field(default_factory=tuple)
    library_dirs: Tuple[str, ...] = field(default_factory=tuple)
    libraries: Tuple[str, ...] = field(default_factory=tuple)
    include_dirs: Tuple[str, ...] = field(default_factory=tuple)
    includes: Tuple[str, ...] = field(default_factory=tuple)
    depends: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        for name in _REQUIRED_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise InvalidPackageRecordError(
                    f"Package record field '{name}' must be a non-empty string, "
                    f"got {value!r}"
                )
        # Lists passed by callers are frozen into tuples
        for f in fields(self):
            if f.name in _SEQUENCE_FIELDS:
                object.__setattr__(self, f.name, tuple(getattr(self, f.name)))

    def __eq__(self, other):
        if not isinstance(other, PackageRecord):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    @property
    def source_id(self) -> str:
        """Package identifier in ``name-version`` form."""
        return f"{self.name}-{self.version}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name in _SEQUENCE_FIELDS:
                value = list(value)
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "PackageRecord":
        """
        Build a record from its dictionary form.

        Unknown keys are ignored so that databases written by newer versions
        stay readable.

        Raises:
            InvalidPackageRecordError: If data is not a mapping or a field
                has the wrong type
        """
        if not isinstance(data, dict):
            raise InvalidPackageRecordError(
                f"Package record must be an object, got {type(data).__name__}"
            )

        missing = [name for name in _REQUIRED_FIELDS if name not in data]
        if missing:
            raise InvalidPackageRecordError(
                f"Package record is missing required field(s): {', '.join(missing)}"
            )

        kwargs: Dict[str, Any] = {}
        for name in _FIELD_NAMES:
            if name not in data:
                continue
            value = data[name]
            if name in _SEQUENCE_FIELDS:
                if not isinstance(value, list) or not all(
                    isinstance(item, str) for item in value
                ):
                    raise InvalidPackageRecordError(
                        f"Package record field '{name}' must be a list of strings"
                    )
            elif name == "exposed":
                if not isinstance(value, bool):
                    raise InvalidPackageRecordError(
                        "Package record field 'exposed' must be a boolean"
                    )
            elif value is not None and not isinstance(value, str):
                raise InvalidPackageRecordError(
                    f"Package record field '{name}' must be a string"
                )
            kwargs[name] = value

        return cls(**kwargs)


_SEQUENCE_FIELDS = frozenset(
    {
        "exposed_modules",
        "hidden_modules",
        "import_dirs",
        "library_dirs",
        "libraries",
        "include_dirs",
        "includes",
        "depends",
    }
)

_FIELD_NAMES = tuple(f.name for f in fields(PackageRecord))

# A database's content. Order is kept on disk but carries no meaning.
Packages = List[PackageRecord]
