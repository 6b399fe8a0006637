"""
Package selectors used by ``unregister``.

A selector decides which stored records an operation targets:

- ``PackageSelector(name, ExactVersion(v))`` - records named ``name`` with
  version exactly ``v``
- ``PackageSelector(name, AnyVersion())`` - every record named ``name``,
  whatever its version or build id
- ``PackageIdSelector(id)`` - the single build with that id

Selectors can be parsed from the usual ``name`` / ``name-version`` text form:

    >>> parse_selector("text-2.0.2")
    PackageSelector(name='text', version=ExactVersion(version='2.0.2'))
    >>> parse_selector("text")
    PackageSelector(name='text', version=AnyVersion())
"""

import re
from dataclasses import dataclass, field
from typing import Union

from pkgdbkit.core.exceptions import InvalidSelectorError
from pkgdbkit.packages.model import PackageRecord

_VERSION_RE = re.compile(r"^\d+(\.\d+)*$")


@dataclass(frozen=True)
class ExactVersion:
    """Match one specific version."""

    version: str

    def __post_init__(self):
        if not self.version:
            raise InvalidSelectorError("Exact version cannot be empty")

    def matches(self, version: str) -> bool:
        return version == self.version


@dataclass(frozen=True)
class AnyVersion:
    """Match every version."""

    def matches(self, version: str) -> bool:
        return True


VersionSpec = Union[ExactVersion, AnyVersion]


@dataclass(frozen=True)
class PackageSelector:
    """Select records by package name and version."""

    name: str
    version: VersionSpec = field(default_factory=AnyVersion)

    def __post_init__(self):
        if not self.name:
            raise InvalidSelectorError("Package name cannot be empty")

    @classmethod
    def exact(cls, name: str, version: str) -> "PackageSelector":
        return cls(name, ExactVersion(version))

    @classmethod
    def any_version(cls, name: str) -> "PackageSelector":
        return cls(name, AnyVersion())

    def matches(self, record: PackageRecord) -> bool:
        return record.name == self.name and self.version.matches(record.version)

    def __str__(self) -> str:
        if isinstance(self.version, ExactVersion):
            return f"{self.name}-{self.version.version}"
        return self.name


@dataclass(frozen=True)
class PackageIdSelector:
    """Select the single build with the given id."""

    package_id: str

    def __post_init__(self):
        if not self.package_id:
            raise InvalidSelectorError("Package id cannot be empty")

    def matches(self, record: PackageRecord) -> bool:
        return record.id == self.package_id

    def __str__(self) -> str:
        return self.package_id


Selector = Union[PackageSelector, PackageIdSelector]


def parse_selector(text: str) -> PackageSelector:
    """
    Parse ``name`` or ``name-version`` into a selector.

    The version is the last dash-separated component when it is made only
    of dot-separated numbers; package names never have such a component.

    Args:
        text: Selector text, e.g. ``"foo"`` or ``"foo-bar-1.2.3"``

    Returns:
        PackageSelector with ``AnyVersion`` when no version is given

    Raises:
        InvalidSelectorError: If the text is empty or has no name part
    """
    text = text.strip()
    if not text:
        raise InvalidSelectorError("Package selector cannot be empty")

    name, sep, last = text.rpartition("-")
    if sep and _VERSION_RE.match(last):
        if not name:
            raise InvalidSelectorError(f"Package selector has no name: {text!r}")
        return PackageSelector.exact(name, last)

    return PackageSelector.any_version(text)
