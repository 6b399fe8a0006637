"""
Package record model and selectors.

Example Usage:
-------------
    from pkgdbkit.packages import PackageRecord, parse_selector

    record = PackageRecord(id="foo-1.0-3f2a", name="foo", version="1.0")
    selector = parse_selector("foo")
    assert selector.matches(record)
"""

from pkgdbkit.packages.model import PackageRecord, Packages
from pkgdbkit.packages.selectors import (
    ExactVersion,
    AnyVersion,
    VersionSpec,
    PackageSelector,
    PackageIdSelector,
    Selector,
    parse_selector,
)

__all__ = [
    "PackageRecord",
    "Packages",
    "ExactVersion",
    "AnyVersion",
    "VersionSpec",
    "PackageSelector",
    "PackageIdSelector",
    "Selector",
    "parse_selector",
]
