"""
Registry operations for pkgdbkit.

All operations take a backend class and a database reference; they never
depend on a concrete backend.
"""

from pkgdbkit.registry.operations import (
    UnregisterResult,
    get_installed_packages,
    list_packages,
    read_packages_info,
    register,
    unregister,
    remove_package,
)

__all__ = [
    "UnregisterResult",
    "get_installed_packages",
    "list_packages",
    "read_packages_info",
    "register",
    "unregister",
    "remove_package",
]
