"""
Shared utilities for CLI commands.

Provides common functionality used across CLI commands: configuration
loading, database stack handling and consistent console output.
"""

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Type

from pkgdbkit.config.parser import RegistryConfig, load_config
from pkgdbkit.core.exceptions import InvalidPackageRecordError
from pkgdbkit.db.base import PackageDB
from pkgdbkit.db.factory import db_type_from_config, locator_from_config
from pkgdbkit.db.locator import DatabaseLocator, PackageDBRef, UserPackageDB
from pkgdbkit.packages.model import PackageRecord

logger = logging.getLogger(__name__)


# ============================================================================
# Registry Context
# ============================================================================


@dataclass
class RegistryContext:
    """Everything a command needs to run registry operations."""

    config: RegistryConfig
    db_type: Type[PackageDB]
    locator: DatabaseLocator

    @property
    def lock_timeout(self) -> Optional[float]:
        return self.config.lock_timeout


def load_registry_context(config_file: Optional[Path] = None) -> RegistryContext:
    """
    Load configuration and build the backend class and locator from it.

    Raises:
        ConfigError: If the configuration is invalid
    """
    config = load_config(config_file)
    return RegistryContext(
        config=config,
        db_type=db_type_from_config(config),
        locator=locator_from_config(config),
    )


def db_stack(args) -> List[PackageDBRef]:
    """Database stack from the command line, the user database if none given."""
    dbs = getattr(args, "dbs", None)
    return list(dbs) if dbs else [UserPackageDB()]


def top_db(args) -> PackageDBRef:
    """The database single-database commands operate on (last one given)."""
    return db_stack(args)[-1]


# ============================================================================
# Input
# ============================================================================


def load_record_file(file_arg: str) -> PackageRecord:
    """
    Read one JSON package record from a file or standard input.

    Args:
        file_arg: File path, or "-" for standard input

    Raises:
        InvalidPackageRecordError: If the content is not a valid record
        OSError: If the file cannot be read
    """
    if file_arg == "-":
        raw = sys.stdin.read()
    else:
        raw = Path(file_arg).read_text(encoding="utf-8")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidPackageRecordError(f"Invalid JSON in package record: {e}") from e

    return PackageRecord.from_dict(data)


# ============================================================================
# Output
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def safe_print(message: str, file=None):
    """
    Print message with safe encoding handling for limited consoles.

    Falls back to replacing characters the console encoding cannot represent.

    Args:
        message: Message to print
        file: Output file (default: stdout)
    """
    try:
        print(message, file=file)
    except UnicodeEncodeError:
        stream = file or sys.stdout
        encoding = getattr(stream, "encoding", None) or "ascii"
        print(message.encode(encoding, "replace").decode(encoding), file=file)


def format_package(package: PackageRecord, long: bool = False) -> str:
    """Format a record for listing."""
    if long:
        return f"{package.id}  {package.source_id}"
    return package.id
