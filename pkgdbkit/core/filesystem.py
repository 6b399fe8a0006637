"""
File system utilities for pkgdbkit.

Package databases are only ever replaced wholesale. The helpers here make
sure a reader never observes a partially-written file:

- ``atomic_write``: write to a temp file in the same directory, then rename
- ``atomic_create``: the same, but only if the destination does not exist yet
- ``safe_rmtree``: remove a directory tree, optionally confined to a prefix
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


def _write_temp(file_path: Path, content: Union[str, bytes], encoding: str) -> Path:
    """Write content to a fresh temp file next to ``file_path`` and return its path."""
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Same directory as the target, so the final rename never crosses filesystems
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise

    return temp_path


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    This ensures the file is never in a partially-written state.
    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)

    Example:
        >>> atomic_write('packages.db', '[]')
    """
    file_path = Path(file_path)
    temp_path = _write_temp(file_path, content, encoding)

    try:
        # Atomic rename (replaces destination if it exists)
        temp_path.replace(file_path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


def atomic_create(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> bool:
    """
    Create a file with the given content only if it does not exist yet.

    The complete content is written to a temp file first and then hard-linked
    into place, so the destination either does not exist or is complete. An
    existing file is never touched, even if it was created concurrently.

    Args:
        file_path: Path to create
        content: Initial content (string or bytes)
        encoding: Text encoding (used only for string content)

    Returns:
        True if this call created the file, False if it already existed
    """
    file_path = Path(file_path)
    temp_path = _write_temp(file_path, content, encoding)

    try:
        os.link(temp_path, file_path)
        return True
    except FileExistsError:
        logger.debug(f"File already exists, not creating: {file_path}")
        return False
    finally:
        temp_path.unlink(missing_ok=True)


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        prefix = Path(require_prefix).resolve()
        if not path.is_relative_to(prefix):
            raise ValueError(f"Refusing to delete {path}: not under {prefix}")

    if not path.exists():
        return

    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory {path}: {e}") from e
