"""
Optional cross-process locking for package databases.

Registry operations do not lock by default: an atomic write guarantees that
readers never observe a half-written database, but two concurrent
read-modify-write operations still race (last writer wins). Callers that need
isolation pass a lock timeout to the mutating registry operations, which then
run inside ``database_lock``.

Usage:
    from pkgdbkit.core.locking import database_lock

    with database_lock(db, timeout=30):
        packages = db.read(MaybeInitDB.INIT)
        db.write(packages + [record])
"""

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from filelock import FileLock, Timeout

from pkgdbkit.core.exceptions import DatabaseLockTimeout

if TYPE_CHECKING:
    from pkgdbkit.db.base import PackageDB

logger = logging.getLogger(__name__)


@contextmanager
def database_lock(db: "PackageDB", timeout: float = 30):
    """
    Hold an exclusive lock on a package database.

    Backends without a local lock file (``db.lock_path is None``) are not
    locked; the block simply runs.

    Args:
        db: Database handle to lock
        timeout: Maximum wait time in seconds

    Yields:
        None

    Raises:
        DatabaseLockTimeout: If the lock can't be acquired within timeout
    """
    lock_path = db.lock_path
    if lock_path is None:
        logger.debug(f"No lock file for {db.location}, running unlocked")
        yield
        return

    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(lock_path, timeout=timeout)

    try:
        lock.acquire()
    except Timeout as e:
        logger.debug(
            f"Could not acquire lock on {db.location} after {timeout}s. "
            "Another process may be modifying this database."
        )
        raise DatabaseLockTimeout(db.location, timeout) from e

    logger.debug(f"Acquired database lock: {lock_path}")
    try:
        yield
    finally:
        lock.release()
        logger.debug(f"Released database lock: {lock_path}")
