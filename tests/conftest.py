"""
Pytest configuration and shared fixtures for pkgdbkit tests.
"""

import pytest

from pkgdbkit.core.directory import USER_DIR_ENV, clear_user_dir_cache
from pkgdbkit.config.parser import CONFIG_ENV

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.records import (
    foo_record,
    sample_records,
)
from tests.fixtures.databases import (
    any_db_type,
    db_location,
    user_dir,
    locator,
)


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_user_dir(tmp_path, monkeypatch):
    """
    Keep every test away from the real per-user directory.

    Points ``PKGDBKIT_USER_DIR`` at a temp directory and forgets any user
    directory memoized by an earlier test.
    """
    home = tmp_path / "home" / ".pkgdbkit"
    monkeypatch.setenv(USER_DIR_ENV, str(home))
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    clear_user_dir_cache()
    yield home
    clear_user_dir_cache()
