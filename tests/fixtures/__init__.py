"""Test fixtures for pkgdbkit tests.

This package provides reusable pytest fixtures for testing pkgdbkit components.
Fixtures are organized by type:

- records: Package records (single builds, multi-version sets)
- databases: Backend classes, database locations and locators

Import fixtures in your tests using:
    from tests.fixtures.records import sample_records
    from tests.fixtures.databases import any_db_type
"""

__all__ = [
    "records",
    "databases",
]
