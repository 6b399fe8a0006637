"""
Unit tests for the directory-based package database.
"""

import json
import pytest
from unittest.mock import patch

from pkgdbkit.core.exceptions import (
    DatabaseCorruptError,
    DatabaseMissingError,
    DatabaseWriteError,
)
from pkgdbkit.core.filesystem import FilesystemError
from pkgdbkit.db.base import MaybeInitDB
from pkgdbkit.db.directory import POINTER_FILE, DirectoryDB, directory_db
from pkgdbkit.packages.model import PackageRecord


@pytest.fixture
def db(tmp_path):
    return DirectoryDB(tmp_path / "packages.d")


class TestInitialization:
    """Test creating a directory database on first read."""

    def test_init_creates_one_generation(self, db):
        """Test INIT creates the pointer and exactly one empty generation."""
        assert db.read(MaybeInitDB.INIT) == []

        assert db.pointer.exists()
        assert len(db.generations()) == 1
        assert db.pointer.read_text(encoding="utf-8") == db.generations()[0]

    def test_init_idempotent(self, db):
        """Test repeated INIT reads do not add generations."""
        db.read(MaybeInitDB.INIT)
        db.read(MaybeInitDB.INIT)

        assert len(db.generations()) == 1

    def test_dont_init_missing(self, db):
        """Test DONT_INIT on a missing database creates nothing."""
        with pytest.raises(DatabaseMissingError):
            db.read(MaybeInitDB.DONT_INIT)

        assert not db.root.exists()

    def test_lost_creation_race_cleans_up(self, db, sample_records):
        """Test a database created concurrently is kept and our generation removed."""

        def create_first(path, content):
            DirectoryDB(db.root).write(sample_records)
            return False

        with patch("pkgdbkit.db.directory.atomic_create", side_effect=create_first):
            assert db.read(MaybeInitDB.INIT) == sample_records

        assert len(db.generations()) == 1


class TestReadWrite:
    """Test reading and replacing records."""

    def test_order_preserved(self, db, sample_records):
        """Test records come back in the order written."""
        reordered = [sample_records[2], sample_records[0], sample_records[1]]
        db.write(reordered)

        assert [p.id for p in db.read(MaybeInitDB.DONT_INIT)] == ["3", "1", "2"]

    def test_many_records_sorted_numerically(self, db):
        """Test ordering holds past the first few records."""
        records = [
            PackageRecord(id=f"p{i}", name=f"p{i}", version="1.0") for i in range(12)
        ]
        db.write(records)

        assert db.read(MaybeInitDB.DONT_INIT) == records

    def test_payload_preserved(self, db, foo_record):
        """Test every field survives the per-file encoding."""
        db.write([foo_record])

        assert db.read(MaybeInitDB.DONT_INIT)[0].to_dict() == foo_record.to_dict()

    def test_ids_with_separators(self, db):
        """Test ids that are not valid file names are stored safely."""
        record = PackageRecord(id="foo/1.0:abc", name="foo", version="1.0")
        db.write([record])

        assert db.read(MaybeInitDB.DONT_INIT)[0].id == "foo/1.0:abc"

    def test_write_replaces_generation(self, db, sample_records):
        """Test the previous generation is removed after a write."""
        db.write(sample_records)
        first = db.generations()

        db.write(sample_records[:1])

        assert len(db.generations()) == 1
        assert db.generations() != first
        assert db.read(MaybeInitDB.DONT_INIT) == sample_records[:1]

    def test_failed_pointer_switch_keeps_old_content(self, db, sample_records):
        """Test a failed pointer update leaves readers on the old generation."""
        db.write(sample_records)

        with patch(
            "pkgdbkit.db.directory.atomic_write", side_effect=OSError("disk full")
        ):
            with pytest.raises(DatabaseWriteError):
                db.write([])

        assert db.read(MaybeInitDB.DONT_INIT) == sample_records
        assert len(db.generations()) == 1

    def test_interrupted_pointer_switch_leaves_no_generation(
        self, db, sample_records
    ):
        """Test an interrupt during the switch removes the unused generation."""
        db.write(sample_records)

        with patch(
            "pkgdbkit.db.directory.atomic_write", side_effect=KeyboardInterrupt
        ):
            with pytest.raises(KeyboardInterrupt):
                db.write([])

        assert len(db.generations()) == 1
        db.write(sample_records[:1])

        assert len(db.generations()) == 1
        assert db.read(MaybeInitDB.DONT_INIT) == sample_records[:1]

    def test_interrupted_build_leaves_no_generation(self, db, sample_records):
        """Test an interrupt while writing record files removes them."""
        db.write(sample_records)

        with patch("pathlib.Path.write_text", side_effect=KeyboardInterrupt):
            with pytest.raises(KeyboardInterrupt):
                db.write(sample_records[:2])

        assert len(db.generations()) == 1
        assert db.read(MaybeInitDB.DONT_INIT) == sample_records

    def test_old_generation_cleanup_failure_not_fatal(self, db, sample_records):
        """Test a write succeeds even if the old generation can't be removed."""
        db.write(sample_records)

        with patch(
            "pkgdbkit.db.directory.safe_rmtree", side_effect=FilesystemError("busy")
        ):
            db.write(sample_records[:2])

        assert db.read(MaybeInitDB.DONT_INIT) == sample_records[:2]


class TestCorruption:
    """Test damaged databases."""

    def test_bad_pointer(self, db):
        """Test a pointer that names no generation."""
        db.root.mkdir(parents=True)
        db.pointer.write_text("../../etc", encoding="utf-8")

        with pytest.raises(DatabaseCorruptError):
            db.read(MaybeInitDB.DONT_INIT)

    def test_bad_record_file(self, db, sample_records):
        """Test an unparseable record file."""
        db.write(sample_records)
        generation = db.root / db.generations()[0]
        next(generation.iterdir()).write_text("{", encoding="utf-8")

        with pytest.raises(DatabaseCorruptError):
            db.read(MaybeInitDB.DONT_INIT)

    def test_invalid_record(self, db, sample_records):
        """Test a record file missing required fields."""
        db.write(sample_records[:1])
        generation = db.root / db.generations()[0]
        next(generation.iterdir()).write_text(
            json.dumps({"id": "1"}), encoding="utf-8"
        )

        with pytest.raises(DatabaseCorruptError):
            db.read(MaybeInitDB.DONT_INIT)

    def test_generation_keeps_disappearing(self, db):
        """Test the pointer naming a generation that never appears."""
        db.root.mkdir(parents=True)
        db.pointer.write_text("gen-gone", encoding="utf-8")

        with pytest.raises(DatabaseCorruptError, match="disappearing"):
            db.read(MaybeInitDB.DONT_INIT)


class TestDirectoryDbFactory:
    """Test directory_db()."""

    def test_named_subclass(self, tmp_path):
        """Test name, global handle and lock path."""
        MyDB = directory_db("mycompiler", global_path=tmp_path / "global.d")

        assert MyDB.db_name() == "mycompiler"
        assert MyDB.global_db().root == tmp_path / "global.d"
        assert MyDB.global_db().lock_path == tmp_path / "global.d" / ".lock"
        assert POINTER_FILE == "CURRENT"
