"""
Tests for the package database commands, run through the CLI.
"""

import io
import json
import pytest
from unittest.mock import patch

from pkgdbkit.cli.parser import CLI


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "dbs" / "packages.db"


@pytest.fixture
def record_file(tmp_path):
    def write(package_id, name, version, **extra):
        path = tmp_path / f"{package_id}.json"
        data = {"id": package_id, "name": name, "version": version, **extra}
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    return write


def run(*argv) -> int:
    return CLI().run(list(argv))


class TestInit:
    """Test 'pkgdb init'."""

    def test_creates_db(self, db_path, capsys):
        """Test init creates an empty database."""
        assert run("init", "--package-db", str(db_path)) == 0

        assert json.loads(db_path.read_text(encoding="utf-8")) == []
        assert "Package database ready" in capsys.readouterr().out

    def test_user_db_by_default(self, isolated_user_dir):
        """Test init without flags creates the user database."""
        assert run("init") == 0

        assert (isolated_user_dir / "packages.db").exists()

    def test_no_global(self, capsys):
        """Test init of an unconfigured global database fails."""
        assert run("init", "--global") == 1

        assert "No global package database" in capsys.readouterr().err


class TestRegisterAndList:
    """Test 'pkgdb register' and 'pkgdb list'."""

    def test_register_then_list(self, db_path, record_file, capsys):
        """Test registered ids are listed."""
        foo = record_file("foo-1.0-a", "foo", "1.0")
        bar = record_file("bar-2.0-b", "bar", "2.0")
        assert run("register", foo, "--package-db", str(db_path)) == 0
        assert run("register", bar, "--package-db", str(db_path)) == 0
        capsys.readouterr()

        assert run("list", "--package-db", str(db_path)) == 0

        assert capsys.readouterr().out.splitlines() == ["foo-1.0-a", "bar-2.0-b"]

    def test_list_long(self, db_path, record_file, capsys):
        """Test --long shows name and version."""
        foo = record_file("foo-1.0-a", "foo", "1.0")
        run("register", foo, "--package-db", str(db_path))
        capsys.readouterr()

        run("list", "--long", "--package-db", str(db_path))

        assert capsys.readouterr().out.strip() == "foo-1.0-a  foo-1.0"

    def test_list_missing_db(self, db_path, capsys):
        """Test listing a missing database prints nothing and creates nothing."""
        assert run("list", "--package-db", str(db_path)) == 0

        assert capsys.readouterr().out == ""
        assert not db_path.exists()

    def test_register_from_stdin(self, db_path, capsys):
        """Test "-" reads the record from standard input."""
        record = json.dumps({"id": "x-1-a", "name": "x", "version": "1"})

        with patch("sys.stdin", io.StringIO(record)):
            assert run("register", "-", "--package-db", str(db_path)) == 0

        assert "Registered x-1-a" in capsys.readouterr().out

    def test_register_invalid_record(self, db_path, tmp_path, capsys):
        """Test a record without a version is rejected."""
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"id": "x", "name": "x"}), encoding="utf-8")

        assert run("register", str(bad), "--package-db", str(db_path)) == 1

        assert "version" in capsys.readouterr().err
        assert not db_path.exists()

    def test_register_missing_file(self, db_path, tmp_path, capsys):
        """Test an unreadable record file is reported."""
        missing = str(tmp_path / "missing.json")

        assert run("register", missing, "--package-db", str(db_path)) == 1

        assert "Cannot read package record" in capsys.readouterr().err

    def test_register_null_global(self, record_file, capsys):
        """Test registering into an absent global database fails."""
        assert run("register", record_file("x", "x", "1"), "--global") == 1

        assert "null global db" in capsys.readouterr().err

    def test_list_corrupt_db(self, db_path, capsys):
        """Test a corrupt database is an error."""
        db_path.parent.mkdir(parents=True)
        db_path.write_text("not json", encoding="utf-8")

        assert run("list", "--package-db", str(db_path)) == 1

        assert "bad package database" in capsys.readouterr().err

    def test_read_error_reported_once(self, db_path, capsys):
        """Test an unreadable database produces a single error line."""
        db_path.parent.mkdir(parents=True)
        db_path.write_text("[]", encoding="utf-8")

        with patch(
            "pathlib.Path.read_bytes", side_effect=PermissionError("denied")
        ):
            assert run("list", "--package-db", str(db_path)) == 1

        err = capsys.readouterr().err
        assert "Failed to read" not in err
        assert err.count("could not be read") == 1
        assert len([line for line in err.splitlines() if "denied" in line]) == 1


class TestUnregister:
    """Test 'pkgdb unregister'."""

    @pytest.fixture
    def populated(self, db_path, record_file):
        for package_id, name, version in [
            ("foo-1.0-a", "foo", "1.0"),
            ("foo-2.0-b", "foo", "2.0"),
            ("bar-1.0-c", "bar", "1.0"),
        ]:
            record = record_file(package_id, name, version)
            run("register", record, "--package-db", str(db_path))
        return db_path

    def test_by_name(self, populated, capsys):
        """Test a bare name removes every version."""
        capsys.readouterr()

        assert run("unregister", "foo", "--package-db", str(populated)) == 0

        out = capsys.readouterr().out
        assert out.splitlines() == ["Packages removed:", "  foo-1.0-a", "  foo-2.0-b"]

    def test_by_name_version(self, populated, capsys):
        """Test name-version removes that version only."""
        run("unregister", "foo-2.0", "--package-db", str(populated))
        capsys.readouterr()

        run("list", "--package-db", str(populated))

        assert capsys.readouterr().out.splitlines() == ["foo-1.0-a", "bar-1.0-c"]

    def test_by_id(self, populated, capsys):
        """Test --id removes a single build."""
        run("unregister", "--id", "bar-1.0-c", "--package-db", str(populated))
        capsys.readouterr()

        run("list", "--package-db", str(populated))

        assert capsys.readouterr().out.splitlines() == ["foo-1.0-a", "foo-2.0-b"]

    def test_nothing_removed(self, populated, capsys):
        """Test no match is reported but is not an error."""
        before = populated.read_bytes()
        capsys.readouterr()

        assert run("unregister", "baz", "--package-db", str(populated)) == 0

        assert "No packages removed" in capsys.readouterr().out
        assert populated.read_bytes() == before

    def test_invalid_selector(self, populated, capsys):
        """Test a selector without a name is rejected."""
        assert run("unregister", "-1.0", "--package-db", str(populated)) == 1

    def test_by_exact_version(self, populated, capsys):
        """Test --version removes that version of NAME only."""
        assert (
            run("unregister", "foo", "--version", "2.0", "--package-db", str(populated))
            == 0
        )
        assert capsys.readouterr().out.splitlines()[-1] == "  foo-2.0-b"

        run("list", "--package-db", str(populated))

        assert capsys.readouterr().out.splitlines() == ["foo-1.0-a", "bar-1.0-c"]

    def test_exact_version_not_dotted_numeric(
        self, populated, record_file, capsys
    ):
        """Test --version reaches versions the NAME-VERSION form cannot."""
        rc = record_file("foo-1.0rc1-d", "foo", "1.0rc1")
        run("register", rc, "--package-db", str(populated))
        capsys.readouterr()

        assert (
            run(
                "unregister", "foo", "--version", "1.0rc1",
                "--package-db", str(populated),
            )
            == 0
        )
        capsys.readouterr()

        run("list", "--package-db", str(populated))

        assert capsys.readouterr().out.splitlines() == [
            "foo-1.0-a",
            "foo-2.0-b",
            "bar-1.0-c",
        ]

    def test_id_and_version_conflict(self, populated, capsys):
        """Test --id cannot be combined with --version."""
        before = populated.read_bytes()
        capsys.readouterr()

        assert (
            run(
                "unregister", "--id", "foo-1.0-a", "--version", "1.0",
                "--package-db", str(populated),
            )
            == 1
        )

        assert "cannot be used together" in capsys.readouterr().err
        assert populated.read_bytes() == before


class TestLookup:
    """Test 'pkgdb lookup'."""

    def test_lookup_across_stack(self, tmp_path, record_file, capsys):
        """Test ids are found in any database of the stack."""
        first = str(tmp_path / "first.db")
        second = str(tmp_path / "second.db")
        run("register", record_file("a", "alpha", "1.0"), "--package-db", first)
        run("register", record_file("b", "beta", "2.0"), "--package-db", second)
        capsys.readouterr()

        code = run("lookup", "b", "a", "--package-db", first, "--package-db", second)

        assert code == 0
        assert capsys.readouterr().out.splitlines() == ["b  beta-2.0", "a  alpha-1.0"]

    def test_lookup_missing(self, db_path, record_file, capsys):
        """Test one unknown id fails the whole lookup."""
        run("register", record_file("a", "alpha", "1.0"), "--package-db", str(db_path))
        capsys.readouterr()

        assert run("lookup", "a", "nope", "--package-db", str(db_path)) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "package not found: nope" in captured.err


class TestConfigFile:
    """Test commands honour --config."""

    def test_directory_backend(self, tmp_path, record_file, capsys):
        """Test the configured backend is used."""
        config = tmp_path / "config.yaml"
        config.write_text("database:\n  backend: directory\n", encoding="utf-8")
        db_dir = tmp_path / "packages.d"

        record = record_file("a", "alpha", "1.0")
        code = run(
            "--config", str(config), "register", record, "--package-db", str(db_dir)
        )

        assert code == 0
        assert (db_dir / "CURRENT").exists()

    def test_user_dir_from_config(self, tmp_path):
        """Test database.user_dir relocates the user database."""
        config = tmp_path / "config.yaml"
        config.write_text(
            f"database:\n  name: mydb\n  user_dir: {tmp_path / 'custom'}\n",
            encoding="utf-8",
        )

        assert run("--config", str(config), "init") == 0

        assert (tmp_path / "custom" / "mydb.db").exists()

    def test_locking_enabled(self, tmp_path, record_file):
        """Test mutating commands run under the lock when enabled."""
        config = tmp_path / "config.yaml"
        config.write_text("locking:\n  enabled: true\n  timeout: 1\n", encoding="utf-8")
        db_path = tmp_path / "packages.db"
        record = record_file("a", "alpha", "1.0")

        with patch("pkgdbkit.registry.operations.database_lock") as lock:
            code = run(
                "--config",
                str(config),
                "register",
                record,
                "--package-db",
                str(db_path),
            )

        assert code == 0
        lock.assert_called_once()
        assert lock.call_args.args[1] == 1.0

    def test_invalid_config(self, tmp_path, capsys):
        """Test a broken config file fails the command."""
        config = tmp_path / "config.yaml"
        config.write_text("database:\n  backend: nope\n", encoding="utf-8")

        assert run("--config", str(config), "list") == 1

        assert "Invalid database backend" in capsys.readouterr().err
