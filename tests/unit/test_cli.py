"""Tests for CLI commands."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from entigen.cli import app


@pytest.fixture
def cli_runner():
    """Return a CLI test runner."""
    return CliRunner()


@pytest.fixture
def test_project(tmp_path: Path, stamps_source: str):
    """Create a temporary project with a DSL file and a manifest."""
    (tmp_path / "stamps.model").write_text(stamps_source)
    (tmp_path / "entigen.toml").write_text(
        """
[project]
name = "Collection"
source = "stamps.model"
backend = "sqlite"
output = "out"
"""
    )
    return tmp_path


def test_version(cli_runner: CliRunner):
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.startswith("entigen version ")


def test_build_from_source(cli_runner: CliRunner, test_project: Path):
    """Model name defaults to the capitalised file stem."""
    output = test_project / "generated"
    result = cli_runner.invoke(
        app, ["build", str(test_project / "stamps.model"), "-o", str(output)]
    )
    assert result.exit_code == 0, result.output
    assert "Generated 4 files for Stamps" in result.output

    package = output / "stamps"
    assert sorted(p.name for p in package.iterdir()) == [
        "__init__.py",
        "database.py",
        "models.py",
        "serialization.py",
    ]
    assert "class StampsDatabase:" in (package / "database.py").read_text()


def test_build_from_manifest(cli_runner: CliRunner, test_project: Path):
    result = cli_runner.invoke(app, ["build", "-m", str(test_project / "entigen.toml")])
    assert result.exit_code == 0, result.output

    database = (test_project / "out" / "collection" / "database.py").read_text()
    assert "class CollectionDatabase:" in database
    assert "import sqlite3" in database


def test_build_options_override_manifest(cli_runner: CliRunner, test_project: Path):
    result = cli_runner.invoke(
        app, ["build", "-m", str(test_project / "entigen.toml"), "-b", "memory", "-n", "Album"]
    )
    assert result.exit_code == 0, result.output

    database = (test_project / "out" / "album" / "database.py").read_text()
    assert "import sqlite3" not in database
    assert "class AlbumDatabase:" in database


def test_build_missing_manifest(cli_runner: CliRunner, tmp_path: Path):
    result = cli_runner.invoke(app, ["build", "-m", str(tmp_path / "entigen.toml")])
    assert result.exit_code == 1
    assert "Manifest not found" in result.output


def test_build_unknown_backend(cli_runner: CliRunner, test_project: Path):
    result = cli_runner.invoke(
        app, ["build", str(test_project / "stamps.model"), "-b", "oracle"]
    )
    assert result.exit_code == 1
    assert "Backend 'oracle' not found" in result.output


def test_build_compile_error(cli_runner: CliRunner, tmp_path: Path):
    source = tmp_path / "broken.model"
    source.write_text("entity User {\n    name: Strin;\n}\n")

    result = cli_runner.invoke(app, ["build", str(source), "-o", str(tmp_path / "out")])
    assert result.exit_code == 1
    assert "Compile error: line 2" in result.output
    assert not (tmp_path / "out").exists()


def test_build_reports_generation_errors(cli_runner: CliRunner, tmp_path: Path):
    source = tmp_path / "shop.model"
    source.write_text("entity Order { class: String; }\nentity Customer { name: String; }\n")

    result = cli_runner.invoke(app, ["build", str(source), "-o", str(tmp_path / "out")])
    assert result.exit_code == 1
    assert "Order:" in result.output
    assert "class Customer:" in (tmp_path / "out" / "shop" / "models.py").read_text()


def test_check(cli_runner: CliRunner, test_project: Path):
    result = cli_runner.invoke(app, ["check", str(test_project / "stamps.model")])
    assert result.exit_code == 0, result.output
    assert "OK 5 entities, 2 enums" in result.output


def test_check_missing_file(cli_runner: CliRunner, tmp_path: Path):
    result = cli_runner.invoke(app, ["check", str(tmp_path / "nope.model")])
    assert result.exit_code == 1
    assert "cannot read" in result.output


def test_inspect_entity(cli_runner: CliRunner, test_project: Path):
    result = cli_runner.invoke(
        app, ["inspect", str(test_project / "stamps.model"), "-e", "User"]
    )
    assert result.exit_code == 0, result.output
    assert "GetItemsOfUser" in result.output
    assert "GetProfileOfUser" in result.output


def test_inspect_unknown_entity(cli_runner: CliRunner, test_project: Path):
    result = cli_runner.invoke(
        app, ["inspect", str(test_project / "stamps.model"), "-e", "Ghost"]
    )
    assert result.exit_code == 1
    assert "unknown entity Ghost" in result.output


def test_backends(cli_runner: CliRunner):
    result = cli_runner.invoke(app, ["backends"])
    assert result.exit_code == 0
    assert "memory" in result.output
    assert "sqlite" in result.output
