"""Tests for the command-line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from collegematch import __version__

from .main import app

runner = CliRunner()


@pytest.fixture
def catalog(tmp_path: Path) -> Path:
    """Write a small JSON catalog."""
    path = tmp_path / "colleges.json"
    path.write_text(
        json.dumps(
            [
                {"id": 1, "name": "A J INSTITUTE OF DENTAL SCIENCES", "city": "Mangalore"},
                {"id": 2, "name": "A.J. INSTITUTE OF DENTAL SCIENCES", "city": "Mangalore"},
                {"id": 3, "name": "BANGALORE MEDICAL COLLEGE", "city": "Bangalore"},
            ]
        )
    )
    return path


def test_version() -> None:
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert f"CollegeMatch v{__version__}" in result.stdout


def test_search_catalog_json(catalog: Path) -> None:
    """Test a file-backed search with JSON output."""
    result = runner.invoke(
        app, ["search", "a.j", "--catalog", str(catalog), "--abbreviation", "--json"]
    )

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert [r["id"] for r in data] == [1, 2]
    assert data[0]["strategies"] == ["exact", "abbreviation"]


def test_search_limit_and_fields(catalog: Path) -> None:
    result = runner.invoke(
        app,
        ["search", "mangalore", "-c", str(catalog), "-f", "city", "-n", "1", "--json"],
    )

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert [r["id"] for r in data] == [1]
    assert data[0]["matched_fields"] == ["city"]


def test_search_table_output(catalog: Path) -> None:
    result = runner.invoke(app, ["search", "*medical*", "-c", str(catalog), "--wildcard"])

    assert result.exit_code == 0
    assert "wildcard" in result.stdout


def test_search_no_matches(catalog: Path) -> None:
    result = runner.invoke(app, ["search", "xyz123nonmatch", "-c", str(catalog)])

    assert result.exit_code == 0
    assert "No matches" in result.stdout


def test_search_missing_catalog(tmp_path: Path) -> None:
    result = runner.invoke(app, ["search", "dental", "-c", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "Error" in result.stdout


def test_search_strict_rejects(catalog: Path) -> None:
    result = runner.invoke(
        app, ["search", "<script>", "-c", str(catalog), "--strict"]
    )

    assert result.exit_code == 1
    assert "disallowed pattern" in result.stdout


def test_load_then_search_db(catalog: Path, tmp_path: Path) -> None:
    """Test seeding the SQLite catalog and searching it."""
    db_path = tmp_path / "catalog.db"

    result = runner.invoke(app, ["load", str(catalog), "--db", str(db_path)])
    assert result.exit_code == 0
    assert "Loaded 3 colleges" in result.stdout

    result = runner.invoke(app, ["search", "medical", "--db", str(db_path), "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert len(data) == 1
    assert data[0]["fields"]["name"] == "BANGALORE MEDICAL COLLEGE"


def test_search_undecodable_catalog(tmp_path: Path) -> None:
    """Test a catalog that is not UTF-8 is reported, not raised."""
    path = tmp_path / "colleges.json"
    path.write_bytes(b'[{"name": "\xff\xfe"}]')

    result = runner.invoke(app, ["search", "dental", "-c", str(path)])

    assert result.exit_code == 1
    assert "Error" in result.stdout


def test_search_duplicate_ids(tmp_path: Path) -> None:
    path = tmp_path / "colleges.json"
    path.write_text(json.dumps([{"name": "ALPHA"}, {"id": 1, "name": "BETA DENTAL"}]))

    result = runner.invoke(app, ["search", "beta", "-c", str(path)])

    assert result.exit_code == 1
    assert "no id" in result.stdout


def test_search_relevance(catalog: Path) -> None:
    result = runner.invoke(
        app, ["search", "medical", "-c", str(catalog), "--relevance", "--json"]
    )

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert [r["id"] for r in data] == [3]
    assert data[0]["strategies"] == ["exact", "token_partial", "relevance"]
