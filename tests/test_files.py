"""Unit tests for the CLI file handling module."""

from __future__ import annotations

import json
from csv import DictReader
from typing import TYPE_CHECKING

import pytest
from openpyxl import load_workbook

from qtelnet.cli.files import FileWriter

if TYPE_CHECKING:
    from pathlib import Path

    from qtelnet.types import JSON_TYPE


@pytest.fixture
def test_records() -> list[dict[str, JSON_TYPE]]:
    """Fixture providing decoded event records."""
    return [
        {"kind": "data", "option": None, "value": 5, "detail": "login"},
        {"kind": "option", "option": 1, "value": True, "detail": "1 ECHO (theirs)"},
        {"kind": "sent", "option": 1, "value": "ff fd 01", "detail": "DO 1 ECHO"},
    ]


def test_file_writer_csv(tmp_path: Path, test_records: list[dict[str, JSON_TYPE]]) -> None:
    """Test FileWriter with CSV output."""
    output_path = tmp_path / "events.csv"
    FileWriter(path=output_path, type="csv", data=test_records)

    with output_path.open(newline="", encoding="utf-8") as handle:
        rows = list(DictReader(handle))
    if [row["kind"] for row in rows] != ["data", "option", "sent"]:
        pytest.fail(f"CSV rows out of order: {rows!r}")
    if rows[0]["option"] != "" or rows[2]["value"] != "ff fd 01":
        pytest.fail(f"CSV values mismatch: {rows!r}")


def test_file_writer_csv_headers_first_seen(tmp_path: Path) -> None:
    """Test that CSV columns cover every key in first-seen order."""
    output_path = tmp_path / "mixed.csv"
    FileWriter(path=output_path, type="csv", data=[{"kind": "data"}, {"kind": "sent", "option": 3}])

    header = output_path.read_text(encoding="utf-8").splitlines()[0]
    if header != "kind,option":
        pytest.fail(f"Expected header 'kind,option', got {header!r}")


def test_file_writer_json(tmp_path: Path, test_records: list[dict[str, JSON_TYPE]]) -> None:
    """Test FileWriter with JSON output."""
    output_path = tmp_path / "events.json"
    FileWriter(path=output_path, type="json", data=test_records)

    written = json.loads(output_path.read_text(encoding="utf-8"))
    if written != test_records:
        pytest.fail(f"JSON data mismatch.\nExpected: {test_records}\nGot: {written}")


def test_file_writer_plain(tmp_path: Path, test_records: list[dict[str, JSON_TYPE]]) -> None:
    """Test FileWriter with plain text output."""
    output_path = tmp_path / "events.txt"
    FileWriter(path=output_path, type="plain", data=test_records)

    lines = output_path.read_text(encoding="utf-8").splitlines()
    expected = "kind=option option=1 value=True detail=1 ECHO (theirs)"
    if len(lines) != len(test_records) or lines[1] != expected:
        pytest.fail(f"Plain text mismatch.\nExpected line: {expected!r}\nGot: {lines!r}")


def test_file_writer_plain_empty(tmp_path: Path) -> None:
    """Test that an empty capture gives an empty plain text file."""
    output_path = tmp_path / "empty.txt"
    FileWriter(path=output_path, type="plain", data=[])

    if output_path.read_text(encoding="utf-8"):
        pytest.fail("Expected an empty file")


def test_file_writer_xlsx(tmp_path: Path, test_records: list[dict[str, JSON_TYPE]]) -> None:
    """Test FileWriter with XLSX output."""
    output_path = tmp_path / "events.xlsx"
    FileWriter(path=output_path, type="xlsx", data=[*test_records, {"kind": "data", "value": ["a", "b"]}])

    worksheet = load_workbook(output_path).active
    rows = list(worksheet.iter_rows(values_only=True))
    if rows[0] != ("kind", "option", "value", "detail"):
        pytest.fail(f"Unexpected header row: {rows[0]!r}")
    if rows[2] != ("option", 1, True, "1 ECHO (theirs)"):
        pytest.fail(f"Unexpected option row: {rows[2]!r}")
    if rows[4][2] != "a b":
        pytest.fail(f"Lists should be joined into one cell, got {rows[4][2]!r}")


def test_file_writer_xlsx_empty_data(tmp_path: Path) -> None:
    """Test FileWriter with empty data for XLSX."""
    with pytest.raises(ValueError, match="No data to write to file"):
        FileWriter(path=tmp_path / "empty.xlsx", type="xlsx", data=[])


def test_file_writer_invalid_type(tmp_path: Path) -> None:
    """Test FileWriter with an invalid file type."""
    with pytest.raises(ValueError, match="Invalid file type: invalid"):
        FileWriter(path=tmp_path / "output.txt", type="invalid", data=[])  # type: ignore[arg-type]
