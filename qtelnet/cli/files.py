"""Output file handling for decoded telnet captures."""

from __future__ import annotations

from collections.abc import Iterable
from csv import DictWriter as CSVWriter
from dataclasses import dataclass
from json import dump as json_dump
from typing import TYPE_CHECKING, Literal

from openpyxl.workbook import Workbook as OpenPyXLWorkbook

if TYPE_CHECKING:
    from pathlib import Path

    from qtelnet.types import JSON_TYPE

type OutputFormat = Literal["csv", "json", "plain", "xlsx"]


@dataclass(slots=True)
class FileWriter:
    """Write a list of records to a file in various formats."""

    path: Path
    type: OutputFormat
    data: list[dict[str, JSON_TYPE]]

    def __post_init__(self) -> None:
        """Write the records as soon as the writer is created.

        Raises:
            ValueError: If the file type is invalid.
        """
        match self.type:
            case "csv":
                self._write_csv()
            case "json":
                self._write_json()
            case "plain":
                self._write_plain()
            case "xlsx":
                self._write_xlsx()
            case _:
                msg = f"Invalid file type: {self.type}"
                raise ValueError(msg)

    @property
    def _headers(self) -> list[str]:
        """Column names in first-seen order across all records."""
        headers: dict[str, None] = {}
        for row in self.data:
            headers.update(dict.fromkeys(row))
        return list(headers)

    def _write_csv(self) -> None:
        """Write data to a CSV file."""
        with self.path.open("w", newline="", encoding="utf-8") as handle:
            writer = CSVWriter(handle, fieldnames=self._headers)
            writer.writeheader()
            writer.writerows(self.data)

    def _write_json(self) -> None:
        """Write data to a JSON file."""
        with self.path.open("w", encoding="utf-8") as handle:
            json_dump(self.data, handle, indent=2)

    def _write_plain(self) -> None:
        """Write one record per line as space separated ``key=value`` pairs."""
        lines = [" ".join(f"{key}={value}" for key, value in row.items()) for row in self.data]
        self.path.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")

    def _write_xlsx(self) -> None:
        """Write data to an Excel XLSX file.

        Raises:
            ValueError: If the data is empty.
        """
        if not self.data:
            msg = "No data to write to file"
            raise ValueError(msg)
        workbook = OpenPyXLWorkbook()
        worksheet = workbook.active
        headers = self._headers
        [worksheet.cell(row=1, column=col_idx, value=header) for col_idx, header in enumerate(headers, 1)]
        for row_idx, row_data in enumerate(self.data, 2):
            for col_idx, key in enumerate(headers, 1):
                value = row_data.get(key)
                # Cells only hold scalars
                if isinstance(value, Iterable) and not isinstance(value, str):
                    value = " ".join(str(item) for item in value)
                worksheet.cell(row=row_idx, column=col_idx, value=value)
        workbook.save(self.path)
