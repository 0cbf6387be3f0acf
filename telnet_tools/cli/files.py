"""File handling modules for CLI tools.

``FileReader`` loads the list of commands to run on a device and ``FileWriter``
saves the captured output, one row per command.
"""

from __future__ import annotations

from csv import DictReader as CSVReader, DictWriter as CSVWriter
from dataclasses import dataclass, field
from json import dump as json_dump, loads as json_loads
from typing import TYPE_CHECKING, Literal

from openpyxl import load_workbook as openpyxl_load_workbook
from openpyxl.workbook import Workbook as OpenPyXLWorkbook

if TYPE_CHECKING:
    from pathlib import Path

    from telnet_tools.types import JSON_TYPE


@dataclass(slots=True)
class FileReader:
    """Read a list of commands from a file."""

    path: Path
    type: Literal["csv", "json", "txt", "xlsx"]
    data: list[str] = field(init=False)

    def __post_init__(self) -> None:
        """Initialise the file reader.

        Raises:
            ValueError: If the file type is invalid.
        """
        match self.type:
            case "csv":
                self._read_csv()
            case "json":
                self._read_json()
            case "txt":
                self._read_txt()
            case "xlsx":
                self._read_xlsx()
            case _:
                msg = f"Invalid file type: {self.type}"
                raise ValueError(msg)

    def _read_txt(self) -> None:
        """Read one command per line, skipping blanks and # comments."""
        lines = (line.strip() for line in self.path.read_text().splitlines())
        self.data = [line for line in lines if line and not line.startswith("#")]

    def _read_csv(self) -> None:
        """Read the "command" column of a CSV file."""
        rows = CSVReader(self.path.read_text().splitlines())
        self.data = [row["command"] for row in rows if row.get("command")]

    def _read_json(self) -> None:
        """Read a JSON list of commands, or of objects with a "command" key.

        Raises:
            ValueError: If the document is not a list.
        """
        content = json_loads(self.path.read_text())
        if not isinstance(content, list):
            msg = f"Expected a JSON list of commands in {self.path}"
            raise ValueError(msg)
        self.data = [item["command"] if isinstance(item, dict) else str(item) for item in content]

    def _read_xlsx(self) -> None:
        """Read the "command" column of the active worksheet."""
        worksheet = openpyxl_load_workbook(filename=self.path, data_only=True, read_only=True).active
        rows = worksheet.iter_rows(values_only=True)
        headers = [str(value).lower() for value in next(rows)]
        column = headers.index("command")
        self.data = [str(row[column]) for row in rows if row[column]]


@dataclass(slots=True)
class FileWriter:
    """Write command results to a file in various formats."""

    path: Path
    type: Literal["csv", "json", "plain", "xlsx"]
    data: list[dict[str, JSON_TYPE]]

    def __post_init__(self) -> None:
        """Initialise the file writer.

        Raises:
            ValueError: If the file type is invalid or there is nothing to write.
        """
        if not self.data:
            msg = "No data to write to file"
            raise ValueError(msg)
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

    def _write_csv(self) -> None:
        """Write data to a CSV file."""
        with self.path.open("w", newline="") as csv_file:
            writer = CSVWriter(csv_file, fieldnames=list(self.data[0].keys()))
            writer.writeheader()
            writer.writerows(self.data)

    def _write_json(self) -> None:
        """Write data to a JSON file."""
        with self.path.open("w") as json_file:
            json_dump(self.data, json_file, indent=2)

    def _write_plain(self) -> None:
        """Write each result as "key: value" lines, separated by blank lines."""
        blocks = ("\n".join(f"{key}: {value}" for key, value in row.items()) for row in self.data)
        self.path.write_text("\n\n".join(blocks) + "\n")

    def _write_xlsx(self) -> None:
        """Write data to an Excel XLSX file, keys as the header row."""
        workbook = OpenPyXLWorkbook()
        worksheet = workbook.active
        headers = list(self.data[0].keys())
        worksheet.append(headers)
        for row in self.data:
            worksheet.append([row.get(header) for header in headers])
        workbook.save(self.path)
