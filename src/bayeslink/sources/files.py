"""File-backed data sources: CSV and JSON Lines."""

from __future__ import annotations

import csv
import json
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from bayeslink.errors import ConfigurationError
from bayeslink.models.records import Record

__all__ = ["CsvDataSource", "JsonlDataSource"]


def _existing_file(path: str | Path) -> Path:
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigurationError(f"Data source file not found: {file_path}")
    return file_path


class CsvDataSource:
    """Reads records from a CSV file with a header row.

    Attributes
    ----------
    path : Path
        CSV file.
    columns : dict[str, str] | None
        Column name → property name. None maps every column to the
        property of the same name.
    identity : list[str]
        Identity property names; their values form record ids.
    separator : str | None
        Splits a cell into several values (e.g. ";" for multiple emails).
    delimiter : str
        CSV field delimiter.
    """

    def __init__(
        self,
        path: str | Path,
        identity: Iterable[str],
        columns: Mapping[str, str] | None = None,
        separator: str | None = None,
        delimiter: str = ",",
        encoding: str = "utf-8",
    ) -> None:
        self.path = _existing_file(path)
        self.name = self.path.name
        self.identity = list(identity)
        self.columns = dict(columns) if columns is not None else None
        self.separator = separator
        self.delimiter = delimiter
        self.encoding = encoding

    def _cell_values(self, cell: str | None) -> list[str]:
        if cell is None:
            return []
        parts = cell.split(self.separator) if self.separator else [cell]
        return [p.strip() for p in parts if p.strip()]

    def records(self) -> Iterator[Record]:
        with self.path.open("r", encoding=self.encoding, newline="") as fh:
            for row in csv.DictReader(fh, delimiter=self.delimiter):
                data: dict[str, list[str]] = {}
                for column, cell in row.items():
                    if column is None:
                        continue
                    prop = self.columns.get(column) if self.columns is not None else column
                    if prop is None:
                        continue
                    data.setdefault(prop, []).extend(self._cell_values(cell))
                yield Record.from_mapping(data, self.identity)


class JsonlDataSource:
    """Reads records from a JSON Lines file, one object per line.

    Object keys are property names; values may be scalars or lists.
    A line that is not a JSON object yields an id-less record carrying the
    line number and the reason, which the linkage processor reports and
    skips.
    """

    def __init__(self, path: str | Path, identity: Iterable[str], encoding: str = "utf-8") -> None:
        self.path = _existing_file(path)
        self.name = self.path.name
        self.identity = list(identity)
        self.encoding = encoding

    def records(self) -> Iterator[Record]:
        with self.path.open("r", encoding=self.encoding) as fh:
            for lineno, line in enumerate(fh, start=1):
                if not line.strip():
                    continue
                try:
                    data: Any = json.loads(line)
                except json.JSONDecodeError as e:
                    yield Record(rid="", errors=(f"{self.name} line {lineno}: invalid JSON: {e}",))
                    continue
                if not isinstance(data, dict):
                    problem = f"expected a JSON object, got {type(data).__name__}"
                    yield Record(rid="", errors=(f"{self.name} line {lineno}: {problem}",))
                    continue
                yield Record.from_mapping(data, self.identity)
