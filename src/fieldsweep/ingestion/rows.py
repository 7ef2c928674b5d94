"""
Row sources for experiments.

A row source is anything that can list tables, describe their columns and
return a table's rows as a fully materialised list. Two implementations:

- FileRowSource: every .jsonl, .json or .csv file in a directory is a table
- InMemoryRowSource: tables held in a dict (tests, notebooks, callers that
  already have their rows)

Rows are plain mappings from field name to value. Values stay in their
source type; value_to_text() renders them when a string is needed.

Usage:
    from fieldsweep.ingestion.rows import FileRowSource

    source = FileRowSource(Path("data"))
    print(source.list_tables())
    rows = source.get_rows("questions")
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import pandas as pd

from fieldsweep.errors import UnknownTableError
from fieldsweep.logging import get_logger

logger = get_logger(__name__, component="rows")

RowValue = str | int | float | bool | None | dict[str, Any] | list[Any]
Row = Mapping[str, RowValue]

TABLE_SUFFIXES = (".jsonl", ".json", ".csv")


def value_to_text(value: RowValue) -> str:
    """
    Render a row value as text for embedding and scoring.

    None becomes the empty string, booleans are lower-cased, structured
    values are dumped as compact JSON with sorted keys so the same value
    always produces the same text.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def is_missing(row: Row, field_name: str) -> bool:
    """A field is missing when the key is absent or its value is None."""
    return row.get(field_name) is None


def infer_type(value: RowValue) -> str:
    """Name the type of a row value the way a schema listing would."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "text"
    if isinstance(value, list):
        return "array"
    return "object"


@dataclass
class ColumnInfo:
    """One column of a table, with the type seen in its values."""
    name: str
    data_type: str
    nullable: bool


@dataclass
class TableInfo:
    """Schema summary of a table."""
    name: str
    columns: list[ColumnInfo] = field(default_factory=list)
    row_count: int = 0

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]


def describe_rows(name: str, rows: list[Row]) -> TableInfo:
    """
    Build a TableInfo from materialised rows.

    Column order follows first appearance across rows. A column whose
    non-null values disagree on type is reported as "mixed".
    """
    types: dict[str, set[str]] = {}
    nullable: dict[str, bool] = {}

    for row in rows:
        for key, value in row.items():
            seen = types.setdefault(key, set())
            if value is None:
                nullable[key] = True
            else:
                seen.add(infer_type(value))

    columns = []
    for key, seen in types.items():
        # A column absent from some rows is nullable too
        absent = any(key not in row for row in rows)
        if len(seen) == 1:
            data_type = next(iter(seen))
        elif not seen:
            data_type = "null"
        else:
            data_type = "mixed"
        columns.append(ColumnInfo(
            name=key,
            data_type=data_type,
            nullable=nullable.get(key, False) or absent,
        ))

    return TableInfo(name=name, columns=columns, row_count=len(rows))


class RowSource(Protocol):
    """What the experiment runner needs from a data source."""

    def list_tables(self) -> list[str]:
        ...

    def describe_table(self, name: str) -> TableInfo:
        ...

    def get_rows(self, name: str) -> list[Row]:
        ...


class InMemoryRowSource:
    """Row source backed by a dict of table name to rows."""

    def __init__(self, tables: Mapping[str, list[Row]]):
        self._tables = {name: list(rows) for name, rows in tables.items()}

    def list_tables(self) -> list[str]:
        return sorted(self._tables)

    def describe_table(self, name: str) -> TableInfo:
        return describe_rows(name, self.get_rows(name))

    def get_rows(self, name: str) -> list[Row]:
        if name not in self._tables:
            raise UnknownTableError(f"Table not found: {name}")
        return list(self._tables[name])


class FileRowSource:
    """
    Row source over a directory of table files.

    Each file whose suffix is .jsonl, .json or .csv is a table named after
    its stem. A .json file must hold a list of objects. When two files share
    a stem the first suffix in TABLE_SUFFIXES wins.

    Example:
        source = FileRowSource(Path("data"))
        info = source.describe_table("queries")
        print(info.column_names, info.row_count)
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        logger.debug("file_row_source_initialized", data_dir=str(self.data_dir))

    def _table_path(self, name: str) -> Path:
        for suffix in TABLE_SUFFIXES:
            path = self.data_dir / f"{name}{suffix}"
            if path.is_file():
                return path
        raise UnknownTableError(f"Table not found: {name} (looked in {self.data_dir})")

    def list_tables(self) -> list[str]:
        if not self.data_dir.is_dir():
            logger.warning("data_dir_missing", data_dir=str(self.data_dir))
            return []

        names = {
            path.stem
            for path in self.data_dir.iterdir()
            if path.is_file() and path.suffix in TABLE_SUFFIXES
        }
        return sorted(names)

    def describe_table(self, name: str) -> TableInfo:
        return describe_rows(name, self.get_rows(name))

    def get_rows(self, name: str) -> list[Row]:
        path = self._table_path(name)
        rows = load_rows(path)
        logger.info("rows_loaded", table=name, path=str(path), count=len(rows))
        return rows


def load_rows(path: Path) -> list[Row]:
    """
    Load rows from a .jsonl, .json or .csv file.

    Raises:
        ValueError: If the file has an unsupported suffix or malformed content
    """
    path = Path(path)

    if path.suffix == ".jsonl":
        rows = []
        with open(path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ValueError(f"Error parsing line {line_num} in {path}: {e}") from e
                if not isinstance(data, dict):
                    raise ValueError(f"Line {line_num} in {path} is not an object")
                rows.append(data)
        return rows

    if path.suffix == ".json":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise ValueError(f"{path} must contain a list of objects")
        return data

    if path.suffix == ".csv":
        df = pd.read_csv(path)
        # Empty cells come back as NaN; rows use None for missing values
        df = df.astype(object).where(pd.notna(df), None)
        return df.to_dict(orient="records")

    raise ValueError(f"Unsupported table file: {path}")
