"""
Row sources that feed experiments.

This module handles:
- Listing and describing tables
- Loading rows from .jsonl, .json and .csv files
- Rendering row values as text
"""

from fieldsweep.ingestion.rows import (
    ColumnInfo,
    FileRowSource,
    InMemoryRowSource,
    Row,
    RowSource,
    RowValue,
    TableInfo,
    describe_rows,
    is_missing,
    load_rows,
    value_to_text,
)

__all__ = [
    "ColumnInfo",
    "FileRowSource",
    "InMemoryRowSource",
    "Row",
    "RowSource",
    "RowValue",
    "TableInfo",
    "describe_rows",
    "is_missing",
    "load_rows",
    "value_to_text",
]
