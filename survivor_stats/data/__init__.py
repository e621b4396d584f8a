"""Tabular ingestion: parsing, coercion, record resolution and validation."""

from .loader import DataLoader
from .normalize import clean_cell, normalize_faction, normalize_key
from .records import MatchRow, RosterRecord, match_rows, roster_records
from .tabular import MalformedInputError, Table, coerce_number, detect_delimiter, parse_delimited, read_table

__all__ = [
    "DataLoader",
    "MalformedInputError",
    "MatchRow",
    "RosterRecord",
    "Table",
    "clean_cell",
    "coerce_number",
    "detect_delimiter",
    "match_rows",
    "normalize_faction",
    "normalize_key",
    "parse_delimited",
    "read_table",
    "roster_records",
]
