"""Delimited-text parsing with permissive numeric coercion.

Handles the exports the season is tracked from: spreadsheet dumps that may be
tab-, comma- or semicolon-delimited, may carry a BOM or blank leading rows,
and write numbers as ``"1.234,5"``, ``"$12"``, ``"45%"`` or plain ``"0.45"``.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .normalize import clean_cell, normalize_key

logger = logging.getLogger(__name__)

DELIMITERS = ("\t", ",", ";")

_MISSING_TOKENS = {"", "-", "na", "n/a", "nan", "none", "null"}
_CURRENCY_RE = re.compile(r"[$€£¥]")
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_THOUSANDS_COMMA_RE = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d+)?$")
_THOUSANDS_DOT_RE = re.compile(r"^[+-]?\d{1,3}(\.\d{3})+(,\d+)?$")

# Columns whose values are fractions in [0, 1] but are often exported as
# 0-100 percentages without a trailing "%".
RATIO_COLUMNS = {
    "win_pct",
    "winpct",
    "win_percentage",
    "win_percent",
    "arrive_first_pct",
    "arrivefirst_pct",
    "choke_rate",
    "chokerate",
    "chokerate_whenarrivedfirst",
    "tiebreak_win_pct",
}
_RATIO_SUFFIXES = ("_pct", "_rate", "_ratio", "percentage", "percent")


class MalformedInputError(ValueError):
    """A required table is absent or has no parseable header."""


@dataclass
class Table:
    """A parsed delimited table with normalized header keys."""

    headers: List[str]
    rows: List[Dict[str, str]] = field(default_factory=list)
    delimiter: str = ","
    source: Optional[str] = None
    raw_headers: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def has_any(self, keys: Iterable[str]) -> bool:
        """True when at least one of ``keys`` is a column of this table."""
        present = set(self.headers)
        return any(k in present for k in keys)


def detect_delimiter(header_line: str) -> str:
    """Pick the delimiter among tab/comma/semicolon by occurrence count.

    Semicolon wins ties over tab, tab wins ties over comma, and comma is the
    default when none of the three occur.
    """
    line = header_line or ""
    comma = line.count(",")
    semi = line.count(";")
    tab = line.count("\t")

    if semi > 0 and semi >= comma and semi >= tab:
        return ";"
    if tab > 0 and tab >= comma and tab >= semi:
        return "\t"
    return ","


_FILLER_CHARS = ",;\t"


def _is_filler(value: str) -> bool:
    """True for text made only of whitespace, BOMs and delimiter characters."""
    return clean_cell(value).strip(_FILLER_CHARS).strip() == ""


def _first_meaningful_line(text: str) -> str:
    for line in text.splitlines():
        if not _is_filler(line):
            return line
    return ""


def _is_blank_row(cells: List[str]) -> bool:
    return all(_is_filler(c) for c in cells)


def split_rows(text: str, delimiter: Optional[str] = None, source: Optional[str] = None) -> Tuple[List[List[str]], str]:
    """Split delimited text into raw non-blank rows.

    Quoted fields may contain the delimiter, line breaks, and doubled quotes
    (``""`` → ``"``). Rows made only of blanks and delimiters are skipped.

    Returns:
        ``(rows, delimiter)``

    Raises:
        MalformedInputError: if the text has no non-blank row.
    """
    text = (text or "").lstrip("\ufeff")
    first_line = _first_meaningful_line(text)
    if not first_line:
        raise MalformedInputError(f"{source or 'table'} has no header row")

    delim = delimiter or detect_delimiter(first_line)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delim, quotechar='"', doublequote=True)

    try:
        parsed = [row for row in reader if row and not _is_blank_row(row)]
    except csv.Error as exc:
        raise MalformedInputError(f"{source or 'table'} could not be parsed: {exc}") from exc

    if not parsed:
        raise MalformedInputError(f"{source or 'table'} has no header row")
    return parsed, delim


def parse_delimited(text: str, delimiter: Optional[str] = None, source: Optional[str] = None) -> Table:
    """Parse delimited text into a :class:`Table`.

    The first non-blank row is the header; see :func:`split_rows` for quoting
    and blank-row rules.

    Raises:
        MalformedInputError: if the text has no parseable header row.
    """
    parsed, delim = split_rows(text, delimiter=delimiter, source=source)

    raw_headers = [clean_cell(h) for h in parsed[0]]
    headers: List[str] = []
    for idx, raw in enumerate(raw_headers):
        key = normalize_key(raw) or f"col_{idx + 1}"
        headers.append(key)

    if not any(normalize_key(h) for h in raw_headers):
        raise MalformedInputError(f"{source or 'table'} header row has no named columns")

    rows: List[Dict[str, str]] = []
    for cells in parsed[1:]:
        obj: Dict[str, str] = {}
        for idx, key in enumerate(headers):
            value = clean_cell(cells[idx]) if idx < len(cells) else ""
            # Duplicate headers: first non-empty value wins.
            if key in obj and obj[key] != "":
                continue
            obj[key] = value
        rows.append(obj)

    logger.debug(
        "Parsed %d rows from %s (delimiter=%r, columns=%d)",
        len(rows),
        source or "<text>",
        delim,
        len(headers),
    )
    return Table(headers=headers, rows=rows, delimiter=delim, source=source, raw_headers=raw_headers)


def _read_text(path) -> str:
    p = Path(path)
    if not p.exists():
        raise MalformedInputError(f"Required table not found: {p}")
    try:
        with open(p, "r", encoding="utf-8-sig", newline="") as f:
            return f.read()
    except UnicodeDecodeError as exc:
        raise MalformedInputError(f"{p} is not valid UTF-8 text: {exc}") from exc


def read_table(path, delimiter: Optional[str] = None) -> Table:
    """Read and parse a delimited file.

    Raises:
        MalformedInputError: if the file does not exist, is not UTF-8 text
            or has no header.
    """
    return parse_delimited(_read_text(path), delimiter=delimiter, source=str(path))


def read_rows(path, delimiter: Optional[str] = None) -> List[List[str]]:
    """Read a delimited file as raw positional rows (for matrix layouts)."""
    rows, _ = split_rows(_read_text(path), delimiter=delimiter, source=str(path))
    return rows


def is_ratio_column(key: str) -> bool:
    """True for columns that hold a fraction (win rates, percentages)."""
    if not key:
        return False
    return key in RATIO_COLUMNS or key.endswith(_RATIO_SUFFIXES)


def _strip_separators(s: str) -> str:
    if "," in s and "." in s:
        if _THOUSANDS_DOT_RE.match(s):
            # European style "1.234,5"
            return s.replace(".", "").replace(",", ".")
        return s.replace(",", "")
    if "," in s:
        if _THOUSANDS_COMMA_RE.match(s):
            return s.replace(",", "")
        # Lone decimal comma "12,34"
        return s.replace(",", ".")
    return s


def coerce_number(value, ratio: bool = False) -> Optional[float]:
    """Permissively coerce a raw cell to a float.

    - Missing tokens (``""``, ``-``, ``na``, ``n/a``, ``nan``) → ``None``
    - Currency symbols, spaces and thousands separators are stripped
    - A trailing ``%`` divides by 100
    - Otherwise, when ``ratio`` is set and ``|value| > 1``, divides by 100
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        n = float(value)
        if n != n:  # NaN
            return None
        return n / 100.0 if ratio and abs(n) > 1 else n

    s = clean_cell(value)
    if s.lower() in _MISSING_TOKENS:
        return None

    has_pct = s.endswith("%")
    s = _CURRENCY_RE.sub("", s).replace("%", "")
    s = re.sub(r"\s+", "", s)
    s = _strip_separators(s)
    if not _NUMBER_RE.match(s):
        return None

    n = float(s)
    if has_pct:
        return n / 100.0
    if ratio and abs(n) > 1:
        return n / 100.0
    return n


def coerce_column(key: str, value) -> Optional[float]:
    """Coerce ``value`` using the ratio rule implied by column ``key``."""
    return coerce_number(value, ratio=is_ratio_column(key))


def coerce_int(value) -> Optional[int]:
    """Coerce a raw cell to the nearest integer (``None`` when not numeric)."""
    n =coerce_number(value)
    if n is None:
        return None
    return int(round(n))
