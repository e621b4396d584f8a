"""Shared header-key / identifier normalization used across ingestion.

Every table the engine reads (roster exports, per-period rebuild tables, the
match log) goes through :func:`normalize_key` exactly once, so synonym tables
in :mod:`survivor_stats.data.records` only ever need to list the normalized
spelling of a column.
"""

from __future__ import annotations

import re
import unicodedata

_BOM = "\ufeff"


def normalize_key(header: str) -> str:
    """Convert an arbitrary column header to a canonical underscore-delimited key.

    Steps:
    1. Strip a UTF-8 BOM and non-breaking spaces
    2. NFKD-normalize Unicode and strip combining marks
    3. Lowercase
    4. Map ``%`` to a ``pct`` token
    5. Replace any other run of non-alphanumeric characters with ``_``
    6. Strip leading/trailing ``_``

    Examples::

        >>> normalize_key("Adjusted PR")
        'adjusted_pr'
        >>> normalize_key("Win%")
        'win_pct'
        >>> normalize_key("\\ufeffPlayerID")
        'playerid'
    """
    if not header:
        return ""
    s = str(header).replace(_BOM, "").replace("\u00a0", " ")
    s = unicodedata.normalize("NFKD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = s.lower().replace("%", "_pct_")
    s = re.sub(r"[^a-z0-9]+", "_", s)
    return s.strip("_")


def normalize_faction(value: str, default: str = "Unknown") -> str:
    """Trim a faction label, falling back to ``default`` when it is blank."""
    s = str(value or "").replace("\u00a0", " ").strip()
    return s or default


def clean_cell(value) -> str:
    """Return a stripped string for a raw table cell (``None`` → ``""``)."""
    if value is None:
        return ""
    return str(value).replace(_BOM, "").replace("\u00a0", " ").strip()
