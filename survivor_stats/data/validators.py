"""Schema validators for ingested tables and archived payloads."""

from __future__ import annotations

from typing import Dict, List

from .records import (
    FACTION_KEYS,
    ID_KEYS,
    NAME_KEYS,
    PERIOD_KEYS,
    SIDE_A_WON_KEYS,
    SIDE_B_WON_KEYS,
)
from .tabular import Table


def validate_roster_table(table: Table) -> List[str]:
    errors: List[str] = []
    name = table.source or "roster table"
    if not table.headers:
        return [f"{name} has no header"]

    for label, keys in (("id", ID_KEYS), ("name", NAME_KEYS), ("faction", FACTION_KEYS)):
        if not table.has_any(keys):
            errors.append(f"{name} missing {label} column (looked for: {', '.join(keys)})")
    return errors


def validate_match_log(table: Table) -> List[str]:
    errors: List[str] = []
    name = table.source or "match log"
    if not table.headers:
        return [f"{name} has no header"]

    if not table.has_any(PERIOD_KEYS):
        errors.append(f"{name} missing period column (looked for: {', '.join(PERIOD_KEYS)})")
    if not table.has_any(SIDE_A_WON_KEYS) and not table.has_any(SIDE_B_WON_KEYS):
        errors.append(f"{name} missing win indicator columns")
    return errors


def validate_snapshot_payload(payload: Dict) -> List[str]:
    errors: List[str] = []
    if not isinstance(payload, dict):
        return ["snapshot payload must be an object"]

    meta = payload.get("meta")
    if not isinstance(meta, dict):
        errors.append("snapshot payload missing 'meta' object")
    elif not isinstance(meta.get("period"), int):
        errors.append("snapshot meta missing integer 'period'")

    rankings = payload.get("rankings")
    if not isinstance(rankings, list):
        return errors + ["snapshot payload must include a 'rankings' list"]

    seen = set()
    for idx, row in enumerate(rankings):
        if not isinstance(row, dict):
            errors.append(f"rankings[{idx}] must be an object")
            continue
        pid = str(row.get("id") or "")
        if not pid:
            errors.append(f"rankings[{idx}] missing id")
        elif pid in seen:
            errors.append(f"rankings[{idx}] duplicate id '{pid}'")
        seen.add(pid)
    return errors


def validate_pair_matrix(rows: List[List[str]], name: str = "pair matrix") -> List[str]:
    """Check the two-header-row, two-header-column layout of a pairwise matrix."""
    if len(rows) < 3:
        return [f"{name} needs two header rows and at least one body row"]

    errors: List[str] = []
    col_ids = [str(c).strip() for c in rows[0][2:]]
    if not any(col_ids):
        errors.append(f"{name} first row has no column ids")
    seen = set()
    for idx, row in enumerate(rows[2:], start=3):
        rid = str(row[0]).strip() if row else ""
        if not rid:
            continue
        if rid in seen:
            errors.append(f"{name} row {idx} duplicate id '{rid}'")
        seen.add(rid)
    if not seen:
        errors.append(f"{name} has no body rows with an id")
    return errors
