"""Append-only, signature-gated archive of period snapshots.

One JSON file per period (``rankings_ep_NNN.json``) under a single directory.
The store is the only writer: it enforces contiguity from period 0 and refuses
to append a snapshot whose content signature equals the latest archived one.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from ..data.loader import DataLoader
from ..models.snapshot import Snapshot

logger = logging.getLogger(__name__)

SNAPSHOT_FILE_RE = re.compile(r"^rankings_ep_(\d+)\.json$")


class MissingPeriodError(LookupError):
    """One or more required snapshot periods are absent from the archive."""

    def __init__(self, missing: List[int], message: Optional[str] = None):
        self.missing = sorted(set(int(p) for p in missing))
        if message is None:
            listed = ", ".join(str(p) for p in self.missing)
            message = f"Missing snapshot period(s): {listed}"
        super().__init__(message)


@dataclass(frozen=True)
class AppendResult:
    """Outcome of :meth:`SnapshotStore.append`."""

    appended: bool
    period: int
    signature: str
    path: Optional[str] = None


def snapshot_filename(period: int) -> str:
    return f"rankings_ep_{period:03d}.json"


class SnapshotStore:
    """File-backed snapshot archive."""

    def __init__(self, archive_dir):
        self.archive_dir = Path(archive_dir)
        self._cache: Dict[int, Snapshot] = {}

    def path_for(self, period: int) -> Path:
        return self.archive_dir / snapshot_filename(period)

    def periods(self) -> List[int]:
        """Sorted list of archived period indices."""
        if not self.archive_dir.exists():
            return []
        found = []
        for entry in self.archive_dir.iterdir():
            match = SNAPSHOT_FILE_RE.match(entry.name)
            if match and entry.is_file():
                found.append(int(match.group(1)))
        return sorted(found)

    def __len__(self) -> int:
        return len(self.periods())

    def missing_periods(self, upto: Optional[int] = None) -> List[int]:
        """Indices in ``0..upto`` (default: the latest period) with no file."""
        present = set(self.periods())
        if upto is None:
            if not present:
                return []
            upto = max(present)
        return [p for p in range(0, upto + 1) if p not in present]

    def verify_contiguous(self) -> List[int]:
        """Raise :class:`MissingPeriodError` unless periods are exactly ``0..N``."""
        missing = self.missing_periods()
        if missing:
            raise MissingPeriodError(missing, f"Archive {self.archive_dir} has gaps at period(s): "
                                              f"{', '.join(str(p) for p in missing)}")
        return self.periods()

    def get(self, period: int) -> Snapshot:
        """Load the snapshot archived for ``period``."""
        if period in self._cache:
            return self._cache[period]
        path = self.path_for(period)
        if not path.exists():
            raise MissingPeriodError([period])
        payload = DataLoader.load_json(path)
        snapshot = Snapshot.from_dict(payload, period=period)
        self._cache[period] = snapshot
        return snapshot

    def latest(self) -> Optional[Snapshot]:
        """Most recently archived snapshot, or ``None`` for an empty archive."""
        periods = self.periods()
        if not periods:
            return None
        return self.get(periods[-1])

    def next_period(self) -> int:
        periods = self.periods()
        return periods[-1] + 1 if periods else 0

    def read_range(self, lo: int, hi: int) -> List[Snapshot]:
        """Snapshots for periods ``lo..hi`` inclusive, in order.

        Raises:
            MissingPeriodError: listing every absent period in the range.
        """
        if lo > hi:
            return []
        present = set(self.periods())
        missing = [p for p in range(lo, hi + 1) if p not in present]
        if missing:
            raise MissingPeriodError(missing)
        return [self.get(p) for p in range(lo, hi + 1)]

    def read_all(self) -> List[Snapshot]:
        periods = self.verify_contiguous()
        if not periods:
            return []
        return self.read_range(0, periods[-1])

    def append(self, snapshot: Snapshot) -> AppendResult:
        """Archive ``snapshot`` under the next period index.

        No-op (``appended=False``) when its content signature matches the
        latest archived snapshot. The snapshot's period must be exactly the
        next index; existing files are never overwritten.
        """
        self.verify_contiguous()
        latest = self.latest()
        signature = snapshot.signature

        # Elimination flags are compared as of the latest archived period.
        if latest is not None and latest.signature == snapshot.signature_at(latest.period):
            logger.info(
                "No material change since period %d; archive not advanced",
                latest.period,
            )
            return AppendResult(appended=False, period=latest.period, signature=signature)

        expected = self.next_period()
        if snapshot.period != expected:
            raise ValueError(f"Snapshot period {snapshot.period} does not follow archive (expected {expected})")

        path = self.path_for(snapshot.period)
        if path.exists():
            raise FileExistsError(f"Refusing to overwrite archived snapshot {path}")

        written = DataLoader.save_json(snapshot.to_dict(), path)
        self._cache[snapshot.period] = snapshot
        logger.info("Archived period %d (%d participants) to %s", snapshot.period, len(snapshot), written)
        return AppendResult(appended=True, period=snapshot.period, signature=signature, path=written)
