"""Snapshot model: one immutable, period-indexed ranking of all participants."""

import hashlib
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from ..lifecycle import is_eliminated
from .participant import Participant


def content_signature(participants, period: int) -> str:
    """Deterministic, order-independent signature of snapshot content.

    One line per participant, sorted by id:
    ``id|power rounded to 4 decimals|elimination_period|is_eliminated``.
    Two snapshots with equal signatures are the same archival state.
    """
    lines = []
    for p in sorted(participants, key=lambda x: x.id):
        elim = "" if p.elimination_period is None else str(p.elimination_period)
        eliminated = "1" if is_eliminated(p.elimination_period, period) else "0"
        lines.append(f"{p.id}|{round(float(p.power), 4):.4f}|{elim}|{eliminated}")
    return "\n".join(lines)


@dataclass(frozen=True)
class Snapshot:
    """Represents the archived ranking for one period."""

    period: int
    participants: Tuple[Participant, ...] = ()
    built_at: Optional[str] = None
    source: Optional[str] = None
    delimiter: Optional[str] = None
    _index: Dict[str, Participant] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate snapshot data and build the id index."""
        if self.period < 0:
            raise ValueError(f"Snapshot period must be >= 0, got {self.period}")
        participants = tuple(self.participants)
        object.__setattr__(self, "participants", participants)
        index: Dict[str, Participant] = {}
        for p in participants:
            if p.id in index:
                raise ValueError(f"Duplicate participant id '{p.id}' in period {self.period}")
            index[p.id] = p
        object.__setattr__(self, "_index", index)

    def __len__(self) -> int:
        return len(self.participants)

    def __iter__(self) -> Iterator[Participant]:
        return iter(self.participants)

    def get(self, participant_id: str) -> Optional[Participant]:
        """Get a participant by id."""
        return self._index.get(str(participant_id))

    def is_eliminated(self, participant: Participant) -> bool:
        return is_eliminated(participant.elimination_period, self.period)

    def active(self) -> List[Participant]:
        """Participants still active in this period, in ranking order."""
        return [p for p in self.participants if not self.is_eliminated(p)]

    @property
    def label(self) -> str:
        return f"ep_{self.period:03d}"

    @property
    def signature(self) -> str:
        return content_signature(self.participants, self.period)

    def signature_at(self, period: int) -> str:
        """Signature with elimination flags evaluated at ``period``."""
        return content_signature(self.participants, period)

    @property
    def signature_digest(self) -> str:
        return hashlib.sha256(self.signature.encode("utf-8")).hexdigest()

    def to_dict(self) -> dict:
        """Convert snapshot to its archive payload."""
        return {
            "meta": {
                "period": self.period,
                "built_at": self.built_at,
                "source": self.source,
                "delimiter": self.delimiter,
                "signature": self.signature_digest,
                "participants": len(self.participants),
            },
            "rankings": [p.to_dict(self.period) for p in self.participants],
        }

    @classmethod
    def from_dict(cls, data, period: Optional[int] = None) -> "Snapshot":
        """Create snapshot from an archive payload.

        Also accepts the legacy shape where the file is a bare list of ranking
        rows; ``period`` must then be supplied by the caller.
        """
        if isinstance(data, list):
            meta: dict = {}
            rows = data
        elif isinstance(data, dict):
            meta = data.get("meta") if isinstance(data.get("meta"), dict) else {}
            rows = data.get("rankings") if isinstance(data.get("rankings"), list) else []
        else:
            raise ValueError("Snapshot payload must be an object or a list of rows")

        if period is None:
            period = meta.get("period", meta.get("episode"))
        if period is None:
            raise ValueError("Snapshot payload has no period")

        participants = [Participant.from_dict(r) for r in rows if isinstance(r, dict) and r.get("id")]
        return cls(
            period=int(period),
            participants=tuple(participants),
            built_at=meta.get("built_at", meta.get("builtAtISO")),
            source=meta.get("source"),
            delimiter=meta.get("delimiter"),
        )
