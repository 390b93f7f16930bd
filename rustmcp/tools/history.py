"""In-memory record of past analyses for ``rust.history``."""

from __future__ import annotations

import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Literal

HistoryKind = Literal["analysis", "suggestion", "explanation"]


@dataclass(slots=True, frozen=True)
class HistoryEntry:
    id: str
    timestamp: int
    kind: HistoryKind
    file_name: str
    stats: dict[str, int] = field(default_factory=dict)

    def to_summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "fileName": self.file_name,
            "type": self.kind,
            "stats": dict(self.stats),
        }


class AnalysisHistory:
    """Bounded, newest-first history. Oldest entries fall off when full."""

    def __init__(self, max_entries: int = 100):
        self._entries: deque[HistoryEntry] = deque(maxlen=max_entries)
        self._total = 0

    def record(self, kind: HistoryKind, file_name: str, result: dict[str, Any]) -> HistoryEntry:
        entry = HistoryEntry(
            id=str(uuid.uuid4()),
            timestamp=int(time.time() * 1000),
            kind=kind,
            file_name=file_name,
            stats=_stats_for(kind, result),
        )
        self._entries.appendleft(entry)
        self._total += 1
        return entry

    def recent(self, limit: int = 10) -> list[HistoryEntry]:
        return list(self._entries)[: max(0, limit)]

    @property
    def total(self) -> int:
        """Analyses recorded since startup, including ones no longer retained."""
        return self._total

    def __len__(self) -> int:
        return len(self._entries)


def _stats_for(kind: HistoryKind, result: dict[str, Any]) -> dict[str, int]:
    if kind == "explanation":
        return {"explanationLength": len(result.get("explanation") or "")}
    if kind == "suggestion":
        return {"suggestionCount": len(result.get("suggestions") or [])}
    return {"diagnosticCount": len(result.get("diagnostics") or [])}
