"""Append-only execution log with derived statistics."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from .models import ExecutionEntry, ExecutionStatus


@dataclass(frozen=True, slots=True)
class ExecutionStats:
    """Aggregate view of an ExecutionLog, computed from its entries."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    cancelled: int = 0
    total_duration: float = 0.0

    @property
    def success_rate(self) -> float:
        return self.succeeded / self.total if self.total else 0.0

    @property
    def average_duration(self) -> float:
        return self.total_duration / self.total if self.total else 0.0


class ExecutionLog:
    """Thread-safe, append-only record of execution attempts.

    Entries are immutable; `entries` returns a copy so readers never observe
    a list being appended to.
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: list[ExecutionEntry] = []
        self._lock = threading.Lock()

    def append(self, entry: ExecutionEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    @property
    def entries(self) -> list[ExecutionEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> ExecutionStats:
        entries = self.entries
        by_status = {s: sum(1 for e in entries if e.status is s) for s in ExecutionStatus}
        return ExecutionStats(
            total=len(entries),
            succeeded=by_status[ExecutionStatus.SUCCEEDED],
            failed=by_status[ExecutionStatus.FAILED],
            cancelled=by_status[ExecutionStatus.CANCELLED],
            total_duration=sum(e.duration for e in entries),
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
