import threading
from collections import deque
from datetime import datetime

from app_telemetry.domain import Operation, QueryAnalysis


class QueryStore:
    """Insertion-ordered buffer of analyses; the oldest entry is evicted at capacity."""

    def __init__(self, max_size: int = 1000) -> None:
        self._max_size = max_size
        self._analyses: deque[QueryAnalysis] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._analyses)

    @property
    def max_size(self) -> int:
        return self._max_size

    def append(self, analysis: QueryAnalysis) -> None:
        with self._lock:
            self._analyses.append(analysis)

    def snapshot(self) -> list[QueryAnalysis]:
        with self._lock:
            return list(self._analyses)

    def since(self, cutoff: datetime) -> list[QueryAnalysis]:
        """Analyses captured strictly after ``cutoff``, oldest first."""
        with self._lock:
            return [a for a in self._analyses if a.timestamp > cutoff]

    def count_recent(self, table: str, operation: Operation, since: datetime) -> int:
        with self._lock:
            return sum(
                1
                for a in self._analyses
                if a.table == table and a.operation is operation and a.timestamp > since
            )

    def prune(self, cutoff: datetime) -> int:
        """Drop analyses captured at or before ``cutoff``; returns how many remain."""
        with self._lock:
            kept = [a for a in self._analyses if a.timestamp > cutoff]
            self._analyses = deque(kept, maxlen=self._max_size)
            return len(self._analyses)
