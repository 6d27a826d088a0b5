from collections.abc import Callable
from datetime import datetime, timedelta

from app_telemetry.domain import Finding, Operation, Query, Severity

# (table, operation, since) -> number of stored queries matching
RecentCounter = Callable[[str, Operation, datetime], int]


class NPlusOneAnalyzer:
    """Flags bursts of fast SELECTs against one table, the signature of N+1 loading.

    The counter is consulted before the current query is stored, so the current
    query is added to the count.
    """

    name: str = "n_plus_one"

    SUGGESTION = "Potential N+1 query detected. Consider using JOIN or eager loading."

    def __init__(
        self,
        count_recent: RecentCounter,
        window_seconds: float = 5.0,
        threshold: int = 10,
        fast_query_ms: float = 100.0,
    ) -> None:
        self._count_recent = count_recent
        self._window = timedelta(seconds=window_seconds)
        self._threshold = threshold
        self._fast_query_ms = fast_query_ms

    def analyze(self, query: Query) -> Finding | None:
        if query.operation is not Operation.SELECT:
            return None
        if query.execution_time >= self._fast_query_ms:
            return None

        since = query.timestamp - self._window
        count = self._count_recent(query.table, Operation.SELECT, since) + 1
        if count <= self._threshold:
            return None

        return Finding(
            analyzer_name=self.name,
            suggestions=(self.SUGGESTION,),
            severity=Severity.HIGH,
        )
