from typing import ClassVar

from app_telemetry.domain import Finding, Query, Severity


class ExecutionTimeAnalyzer:
    name: str = "execution_time"

    # Checked from the top; the first threshold exceeded wins.
    _thresholds: ClassVar[tuple[tuple[float, Severity, str], ...]] = (
        (
            5000,
            Severity.CRITICAL,
            "Query execution time is extremely slow (>5s). Consider query optimization.",
        ),
        (
            2000,
            Severity.HIGH,
            "Query execution time is slow (>2s). Review query structure and indexes.",
        ),
        (
            1000,
            Severity.MEDIUM,
            "Query execution time is above threshold (>1s). Consider optimization.",
        ),
    )

    def analyze(self, query: Query) -> Finding | None:
        for threshold, severity, suggestion in self._thresholds:
            if query.execution_time > threshold:
                return Finding(
                    analyzer_name=self.name,
                    suggestions=(suggestion,),
                    severity=severity,
                )
        return None
