from datetime import timedelta
from typing import Protocol, runtime_checkable

import structlog

from app_telemetry.analyzers import (
    AnalyzerRegistry,
    ExecutionTimeAnalyzer,
    NPlusOneAnalyzer,
    QueryShapeAnalyzer,
    StructureAnalyzer,
    combine_findings,
)
from app_telemetry.clock import Clock, utc_now
from app_telemetry.config import MonitoringSettings
from app_telemetry.database.patterns import summarize_patterns
from app_telemetry.database.recommendations import generate_recommendations
from app_telemetry.database.store import QueryStore
from app_telemetry.domain import (
    DatabaseMetrics,
    DatabaseMonitorStats,
    Query,
    QueryAnalysis,
    QueryMetadata,
    TableSummary,
)
from app_telemetry.log import safe_log
from app_telemetry.sql import detect_operation, extract_table_name, sanitize_query

logger = structlog.get_logger(__name__)

RECENT_SLOW_ANALYSES = 20


@runtime_checkable
class SlowQuerySink(Protocol):
    """Receives queries that crossed the slow threshold."""

    def record_database_query(self, query: str, time_ms: float) -> None:
        ...


class DatabaseAnalyzer:
    """Diagnoses individual queries and mines the stored history for patterns.

    Every call to :meth:`analyze_query` runs the registered analyzers, stores the
    result in a bounded buffer and, for slow queries, forwards the sanitized text
    to the slow-query sink (normally the :class:`MetricsCollector`).

    Stored analyses are only evicted by capacity or by :meth:`cleanup`; callers
    are expected to invoke ``cleanup`` periodically.
    """

    def __init__(
        self,
        slow_query_sink: SlowQuerySink | None = None,
        settings: MonitoringSettings | None = None,
        clock: Clock = utc_now,
        registry: AnalyzerRegistry | None = None,
    ) -> None:
        self._settings = settings or MonitoringSettings()
        self._clock = clock
        self._store = QueryStore(max_size=self._settings.max_stored_queries)
        self.slow_query_sink = slow_query_sink
        self._registry = registry or self._default_registry()

    def _default_registry(self) -> AnalyzerRegistry:
        registry = AnalyzerRegistry()
        registry.register(ExecutionTimeAnalyzer())
        registry.register(
            NPlusOneAnalyzer(
                self._store.count_recent,
                window_seconds=self._settings.n_plus_one_window_seconds,
                threshold=self._settings.n_plus_one_threshold,
            )
        )
        registry.register(QueryShapeAnalyzer())
        registry.register(StructureAnalyzer())
        return registry

    @property
    def slow_query_threshold(self) -> float:
        return self._settings.slow_query_threshold_ms

    @property
    def stored_query_count(self) -> int:
        return len(self._store)

    def stored_queries(self) -> list[QueryAnalysis]:
        return self._store.snapshot()

    def analyze_query(
        self,
        query: str,
        execution_time: float,
        metadata: QueryMetadata | None = None,
    ) -> QueryAnalysis:
        sanitized = sanitize_query(query)
        table = (metadata.table if metadata else None) or extract_table_name(query)
        candidate = Query(
            sql=sanitized,
            table=table,
            operation=detect_operation(query),
            execution_time=execution_time,
            timestamp=self._clock(),
            metadata=metadata,
        )

        suggestions, severity = combine_findings(self._registry.analyze_all(candidate))
        analysis = QueryAnalysis(
            query=candidate.sql,
            table=candidate.table,
            operation=candidate.operation,
            execution_time=execution_time,
            timestamp=candidate.timestamp,
            estimated_rows=metadata.rows if metadata else None,
            suggestions=suggestions,
            severity=severity,
        )
        self._store.append(analysis)

        if execution_time > self.slow_query_threshold:
            safe_log(
                logger,
                "warning",
                "slow_database_query",
                query=analysis.query,
                duration_ms=execution_time,
                table=analysis.table,
                suggestions=list(analysis.suggestions),
            )
            self._forward_slow_query(analysis)

        return analysis

    def _forward_slow_query(self, analysis: QueryAnalysis) -> None:
        if self.slow_query_sink is None:
            return
        try:
            self.slow_query_sink.record_database_query(analysis.query, analysis.execution_time)
        except Exception as exc:
            safe_log(logger, "error", "slow_query_forward_failed", error=str(exc))

    def _recent(self) -> list[QueryAnalysis]:
        cutoff = self._clock() - timedelta(hours=self._settings.query_retention_hours)
        return self._store.since(cutoff)

    def get_metrics(self) -> DatabaseMetrics:
        recent = self._recent()
        slow = [a for a in recent if a.execution_time > self.slow_query_threshold]
        average = sum(a.execution_time for a in recent) / len(recent) if recent else 0.0

        return DatabaseMetrics(
            total_queries=len(recent),
            slow_queries=len(slow),
            average_query_time=average,
            query_patterns=tuple(summarize_patterns(recent)),
            recent_analyses=tuple(slow[-RECENT_SLOW_ANALYSES:]),
            recommendations=tuple(generate_recommendations(recent, self.slow_query_threshold)),
        )

    def get_queries_by_table(self, table_name: str, hours: float = 24) -> list[QueryAnalysis]:
        cutoff = self._clock() - timedelta(hours=hours)
        return [a for a in self._store.since(cutoff) if a.table == table_name]

    def summarize_table(self, table_name: str, hours: float = 24) -> TableSummary:
        queries = self.get_queries_by_table(table_name, hours)
        return TableSummary(
            table=table_name,
            hours=hours,
            total=len(queries),
            slow=sum(1 for q in queries if q.execution_time > self.slow_query_threshold),
            avg_time=sum(q.execution_time for q in queries) / len(queries) if queries else 0.0,
        )

    def get_stats(self) -> DatabaseMonitorStats:
        """Expose the recent average query time as a database-monitor source.

        The analyzer only sees queries that completed, so it reports no error rate.
        """
        recent = self._recent()
        average = sum(a.execution_time for a in recent) / len(recent) if recent else 0.0
        return DatabaseMonitorStats(avg_query_time=average)

    def cleanup(self) -> None:
        cutoff = self._clock() - timedelta(hours=self._settings.query_retention_hours)
        remaining = self._store.prune(cutoff)
        safe_log(logger, "debug", "database_analyzer_cleanup", remaining_queries=remaining)
