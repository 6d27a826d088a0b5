import threading
from collections import deque
from collections.abc import Callable
from datetime import timedelta
from typing import Any, Protocol, runtime_checkable

import structlog

from app_telemetry.alerts import apply_rule_updates, default_alert_rules, evaluate_rule
from app_telemetry.clock import Clock, utc_now
from app_telemetry.config import MonitoringSettings
from app_telemetry.domain import (
    Alert,
    AlertRule,
    ApiMetrics,
    CpuMetrics,
    DatabaseMonitorStats,
    DatabaseStats,
    ErrorMetrics,
    HeapMetrics,
    MemoryMetrics,
    NetworkMetrics,
    SystemMetrics,
)
from app_telemetry.events import EventStream, Subscriber
from app_telemetry.exceptions import SchedulerError
from app_telemetry.log import safe_log
from app_telemetry.metrics.accumulators import (
    ErrorTracker,
    RequestSample,
    RequestTracker,
    SlowQueryLog,
)
from app_telemetry.metrics.system import HostSampler, SystemSampler
from app_telemetry.output import AlertOutput
from app_telemetry.scheduler import PeriodicTask

logger = structlog.get_logger(__name__)

RECENT_ERRORS_IN_SNAPSHOT = 10
SLOW_ENDPOINTS_IN_SNAPSHOT = 5
ACTIVE_QUERY_WINDOW = timedelta(seconds=10)
REQUEST_RATE_WINDOW = timedelta(minutes=1)

_EMPTY_CPU = CpuMetrics(usage=0.0, load=(0.0, 0.0, 0.0))
_EMPTY_MEMORY = MemoryMetrics(used=0, total=0, percentage=0.0, heap=HeapMetrics(used=0, total=0))


@runtime_checkable
class DatabaseMonitor(Protocol):
    def get_stats(self) -> DatabaseMonitorStats:
        ...


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class MetricsCollector:
    """Process-wide telemetry sink with periodic snapshots and alerting.

    Request handlers report through :meth:`record_request`, :meth:`record_error`
    and :meth:`record_database_query`. Once :meth:`start` is called inside a running
    event loop, three periodic tasks build a :class:`SystemMetrics` snapshot,
    prune buffers and evaluate alert rules. Snapshots and alerts are pushed to
    subscribers registered with :meth:`on_metrics` and :meth:`on_alert`.

    The tick methods (:meth:`collect_metrics`, :meth:`cleanup_old_data`,
    :meth:`check_alerts`) can also be driven directly.
    """

    def __init__(
        self,
        settings: MonitoringSettings | None = None,
        clock: Clock = utc_now,
        sampler: HostSampler | None = None,
        database_monitor: DatabaseMonitor | None = None,
        alert_rules: list[AlertRule] | None = None,
    ) -> None:
        self._settings = settings or MonitoringSettings()
        self._clock = clock
        self._sampler = sampler or SystemSampler()
        self.database_monitor = database_monitor

        self._requests = RequestTracker(
            max_response_times=self._settings.max_response_times,
            max_endpoint_samples=self._settings.max_endpoint_samples,
        )
        self._errors = ErrorTracker(max_recent=self._settings.max_recent_errors)
        self._slow_queries = SlowQueryLog(threshold_ms=self._settings.slow_query_threshold_ms)

        self._lock = threading.Lock()
        self._rules: list[AlertRule] = list(
            default_alert_rules() if alert_rules is None else alert_rules
        )
        self._history: deque[SystemMetrics] = deque(maxlen=self._settings.history_size)

        self._metrics_stream: EventStream[SystemMetrics] = EventStream("metrics")
        self._alert_stream: EventStream[Alert] = EventStream("alert")
        self._tasks = [
            PeriodicTask(
                "collect_metrics",
                self._settings.collection_interval_seconds,
                self.collect_metrics,
            ),
            PeriodicTask(
                "cleanup_old_data",
                self._settings.cleanup_interval_seconds,
                self.cleanup_old_data,
            ),
            PeriodicTask(
                "check_alerts",
                self._settings.alert_check_interval_seconds,
                self.check_alerts,
            ),
        ]

    # Lifecycle

    @property
    def running(self) -> bool:
        return any(task.running for task in self._tasks)

    def start(self) -> None:
        """Schedule the periodic tasks on the running event loop."""
        started: list[PeriodicTask] = []
        try:
            for task in self._tasks:
                task.start()
                started.append(task)
        except SchedulerError:
            for task in started:
                task.cancel()
            raise

    def cancel(self) -> None:
        """Cancel the periodic tasks without waiting for them to finish."""
        for task in self._tasks:
            task.cancel()

    async def stop(self) -> None:
        for task in self._tasks:
            await task.stop()

    # Subscriptions

    def on_metrics(self, callback: Subscriber[SystemMetrics]) -> Callable[[], None]:
        return self._metrics_stream.subscribe(callback)

    def on_alert(self, callback: Subscriber[Alert]) -> Callable[[], None]:
        return self._alert_stream.subscribe(callback)

    def add_output(self, output: AlertOutput) -> Callable[[], None]:
        return self._alert_stream.subscribe(output.send)

    # Recording

    def record_request(
        self, endpoint: str, method: str, response_time: float, status_code: int
    ) -> None:
        sample = RequestSample(
            timestamp=self._clock(),
            response_time=response_time,
            is_error=status_code >= 400,
        )
        self._requests.record(endpoint, method, sample)
        safe_log(
            logger,
            "debug",
            "api_request",
            endpoint=endpoint,
            method=method,
            status_code=status_code,
            duration_ms=response_time,
        )

    def record_error(self, level: str, message: str) -> None:
        self._errors.record(level, message, self._clock())

    def record_database_query(self, query: str, time_ms: float) -> None:
        if self._slow_queries.record(query, time_ms, self._clock()):
            safe_log(
                logger,
                "warning",
                "slow_database_query",
                query=query,
                duration_ms=time_ms,
                threshold_ms=self._slow_queries.threshold_ms,
            )

    # Snapshots

    def _sample_cpu(self) -> CpuMetrics:
        try:
            return self._sampler.cpu()
        except Exception as exc:
            safe_log(logger, "error", "cpu_sampling_failed", error=str(exc))
            return _EMPTY_CPU

    def _sample_memory(self) -> MemoryMetrics:
        try:
            memory = self._sampler.memory()
        except Exception as exc:
            safe_log(logger, "error", "memory_sampling_failed", error=str(exc))
            return _EMPTY_MEMORY
        return MemoryMetrics(
            used=memory.used,
            total=memory.total,
            percentage=_clamp(memory.percentage, 0.0, 100.0),
            heap=memory.heap,
        )

    def _database_stats(self) -> DatabaseMonitorStats:
        if self.database_monitor is None:
            return DatabaseMonitorStats()
        try:
            return self.database_monitor.get_stats()
        except Exception as exc:
            safe_log(logger, "error", "database_monitor_failed", error=str(exc))
            return DatabaseMonitorStats()

    def gather_system_metrics(self) -> SystemMetrics:
        now = self._clock()
        requests, errors = self._requests.totals()
        error_rate = _clamp(errors / requests, 0.0, 1.0) if requests else 0.0
        db_stats = self._database_stats()
        by_level = self._errors.counts_by_level()

        return SystemMetrics(
            timestamp=now,
            cpu=self._sample_cpu(),
            memory=self._sample_memory(),
            network=NetworkMetrics(
                requests=requests,
                errors=errors,
                error_rate=error_rate,
                avg_response_time=self._requests.avg_response_time(),
            ),
            database=DatabaseStats(
                connection_count=db_stats.connection_count,
                active_queries=self._slow_queries.count_since(now - ACTIVE_QUERY_WINDOW),
                slow_queries=len(self._slow_queries),
                error_rate=_clamp(db_stats.error_rate, 0.0, 1.0),
                avg_query_time=max(0.0, db_stats.avg_query_time),
            ),
            api=ApiMetrics(
                requests_per_minute=self._requests.requests_since(now - REQUEST_RATE_WINDOW),
                error_rate=error_rate,
                slow_endpoints=tuple(
                    self._requests.slow_endpoints(
                        self._settings.slow_endpoint_threshold_ms,
                        limit=SLOW_ENDPOINTS_IN_SNAPSHOT,
                    )
                ),
            ),
            errors=ErrorMetrics(
                total=sum(by_level.values()),
                by_level=by_level,
                recent=tuple(self._errors.recent(RECENT_ERRORS_IN_SNAPSHOT)),
            ),
        )

    async def collect_metrics(self) -> SystemMetrics:
        metrics = self.gather_system_metrics()
        with self._lock:
            self._history.append(metrics)
        safe_log(
            logger,
            "debug",
            "metrics_collected",
            timestamp=metrics.timestamp.isoformat(),
            cpu=metrics.cpu.usage,
            memory=metrics.memory.percentage,
            requests=metrics.api.requests_per_minute,
        )
        await self._metrics_stream.publish(metrics)
        return metrics

    def cleanup_old_data(self) -> None:
        now = self._clock()
        if self._settings.request_retention_minutes is not None:
            self._requests.prune(
                now - timedelta(minutes=self._settings.request_retention_minutes)
            )
        self._slow_queries.prune(
            now - timedelta(minutes=self._settings.slow_query_retention_minutes)
        )
        # Full reset on every cleanup tick rather than a sliding window.
        self._errors.reset_counts()

    # Alerts

    async def check_alerts(self) -> list[Alert]:
        current = self.get_current_metrics()
        if current is None:
            return []

        now = self._clock()
        fired: list[Alert] = []
        with self._lock:
            for index, rule in enumerate(self._rules):
                try:
                    alert = evaluate_rule(rule, current, now)
                except Exception as exc:
                    safe_log(
                        logger, "error", "alert_rule_failed", rule_id=rule.id, error=str(exc)
                    )
                    continue
                if alert is not None:
                    self._rules[index] = alert.rule
                    fired.append(alert)

        for alert in fired:
            safe_log(
                logger,
                "warning",
                "alert_triggered",
                rule=alert.rule.name,
                condition=alert.rule.condition,
                threshold=alert.rule.threshold,
                actual=alert.value,
                severity=alert.severity.label,
            )
            await self._alert_stream.publish(alert)
        return fired

    # Read accessors

    def get_current_metrics(self) -> SystemMetrics | None:
        with self._lock:
            return self._history[-1] if self._history else None

    def get_historical_metrics(self, minutes: float = 60) -> list[SystemMetrics]:
        cutoff = self._clock() - timedelta(minutes=minutes)
        with self._lock:
            return [m for m in self._history if m.timestamp >= cutoff]

    def get_alert_rules(self) -> list[AlertRule]:
        with self._lock:
            return list(self._rules)

    def update_alert_rule(self, rule_id: str, **updates: Any) -> AlertRule | None:
        with self._lock:
            for index, rule in enumerate(self._rules):
                if rule.id == rule_id:
                    updated = apply_rule_updates(rule, updates)
                    self._rules[index] = updated
                    break
            else:
                return None

        safe_log(logger, "info", "alert_rule_updated", rule_id=rule_id, updates=updates)
        return updated
