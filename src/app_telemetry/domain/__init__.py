"""Domain models for query analysis, runtime metrics and alerting."""

from app_telemetry.domain.models import (
    Alert,
    AlertRule,
    ApiMetrics,
    ComparisonOperator,
    CpuMetrics,
    DatabaseMetrics,
    DatabaseMonitorStats,
    DatabaseStats,
    ErrorMetrics,
    Finding,
    HeapMetrics,
    MemoryMetrics,
    NetworkMetrics,
    Operation,
    Query,
    QueryAnalysis,
    QueryMetadata,
    QueryPattern,
    RecentError,
    Severity,
    SlowEndpoint,
    SystemMetrics,
    TableSummary,
)

__all__ = [
    "Alert",
    "AlertRule",
    "ApiMetrics",
    "ComparisonOperator",
    "CpuMetrics",
    "DatabaseMetrics",
    "DatabaseMonitorStats",
    "DatabaseStats",
    "ErrorMetrics",
    "Finding",
    "HeapMetrics",
    "MemoryMetrics",
    "NetworkMetrics",
    "Operation",
    "Query",
    "QueryAnalysis",
    "QueryMetadata",
    "QueryPattern",
    "RecentError",
    "Severity",
    "SlowEndpoint",
    "SystemMetrics",
    "TableSummary",
]
