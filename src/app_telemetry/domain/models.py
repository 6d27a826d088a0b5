"""Core domain models for query analysis, runtime metrics and alerting."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any


class Severity(IntEnum):
    """Severity levels, ordered for comparison (higher value = higher severity)."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        return self.name.lower()


class Operation(str, Enum):
    """Statement kind inferred from the leading keyword of a query."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    UNKNOWN = "UNKNOWN"


class ComparisonOperator(str, Enum):
    GT = "gt"
    LT = "lt"
    EQ = "eq"

    def compare(self, value: float, threshold: float) -> bool:
        if self is ComparisonOperator.GT:
            return value > threshold
        if self is ComparisonOperator.LT:
            return value < threshold
        return value == threshold


@dataclass(frozen=True, slots=True)
class QueryMetadata:
    """Optional caller-supplied facts about an executed query."""

    table: str | None = None
    rows: int | None = None
    cached: bool | None = None


@dataclass(frozen=True, slots=True)
class Query:
    """A sanitized query with everything the analyzers need to inspect it."""

    sql: str
    table: str
    operation: Operation
    execution_time: float
    timestamp: datetime
    metadata: QueryMetadata | None = None


@dataclass(frozen=True, slots=True)
class Finding:
    """Suggestions produced by one analyzer, optionally raising the severity floor."""

    analyzer_name: str
    suggestions: tuple[str, ...]
    severity: Severity | None = None


@dataclass(frozen=True, slots=True)
class QueryAnalysis:
    query: str
    table: str
    operation: Operation
    execution_time: float
    timestamp: datetime
    estimated_rows: int | None = None
    suggestions: tuple[str, ...] = field(default_factory=tuple)
    severity: Severity = Severity.LOW


@dataclass(frozen=True, slots=True)
class QueryPattern:
    """Aggregate over all recent queries sharing one normalized shape."""

    pattern: str
    count: int
    avg_time: float
    max_time: float
    min_time: float
    examples: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class DatabaseMetrics:
    total_queries: int
    slow_queries: int
    average_query_time: float
    query_patterns: tuple[QueryPattern, ...]
    recent_analyses: tuple[QueryAnalysis, ...]
    recommendations: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class TableSummary:
    table: str
    hours: float
    total: int
    slow: int
    avg_time: float


@dataclass(frozen=True, slots=True)
class DatabaseMonitorStats:
    """Figures supplied by whatever watches the database connection."""

    error_rate: float = 0.0
    connection_count: int = 0
    avg_query_time: float = 0.0


@dataclass(frozen=True, slots=True)
class CpuMetrics:
    usage: float
    load: tuple[float, float, float]


@dataclass(frozen=True, slots=True)
class HeapMetrics:
    used: int
    total: int


@dataclass(frozen=True, slots=True)
class MemoryMetrics:
    used: int
    total: int
    percentage: float
    heap: HeapMetrics


@dataclass(frozen=True, slots=True)
class NetworkMetrics:
    requests: int
    errors: int
    error_rate: float
    avg_response_time: float


@dataclass(frozen=True, slots=True)
class DatabaseStats:
    connection_count: int
    active_queries: int
    slow_queries: int
    error_rate: float
    avg_query_time: float


@dataclass(frozen=True, slots=True)
class SlowEndpoint:
    endpoint: str
    avg_time: float
    count: int


@dataclass(frozen=True, slots=True)
class ApiMetrics:
    requests_per_minute: int
    error_rate: float
    slow_endpoints: tuple[SlowEndpoint, ...]


@dataclass(frozen=True, slots=True)
class RecentError:
    level: str
    message: str
    timestamp: datetime
    count: int = 1


@dataclass(frozen=True, slots=True)
class ErrorMetrics:
    total: int
    by_level: dict[str, int]
    recent: tuple[RecentError, ...]


@dataclass(frozen=True, slots=True)
class SystemMetrics:
    """Point-in-time snapshot of the process, its traffic and its database usage."""

    timestamp: datetime
    cpu: CpuMetrics
    memory: MemoryMetrics
    network: NetworkMetrics
    database: DatabaseStats
    api: ApiMetrics
    errors: ErrorMetrics


@dataclass(frozen=True, slots=True)
class AlertRule:
    """A threshold check on one snapshot value.

    ``condition`` names the value as a dot path into ``SystemMetrics``
    (``"api.errorRate"``); ``cooldown`` is in minutes.
    """

    id: str
    name: str
    condition: str
    threshold: float
    operator: ComparisonOperator
    severity: Severity
    enabled: bool = True
    cooldown: float = 5
    last_triggered: datetime | None = None


@dataclass(frozen=True, slots=True)
class Alert:
    """A fired alert rule together with the value that tripped it."""

    rule: AlertRule
    value: float
    timestamp: datetime

    @property
    def severity(self) -> Severity:
        return self.rule.severity

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": {
                "id": self.rule.id,
                "name": self.rule.name,
                "condition": self.rule.condition,
                "threshold": self.rule.threshold,
                "operator": self.rule.operator.value,
                "severity": self.rule.severity.label,
                "cooldown": self.rule.cooldown,
            },
            "value": self.value,
            "timestamp": self.timestamp.isoformat(),
        }
