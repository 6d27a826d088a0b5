from collections.abc import Callable, Mapping
from dataclasses import fields, replace
from datetime import datetime, timedelta
from typing import Any, get_type_hints

from pydantic import TypeAdapter

from app_telemetry.domain import (
    Alert,
    AlertRule,
    ComparisonOperator,
    Severity,
    SystemMetrics,
)

MetricExtractor = Callable[[SystemMetrics], float]

METRIC_EXTRACTORS: dict[str, MetricExtractor] = {
    "cpu.usage": lambda m: m.cpu.usage,
    "memory.used": lambda m: m.memory.used,
    "memory.total": lambda m: m.memory.total,
    "memory.percentage": lambda m: m.memory.percentage,
    "memory.heap.used": lambda m: m.memory.heap.used,
    "memory.heap.total": lambda m: m.memory.heap.total,
    "network.requests": lambda m: m.network.requests,
    "network.errors": lambda m: m.network.errors,
    "network.errorRate": lambda m: m.network.error_rate,
    "network.avgResponseTime": lambda m: m.network.avg_response_time,
    "database.connectionCount": lambda m: m.database.connection_count,
    "database.activeQueries": lambda m: m.database.active_queries,
    "database.slowQueries": lambda m: m.database.slow_queries,
    "database.errorRate": lambda m: m.database.error_rate,
    "database.avgQueryTime": lambda m: m.database.avg_query_time,
    "api.requestsPerMinute": lambda m: m.api.requests_per_minute,
    "api.errorRate": lambda m: m.api.error_rate,
    "errors.total": lambda m: m.errors.total,
}

_UPDATABLE_FIELDS = frozenset(f.name for f in fields(AlertRule)) - {"id"}

_FIELD_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    name: TypeAdapter(hint)
    for name, hint in get_type_hints(AlertRule).items()
    if name in _UPDATABLE_FIELDS - {"severity"}
}


def default_alert_rules() -> list[AlertRule]:
    return [
        AlertRule(
            id="high-error-rate",
            name="High Error Rate",
            condition="api.errorRate",
            threshold=0.05,
            operator=ComparisonOperator.GT,
            severity=Severity.HIGH,
            cooldown=5,
        ),
        AlertRule(
            id="slow-response-time",
            name="Slow Response Time",
            condition="network.avgResponseTime",
            threshold=2000,
            operator=ComparisonOperator.GT,
            severity=Severity.MEDIUM,
            cooldown=10,
        ),
        AlertRule(
            id="memory-usage-high",
            name="High Memory Usage",
            condition="memory.percentage",
            threshold=85,
            operator=ComparisonOperator.GT,
            severity=Severity.MEDIUM,
            cooldown=15,
        ),
        AlertRule(
            id="database-errors",
            name="Database Error Rate",
            condition="database.errorRate",
            threshold=0.02,
            operator=ComparisonOperator.GT,
            severity=Severity.HIGH,
            cooldown=5,
        ),
    ]


def metric_value(metrics: SystemMetrics, condition: str) -> float | None:
    extractor = METRIC_EXTRACTORS.get(condition)
    if extractor is None:
        return None
    return extractor(metrics)


def in_cooldown(rule: AlertRule, now: datetime) -> bool:
    if rule.last_triggered is None:
        return False
    return now - rule.last_triggered < timedelta(minutes=rule.cooldown)


def evaluate_rule(rule: AlertRule, metrics: SystemMetrics, now: datetime) -> Alert | None:
    """Return the alert ``rule`` fires for ``metrics`` at ``now``, if any.

    The returned alert carries the rule with ``last_triggered`` stamped to ``now``.
    Disabled rules, rules still cooling down and unknown conditions never fire.
    """
    if not rule.enabled or in_cooldown(rule, now):
        return None

    value = metric_value(metrics, rule.condition)
    if value is None or not rule.operator.compare(value, rule.threshold):
        return None

    return Alert(
        rule=replace(rule, last_triggered=now),
        value=value,
        timestamp=metrics.timestamp,
    )


def apply_rule_updates(rule: AlertRule, updates: Mapping[str, Any]) -> AlertRule:
    unknown = set(updates) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update alert rule fields: {', '.join(sorted(unknown))}")

    # pydantic's ValidationError is a ValueError
    changes = {
        name: _FIELD_ADAPTERS[name].validate_python(value)
        for name, value in updates.items()
        if name != "severity"
    }
    if "severity" in updates:
        changes["severity"] = _parse_severity(updates["severity"])
    return replace(rule, **changes)


def _parse_severity(value: Any) -> Severity:
    if isinstance(value, str):
        try:
            return Severity[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown alert severity: {value!r}") from None
    return Severity(value)
