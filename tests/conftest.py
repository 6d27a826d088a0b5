from datetime import UTC, datetime, timedelta

import pytest

from app_telemetry.config import MonitoringSettings
from app_telemetry.domain import (
    Alert,
    AlertRule,
    ComparisonOperator,
    CpuMetrics,
    HeapMetrics,
    MemoryMetrics,
    Severity,
)


class FakeClock:
    """Manually advanced replacement for the wall clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 14, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class StaticSampler:
    def __init__(self, memory_percentage: float = 42.0) -> None:
        self.memory_percentage = memory_percentage

    def cpu(self) -> CpuMetrics:
        return CpuMetrics(usage=12.5, load=(0.5, 0.7, 0.3))

    def memory(self) -> MemoryMetrics:
        total = 8 * 1024**3
        return MemoryMetrics(
            used=int(total * self.memory_percentage / 100),
            total=total,
            percentage=self.memory_percentage,
            heap=HeapMetrics(used=64 * 1024**2, total=256 * 1024**2),
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sampler() -> StaticSampler:
    return StaticSampler()


@pytest.fixture
def settings() -> MonitoringSettings:
    return MonitoringSettings(alert_sqs_queue_url=None, alert_webhook_url=None)


@pytest.fixture
def alert() -> Alert:
    rule = AlertRule(
        id="high-error-rate",
        name="High Error Rate",
        condition="api.errorRate",
        threshold=0.05,
        operator=ComparisonOperator.GT,
        severity=Severity.HIGH,
    )
    return Alert(rule=rule, value=0.1, timestamp=datetime(2026, 1, 14, 12, 0, 0, tzinfo=UTC))
