from app_telemetry.metrics.accumulators import (
    EndpointStats,
    ErrorTracker,
    RequestSample,
    RequestTracker,
    SlowQueryLog,
    SlowQueryRecord,
)
from app_telemetry.metrics.collector import DatabaseMonitor, MetricsCollector
from app_telemetry.metrics.system import HostSampler, SystemSampler

__all__ = [
    "MetricsCollector",
    "DatabaseMonitor",
    "HostSampler",
    "SystemSampler",
    "EndpointStats",
    "ErrorTracker",
    "RequestSample",
    "RequestTracker",
    "SlowQueryLog",
    "SlowQueryRecord",
]
