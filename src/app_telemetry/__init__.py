__version__ = "0.1.0"

from app_telemetry.analyzers import (
    AnalyzerRegistry,
    ExecutionTimeAnalyzer,
    NPlusOneAnalyzer,
    QueryAnalyzer,
    QueryShapeAnalyzer,
    StructureAnalyzer,
)
from app_telemetry.config import MonitoringSettings
from app_telemetry.core import MonitoringService
from app_telemetry.database import DatabaseAnalyzer
from app_telemetry.domain import (
    Alert,
    AlertRule,
    ComparisonOperator,
    DatabaseMetrics,
    Operation,
    QueryAnalysis,
    QueryMetadata,
    QueryPattern,
    Severity,
    SystemMetrics,
)
from app_telemetry.log import configure_logging
from app_telemetry.metrics import MetricsCollector
from app_telemetry.output import AlertOutput, ConsoleAlertOutput

__all__ = [
    "__version__",
    "MonitoringService",
    "MonitoringSettings",
    "MetricsCollector",
    "DatabaseAnalyzer",
    "configure_logging",
    "Alert",
    "AlertRule",
    "ComparisonOperator",
    "DatabaseMetrics",
    "Operation",
    "QueryAnalysis",
    "QueryMetadata",
    "QueryPattern",
    "Severity",
    "SystemMetrics",
    "QueryAnalyzer",
    "AnalyzerRegistry",
    "ExecutionTimeAnalyzer",
    "NPlusOneAnalyzer",
    "QueryShapeAnalyzer",
    "StructureAnalyzer",
    "AlertOutput",
    "ConsoleAlertOutput",
]
