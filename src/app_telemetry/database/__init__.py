from app_telemetry.database.analyzer import DatabaseAnalyzer, SlowQuerySink
from app_telemetry.database.patterns import summarize_patterns
from app_telemetry.database.recommendations import generate_recommendations
from app_telemetry.database.store import QueryStore

__all__ = [
    "DatabaseAnalyzer",
    "SlowQuerySink",
    "QueryStore",
    "summarize_patterns",
    "generate_recommendations",
]
