from app_telemetry.analyzers.base import QueryAnalyzer
from app_telemetry.analyzers.execution_time import ExecutionTimeAnalyzer
from app_telemetry.analyzers.n_plus_one import NPlusOneAnalyzer
from app_telemetry.analyzers.query_shape import QueryShapeAnalyzer
from app_telemetry.analyzers.registry import AnalyzerRegistry, combine_findings
from app_telemetry.analyzers.structure import StructureAnalyzer

__all__ = [
    "QueryAnalyzer",
    "AnalyzerRegistry",
    "combine_findings",
    "ExecutionTimeAnalyzer",
    "NPlusOneAnalyzer",
    "QueryShapeAnalyzer",
    "StructureAnalyzer",
]
