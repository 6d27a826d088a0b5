from typing import Protocol, runtime_checkable

from app_telemetry.domain import Finding, Query


@runtime_checkable
class QueryAnalyzer(Protocol):
    """Protocol for query analyzers."""

    @property
    def name(self) -> str:
        ...

    def analyze(self, query: Query) -> Finding | None:
        ...
