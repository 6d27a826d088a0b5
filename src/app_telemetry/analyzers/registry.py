from app_telemetry.analyzers.base import QueryAnalyzer
from app_telemetry.domain import Finding, Query, Severity


class AnalyzerRegistry:
    """Registry for managing and orchestrating query analyzers."""

    def __init__(self) -> None:
        self._analyzers: list[QueryAnalyzer] = []

    def register(self, analyzer: QueryAnalyzer) -> None:
        self._analyzers.append(analyzer)

    @property
    def analyzers(self) -> tuple[QueryAnalyzer, ...]:
        return tuple(self._analyzers)

    def analyze_all(self, query: Query) -> list[Finding]:
        findings: list[Finding] = []
        for analyzer in self._analyzers:
            result = analyzer.analyze(query)
            if result is not None:
                findings.append(result)
        return findings


def combine_findings(findings: list[Finding]) -> tuple[tuple[str, ...], Severity]:
    """Flatten suggestions in analyzer order and take the highest severity floor."""
    suggestions = tuple(s for finding in findings for s in finding.suggestions)
    severity = max(
        (finding.severity for finding in findings if finding.severity is not None),
        default=Severity.LOW,
    )
    return suggestions, severity
