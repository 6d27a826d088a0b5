from datetime import UTC, datetime

from app_telemetry.analyzers import (
    AnalyzerRegistry,
    ExecutionTimeAnalyzer,
    QueryAnalyzer,
    QueryShapeAnalyzer,
    StructureAnalyzer,
    combine_findings,
)
from app_telemetry.domain import Finding, Operation, Query, Severity
from app_telemetry.sql import detect_operation, extract_table_name


def make_query(sql: str, execution_time: float = 10.0) -> Query:
    return Query(
        sql=sql,
        table=extract_table_name(sql),
        operation=detect_operation(sql),
        execution_time=execution_time,
        timestamp=datetime(2026, 1, 14, 12, 0, 0, tzinfo=UTC),
    )


class MockAnalyzer:
    def __init__(self, name: str, finding: Finding | None = None) -> None:
        self._name = name
        self._finding = finding
        self.calls: list[Query] = []

    @property
    def name(self) -> str:
        return self._name

    def analyze(self, query: Query) -> Finding | None:
        self.calls.append(query)
        return self._finding


class TestQueryAnalyzerProtocol:
    def test_builtin_analyzers_satisfy_protocol(self) -> None:
        assert isinstance(ExecutionTimeAnalyzer(), QueryAnalyzer)
        assert isinstance(QueryShapeAnalyzer(), QueryAnalyzer)
        assert isinstance(StructureAnalyzer(), QueryAnalyzer)

    def test_mock_analyzer_satisfies_protocol(self) -> None:
        assert isinstance(MockAnalyzer("mock"), QueryAnalyzer)


class TestAnalyzerRegistry:
    def test_register_keeps_order(self) -> None:
        registry = AnalyzerRegistry()
        first = MockAnalyzer("first")
        second = MockAnalyzer("second")
        registry.register(first)
        registry.register(second)

        assert registry.analyzers == (first, second)

    def test_analyze_all_skips_empty_results(self) -> None:
        registry = AnalyzerRegistry()
        finding = Finding(analyzer_name="hit", suggestions=("do something",))
        registry.register(MockAnalyzer("miss"))
        registry.register(MockAnalyzer("hit", finding))

        findings = registry.analyze_all(make_query("SELECT 1"))

        assert findings == [finding]

    def test_analyze_all_runs_every_analyzer(self) -> None:
        registry = AnalyzerRegistry()
        analyzers = [MockAnalyzer(f"a{i}") for i in range(3)]
        for analyzer in analyzers:
            registry.register(analyzer)

        query = make_query("SELECT 1")
        registry.analyze_all(query)

        assert all(analyzer.calls == [query] for analyzer in analyzers)

    def test_empty_registry_returns_no_findings(self) -> None:
        assert AnalyzerRegistry().analyze_all(make_query("SELECT 1")) == []


class TestCombineFindings:
    def test_no_findings_is_low_with_no_suggestions(self) -> None:
        assert combine_findings([]) == ((), Severity.LOW)

    def test_suggestions_are_flattened_in_order(self) -> None:
        findings = [
            Finding(analyzer_name="a", suggestions=("one", "two")),
            Finding(analyzer_name="b", suggestions=("three",)),
        ]
        suggestions, _ = combine_findings(findings)
        assert suggestions == ("one", "two", "three")

    def test_highest_severity_wins(self) -> None:
        findings = [
            Finding(analyzer_name="a", suggestions=(), severity=Severity.HIGH),
            Finding(analyzer_name="b", suggestions=(), severity=Severity.MEDIUM),
            Finding(analyzer_name="c", suggestions=("x",)),
        ]
        _, severity = combine_findings(findings)
        assert severity == Severity.HIGH


class TestExecutionTimeAnalyzer:
    def test_fast_query_has_no_finding(self) -> None:
        assert ExecutionTimeAnalyzer().analyze(make_query("SELECT 1", 999)) is None

    def test_threshold_is_exclusive(self) -> None:
        assert ExecutionTimeAnalyzer().analyze(make_query("SELECT 1", 1000)) is None

    def test_above_one_second_is_medium(self) -> None:
        finding = ExecutionTimeAnalyzer().analyze(make_query("SELECT 1", 1500))
        assert finding is not None
        assert finding.severity == Severity.MEDIUM
        assert finding.suggestions == (
            "Query execution time is above threshold (>1s). Consider optimization.",
        )

    def test_above_two_seconds_is_high(self) -> None:
        finding = ExecutionTimeAnalyzer().analyze(make_query("SELECT 1", 2000.5))
        assert finding is not None
        assert finding.severity == Severity.HIGH

    def test_above_five_seconds_is_critical(self) -> None:
        finding = ExecutionTimeAnalyzer().analyze(make_query("SELECT 1", 5200))
        assert finding is not None
        assert finding.severity == Severity.CRITICAL
        assert len(finding.suggestions) == 1
        assert "extremely slow" in finding.suggestions[0]


class TestQueryShapeAnalyzer:
    def test_select_star(self) -> None:
        finding = QueryShapeAnalyzer().analyze(make_query("SELECT * FROM users WHERE id = 1"))
        assert finding is not None
        assert finding.suggestions == (
            "Avoid SELECT * - specify only needed columns to improve performance.",
        )
        assert finding.severity is None

    def test_unbounded_select(self) -> None:
        finding = QueryShapeAnalyzer().analyze(make_query("SELECT id FROM users"))
        assert finding is not None
        assert "Consider adding LIMIT clause for unbounded SELECT queries." in finding.suggestions

    def test_bounded_select_is_clean(self) -> None:
        assert QueryShapeAnalyzer().analyze(make_query("SELECT id FROM users LIMIT 10")) is None

    def test_or_condition(self) -> None:
        finding = QueryShapeAnalyzer().analyze(
            make_query("SELECT id FROM users WHERE role = 'a' OR role = 'b'")
        )
        assert finding is not None
        assert any("OR conditions can be slow" in s for s in finding.suggestions)

    def test_or_inside_identifier_is_ignored(self) -> None:
        assert QueryShapeAnalyzer().analyze(make_query("SELECT id FROM orders WHERE id = 1")) is None

    def test_function_in_where(self) -> None:
        finding = QueryShapeAnalyzer().analyze(
            make_query("SELECT id FROM users WHERE lower(email) = 'a@b.com'")
        )
        assert finding is not None
        assert finding.suggestions == (
            "Functions in WHERE clauses prevent index usage. Consider restructuring the query.",
        )

    def test_clean_query_has_no_finding(self) -> None:
        assert QueryShapeAnalyzer().analyze(make_query("SELECT id FROM users WHERE id = $1")) is None

    def test_non_select_is_not_unbounded(self) -> None:
        assert QueryShapeAnalyzer().analyze(make_query("DELETE FROM sessions")) is None


class TestStructureAnalyzer:
    def test_join_without_condition(self) -> None:
        finding = StructureAnalyzer().analyze(
            make_query("SELECT u.id FROM users u CROSS JOIN courses c LIMIT 5")
        )
        assert finding is not None
        assert finding.suggestions == (
            "Ensure JOINs have proper ON conditions to avoid Cartesian products.",
        )

    def test_join_with_on_is_clean(self) -> None:
        sql = "SELECT u.id FROM users u JOIN enrollments e ON e.user_id = u.id LIMIT 5"
        assert StructureAnalyzer().analyze(make_query(sql)) is None

    def test_join_with_using_is_clean(self) -> None:
        sql = "SELECT id FROM users JOIN enrollments USING (user_id) LIMIT 5"
        assert StructureAnalyzer().analyze(make_query(sql)) is None

    def test_subquery(self) -> None:
        finding = StructureAnalyzer().analyze(
            make_query("SELECT id FROM users WHERE id IN (SELECT user_id FROM enrollments) LIMIT 5")
        )
        assert finding is not None
        assert "Consider converting subqueries to JOINs for better performance." in (
            finding.suggestions
        )

    def test_order_by_without_limit(self) -> None:
        finding = StructureAnalyzer().analyze(
            make_query("SELECT id FROM lessons ORDER BY created_at")
        )
        assert finding is not None
        assert "ORDER BY without LIMIT can be expensive. Consider pagination." in (
            finding.suggestions
        )

    def test_order_by_with_limit_is_clean(self) -> None:
        sql = "SELECT id FROM lessons ORDER BY created_at LIMIT 20"
        assert StructureAnalyzer().analyze(make_query(sql)) is None

    def test_distinct(self) -> None:
        finding = StructureAnalyzer().analyze(make_query("SELECT DISTINCT course_id FROM enrollments"))
        assert finding is not None
        assert any(s.startswith("DISTINCT can be expensive") for s in finding.suggestions)

    def test_many_where_conditions(self) -> None:
        sql = (
            "SELECT id FROM users WHERE a = 1 AND b = 2 AND c = 3 "
            "AND d = 4 AND e = 5 AND f = 6 LIMIT 1"
        )
        finding = StructureAnalyzer().analyze(make_query(sql))
        assert finding is not None
        assert finding.suggestions == (
            "Complex WHERE clauses with many conditions may benefit from query restructuring.",
        )

    def test_five_where_conditions_are_fine(self) -> None:
        sql = "SELECT id FROM users WHERE a = 1 AND b = 2 AND c = 3 AND d = 4 AND e = 5 LIMIT 1"
        assert StructureAnalyzer().analyze(make_query(sql)) is None

    def test_operation_is_not_required(self) -> None:
        query = make_query("DELETE FROM sessions WHERE expires_at < now()")
        assert query.operation is Operation.DELETE
        assert StructureAnalyzer().analyze(query) is None
