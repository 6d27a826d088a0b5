import re
from typing import ClassVar

from app_telemetry.domain import Finding, Query


class QueryShapeAnalyzer:
    """Suggestions driven by the query text alone, independent of timing."""

    name: str = "query_shape"

    _select_star: ClassVar[re.Pattern[str]] = re.compile(r"\bselect\s+\*", re.IGNORECASE)
    _or_condition: ClassVar[re.Pattern[str]] = re.compile(r"\s+or\s+", re.IGNORECASE)
    _function_in_where: ClassVar[re.Pattern[str]] = re.compile(
        r"\bwhere\b.*\w+\(", re.IGNORECASE | re.DOTALL
    )

    def analyze(self, query: Query) -> Finding | None:
        sql = query.sql.lower()
        suggestions: list[str] = []

        if self._select_star.search(sql):
            suggestions.append(
                "Avoid SELECT * - specify only needed columns to improve performance."
            )

        if "select" in sql and "limit" not in sql and "where" not in sql:
            suggestions.append("Consider adding LIMIT clause for unbounded SELECT queries.")

        if self._or_condition.search(sql):
            suggestions.append(
                "OR conditions can be slow. Consider UNION or separate queries with proper indexes."
            )

        if self._function_in_where.search(sql):
            suggestions.append(
                "Functions in WHERE clauses prevent index usage. Consider restructuring the query."
            )

        if not suggestions:
            return None
        return Finding(analyzer_name=self.name, suggestions=tuple(suggestions))
