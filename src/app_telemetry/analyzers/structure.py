import re
from typing import ClassVar

from app_telemetry.domain import Finding, Query


class StructureAnalyzer:
    """Suggestions about joins, subqueries, ordering and filter complexity."""

    name: str = "structure"

    MAX_WHERE_CONDITIONS: ClassVar[int] = 5

    _join: ClassVar[re.Pattern[str]] = re.compile(r"\bjoin\b")
    _join_condition: ClassVar[re.Pattern[str]] = re.compile(r"\b(?:on|using)\b")
    _subquery: ClassVar[re.Pattern[str]] = re.compile(r"\(\s*select\b")
    _order_by: ClassVar[re.Pattern[str]] = re.compile(r"\border\s+by\b")
    _distinct: ClassVar[re.Pattern[str]] = re.compile(r"\bdistinct\b")
    _where_clause: ClassVar[re.Pattern[str]] = re.compile(
        r"\bwhere\b.*?(?:\bgroup\b|\border\b|\blimit\b|$)", re.DOTALL
    )
    _and: ClassVar[re.Pattern[str]] = re.compile(r"\band\b")

    def analyze(self, query: Query) -> Finding | None:
        sql = query.sql.lower()
        suggestions: list[str] = []

        if self._join.search(sql) and not self._join_condition.search(sql):
            suggestions.append(
                "Ensure JOINs have proper ON conditions to avoid Cartesian products."
            )

        if self._subquery.search(sql):
            suggestions.append("Consider converting subqueries to JOINs for better performance.")

        if self._order_by.search(sql) and "limit" not in sql:
            suggestions.append("ORDER BY without LIMIT can be expensive. Consider pagination.")

        if self._distinct.search(sql):
            suggestions.append(
                "DISTINCT can be expensive. Verify if it's necessary or if duplicates "
                "can be avoided at source."
            )

        where = self._where_clause.search(sql)
        if where and len(self._and.findall(where.group(0))) + 1 > self.MAX_WHERE_CONDITIONS:
            suggestions.append(
                "Complex WHERE clauses with many conditions may benefit from query restructuring."
            )

        if not suggestions:
            return None
        return Finding(analyzer_name=self.name, suggestions=tuple(suggestions))
