from collections import Counter
from collections.abc import Sequence

from app_telemetry.domain import Operation, QueryAnalysis

MAX_RECOMMENDATIONS = 10

SLOW_SHARE = 0.1
HOT_TABLE_SHARE = 0.3
FAST_SELECT_MS = 100
FAST_SELECT_MIN_COUNT = 50
FAST_SELECT_SHARE = 0.7
UNPAGINATED_SLOW_MS = 500


def generate_recommendations(
    analyses: Sequence[QueryAnalysis],
    slow_threshold_ms: float = 1000,
) -> list[str]:
    """Workload-level advice derived from a window of analyses."""
    recommendations: list[str] = []
    total = len(analyses)
    if total == 0:
        return recommendations

    slow = [a for a in analyses if a.execution_time > slow_threshold_ms]
    if len(slow) > total * SLOW_SHARE:
        recommendations.append(
            f"{len(slow) / total:.0%} of queries are slow. "
            "Review database indexes and query patterns."
        )

    table, table_count = Counter(a.table for a in analyses).most_common(1)[0]
    if table_count > total * HOT_TABLE_SHARE:
        recommendations.append(
            f"Table '{table}' accounts for {table_count / total:.0%} of queries. "
            "Consider optimizing its indexes."
        )

    selects = [a for a in analyses if a.operation is Operation.SELECT]
    fast_selects = [a for a in selects if a.execution_time < FAST_SELECT_MS]
    if len(fast_selects) > FAST_SELECT_MIN_COUNT and len(fast_selects) > len(selects) * FAST_SELECT_SHARE:
        recommendations.append(
            "High number of fast SELECT queries detected. "
            "Check for N+1 query patterns and consider eager loading."
        )

    unpaginated = [
        a
        for a in selects
        if "limit" not in a.query.lower() and a.execution_time > UNPAGINATED_SLOW_MS
    ]
    if unpaginated:
        recommendations.append(
            f"{len(unpaginated)} slow queries without LIMIT detected. "
            "Implement pagination for large result sets."
        )

    return recommendations[:MAX_RECOMMENDATIONS]
