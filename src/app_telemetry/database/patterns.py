from collections.abc import Iterable
from dataclasses import dataclass, field

from app_telemetry.domain import QueryAnalysis, QueryPattern
from app_telemetry.sql import normalize_query


@dataclass(slots=True)
class _PatternGroup:
    times: list[float] = field(default_factory=list)
    examples: list[str] = field(default_factory=list)


def summarize_patterns(
    analyses: Iterable[QueryAnalysis],
    limit: int = 10,
    max_examples: int = 3,
) -> list[QueryPattern]:
    """Group analyses by normalized shape, most frequent first."""
    groups: dict[str, _PatternGroup] = {}
    for analysis in analyses:
        group = groups.setdefault(normalize_query(analysis.query), _PatternGroup())
        group.times.append(analysis.execution_time)
        if len(group.examples) < max_examples:
            group.examples.append(analysis.query)

    patterns = [
        QueryPattern(
            pattern=pattern,
            count=len(group.times),
            avg_time=sum(group.times) / len(group.times),
            max_time=max(group.times),
            min_time=min(group.times),
            examples=tuple(group.examples),
        )
        for pattern, group in groups.items()
    ]
    patterns.sort(key=lambda p: p.count, reverse=True)
    return patterns[:limit]
