import threading
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime

from app_telemetry.domain import RecentError, SlowEndpoint


@dataclass(frozen=True, slots=True)
class RequestSample:
    timestamp: datetime
    response_time: float
    is_error: bool


class EndpointStats:
    """Recent samples for one ``"METHOD path"`` key.

    The error counter is derived from the retained samples, so it drops to zero
    whenever the sample list empties.
    """

    def __init__(self, max_samples: int = 100) -> None:
        self._samples: deque[RequestSample] = deque(maxlen=max_samples)

    def record(self, sample: RequestSample) -> None:
        self._samples.append(sample)

    @property
    def times(self) -> list[float]:
        return [s.response_time for s in self._samples]

    @property
    def count(self) -> int:
        return len(self._samples)

    @property
    def errors(self) -> int:
        return sum(1 for s in self._samples if s.is_error)

    @property
    def avg_time(self) -> float:
        if not self._samples:
            return 0.0
        return sum(s.response_time for s in self._samples) / len(self._samples)

    def prune(self, cutoff: datetime) -> None:
        while self._samples and self._samples[0].timestamp <= cutoff:
            self._samples.popleft()


class RequestTracker:
    def __init__(self, max_response_times: int = 1000, max_endpoint_samples: int = 100) -> None:
        self._max_endpoint_samples = max_endpoint_samples
        self._recent: deque[RequestSample] = deque(maxlen=max_response_times)
        self._endpoints: dict[str, EndpointStats] = {}
        self._lock = threading.Lock()

    @staticmethod
    def endpoint_key(endpoint: str, method: str) -> str:
        return f"{method} {endpoint}"

    def record(self, endpoint: str, method: str, sample: RequestSample) -> None:
        key = self.endpoint_key(endpoint, method)
        with self._lock:
            stats = self._endpoints.get(key)
            if stats is None:
                stats = self._endpoints[key] = EndpointStats(self._max_endpoint_samples)
            stats.record(sample)
            self._recent.append(sample)

    def endpoint(self, endpoint: str, method: str) -> EndpointStats | None:
        with self._lock:
            return self._endpoints.get(self.endpoint_key(endpoint, method))

    def avg_response_time(self) -> float:
        with self._lock:
            if not self._recent:
                return 0.0
            return sum(s.response_time for s in self._recent) / len(self._recent)

    def totals(self) -> tuple[int, int]:
        """Requests and errors retained across all endpoints."""
        with self._lock:
            requests = sum(stats.count for stats in self._endpoints.values())
            errors = sum(stats.errors for stats in self._endpoints.values())
            return requests, errors

    def requests_since(self, cutoff: datetime) -> int:
        with self._lock:
            return sum(1 for s in self._recent if s.timestamp > cutoff)

    def slow_endpoints(self, threshold_ms: float, limit: int = 5) -> list[SlowEndpoint]:
        with self._lock:
            candidates = [
                SlowEndpoint(endpoint=key, avg_time=stats.avg_time, count=stats.count)
                for key, stats in self._endpoints.items()
                if stats.avg_time > threshold_ms
            ]
        candidates.sort(key=lambda e: e.avg_time, reverse=True)
        return candidates[:limit]

    def prune(self, cutoff: datetime) -> None:
        with self._lock:
            while self._recent and self._recent[0].timestamp <= cutoff:
                self._recent.popleft()
            for stats in self._endpoints.values():
                stats.prune(cutoff)


class ErrorTracker:
    """Per-level counters plus a deduplicated, newest-first list of recent errors."""

    def __init__(self, max_recent: int = 50) -> None:
        self._max_recent = max_recent
        self._counts: dict[str, int] = {}
        self._recent: list[RecentError] = []
        self._lock = threading.Lock()

    def record(self, level: str, message: str, timestamp: datetime) -> None:
        with self._lock:
            self._counts[level] = self._counts.get(level, 0) + 1

            for index, existing in enumerate(self._recent):
                if existing.level == level and existing.message == message:
                    self._recent[index] = replace(
                        existing, count=existing.count + 1, timestamp=timestamp
                    )
                    return

            self._recent.insert(0, RecentError(level=level, message=message, timestamp=timestamp))
            del self._recent[self._max_recent :]

    def counts_by_level(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def recent(self, limit: int | None = None) -> list[RecentError]:
        with self._lock:
            return list(self._recent if limit is None else self._recent[:limit])

    def reset_counts(self) -> None:
        with self._lock:
            self._counts.clear()


@dataclass(frozen=True, slots=True)
class SlowQueryRecord:
    query: str
    time: float
    timestamp: datetime


class SlowQueryLog:
    def __init__(self, threshold_ms: float = 1000) -> None:
        self.threshold_ms = threshold_ms
        self._records: list[SlowQueryRecord] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def record(self, query: str, time_ms: float, timestamp: datetime) -> bool:
        if time_ms <= self.threshold_ms:
            return False
        with self._lock:
            self._records.append(SlowQueryRecord(query=query, time=time_ms, timestamp=timestamp))
        return True

    def records(self) -> list[SlowQueryRecord]:
        with self._lock:
            return list(self._records)

    def count_since(self, cutoff: datetime) -> int:
        with self._lock:
            return sum(1 for r in self._records if r.timestamp > cutoff)

    def prune(self, cutoff: datetime) -> None:
        with self._lock:
            self._records = [r for r in self._records if r.timestamp > cutoff]
