from typing import Protocol, runtime_checkable

import psutil

from app_telemetry.domain import CpuMetrics, HeapMetrics, MemoryMetrics


@runtime_checkable
class HostSampler(Protocol):
    def cpu(self) -> CpuMetrics:
        ...

    def memory(self) -> MemoryMetrics:
        ...


class SystemSampler:
    """Host CPU/memory figures from psutil, plus this process's resident memory.

    ``heap`` reports the process RSS as used and its virtual size as total.
    """

    def __init__(self, process: psutil.Process | None = None) -> None:
        self._process = process or psutil.Process()
        # The first non-blocking call only primes the counters and returns 0.0.
        psutil.cpu_percent(interval=None)

    def cpu(self) -> CpuMetrics:
        one, five, fifteen = psutil.getloadavg()
        return CpuMetrics(usage=psutil.cpu_percent(interval=None), load=(one, five, fifteen))

    def memory(self) -> MemoryMetrics:
        host = psutil.virtual_memory()
        info = self._process.memory_info()
        return MemoryMetrics(
            used=host.used,
            total=host.total,
            percentage=host.percent,
            heap=HeapMetrics(used=info.rss, total=info.vms),
        )
