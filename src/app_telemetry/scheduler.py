import asyncio
import inspect
from collections.abc import Awaitable, Callable

import structlog

from app_telemetry.exceptions import SchedulerError
from app_telemetry.log import safe_log

logger = structlog.get_logger(__name__)

TickCallback = Callable[[], Awaitable[object] | object]


class PeriodicTask:
    """Runs a callback every ``interval`` seconds on the running event loop.

    A failing tick is logged and the next tick still runs.
    """

    def __init__(self, name: str, interval: float, callback: TickCallback) -> None:
        self.name = name
        self.interval = interval
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            raise SchedulerError(f"Periodic task {self.name!r} is already running")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise SchedulerError(
                f"Periodic task {self.name!r} requires a running event loop"
            ) from exc
        self._task = loop.create_task(self._run(), name=f"periodic:{self.name}")

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run_once(self) -> None:
        try:
            result = self._callback()
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            safe_log(logger, "error", "periodic_task_failed", task=self.name, error=str(exc))

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.run_once()
