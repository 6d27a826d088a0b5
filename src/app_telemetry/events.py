import inspect
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

import structlog

from app_telemetry.log import safe_log

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Subscriber = Callable[[T], Awaitable[None] | None]


class EventStream(Generic[T]):
    """Ordered fan-out of events to subscribers.

    Subscribers may be plain callables or coroutine functions. Every subscriber
    sees every published event, in publication order; one failing subscriber does
    not stop delivery to the others.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: list[Subscriber[T]] = []

    def subscribe(self, callback: Subscriber[T]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def publish(self, event: T) -> None:
        for callback in tuple(self._subscribers):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                safe_log(
                    logger,
                    "error",
                    "subscriber_failed",
                    stream=self.name,
                    error=str(exc),
                )
