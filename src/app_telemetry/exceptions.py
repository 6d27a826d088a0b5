class TelemetryError(Exception):
    pass


class SchedulerError(TelemetryError):
    pass


class AlertDeliveryError(TelemetryError):
    pass


class RateLimitError(AlertDeliveryError):
    def __init__(
        self, message: str = "Rate limit exceeded", retry_after: float | None = None
    ) -> None:
        super().__init__(message)
        self.retry_after = retry_after
