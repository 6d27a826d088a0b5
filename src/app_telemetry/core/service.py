from collections.abc import Sequence
from types import TracebackType

from app_telemetry.clock import Clock, utc_now
from app_telemetry.config import MonitoringSettings
from app_telemetry.database import DatabaseAnalyzer
from app_telemetry.exceptions import SchedulerError
from app_telemetry.log import configure_logging
from app_telemetry.metrics import DatabaseMonitor, HostSampler, MetricsCollector
from app_telemetry.output import AlertOutput, SqsAlertOutput, WebhookAlertOutput
from app_telemetry.scheduler import PeriodicTask


class MonitoringService:
    """Composition root owning the collector, the analyzer and their timers.

    The analyzer forwards slow queries to the collector. Unless an external
    ``database_monitor`` is given, the analyzer also serves as the collector's
    database source. Alert outputs are taken from ``outputs`` plus whatever the
    settings configure (SQS queue, webhook URL). With ``setup_logging`` the
    structlog pipeline is configured from ``log_level`` and ``log_json``.

    Usage:
        async with MonitoringService() as monitoring:
            monitoring.collector.record_request("/api/courses", "GET", 120, 200)
            monitoring.analyzer.analyze_query("SELECT * FROM courses", 35)
    """

    def __init__(
        self,
        settings: MonitoringSettings | None = None,
        clock: Clock = utc_now,
        sampler: HostSampler | None = None,
        database_monitor: DatabaseMonitor | None = None,
        outputs: Sequence[AlertOutput] = (),
        setup_logging: bool = False,
    ) -> None:
        self.settings = settings or MonitoringSettings()
        if setup_logging:
            configure_logging(self.settings.log_level, json=self.settings.log_json)

        self.collector = MetricsCollector(
            settings=self.settings,
            clock=clock,
            sampler=sampler,
            database_monitor=database_monitor,
        )
        self.analyzer = DatabaseAnalyzer(
            slow_query_sink=self.collector,
            settings=self.settings,
            clock=clock,
        )
        if database_monitor is None:
            self.collector.database_monitor = self.analyzer

        self._outputs = tuple(outputs) + self._configured_outputs()
        for output in self._outputs:
            self.collector.add_output(output)

        self._analyzer_cleanup = PeriodicTask(
            "database_analyzer_cleanup",
            self.settings.analyzer_cleanup_interval_seconds,
            self.analyzer.cleanup,
        )

    def _configured_outputs(self) -> tuple[AlertOutput, ...]:
        outputs: list[AlertOutput] = []
        if self.settings.alert_sqs_queue_url:
            outputs.append(
                SqsAlertOutput(self.settings.alert_sqs_queue_url, region=self.settings.aws_region)
            )
        if self.settings.alert_webhook_url:
            outputs.append(WebhookAlertOutput(self.settings.alert_webhook_url))
        return tuple(outputs)

    @property
    def outputs(self) -> tuple[AlertOutput, ...]:
        return self._outputs

    @property
    def running(self) -> bool:
        return self.collector.running or self._analyzer_cleanup.running

    def start(self) -> None:
        self.collector.start()
        try:
            self._analyzer_cleanup.start()
        except SchedulerError:
            self.collector.cancel()
            raise

    async def stop(self) -> None:
        await self._analyzer_cleanup.stop()
        await self.collector.stop()

    async def __aenter__(self) -> "MonitoringService":
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()
