from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MonitoringSettings(BaseSettings):
    """Tunables for collection, retention and alert delivery.

    Every field can be overridden from the environment with a ``TELEMETRY_``
    prefix, e.g. ``TELEMETRY_SLOW_QUERY_THRESHOLD_MS=500``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TELEMETRY_",
        env_file=".env",
        extra="ignore",
    )

    collection_interval_seconds: float = Field(default=5.0, gt=0)
    cleanup_interval_seconds: float = Field(default=60.0, gt=0)
    alert_check_interval_seconds: float = Field(default=30.0, gt=0)
    analyzer_cleanup_interval_seconds: float = Field(default=3600.0, gt=0)

    slow_query_threshold_ms: float = Field(default=1000.0, ge=0)
    slow_endpoint_threshold_ms: float = Field(default=1000.0, ge=0)

    max_stored_queries: int = Field(default=1000, gt=0)
    query_retention_hours: float = Field(default=24.0, gt=0)
    max_response_times: int = Field(default=1000, gt=0)
    max_endpoint_samples: int = Field(default=100, gt=0)
    max_recent_errors: int = Field(default=50, gt=0)
    slow_query_retention_minutes: float = Field(default=60.0, gt=0)
    # None keeps request samples until the size caps evict them.
    request_retention_minutes: float | None = Field(default=None, gt=0)

    n_plus_one_window_seconds: float = Field(default=5.0, gt=0)
    n_plus_one_threshold: int = Field(default=10, ge=0)

    history_minutes: float = Field(default=60.0, gt=0)

    log_level: str = "INFO"
    log_json: bool = False

    alert_sqs_queue_url: str | None = None
    alert_webhook_url: str | None = None
    aws_region: str = "us-east-1"

    @property
    def history_size(self) -> int:
        """Number of snapshots that cover ``history_minutes``."""
        return max(1, int(self.history_minutes * 60 / self.collection_interval_seconds))
