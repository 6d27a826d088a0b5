from app_telemetry.output.base import AlertOutput
from app_telemetry.output.console import ConsoleAlertOutput
from app_telemetry.output.sqs import SqsAlertOutput
from app_telemetry.output.webhook import WebhookAlertOutput

__all__ = ["AlertOutput", "ConsoleAlertOutput", "SqsAlertOutput", "WebhookAlertOutput"]
