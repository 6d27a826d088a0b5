from app_telemetry.domain import Alert


class ConsoleAlertOutput:
    """Console output adapter for alerts."""

    def __init__(self, prefix: str = "[ALERT]") -> None:
        self._prefix = prefix

    @property
    def name(self) -> str:
        return "console"

    async def send(self, alert: Alert) -> None:
        rule = alert.rule
        print(f"{self._prefix} [{alert.severity.name}] {rule.name} ({rule.id})")
        print(
            f"  - {rule.condition} = {alert.value:g} "
            f"({rule.operator.value} {rule.threshold:g}) at {alert.timestamp.isoformat()}"
        )
