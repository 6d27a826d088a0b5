import json

from aiobotocore.session import get_session

from app_telemetry.domain import Alert


class SqsAlertOutput:
    def __init__(self, queue_url: str, region: str = "us-east-1") -> None:
        self._queue_url = queue_url
        self._region = region
        self._session = get_session()

    @property
    def name(self) -> str:
        return "sqs"

    async def send(self, alert: Alert) -> None:
        async with self._session.create_client("sqs", region_name=self._region) as client:
            await client.send_message(
                QueueUrl=self._queue_url,
                MessageBody=json.dumps(alert.to_dict()),
                MessageAttributes={
                    "severity": {"DataType": "String", "StringValue": alert.severity.label},
                    "rule_id": {"DataType": "String", "StringValue": alert.rule.id},
                },
            )
