import json

from aiobotocore.session import get_session
from aiomoto import mock_aws

from app_telemetry.output import AlertOutput
from app_telemetry.output.sqs import SqsAlertOutput


def test_sqs_output_implements_protocol():
    output = SqsAlertOutput(queue_url="https://sqs.us-east-1.amazonaws.com/123456789/test")
    assert isinstance(output, AlertOutput)


def test_sqs_output_name_property():
    output = SqsAlertOutput(queue_url="https://sqs.us-east-1.amazonaws.com/123456789/test")
    assert output.name == "sqs"


@mock_aws
async def test_sqs_output_send_to_queue(alert):
    session = get_session()
    async with session.create_client("sqs", region_name="us-east-1") as client:
        response = await client.create_queue(QueueName="test-queue")
        queue_url = response["QueueUrl"]

        output = SqsAlertOutput(queue_url=queue_url, region="us-east-1")

        await output.send(alert)

        messages = await client.receive_message(QueueUrl=queue_url)
        assert "Messages" in messages
        assert len(messages["Messages"]) == 1

        body = json.loads(messages["Messages"][0]["Body"])
        assert body["rule"]["id"] == "high-error-rate"
        assert body["rule"]["condition"] == "api.errorRate"
        assert body["value"] == 0.1
        assert body["timestamp"] == "2026-01-14T12:00:00+00:00"


@mock_aws
async def test_sqs_output_severity_serialized_as_label(alert):
    session = get_session()
    async with session.create_client("sqs", region_name="us-east-1") as client:
        response = await client.create_queue(QueueName="test-queue")
        queue_url = response["QueueUrl"]

        output = SqsAlertOutput(queue_url=queue_url, region="us-east-1")

        await output.send(alert)

        messages = await client.receive_message(
            QueueUrl=queue_url, MessageAttributeNames=["All"]
        )
        message = messages["Messages"][0]
        body = json.loads(message["Body"])

        assert body["rule"]["severity"] == "high"
        assert message["MessageAttributes"]["severity"]["StringValue"] == "high"
        assert message["MessageAttributes"]["rule_id"]["StringValue"] == "high-error-rate"
