from app_telemetry.output import AlertOutput, ConsoleAlertOutput


def test_alert_output_protocol_is_runtime_checkable():
    assert getattr(AlertOutput, "_is_runtime_protocol", False)


def test_console_output_implements_protocol():
    output = ConsoleAlertOutput()
    assert isinstance(output, AlertOutput)


def test_console_output_name_property():
    output = ConsoleAlertOutput()
    assert output.name == "console"


async def test_console_output_send_formats_correctly(capsys, alert):
    output = ConsoleAlertOutput()

    await output.send(alert)

    captured = capsys.readouterr()
    lines = captured.out.splitlines()
    assert lines[0] == "[ALERT] [HIGH] High Error Rate (high-error-rate)"
    assert lines[1] == "  - api.errorRate = 0.1 (gt 0.05) at 2026-01-14T12:00:00+00:00"


async def test_console_output_send_with_custom_prefix(capsys, alert):
    output = ConsoleAlertOutput(prefix="[WARN]")

    await output.send(alert)

    captured = capsys.readouterr()
    assert "[WARN]" in captured.out
    assert "[ALERT]" not in captured.out
