from app_telemetry.alerts.rules import (
    METRIC_EXTRACTORS,
    apply_rule_updates,
    default_alert_rules,
    evaluate_rule,
    in_cooldown,
    metric_value,
)

__all__ = [
    "METRIC_EXTRACTORS",
    "apply_rule_updates",
    "default_alert_rules",
    "evaluate_rule",
    "in_cooldown",
    "metric_value",
]
