from app_telemetry.core.service import MonitoringService

__all__ = ["MonitoringService"]
