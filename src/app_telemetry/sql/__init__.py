from app_telemetry.sql.parser import (
    UNKNOWN_TABLE,
    detect_operation,
    extract_table_name,
    normalize_query,
    sanitize_query,
)

__all__ = [
    "UNKNOWN_TABLE",
    "detect_operation",
    "extract_table_name",
    "normalize_query",
    "sanitize_query",
]
