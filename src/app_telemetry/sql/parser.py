import re

from app_telemetry.domain import Operation

_REDACTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"password\s*=\s*'[^']*'", re.IGNORECASE), "password = '[REDACTED]'"),
    (re.compile(r"token\s*=\s*'[^']*'", re.IGNORECASE), "token = '[REDACTED]'"),
    (re.compile(r"secret\s*=\s*'[^']*'", re.IGNORECASE), "secret = '[REDACTED]'"),
)

_IDENTIFIER = r"([a-zA-Z_][a-zA-Z0-9_]*)"

# Searched in order; the first clause that matches names the table.
_TABLE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"\bfrom\s+{_IDENTIFIER}", re.IGNORECASE),
    re.compile(rf"\binto\s+{_IDENTIFIER}", re.IGNORECASE),
    re.compile(rf"\bupdate\s+{_IDENTIFIER}", re.IGNORECASE),
    re.compile(rf"\bdelete\s+from\s+{_IDENTIFIER}", re.IGNORECASE),
)

_OPERATIONS: tuple[Operation, ...] = (
    Operation.SELECT,
    Operation.INSERT,
    Operation.UPDATE,
    Operation.DELETE,
)

_PARAMETER = re.compile(r"\$\d+")
_NUMBER = re.compile(r"\b\d+\b")
_STRING = re.compile(r"'[^']*'")
_WHITESPACE = re.compile(r"\s+")

UNKNOWN_TABLE = "unknown"


def sanitize_query(query: str) -> str:
    """Redact credential literals so the query is safe to store and log."""
    for pattern, replacement in _REDACTIONS:
        query = pattern.sub(replacement, query)
    return query.strip()


def extract_table_name(query: str) -> str:
    for pattern in _TABLE_PATTERNS:
        match = pattern.search(query)
        if match:
            return match.group(1).lower()
    return UNKNOWN_TABLE


def detect_operation(query: str) -> Operation:
    head = query.strip().lower()
    for operation in _OPERATIONS:
        if head.startswith(operation.value.lower()):
            return operation
    return Operation.UNKNOWN


def normalize_query(query: str) -> str:
    """Reduce a query to its shape: literals become ``?`` and whitespace collapses.

    Queries that differ only in literal values normalize to the same string.
    """
    pattern = query.lower()
    pattern = _PARAMETER.sub("?", pattern)
    pattern = _NUMBER.sub("?", pattern)
    pattern = _STRING.sub("?", pattern)
    pattern = _WHITESPACE.sub(" ", pattern)
    return pattern.strip()
