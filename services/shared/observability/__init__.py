"""
Shared observability helpers (logging, request context, privacy utilities).

Services import from this package to get consistent JSON logs and to keep
household figures out of log lines.
"""

from .logging_setup import (
    CORRELATION_ID_HEADER,
    RequestContextToken,
    bind_request_context,
    current_request_id,
    ensure_request_id,
    reset_request_context,
    setup_logging,
)
from .privacy import hash_payload, redact_fields

__all__ = [
    "hash_payload",
    "redact_fields",
    "CORRELATION_ID_HEADER",
    "RequestContextToken",
    "bind_request_context",
    "current_request_id",
    "ensure_request_id",
    "reset_request_context",
    "setup_logging",
]
