"""Structured logging utilities."""

from .audit import AuditEvent, JsonlAuditLogger, read_jsonl, sanitize_arguments, utc_timestamp
from .diagnostics import DiagnosticEvent, JsonlDiagnosticLog

__all__ = [
    "AuditEvent",
    "DiagnosticEvent",
    "JsonlAuditLogger",
    "JsonlDiagnosticLog",
    "read_jsonl",
    "sanitize_arguments",
    "utc_timestamp",
]
