"""Structured JSONL audit log utilities."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

_PLAIN_STRING_KEYS = frozenset({"path", "language_id", "kind", "event", "prefix", "mode"})


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Sanitized representation of a single tool request."""

    timestamp: str
    request_id: str
    tool: str
    ok: bool
    blocked: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Sanitize arguments so document contents never reach the log.

    Identifying fields such as ``path`` and ``prefix`` are kept. Any other
    string, including document ``text``, is reduced to presence and length.
    Containers are reduced to their type and size.
    """
    sanitized: dict[str, object] = {}
    for key in sorted(arguments):
        sanitized.update(_sanitize_value(key, arguments[key]))
    return sanitized


def _sanitize_value(key: str, value: object) -> dict[str, object]:
    if isinstance(value, str):
        if key in _PLAIN_STRING_KEYS:
            return {key: value}
        return {f"{key}_present": True, f"{key}_length": len(value)}
    if value is None or isinstance(value, (bool, int, float)):
        return {key: value}
    if isinstance(value, list):
        return {f"{key}_type": "list", f"{key}_length": len(value)}
    if isinstance(value, dict):
        return {f"{key}_type": "dict", f"{key}_keys": sorted(str(item) for item in value)}
    return {f"{key}_type": type(value).__name__}


class JsonlAuditLogger:
    """Append-only JSONL audit logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append a sanitized event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by timestamp lower bound."""
        if limit < 1:
            return []
        entries = read_jsonl(self._path)
        if since is not None:
            entries = [
                entry
                for entry in entries
                if isinstance(entry.get("timestamp"), str) and str(entry["timestamp"]) >= since
            ]
        if len(entries) <= limit:
            return entries
        return entries[-limit:]


def read_jsonl(path: Path) -> list[dict[str, object]]:
    """Read JSON objects one per line, skipping blank or corrupt lines."""
    entries: list[dict[str, object]] = []
    if not path.exists():
        return entries
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if not stripped:
                continue
            try:
                record = json.loads(stripped)
            except json.JSONDecodeError:
                continue
            if isinstance(record, dict):
                entries.append(record)
    return entries
