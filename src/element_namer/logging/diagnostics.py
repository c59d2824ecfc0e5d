"""Diagnostic channel for failures that must not interrupt editing."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path

from element_namer.logging.audit import read_jsonl, utc_timestamp


@dataclass(slots=True, frozen=True)
class DiagnosticEvent:
    """One internal failure, e.g. a document that could not be scanned."""

    timestamp: str
    component: str
    message: str
    path: str | None = None


class JsonlDiagnosticLog:
    """Append-only JSONL diagnostic log.

    Writing is best-effort: an unwritable log drops the event instead of
    raising into the caller.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def report(self, component: str, message: str, path: str | None = None) -> None:
        """Record one diagnostic event."""
        self.append(
            DiagnosticEvent(
                timestamp=utc_timestamp(),
                component=component,
                message=message,
                path=path,
            )
        )

    def append(self, event: DiagnosticEvent) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(asdict(event), sort_keys=True))
                handle.write("\n")
        except OSError:
            return

    def read(self, limit: int = 50) -> list[dict[str, object]]:
        """Read the most recent events."""
        if limit < 1:
            return []
        return read_jsonl(self._path)[-limit:]
