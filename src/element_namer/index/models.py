"""Typed models for indexing state."""

from __future__ import annotations

from dataclasses import dataclass

CLASS_KIND = "class"
ID_KIND = "id"


@dataclass(slots=True, frozen=True)
class FileRecord:
    """Represents a document tracked by the index."""

    path: str
    size: int
    mtime_ns: int
    content_hash: str


@dataclass(slots=True, frozen=True)
class IndexDelta:
    """Deterministic change classification between two discovery passes."""

    added: tuple[str, ...]
    updated: tuple[str, ...]
    unchanged: tuple[str, ...]
    removed: tuple[str, ...]

    @property
    def changed(self) -> bool:
        """Return True when any document was created, modified or deleted."""
        return bool(self.added or self.updated or self.removed)


@dataclass(slots=True, frozen=True)
class IdentifierRecord:
    """One observed class or id token."""

    name: str
    kind: str
    source: str
    line: int


@dataclass(slots=True, frozen=True)
class IndexSnapshot:
    """Immutable result of one full scan."""

    records: tuple[IdentifierRecord, ...] = ()
    document_count: int = 0
    failed_paths: tuple[str, ...] = ()
    created_at: str | None = None

    def names(self, kind: str) -> list[str]:
        """Return distinct names of one kind in first-seen order."""
        seen: dict[str, None] = {}
        for record in self.records:
            if record.kind == kind:
                seen.setdefault(record.name)
        return list(seen)

    def class_names(self) -> list[str]:
        return self.names(CLASS_KIND)

    def id_names(self) -> list[str]:
        return self.names(ID_KIND)

