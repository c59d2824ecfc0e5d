"""Identifier index: scan orchestration and the single-slot snapshot cache."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from element_namer.config import IndexConfig
from element_namer.index.discovery import discover_files
from element_namer.index.extraction import TextDocument, extract_identifiers
from element_namer.index.models import IdentifierRecord, IndexSnapshot
from element_namer.logging import JsonlDiagnosticLog, utc_timestamp

_COMPONENT = "index"


@dataclass(slots=True, frozen=True)
class IndexStatus:
    """Current index status snapshot."""

    index_status: str
    generation: int
    last_scan_timestamp: str | None
    document_count: int
    record_count: int
    failed_document_count: int


class ScanCancelledError(Exception):
    """Raised when the caller abandons a scan; the stored snapshot is untouched."""


class IdentifierIndex:
    """Holds the most recent scan of class/id identifiers in a workspace.

    The cached snapshot is replaced as one step when a scan completes and
    dropped wholesale by ``invalidate``. ``generation`` increases on both, so
    consumers can tell whether what they derived from the index is stale.
    """

    def __init__(
        self,
        repo_root: Path,
        index_config: IndexConfig,
        diagnostics: JsonlDiagnosticLog | None = None,
    ) -> None:
        self._repo_root = repo_root.resolve()
        self._index_config = index_config
        self._diagnostics = diagnostics
        self._snapshot: IndexSnapshot | None = None
        self._generation = 0
        self._last_profile: dict[str, object] = {}

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def last_profile(self) -> dict[str, object]:
        """Discovery counters from the most recent scan."""
        return dict(self._last_profile)

    def scan(self, is_cancelled: Callable[[], bool] | None = None) -> IndexSnapshot:
        """Scan every watched document and publish a new snapshot."""
        started = time.perf_counter()
        profile: dict[str, object] = {}
        failed: list[str] = []

        def on_skip(path: str, reason: str) -> None:
            failed.append(path)
            self._report(reason, path)

        documents = discover_files(
            self._repo_root,
            self._index_config,
            profile=profile,
            on_skip=on_skip,
            hash_contents=False,
        )
        records: list[IdentifierRecord] = []
        for document in documents:
            if is_cancelled is not None and is_cancelled():
                raise ScanCancelledError("Identifier scan was cancelled.")
            try:
                text = (self._repo_root / document.path).read_text(
                    encoding="utf-8", errors="replace"
                )
            except OSError as error:
                failed.append(document.path)
                reason = error.strerror or error
                self._report(f"Document could not be read: {reason}.", document.path)
                continue
            records.extend(extract_identifiers(TextDocument(text), source=document.path))

        snapshot = IndexSnapshot(
            records=tuple(records),
            document_count=len(documents),
            failed_paths=tuple(sorted(set(failed))),
            created_at=utc_timestamp(),
        )
        profile["scan_seconds"] = time.perf_counter() - started
        self._last_profile = profile
        self._snapshot = snapshot
        self._generation += 1
        return snapshot

    def get_snapshot(self) -> IndexSnapshot:
        """Return the cached snapshot, scanning first when there is none."""
        if self._snapshot is not None:
            return self._snapshot
        return self.scan()

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next read rescans."""
        self._snapshot = None
        self._generation += 1

    def class_names(self) -> list[str]:
        return self.get_snapshot().class_names()

    def id_names(self) -> list[str]:
        return self.get_snapshot().id_names()

    def status(self) -> IndexStatus:
        """Describe the cache without triggering a scan."""
        snapshot = self._snapshot
        if snapshot is None:
            return IndexStatus(
                index_status="not_indexed",
                generation=self._generation,
                last_scan_timestamp=None,
                document_count=0,
                record_count=0,
                failed_document_count=0,
            )
        return IndexStatus(
            index_status="ready",
            generation=self._generation,
            last_scan_timestamp=snapshot.created_at,
            document_count=snapshot.document_count,
            record_count=len(snapshot.records),
            failed_document_count=len(snapshot.failed_paths),
        )

    def _report(self, message: str, path: str) -> None:
        if self._diagnostics is not None:
            self._diagnostics.report(_COMPONENT, message, path=path)
