"""Create/modify/delete detection for watched documents."""

from __future__ import annotations

from pathlib import Path

from element_namer.config import IndexConfig
from element_namer.index.discovery import (
    detect_index_delta,
    discover_files,
    is_watched_path,
    record_map,
)
from element_namer.index.manager import IdentifierIndex
from element_namer.index.models import FileRecord, IndexDelta

FILE_EVENTS = ("created", "changed", "deleted")


class DocumentWatcher:
    """Invalidates an index when a watched document changes.

    Hosts that emit file-system notifications call ``notify``; hosts that
    do not call ``poll`` periodically, which diffs two discovery passes.
    """

    def __init__(self, repo_root: Path, index_config: IndexConfig, index: IdentifierIndex) -> None:
        self._repo_root = repo_root.resolve()
        self._index_config = index_config
        self._index = index
        self._baseline: dict[str, FileRecord] | None = None

    def notify(self, path: str, event: str) -> bool:
        """Handle one host notification; return True when the index was invalidated."""
        if event not in FILE_EVENTS:
            raise ValueError(f"Unknown file event: {event}")
        if not is_watched_path(self._relative(path), self._index_config):
            return False
        self._index.invalidate()
        return True

    def poll(self) -> IndexDelta:
        """Diff the workspace against the previous poll, invalidating on any change.

        The first poll only records a baseline.
        """
        current = discover_files(
            self._repo_root, self._index_config, previous_records=self._baseline
        )
        if self._baseline is None:
            self._baseline = record_map(current)
            return IndexDelta(added=(), updated=(), unchanged=tuple(self._baseline), removed=())
        delta = detect_index_delta(previous=self._baseline, current_records=current)
        self._baseline = record_map(current)
        if delta.changed:
            self._index.invalidate()
        return delta

    def _relative(self, path: str) -> str:
        candidate = Path(path)
        if candidate.is_absolute():
            resolved = candidate.resolve(strict=False)
            if resolved.is_relative_to(self._repo_root):
                return resolved.relative_to(self._repo_root).as_posix()
        return path.replace("\\", "/")
