"""Identifier indexing package."""

from .discovery import (
    detect_index_delta,
    discover_files,
    has_allowed_extension,
    is_watched_path,
    record_map,
    should_exclude,
)
from .extraction import (
    AttributeMatch,
    TextDocument,
    extract_identifiers,
    iter_attribute_matches,
    split_attribute_value,
)
from .manager import IdentifierIndex, IndexStatus, ScanCancelledError
from .models import (
    CLASS_KIND,
    ID_KIND,
    FileRecord,
    IdentifierRecord,
    IndexDelta,
    IndexSnapshot,
)
from .watcher import FILE_EVENTS, DocumentWatcher

__all__ = [
    "AttributeMatch",
    "CLASS_KIND",
    "DocumentWatcher",
    "FILE_EVENTS",
    "FileRecord",
    "ID_KIND",
    "IdentifierIndex",
    "IdentifierRecord",
    "IndexDelta",
    "IndexSnapshot",
    "IndexStatus",
    "ScanCancelledError",
    "TextDocument",
    "detect_index_delta",
    "discover_files",
    "extract_identifiers",
    "has_allowed_extension",
    "is_watched_path",
    "iter_attribute_matches",
    "record_map",
    "should_exclude",
    "split_attribute_value",
]
