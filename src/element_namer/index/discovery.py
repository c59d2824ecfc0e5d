"""Markup document discovery and create/modify/delete detection."""

from __future__ import annotations

import fnmatch
import hashlib
import os
import time
from collections.abc import Callable, Iterator
from dataclasses import asdict, dataclass
from pathlib import Path

from element_namer.config import IndexConfig
from element_namer.index.models import FileRecord, IndexDelta

_BINARY_SNIFF_BYTES = 4096
_HASH_CHUNK_BYTES = 128 * 1024
_GLOB_CHARS = frozenset("*?[]{}")

SkipHandler = Callable[[str, str], None]


@dataclass(slots=True)
class DiscoveryProfile:
    """Counters for one discovery pass, exposed through ``refresh_index``."""

    walked_files: int = 0
    excluded_by_glob: int = 0
    excluded_by_extension: int = 0
    oversized_excluded: int = 0
    binary_excluded: int = 0
    unreadable: int = 0
    unchanged_reused: int = 0
    hashed_files: int = 0
    total_seconds: float = 0.0


@dataclass(slots=True, frozen=True)
class _Document:
    relative_path: str
    full_path: Path
    size: int
    mtime_ns: int


def discover_files(
    repo_root: Path,
    config: IndexConfig,
    previous_records: dict[str, FileRecord] | None = None,
    profile: dict[str, object] | None = None,
    on_skip: SkipHandler | None = None,
    hash_contents: bool = True,
) -> list[FileRecord]:
    """Return a record for every watched markup document, sorted by path.

    Oversized, binary and unreadable documents are left out and reported to
    ``on_skip`` as ``(path, reason)``. A previous record is reused when size
    and mtime are unchanged, so unchanged documents are not hashed again.
    With ``hash_contents=False`` records carry an empty ``content_hash``.
    """
    started = time.perf_counter()
    counters = DiscoveryProfile()
    prior = previous_records or {}
    records: list[FileRecord] = []

    documents = sorted(
        _walk_documents(repo_root.resolve(), config, counters),
        key=lambda document: document.relative_path,
    )
    for document in documents:
        path = document.relative_path
        if document.size > config.max_file_bytes:
            counters.oversized_excluded += 1
            _report(on_skip, path, "File exceeds max_file_bytes limit.")
            continue
        previous = prior.get(path)
        if previous is not None and (previous.size, previous.mtime_ns) == (
            document.size,
            document.mtime_ns,
        ):
            counters.unchanged_reused += 1
            records.append(previous)
            continue
        try:
            binary = is_binary_file(document.full_path)
            content_hash = sha256_file(document.full_path) if hash_contents and not binary else ""
        except OSError as error:
            counters.unreadable += 1
            _report(on_skip, path, f"File could not be read: {error.strerror or error}.")
            continue
        if binary:
            counters.binary_excluded += 1
            _report(on_skip, path, "File content is not UTF-8 text.")
            continue
        if content_hash:
            counters.hashed_files += 1
        records.append(
            FileRecord(
                path=path,
                size=document.size,
                mtime_ns=document.mtime_ns,
                content_hash=content_hash,
            )
        )

    if profile is not None:
        counters.total_seconds = time.perf_counter() - started
        profile.update(asdict(counters))
    return records


def detect_index_delta(
    previous: dict[str, FileRecord],
    current_records: list[FileRecord],
) -> IndexDelta:
    """Classify documents as added, updated, unchanged or removed."""
    current = record_map(current_records)
    shared = sorted(previous.keys() & current.keys())
    return IndexDelta(
        added=tuple(sorted(current.keys() - previous.keys())),
        updated=tuple(path for path in shared if previous[path] != current[path]),
        unchanged=tuple(path for path in shared if previous[path] == current[path]),
        removed=tuple(sorted(previous.keys() - current.keys())),
    )


def record_map(records: list[FileRecord]) -> dict[str, FileRecord]:
    """Map records by relative path."""
    return {record.path: record for record in records}


def should_exclude(relative_path: str, exclude_globs: tuple[str, ...]) -> bool:
    """Return True when a path matches configured ignore globs."""
    anchored = f"/{relative_path}"
    return any(
        fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(anchored, pattern)
        for pattern in exclude_globs
    )


def has_allowed_extension(relative_path: str, include_extensions: tuple[str, ...]) -> bool:
    """Return True when file extension is included."""
    return Path(relative_path).suffix.lower() in include_extensions


def is_watched_path(relative_path: str, config: IndexConfig) -> bool:
    """Return True when a path is a document the index would scan."""
    normalized = relative_path.replace("\\", "/").lstrip("/")
    if not has_allowed_extension(normalized, config.include_extensions):
        return False
    return not should_exclude(normalized, config.exclude_globs)


def sha256_file(path: Path) -> str:
    """Hash a file in fixed-size chunks."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_HASH_CHUNK_BYTES), b""):
            digest.update(chunk)
    return digest.hexdigest()


def is_binary_file(path: Path) -> bool:
    """Sniff the first bytes for NUL or invalid UTF-8."""
    with path.open("rb") as handle:
        sample = handle.read(_BINARY_SNIFF_BYTES)
    if b"\x00" in sample:
        return True
    try:
        sample.decode("utf-8")
    except UnicodeDecodeError as error:
        # A multi-byte sequence cut at the sniff boundary is still text.
        truncated = error.reason == "unexpected end of data"
        return not (truncated and error.start >= len(sample) - 3)
    return False


def _walk_documents(
    root: Path, config: IndexConfig, counters: DiscoveryProfile
) -> Iterator[_Document]:
    """Yield candidate documents, pruning excluded directories."""
    pruned_names = _pruned_dir_names(config.exclude_globs)
    pending: list[Path] = [root]
    while pending:
        directory = pending.pop()
        try:
            with os.scandir(directory) as scanned:
                entries = sorted(scanned, key=lambda entry: entry.name)
        except OSError:
            continue
        subdirectories: list[Path] = []
        for entry in entries:
            full_path = Path(entry.path)
            relative = full_path.relative_to(root).as_posix()
            if entry.is_dir(follow_symlinks=False):
                if entry.name in pruned_names and should_exclude(
                    f"{relative}/", config.exclude_globs
                ):
                    continue
                subdirectories.append(full_path)
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            counters.walked_files += 1
            if should_exclude(relative, config.exclude_globs):
                counters.excluded_by_glob += 1
                continue
            if not has_allowed_extension(relative, config.include_extensions):
                counters.excluded_by_extension += 1
                continue
            try:
                stat = entry.stat(follow_symlinks=False)
            except OSError:
                continue
            yield _Document(relative, full_path, stat.st_size, stat.st_mtime_ns)
        pending.extend(reversed(subdirectories))


def _pruned_dir_names(exclude_globs: tuple[str, ...]) -> set[str]:
    """Directory names taken from ``**/name/**`` globs, skipped without descending."""
    names: set[str] = set()
    for pattern in exclude_globs:
        if not (pattern.startswith("**/") and pattern.endswith("/**")):
            continue
        name = pattern[3:-3].strip("/")
        if name and not _GLOB_CHARS.intersection(name):
            names.add(name)
    return names


def _report(on_skip: SkipHandler | None, path: str, reason: str) -> None:
    if on_skip is not None:
        on_skip(path, reason)
