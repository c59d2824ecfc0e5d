"""Workspace-scoped resolution of document paths sent by clients."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


class PathBlockedError(Exception):
    """Raised when a requested document path leaves the workspace root."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def resolve_document_path(repo_root: Path, candidate: str) -> tuple[Path, str]:
    """Return ``(absolute_path, workspace_relative_posix_path)`` for a client path.

    Absolute paths are accepted when they sit under the root; relative paths
    may not contain ``..`` segments.
    """
    root = repo_root.resolve()
    normalized = candidate.replace("\\", "/").strip()
    if not normalized:
        raise PathBlockedError(
            reason="Path is empty.",
            hint="Provide a workspace-relative path such as 'src/index.html'.",
        )

    if normalized.startswith("/") or WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        resolved = Path(normalized).resolve(strict=False)
    else:
        parts = [part for part in normalized.split("/") if part not in ("", ".")]
        if ".." in parts:
            raise PathBlockedError(
                reason="Path traversal is blocked.",
                hint="Remove '..' segments and use a workspace-relative path.",
            )
        resolved = root.joinpath(*parts).resolve(strict=False)

    if not resolved.is_relative_to(root):
        raise PathBlockedError(
            reason="Path is outside the workspace root.",
            hint="Use a document located under the configured workspace root.",
        )
    return resolved, resolved.relative_to(root).as_posix()
