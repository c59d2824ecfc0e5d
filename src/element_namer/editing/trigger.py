"""Detects freshly typed empty class/id attributes and fills them in."""

from __future__ import annotations

import re
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Final

from element_namer.config import GenerationConfig
from element_namer.editing.models import Insertion, TextChange, TextEdit
from element_namer.index.extraction import ATTRIBUTE_BOUNDARY, ATTRIBUTE_NAME_GROUP, TextDocument
from element_namer.naming.generator import validate_prefix

_EMPTY_ATTRIBUTE_RE: Final[re.Pattern[str]] = re.compile(
    ATTRIBUTE_BOUNDARY + ATTRIBUTE_NAME_GROUP + r"=(?P<quote>['\"])(?P=quote)"
)
_OPEN_ATTRIBUTE_RE: Final[re.Pattern[str]] = re.compile(
    r"(?:^|\s)" + ATTRIBUTE_NAME_GROUP + r"\s*=\s*$"
)
_TAG_OPEN_RE: Final[re.Pattern[str]] = re.compile(r"<(?P<tag>[a-zA-Z][\w:-]*)")
_QUOTES: Final[str] = "\"'"


@dataclass(slots=True, frozen=True)
class PendingInsertion:
    """An empty attribute waiting for a generated value."""

    attribute: str
    offset: int


def find_empty_attributes(document: TextDocument, change: TextChange) -> list[PendingInsertion]:
    """Return the empty attributes a change produced.

    Direct matches inside the inserted span win. Otherwise a one-character
    insertion that closed a previously opened ``attr="`` is recognised.
    """
    end = change.offset + len(change.text)
    found = [
        PendingInsertion(
            attribute=match.group("attr"),
            offset=match.end() - 1,
        )
        for match in _EMPTY_ATTRIBUTE_RE.finditer(document.text, change.offset, end)
    ]
    if found:
        return found
    closing = _closing_quote_insertion(document, end)
    return [closing] if closing is not None else []


def _closing_quote_insertion(document: TextDocument, offset: int) -> PendingInsertion | None:
    line, character = document.position_at(offset)
    text = document.line_at(line)
    if character <= 0 or character >= len(text):
        return None
    quote = text[character]
    if quote not in _QUOTES or text[character - 1] != quote:
        return None
    match = _OPEN_ATTRIBUTE_RE.search(text[: character - 1])
    if match is None:
        return None
    return PendingInsertion(attribute=match.group("attr"), offset=offset)


def tag_name_before(text: str, offset: int) -> str | None:
    """Return the name of the tag still open at ``offset``, if any."""
    start = text.rfind(">", 0, offset) + 1
    match = _TAG_OPEN_RE.search(text, start, offset)
    if match is None:
        return None
    return match.group("tag")


def resolve_prefix(text: str, offset: int, config: GenerationConfig) -> str:
    """Choose the generated-name prefix for one insertion point."""
    if config.auto_prefix_mode != "element":
        return config.fallback_prefix
    tag = tag_name_before(text, offset)
    if tag is None or validate_prefix(tag) is not None:
        return config.fallback_prefix
    return tag


def plan_auto_insert(
    document: TextDocument,
    changes: Sequence[TextChange],
    config: GenerationConfig,
    generate: Callable[[str], str],
) -> TextEdit:
    """Build one edit that fills every empty attribute the changes produced.

    Names are requested from the highest offset down, matching the order the
    insertions are applied in.
    """
    pending: list[PendingInsertion] = []
    for change in changes:
        if not change.text:
            continue
        pending.extend(find_empty_attributes(document, change))
    if not pending:
        return TextEdit()

    unique = {item.offset: item for item in pending}
    insertions: list[Insertion] = []
    for offset in sorted(unique, reverse=True):
        prefix = resolve_prefix(document.text, offset, config)
        insertions.append(Insertion(offset=offset, text=generate(prefix)))
    return TextEdit.of(insertions)


class EditGuard:
    """Single-owner, non-blocking guard around edit application."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self) -> Iterator[bool]:
        """Yield True when the guard was acquired; False means drop the trigger."""
        acquired = self._lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                self._lock.release()
