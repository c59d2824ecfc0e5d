"""Selector completion candidates drawn from the identifier index."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from element_namer.index.models import CLASS_KIND, ID_KIND, IndexSnapshot

_CLASS_SELECTOR_RE: Final[re.Pattern[str]] = re.compile(r"\.(?P<typed>[\w-]*)$")
_ID_SELECTOR_RE: Final[re.Pattern[str]] = re.compile(r"#(?P<typed>[\w-]*)$")
_ABBREVIATION_RE: Final[re.Pattern[str]] = re.compile(
    r"(?:^|[\s<])(?P<tag>[a-zA-Z][\w-]*)?(?P<marker>[.#])(?P<typed>[\w-]*)$"
)


@dataclass(slots=True, frozen=True)
class SelectorContext:
    """What the text before the cursor asks for."""

    kind: str
    typed: str


@dataclass(slots=True, frozen=True)
class CompletionCandidate:
    """One completion item; the replace range covers the typed characters."""

    name: str
    kind: str
    source: str
    line: int
    replace_line: int
    replace_start: int
    replace_end: int

    @property
    def detail(self) -> str:
        return f"Found in: {self.source}"

    @property
    def documentation(self) -> str:
        return f"**File:** {self.source}\n\n**Line:** {self.line}"


def stylesheet_context(before_cursor: str) -> SelectorContext | None:
    """Match a ``.partial`` or ``#partial`` selector at the end of the text."""
    class_match = _CLASS_SELECTOR_RE.search(before_cursor)
    if class_match is not None:
        return SelectorContext(kind=CLASS_KIND, typed=class_match.group("typed"))
    id_match = _ID_SELECTOR_RE.search(before_cursor)
    if id_match is not None:
        return SelectorContext(kind=ID_KIND, typed=id_match.group("typed"))
    return None


def abbreviation_context(before_cursor: str) -> SelectorContext | None:
    """Match an abbreviation such as ``div.card`` or ``#main`` at the end of the text."""
    match = _ABBREVIATION_RE.search(before_cursor)
    if match is None:
        return None
    kind = CLASS_KIND if match.group("marker") == "." else ID_KIND
    return SelectorContext(kind=kind, typed=match.group("typed"))


def build_candidates(
    snapshot: IndexSnapshot,
    context: SelectorContext,
    line: int,
    character: int,
) -> list[CompletionCandidate]:
    """Deduplicate by name within the requested kind; first occurrence wins."""
    replace_start = character - len(context.typed)
    seen: set[str] = set()
    candidates: list[CompletionCandidate] = []
    for record in snapshot.records:
        if record.kind != context.kind or record.name in seen:
            continue
        if context.typed and context.typed not in record.name:
            continue
        seen.add(record.name)
        candidates.append(
            CompletionCandidate(
                name=record.name,
                kind=record.kind,
                source=record.source,
                line=record.line,
                replace_line=line,
                replace_start=replace_start,
                replace_end=character,
            )
        )
    return candidates


def complete_stylesheet(
    snapshot: IndexSnapshot, line_text: str, line: int, character: int
) -> list[CompletionCandidate]:
    """Candidates for a selector being typed in a stylesheet."""
    context = stylesheet_context(line_text[:character])
    if context is None:
        return []
    return build_candidates(snapshot, context, line, character)


def complete_markup(
    snapshot: IndexSnapshot, line_text: str, line: int, character: int
) -> list[CompletionCandidate]:
    """Candidates for a tag-qualified ``.``/``#`` abbreviation in markup."""
    context = abbreviation_context(line_text[:character])
    if context is None:
        return []
    return build_candidates(snapshot, context, line, character)
