"""Lexical class/id attribute extraction over raw markup text."""

from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Final

from element_namer.index.models import CLASS_KIND, ID_KIND, IdentifierRecord

ATTRIBUTE_NAMES: Final[tuple[str, ...]] = ("className", "class", "id")

# The attribute name must not continue a longer name such as ``data-id`` or ``subclass``.
ATTRIBUTE_BOUNDARY: Final[str] = r"(?<![\w:.-])"
ATTRIBUTE_NAME_GROUP: Final[str] = f"(?P<attr>{'|'.join(ATTRIBUTE_NAMES)})"

# Values may wrap lines; ``<``, ``>`` and ``=`` mark an unterminated quote running into markup.
_ATTRIBUTE_VALUE_RE: Final[re.Pattern[str]] = re.compile(
    ATTRIBUTE_BOUNDARY
    + ATTRIBUTE_NAME_GROUP
    + r"=(?:\"(?P<double>[^\"<>=]+)\"|'(?P<single>[^'<>=]+)')"
)
_LINE_BREAK_RE: Final[re.Pattern[str]] = re.compile(r"[\r\n]")
_WHITESPACE_RE: Final[re.Pattern[str]] = re.compile(r"\s+")


@dataclass(slots=True, frozen=True)
class AttributeMatch:
    """One ``attr="value"`` occurrence with its offset in the document."""

    attribute: str
    value: str
    offset: int


@dataclass(slots=True)
class TextDocument:
    """Document text with offset and (line, character) conversions.

    Lines and characters are 0-based here; records carry 1-based lines.
    """

    text: str
    _line_starts: list[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        starts = [0]
        for index, char in enumerate(self.text):
            if char == "\n":
                starts.append(index + 1)
        self._line_starts = starts

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def position_at(self, offset: int) -> tuple[int, int]:
        """Convert a flat offset into a clamped ``(line, character)`` pair."""
        clamped = min(max(offset, 0), len(self.text))
        line = bisect_right(self._line_starts, clamped) - 1
        return line, clamped - self._line_starts[line]

    def offset_at(self, line: int, character: int) -> int:
        """Convert ``(line, character)`` into a clamped flat offset."""
        if line < 0:
            return 0
        if line >= len(self._line_starts):
            return len(self.text)
        start = self._line_starts[line]
        end = self._line_end(line)
        return min(start + max(character, 0), end)

    def line_at(self, line: int) -> str:
        """Return the text of one line without its line break."""
        if line < 0 or line >= len(self._line_starts):
            return ""
        return self.text[self._line_starts[line] : self._line_end(line)]

    def _line_end(self, line: int) -> int:
        if line + 1 < len(self._line_starts):
            end = self._line_starts[line + 1] - 1
        else:
            end = len(self.text)
        if end > self._line_starts[line] and self.text[end - 1] == "\r":
            end -= 1
        return end


def iter_attribute_matches(text: str) -> Iterator[AttributeMatch]:
    """Yield every quoted class/className/id assignment in text order."""
    for match in _ATTRIBUTE_VALUE_RE.finditer(text):
        value = match.group("double")
        if value is None:
            value = match.group("single")
        if match.group("attr") == "id" and _LINE_BREAK_RE.search(value):
            continue
        yield AttributeMatch(attribute=match.group("attr"), value=value, offset=match.start())


def split_attribute_value(attribute: str, value: str) -> list[tuple[str, str]]:
    """Split one attribute value into ``(name, kind)`` pairs.

    Class lists split on whitespace; id values never split.
    """
    if attribute == "id":
        stripped = value.strip()
        return [(stripped, ID_KIND)] if stripped else []
    return [(token, CLASS_KIND) for token in _WHITESPACE_RE.split(value) if token]


def extract_identifiers(document: TextDocument, source: str) -> list[IdentifierRecord]:
    """Extract every class/id record from one document."""
    records: list[IdentifierRecord] = []
    for match in iter_attribute_matches(document.text):
        line, _ = document.position_at(match.offset)
        for name, kind in split_attribute_value(match.attribute, match.value):
            records.append(IdentifierRecord(name=name, kind=kind, source=source, line=line + 1))
    return records
