"""Edit primitives exchanged with the editing host."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class TextChange:
    """Text inserted into a document.

    ``offset`` is where ``text`` now starts in the current document text.
    """

    offset: int
    text: str


@dataclass(slots=True, frozen=True)
class Insertion:
    """Text to splice in at one offset."""

    offset: int
    text: str


@dataclass(slots=True, frozen=True)
class TextEdit:
    """One atomic edit made of insertions ordered by descending offset."""

    insertions: tuple[Insertion, ...] = ()

    @classmethod
    def of(cls, insertions: list[Insertion]) -> TextEdit:
        """Build an edit, ordering insertions so later offsets apply first."""
        return cls(insertions=tuple(sorted(insertions, key=lambda item: item.offset, reverse=True)))

    def __bool__(self) -> bool:
        return bool(self.insertions)


def apply_edit(text: str, edit: TextEdit) -> str:
    """Return ``text`` with every insertion of ``edit`` applied."""
    output = text
    for insertion in sorted(edit.insertions, key=lambda item: item.offset, reverse=True):
        offset = min(max(insertion.offset, 0), len(output))
        output = output[:offset] + insertion.text + output[offset:]
    return output
