"""The editing host seen from the core: documents, prompts, messages and edits."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Protocol

from element_namer.editing.models import TextEdit
from element_namer.index.extraction import TextDocument

MARKUP_LANGUAGES = frozenset({"html", "javascriptreact", "typescriptreact", "vue", "jsx", "tsx"})
STYLESHEET_LANGUAGES = frozenset({"css", "scss", "less"})

LANGUAGE_BY_EXTENSION = {
    ".html": "html",
    ".htm": "html",
    ".jsx": "javascriptreact",
    ".tsx": "typescriptreact",
    ".vue": "vue",
    ".css": "css",
    ".scss": "scss",
    ".less": "less",
}

Validator = Callable[[str], str | None]


def language_for_path(path: str) -> str | None:
    """Guess a language id from a file extension."""
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    return LANGUAGE_BY_EXTENSION.get(suffix)


@dataclass(slots=True, frozen=True)
class ActiveDocument:
    """The document currently focused in the host, with the cursor offset."""

    path: str
    language_id: str
    text: str
    cursor: int = 0

    @property
    def is_markup(self) -> bool:
        return self.language_id in MARKUP_LANGUAGES

    @property
    def is_stylesheet(self) -> bool:
        return self.language_id in STYLESHEET_LANGUAGES

    def text_document(self) -> TextDocument:
        return TextDocument(self.text)


class EditorHost(Protocol):
    """Capabilities the commands need from an editor.

    ``prompt_text`` returns None on cancel. ``pick_one`` returns None on
    cancel. ``apply_edit`` returns False when the host rejected the edit.
    """

    def active_document(self) -> ActiveDocument | None: ...

    def show_info(self, message: str) -> None: ...

    def show_error(self, message: str) -> None: ...

    def prompt_text(self, prompt: str, value: str, validate: Validator) -> str | None: ...

    def pick_one(self, options: Sequence[str], placeholder: str) -> str | None: ...

    def apply_edit(self, document: ActiveDocument, edit: TextEdit) -> bool: ...


@dataclass(slots=True)
class ScriptedHost:
    """Host whose user answers are supplied up front.

    Used by the STDIO server, where the client collects answers before the
    request, and by tests. Messages and applied edits are recorded.
    """

    document: ActiveDocument | None = None
    text_answers: list[str | None] = field(default_factory=list)
    pick_answers: list[str | None] = field(default_factory=list)
    accept_edits: bool = True
    infos: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    edits: list[TextEdit] = field(default_factory=list)
    on_apply: Callable[[ActiveDocument, TextEdit], None] | None = None

    def active_document(self) -> ActiveDocument | None:
        return self.document

    def show_info(self, message: str) -> None:
        self.infos.append(message)

    def show_error(self, message: str) -> None:
        self.errors.append(message)

    def prompt_text(self, prompt: str, value: str, validate: Validator) -> str | None:
        if not self.text_answers:
            return None
        return self.text_answers.pop(0)

    def pick_one(self, options: Sequence[str], placeholder: str) -> str | None:
        if not self.pick_answers:
            return None
        answer = self.pick_answers.pop(0)
        if answer is not None and answer not in options:
            return None
        return answer

    def apply_edit(self, document: ActiveDocument, edit: TextEdit) -> bool:
        if self.on_apply is not None:
            self.on_apply(document, edit)
        if not self.accept_edits:
            return False
        self.edits.append(edit)
        return True
