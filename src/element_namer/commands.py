"""User-facing operations wired to index, generator and host."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from element_namer.completion import CompletionCandidate, complete_markup, complete_stylesheet
from element_namer.config import NamerConfig
from element_namer.editing import EditGuard, Insertion, TextChange, TextEdit, plan_auto_insert
from element_namer.host import ActiveDocument, EditorHost
from element_namer.index import (
    DocumentWatcher,
    IdentifierIndex,
    IndexDelta,
    IndexSnapshot,
    ScanCancelledError,
)
from element_namer.logging import JsonlDiagnosticLog
from element_namer.naming import (
    DEFAULT_PREFIX,
    NameExhaustedError,
    SeededGenerator,
    UniqueNameGenerator,
    validate_prefix,
)

ATTRIBUTE_CHOICES = ("class", "id")
PREFIX_PROMPT = 'Enter a prefix for the class name (e.g., "button", "card")'
KIND_PLACEHOLDER = "Add as class or id?"

NO_EDITOR_MESSAGE = "No active editor"
WRONG_LANGUAGE_MESSAGE = "This command only works in HTML/JSX/Vue files"
BUSY_MESSAGE = "Another edit is still being applied"
EDIT_REJECTED_MESSAGE = "The editor rejected the edit"
REFRESHED_MESSAGE = "Workspace scan refreshed"


@dataclass(slots=True, frozen=True)
class CommandResult:
    """Outcome of one command invocation."""

    status: str
    message: str | None = None
    edit: TextEdit | None = None
    generated_names: tuple[str, ...] = ()


class NamerWorkspace:
    """Per-workspace state: the index, its watcher, the generator and the edit guard.

    Everything here is owned by the instance; separate workspaces share nothing.
    """

    def __init__(
        self,
        config: NamerConfig,
        diagnostics: JsonlDiagnosticLog | None = None,
        generator: UniqueNameGenerator | None = None,
    ) -> None:
        self._config = config
        self._diagnostics = diagnostics
        self.index = IdentifierIndex(
            repo_root=config.repo_root,
            index_config=config.index,
            diagnostics=diagnostics,
        )
        self.watcher = DocumentWatcher(config.repo_root, config.index, self.index)
        self.names = SeededGenerator(self.index, generator)
        self.guard = EditGuard()

    @property
    def config(self) -> NamerConfig:
        return self._config

    def generate_and_insert(self, host: EditorHost) -> CommandResult:
        """Prompt for prefix and attribute, then insert ``attr="name"`` at the cursor."""
        document = host.active_document()
        if document is None:
            host.show_error(NO_EDITOR_MESSAGE)
            return CommandResult(status="failed", message=NO_EDITOR_MESSAGE)
        if not document.is_markup:
            host.show_error(WRONG_LANGUAGE_MESSAGE)
            return CommandResult(status="failed", message=WRONG_LANGUAGE_MESSAGE)

        prefix = self._prompt_prefix(host)
        if prefix is None:
            return CommandResult(status="cancelled")
        attribute = host.pick_one(ATTRIBUTE_CHOICES, KIND_PLACEHOLDER)
        if attribute is None:
            return CommandResult(status="cancelled")

        with self.guard.hold() as acquired:
            if not acquired:
                host.show_info(BUSY_MESSAGE)
                return CommandResult(status="skipped", message=BUSY_MESSAGE)
            try:
                name = self.names.generate(prefix or DEFAULT_PREFIX)
            except NameExhaustedError as error:
                host.show_error(str(error))
                return CommandResult(status="failed", message=str(error))
            replacement = f'{attribute}="{name}"'
            edit = TextEdit.of([Insertion(offset=document.cursor, text=replacement)])
            if not host.apply_edit(document, edit):
                host.show_error(EDIT_REJECTED_MESSAGE)
                return CommandResult(status="failed", message=EDIT_REJECTED_MESSAGE)

        message = f"Generated: {replacement}"
        host.show_info(message)
        return CommandResult(status="inserted", message=message, edit=edit, generated_names=(name,))

    def refresh_index(self, host: EditorHost | None = None) -> IndexSnapshot:
        """Drop the cached snapshot and rebuild it immediately."""
        self.index.invalidate()
        snapshot = self.index.scan()
        if host is not None:
            host.show_info(REFRESHED_MESSAGE)
        return snapshot

    def handle_text_change(
        self,
        host: EditorHost,
        document: ActiveDocument,
        changes: Sequence[TextChange],
    ) -> CommandResult:
        """Fill in empty class/id attributes that a text change just produced."""
        generation = self._config.generation
        if not generation.auto_generate or not document.is_markup:
            return CommandResult(status="skipped")

        with self.guard.hold() as acquired:
            if not acquired:
                return CommandResult(status="skipped", message=BUSY_MESSAGE)
            try:
                edit = plan_auto_insert(
                    document.text_document(), changes, generation, self.names.generate
                )
            except NameExhaustedError as error:
                host.show_error(str(error))
                return CommandResult(status="failed", message=str(error))
            if not edit:
                return CommandResult(status="skipped")
            if not host.apply_edit(document, edit):
                self._report("commands", EDIT_REJECTED_MESSAGE, document.path)
                return CommandResult(status="failed", message=EDIT_REJECTED_MESSAGE)

        names = tuple(insertion.text for insertion in edit.insertions)
        return CommandResult(status="inserted", edit=edit, generated_names=names)

    def notify_file_event(self, path: str, event: str) -> bool:
        """Forward a host file notification; True when the index was invalidated."""
        return self.watcher.notify(path, event)

    def poll_documents(self) -> IndexDelta:
        """Detect document changes without host notifications."""
        return self.watcher.poll()

    def complete(
        self, document: ActiveDocument, line: int, character: int
    ) -> list[CompletionCandidate]:
        """Completion candidates at ``(line, character)`` for the document's language."""
        if document.is_stylesheet:
            provider = complete_stylesheet
        elif document.is_markup:
            provider = complete_markup
        else:
            return []
        try:
            snapshot = self.index.get_snapshot()
        except (OSError, ScanCancelledError) as error:
            self._report("completion", f"Index unavailable: {error}", document.path)
            return []
        line_text = document.text_document().line_at(line)
        return provider(snapshot, line_text, line, min(max(character, 0), len(line_text)))

    def _prompt_prefix(self, host: EditorHost) -> str | None:
        while True:
            value = host.prompt_text(PREFIX_PROMPT, DEFAULT_PREFIX, validate_prefix)
            if value is None:
                return None
            problem = validate_prefix(value)
            if problem is None:
                return value
            host.show_error(problem)

    def _report(self, component: str, message: str, path: str | None) -> None:
        if self._diagnostics is not None:
            self._diagnostics.report(component, message, path=path)
