"""Built-in namer tools exposed over the STDIO server."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict

from element_namer.commands import ATTRIBUTE_CHOICES, CommandResult, NamerWorkspace
from element_namer.editing import TextChange, TextEdit, apply_edit
from element_namer.host import ActiveDocument, ScriptedHost
from element_namer.index import FILE_EVENTS
from element_namer.naming import DEFAULT_PREFIX, validate_prefix
from element_namer.tools.registry import ToolDispatchError, ToolHandler, ToolRegistry

DocumentLoader = Callable[[dict[str, object], str], ActiveDocument]


def register_builtin_tools(
    registry: ToolRegistry,
    workspace: NamerWorkspace,
    load_document: DocumentLoader,
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
    read_diagnostics: Callable[[int], list[dict[str, object]]],
) -> None:
    """Register the namer tool set."""
    registry.register("namer.status", _status_handler(workspace))
    registry.register("namer.refresh_index", _refresh_index_handler(workspace))
    registry.register("namer.generate_name", _generate_name_handler(workspace, load_document))
    registry.register("namer.text_changed", _text_changed_handler(workspace, load_document))
    registry.register("namer.file_event", _file_event_handler(workspace))
    registry.register("namer.poll", _poll_handler(workspace))
    registry.register("namer.complete", _complete_handler(workspace, load_document))
    registry.register("namer.audit_log", _audit_log_handler(read_audit_entries))
    registry.register("namer.diagnostics", _diagnostics_handler(read_diagnostics))


def _status_handler(workspace: NamerWorkspace) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        status = workspace.index.status()
        return {
            "index_status": status.index_status,
            "generation": status.generation,
            "last_scan_timestamp": status.last_scan_timestamp,
            "document_count": status.document_count,
            "record_count": status.record_count,
            "failed_document_count": status.failed_document_count,
            "used_name_count": len(workspace.names.generator),
            "needs_reseed": workspace.names.needs_reseed,
            "effective_config": workspace.config.to_public_dict(),
        }

    return handler


def _refresh_index_handler(workspace: NamerWorkspace) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        snapshot = workspace.refresh_index()
        return {
            "document_count": snapshot.document_count,
            "record_count": len(snapshot.records),
            "class_count": len(snapshot.class_names()),
            "id_count": len(snapshot.id_names()),
            "failed_paths": list(snapshot.failed_paths),
            "timestamp": snapshot.created_at,
            "profile": workspace.index.last_profile,
        }

    return handler


def _generate_name_handler(workspace: NamerWorkspace, load_document: DocumentLoader) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        document = load_document(arguments, "namer.generate_name")
        prefix = arguments.get("prefix", DEFAULT_PREFIX)
        if not isinstance(prefix, str):
            raise ToolDispatchError.invalid_params("namer.generate_name prefix must be a string.")
        problem = validate_prefix(prefix)
        if problem is not None:
            raise ToolDispatchError.invalid_params(f"namer.generate_name prefix: {problem}.")
        kind = arguments.get("kind")
        if kind not in ATTRIBUTE_CHOICES:
            raise ToolDispatchError.invalid_params(
                "namer.generate_name kind must be one of: class, id."
            )
        host = ScriptedHost(document=document, text_answers=[prefix], pick_answers=[str(kind)])
        result = workspace.generate_and_insert(host)
        return _command_payload(result, document, host)

    return handler


def _text_changed_handler(workspace: NamerWorkspace, load_document: DocumentLoader) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        document = load_document(arguments, "namer.text_changed")
        changes = _parse_changes(arguments.get("changes"), len(document.text))
        host = ScriptedHost(document=document)
        result = workspace.handle_text_change(host, document, changes)
        return _command_payload(result, document, host)

    return handler


def _file_event_handler(workspace: NamerWorkspace) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        path = arguments.get("path")
        event = arguments.get("event")
        if not isinstance(path, str) or not path:
            raise ToolDispatchError.invalid_params(
                "namer.file_event path must be a non-empty string."
            )
        if event not in FILE_EVENTS:
            raise ToolDispatchError.invalid_params(
                f"namer.file_event event must be one of: {', '.join(FILE_EVENTS)}."
            )
        invalidated = workspace.notify_file_event(path, str(event))
        return {"invalidated": invalidated, "generation": workspace.index.generation}

    return handler


def _poll_handler(workspace: NamerWorkspace) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        delta = workspace.poll_documents()
        return {
            "added": list(delta.added),
            "updated": list(delta.updated),
            "removed": list(delta.removed),
            "invalidated": delta.changed,
        }

    return handler


def _complete_handler(workspace: NamerWorkspace, load_document: DocumentLoader) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        document = load_document(arguments, "namer.complete")
        line = arguments.get("line")
        character = arguments.get("character")
        if not isinstance(line, int) or line < 0:
            raise ToolDispatchError.invalid_params("namer.complete line must be an integer >= 0.")
        if not isinstance(character, int) or character < 0:
            raise ToolDispatchError.invalid_params(
                "namer.complete character must be an integer >= 0."
            )
        candidates = workspace.complete(document, line, character)
        return {
            "language_id": document.language_id,
            "candidates": [
                {**asdict(candidate), "detail": candidate.detail} for candidate in candidates
            ],
        }

    return handler


def _audit_log_handler(
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        since = arguments.get("since")
        limit = arguments.get("limit", 50)
        since_value = since if isinstance(since, str) else None
        limit_value = limit if isinstance(limit, int) and limit > 0 else 50
        return {"entries": read_audit_entries(since_value, min(limit_value, 500))}

    return handler


def _diagnostics_handler(read_diagnostics: Callable[[int], list[dict[str, object]]]) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        limit = arguments.get("limit", 50)
        limit_value = limit if isinstance(limit, int) and limit > 0 else 50
        return {"entries": read_diagnostics(min(limit_value, 500))}

    return handler


def _parse_changes(raw: object, text_length: int) -> list[TextChange]:
    if not isinstance(raw, list) or not raw:
        raise ToolDispatchError.invalid_params(
            "namer.text_changed changes must be a non-empty list."
        )
    changes: list[TextChange] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ToolDispatchError.invalid_params("namer.text_changed changes must be objects.")
        offset = item.get("offset")
        text = item.get("text")
        if not isinstance(offset, int) or not 0 <= offset <= text_length:
            raise ToolDispatchError.invalid_params(
                "namer.text_changed change offset must lie inside the document."
            )
        if not isinstance(text, str):
            raise ToolDispatchError.invalid_params(
                "namer.text_changed change text must be a string."
            )
        changes.append(TextChange(offset=offset, text=text))
    return changes


def _command_payload(
    result: CommandResult, document: ActiveDocument, host: ScriptedHost
) -> dict[str, object]:
    if result.status == "failed":
        raise ToolDispatchError(code="COMMAND_FAILED", message=result.message or "Command failed.")
    edit = result.edit or TextEdit()
    payload: dict[str, object] = {
        "status": result.status,
        "message": result.message,
        "generated_names": list(result.generated_names),
        "edit": _edit_payload(edit, document),
        "info_messages": list(host.infos),
    }
    if edit:
        payload["updated_text"] = apply_edit(document.text, edit)
    return payload


def _edit_payload(edit: TextEdit, document: ActiveDocument) -> list[dict[str, object]]:
    text_document = document.text_document()
    output: list[dict[str, object]] = []
    for insertion in edit.insertions:
        line, character = text_document.position_at(insertion.offset)
        output.append(
            {
                "offset": insertion.offset,
                "line": line,
                "character": character,
                "text": insertion.text,
            }
        )
    return output
