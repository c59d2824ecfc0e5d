from __future__ import annotations

import io
import json
import re
from pathlib import Path

from element_namer.server import StdioServer, create_server


def _write_workspace(root: Path) -> None:
    (root / "src").mkdir()
    (root / "src" / "index.html").write_text(
        '<div class="card highlight">\n  <span id="title"></span>\n</div>\n',
        encoding="utf-8",
    )
    (root / "src" / "App.jsx").write_text(
        'export const App = () => <main className="card layout" />;\n',
        encoding="utf-8",
    )


def test_status_then_refresh_reports_index_counts(tmp_path: Path) -> None:
    _write_workspace(tmp_path)
    server = create_server(repo_root=str(tmp_path))

    before = server.handle_payload({"id": "s-1", "method": "namer.status", "params": {}})
    refreshed = server.handle_payload({"id": "s-2", "method": "namer.refresh_index", "params": {}})
    after = server.handle_payload({"id": "s-3", "method": "namer.status", "params": {}})

    assert before["ok"] is True
    assert before["result"]["index_status"] == "not_indexed"
    assert before["result"]["effective_config"]["generation"]["auto_prefix"] == "elem"

    assert refreshed["ok"] is True
    assert refreshed["result"]["document_count"] == 2
    assert refreshed["result"]["class_count"] == 3
    assert refreshed["result"]["id_count"] == 1
    assert refreshed["result"]["failed_paths"] == []

    assert after["result"]["index_status"] == "ready"
    assert after["result"]["record_count"] == 5


def test_generate_name_returns_edit_and_updated_text(tmp_path: Path) -> None:
    _write_workspace(tmp_path)
    server = create_server(repo_root=str(tmp_path))

    response = server.handle_payload(
        {
            "id": "g-1",
            "method": "tools/call",
            "params": {
                "name": "namer.generate_name",
                "arguments": {
                    "path": "src/new.html",
                    "text": "<div >\n<p ></p>\n</div>",
                    "cursor": 10,
                    "prefix": "card",
                    "kind": "class",
                },
            },
        }
    )

    assert response["ok"] is True
    result = response["result"]
    assert result["status"] == "inserted"
    (name,) = result["generated_names"]
    assert re.fullmatch(r"card-[0-9a-f]{5}", name)
    assert result["edit"] == [{"offset": 10, "line": 1, "character": 3, "text": f'class="{name}"'}]
    assert result["updated_text"] == f'<div >\n<p class="{name}"></p>\n</div>'
    assert result["info_messages"] == [f'Generated: class="{name}"']


def test_generate_name_rejects_invalid_prefix_and_kind(tmp_path: Path) -> None:
    server = create_server(repo_root=str(tmp_path))
    base = {"path": "a.html", "text": "<p></p>"}

    bad_prefix = server.handle_payload(
        {
            "id": "g-2",
            "method": "namer.generate_name",
            "params": {**base, "prefix": "a b", "kind": "id"},
        }
    )
    bad_kind = server.handle_payload(
        {"id": "g-3", "method": "namer.generate_name", "params": {**base, "kind": "style"}}
    )

    assert bad_prefix["ok"] is False
    assert bad_prefix["error"]["code"] == "INVALID_PARAMS"
    assert bad_kind["error"] == {
        "code": "INVALID_PARAMS",
        "message": "namer.generate_name kind must be one of: class, id.",
    }


def test_generate_name_outside_markup_is_command_failure(tmp_path: Path) -> None:
    server = create_server(repo_root=str(tmp_path))

    response = server.handle_payload(
        {
            "id": "g-4",
            "method": "namer.generate_name",
            "params": {"path": "site.css", "text": ".x {}", "kind": "class"},
        }
    )

    assert response["ok"] is False
    assert response["error"] == {
        "code": "COMMAND_FAILED",
        "message": "This command only works in HTML/JSX/Vue files",
    }


def test_text_changed_fills_empty_attribute_when_enabled(tmp_path: Path) -> None:
    (tmp_path / "element_namer.toml").write_text(
        '[generation]\nautoGenerate = true\nautoPrefixMode = "element"\n',
        encoding="utf-8",
    )
    server = create_server(repo_root=str(tmp_path))
    text = '<nav id=""></nav>'

    response = server.handle_payload(
        {
            "id": "t-1",
            "method": "namer.text_changed",
            "params": {
                "path": "menu.vue",
                "text": text,
                "changes": [{"offset": 5, "text": 'id=""'}],
            },
        }
    )

    assert response["ok"] is True
    result = response["result"]
    assert result["status"] == "inserted"
    (name,) = result["generated_names"]
    assert name.startswith("nav-")
    assert result["updated_text"] == f'<nav id="{name}"></nav>'


def test_text_changed_is_skipped_when_auto_generate_disabled(tmp_path: Path) -> None:
    server = create_server(repo_root=str(tmp_path))

    response = server.handle_payload(
        {
            "id": "t-2",
            "method": "namer.text_changed",
            "params": {
                "path": "a.html",
                "text": '<p class=""></p>',
                "changes": [{"offset": 3, "text": 'class=""'}],
            },
        }
    )

    assert response["ok"] is True
    assert response["result"]["status"] == "skipped"
    assert response["result"]["edit"] == []
    assert "updated_text" not in response["result"]


def test_complete_in_stylesheet_lists_indexed_classes(tmp_path: Path) -> None:
    _write_workspace(tmp_path)
    server = create_server(repo_root=str(tmp_path))

    response = server.handle_payload(
        {
            "id": "c-1",
            "method": "namer.complete",
            "params": {"path": "styles/site.css", "text": ".ca", "line": 0, "character": 3},
        }
    )

    assert response["ok"] is True
    assert response["result"]["language_id"] == "css"
    candidates = response["result"]["candidates"]
    assert [candidate["name"] for candidate in candidates] == ["card"]
    first = candidates[0]
    assert first["source"] == "src/App.jsx"
    assert first["detail"] == "Found in: src/App.jsx"
    assert (first["replace_start"], first["replace_end"]) == (1, 3)


def _file_event(server: StdioServer, request_id: str, path: str, event: str) -> dict[str, object]:
    return server.handle_payload(
        {"id": request_id, "method": "namer.file_event", "params": {"path": path, "event": event}}
    )


def test_file_event_invalidates_index(tmp_path: Path) -> None:
    _write_workspace(tmp_path)
    server = create_server(repo_root=str(tmp_path))
    server.handle_payload({"id": "f-0", "method": "namer.refresh_index", "params": {}})

    ignored = _file_event(server, "f-1", "notes.txt", "changed")
    watched = _file_event(server, "f-2", "src/index.html", "deleted")
    invalid = _file_event(server, "f-3", "src/index.html", "renamed")
    status = server.handle_payload({"id": "f-4", "method": "namer.status", "params": {}})

    assert ignored["result"]["invalidated"] is False
    assert watched["result"]["invalidated"] is True
    assert invalid["error"]["code"] == "INVALID_PARAMS"
    assert status["result"]["index_status"] == "not_indexed"
    assert status["result"]["needs_reseed"] is True


def test_poll_detects_new_documents(tmp_path: Path) -> None:
    _write_workspace(tmp_path)
    server = create_server(repo_root=str(tmp_path))

    baseline = server.handle_payload({"id": "p-1", "method": "namer.poll", "params": {}})
    (tmp_path / "src" / "extra.tsx").write_text('<b className="extra" />\n', encoding="utf-8")
    changed = server.handle_payload({"id": "p-2", "method": "namer.poll", "params": {}})

    assert baseline["result"]["invalidated"] is False
    assert changed["result"]["added"] == ["src/extra.tsx"]
    assert changed["result"]["invalidated"] is True


def test_document_path_traversal_is_blocked(tmp_path: Path) -> None:
    server = create_server(repo_root=str(tmp_path))

    response = server.handle_payload(
        {
            "id": "b-1",
            "method": "namer.complete",
            "params": {"path": "../outside.css", "text": ".", "line": 0, "character": 1},
        }
    )

    assert response["ok"] is False
    assert response["blocked"] is True
    assert response["error"]["code"] == "PATH_BLOCKED"
    assert response["result"]["reason"] == "Path traversal is blocked."


def test_envelope_errors_for_unknown_tool_and_invalid_json(tmp_path: Path) -> None:
    server = create_server(repo_root=str(tmp_path))

    unknown = server.handle_payload({"id": 9, "method": "namer.unknown", "params": {}})
    invalid = server.handle_json_line("{not-json")

    assert unknown["request_id"] == "9"
    assert unknown["error"] == {"code": "UNKNOWN_TOOL", "message": "Unknown tool: namer.unknown"}
    assert invalid["error"]["code"] == "INVALID_JSON"
    assert str(invalid["request_id"]).startswith("req-")


def test_serve_routes_lines_and_audits_each_request(tmp_path: Path) -> None:
    _write_workspace(tmp_path)
    server = create_server(repo_root=str(tmp_path))
    in_stream = io.StringIO(
        "\n".join(
            [
                json.dumps({"id": "l-1", "method": "namer.status", "params": {}}),
                "",
                json.dumps(
                    {
                        "id": "l-2",
                        "method": "tools/call",
                        "params": {"name": "namer.refresh_index", "arguments": {}},
                    }
                ),
                json.dumps({"id": "l-3", "method": "namer.audit_log", "params": {"limit": 10}}),
            ]
        )
        + "\n"
    )
    out_stream = io.StringIO()

    server.serve(in_stream=in_stream, out_stream=out_stream)
    responses = [json.loads(line) for line in out_stream.getvalue().splitlines() if line]

    assert [response["request_id"] for response in responses] == ["l-1", "l-2", "l-3"]
    assert all(response["ok"] for response in responses)
    audited = [entry["request_id"] for entry in responses[2]["result"]["entries"]]
    assert audited == ["l-1", "l-2"]
