from __future__ import annotations

from pathlib import Path

from element_namer.logging import JsonlDiagnosticLog


def test_diagnostic_log_appends_and_reads_recent_events(tmp_path: Path) -> None:
    log = JsonlDiagnosticLog(tmp_path / "nested" / "diagnostics.jsonl")

    log.report("index", "File content is not UTF-8 text.", path="a.html")
    log.report("completion", "Index unavailable")

    events = log.read(limit=10)
    assert [event["component"] for event in events] == ["index", "completion"]
    assert events[0]["path"] == "a.html"
    assert events[1]["path"] is None
    assert log.read(limit=1) == [events[1]]


def test_diagnostic_log_never_raises_when_unwritable(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    log = JsonlDiagnosticLog(blocker / "diagnostics.jsonl")

    log.report("index", "dropped")

    assert log.read() == []
