from __future__ import annotations

from pathlib import Path

from element_namer.config import IndexConfig
from element_namer.index import (
    detect_index_delta,
    discover_files,
    is_watched_path,
    record_map,
)


def test_discovery_honors_extensions_excludes_and_stable_order(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "node_modules" / "lib").mkdir(parents=True)
    (tmp_path / "src" / "z.vue").write_text('<p class="z"></p>\n', encoding="utf-8")
    (tmp_path / "src" / "a.jsx").write_text('<p className="a" />\n', encoding="utf-8")
    (tmp_path / "index.html").write_text('<p id="root"></p>\n', encoding="utf-8")
    (tmp_path / "src" / "site.css").write_text(".a {}\n", encoding="utf-8")
    (tmp_path / "node_modules" / "lib" / "dep.html").write_text("<p></p>\n", encoding="utf-8")

    config = IndexConfig(
        include_extensions=(".html", ".jsx", ".tsx", ".vue"),
        exclude_globs=("**/node_modules/**",),
    )
    records = discover_files(tmp_path, config=config)

    assert [record.path for record in records] == ["index.html", "src/a.jsx", "src/z.vue"]


def test_discovery_reports_binary_and_oversized_documents(tmp_path: Path) -> None:
    (tmp_path / "ok.html").write_text("<p></p>\n", encoding="utf-8")
    (tmp_path / "bad.html").write_bytes(b"\x00\x01\x02")
    (tmp_path / "big.html").write_text("x" * 64, encoding="utf-8")
    skipped: list[tuple[str, str]] = []
    profile: dict[str, object] = {}

    config = IndexConfig(include_extensions=(".html",), exclude_globs=(), max_file_bytes=32)
    records = discover_files(
        tmp_path,
        config=config,
        profile=profile,
        on_skip=lambda path, reason: skipped.append((path, reason)),
    )

    assert [record.path for record in records] == ["ok.html"]
    assert [path for path, _ in skipped] == ["bad.html", "big.html"]
    assert profile["binary_excluded"] == 1
    assert profile["oversized_excluded"] == 1


def test_discovery_keeps_utf8_text_split_at_sniff_boundary(tmp_path: Path) -> None:
    # 4095 ASCII bytes followed by a two-byte character straddling the 4096 sniff window.
    (tmp_path / "wide.html").write_bytes(b"a" * 4095 + "é".encode("utf-8"))

    config = IndexConfig(include_extensions=(".html",), exclude_globs=())

    assert [record.path for record in discover_files(tmp_path, config=config)] == ["wide.html"]


def test_change_detection_added_updated_removed(tmp_path: Path) -> None:
    alpha = tmp_path / "alpha.html"
    beta = tmp_path / "beta.html"
    alpha.write_text('<p class="one"></p>\n', encoding="utf-8")
    beta.write_text('<p class="two"></p>\n', encoding="utf-8")

    config = IndexConfig(include_extensions=(".html",), exclude_globs=())
    previous = record_map(discover_files(tmp_path, config=config))

    alpha.write_text('<p class="one changed"></p>\n', encoding="utf-8")
    beta.unlink()
    (tmp_path / "gamma.html").write_text("<p></p>\n", encoding="utf-8")

    delta = detect_index_delta(previous=previous, current_records=discover_files(tmp_path, config))

    assert delta.added == ("gamma.html",)
    assert delta.updated == ("alpha.html",)
    assert delta.removed == ("beta.html",)
    assert delta.changed is True


def test_watched_path_matches_scan_rules() -> None:
    config = IndexConfig(
        include_extensions=(".html", ".vue"), exclude_globs=("**/node_modules/**",)
    )

    assert is_watched_path("pages/Home.VUE", config) is True
    assert is_watched_path("pages\\index.html", config) is True
    assert is_watched_path("node_modules/pkg/index.html", config) is False
    assert is_watched_path("styles/site.css", config) is False


def test_discovery_can_skip_content_hashing(tmp_path: Path) -> None:
    (tmp_path / "a.html").write_text("<p></p>\n", encoding="utf-8")
    (tmp_path / "b.html").write_bytes(b"\x00binary")
    skipped: list[str] = []
    config = IndexConfig(include_extensions=(".html",), exclude_globs=())

    records = discover_files(
        tmp_path,
        config,
        on_skip=lambda path, _: skipped.append(path),
        hash_contents=False,
    )

    assert [(record.path, record.content_hash) for record in records] == [("a.html", "")]
    assert skipped == ["b.html"]
