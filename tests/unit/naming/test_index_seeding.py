from __future__ import annotations

from pathlib import Path

from element_namer.config import IndexConfig
from element_namer.index import IdentifierIndex
from element_namer.naming import SeededGenerator, UniqueNameGenerator

_CONFIG = IndexConfig(include_extensions=(".html",), exclude_globs=("**/node_modules/**",))


def test_seed_registers_indexed_names_once_per_generation(tmp_path: Path) -> None:
    (tmp_path / "index.html").write_text('<div class="a b" id="x"></div>\n', encoding="utf-8")
    index = IdentifierIndex(tmp_path, _CONFIG)
    seeded = SeededGenerator(index, UniqueNameGenerator())

    assert seeded.needs_reseed is True
    assert seeded.seed_if_needed() is True
    assert {"a", "b", "x"} <= set(seeded.generator.get_used_names())
    assert seeded.needs_reseed is False
    assert seeded.seed_if_needed() is False


def test_invalidation_forces_reseed_with_fresh_names(tmp_path: Path) -> None:
    page = tmp_path / "index.html"
    page.write_text('<div class="old"></div>\n', encoding="utf-8")
    index = IdentifierIndex(tmp_path, _CONFIG)
    seeded = SeededGenerator(index)
    seeded.seed_if_needed()

    page.write_text('<div class="fresh-name"></div>\n', encoding="utf-8")
    index.invalidate()

    assert seeded.needs_reseed is True
    seeded.generate("card")
    used = set(seeded.generator.get_used_names())
    assert "fresh-name" in used
    assert "old" in used
    assert seeded.needs_reseed is False


def test_direct_rescan_also_marks_seed_stale(tmp_path: Path) -> None:
    index = IdentifierIndex(tmp_path, _CONFIG)
    seeded = SeededGenerator(index)
    seeded.seed_if_needed()

    index.scan()

    assert seeded.needs_reseed is True
