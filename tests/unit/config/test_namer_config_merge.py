from __future__ import annotations

from pathlib import Path

import pytest

from element_namer.config import CliOverrides, load_effective_config


def _write_config(root: Path, *lines: str) -> None:
    (root / "element_namer.toml").write_text("\n".join(lines), encoding="utf-8")


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)

    assert config.index.include_extensions == (".html", ".jsx", ".tsx", ".vue")
    assert config.index.exclude_globs == ("**/node_modules/**",)
    assert config.generation.auto_generate is False
    assert config.generation.auto_prefix == "elem"
    assert config.generation.auto_prefix_mode == "fixed"
    assert config.data_dir == (tmp_path / ".element_namer").resolve()


def test_merge_order_defaults_then_repo_then_cli(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        "[index]",
        'include_extensions = ["HTML", ".svelte"]',
        "",
        "[generation]",
        "auto_generate = true",
        'auto_prefix = "blk"',
        'auto_prefix_mode = "element"',
    )

    config = load_effective_config(
        tmp_path, CliOverrides(auto_prefix="cli", auto_generate=False)
    )

    assert config.index.include_extensions == (".html", ".svelte")
    assert config.generation.auto_generate is False
    assert config.generation.auto_prefix == "cli"
    assert config.generation.auto_prefix_mode == "element"


def test_host_setting_names_are_accepted(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        "[generation]",
        "autoGenerate = true",
        'autoPrefix = "x"',
        'autoPrefixMode = "element"',
    )

    generation = load_effective_config(tmp_path).generation

    assert generation.auto_generate is True
    assert generation.auto_prefix == "x"
    assert generation.auto_prefix_mode == "element"


def test_empty_auto_prefix_falls_back_to_elem(tmp_path: Path) -> None:
    _write_config(tmp_path, "[generation]", 'auto_prefix = ""')

    generation = load_effective_config(tmp_path).generation

    assert generation.auto_prefix == ""
    assert generation.fallback_prefix == "elem"


@pytest.mark.parametrize(
    ("lines", "match"),
    [
        (["[generation]", 'auto_prefix_mode = "tag"'], "generation.auto_prefix_mode"),
        (["[generation]", 'auto_prefix = "a b"'], "generation.auto_prefix"),
        (["[generation]", 'auto_generate = "yes"'], "generation.auto_generate"),
        (["[index]", "max_file_bytes = 0"], "index.max_file_bytes"),
        (["[index]", "include_extensions = []"], "index.include_extensions"),
        (['index = "nope"'], "section 'index'"),
    ],
)
def test_invalid_values_raise_value_error(tmp_path: Path, lines: list[str], match: str) -> None:
    _write_config(tmp_path, *lines)

    with pytest.raises(ValueError, match=match):
        load_effective_config(tmp_path)


def test_cli_prefix_mode_is_validated(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.auto_prefix_mode"):
        load_effective_config(tmp_path, CliOverrides(auto_prefix_mode="tag"))
