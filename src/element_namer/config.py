"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from element_namer.naming.generator import validate_prefix

MAX_FILE_BYTES_CAP = 16 * 1024 * 1024
CONFIG_FILE_NAME = "element_namer.toml"

DEFAULT_INCLUDE_EXTENSIONS = (".html", ".jsx", ".tsx", ".vue")
DEFAULT_EXCLUDE_GLOBS = ("**/node_modules/**",)
DEFAULT_MAX_FILE_BYTES = 1024 * 1024
DEFAULT_AUTO_PREFIX = "elem"
PREFIX_MODES = ("fixed", "element")

# Host settings are camelCase; the TOML file uses snake_case.
_GENERATION_ALIASES = {
    "autoGenerate": "auto_generate",
    "autoPrefix": "auto_prefix",
    "autoPrefixMode": "auto_prefix_mode",
}


@dataclass(slots=True, frozen=True)
class IndexConfig:
    """Which documents the identifier index scans."""

    include_extensions: tuple[str, ...]
    exclude_globs: tuple[str, ...]
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES


@dataclass(slots=True, frozen=True)
class GenerationConfig:
    """Settings for automatic name insertion."""

    auto_generate: bool = False
    auto_prefix: str = DEFAULT_AUTO_PREFIX
    auto_prefix_mode: str = "fixed"

    @property
    def fallback_prefix(self) -> str:
        """Return the fixed prefix, never empty."""
        return self.auto_prefix or DEFAULT_AUTO_PREFIX


@dataclass(slots=True, frozen=True)
class NamerConfig:
    """Fully merged configuration."""

    repo_root: Path
    data_dir: Path
    index: IndexConfig
    generation: GenerationConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for tool responses."""
        return {
            "repo_root": str(self.repo_root),
            "data_dir": str(self.data_dir),
            "index": {
                "include_extensions": list(self.index.include_extensions),
                "exclude_globs": list(self.index.exclude_globs),
                "max_file_bytes": self.index.max_file_bytes,
            },
            "generation": {
                "auto_generate": self.generation.auto_generate,
                "auto_prefix": self.generation.auto_prefix,
                "auto_prefix_mode": self.generation.auto_prefix_mode,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    max_file_bytes: int | None = None
    auto_generate: bool | None = None
    auto_prefix: str | None = None
    auto_prefix_mode: str | None = None


def default_config(repo_root: Path) -> NamerConfig:
    """Build default config for a given workspace root."""
    resolved_root = repo_root.resolve()
    return NamerConfig(
        repo_root=resolved_root,
        data_dir=resolved_root / ".element_namer",
        index=IndexConfig(
            include_extensions=DEFAULT_INCLUDE_EXTENSIONS,
            exclude_globs=DEFAULT_EXCLUDE_GLOBS,
        ),
        generation=GenerationConfig(),
    )


def load_repo_config_file(repo_root: Path) -> dict[str, object]:
    """Load optional element_namer.toml from the workspace root."""
    config_path = repo_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _normalize_extensions(extensions: tuple[str, ...]) -> tuple[str, ...]:
    output: list[str] = []
    for extension in extensions:
        lowered = extension.strip().lower()
        if not lowered:
            continue
        if not lowered.startswith("."):
            lowered = f".{lowered}"
        if lowered not in output:
            output.append(lowered)
    return tuple(output)


def _generation_payload(repo_payload: dict[str, object]) -> dict[str, object]:
    raw = _get_table(repo_payload, "generation")
    output: dict[str, object] = {}
    for key, value in raw.items():
        output[_GENERATION_ALIASES.get(key, key)] = value
    return output


def merge_config(
    base: NamerConfig, repo_payload: dict[str, object], overrides: CliOverrides
) -> NamerConfig:
    """Merge defaults, repo config, then CLI/startup overrides."""
    index_payload = _get_table(repo_payload, "index")
    generation_payload = _generation_payload(repo_payload)

    include_extensions = base.index.include_extensions
    if "include_extensions" in index_payload:
        include_extensions = _normalize_extensions(
            _tuple_of_strings(index_payload["include_extensions"], "index", "include_extensions")
        )
        if not include_extensions:
            raise ValueError("Config field 'index.include_extensions' must not be empty.")
    exclude_globs = base.index.exclude_globs
    if "exclude_globs" in index_payload:
        exclude_globs = _tuple_of_strings(index_payload["exclude_globs"], "index", "exclude_globs")
    max_file_bytes = _optional_positive_int_with_cap(
        index_payload.get("max_file_bytes"),
        "index.max_file_bytes",
        base.index.max_file_bytes,
        MAX_FILE_BYTES_CAP,
    )

    auto_generate = base.generation.auto_generate
    if "auto_generate" in generation_payload:
        raw_auto_generate = generation_payload["auto_generate"]
        if not isinstance(raw_auto_generate, bool):
            raise ValueError("Config field 'generation.auto_generate' must be a boolean.")
        auto_generate = raw_auto_generate
    auto_prefix = _optional_prefix(
        generation_payload.get("auto_prefix"),
        "generation.auto_prefix",
        base.generation.auto_prefix,
    )
    auto_prefix_mode = _optional_prefix_mode(
        generation_payload.get("auto_prefix_mode"),
        "generation.auto_prefix_mode",
        base.generation.auto_prefix_mode,
    )

    merged = NamerConfig(
        repo_root=base.repo_root,
        data_dir=base.data_dir,
        index=IndexConfig(
            include_extensions=include_extensions,
            exclude_globs=exclude_globs,
            max_file_bytes=max_file_bytes,
        ),
        generation=GenerationConfig(
            auto_generate=auto_generate,
            auto_prefix=auto_prefix,
            auto_prefix_mode=auto_prefix_mode,
        ),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: NamerConfig, overrides: CliOverrides) -> NamerConfig:
    """Apply startup overrides at highest precedence."""
    max_file_bytes = _optional_positive_int_with_cap(
        overrides.max_file_bytes,
        "overrides.max_file_bytes",
        config.index.max_file_bytes,
        MAX_FILE_BYTES_CAP,
    )
    generation = GenerationConfig(
        auto_generate=(
            overrides.auto_generate
            if overrides.auto_generate is not None
            else config.generation.auto_generate
        ),
        auto_prefix=_optional_prefix(
            overrides.auto_prefix, "overrides.auto_prefix", config.generation.auto_prefix
        ),
        auto_prefix_mode=_optional_prefix_mode(
            overrides.auto_prefix_mode,
            "overrides.auto_prefix_mode",
            config.generation.auto_prefix_mode,
        ),
    )
    data_dir = overrides.data_dir or config.data_dir
    return NamerConfig(
        repo_root=config.repo_root,
        data_dir=data_dir.resolve(),
        index=IndexConfig(
            include_extensions=config.index.include_extensions,
            exclude_globs=config.index.exclude_globs,
            max_file_bytes=max_file_bytes,
        ),
        generation=generation,
    )


def load_effective_config(repo_root: Path, overrides: CliOverrides | None = None) -> NamerConfig:
    """Load effective config using merge order defaults -> repo config -> overrides."""
    resolved_root = repo_root.resolve()
    base = default_config(resolved_root)
    payload = load_repo_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())


def _optional_prefix(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"Config field '{name}' must be a string.")
    problem = validate_prefix(value)
    if problem is not None:
        raise ValueError(f"Config field '{name}' is invalid: {problem}.")
    return value


def _optional_prefix_mode(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or value not in PREFIX_MODES:
        raise ValueError(f"Config field '{name}' must be one of: {', '.join(PREFIX_MODES)}.")
    return value


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
