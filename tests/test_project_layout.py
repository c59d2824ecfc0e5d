from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/element_namer/server.py",
        "src/element_namer/commands.py",
        "src/element_namer/host.py",
        "src/element_namer/naming/__init__.py",
        "src/element_namer/index/__init__.py",
        "src/element_namer/editing/__init__.py",
        "src/element_namer/completion/__init__.py",
        "src/element_namer/tools/__init__.py",
        "src/element_namer/security/__init__.py",
        "src/element_namer/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
