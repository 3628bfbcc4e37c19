from __future__ import annotations

import ast
import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _require_arch_checks() -> None:
    """Architecture checks are opt-in; set SHIPLINE_ARCH_CHECKS=1 to enable."""
    if os.getenv("SHIPLINE_ARCH_CHECKS") != "1":
        pytest.skip("architecture checks are opt-in; set SHIPLINE_ARCH_CHECKS=1 to enable")


@pytest.fixture
def package_root() -> Path:
    return Path(__file__).resolve().parents[2]


@pytest.fixture
def source_files(package_root: Path) -> list[Path]:
    files: list[Path] = []
    for path in sorted(package_root.rglob("*.py")):
        rel = path.relative_to(package_root)
        if rel.parts[0] == "test" or "__pycache__" in rel.parts:
            continue
        files.append(path)
    return files


def imported_modules(path: Path) -> list[tuple[str, int]]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    found: list[tuple[str, int]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            found.extend((alias.name, node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and not node.level:
            found.append((node.module, node.lineno))
    return found


@pytest.fixture
def imports_of():
    return imported_modules
