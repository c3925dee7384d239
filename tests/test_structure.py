"""Structural checks on the package source.

Verifies that:
- Library modules report through ``logging``, never ``print()``
- The ordering and serialization core has no database driver imports
- The public API is importable from the package root
"""

import ast
from pathlib import Path

import pytest

import db_snapshot

PACKAGE_DIR = Path(__file__).parent.parent / "src" / "db_snapshot"

# Modules that must work without a database
CORE_MODULES = [
    PACKAGE_DIR / "schema" / "graph.py",
    PACKAGE_DIR / "schema" / "sorter.py",
    PACKAGE_DIR / "snapshot" / "encoding.py",
    PACKAGE_DIR / "snapshot" / "serializer.py",
    PACKAGE_DIR / "snapshot" / "dialects.py",
]


def _library_modules() -> list[Path]:
    """All package modules except the CLI, which owns console output."""
    return sorted(
        p for p in PACKAGE_DIR.rglob("*.py") if "cli" not in p.relative_to(PACKAGE_DIR).parts
    )


def _imported_modules(path: Path) -> set[str]:
    tree = ast.parse(path.read_text())
    names: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.add(node.module)
    return names


class TestNoPrint:
    """Library code logs; only the CLI prints."""

    @pytest.mark.parametrize("path", _library_modules(), ids=lambda p: p.name)
    def test_no_print_calls(self, path: Path) -> None:
        tree = ast.parse(path.read_text())
        calls = [
            node
            for node in ast.walk(tree)
            if isinstance(node, ast.Call)
            and isinstance(node.func, ast.Name)
            and node.func.id == "print"
        ]
        assert calls == [], f"print() found in {path.name}"


class TestCoreIsDriverFree:
    """Graph, sorting, and serialization do not touch a database."""

    @pytest.mark.parametrize("path", CORE_MODULES, ids=lambda p: p.name)
    def test_no_sqlalchemy_import(self, path: Path) -> None:
        modules = _imported_modules(path)
        offending = {m for m in modules if m.split(".")[0] in {"sqlalchemy", "mysql"}}
        assert offending == set(), f"{path.name} imports {offending}"


class TestPublicApi:
    def test_all_names_resolve(self) -> None:
        for name in db_snapshot.__all__:
            assert hasattr(db_snapshot, name), name

    def test_version(self) -> None:
        assert db_snapshot.__version__ == "0.1.0"
