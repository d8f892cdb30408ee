"""
Tests that enforce coding standards.

These tests verify the import conventions used across the codebase:
- no 'from X import Y' outside __init__.py re-exports
- third-party and stdlib modules are aliased privately ('import yaml as _yaml')
- module loggers are named after their module
"""

import ast as _ast
import pathlib as _pathlib

import pytest as _pytest

ROOT_DIR = _pathlib.Path(__file__).parent.parent
SRC_DIR = ROOT_DIR / "src" / "skillregistry"
TESTS_DIR = ROOT_DIR / "tests"
PACKAGE_NAME = "skillregistry"


def _get_python_files(directory: _pathlib.Path) -> list[_pathlib.Path]:
    """All non-__init__ Python files in a directory, recursively."""
    return sorted(p for p in directory.rglob("*.py") if p.name != "__init__.py")


def _is_type_checking_block(node: _ast.AST) -> bool:
    if not isinstance(node, _ast.If):
        return False
    test = node.test
    if isinstance(test, _ast.Name):
        return test.id == "TYPE_CHECKING"
    if isinstance(test, _ast.Attribute):
        return test.attr == "TYPE_CHECKING"
    return False


def _iter_runtime_imports(tree: _ast.AST) -> list[_ast.Import | _ast.ImportFrom]:
    """Import statements outside TYPE_CHECKING blocks."""
    found: list[_ast.Import | _ast.ImportFrom] = []
    skipped: set[int] = set()
    for node in _ast.walk(tree):
        if _is_type_checking_block(node):
            skipped.update(id(child) for child in _ast.walk(node))
    for node in _ast.walk(tree):
        if id(node) in skipped:
            continue
        if isinstance(node, (_ast.Import, _ast.ImportFrom)):
            found.append(node)
    return found


def find_from_imports(source: str) -> list[tuple[int, str]]:
    """
    Find forbidden 'from X import Y' statements.

    Returns:
        (line_number, module) pairs. __future__ imports are allowed.
    """
    violations = []
    for node in _iter_runtime_imports(_ast.parse(source)):
        if isinstance(node, _ast.ImportFrom) and node.module != "__future__":
            violations.append((node.lineno, node.module or "."))
    return violations


def find_unaliased_imports(source: str) -> list[tuple[int, str]]:
    """
    Find external imports not aliased with a leading underscore.

    Internal imports ('import skillregistry.x as x') are exempt.
    """
    violations = []
    for node in _iter_runtime_imports(_ast.parse(source)):
        if not isinstance(node, _ast.Import):
            continue
        for alias in node.names:
            if alias.name.split(".")[0] == PACKAGE_NAME:
                continue
            if not (alias.asname and alias.asname.startswith("_")):
                violations.append((node.lineno, alias.name))
    return violations


def find_misnamed_loggers(source: str) -> list[int]:
    """Find module-level '_logger = ...getLogger(...)' not using __name__."""
    violations = []
    for node in _ast.parse(source).body:
        if not isinstance(node, _ast.Assign):
            continue
        targets = [t.id for t in node.targets if isinstance(t, _ast.Name)]
        if "_logger" not in targets or not isinstance(node.value, _ast.Call):
            continue
        args = node.value.args
        if not (len(args) == 1 and isinstance(args[0], _ast.Name) and args[0].id == "__name__"):
            violations.append(node.lineno)
    return violations


def _report(violations: list[str], hint: str) -> None:
    if violations:
        _pytest.fail("\n".join(["Coding standard violations:", *violations, "", hint]))


class TestImportStyle:
    """Tests for import style compliance."""

    def test_src_no_from_imports(self) -> None:
        """Source files should not use 'from X import Y'."""
        violations = [
            f"  {path}:{line}: from {module} import ..."
            for path in _get_python_files(SRC_DIR)
            for line, module in find_from_imports(path.read_text())
        ]
        _report(violations, "Use 'import X as _x' (external) or 'import X as x' (internal).")

    def test_tests_no_from_imports(self) -> None:
        """Test files should not use 'from X import Y'."""
        violations = [
            f"  {path}:{line}: from {module} import ..."
            for path in _get_python_files(TESTS_DIR)
            for line, module in find_from_imports(path.read_text())
        ]
        _report(violations, "Use 'import X as _x' (external) or 'import X as x' (internal).")

    def test_src_external_imports_are_private(self) -> None:
        """External modules are imported under a private alias."""
        violations = [
            f"  {path}:{line}: import {name}"
            for path in _get_python_files(SRC_DIR)
            for line, name in find_unaliased_imports(path.read_text())
        ]
        _report(violations, "Use 'import X as _x' for stdlib and third-party modules.")

    def test_src_loggers_use_module_name(self) -> None:
        """Module loggers are created with getLogger(__name__)."""
        violations = [
            f"  {path}:{line}"
            for path in _get_python_files(SRC_DIR)
            for line in find_misnamed_loggers(path.read_text())
        ]
        _report(violations, "Use '_logger = _logging.getLogger(__name__)'.")


class TestImportExtraction:
    """Tests for the checkers themselves."""

    def test_detects_from_import(self) -> None:
        """Should detect basic from imports."""
        assert find_from_imports("from pathlib import Path") == [(1, "pathlib")]

    def test_allows_future_imports(self) -> None:
        """Should allow __future__ imports."""
        assert find_from_imports("from __future__ import annotations") == []

    def test_ignores_type_checking_block(self) -> None:
        """Should ignore imports inside TYPE_CHECKING blocks."""
        source = """
import typing as _typing

if _typing.TYPE_CHECKING:
    from some_module import SomeType

def foo():
    pass
"""
        assert find_from_imports(source) == []

    def test_detects_import_after_type_checking(self) -> None:
        """Should still detect imports after a TYPE_CHECKING block ends."""
        source = """
import typing as _typing

if _typing.TYPE_CHECKING:
    from allowed import Type

from forbidden import Other
"""
        assert find_from_imports(source) == [(7, "forbidden")]

    def test_detects_unaliased_external_import(self) -> None:
        """Plain 'import yaml' is flagged; internal imports are not."""
        source = "import yaml\nimport json as _json\nimport skillregistry.skills as skills\n"
        assert find_unaliased_imports(source) == [(1, "yaml")]

    def test_detects_misnamed_logger(self) -> None:
        """Loggers with hard-coded names are flagged."""
        source = (
            "import logging as _logging\n"
            "_logger = _logging.getLogger('skillregistry')\n"
        )
        assert find_misnamed_loggers(source) == [2]
        assert find_misnamed_loggers("_logger = _logging.getLogger(__name__)\n") == []
