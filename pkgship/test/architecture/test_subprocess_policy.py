from __future__ import annotations

import ast
from pathlib import Path

import pkgship

_ALLOWLIST = {"platform/process.py"}


def _pkg_root() -> Path:
    return Path(pkgship.__file__).resolve().parent


def _direct_subprocess_calls(tree: ast.AST) -> list[int]:
    lines: list[int] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue
        func = node.func
        if not isinstance(func, ast.Attribute):
            continue
        if not isinstance(func.value, ast.Name) or func.value.id != "subprocess":
            continue
        lines.append(node.lineno)
    return lines


def test_direct_subprocess_usage_is_constrained_to_process_module() -> None:
    root = _pkg_root()
    offenders: list[str] = []
    for path in sorted(root.rglob("*.py")):
        rel = path.relative_to(root)
        if rel.parts and rel.parts[0] == "test":
            continue
        if rel.as_posix() in _ALLOWLIST:
            continue
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for line in _direct_subprocess_calls(tree):
            offenders.append(f"{rel}:{line}: direct subprocess call outside platform/process.py")

    assert not offenders, "Subprocess policy violations:\n" + "\n".join(offenders)


def test_services_do_not_import_cli() -> None:
    root = _pkg_root()
    offenders: list[str] = []
    for path in sorted((root / "services").rglob("*.py")):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.ImportFrom) and (node.module or "").startswith("pkgship.cli"):
                offenders.append(f"{path.relative_to(root)}:{node.lineno}")

    assert not offenders, "services must not depend on the CLI layer:\n" + "\n".join(offenders)
