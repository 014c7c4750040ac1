#!/usr/bin/env python3
"""Simple complexity guard for conversion orchestrators."""

from __future__ import annotations

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
TARGETS = (
    ROOT / "src/comic_eater/application/use_cases.py",
    ROOT / "src/comic_eater/converter/orchestrator.py",
)
MAX_STATEMENTS = 40
FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef)


def _functions(tree: ast.Module) -> list[ast.FunctionDef | ast.AsyncFunctionDef]:
    found = []
    for node in tree.body:
        if isinstance(node, FUNCTION_NODES):
            found.append(node)
        elif isinstance(node, ast.ClassDef):
            found.extend(item for item in node.body if isinstance(item, FUNCTION_NODES))
    return found


def main() -> None:
    """Fail when orchestrator functions exceed the statement threshold."""
    violations: list[str] = []
    for target in TARGETS:
        tree = ast.parse(target.read_text(encoding="utf-8"))
        for node in _functions(tree):
            stmt_count = len(node.body)
            if stmt_count > MAX_STATEMENTS:
                violations.append(f"{target.name}:{node.name}: {stmt_count} statements")
    if violations:
        raise SystemExit(
            "Orchestrator complexity threshold exceeded:\n"
            + "\n".join(f"- {v}" for v in violations)
        )
    print("Orchestrator complexity check passed.")


if __name__ == "__main__":
    main()
