#!/usr/bin/env python3
"""Architecture boundary checks."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/comic_eater"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main() -> None:
    """Run repository architecture boundary checks."""
    # The saga and the conversion core only talk to tools through ports.
    for folder in ("saga", "converter"):
        for path in (PACKAGE / folder).glob("*.py"):
            _assert_no_imports(
                path,
                [
                    "import typer",
                    "from typer",
                    "from PIL",
                    "import subprocess",
                    "create_subprocess_exec",
                    "comic_eater.adapters",
                    "comic_eater.tools",
                ],
            )

    app_dir = PACKAGE / "application"
    for path in app_dir.glob("*.py"):
        _assert_no_imports(path, ["import typer", "from typer"])

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
