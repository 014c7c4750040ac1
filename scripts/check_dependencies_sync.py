#!/usr/bin/env python3
"""Ensure requirements files match the dependencies in pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
# Requirements file -> optional-dependency extras layered over the base dependencies.
SYNC_PROFILES: dict[str, tuple[str, ...]] = {
    "requirements.txt": (),
    "requirements-dev.txt": ("test",),
}


def _normalize(req: str) -> str:
    return req.split("#", 1)[0].strip()


def _expected_requirements(extras: tuple[str, ...]) -> set[str]:
    pyproject = tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))
    deps = set(pyproject["project"].get("dependencies", []))
    optional = pyproject["project"].get("optional-dependencies", {})
    for extra in extras:
        deps.update(optional.get(extra, []))
    return {dep.strip() for dep in deps if dep.strip()}


def _actual_requirements(filename: str) -> set[str]:
    path = ROOT / filename
    if not path.exists():
        return set()
    reqs: set[str] = set()
    for line in path.read_text(encoding="utf-8").splitlines():
        norm = _normalize(line)
        if norm:
            reqs.add(norm)
    return reqs


def main() -> None:
    """Compare every requirements file against pyproject.toml."""
    parts: list[str] = []
    for filename, extras in SYNC_PROFILES.items():
        expected = _expected_requirements(extras)
        actual = _actual_requirements(filename)
        missing = sorted(expected - actual)
        unknown = sorted(actual - expected)
        if missing:
            parts.append(f"Missing from {filename}:")
            parts.extend(f"- {entry}" for entry in missing)
        if unknown:
            parts.append(f"Unexpected in {filename}:")
            parts.extend(f"- {entry}" for entry in unknown)
    if parts:
        raise SystemExit(
            "\n".join(
                [
                    "requirements files are out of sync with pyproject.toml.",
                    "Run: python scripts/generate_requirements.py",
                    *parts,
                ]
            )
        )
    print("Dependency sync check passed.")


if __name__ == "__main__":
    main()
