#!/usr/bin/env python3
"""Generate requirements files from pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
# Output file -> optional-dependency extras layered over the base dependencies.
PROFILES: dict[str, tuple[str, ...]] = {
    "requirements.txt": (),
    "requirements-dev.txt": ("test",),
}


def collect_requirements(extras: tuple[str, ...]) -> list[str]:
    """Return sorted base dependencies plus those of ``extras``."""
    pyproject = tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))
    deps = set(pyproject["project"].get("dependencies", []))
    optional = pyproject["project"].get("optional-dependencies", {})
    for extra in extras:
        deps.update(optional.get(extra, []))
    return sorted(dep.strip() for dep in deps if dep.strip())


def main() -> None:
    """Regenerate every requirements profile."""
    for filename, extras in PROFILES.items():
        reqs = collect_requirements(extras)
        label = ",".join(extras) if extras else "none"
        header = [
            f"# Generated from pyproject.toml (extras: {label})",
            "# Do not edit manually; run: python scripts/generate_requirements.py",
            "",
        ]
        body = "\n".join(reqs) + "\n"
        (ROOT / filename).write_text("\n".join(header) + body, encoding="utf-8")
        print(f"Wrote {len(reqs)} requirements to {filename}")


if __name__ == "__main__":
    main()
