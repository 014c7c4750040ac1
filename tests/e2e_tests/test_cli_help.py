"""End-to-end smoke test for CLI help output."""

from __future__ import annotations

import subprocess

import comic_eater


def test_package_import_smoke() -> None:
    """Ensure package can be imported in the test process."""
    assert comic_eater.__version__


def test_cli_help_smoke() -> None:
    """Ensure the installed CLI entrypoint responds to --help."""
    result = subprocess.run(
        ["comic-eater", "--help"],
        capture_output=True,
        text=True,
        check=False,
    )

    assert result.returncode == 0, result.stderr
    assert "Convert comic archives" in result.stdout


def test_cli_convert_missing_path_fails_cleanly() -> None:
    """Ensure CLI returns a user-facing validation error for a missing input."""
    result = subprocess.run(
        ["comic-eater", "convert", "/tmp/missing.cbr"],
        capture_output=True,
        text=True,
        check=False,
    )

    assert result.returncode != 0
    assert "does not exist" in result.stderr.lower()
