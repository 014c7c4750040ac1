"""Top-level API for converting comic archives into canonical packages."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

__version__ = "0.1.0"


def convert(
    paths: Sequence[Path],
    config_path: Path | None = None,
    **overrides: object,
):
    """Convert archives and image folders under ``paths``.

    Parameters
    ----------
    paths : Sequence[Path]
        Inputs or queue folders to convert.
    config_path : Path | None, default=None
        Optional YAML config file.
    **overrides : object
        Config fields overriding the file.

    Returns
    -------
    ConversionReport
        Flattened conversion and metadata results.
    """
    from .api import convert as _impl

    return _impl(paths, config_path, **overrides)


def discover(path: Path, config_path: Path | None = None):
    """List the inputs a conversion of ``path`` would process."""
    from .api import discover as _impl

    return _impl(path, config_path)


__all__ = ["convert", "discover"]
