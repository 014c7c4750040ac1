"""Public synchronous API (delegates to application use-cases)."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path

from comic_eater.application.options import ConversionOptions, options_from_config
from comic_eater.application.results import ConversionContext, ConversionReport
from comic_eater.application.use_cases import convert_paths, discover_inputs
from comic_eater.config import load_config


def build_options(config_path: Path | None = None, **overrides: object) -> ConversionOptions:
    """Load config from ``config_path`` and return frozen conversion options."""
    return options_from_config(load_config(config_path, **overrides))


def convert(
    paths: Sequence[Path],
    config_path: Path | None = None,
    **overrides: object,
) -> ConversionReport:
    """Convert archives and image folders under ``paths`` into packages.

    Parameters
    ----------
    paths : Sequence[Path]
        Archives, image folders or queue folders. When empty, the configured
        ``queue_folders`` are used.
    config_path : Path | None, default=None
        YAML config file.
    **overrides : object
        Config fields overriding the file.

    Returns
    -------
    ConversionReport
        Flattened conversion and metadata results.
    """
    config = load_config(config_path, **overrides)
    targets = list(paths) or list(config.queue_folders)
    return asyncio.run(convert_paths(targets, options_from_config(config)))


def discover(path: Path, config_path: Path | None = None) -> list[ConversionContext]:
    """Return the inputs a conversion of ``path`` would process."""
    return discover_inputs(path, build_options(config_path))
