"""Application-layer use-cases and option objects."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from comic_eater.application.options import (
    CleaningOptions,
    ConversionOptions,
    options_from_config,
)
from comic_eater.application.ports import ArchiveTool, ImageValidator
from comic_eater.application.results import (
    ConversionContext,
    ConversionReport,
    SagaResult,
)


def discover_inputs(path: Path, options: ConversionOptions) -> list[ConversionContext]:
    """List conversion inputs via lazy use-case import."""
    from comic_eater.application.use_cases import discover_inputs as _impl

    return _impl(path, options)


async def convert_paths(
    paths: Sequence[Path],
    options: ConversionOptions,
    *,
    archive_tool: ArchiveTool | None = None,
    image_validator: ImageValidator | None = None,
) -> ConversionReport:
    """Convert inputs under ``paths`` via lazy use-case import."""
    from comic_eater.application.use_cases import convert_paths as _impl

    return await _impl(
        paths,
        options,
        archive_tool=archive_tool,
        image_validator=image_validator,
    )


__all__ = [
    "CleaningOptions",
    "ConversionContext",
    "ConversionOptions",
    "ConversionReport",
    "SagaResult",
    "convert_paths",
    "discover_inputs",
    "options_from_config",
]
