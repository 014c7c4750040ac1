"""Typed option objects shared across conversion use-cases."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from comic_eater.schemas import (
    DEFAULT_ALLOWED_NAMES,
    DEFAULT_ARCHIVE_EXTENSIONS,
    DEFAULT_DELETE_EXTENSIONS,
    DEFAULT_DELETE_NAMES,
    DEFAULT_IMAGE_EXTENSIONS,
    ConversionConfig,
)


@dataclass(frozen=True)
class CleaningOptions:
    """Name-cleaning and content-classification configuration."""

    junk_patterns: tuple[str, ...] = ()
    delete_names: frozenset[str] = frozenset(DEFAULT_DELETE_NAMES)
    delete_extensions: frozenset[str] = frozenset(DEFAULT_DELETE_EXTENSIONS)
    allowed_names: frozenset[str] = frozenset(DEFAULT_ALLOWED_NAMES)
    image_extensions: frozenset[str] = frozenset(DEFAULT_IMAGE_EXTENSIONS)
    archive_extensions: frozenset[str] = frozenset(DEFAULT_ARCHIVE_EXTENSIONS)


@dataclass(frozen=True)
class ConversionOptions:
    """Shared conversion options passed through use-cases."""

    cleaning: CleaningOptions = field(default_factory=CleaningOptions)
    concurrency: int = 1
    renormalize_packages: bool = False
    package_extension: str = "cbz"
    sidecar_name: str = "ComicEater.json"
    write_metadata: bool = True
    maintenance_folder: Path | None = None


def options_from_config(config: ConversionConfig) -> ConversionOptions:
    """Build frozen options from a validated config model."""
    return ConversionOptions(
        cleaning=CleaningOptions(
            junk_patterns=tuple(config.junk_patterns),
            delete_names=frozenset(config.delete_names),
            delete_extensions=frozenset(config.delete_extensions),
            allowed_names=frozenset(config.allowed_names),
            image_extensions=frozenset(config.image_extensions),
            archive_extensions=frozenset(config.archive_extensions),
        ),
        concurrency=config.concurrency,
        renormalize_packages=config.renormalize_packages,
        package_extension=config.package_extension,
        sidecar_name=config.sidecar_name,
        write_metadata=config.write_metadata,
        maintenance_folder=config.maintenance_folder,
    )
