"""Pillow-backed image validator implementing the ``ImageValidator`` port."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection
from pathlib import Path

from PIL import Image

from comic_eater.application.ports import ImageValidationReport
from comic_eater.converter import files
from comic_eater.schemas import DEFAULT_IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)


def check_image(image_path: Path) -> None:
    """Decode ``image_path`` fully; raise on any corruption."""
    with Image.open(image_path) as image:
        image.verify()
    # verify() does not decode pixel data; a truncated file only fails on load
    with Image.open(image_path) as image:
        image.load()


class PillowImageValidator:
    """Check every image in a directory for decode errors."""

    def __init__(self, extensions: Collection[str] = DEFAULT_IMAGE_EXTENSIONS) -> None:
        self.extensions = frozenset(extensions)

    async def validate_directory(self, directory: Path) -> ImageValidationReport:
        return await asyncio.to_thread(self._validate, directory)

    def _validate(self, directory: Path) -> ImageValidationReport:
        images = files.list_files(directory, self.extensions)
        logger.debug('Validating %d images in "%s"', len(images), directory)
        invalid: list[Path] = []
        for image_path in images:
            try:
                check_image(image_path)
            except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
                logger.debug('Image validation of "%s" resulted in %r', image_path, exc)
                invalid.append(image_path)
        if not invalid:
            return ImageValidationReport(is_valid=True)
        logger.error(
            'Invalid images found in %d/%d of "%s"', len(invalid), len(images), directory
        )
        names = ", ".join(str(path.relative_to(directory)) for path in invalid)
        return ImageValidationReport(
            is_valid=False,
            error=f"Corrupted images: {names}",
            invalid_images=tuple(invalid),
        )
