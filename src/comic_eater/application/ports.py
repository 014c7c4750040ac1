"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from comic_eater.types import ToolKind


@dataclass(frozen=True)
class ImageValidationReport:
    """Outcome of probing every image in a directory."""

    is_valid: bool
    error: str | None = None
    invalid_images: tuple[Path, ...] = ()


class ArchiveTool(Protocol):
    """Test, extract and build archives."""

    async def test_integrity(self, archive_path: Path) -> ToolKind:
        """Return the tool that could read the archive; raise ``ValidationError``."""

    async def extract(
        self,
        archive_path: Path,
        dest_dir: Path,
        tool: ToolKind = ToolKind.SEVEN_ZIP,
    ) -> Path:
        """Extract into ``dest_dir`` and return it."""

    async def compress(self, source_dir: Path, dest_path: Path) -> Path:
        """Package the contents of ``source_dir`` into ``dest_path``."""


class ImageValidator(Protocol):
    """Check images for decode corruption."""

    async def validate_directory(self, directory: Path) -> ImageValidationReport:
        """Validate every image below ``directory``."""
