"""Archive tool adapter implementing the ``ArchiveTool`` port."""

from __future__ import annotations

import asyncio
import logging
import zipfile
from pathlib import Path

from comic_eater.errors import ExternalToolError, ValidationError
from comic_eater.tools.base import ArchiveCommand
from comic_eater.tools.registry import ToolRegistry, create_default_registry
from comic_eater.types import ContainerKind, ToolKind

logger = logging.getLogger(__name__)


def zip_directory(source_dir: Path, dest_path: Path) -> Path:
    """Write every file below ``source_dir`` into an uncompressed zip.

    Entries are stored relative to ``source_dir`` in sorted order so page
    order in readers follows file names.
    """
    entries = sorted(path for path in source_dir.rglob("*") if path.is_file())
    if not entries:
        raise ExternalToolError(
            ("zip", str(dest_path)), None, f'"{source_dir}" did not have any content in it.'
        )
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(dest_path, "w", compression=zipfile.ZIP_STORED) as archive:
        for path in entries:
            archive.write(path, path.relative_to(source_dir).as_posix())
    return dest_path


class CommandLineArchiveTool:
    """Test and extract with command-line tools; package with ``zipfile``.

    Integrity testing tries the tools able to read the container kind, in
    preference order, and reports the first one that reads the archive.
    Files without a known container suffix are tried with every tool.
    """

    def __init__(self, registry: ToolRegistry | None = None) -> None:
        self.registry = registry or create_default_registry()

    async def test_integrity(self, archive_path: Path) -> ToolKind:
        """Test ``archive_path`` with every tool until one succeeds.

        Parameters
        ----------
        archive_path : Path
            Archive to test.

        Returns
        -------
        ToolKind
            Tool that validated the archive; use it for extraction.

        Raises
        ------
        ValidationError
            If every candidate tool rejects the archive.
        """
        logger.debug('Validating archive "%s"', archive_path)
        failures: list[ExternalToolError] = []
        for tool in self._candidates(archive_path):
            try:
                await tool.test(archive_path)
            except ExternalToolError as exc:
                logger.warning('%s could not validate "%s": %s', tool.kind.value, archive_path, exc)
                failures.append(exc)
                continue
            return tool.kind
        detail = failures[0] if failures else "no archive tools can read it"
        raise ValidationError(f'Failed archive validation for "{archive_path}": {detail}')

    def _candidates(self, archive_path: Path) -> list[ArchiveCommand]:
        kind = ContainerKind.from_path(archive_path)
        if kind is None:
            return self.registry.ordered()
        registered = self.registry.kinds()
        return [self.registry.get(tool) for tool in kind.tools if tool in registered]

    async def extract(
        self,
        archive_path: Path,
        dest_dir: Path,
        tool: ToolKind = ToolKind.SEVEN_ZIP,
    ) -> Path:
        logger.info('Extracting "%s" to "%s"', archive_path, dest_dir)
        command = self.registry.get(tool)
        extracted = await command.extract(archive_path, dest_dir)
        if not extracted.is_dir():
            raise ExternalToolError(
                (tool.value, "x", str(archive_path)),
                0,
                f'Extraction did not produce "{dest_dir}"',
            )
        return extracted

    async def compress(self, source_dir: Path, dest_path: Path) -> Path:
        logger.info('Packaging "%s" into "%s"', source_dir, dest_path)
        return await asyncio.to_thread(zip_directory, source_dir, dest_path)
