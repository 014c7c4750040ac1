"""Protocol for command-line archive tools."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from comic_eater.types import ToolKind


@runtime_checkable
class ArchiveCommand(Protocol):
    """Protocol implemented by archive command wrappers."""

    kind: ToolKind

    async def test(self, archive_path: Path) -> None:
        """Test archive integrity.

        Parameters
        ----------
        archive_path : Path
            Archive to test.

        Raises
        ------
        ExternalToolError
            If the tool reports a damaged or unreadable archive.
        """

    async def extract(self, archive_path: Path, dest_dir: Path) -> Path:
        """Extract ``archive_path`` into ``dest_dir``.

        Parameters
        ----------
        archive_path : Path
            Archive to extract.
        dest_dir : Path
            Directory receiving the contents. Existing files are kept.

        Returns
        -------
        Path
            ``dest_dir``.
        """
