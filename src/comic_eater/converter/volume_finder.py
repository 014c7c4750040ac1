"""Detection of directories that bundle several independent volumes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from comic_eater.application.options import CleaningOptions
from comic_eater.converter import files
from comic_eater.converter.cleaning import package_paths

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VolumeCandidate:
    """A subdirectory that looks like one complete volume."""

    candidate_dir: Path
    target_path: Path


def is_nested(candidates: Sequence[VolumeCandidate]) -> bool:
    """Two or more candidates mean the directory bundles several volumes."""
    return len(candidates) >= 2


class NestedVolumeFinder:
    """Find immediate subdirectories that each hold a volume of page images.

    A directory with page images directly at its top level is a single
    volume and yields no candidates.
    """

    def __init__(
        self, options: CleaningOptions | None = None, package_extension: str = "cbz"
    ) -> None:
        self.options = options or CleaningOptions()
        self.package_extension = package_extension

    async def find(
        self, directory: Path, root_path: Path | None = None
    ) -> list[VolumeCandidate]:
        """Return volume candidates below ``directory``.

        Parameters
        ----------
        directory : Path
            Cleaned directory to inspect.
        root_path : Path | None, default=None
            Clean path of the lineage the candidates will be packaged under.

        Returns
        -------
        list[VolumeCandidate]
            Candidates sorted by directory name.
        """
        return await asyncio.to_thread(self._find, directory, root_path)

    def _find(self, directory: Path, root_path: Path | None) -> list[VolumeCandidate]:
        logger.debug('Checking for nested volumes in: "%s"', directory)
        loose_pages = [
            entry
            for entry in directory.iterdir()
            if entry.is_file() and files.has_extension(entry, self.options.image_extensions)
        ]
        if loose_pages:
            logger.debug('"%s" holds its pages directly', directory)
            return []

        candidates: list[VolumeCandidate] = []
        for child in files.child_dirs(directory):
            if not self._looks_like_volume(child):
                continue
            paths = package_paths(
                child,
                root_path,
                self.options.junk_patterns,
                self.package_extension,
                is_dir=True,
            )
            candidates.append(
                VolumeCandidate(candidate_dir=child, target_path=paths.target_path)
            )
        logger.debug('%d volume candidates found in "%s"', len(candidates), directory)
        return candidates

    def _looks_like_volume(self, directory: Path) -> bool:
        has_images = next(
            files.iter_files(directory, self.options.image_extensions), None
        )
        if has_images is None:
            return False
        has_archives = next(
            files.iter_files(directory, self.options.archive_extensions), None
        )
        return has_archives is None
