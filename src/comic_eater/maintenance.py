"""Hand files left in a queue folder over to a dated maintenance folder."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection, Sequence
from datetime import date
from pathlib import Path

from comic_eater.application.results import ConversionContext, SagaResult
from comic_eater.converter import files
from comic_eater.saga.executor import SagaExecutor, log_saga_results

logger = logging.getLogger(__name__)

MOVE_TO_MAINTENANCE = "Move Files to Maintenance Folder"


def maintenance_target(
    file_path: Path, maintenance_folder: Path, queue_path: Path, day: date
) -> Path:
    """Return ``<maintenance>/<YYYY-MM-DD>/<path relative to the queue>``."""
    return maintenance_folder / day.isoformat() / file_path.relative_to(queue_path)


def remaining_files(
    queue_path: Path, keep: Collection[Path], maintenance_folder: Path
) -> list[Path]:
    """List the files under ``queue_path`` that are neither kept nor handed over."""
    kept = {path.resolve() for path in keep}
    handed_over = maintenance_folder.resolve()
    remaining = []
    for path in sorted(queue_path.rglob("*")):
        resolved = path.resolve()
        if not path.is_file() or resolved in kept:
            continue
        if resolved == handed_over or handed_over in resolved.parents:
            continue
        remaining.append(path)
    return remaining


class MaintenanceMover:
    """Move leftover queue files into ``<maintenance_folder>/<date>/``.

    Each file keeps its path relative to the queue folder it was found in,
    carried on the context as ``root_path``. Existing files in the
    maintenance folder are never overwritten; such a file fails on its own.
    """

    def __init__(self, maintenance_folder: Path, day: date | None = None) -> None:
        self.maintenance_folder = maintenance_folder
        self.day = day or date.today()

    async def move_batch(
        self,
        executor: SagaExecutor,
        queue_paths: Sequence[Path],
        keep: Collection[Path] = (),
    ) -> SagaResult:
        contexts = [
            ConversionContext(archive_path=path, root_path=queue)
            for queue in queue_paths
            for path in remaining_files(queue, keep, self.maintenance_folder)
        ]
        logger.info(
            'Moving %d leftover files to "%s"', len(contexts), self.maintenance_folder
        )
        result = await executor.run(MOVE_TO_MAINTENANCE, contexts, self.move)
        log_saga_results(result)
        for queue in queue_paths:
            await asyncio.to_thread(files.remove_empty_dirs, queue, queue)
        return result

    async def move(self, context: ConversionContext) -> ConversionContext:
        """Saga worker: move one leftover file out of its queue."""
        if context.root_path is None:
            raise ValueError(f'No queue folder recorded for "{context.archive_path}"')
        target = maintenance_target(
            context.archive_path, self.maintenance_folder, context.root_path, self.day
        )
        moved = await asyncio.to_thread(files.move_file, context.archive_path, target)
        return context.evolve(
            action=MOVE_TO_MAINTENANCE, archive_path=moved, record_change=False
        )
