"""Persist conversion history into each package's metadata sidecar."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from comic_eater.application.results import ConversionContext, SagaResult
from comic_eater.infrastructure.sidecar import merge_history, read_sidecar, write_sidecar
from comic_eater.saga import history as ledger
from comic_eater.saga.executor import SagaExecutor, log_saga_results
from comic_eater.types import JsonValue

logger = logging.getLogger(__name__)

SET_META_DATA = "Set Meta Data"


class MetadataRecorder:
    """Merge a context's recorded history into its package sidecar.

    Parameters
    ----------
    sidecar_name : str, default="ComicEater.json"
        Entry name of the sidecar inside the package.
    package_extension : str, default="cbz"
        Only files with this suffix are written to.
    """

    def __init__(
        self, sidecar_name: str = "ComicEater.json", package_extension: str = "cbz"
    ) -> None:
        self.sidecar_name = sidecar_name
        self.package_extension = package_extension

    async def record_batch(
        self, executor: SagaExecutor, contexts: Sequence[ConversionContext]
    ) -> SagaResult:
        result = await executor.run(SET_META_DATA, contexts, self.record)
        log_saga_results(result)
        return result

    async def record(self, context: ConversionContext) -> ConversionContext:
        """Saga worker: write the persisted history of ``context``."""
        updated = context.evolve(action=SET_META_DATA, record_change=False)
        package = context.archive_path
        if package.suffix.lower() != f".{self.package_extension}" or not package.is_file():
            logger.debug('"%s" is not a package; no metadata written', package)
            return updated

        entries = ledger.for_persistence(context.history)
        if not entries:
            logger.debug('Nothing recorded for "%s"', package)
            return updated

        own_entry = ledger.create_entry(SET_META_DATA, updated.snapshot(), True)
        entries.append(ledger.for_persistence([own_entry])[0])
        await asyncio.to_thread(self._merge_into, package, entries)
        return updated.evolve(record_change=True)

    def _merge_into(self, package: Path, entries: list[dict[str, JsonValue]]) -> None:
        existing = read_sidecar(package, self.sidecar_name) or {}
        previous = existing.get("history")
        if not isinstance(previous, list):
            previous = []
        existing["history"] = merge_history(
            (entry for entry in previous if isinstance(entry, dict)), entries
        )
        logger.info('Setting metadata for "%s"', package)
        write_sidecar(package, self.sidecar_name, existing)
