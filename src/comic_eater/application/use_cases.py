"""Application use-cases orchestrating conversion workflows."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from comic_eater.adapters.archive_tools import CommandLineArchiveTool
from comic_eater.adapters.images import PillowImageValidator
from comic_eater.application.options import ConversionOptions
from comic_eater.application.ports import ArchiveTool, ImageValidator
from comic_eater.application.results import ConversionContext, ConversionReport
from comic_eater.converter import files
from comic_eater.converter.orchestrator import ArchiveConverter
from comic_eater.maintenance import MaintenanceMover
from comic_eater.metadata import MetadataRecorder
from comic_eater.saga.executor import SagaExecutor

logger = logging.getLogger(__name__)


def discover_inputs(
    path: Path, options: ConversionOptions
) -> list[ConversionContext]:
    """Use-case: list the units of work found at ``path``.

    Every archive below ``path`` becomes an input, as does every immediate
    child directory holding page images but no archives. A file path is an
    input on its own when it has an archive extension.
    """
    cleaning = options.cleaning
    if path.is_file():
        if files.has_extension(path, cleaning.archive_extensions):
            return [ConversionContext(archive_path=path)]
        logger.warning('"%s" is not an archive; skipping', path)
        return []
    if not path.is_dir():
        logger.warning('"%s" does not exist; skipping', path)
        return []

    inputs = [
        ConversionContext(archive_path=archive)
        for archive in files.list_files(path, cleaning.archive_extensions)
    ]
    for child in files.child_dirs(path):
        if next(files.iter_files(child, cleaning.archive_extensions), None) is not None:
            continue
        if next(files.iter_files(child, cleaning.image_extensions), None) is None:
            continue
        inputs.append(ConversionContext(archive_path=child, volume_start_path=child))
    logger.info('Found %d inputs in "%s"', len(inputs), path)
    return inputs


def build_converter(
    options: ConversionOptions,
    *,
    executor: SagaExecutor | None = None,
    archive_tool: ArchiveTool | None = None,
    image_validator: ImageValidator | None = None,
) -> ArchiveConverter:
    """Wire the converter with default adapters where none are given."""
    return ArchiveConverter(
        executor=executor or SagaExecutor(max_concurrency=options.concurrency),
        archive_tool=archive_tool or CommandLineArchiveTool(),
        image_validator=image_validator
        or PillowImageValidator(options.cleaning.image_extensions),
        options=options,
    )


def tidy_queue(inputs: Iterable[ConversionContext], queue_roots: Sequence[Path]) -> int:
    """Remove emptied directories left behind by consumed inputs.

    Climbing stops below the queue root an input was discovered in.
    """
    removed = 0
    for context in inputs:
        if context.archive_path.exists():
            continue
        for root in queue_roots:
            if root in context.archive_path.parents:
                removed += files.remove_all_empty_dirs(context.archive_path.parent, root)
                break
    if removed:
        logger.info("Removed %d empty folders", removed)
    return removed


async def convert_paths(
    paths: Sequence[Path],
    options: ConversionOptions,
    *,
    executor: SagaExecutor | None = None,
    archive_tool: ArchiveTool | None = None,
    image_validator: ImageValidator | None = None,
) -> ConversionReport:
    """Use-case: convert every input found under ``paths``.

    Successful packages get their history merged into the metadata sidecar
    when ``options.write_metadata`` is set. Directories in ``paths`` are
    treated as queue folders: with ``options.maintenance_folder`` set, the
    files still in them afterwards (failed inputs, kept sources, strays) are
    moved there, and emptied folders are removed.
    """
    inputs = [context for path in paths for context in discover_inputs(path, options)]
    converter = build_converter(
        options,
        executor=executor,
        archive_tool=archive_tool,
        image_validator=image_validator,
    )
    conversion = await converter.convert_batch(inputs)

    metadata = None
    if options.write_metadata and conversion.successful:
        recorder = MetadataRecorder(options.sidecar_name, options.package_extension)
        metadata = await recorder.record_batch(converter.executor, conversion.successful)

    queue_roots = [path for path in paths if path.is_dir()]
    maintenance = None
    if options.maintenance_folder is not None and queue_roots:
        mover = MaintenanceMover(options.maintenance_folder)
        maintenance = await mover.move_batch(
            converter.executor,
            queue_roots,
            keep=[context.archive_path for context in conversion.successful],
        )

    removed = tidy_queue(inputs, queue_roots)
    return ConversionReport(
        conversion=conversion,
        metadata=metadata,
        maintenance=maintenance,
        removed_dirs=removed,
    )
