"""Recursive archive-to-package conversion.

:class:`ArchiveConverter.convert` is a saga worker. For one context it
either short-circuits on an existing package, packages a single volume, or
discovers nested archives / nested volume folders and runs itself over them
through the same :class:`SagaExecutor`. A node that only wraps other units
(a container) produces no package of its own; its children's outcomes are
flattened into the caller's report.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from comic_eater.application.options import ConversionOptions
from comic_eater.application.ports import ArchiveTool, ImageValidator
from comic_eater.application.results import ConversionContext, SagaResult
from comic_eater.converter import files
from comic_eater.converter.cleaning import PackagePaths, clean_directory, package_paths
from comic_eater.converter.volume_finder import (
    NestedVolumeFinder,
    VolumeCandidate,
    is_nested,
)
from comic_eater.errors import ContentError, SubSagaError
from comic_eater.saga.executor import SagaExecutor, log_saga_results
from comic_eater.types import GENERIC_SUFFIXES, ToolKind

logger = logging.getLogger(__name__)

CONVERT_TO_PACKAGE = "Convert to CBZ"
CONVERT_NESTED_TO_PACKAGE = "Convert Nested Archives to CBZ"
CONVERT_FOLDER_TO_PACKAGE = "Convert Image Folder to CBZ"

PARTIAL_SUFFIX = ".partial"


class ArchiveConverter:
    """Convert archives and image folders into canonical packages.

    Parameters
    ----------
    executor : SagaExecutor
        Executor used for the top-level batch and every nested batch.
    archive_tool : ArchiveTool
        Integrity testing, extraction and packaging.
    image_validator : ImageValidator
        Corruption check for page images.
    options : ConversionOptions | None, default=None
        Cleaning and packaging options.
    volume_finder : NestedVolumeFinder | None, default=None
        Multi-volume folder detection; built from ``options`` when omitted.
    """

    def __init__(
        self,
        executor: SagaExecutor,
        archive_tool: ArchiveTool,
        image_validator: ImageValidator,
        options: ConversionOptions | None = None,
        volume_finder: NestedVolumeFinder | None = None,
    ) -> None:
        self.executor = executor
        self.archive_tool = archive_tool
        self.image_validator = image_validator
        self.options = options or ConversionOptions()
        self.volume_finder = volume_finder or NestedVolumeFinder(
            self.options.cleaning, self.options.package_extension
        )

    async def convert_batch(
        self,
        contexts: Sequence[ConversionContext],
        action: str = CONVERT_TO_PACKAGE,
    ) -> SagaResult:
        """Convert every context and return the flattened report."""
        result = await self.executor.run(action, contexts, self.convert)
        log_saga_results(result)
        return result

    async def convert(self, context: ConversionContext) -> ConversionContext:
        """Saga worker: convert one archive or volume folder."""
        updated = context.evolve(action=CONVERT_TO_PACKAGE, record_change=False)

        if context.volume_start_path is not None:
            working_dir = context.volume_start_path
            source_archive = None
            paths = self._paths(working_dir, context.root_path, is_dir=True)
        else:
            source_archive = await self._normalize_extension(context.archive_path)
            updated = updated.evolve(archive_path=source_archive)
            paths = self._paths(source_archive, context.root_path, is_dir=False)
            if paths.target_path.exists():
                logger.info('"%s" already exists. Skipping.', paths.target_path)
                return updated.evolve(archive_path=paths.target_path)
            tool = await self.archive_tool.test_integrity(source_archive)
            working_dir = await self._extract(source_archive, paths, tool)

        contents = await asyncio.to_thread(
            clean_directory, working_dir, self.options.cleaning
        )
        updated = updated.evolve(
            unexpected_files=updated.unexpected_files | contents.unexpected
        )

        if contents.archives:
            return await self._convert_nested_archives(
                updated, contents.archives, working_dir, source_archive, paths
            )

        report = await self.image_validator.validate_directory(working_dir)
        if not report.is_valid:
            raise ContentError(
                f'Corrupted images found for "{updated.archive_path}": {report.error}'
            )

        candidates = await self.volume_finder.find(working_dir, paths.clean_path)
        if is_nested(candidates):
            return await self._convert_nested_volumes(
                updated, candidates, working_dir, source_archive, paths
            )

        return await self._package(updated, working_dir, source_archive, paths)

    def _paths(self, path: Path, root_path: Path | None, *, is_dir: bool) -> PackagePaths:
        return package_paths(
            path,
            root_path,
            self.options.cleaning.junk_patterns,
            self.options.package_extension,
            is_dir=is_dir,
        )

    async def _normalize_extension(self, archive_path: Path) -> Path:
        suffix = archive_path.suffix.lower()
        generic = GENERIC_SUFFIXES.get(suffix)
        if generic is None:
            return archive_path
        if suffix == f".{self.options.package_extension}" and not (
            self.options.renormalize_packages
        ):
            return archive_path
        renamed = archive_path.with_suffix(generic)
        logger.info('Renaming "%s" to "%s"', archive_path, renamed)
        return await asyncio.to_thread(files.move_file, archive_path, renamed)

    async def _extract(
        self, archive_path: Path, paths: PackagePaths, tool: ToolKind
    ) -> Path:
        # Each item extracts into its own directory; same-named inputs never share one.
        work_dir = await asyncio.to_thread(
            files.make_work_dir, archive_path.parent, paths.clean_name
        )
        try:
            return await self.archive_tool.extract(archive_path, work_dir, tool)
        except Exception:
            await asyncio.to_thread(files.rm, work_dir)
            raise

    async def _convert_nested_archives(
        self,
        context: ConversionContext,
        archives: Sequence[Path],
        working_dir: Path,
        source_archive: Path | None,
        paths: PackagePaths,
    ) -> ConversionContext:
        logger.debug('%d nested archives found in "%s"', len(archives), working_dir)
        children = [
            ConversionContext(archive_path=archive, root_path=paths.clean_path)
            for archive in archives
        ]
        result = await self.convert_batch(children, action=CONVERT_NESTED_TO_PACKAGE)
        if result.unsuccessful:
            raise SubSagaError(
                f'Nested archive failed so "{context.archive_path}" was left in place.',
                result,
            )
        await self._remove_container_sources(source_archive, working_dir)
        return context.evolve(
            archive_path=working_dir, record_change=True, sub_saga_results=result
        )

    async def _convert_nested_volumes(
        self,
        context: ConversionContext,
        candidates: Sequence[VolumeCandidate],
        working_dir: Path,
        source_archive: Path | None,
        paths: PackagePaths,
    ) -> ConversionContext:
        logger.debug('%d nested volumes found in "%s"', len(candidates), working_dir)
        children = [
            ConversionContext(
                archive_path=candidate.candidate_dir,
                volume_start_path=candidate.candidate_dir,
                root_path=paths.clean_path,
            )
            for candidate in candidates
        ]
        result = await self.convert_batch(children, action=CONVERT_FOLDER_TO_PACKAGE)
        if result.unsuccessful:
            raise SubSagaError(
                f'Child volume failed so "{context.archive_path}" was left in place.',
                result,
            )
        await self._remove_container_sources(source_archive, working_dir)
        return context.evolve(
            archive_path=working_dir, record_change=True, sub_saga_results=result
        )

    async def _remove_container_sources(
        self, source_archive: Path | None, working_dir: Path
    ) -> None:
        await asyncio.to_thread(files.remove_empty_dirs, working_dir)
        if not working_dir.exists():
            if source_archive is not None:
                await asyncio.to_thread(files.rm, source_archive)
            return
        if source_archive is None:
            logger.warning('Leftover files kept in "%s"', working_dir)
            return
        # The source still holds every leftover, so only the extracted copy goes.
        logger.warning(
            'Leftover files in "%s"; keeping "%s"', working_dir, source_archive
        )
        await asyncio.to_thread(files.rm, working_dir)

    async def _package(
        self,
        context: ConversionContext,
        working_dir: Path,
        source_archive: Path | None,
        paths: PackagePaths,
    ) -> ConversionContext:
        target = paths.target_path
        partial = await asyncio.to_thread(
            files.make_partial_file, target, PARTIAL_SUFFIX
        )
        try:
            await self.archive_tool.compress(working_dir, partial)
            await self.archive_tool.test_integrity(partial)
        except Exception:
            await asyncio.to_thread(files.rm, partial)
            raise

        # No await between the existence check and the move.
        if target.exists():
            logger.warning('"%s" appeared while packaging; discarding the new copy', target)
            files.rm(partial)
            if source_archive is not None:
                await asyncio.to_thread(files.rm, working_dir)
            return context.evolve(archive_path=target, record_change=False)
        files.move_file(partial, target)

        await asyncio.to_thread(files.rm, working_dir)
        if source_archive is not None:
            await asyncio.to_thread(files.rm, source_archive)
        logger.info('Packaged "%s"', target)
        return context.evolve(archive_path=target, record_change=True)
