"""Junk-name filtering, output path derivation and content classification."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from comic_eater.application.options import CleaningOptions
from comic_eater.converter import files
from comic_eater.errors import ContentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackagePaths:
    """Where a unit of work is packaged into."""

    clean_name: str
    clean_path: Path
    target_path: Path


@dataclass(frozen=True)
class CleanedContents:
    """Classification of a directory after cleaning."""

    images: tuple[Path, ...]
    archives: tuple[Path, ...]
    allowed: tuple[Path, ...]
    unexpected: frozenset[str]


def strip_junk(name: str, patterns: Iterable[str]) -> str:
    """Remove every junk pattern from ``name`` until nothing changes.

    Matching is case-insensitive and whitespace is trimmed after each pattern.
    A name made only of junk is returned unchanged.
    """
    compiled = [re.compile(re.escape(pattern), re.IGNORECASE) for pattern in patterns]
    cleaned = name
    while True:
        previous = cleaned
        for pattern in compiled:
            cleaned = pattern.sub("", cleaned).strip()
        if cleaned == previous:
            break
    if not cleaned:
        logger.warning('Cleaning "%s" would leave an empty name; keeping it', name)
        return name
    return cleaned


def clean_entry_name(name: str, patterns: Iterable[str], *, is_dir: bool) -> str:
    """Clean a file or directory name, keeping a file's extension intact."""
    if is_dir:
        return strip_junk(name, patterns)
    stem, suffix = os.path.splitext(name)
    if not stem:
        return name
    return strip_junk(stem, patterns) + suffix


def package_paths(
    archive_path: Path,
    root_path: Path | None,
    patterns: Iterable[str],
    package_extension: str,
    *,
    is_dir: bool = False,
) -> PackagePaths:
    """Derive the clean name and output locations for ``archive_path``.

    Descendants of a root archive (``root_path`` set) are packaged next to
    the root's clean path so a whole nesting tree lands in one directory.
    """
    base_name = archive_path.name if is_dir else archive_path.stem
    clean_name = strip_junk(base_name, patterns)
    dest_dir = root_path.parent if root_path is not None else archive_path.parent
    return PackagePaths(
        clean_name=clean_name,
        clean_path=dest_dir / clean_name,
        target_path=dest_dir / f"{clean_name}.{package_extension}",
    )


def _delete_unwanted(directory: Path, options: CleaningOptions) -> None:
    for dirpath, dirnames, filenames in os.walk(directory):
        for name in list(dirnames):
            if name in options.delete_names:
                files.rm(Path(dirpath) / name)
                dirnames.remove(name)
        for name in filenames:
            path = Path(dirpath) / name
            if name in options.delete_names or files.has_extension(
                path, options.delete_extensions
            ):
                files.rm(path)


def _plan_renames(
    directory: Path, patterns: tuple[str, ...]
) -> list[tuple[Path, Path]]:
    plan: list[tuple[Path, Path]] = []
    for dirpath, dirnames, filenames in os.walk(directory, topdown=False):
        parent = Path(dirpath)
        claimed: dict[str, str] = {}
        entries = [(name, True) for name in dirnames] + [
            (name, False) for name in filenames
        ]
        for name, is_dir in sorted(entries):
            cleaned = clean_entry_name(name, patterns, is_dir=is_dir)
            if cleaned in claimed:
                raise ContentError(
                    f'Cleaning "{name}" and "{claimed[cleaned]}" in "{parent}" '
                    f'both produce "{cleaned}"'
                )
            claimed[cleaned] = name
            if cleaned != name:
                plan.append((parent / name, parent / cleaned))
    return plan


def _classify(directory: Path, options: CleaningOptions) -> CleanedContents:
    images: list[Path] = []
    archives: list[Path] = []
    allowed: list[Path] = []
    unexpected: set[str] = set()
    for dirpath, _dirnames, filenames in os.walk(directory):
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if files.has_extension(path, options.image_extensions):
                images.append(path)
            elif files.has_extension(path, options.archive_extensions):
                archives.append(path)
            elif name in options.allowed_names:
                allowed.append(path)
            else:
                unexpected.add(str(path.relative_to(directory)))
    return CleanedContents(
        images=tuple(sorted(images)),
        archives=tuple(sorted(archives)),
        allowed=tuple(sorted(allowed)),
        unexpected=frozenset(unexpected),
    )


def clean_directory(directory: Path, options: CleaningOptions) -> CleanedContents:
    """Delete unwanted files, strip junk from names and classify the rest.

    Raises
    ------
    ContentError
        If two entries clean to the same name, or nothing recognizable is left.
    """
    _delete_unwanted(directory, options)
    plan = _plan_renames(directory, options.junk_patterns)
    for source, target in plan:
        logger.debug('Renaming "%s" to "%s"', source, target)
        source.rename(target)

    contents = _classify(directory, options)
    if contents.unexpected:
        logger.info(
            'Unexpected files in "%s": %s', directory, sorted(contents.unexpected)
        )
    if not contents.images and not contents.archives:
        raise ContentError(f'No recognizable content in "{directory}"')
    return contents
