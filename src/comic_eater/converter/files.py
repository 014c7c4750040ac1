"""Filesystem helpers shared by the conversion steps."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Collection, Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


def has_extension(path: Path, extensions: Collection[str]) -> bool:
    """Return ``True`` when the suffix (without dot, any case) is listed."""
    return path.suffix.lower().lstrip(".") in extensions


def iter_files(directory: Path, extensions: Collection[str]) -> Iterator[Path]:
    """Yield files below ``directory`` whose suffix is in ``extensions``."""
    for dirpath, _dirnames, filenames in os.walk(directory):
        for name in sorted(filenames):
            candidate = Path(dirpath) / name
            if has_extension(candidate, extensions):
                yield candidate


def list_files(directory: Path, extensions: Collection[str]) -> list[Path]:
    return sorted(iter_files(directory, extensions))


def child_dirs(directory: Path) -> list[Path]:
    """Return the immediate subdirectories of ``directory``, sorted by name."""
    if not directory.is_dir():
        return []
    return sorted(entry for entry in directory.iterdir() if entry.is_dir())


def make_work_dir(parent: Path, name: str) -> Path:
    """Create a fresh directory named after ``name`` that no other item shares."""
    parent.mkdir(parents=True, exist_ok=True)
    work_dir = Path(tempfile.mkdtemp(prefix=f"{name}.", dir=parent))
    logger.debug('Created working directory "%s"', work_dir)
    return work_dir


def make_partial_file(target: Path, suffix: str) -> Path:
    """Reserve a unique sibling of ``target`` to write an unfinished copy into."""
    target.parent.mkdir(parents=True, exist_ok=True)
    handle, name = tempfile.mkstemp(
        prefix=f"{target.name}.", suffix=suffix, dir=target.parent
    )
    os.close(handle)
    return Path(name)


def rm(path: Path) -> None:
    """Delete a file or directory tree; a missing path is not an error."""
    logger.info("Deleting %s", path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink(missing_ok=True)
    logger.debug("Deleted %s", path)


def move_file(source: Path, target: Path, *, overwrite: bool = False) -> Path:
    """Move ``source`` to ``target``, refusing to replace an existing target.

    Raises
    ------
    FileExistsError
        If ``target`` exists and ``overwrite`` is false.
    """
    if source.resolve() == target.resolve():
        logger.debug('No need to move "%s"', source)
        return target
    if target.exists() and not overwrite:
        raise FileExistsError(
            f'Refusing to move "{source}" to "{target}" because it exists already.'
        )
    logger.info('Moving "%s" to "%s"', source, target)
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(source), str(target))
    return target


def remove_empty_dirs(folder: Path, max_path: Path | None = None) -> bool:
    """Remove ``folder`` and its subdirectories when they hold no files.

    Parameters
    ----------
    folder : Path
        Directory to prune.
    max_path : Path | None, default=None
        Directory that is never removed itself, even when empty.

    Returns
    -------
    bool
        ``True`` if ``folder`` itself was removed.
    """
    if not folder.is_dir() or folder.is_symlink():
        return False
    for entry in list(folder.iterdir()):
        remove_empty_dirs(entry, max_path)

    if max_path is not None and folder.resolve() == max_path.resolve():
        logger.debug('Deleted empty folders up to "%s"', max_path)
        return False
    if any(folder.iterdir()):
        logger.debug('Has files. Won\'t delete "%s"', folder)
        return False
    folder.rmdir()
    logger.debug('Removed empty folder "%s"', folder)
    return True


def remove_all_empty_dirs(
    directory: Path, max_path: Path, max_levels: int | None = None
) -> int:
    """Remove ``directory`` and then its ancestors while they are empty.

    Climbing stops at ``max_path`` (never removed), at the first non-empty
    directory, or after ``max_levels`` removals.

    Returns
    -------
    int
        Number of directories removed.
    """
    root = max_path.resolve()
    current = directory.resolve()
    removed = 0
    while max_levels is None or removed < max_levels:
        if current == root or root not in current.parents:
            break
        if not remove_empty_dirs(current):
            break
        removed += 1
        current = current.parent
    return removed
