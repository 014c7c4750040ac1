"""Unit tests for input discovery and queue tidying."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from comic_eater.application.options import ConversionOptions
from comic_eater.application.results import ConversionContext
from comic_eater.application.use_cases import discover_inputs, tidy_queue


def test_discovers_archives_and_image_folders(
    tmp_path: Path, write_pages: Callable[..., list[Path]]
) -> None:
    (tmp_path / "b.rar").write_bytes(b"")
    (tmp_path / "series").mkdir()
    (tmp_path / "series" / "a.cb7").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("x")
    write_pages(tmp_path / "Loose Volume", "01.jpg")
    (tmp_path / "empty").mkdir()

    inputs = discover_inputs(tmp_path, ConversionOptions())

    archives = [c.archive_path for c in inputs if c.volume_start_path is None]
    folders = [c.volume_start_path for c in inputs if c.volume_start_path is not None]
    assert archives == [tmp_path / "b.rar", tmp_path / "series" / "a.cb7"]
    assert folders == [tmp_path / "Loose Volume"]


def test_single_archive_path_is_its_own_input(tmp_path: Path) -> None:
    archive = tmp_path / "a.zip"
    archive.write_bytes(b"")

    assert discover_inputs(archive, ConversionOptions()) == [
        ConversionContext(archive_path=archive)
    ]


def test_non_archive_and_missing_paths_yield_nothing(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_text("x")
    assert discover_inputs(tmp_path / "a.txt", ConversionOptions()) == []
    assert discover_inputs(tmp_path / "missing", ConversionOptions()) == []


def test_tidy_queue_removes_emptied_parents(tmp_path: Path) -> None:
    queue = tmp_path / "queue"
    (queue / "author" / "series").mkdir(parents=True)
    (queue / "kept").mkdir()
    (queue / "kept" / "a.zip").write_bytes(b"")
    consumed = ConversionContext(archive_path=queue / "author" / "series" / "gone.zip")
    present = ConversionContext(archive_path=queue / "kept" / "a.zip")

    removed = tidy_queue([consumed, present], [queue])

    assert removed == 2
    assert queue.is_dir()
    assert (queue / "kept").is_dir()
    assert not (queue / "author").exists()
