"""Unit tests for filesystem helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from comic_eater.converter import files


def test_has_extension_ignores_case_and_dot() -> None:
    assert files.has_extension(Path("a.JPG"), {"jpg"})
    assert not files.has_extension(Path("a.jpg.partial"), {"jpg"})


def test_list_files_is_recursive_and_sorted(tmp_path: Path) -> None:
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "2.png").write_bytes(b"")
    (tmp_path / "1.png").write_bytes(b"")
    (tmp_path / "skip.txt").write_bytes(b"")

    assert files.list_files(tmp_path, {"png"}) == [tmp_path / "1.png", tmp_path / "b" / "2.png"]


def test_move_file_refuses_to_overwrite(tmp_path: Path) -> None:
    source = tmp_path / "a.zip"
    target = tmp_path / "a.cbz"
    source.write_text("new")
    target.write_text("old")

    with pytest.raises(FileExistsError):
        files.move_file(source, target)

    assert target.read_text() == "old"
    assert source.exists()


def test_move_file_creates_parent(tmp_path: Path) -> None:
    source = tmp_path / "a.zip"
    source.write_text("data")

    moved = files.move_file(source, tmp_path / "out" / "a.cbz")

    assert moved.read_text() == "data"
    assert not source.exists()


def test_make_work_dir_is_unique_per_call(tmp_path: Path) -> None:
    (tmp_path / "Book").mkdir()

    first = files.make_work_dir(tmp_path, "Book")
    second = files.make_work_dir(tmp_path, "Book")

    assert first != second
    assert first.is_dir() and second.is_dir()
    assert first.name.startswith("Book.")
    assert first.parent == tmp_path
    assert not any(first.iterdir())


def test_rm_handles_files_dirs_and_missing(tmp_path: Path) -> None:
    folder = tmp_path / "dir"
    (folder / "nested").mkdir(parents=True)
    (folder / "nested" / "f").write_text("x")
    single = tmp_path / "file"
    single.write_text("x")

    files.rm(folder)
    files.rm(single)
    files.rm(tmp_path / "missing")

    assert not folder.exists()
    assert not single.exists()


def test_remove_empty_dirs_keeps_folders_with_files(tmp_path: Path) -> None:
    (tmp_path / "root" / "empty" / "deeper").mkdir(parents=True)
    (tmp_path / "root" / "full").mkdir()
    (tmp_path / "root" / "full" / "keep.txt").write_text("x")

    removed = files.remove_empty_dirs(tmp_path / "root")

    assert not removed
    assert not (tmp_path / "root" / "empty").exists()
    assert (tmp_path / "root" / "full" / "keep.txt").exists()


def test_remove_empty_dirs_never_removes_max_path(tmp_path: Path) -> None:
    (tmp_path / "queue" / "a").mkdir(parents=True)

    files.remove_empty_dirs(tmp_path / "queue", max_path=tmp_path / "queue")

    assert (tmp_path / "queue").is_dir()
    assert not (tmp_path / "queue" / "a").exists()


def test_remove_all_empty_dirs_climbs_to_queue(tmp_path: Path) -> None:
    queue = tmp_path / "queue"
    (queue / "a" / "b").mkdir(parents=True)

    removed = files.remove_all_empty_dirs(queue / "a" / "b", queue)

    assert removed == 2
    assert queue.is_dir()
    assert not (queue / "a").exists()


def test_remove_all_empty_dirs_stops_at_first_non_empty(tmp_path: Path) -> None:
    queue = tmp_path / "queue"
    (queue / "a" / "b").mkdir(parents=True)
    (queue / "a" / "keep.txt").write_text("x")

    assert files.remove_all_empty_dirs(queue / "a" / "b", queue) == 1
    assert (queue / "a").is_dir()


def test_remove_all_empty_dirs_respects_max_levels(tmp_path: Path) -> None:
    queue = tmp_path / "queue"
    (queue / "a" / "b").mkdir(parents=True)

    assert files.remove_all_empty_dirs(queue / "a" / "b", queue, max_levels=1) == 1
    assert (queue / "a").is_dir()
