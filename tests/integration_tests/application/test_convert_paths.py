"""Integration tests for the conversion use-case with metadata recording."""

from __future__ import annotations

import asyncio
import json
import zipfile
from collections.abc import Callable, Mapping
from pathlib import Path

from comic_eater.application.options import CleaningOptions, ConversionOptions
from comic_eater.application.results import ConversionContext
from comic_eater.application.use_cases import convert_paths
from comic_eater.infrastructure.sidecar import read_sidecar
from comic_eater.metadata import SET_META_DATA, MetadataRecorder
from comic_eater.saga.executor import SagaExecutor

MakeZip = Callable[[Path, Mapping[str, bytes]], Path]
SIDECAR = "ComicEater.json"


def _options(**changes: object) -> ConversionOptions:
    return ConversionOptions(cleaning=CleaningOptions(junk_patterns=("[Group]",)), **changes)


def test_queue_conversion_records_history(
    tmp_path: Path,
    make_zip: MakeZip,
    page: bytes,
    write_pages: Callable[..., list[Path]],
    archive_tool,
) -> None:
    queue = tmp_path / "queue"
    make_zip(queue / "[Group] Book.cbr", {"01.jpg": page})
    write_pages(queue / "Loose", "01.jpg")

    report = asyncio.run(convert_paths([queue], _options(), archive_tool=archive_tool))

    assert not report.failed
    assert sorted(path.name for path in queue.iterdir()) == ["Book.cbz", "Loose.cbz"]
    assert report.metadata is not None
    assert len(report.metadata.successful) == 2

    sidecar = read_sidecar(queue / "Book.cbz", SIDECAR)
    assert sidecar is not None
    assert [entry["action"] for entry in sidecar["history"]] == [
        "Convert to CBZ",
        SET_META_DATA,
    ]
    assert all("record_change" not in entry for entry in sidecar["history"])
    assert sidecar["history"][0]["context"]["archive_path"] == str(queue / "Book.cbz")


def test_existing_sidecar_is_merged_not_replaced(
    tmp_path: Path, make_zip: MakeZip, page: bytes, archive_tool
) -> None:
    previous = {
        "title": "Book",
        "history": [{"action": "Imported", "date": "x", "timestamp": 1, "context": {}}],
    }
    make_zip(
        tmp_path / "[Group] Book.cbz",
        {"01.jpg": page, SIDECAR: json.dumps(previous).encode()},
    )

    asyncio.run(convert_paths([tmp_path], _options(), archive_tool=archive_tool))

    sidecar = read_sidecar(tmp_path / "Book.cbz", SIDECAR)
    assert sidecar is not None
    assert sidecar["title"] == "Book"
    assert [entry["action"] for entry in sidecar["history"]] == [
        "Imported",
        "Convert to CBZ",
        SET_META_DATA,
    ]
    with zipfile.ZipFile(tmp_path / "Book.cbz") as archive:
        assert archive.namelist().count(SIDECAR) == 1


def test_metadata_can_be_disabled(
    tmp_path: Path, make_zip: MakeZip, page: bytes, archive_tool
) -> None:
    make_zip(tmp_path / "Book.zip", {"01.jpg": page})

    report = asyncio.run(
        convert_paths([tmp_path], _options(write_metadata=False), archive_tool=archive_tool)
    )

    assert report.metadata is None
    assert read_sidecar(tmp_path / "Book.cbz", SIDECAR) is None


def test_skipped_packages_are_not_rewritten(
    tmp_path: Path, make_zip: MakeZip, page: bytes, archive_tool
) -> None:
    package = make_zip(tmp_path / "Book.cbz", {"01.jpg": page})
    before = package.read_bytes()

    report = asyncio.run(convert_paths([tmp_path], _options(), archive_tool=archive_tool))

    assert report.metadata is not None
    assert report.metadata.successful[0].record_change is False
    assert package.read_bytes() == before


def test_recorder_ignores_non_packages(tmp_path: Path) -> None:
    folder = tmp_path / "outer"
    folder.mkdir()
    result = asyncio.run(
        MetadataRecorder().record_batch(SagaExecutor(), [ConversionContext(archive_path=folder)])
    )

    assert result.successful[0].record_change is False


def test_failures_are_reported(
    tmp_path: Path, make_zip: MakeZip, page: bytes, archive_tool
) -> None:
    make_zip(tmp_path / "Good.zip", {"01.jpg": page})
    make_zip(tmp_path / "Bad.zip", {"01.jpg": b"garbage"})

    report = asyncio.run(convert_paths([tmp_path], _options(), archive_tool=archive_tool))

    assert report.failed
    assert [context.archive_path.name for context in report.conversion.unsuccessful] == [
        "Bad.zip"
    ]
    assert (tmp_path / "Good.cbz").exists()


def test_leftovers_are_moved_to_maintenance(
    tmp_path: Path, make_zip: MakeZip, page: bytes, archive_tool
) -> None:
    queue = tmp_path / "queue"
    maintenance = tmp_path / "maintenance"
    make_zip(queue / "Good.zip", {"01.jpg": page})
    make_zip(queue / "Series" / "Bad.zip", {"01.jpg": b"garbage"})

    report = asyncio.run(
        convert_paths(
            [queue],
            _options(maintenance_folder=maintenance),
            archive_tool=archive_tool,
        )
    )

    assert report.conversion.failed
    assert report.maintenance is not None
    assert not report.maintenance.unsuccessful
    assert sorted(path.name for path in queue.iterdir()) == ["Good.cbz"]
    [day_folder] = list(maintenance.iterdir())
    assert (day_folder / "Series" / "Bad.zip").exists()
    moved = {context.archive_path for context in report.maintenance.successful}
    assert day_folder / "Series" / "Bad.zip" in moved


def test_maintenance_is_opt_in(
    tmp_path: Path, make_zip: MakeZip, page: bytes, archive_tool
) -> None:
    make_zip(tmp_path / "Bad.zip", {"01.jpg": b"garbage"})

    report = asyncio.run(convert_paths([tmp_path], _options(), archive_tool=archive_tool))

    assert report.maintenance is None
    assert (tmp_path / "Bad.zip").exists()
