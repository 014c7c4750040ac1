"""Shared pytest configuration, marker assignment and archive fakes."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Callable, Mapping
from pathlib import Path

import pytest
from PIL import Image

from comic_eater.adapters.archive_tools import zip_directory
from comic_eater.errors import ValidationError
from comic_eater.types import ToolKind

ZipEntries = Mapping[str, bytes]


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


def _page_bytes(color: str = "white") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 12), color).save(buffer, format="PNG")
    return buffer.getvalue()


def _zip_bytes(entries: ZipEntries) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


class FakeArchiveTool:
    """``ArchiveTool`` backed by :mod:`zipfile`, whatever the file suffix."""

    def __init__(self) -> None:
        self.tested: list[Path] = []
        self.extracted: list[Path] = []

    async def test_integrity(self, archive_path: Path) -> ToolKind:
        self.tested.append(archive_path)
        if not zipfile.is_zipfile(archive_path):
            raise ValidationError(f'Failed archive validation for "{archive_path}"')
        with zipfile.ZipFile(archive_path) as archive:
            if archive.testzip() is not None:
                raise ValidationError(f'Failed archive validation for "{archive_path}"')
        return ToolKind.SEVEN_ZIP

    async def extract(
        self,
        archive_path: Path,
        dest_dir: Path,
        tool: ToolKind = ToolKind.SEVEN_ZIP,
    ) -> Path:
        del tool
        self.extracted.append(archive_path)
        dest_dir.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive_path) as archive:
            archive.extractall(dest_dir)
        return dest_dir

    async def compress(self, source_dir: Path, dest_path: Path) -> Path:
        return zip_directory(source_dir, dest_path)


@pytest.fixture
def page() -> bytes:
    """Bytes of a small valid PNG page."""
    return _page_bytes()


@pytest.fixture
def zip_bytes() -> Callable[[ZipEntries], bytes]:
    """Factory building in-memory zip archives."""
    return _zip_bytes


@pytest.fixture
def make_zip() -> Callable[[Path, ZipEntries], Path]:
    """Factory writing a zip archive (under any suffix) to disk."""

    def _make(path: Path, entries: ZipEntries) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(_zip_bytes(entries))
        return path

    return _make


@pytest.fixture
def write_pages() -> Callable[..., list[Path]]:
    """Factory writing valid page images into a directory."""

    def _write(directory: Path, *names: str) -> list[Path]:
        directory.mkdir(parents=True, exist_ok=True)
        written = []
        for name in names:
            path = directory / name
            path.write_bytes(_page_bytes())
            written.append(path)
        return written

    return _write


@pytest.fixture
def archive_tool() -> FakeArchiveTool:
    return FakeArchiveTool()


@pytest.fixture
def archive_tool_class() -> type[FakeArchiveTool]:
    return FakeArchiveTool
