"""Unit tests for archive command wrappers and their registry."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from comic_eater.errors import ComicEaterError, ExternalToolError
from comic_eater.tools import ArchiveCommand, ToolRegistry, create_default_registry
from comic_eater.tools import builtins
from comic_eater.tools.builtins import SevenZipCommand, UnrarCommand, run_command
from comic_eater.types import ToolKind


def test_default_registry_prefers_7z_then_unrar() -> None:
    registry = create_default_registry()
    assert registry.kinds() == [ToolKind.SEVEN_ZIP, ToolKind.UNRAR]
    assert all(isinstance(tool, ArchiveCommand) for tool in registry.ordered())


def test_register_requires_tool_kind() -> None:
    class _NoKind:
        kind = "7z"

    with pytest.raises(ComicEaterError, match="must declare a ToolKind"):
        ToolRegistry().register(_NoKind())  # type: ignore[arg-type]


def test_get_unregistered_tool_raises() -> None:
    registry = ToolRegistry()
    registry.register(SevenZipCommand())
    with pytest.raises(ComicEaterError, match="'unrar' is not registered"):
        registry.get(ToolKind.UNRAR)


def test_seven_zip_commands(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls: list[tuple[str, ...]] = []

    async def fake_run(*command: str) -> str:
        calls.append(command)
        return ""

    monkeypatch.setattr(builtins, "run_command", fake_run)
    tool = SevenZipCommand()
    archive = tmp_path / "a.7z"

    asyncio.run(tool.test(archive))
    result = asyncio.run(tool.extract(archive, tmp_path / "a"))

    assert calls == [
        ("7z", "t", str(archive)),
        ("7z", "x", str(archive), "-aos", f"-o{tmp_path / 'a'}"),
    ]
    assert result == tmp_path / "a"


def test_unrar_extract_creates_destination(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls: list[tuple[str, ...]] = []

    async def fake_run(*command: str) -> str:
        calls.append(command)
        return ""

    monkeypatch.setattr(builtins, "run_command", fake_run)
    dest = tmp_path / "out"

    asyncio.run(UnrarCommand().extract(tmp_path / "a.rar", dest))

    assert dest.is_dir()
    assert calls == [("unrar", "x", "-o-", str(tmp_path / "a.rar"), f"{dest}/")]


def test_unrar_invocations_never_overlap(monkeypatch: pytest.MonkeyPatch) -> None:
    """The unrar limiter serializes calls even when tests run concurrently."""
    active = 0
    peak = 0

    async def fake_run(*command: str) -> str:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        active -= 1
        return ""

    monkeypatch.setattr(builtins, "run_command", fake_run)
    tool = UnrarCommand()

    async def _many() -> None:
        await asyncio.gather(*(tool.test(Path(f"{index}.rar")) for index in range(4)))

    asyncio.run(_many())
    assert peak == 1


def test_run_command_returns_output() -> None:
    output = asyncio.run(run_command(sys.executable, "-c", "print('hello')"))
    assert output.strip() == "hello"


def test_run_command_nonzero_exit_raises() -> None:
    with pytest.raises(ExternalToolError) as excinfo:
        asyncio.run(
            run_command(sys.executable, "-c", "import sys; print('damaged'); sys.exit(3)")
        )
    assert excinfo.value.returncode == 3
    assert "damaged" in excinfo.value.output


def test_run_command_missing_binary_raises() -> None:
    with pytest.raises(ExternalToolError) as excinfo:
        asyncio.run(run_command("definitely-not-an-archive-tool-binary"))
    assert excinfo.value.returncode is None
