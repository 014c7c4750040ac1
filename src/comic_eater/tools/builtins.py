"""Built-in archive command wrappers."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from comic_eater.errors import ExternalToolError
from comic_eater.types import ToolKind

logger = logging.getLogger(__name__)


async def run_command(*command: str) -> str:
    """Run ``command`` and return its combined output.

    Raises
    ------
    ExternalToolError
        If the binary is missing or exits non-zero.
    """
    logger.debug('Running command: "%s"', " ".join(command))
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except FileNotFoundError as exc:
        raise ExternalToolError(command, None, str(exc)) from exc
    stdout, _ = await process.communicate()
    output = stdout.decode(errors="replace")
    if process.returncode != 0:
        raise ExternalToolError(command, process.returncode, output)
    return output


class SevenZipCommand:
    """General-purpose ``7z`` wrapper."""

    kind = ToolKind.SEVEN_ZIP

    def __init__(self, binary: str = "7z") -> None:
        self.binary = binary

    async def test(self, archive_path: Path) -> None:
        await run_command(self.binary, "t", str(archive_path))

    async def extract(self, archive_path: Path, dest_dir: Path) -> Path:
        # -aos: skip files that already exist at the destination
        await run_command(
            self.binary, "x", str(archive_path), "-aos", f"-o{dest_dir}"
        )
        return dest_dir


class UnrarCommand:
    """Legacy RAR wrapper.

    ``unrar`` does not tolerate concurrent invocation, so every call goes
    through a single-slot limiter regardless of the saga concurrency.
    """

    kind = ToolKind.UNRAR

    def __init__(self, binary: str = "unrar") -> None:
        self.binary = binary
        self._limiter: asyncio.Semaphore | None = None

    @property
    def limiter(self) -> asyncio.Semaphore:
        if self._limiter is None:
            self._limiter = asyncio.Semaphore(1)
        return self._limiter

    async def test(self, archive_path: Path) -> None:
        async with self.limiter:
            await run_command(self.binary, "t", str(archive_path))

    async def extract(self, archive_path: Path, dest_dir: Path) -> Path:
        dest_dir.mkdir(parents=True, exist_ok=True)
        async with self.limiter:
            # -o-: never overwrite existing files
            await run_command(
                self.binary, "x", "-o-", str(archive_path), f"{dest_dir}/"
            )
        return dest_dir
