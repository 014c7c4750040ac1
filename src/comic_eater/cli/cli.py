#!/usr/bin/env python3
"""
comic_eater.cli.app

Typer-based CLI for converting comic archives and image folders into
canonical ``.cbz`` packages.

Examples
--------
Convert everything in a queue folder:

    comic-eater convert ~/comics/queue

Convert two archives with a config file and four workers:

    comic-eater convert a.cbr b.7z --config comic-eater.yaml --concurrency 4
"""

from __future__ import annotations

import logging
import shutil
import sys
import traceback
from pathlib import Path

import typer

from comic_eater.application.results import ConversionReport
from comic_eater.errors import ComicEaterError
from comic_eater.types import ToolKind

app = typer.Typer(
    name="comic-eater",
    help="Convert comic archives and image folders into CBZ packages.",
    no_args_is_help=True,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
CONFIG_HELP = "YAML config file."


def _configure_logging(verbosity: int) -> None:
    """Install a stderr handler at a level derived from ``-v`` count."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("comic_eater").setLevel(level)


def _print_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error.

    Parameters
    ----------
    exc : Exception
        Exception raised by the command.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _print_report(report: ConversionReport) -> None:
    conversion = report.conversion
    for context in conversion.successful:
        typer.echo(f"✓ {context.archive_path}")
    for context in conversion.unsuccessful:
        typer.echo(f"✗ {context.archive_path}: {context.error}", err=True)
    if report.metadata is not None:
        for context in report.metadata.unsuccessful:
            typer.echo(
                f"✗ Metadata for {context.archive_path}: {context.error}", err=True
            )
    if report.maintenance is not None:
        for context in report.maintenance.unsuccessful:
            typer.echo(
                f"✗ Could not move {context.archive_path} to maintenance: {context.error}",
                err=True,
            )
        if report.maintenance.successful:
            typer.echo(
                f"Moved {len(report.maintenance.successful)} leftover files to maintenance"
            )
    typer.echo(
        f"Converted {len(conversion.successful)}/{conversion.total}"
        + (f", removed {report.removed_dirs} empty folders" if report.removed_dirs else "")
    )


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Increase log output (repeatable)."
    ),
) -> None:
    """Initialize shared CLI state.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug error output.
    verbose : int, default=0
        ``-v`` for info logs, ``-vv`` for debug logs.
    """
    _configure_logging(verbose)
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    paths: list[Path] | None = typer.Argument(
        None,
        exists=True,
        help="Archives, image folders or queue folders. Defaults to configured queue_folders.",
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", exists=True, dir_okay=False, help=CONFIG_HELP
    ),
    concurrency: int | None = typer.Option(
        None, "--concurrency", min=1, help="Number of archives converted at once."
    ),
    no_metadata: bool = typer.Option(
        False, "--no-metadata", help="Do not record conversion history in packages."
    ),
    renormalize: bool = typer.Option(
        False,
        "--renormalize",
        help="Repackage existing .cbz inputs instead of skipping them.",
    ),
    maintenance_folder: Path | None = typer.Option(
        None,
        "--maintenance-folder",
        file_okay=False,
        help="Move files left in queue folders here, under a dated subfolder.",
    ),
) -> None:
    """Convert archives and image folders into packages."""
    debug: bool = bool(ctx.obj.get("debug", False))

    try:
        from comic_eater.api import convert

        report = convert(
            paths or [],
            config,
            concurrency=concurrency,
            write_metadata=False if no_metadata else None,
            renormalize_packages=True if renormalize else None,
            maintenance_folder=maintenance_folder,
        )
    except ComicEaterError as exc:
        raise typer.Exit(code=_print_error(exc, debug))
    except Exception as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    _print_report(report)
    if report.failed:
        raise typer.Exit(code=1)


@app.command("discover")
def discover_cmd(
    ctx: typer.Context,
    queue: Path = typer.Argument(..., exists=True, help="Queue folder or archive."),
    config: Path | None = typer.Option(
        None, "--config", "-c", exists=True, dir_okay=False, help=CONFIG_HELP
    ),
) -> None:
    """List the inputs a conversion would process."""
    debug: bool = bool(ctx.obj.get("debug", False))

    try:
        from comic_eater.api import discover

        inputs = discover(queue, config)
    except ComicEaterError as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    for context in inputs:
        kind = "folder" if context.volume_start_path is not None else "archive"
        typer.echo(f"{kind}\t{context.archive_path}")


@app.command("doctor")
def doctor_cmd() -> None:
    """Print the archive tools and libraries conversion relies on."""
    import importlib.metadata as metadata

    typer.echo(f"Python: {sys.version.split()[0]}")
    for tool in ToolKind:
        location = shutil.which(tool.value)
        typer.echo(f"{tool.value}: {location or '<not found>'}")
    for module in ("Pillow", "pydantic", "PyYAML", "typer"):
        try:
            typer.echo(f"{module}: {metadata.version(module)}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{module}: <not installed>")

    if shutil.which(ToolKind.SEVEN_ZIP.value) is None:
        typer.echo("Note: 7z is required for extraction and archive testing.")


if __name__ == "__main__":
    app()
