"""Typer CLI: rotate and history commands."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .api import configure
from .compression.registry import get_codec
from .config.schema import RotationSettings
from .core.errors import ConfigurationError, RotationFailed
from .core.generations import GenerationProcessor
from .core.rotation import Rotation
from .core.validation import validate_rotation

app = typer.Typer(
    name="cyclelog",
    help="Rotate growing log files into a numbered, optionally compressed history.",
    no_args_is_help=True,
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"cyclelog v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version.", callback=_version_callback, is_eager=True
    ),
) -> None:
    """cyclelog - numbered log rotation."""


def _apply_options(
    settings: RotationSettings,
    *,
    files: Optional[int],
    compress: Optional[bool],
    level: Optional[int],
    codec: Optional[str],
    truncate: Optional[bool],
    min_size: Optional[str],
) -> RotationSettings:
    overrides: dict = {}
    if files is not None:
        overrides["files"] = files
    if truncate is not None:
        overrides["truncate"] = truncate
    if min_size is not None:
        overrides["min_size"] = min_size
    compress_overrides: dict = {}
    if compress is not None:
        compress_overrides["enabled"] = compress
    if level is not None:
        compress_overrides["level"] = level
    if codec is not None:
        compress_overrides["codec"] = codec
    if compress_overrides:
        overrides["compress"] = compress_overrides
    return settings.merged(overrides)


@app.command()
def rotate(
    paths: Optional[List[Path]] = typer.Argument(None, help="Log files to rotate (default: configured targets)"),
    files: Optional[int] = typer.Option(None, "--files", "-n", help="Generations to keep"),
    compress: Optional[bool] = typer.Option(None, "--compress/--no-compress", help="Compress archived files"),
    level: Optional[int] = typer.Option(None, "--level", help="Compression level"),
    codec: Optional[str] = typer.Option(None, "--codec", help="Compression codec (gzip, bz2, xz)"),
    truncate: Optional[bool] = typer.Option(None, "--truncate/--move", help="Copy and truncate instead of moving"),
    min_size: Optional[str] = typer.Option(None, "--min-size", help="Only rotate files larger than this (e.g. 10M)"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level for rotation events"),
) -> None:
    """Rotate log files once."""

    overrides = {"logging": {"level": log_level}} if log_level else {}
    try:
        config = configure(overrides, config_file=config_file)
    except (ConfigurationError, ValueError) as exc:
        console.print(f"[red]Config error: {exc}[/red]")
        raise typer.Exit(2)

    targets = list(paths) if paths else [target.path for target in config.targets]
    if not targets:
        console.print("[yellow]No files given and no targets configured.[/yellow]")
        raise typer.Exit(2)

    table = Table(title="Rotation")
    table.add_column("File", style="cyan")
    table.add_column("Result", no_wrap=True)
    table.add_column("Archived")

    failures = 0
    for target in targets:
        try:
            settings = _apply_options(
                config.settings_for(target),
                files=files,
                compress=compress,
                level=level,
                codec=codec,
                truncate=truncate,
                min_size=min_size,
            )
            validate_rotation(settings)
        except (ConfigurationError, ValueError) as exc:
            console.print(f"[red]Config error: {exc}[/red]")
            raise typer.Exit(2)

        errors: List[RotationFailed] = []
        rotation = Rotation.from_settings(settings).on_failure(errors.append)
        if rotation.rotate(target):
            table.add_row(str(target), "[green]rotated[/green]", rotation.archived_filename() or "")
        elif errors:
            failures += 1
            table.add_row(str(target), f"[red]failed ({errors[0].code})[/red]", escape(errors[0].message))
        else:
            table.add_row(str(target), "[dim]skipped[/dim]", "")

    console.print(table)
    if failures:
        raise typer.Exit(1)


@app.command()
def history(
    path: Path = typer.Argument(..., help="Base log file"),
    codec: Optional[str] = typer.Option(None, "--codec", help="Also list generations with this codec's suffix"),
) -> None:
    """List the archived generations of a log file."""

    processor = GenerationProcessor(path)
    if codec:
        try:
            processor.add_extension(get_codec(codec).extension)
        except ConfigurationError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(2)

    generations = processor.existing()
    if not generations:
        console.print(f"No generations of [cyan]{path}[/cyan]")
        return

    table = Table(title=f"History of {path}")
    table.add_column("#", justify="right")
    table.add_column("File", style="cyan")
    table.add_column("Bytes", justify="right")
    for number in sorted(generations):
        for generation in generations[number]:
            table.add_row(str(number), generation.path.name, str(generation.path.stat().st_size))
    console.print(table)
