"""
ps3batch CLI - create RPCS3 batch launchers for a PS3 game library.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .common.exceptions import ConfigurationError, Ps3BatchError, format_exception_chain
from .common.sanitize import sanitize_filename
from .common.types import ProcessResult
from .common.validation import validate_file_extension, validate_path_exists
from .config import BATCH_LOGGER, PARAM_SFO
from .core.config_manager import ConfigManager
from .core.orchestrator import Orchestrator
from .logging_cfg import configure_logging, get_logger
from .ps3.metadata import get_metadata, load_document
from .ps3.scanner import GameFolderKind

app = typer.Typer(
    help="Create .bat launchers that start RPCS3 headless on each PS3 game.",
    rich_markup_mode="rich",
    add_completion=False,
)
console = Console()

_state: dict = {"config_file": None, "level": logging.INFO}


class KindChoice(str, enum.Enum):
    all = "all"
    disc = "disc"
    hdd = "hdd"


@app.callback()
def global_options(
    log_format: str = typer.Option("auto", "--log-format", help="auto, json or human."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug output."),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Settings file (JSON)."),
):
    _state["config_file"] = config_file
    _state["level"] = logging.DEBUG if verbose else logging.INFO
    if log_format == "auto":
        log_format = ConfigManager(config_file).get("log_format", "auto")
    configure_logging(log_format, level=logging.DEBUG if verbose else logging.WARNING)


def _print_banner():
    console.print(Panel.fit(
        "[bold cyan]ps3batch[/bold cyan]\n"
        "[dim]PARAM.SFO titles -> RPCS3 --no-gui launchers[/dim]",
        border_style="blue"
    ))


def _saved_kind(settings: ConfigManager) -> KindChoice:
    saved = settings.get("kind", "all")
    try:
        return KindChoice(saved)
    except ValueError:
        raise ConfigurationError(
            f"Unknown kind {saved!r} in {settings.config_path}",
            {"allowed": ", ".join(k.value for k in KindChoice)},
        ) from None


def _summary_table(result: ProcessResult) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    table.add_row("Folders scanned", str(result.folders_scanned))
    table.add_row("Scripts created", str(result.files_created))
    table.add_row("Skipped", str(result.skipped))
    table.add_row("Failed", str(result.failed))
    table.add_row("Bad SFO entries", str(result.entry_errors))
    return table


@app.command("create")
def cmd_create(
    rpcs3: Optional[Path] = typer.Option(None, "--rpcs3", help="Path to rpcs3.exe."),
    games: Optional[Path] = typer.Option(None, "--games", help="Folder holding the game folders."),
    output: Optional[Path] = typer.Option(None, "--output", help="Where to write the .bat files (default: games folder)."),
    kind: Optional[KindChoice] = typer.Option(None, "--kind", help="all: dev_hdd0/game + disc folder; disc or hdd: only the games folder."),
    save: bool = typer.Option(False, "--save", help="Remember these paths for the next run."),
):
    """
    [bold green]Create batch launchers[/bold green]

    Scans the games folder (and RPCS3's dev_hdd0/game) and writes one
    [bold]<Title>.bat[/bold] per game.
    """
    settings = ConfigManager(_state["config_file"])
    rpcs3 = rpcs3 or settings.get_path("rpcs3_path")
    games = games or settings.get_path("games_dir")
    output = output or settings.get_path("output_dir")

    _print_banner()
    orch = Orchestrator(logger=get_logger(BATCH_LOGGER, level=_state["level"], propagate=False))
    try:
        kind = kind or _saved_kind(settings)
        if kind is KindChoice.all:
            result = orch.create_batch_files(rpcs3, games, output)
        else:
            result = orch.process_root(rpcs3, games, GameFolderKind(kind.value), output)
    except Ps3BatchError as e:
        console.print(f"[bold red]✘[/bold red] {escape(format_exception_chain(e))}")
        raise typer.Exit(code=1)

    console.print(_summary_table(result))
    console.print(f"[dim]{escape(str(result))}[/dim]")

    if save:
        settings.set("rpcs3_path", rpcs3)
        settings.set("games_dir", games)
        settings.set("output_dir", output or "")
        settings.set("kind", kind.value)
        if settings.save():
            console.print(f"[dim]Settings saved to {settings.config_path}[/dim]")
        else:
            console.print(f"[yellow]Could not save settings to {settings.config_path}[/yellow]")


@app.command("inspect")
def cmd_inspect(
    path: Path = typer.Argument(..., help="A PARAM.SFO file or a game folder."),
):
    """
    [bold magenta]Show PARAM.SFO contents[/bold magenta]
    """
    try:
        path = validate_path_exists(path, "path")
        if path.is_file():
            validate_file_extension(path, {Path(PARAM_SFO).suffix})
        doc = load_document(path)
    except Ps3BatchError as e:
        console.print(f"[bold red]✘[/bold red] {escape(format_exception_chain(e))}")
        raise typer.Exit(code=1)

    if doc is None:
        console.print(f"[bold red]✘[/bold red] No {PARAM_SFO} found in {path}")
        raise typer.Exit(code=1)

    table = Table(title=str(path), show_header=True, header_style="bold cyan")
    table.add_column("Key", style="dim")
    table.add_column("Value")
    for key, value in doc.items():
        table.add_row(key, escape(value))
    console.print(table)

    meta = get_metadata(doc)
    if meta.get("title"):
        console.print(f"Launcher name: [bold]{escape(sanitize_filename(meta['title']))}[/bold]")
    for err in doc.skipped:
        console.print(f"[yellow]{escape(str(err))}[/yellow]")


@app.command("sanitize")
def cmd_sanitize(
    names: List[str] = typer.Argument(..., help="Raw titles."),
):
    """
    [bold blue]Preview sanitized names[/bold blue]
    """
    for name in names:
        console.print(sanitize_filename(name), markup=False, highlight=False)


def main():
    app()


if __name__ == "__main__":
    main()
