"""Main CLI application."""

import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

# Load .env file if it exists
load_dotenv()

from ..config import Config
from .articles import (
    archive_command,
    categories_command,
    clear_command,
    delete_command,
    list_command,
    months_command,
    save_command,
    stats_command,
)
from .init import init_command

err_console = Console(stderr=True)

app = typer.Typer(
    name="blogfeed",
    help="Blog feed article store - save, query and archive curated articles",
    no_args_is_help=True,
)


def setup_logging(level: str) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (default: ~/.config/blogfeed/config.yaml)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Blog feed article store."""
    config = Config(config_path)
    try:
        level = "DEBUG" if verbose else config.log_level
    except ValueError as e:
        err_console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)
    setup_logging(level)
    ctx.obj = config


# Register commands
app.command("init")(init_command)
app.command("save")(save_command)
app.command("list")(list_command)
app.command("stats")(stats_command)
app.command("categories")(categories_command)
app.command("months")(months_command)
app.command("archive")(archive_command)
app.command("delete")(delete_command)
app.command("clear")(clear_command)


if __name__ == "__main__":
    app()
