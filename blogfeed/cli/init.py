"""Init command implementation."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import Config, ConfigModel, StorageConfig, save_config
from ..storage import FeedStore, StorageError

console = Console()


def init_command(
    ctx: typer.Context,
    data_dir: Path = typer.Option(
        Path.home() / "blogfeed-data",
        "--data-dir",
        "-d",
        help="Directory holding the article store",
    ),
    log_level: str = typer.Option("INFO", "--log-level", help="Default log level"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
) -> None:
    """Write a configuration file and initialise the article store."""
    config: Optional[Config] = ctx.obj
    config_path = config.config_path if config is not None else Config().config_path
    console.print(Panel.fit("📰 Blog Feed Store - Initialization", style="bold blue"))

    if config_path.exists() and not force:
        console.print(f"[red]Config already exists: {config_path} (use --force to overwrite)[/red]")
        raise typer.Exit(1)

    try:
        model = ConfigModel(
            storage=StorageConfig(data_dir=str(data_dir)),
            logging={"level": log_level},
        )
    except ValueError as e:
        console.print(f"[red]❌ Invalid configuration: {e}[/red]")
        raise typer.Exit(1)

    save_config(model, config_path)
    console.print(f"✅ Created config: {config_path}")

    try:
        FeedStore(model.storage).initialize()
    except (OSError, StorageError) as e:
        console.print(f"[red]❌ Failed to initialise the store: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"✅ Store ready: {model.storage.data_path}")
    console.print(
        Panel(
            f"[green]✅ Blog feed store initialized![/green]\n\n"
            f"Configuration: {config_path}\n"
            f"Data directory: {model.storage.data_path}\n\n"
            f"Next steps:\n"
            f"1. Save articles: [bold]blogfeed save articles.json[/bold]\n"
            f"2. Schedule monthly: [bold]blogfeed archive[/bold]",
            style="green",
        )
    )
