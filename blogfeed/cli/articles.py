"""Article store commands."""

import json
from pathlib import Path
from typing import Any, List, Optional

import typer
from dateutil.parser import isoparse
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import Config
from ..storage import ConfirmationRequiredError, FeedStore

console = Console()


def get_store(ctx: typer.Context) -> FeedStore:
    config: Config = ctx.obj if ctx.obj is not None else Config()
    return FeedStore(config.storage)


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


def _parse_date(value: Optional[str], option: str):
    if value is None:
        return None
    try:
        return isoparse(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid date: {value}", param_hint=option)


def _read_articles(path: Path) -> List[Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Invalid JSON in {path}: {e}[/red]")
        raise typer.Exit(1)

    if isinstance(data, dict):
        data = data.get("articles", [])
    if not isinstance(data, list):
        console.print("[red]Expected a list of articles or an object with an 'articles' list.[/red]")
        raise typer.Exit(1)
    return data


def save_command(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="JSON file with the articles to save"),
    auto: bool = typer.Option(False, "--auto", help="Mark articles as saved by the scheduler"),
) -> None:
    """Save articles from a JSON file, skipping known links."""
    articles = _read_articles(path)
    result = get_store(ctx).save(articles, saved_by="auto" if auto else "manual")

    console.print(
        f"[green]✅ Saved {result.saved} new articles[/green] "
        f"({result.duplicates} duplicates, {result.rejected} rejected, {result.total} total)"
    )


def list_command(
    ctx: typer.Context,
    category: Optional[str] = typer.Option(None, "--category", help="Category slug"),
    month: Optional[str] = typer.Option(None, "--month", help="Month to read (YYYY-MM)"),
    since: Optional[str] = typer.Option(None, "--since", help="Earliest save date"),
    until: Optional[str] = typer.Option(None, "--until", help="Latest save date"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum articles", min=1),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """List stored articles, newest first."""
    articles = get_store(ctx).query(
        category=category,
        since=_parse_date(since, "--since"),
        until=_parse_date(until, "--until"),
        month=month,
        limit=limit,
    )

    if as_json:
        _echo_json([a.to_document() for a in articles])
        return

    if not articles:
        console.print("[yellow]No articles found.[/yellow]")
        return

    table = Table(title=f"Articles ({len(articles)})")
    table.add_column("ID", style="dim")
    table.add_column("Saved", style="yellow")
    table.add_column("Category", style="magenta")
    table.add_column("Source", style="green")
    table.add_column("Title", style="cyan")

    for article in articles:
        table.add_row(
            article.id,
            article.saved_at.strftime("%Y-%m-%d %H:%M"),
            article.category,
            article.source,
            article.catchy_title or article.title,
        )

    console.print(table)


def stats_command(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of tables"),
) -> None:
    """Show store statistics."""
    stats = get_store(ctx).stats()

    if as_json:
        _echo_json(stats.to_document())
        return

    updated = stats.last_updated.isoformat() if stats.last_updated else "never"
    console.print(
        Panel.fit(
            f"Total articles: [bold]{stats.total_articles}[/bold]\n"
            f"This month: {stats.current_month_count}\n"
            f"Archived months: {len(stats.archives)}\n"
            f"Last updated: {updated}",
            title="Article Store",
            style="blue",
        )
    )

    for title, counts in (("By source", stats.by_source), ("By month", stats.by_month)):
        if not counts:
            continue
        table = Table(title=title)
        table.add_column("Key", style="cyan")
        table.add_column("Articles", style="green", justify="right")
        for key, count in sorted(counts.items(), key=lambda kv: kv[1], reverse=True):
            table.add_row(key, str(count))
        console.print(table)


def categories_command(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """List categories with their slugs."""
    categories = get_store(ctx).categories()

    if as_json:
        _echo_json([c.to_document() for c in categories])
        return

    if not categories:
        console.print("[yellow]No categories yet.[/yellow]")
        return

    table = Table(title="Categories")
    table.add_column("Name", style="cyan")
    table.add_column("Slug", style="magenta")
    table.add_column("Articles", style="green", justify="right")
    for category in categories:
        table.add_row(category.name, category.slug, str(category.count))
    console.print(table)


def months_command(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """List the current month and archived months."""
    months = get_store(ctx).available_months()

    if as_json:
        _echo_json([m.to_document() for m in months])
        return

    if not months:
        console.print("[yellow]No articles stored.[/yellow]")
        return

    table = Table(title="Months")
    table.add_column("Month", style="cyan")
    table.add_column("Articles", style="green", justify="right")
    table.add_column("Archived", style="yellow")
    table.add_column("Weeks", style="dim", justify="right")
    for month in months:
        table.add_row(
            month.month,
            str(month.article_count),
            "✓" if month.is_archived else "✗",
            str(month.weeks) if month.weeks is not None else "-",
        )
    console.print(table)


def archive_command(ctx: typer.Context) -> None:
    """Archive last month's articles into weekly documents."""
    result = get_store(ctx).archive_previous_month()

    if result is None:
        console.print("[yellow]Nothing to archive for the previous month.[/yellow]")
        return

    console.print(
        f"[green]✅ Archived {result.archived_count} articles of {result.month} "
        f"into {len(result.weeks)} week documents[/green]"
    )


def delete_command(
    ctx: typer.Context,
    article_id: str = typer.Argument(..., help="ID of a current-month article"),
) -> None:
    """Delete one article of the current month."""
    if not get_store(ctx).delete(article_id):
        console.print(f"[red]Article '{article_id}' not found in the current month.[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Deleted article: {article_id}[/green]")


def clear_command(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", help="Confirm deletion of every article"),
) -> None:
    """Delete every stored article, archives included."""
    try:
        get_store(ctx).clear(confirm=yes)
    except ConfirmationRequiredError:
        console.print("[red]Refusing to clear the store without --yes.[/red]")
        raise typer.Exit(1)

    console.print("[green]✅ Article store cleared[/green]")
