"""Click CLI for cardgen — serve the API, build cards, manage the cache."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from cardgen import __version__
from cardgen.config.schema import load_settings

console = Console()
error_console = Console(stderr=True)

_VERBOSITY_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _setup_logging(verbosity: int) -> None:
    """Send log records to stderr through rich; -v is INFO, -vv and up DEBUG."""
    logging.basicConfig(
        level=_VERBOSITY_LEVELS.get(verbosity, logging.DEBUG),
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


@click.group()
@click.version_option(version=__version__, prog_name="cardgen")
def cli() -> None:
    """cardgen — trading-card generator for NFT characters."""


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address.")
@click.option("--port", type=int, default=None, help="Bind port.")
@click.option("--reload", is_flag=True, default=False, help="Reload on code changes.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def serve(host: str | None, port: int | None, reload: bool, verbose: int) -> None:
    """Run the HTTP API."""
    import uvicorn
    from dotenv import load_dotenv

    load_dotenv()
    settings = load_settings(host=host, port=port)
    _setup_logging(verbose or _verbosity_for(settings.log_level))

    uvicorn.run(
        "cardgen.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
@click.argument("token_id")
@click.option("--no-art", is_flag=True, default=False, help="Skip full-body art generation.")
@click.option("--cache-dir", type=click.Path(), default=None, help="Cache directory.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def card(token_id: str, no_art: bool, cache_dir: str | None, verbose: int) -> None:
    """Build the card for TOKEN_ID and print it."""
    _setup_logging(verbose)

    from cardgen.errors.exceptions import CardGenError
    from cardgen.service import CardService

    service = CardService(load_settings(cache_dir=cache_dir))

    async def _run():
        try:
            result = await service.get_card(token_id)
            if not no_art and result.fullArtProcessing:
                art = await service.generate_art(token_id, result.description, result.nftImage)
                result.fullArtUrl = art.url
                result.allImageUrls = art.allImageUrls
                result.fullArtProcessing = False
            return result
        finally:
            await service.close()

    try:
        result = asyncio.run(_run())
    except CardGenError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    details = result.cardDetails
    table = Table(title=f"{details.cardName} (#{token_id})", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Type", details.typeIcon)
    table.add_row("HP", details.hp)
    table.add_row("Move", f"{details.move.name} ({details.move.atk})")
    if details.moveDescription:
        table.add_row("Move description", details.moveDescription)
    table.add_row("Weakness", details.weakness)
    table.add_row("Resistance", details.resistance)
    table.add_row("Retreat cost", details.retreatCost)
    table.add_row("Rarity", details.rarity)
    table.add_row("Color", result.cardColor)
    table.add_row("NFT image", result.nftImage)
    table.add_row("Full art", result.fullArtUrl or "[yellow]not generated[/yellow]")
    console.print(table)
    console.print(result.description)


@cli.command("check-task")
@click.argument("task_id")
def check_task(task_id: str) -> None:
    """Show the upstream status of an art generation task."""
    from cardgen.clients.goapi import GoAPIClient
    from cardgen.errors.exceptions import CardGenError

    settings = load_settings()
    client = GoAPIClient(api_key=settings.goapi_api_key, base_url=settings.goapi_base_url)

    async def _run():
        try:
            return await client.check_task(task_id)
        finally:
            await client.close()

    try:
        status = asyncio.run(_run())
    except CardGenError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    table = Table(title=f"Task {task_id}", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in status.items():
        if value is None:
            continue
        table.add_row(key, ", ".join(value) if isinstance(value, list) else str(value))
    console.print(table)


@cli.group()
def cache() -> None:
    """Cache management commands."""


@cache.command("stats")
@click.option("--cache-dir", type=click.Path(), default=None, help="Cache directory.")
def cache_stats(cache_dir: str | None) -> None:
    """Show cache statistics."""
    from cardgen.cache.manager import CacheManager

    mgr = CacheManager(cache_dir or load_settings().cache_dir)
    mgr.load()

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Category", style="cyan")
    table.add_column("Entries")
    table.add_column("File")

    stats = mgr.stats()
    for name, category in stats.categories.items():
        table.add_row(name, str(category.entries), str(mgr.category(name).path))
    table.add_row("total", str(stats.entries), str(mgr.cache_dir))

    console.print(table)


@cache.command("clear")
@click.option("--cache-dir", type=click.Path(), default=None, help="Cache directory.")
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
def cache_clear(cache_dir: str | None) -> None:
    """Clear all cached data."""
    from cardgen.cache.manager import CacheManager
    from cardgen.errors.exceptions import CacheWriteError

    mgr = CacheManager(cache_dir or load_settings().cache_dir)
    try:
        mgr.clear()
    except CacheWriteError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    console.print("[green]Cache cleared.[/green]")


def _verbosity_for(level: str) -> int:
    return {"DEBUG": 2, "INFO": 1}.get(level.upper(), 0)


def main() -> None:
    """Entry point for the CLI."""
    cli()
