"""CLI entry point for FilmFess.

Provides commands:
  - tui: Launch the interactive confession board
  - movies: Search the movie catalog
  - feed: List published confessions, optionally by name or movie
  - share: Publish an anonymous confession
  - init-db: Create the local SQLite record store
  - config: Manage API keys in the system keyring
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import keyring
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from filmfess.config import (
    KEY_NAME,
    STORE_SERVICE_NAME,
    TMDB_SERVICE_NAME,
    FilmfessConfig,
    get_tmdb_api_key,
    load_config,
)
from filmfess.constants import POSTER_SIZE_THUMB
from filmfess.controllers.composer import CompositionController
from filmfess.controllers.feed import FeedController, FeedSnapshot
from filmfess.controllers.lookup import LookupController
from filmfess.exceptions import ConfigError
from filmfess.models import FeedMode, MovieCandidate, poster_url
from filmfess.oracle import TmdbSearchClient
from filmfess.store import SqliteConfessionStore, open_store

app = typer.Typer(
    help="FilmFess - anonymous confessions paired with the movies that capture how we feel",
    rich_markup_mode="rich",
)
console = Console()

# Config command group
config_app = typer.Typer(help="Manage configuration (API keys)")
app.add_typer(config_app, name="config")

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to FilmFess config JSON"),
]


def _load_config_or_exit(config_path: Path | None) -> FilmfessConfig:
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


def _tmdb_key_or_exit() -> str:
    try:
        return get_tmdb_api_key()
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


def _mask(api_key: str) -> str:
    if len(api_key) > 8:
        return api_key[:8] + "*" * (len(api_key) - 8)
    return api_key[:2] + "*" * max(1, len(api_key) - 2)


def _print_feed(snapshot: FeedSnapshot) -> None:
    if not snapshot.confessions:
        console.print(f"[yellow]No confessions yet.[/yellow] [dim]{snapshot.empty_hint}[/dim]")
        return
    if snapshot.has_filter:
        console.print(f"[dim]{snapshot.summary}[/dim]")
    for confession in snapshot.confessions:
        console.print(
            Panel(
                confession.message,
                title=f"[bold]To {confession.recipient}[/bold]",
                subtitle=f"[cyan]{confession.movie.title}[/cyan] · {confession.display_date}",
                border_style="magenta",
            )
        )


async def _first_movie(oracle: TmdbSearchClient, title: str) -> MovieCandidate | None:
    candidates = await oracle.search(title)
    return candidates[0] if candidates else None


@app.command()
def tui(config_path: ConfigOption = None) -> None:
    """Launch the interactive confession board."""
    from filmfess.tui import run_tui

    run_tui(config_path)


@app.command()
def movies(
    query: Annotated[str, typer.Argument(help="Movie title to search for")],
    config_path: ConfigOption = None,
) -> None:
    """Search the movie catalog and show the top matches."""
    config = _load_config_or_exit(config_path)
    api_key = _tmdb_key_or_exit()

    async def _search() -> list[MovieCandidate]:
        async with TmdbSearchClient(api_key, language=config.tmdb_language) as oracle:
            return await oracle.search(query)

    candidates = asyncio.run(_search())
    if not candidates:
        console.print(f"[yellow]No movies found for[/yellow] {query!r}")
        return

    table = Table(title=f"Movies matching {query!r}")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Year")
    table.add_column("Poster", style="dim")
    for candidate in candidates:
        table.add_row(
            str(candidate.id),
            candidate.title,
            candidate.display_year,
            poster_url(candidate.poster_path, POSTER_SIZE_THUMB) or "-",
        )
    console.print(table)


@app.command()
def feed(
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Show confessions whose recipient contains this text"),
    ] = None,
    movie: Annotated[
        str | None,
        typer.Option("--movie", "-m", help="Show confessions for the best catalog match of this title"),
    ] = None,
    config_path: ConfigOption = None,
) -> None:
    """List published confessions, newest first."""
    if name is not None and movie is not None:
        console.print("[red]Error:[/red] use either --name or --movie, not both")
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    # The catalog is only queried for --movie
    api_key = _tmdb_key_or_exit() if movie is not None else ""

    async def _list() -> FeedSnapshot | None:
        async with TmdbSearchClient(api_key, language=config.tmdb_language) as oracle:
            async with open_store(config) as store:
                controller = FeedController(store, LookupController(oracle, name="cli"))
                try:
                    if movie is None:
                        await controller.list(FeedMode.BY_RECIPIENT, name or "")
                        return controller.snapshot
                    chosen = await _first_movie(oracle, movie)
                    if chosen is None:
                        return None
                    console.print(f"[dim]Movie:[/dim] [bold]{chosen.title}[/bold] ({chosen.display_year})")
                    await controller.set_mode(FeedMode.BY_MOVIE)
                    await controller.select_movie(chosen)
                    return controller.snapshot
                finally:
                    controller.close()

    snapshot = asyncio.run(_list())
    if snapshot is None:
        console.print(f"[yellow]No movies found for[/yellow] {movie!r}")
        raise typer.Exit(code=1)
    _print_feed(snapshot)


@app.command()
def share(
    to: Annotated[str, typer.Option("--to", "-t", help="Who the confession is for")],
    message: Annotated[str, typer.Option("--message", "-m", help="The confession text")],
    movie: Annotated[str, typer.Option("--movie", help="Movie title; the best catalog match is used")],
    config_path: ConfigOption = None,
) -> None:
    """Publish an anonymous confession."""
    config = _load_config_or_exit(config_path)
    api_key = _tmdb_key_or_exit()

    async def _share() -> tuple[bool, str]:
        async with TmdbSearchClient(api_key, language=config.tmdb_language) as oracle:
            async with open_store(config) as store:
                composer = CompositionController(store, LookupController(oracle, name="cli"))
                try:
                    composer.set_recipient(to)
                    composer.set_message(message)
                    chosen = await _first_movie(oracle, movie)
                    if chosen is not None:
                        composer.select_movie(chosen)
                    record = await composer.submit()
                    snapshot = composer.snapshot
                    if record is not None:
                        return True, f"{snapshot.notice} [dim](movie: {record.movie.title})[/dim]"
                    return False, snapshot.validation_error or snapshot.submit_error or "Not shared"
                finally:
                    composer.close()

    ok, text = asyncio.run(_share())
    if not ok:
        console.print(f"[red]Error:[/red] {text}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] {text}")


@app.command("init-db")
def init_db(config_path: ConfigOption = None) -> None:
    """Create the local SQLite record store (safe to run repeatedly)."""
    config = _load_config_or_exit(config_path)
    if config.store_backend != "sqlite":
        console.print(
            f"[yellow]Store backend is {config.store_backend!r}; nothing to initialize.[/yellow]"
        )
        return

    async def _init() -> int:
        async with SqliteConfessionStore(str(config.db_path)) as store:
            return await store.count()

    total = asyncio.run(_init())
    console.print(
        f"[green]✓[/green] Database ready at [bold]{config.db_path}[/bold] "
        f"({total} confessions)"
    )


@config_app.command("set-tmdb-key")
def set_tmdb_key(
    key: Annotated[
        str,
        typer.Argument(help="TMDB API key to store in system keyring"),
    ],
) -> None:
    """Store the TMDB API key in the system keyring (service: filmfess-tmdb)."""
    if not key or key.strip() == "":
        console.print("[red]Error:[/red] API key cannot be empty")
        raise typer.Exit(code=1)

    try:
        keyring.set_password(TMDB_SERVICE_NAME, KEY_NAME, key)
        console.print(
            "[green]✓[/green] TMDB API key stored in system keyring "
            f"(service: {TMDB_SERVICE_NAME})"
        )
    except Exception as e:
        console.print(f"[red]Error:[/red] Failed to store API key: {e}")
        raise typer.Exit(code=1)


@config_app.command("get-tmdb-key")
def show_tmdb_key() -> None:
    """Display the stored TMDB API key (masked)."""
    api_key = keyring.get_password(TMDB_SERVICE_NAME, KEY_NAME)
    if not api_key:
        console.print(
            "[yellow]No TMDB API key found in keyring.[/yellow]\n"
            "Set it with: [bold]filmfess config set-tmdb-key YOUR_KEY[/bold]"
        )
        raise typer.Exit(code=1)

    console.print(f"[green]TMDB API key:[/green] {_mask(api_key)}")
    console.print(f"[dim](stored in service: {TMDB_SERVICE_NAME})[/dim]")


@config_app.command("remove-tmdb-key")
def remove_tmdb_key() -> None:
    """Delete the stored TMDB API key from the system keyring."""
    try:
        existing = keyring.get_password(TMDB_SERVICE_NAME, KEY_NAME)
        if not existing:
            console.print(
                "[yellow]Warning:[/yellow] No TMDB API key found in keyring.\n"
                "Nothing to remove."
            )
            return

        keyring.delete_password(TMDB_SERVICE_NAME, KEY_NAME)
        console.print(
            "[green]✓[/green] TMDB API key removed from system keyring "
            f"(service: {TMDB_SERVICE_NAME})"
        )
    except Exception as e:
        console.print(f"[red]Error:[/red] Failed to remove API key: {e}")
        raise typer.Exit(code=1)


@config_app.command("set-store-key")
def set_store_key(
    key: Annotated[
        str,
        typer.Argument(help="REST record store key to store in system keyring"),
    ],
) -> None:
    """Store the REST record store key in the system keyring (service: filmfess-store)."""
    if not key or key.strip() == "":
        console.print("[red]Error:[/red] API key cannot be empty")
        raise typer.Exit(code=1)

    try:
        keyring.set_password(STORE_SERVICE_NAME, KEY_NAME, key)
        console.print(
            "[green]✓[/green] Store key stored in system keyring "
            f"(service: {STORE_SERVICE_NAME})"
        )
    except Exception as e:
        console.print(f"[red]Error:[/red] Failed to store key: {e}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
