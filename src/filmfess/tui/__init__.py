"""FilmFess interactive TUI.

Provides a Textual-based terminal board for browsing anonymous confessions
by recipient or by movie and for sharing new ones.
"""

from __future__ import annotations

from pathlib import Path


def run_tui(config_path: Path | None = None) -> None:
    """Initialize services and launch the TUI application.

    Loads configuration, resolves the catalog API key, opens the record
    store and the search client, and runs the Textual app until it exits.
    All imports are deferred for fast module loading.

    Args:
        config_path: Optional JSON config file; defaults to
            ``config/filmfess.json``.
    """
    import asyncio

    from filmfess.config import get_tmdb_api_key, load_config
    from filmfess.controllers.board import Board
    from filmfess.exceptions import ConfigError
    from filmfess.oracle import TmdbSearchClient
    from filmfess.store import open_store
    from filmfess.telemetry import configure_file_logging, get_telemetry
    from filmfess.tui.app import FilmfessApp

    try:
        config = load_config(config_path)
        api_key = get_tmdb_api_key()
    except ConfigError as exc:
        print(f"Error: {exc}")
        raise SystemExit(1)

    log_file = configure_file_logging(config.log_dir)
    telemetry = get_telemetry()

    async def _main() -> None:
        async with TmdbSearchClient(api_key, language=config.tmdb_language) as oracle:
            async with open_store(config) as store:
                board = Board(
                    store,
                    oracle,
                    debounce_seconds=config.debounce_seconds,
                    telemetry=telemetry,
                )
                app = FilmfessApp(board, telemetry=telemetry)
                try:
                    await app.run_async()
                finally:
                    board.close()

    telemetry.log.info(f"tui starting log_file={log_file} backend={config.store_backend}")
    asyncio.run(_main())
