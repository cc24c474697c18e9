"""Command palette provider for the FilmFess TUI."""

from __future__ import annotations

from functools import partial

from textual.command import Hit, Hits, Provider


class FilmfessCommands(Provider):
    """Expose the main board actions as fuzzy-searchable commands (Ctrl+P)."""

    COMMANDS: dict[str, str] = {
        "Browse Confessions": "show_browse",
        "Share Yours": "show_create",
        "Search by Name": "mode_recipient",
        "Search by Movie": "mode_movie",
        "Refresh Feed": "refresh_feed",
        "Clear Filter": "clear_filter",
        "Share Anonymously": "submit",
    }

    async def search(self, query: str) -> Hits:
        matcher = self.matcher(query)
        for name, action in self.COMMANDS.items():
            score = matcher.match(name)
            if score > 0:
                yield Hit(
                    score,
                    matcher.highlight(name),
                    partial(self.app.run_action, action),
                )
