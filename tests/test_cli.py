"""Tests for the typer CLI.

The catalog client is replaced with the in-memory catalog and the record
store is a temporary SQLite file selected through ``--config``.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from filmfess import cli
from filmfess.exceptions import ConfigError

from conftest import FakeOracle

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "filmfess.json"
    path.write_text(json.dumps({"db_path": str(tmp_path / "board.db"), "log_dir": str(tmp_path / "logs")}))
    return path


@pytest.fixture
def catalog(monkeypatch, oracle: FakeOracle) -> FakeOracle:
    """Route the CLI's catalog client to the in-memory catalog."""

    class _CatalogClient:
        def __init__(self, api_key: str, **kwargs) -> None:
            self.api_key = api_key

        async def search(self, query: str):
            return await oracle.search(query)

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info) -> None:
            return None

    monkeypatch.setattr(cli, "TmdbSearchClient", _CatalogClient)
    monkeypatch.setattr(cli, "get_tmdb_api_key", lambda: "test-key")
    return oracle


def _share(config_file: Path, to: str, message: str, movie: str):
    return runner.invoke(
        cli.app,
        ["share", "--to", to, "--message", message, "--movie", movie, "--config", str(config_file)],
    )


class TestInitDb:
    def test_creates_database(self, config_file, tmp_path):
        result = runner.invoke(cli.app, ["init-db", "--config", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "Database ready" in result.output
        assert (tmp_path / "board.db").exists()

    def test_rest_backend_has_nothing_to_create(self, tmp_path):
        path = tmp_path / "rest.json"
        path.write_text(json.dumps({"store_backend": "rest", "rest_url": "https://board.example.test"}))
        result = runner.invoke(cli.app, ["init-db", "--config", str(path)])
        assert result.exit_code == 0
        assert "nothing to initialize" in result.output

    def test_invalid_config_exits(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{oops")
        result = runner.invoke(cli.app, ["init-db", "--config", str(path)])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output


class TestMovies:
    def test_lists_candidates(self, config_file, catalog):
        result = runner.invoke(cli.app, ["movies", "fight", "--config", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "Fight Club" in result.output
        assert "1999" in result.output
        assert catalog.calls == ["fight"]

    def test_no_match(self, config_file, catalog):
        result = runner.invoke(cli.app, ["movies", "zzz", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "No movies found" in result.output

    def test_missing_key_exits(self, config_file, monkeypatch):
        def _missing() -> str:
            raise ConfigError("TMDB API key not found.")

        monkeypatch.setattr(cli, "get_tmdb_api_key", _missing)
        result = runner.invoke(cli.app, ["movies", "fight", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "TMDB API key not found" in result.output


class TestShareAndFeed:
    def test_share_then_browse_by_name(self, config_file, catalog):
        result = _share(config_file, "  Jordan  ", "I still think about you.", "fight club")
        assert result.exit_code == 0, result.output
        assert "shared anonymously" in result.output

        result = runner.invoke(cli.app, ["feed", "--name", "JOR", "--config", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "To Jordan" in result.output
        assert "I still think about you." in result.output
        assert "Found 1 confession" in result.output

    def test_browse_by_movie(self, config_file, catalog):
        _share(config_file, "Sam", "First.", "fight")
        _share(config_file, "Alex", "Second.", "before")

        result = runner.invoke(cli.app, ["feed", "--movie", "before", "--config", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "Before Sunrise" in result.output
        assert "To Alex" in result.output
        assert "To Sam" not in result.output

    def test_unknown_movie_rejects_share(self, config_file, catalog):
        result = _share(config_file, "Sam", "Hello", "no such film")
        assert result.exit_code == 1
        assert "Please choose a movie" in result.output

    def test_blank_message_rejected(self, config_file, catalog):
        result = _share(config_file, "Sam", "   ", "fight")
        assert result.exit_code == 1
        assert "Please write a message" in result.output

    def test_empty_board(self, config_file):
        result = runner.invoke(cli.app, ["feed", "--config", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "No confessions yet" in result.output
        assert "Be the first to share your story" in result.output

    def test_name_and_movie_are_exclusive(self, config_file):
        result = runner.invoke(
            cli.app, ["feed", "--name", "a", "--movie", "b", "--config", str(config_file)]
        )
        assert result.exit_code == 1


class TestConfigCommands:
    def test_set_and_get_tmdb_key(self, monkeypatch):
        secrets: dict[tuple[str, str], str] = {}
        monkeypatch.setattr(cli.keyring, "set_password", lambda s, n, v: secrets.__setitem__((s, n), v))
        monkeypatch.setattr(cli.keyring, "get_password", lambda s, n: secrets.get((s, n)))

        result = runner.invoke(cli.app, ["config", "set-tmdb-key", "abcdefgh12345"])
        assert result.exit_code == 0, result.output
        assert secrets[("filmfess-tmdb", "api_key")] == "abcdefgh12345"

        result = runner.invoke(cli.app, ["config", "get-tmdb-key"])
        assert result.exit_code == 0
        assert "abcdefgh*****" in result.output

    def test_get_without_key(self, monkeypatch):
        monkeypatch.setattr(cli.keyring, "get_password", lambda s, n: None)
        result = runner.invoke(cli.app, ["config", "get-tmdb-key"])
        assert result.exit_code == 1
        assert "No TMDB API key" in result.output

    def test_remove_tmdb_key(self, monkeypatch):
        removed: list[tuple[str, str]] = []
        monkeypatch.setattr(cli.keyring, "get_password", lambda s, n: "secret")
        monkeypatch.setattr(cli.keyring, "delete_password", lambda s, n: removed.append((s, n)))
        result = runner.invoke(cli.app, ["config", "remove-tmdb-key"])
        assert result.exit_code == 0
        assert removed == [("filmfess-tmdb", "api_key")]

    def test_set_store_key_rejects_blank(self):
        result = runner.invoke(cli.app, ["config", "set-store-key", "  "])
        assert result.exit_code == 1
        assert "cannot be empty" in result.output
