"""Configuration loading and API key lookup."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import keyring

from filmfess.constants import LOOKUP_DEBOUNCE_SECONDS, TMDB_DEFAULT_LANGUAGE
from filmfess.exceptions import ConfigError

TMDB_SERVICE_NAME = "filmfess-tmdb"
STORE_SERVICE_NAME = "filmfess-store"
KEY_NAME = "api_key"

TMDB_ENV_VAR = "TMDB_API_KEY"
STORE_ENV_VAR = "FILMFESS_STORE_KEY"

DEFAULT_CONFIG_PATH = Path("config/filmfess.json")

STORE_BACKENDS = ("sqlite", "rest")


def get_tmdb_api_key() -> str:
    """Get the movie catalog API key: system keyring first, then env var.

    Raises:
        ConfigError: If no key is found anywhere, with setup instructions.
    """
    api_key = keyring.get_password(TMDB_SERVICE_NAME, KEY_NAME)
    if api_key:
        return api_key

    api_key = os.environ.get(TMDB_ENV_VAR)
    if api_key:
        return api_key

    raise ConfigError(
        "TMDB API key not found.\n"
        "Set it with: filmfess config set-tmdb-key YOUR_KEY\n"
        f"Or: export {TMDB_ENV_VAR}=your-key"
    )


def get_store_api_key() -> str | None:
    """Get the REST record store key, or None when not configured."""
    return keyring.get_password(STORE_SERVICE_NAME, KEY_NAME) or os.environ.get(STORE_ENV_VAR)


@dataclass
class FilmfessConfig:
    """Runtime settings with defaults for a local single-user board."""

    db_path: Path = field(default_factory=lambda: Path("data/filmfess.db"))
    store_backend: str = "sqlite"
    rest_url: str | None = None
    tmdb_language: str = TMDB_DEFAULT_LANGUAGE
    debounce_seconds: float = LOOKUP_DEBOUNCE_SECONDS
    log_dir: str = "logs"

    def __post_init__(self) -> None:
        if isinstance(self.db_path, str):
            self.db_path = Path(self.db_path)
        if self.store_backend not in STORE_BACKENDS:
            raise ConfigError(
                f"Unknown store_backend {self.store_backend!r}; "
                f"expected one of {', '.join(STORE_BACKENDS)}"
            )
        if self.store_backend == "rest" and not self.rest_url:
            raise ConfigError("store_backend 'rest' requires rest_url")
        if self.debounce_seconds < 0:
            raise ConfigError("debounce_seconds must not be negative")


def load_config(config_path: Path | None = None) -> FilmfessConfig:
    """Load configuration from JSON, merging with defaults.

    Reads ``config/filmfess.json`` when *config_path* is ``None``; a missing
    file yields the defaults. Unknown keys are ignored.

    Args:
        config_path: Optional explicit path to the JSON file.

    Returns:
        FilmfessConfig with file values merged over defaults.

    Raises:
        ConfigError: If the file is not valid JSON or holds invalid values.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    data: dict = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc

    field_names = {f.name for f in fields(FilmfessConfig)}
    kwargs = {k: v for k, v in data.items() if k in field_names}
    return FilmfessConfig(**kwargs)
