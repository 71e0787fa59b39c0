"""
Configuration for a bookmark store.

The configuration is an optional TOML file inside the store directory.
Its name starts with a dot so that store scans never treat it as a
bookmark record.
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from .interactor import DEFAULT_LIMIT, DEFAULT_SEARCH_URL
from .matcher import DEFAULT_MIN_SCORE
from .title import DEFAULT_TIMEOUT

CONFIG_FILENAME = ".goto.toml"
CONFIG_VERSION = 1
STORE_ENV_VAR = "GOTO_DIR"


def default_store_path() -> Path:
    """Store root from GOTO_DIR, else ~/.goto."""
    env = os.environ.get(STORE_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".goto"


@dataclass
class SearchConfig:
    min_score: float = DEFAULT_MIN_SCORE
    limit: int = DEFAULT_LIMIT


@dataclass
class WebConfig:
    search_url: str = DEFAULT_SEARCH_URL
    fetch_timeout: float = DEFAULT_TIMEOUT


@dataclass
class StoreConfig:
    """Complete store configuration."""
    path: Path
    version: int = CONFIG_VERSION
    search: SearchConfig = field(default_factory=SearchConfig)
    web: WebConfig = field(default_factory=WebConfig)

    @property
    def config_path(self) -> Path:
        """Path to the TOML config file."""
        return self.path / CONFIG_FILENAME

    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()


def load_config(store_path: Path) -> StoreConfig:
    """
    Load configuration from a store directory.

    Raises:
        FileNotFoundError: If config doesn't exist
        ValueError: If config is invalid
    """
    config_path = store_path / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid config {config_path}: {e}") from e

    version = data.get("store", {}).get("version", 1)
    if version > CONFIG_VERSION:
        raise ValueError(f"Config version {version} is newer than supported ({CONFIG_VERSION})")

    search: dict[str, Any] = data.get("search", {})
    web: dict[str, Any] = data.get("web", {})
    try:
        return StoreConfig(
            path=store_path,
            version=version,
            search=SearchConfig(
                min_score=float(search.get("min_score", DEFAULT_MIN_SCORE)),
                limit=int(search.get("limit", DEFAULT_LIMIT)),
            ),
            web=WebConfig(
                search_url=str(web.get("search_url", DEFAULT_SEARCH_URL)),
                fetch_timeout=float(web.get("fetch_timeout", DEFAULT_TIMEOUT)),
            ),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid config {config_path}: {e}") from e


def save_config(config: StoreConfig) -> None:
    """
    Save configuration to the store directory.

    Creates the directory if it doesn't exist.
    """
    config.path.mkdir(parents=True, exist_ok=True)

    data = {
        "store": {"version": config.version},
        "search": {
            "min_score": config.search.min_score,
            "limit": config.search.limit,
        },
        "web": {
            "search_url": config.web.search_url,
            "fetch_timeout": config.web.fetch_timeout,
        },
    }

    with open(config.config_path, "wb") as f:
        tomli_w.dump(data, f)


def load_or_create_config(store_path: Path) -> StoreConfig:
    """
    Load existing config or create a new one with defaults.

    This is the main entry point for config management.
    """
    config_path = store_path / CONFIG_FILENAME

    if config_path.exists():
        return load_config(store_path)
    config = StoreConfig(path=store_path)
    save_config(config)
    return config
