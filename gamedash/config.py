"""
Runtime configuration for gamedash.

All settings are read from the environment once, at startup, and the
resulting ``Settings`` object is handed to the aggregator, the page
sources and the gateway when they are constructed. The RAWG API key is
only ever read from ``RAWG_API_KEY``; it never lives in source.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from .errors import ConfigError


DEFAULT_UPSTREAM_URL = "https://api.rawg.io/api/games"
FAVORITES_KEY = "gameFavorites"


class Settings(BaseModel):
    """Process configuration.

    ``gateway_url`` switches the aggregator from talking to the RAWG API
    directly to going through a running relay gateway. ``static_root``
    is the document root for static files and defaults to the working
    directory of the process.
    """

    api_key: Optional[str] = None
    upstream_url: str = DEFAULT_UPSTREAM_URL
    gateway_url: Optional[str] = None
    static_root: Path = Field(default_factory=Path.cwd)
    index_document: str = "index.html"
    favorites_file: Path = Path("data") / "favorites.json"
    favorites_key: str = FAVORITES_KEY
    page_size: int = 40
    timeout: float = 10.0
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"
    autoload: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ
        values = {}

        def _text(name: str, field: str) -> None:
            raw = (env.get(name) or "").strip()
            if raw:
                values[field] = raw

        _text("RAWG_API_KEY", "api_key")
        _text("GAMEDASH_UPSTREAM_URL", "upstream_url")
        _text("GAMEDASH_GATEWAY_URL", "gateway_url")
        _text("GAMEDASH_INDEX", "index_document")
        _text("GAMEDASH_HOST", "host")
        if env.get("GAMEDASH_STATIC_ROOT"):
            values["static_root"] = Path(env["GAMEDASH_STATIC_ROOT"])
        if env.get("GAMEDASH_FAVORITES_FILE"):
            values["favorites_file"] = Path(env["GAMEDASH_FAVORITES_FILE"])
        if env.get("GAMEDASH_LOG_LEVEL"):
            values["log_level"] = env["GAMEDASH_LOG_LEVEL"].strip().upper()

        for name, field, cast in (
            ("GAMEDASH_PAGE_SIZE", "page_size", int),
            ("GAMEDASH_PORT", "port", int),
            ("GAMEDASH_TIMEOUT", "timeout", float),
        ):
            raw = (env.get(name) or "").strip()
            if not raw:
                continue
            try:
                values[field] = cast(raw)
            except ValueError as exc:
                raise ConfigError(f"{name} must be a number, got {raw!r}") from exc

        raw_autoload = (env.get("GAMEDASH_AUTOLOAD") or "").strip().lower()
        if raw_autoload:
            values["autoload"] = raw_autoload not in {"0", "false", "no", "off"}

        settings = cls(**values)
        if settings.page_size < 1:
            raise ConfigError("GAMEDASH_PAGE_SIZE must be at least 1")
        return settings
