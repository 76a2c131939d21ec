"""TMDb session context."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Any, Dict

import requests

from config import Config


@dataclass
class TmdbContext:
    """TMDb session and configuration context."""

    session: requests.Session | None
    access_token: str
    base_url: str
    image_base_url: str
    language: str
    region: str
    delay: float
    timeout: float

    def request_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments forwarded to every ``tmdb_request`` call."""
        return {"base_url": self.base_url, "timeout": self.timeout}

    def pause(self) -> None:
        """Sleep for the fixed inter-request delay."""
        if self.delay > 0:
            time.sleep(self.delay)


def init_tmdb(cfg: Config) -> tuple[TmdbContext | None, str | None]:
    """Create a TMDb context from config.

    Returns:
        ``(context, None)`` on success or ``(None, message)`` when the access
        token is missing.
    """
    token_env = cfg.tmdb.access_token_env
    access_token = cfg.tmdb.access_token or os.environ.get(token_env, "")
    if not access_token:
        return None, f"TMDb access token missing. Set env var {token_env} or add tmdb.access_token to config."

    session = requests.Session()
    return (
        TmdbContext(
            session=session,
            access_token=access_token,
            base_url=cfg.tmdb.base_url,
            image_base_url=cfg.tmdb.image_base_url,
            language=cfg.tmdb.language,
            region=cfg.tmdb.region,
            delay=float(cfg.tmdb.request_delay_seconds),
            timeout=float(cfg.tmdb.timeout_seconds),
        ),
        None,
    )
