"""Configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


DEFAULT_SERVICE_MAP: Dict[str, str] = {
    "Netflix": "netflix",
    "Hulu": "hulu",
    "Disney Plus": "disneyplus",
    "Apple TV Plus": "appletv",
    "HBO Max": "hbomax",
    "Max": "hbomax",
    "Amazon Prime Video": "prime",
    "Peacock": "peacock",
    "Paramount Plus": "paramount",
    "Paramount+": "paramount",
}


@dataclass
class TmdbConfig:
    """TMDb configuration settings."""

    access_token_env: str = "TMDB_ACCESS_TOKEN"
    access_token: str = ""
    base_url: str = "https://api.themoviedb.org/3"
    image_base_url: str = "https://image.tmdb.org/t/p/w500"
    language: str = "en-US"
    region: str = "US"
    request_delay_seconds: float = 0.25
    timeout_seconds: float = 20.0


@dataclass
class CatalogConfig:
    """Catalog discovery limits and provider mapping."""

    movie_target_count: int = 400
    movie_max_pages: int = 50
    show_target_count: int = 400
    show_max_pages: int = 40
    recent_years: int = 10
    service_map: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SERVICE_MAP))


@dataclass
class OutputConfig:
    """Snapshot output locations."""

    data_dir: str = "data"
    movies_file: str = "streaming-movies-results.json"
    shows_file: str = "streaming-shows-results.json"
    file_mode: int = 0o644
    dir_mode: int = 0o755


@dataclass
class PosterConfig:
    """Poster cache settings."""

    enabled: bool = True
    dir_name: str = "posters"
    index_file: str = "poster-dates.json"
    max_posters: int = 1000
    extension: str = ".jpg"
    file_mode: int = 0o664


@dataclass
class LoggingConfig:
    """Logger settings."""

    level: str = "INFO"


@dataclass
class Config:
    """Top-level configuration container."""

    tmdb: TmdbConfig
    catalog: CatalogConfig
    output: OutputConfig
    posters: PosterConfig
    logging: LoggingConfig
