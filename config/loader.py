"""Configuration loading and normalization."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from config.merge import merge_sections
from config.models import (
    DEFAULT_SERVICE_MAP,
    CatalogConfig,
    Config,
    LoggingConfig,
    OutputConfig,
    PosterConfig,
    TmdbConfig,
)


BASE_DIR = Path(__file__).resolve().parent.parent
MODULE_CONFIG_PATHS = {
    "tmdb": BASE_DIR / "tmdb" / "config.json",
    "catalog": BASE_DIR / "core" / "catalog_config.json",
    "output": BASE_DIR / "core" / "output_config.json",
}


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    return default


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_mode(value: Any, default: int) -> int:
    # Modes may be written as "0644" strings in JSON.
    if isinstance(value, str):
        try:
            return int(value, 8)
        except ValueError:
            return default
    return _as_int(value, default) if value is not None else default


def _as_str_map(value: Any, default: Dict[str, str]) -> Dict[str, str]:
    if not isinstance(value, dict) or not value:
        return dict(default)
    return {str(k): str(v) for k, v in value.items()}


def _load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _load_default_sections() -> Dict[str, Any]:
    raw: Dict[str, Any] = {}
    for section, file_path in MODULE_CONFIG_PATHS.items():
        if file_path.exists():
            raw[section] = _load_json(file_path)
    return raw


def config_from_dict(raw: Dict[str, Any]) -> Config:
    """Build a Config instance from a raw dictionary."""
    tmdb_raw = raw.get("tmdb", {}) or {}
    catalog_raw = raw.get("catalog", {}) or {}
    output_raw = raw.get("output", {}) or {}
    posters_raw = raw.get("posters", {}) or {}
    logging_raw = raw.get("logging", {}) or {}

    tmdb = TmdbConfig(
        access_token_env=str(tmdb_raw.get("access_token_env", "TMDB_ACCESS_TOKEN")),
        access_token=str(tmdb_raw.get("access_token", "")),
        base_url=str(tmdb_raw.get("base_url", "https://api.themoviedb.org/3")).rstrip("/"),
        image_base_url=str(tmdb_raw.get("image_base_url", "https://image.tmdb.org/t/p/w500")).rstrip("/"),
        language=str(tmdb_raw.get("language", "en-US")),
        region=str(tmdb_raw.get("region", "US")),
        request_delay_seconds=_as_float(tmdb_raw.get("request_delay_seconds", 0.25), 0.25),
        timeout_seconds=_as_float(tmdb_raw.get("timeout_seconds", 20.0), 20.0),
    )
    catalog = CatalogConfig(
        movie_target_count=_as_int(catalog_raw.get("movie_target_count", 400), 400),
        movie_max_pages=_as_int(catalog_raw.get("movie_max_pages", 50), 50),
        show_target_count=_as_int(catalog_raw.get("show_target_count", 400), 400),
        show_max_pages=_as_int(catalog_raw.get("show_max_pages", 40), 40),
        recent_years=_as_int(catalog_raw.get("recent_years", 10), 10),
        service_map=_as_str_map(catalog_raw.get("service_map"), DEFAULT_SERVICE_MAP),
    )
    output = OutputConfig(
        data_dir=str(output_raw.get("data_dir", "data")),
        movies_file=str(output_raw.get("movies_file", "streaming-movies-results.json")),
        shows_file=str(output_raw.get("shows_file", "streaming-shows-results.json")),
        file_mode=_as_mode(output_raw.get("file_mode"), 0o644),
        dir_mode=_as_mode(output_raw.get("dir_mode"), 0o755),
    )
    posters = PosterConfig(
        enabled=_as_bool(posters_raw.get("enabled"), True),
        dir_name=str(posters_raw.get("dir_name", "posters")),
        index_file=str(posters_raw.get("index_file", "poster-dates.json")),
        max_posters=_as_int(posters_raw.get("max_posters", 1000), 1000),
        extension=str(posters_raw.get("extension", ".jpg")),
        file_mode=_as_mode(posters_raw.get("file_mode"), 0o664),
    )
    logging_cfg = LoggingConfig(level=str(logging_raw.get("level", "INFO")).upper())
    return Config(
        tmdb=tmdb,
        catalog=catalog,
        output=output,
        posters=posters,
        logging=logging_cfg,
    )


def load_config(path: Path | None) -> Config:
    """Load config data into a Config instance.

    Args:
        path: Optional path to a JSON config file containing overrides.

    Returns:
        Parsed Config instance.
    """
    raw = _load_default_sections()
    if path is not None:
        raw = merge_sections(raw, _load_json(path))
    return config_from_dict(raw)
