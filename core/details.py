"""Single-title detail lookup, sharing the batch projection."""

from __future__ import annotations

from typing import Any, Dict

from core.enrich import fetch_detail, fetch_provider_entries, project_detail
from logger import get_logger
from tmdb.service import TmdbContext

log = get_logger()

ORIGINAL_IMAGE_BASE = "https://image.tmdb.org/t/p/original"


def lookup_item_details(ctx: TmdbContext, tmdb_id: int, is_movie: bool) -> Dict[str, Any]:
    """Fetch and project one title on demand.

    Returns:
        ``{"success": True, "data": {...}, "image_base_url": ...}`` where
        ``data`` holds the projected fields plus ``poster_path`` and the
        full ``providers`` rows, or ``{"success": False, "error": ...}`` when
        the title cannot be fetched.
    """
    detail = fetch_detail(ctx, tmdb_id, is_movie)
    if not detail:
        return {"success": False, "error": "Movie not found" if is_movie else "TV show not found"}

    data: Dict[str, Any] = {}
    if "poster_path" in detail:
        data["poster_path"] = detail.get("poster_path")
    data.update(project_detail(detail, is_movie))

    providers = fetch_provider_entries(ctx, tmdb_id, is_movie)
    label = "movie" if is_movie else "show"
    if providers:
        log.debug(f"Found {len(providers)} providers for {label} {tmdb_id}")
    else:
        log.debug(f"No providers returned for {label} {tmdb_id}")
    data["providers"] = providers

    return {"success": True, "data": data, "image_base_url": ORIGINAL_IMAGE_BASE}
