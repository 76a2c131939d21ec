"""Paginated discovery of popular movies and shows."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List

import requests

from core.classify import is_recent, years_before
from logger import get_logger
from tmdb.client import tmdb_discover_movies, tmdb_popular_tv
from tmdb.service import TmdbContext

log = get_logger()

MOVIE = "movie"
SHOW = "show"
KINDS = (MOVIE, SHOW)


def _fetch_page(ctx: TmdbContext, kind: str, page: int, today: date, recent_years: int) -> Dict[str, Any]:
    if kind == MOVIE:
        return tmdb_discover_movies(
            ctx.session,
            ctx.access_token,
            page,
            start_date=years_before(today, recent_years).isoformat(),
            end_date=today.isoformat(),
            language=ctx.language,
            region=ctx.region,
            **ctx.request_kwargs(),
        )
    return tmdb_popular_tv(ctx.session, ctx.access_token, page, language=ctx.language, **ctx.request_kwargs())


def fetch_popular(
    ctx: TmdbContext,
    kind: str,
    target_count: int,
    max_pages: int,
    today: date | None = None,
    recent_years: int = 10,
) -> List[Dict[str, Any]]:
    """Collect up to ``target_count`` popular catalog records.

    Pages are requested one at a time, each followed by the fixed delay.
    Pagination stops at the target, after ``max_pages``, on an empty page, or
    on the first failed page, in which case the records gathered so far are
    returned.

    Args:
        ctx: TMDb session context.
        kind: ``"movie"`` or ``"show"``.
        target_count: Maximum number of records to return.
        max_pages: Highest page number to request.
        today: Run date used for the recency window (defaults to today).
        recent_years: Size of the movie recency window.

    Returns:
        Catalog records in API order.
    """
    if kind not in KINDS:
        raise ValueError(f"Unknown catalog kind: {kind}")
    today = today or date.today()
    label = "movies" if kind == MOVIE else "shows"
    records: List[Dict[str, Any]] = []
    page = 1

    while len(records) < target_count and page <= max_pages:
        try:
            data = _fetch_page(ctx, kind, page, today, recent_years)
        except (requests.RequestException, ValueError) as e:
            log.warn(f"Failed to fetch {label} page {page}: {e}")
            ctx.pause()
            break
        ctx.pause()

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            break

        page_records = [r for r in results if isinstance(r, dict)]
        if kind == MOVIE:
            kept = [r for r in page_records if is_recent(r, today=today, years=recent_years)]
        else:
            kept = page_records

        remaining = target_count - len(records)
        records.extend(kept[:remaining])
        if kind == MOVIE:
            log.info(
                f"Fetched {len(kept)} {label} from page {page} "
                f"(filtered from {len(results)}), total: {len(records)}/{target_count}"
            )
        else:
            log.info(f"Fetched {len(kept)} {label} from page {page}, total: {len(records)}/{target_count}")
        page += 1

    return records[:target_count]
