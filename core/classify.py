"""Pure classification rules for catalog records and detail documents."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

ANIMATION_GENRE_ID = 16
HORROR_GENRE_ID = 27

ANIME_TITLE_KEYWORDS = (
    "anime",
    "ghibli",
    "studio ghibli",
    "pokemon",
    "dragon ball",
    "naruto",
    "one piece",
    "attack on titan",
)

MOVIE_EXCLUDED_CERTIFICATIONS = {"G", "PG"}
TV_EXCLUDED_RATINGS = {"TV-G", "TV-PG"}

HIGH_PRIORITY = 1
LOW_PRIORITY = 0


def parse_date(value: Any) -> Optional[date]:
    """Parse a TMDb ``YYYY-MM-DD`` date, returning None when absent or malformed."""
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def years_before(day: date, years: int) -> date:
    """Return ``day`` shifted back by whole calendar years (Feb 29 becomes Feb 28)."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def is_recent(movie: Dict[str, Any], today: date | None = None, years: int = 10) -> bool:
    """Check whether a movie was released within the last ``years`` years, inclusive."""
    released = parse_date(movie.get("release_date"))
    if released is None:
        return False
    cutoff = years_before(today or date.today(), years)
    return released >= cutoff


def _genre_ids(record: Dict[str, Any]) -> list:
    genre_ids = record.get("genre_ids")
    return genre_ids if isinstance(genre_ids, list) else []


def is_anime(movie: Dict[str, Any]) -> bool:
    """Japanese animation, or a title naming a well-known anime franchise."""
    if movie.get("original_language") == "ja" and ANIMATION_GENRE_ID in _genre_ids(movie):
        return True
    title = str(movie.get("title") or movie.get("name") or "").lower()
    return any(keyword in title for keyword in ANIME_TITLE_KEYWORDS)


def is_horror(movie: Dict[str, Any]) -> bool:
    return HORROR_GENRE_ID in _genre_ids(movie)


def _us_entry(container: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(container, dict):
        return None
    results = container.get("results")
    if not isinstance(results, list):
        return None
    for entry in results:
        if isinstance(entry, dict) and entry.get("iso_3166_1") == "US":
            return entry
    return None


def is_rated_g_or_pg(detail: Dict[str, Any] | None) -> bool:
    """True when the movie's US release dates carry a G or PG certification."""
    if not detail:
        return False
    us_release = _us_entry(detail.get("release_dates"))
    if not us_release:
        return False
    release_dates = us_release.get("release_dates")
    if not isinstance(release_dates, list):
        return False
    return any(
        isinstance(rd, dict) and rd.get("certification") in MOVIE_EXCLUDED_CERTIFICATIONS for rd in release_dates
    )


def is_rated_tvg_or_tvpg(detail: Dict[str, Any] | None) -> bool:
    """True when the show's US content rating is TV-G or TV-PG."""
    if not detail:
        return False
    us_rating = _us_entry(detail.get("content_ratings"))
    if not us_rating:
        return False
    return us_rating.get("rating") in TV_EXCLUDED_RATINGS


def is_excluded(detail: Dict[str, Any] | None, is_movie: bool) -> bool:
    """Age-rated-out titles never reach the snapshot."""
    if is_movie:
        return is_rated_g_or_pg(detail)
    return is_rated_tvg_or_tvpg(detail)


def priority(record: Dict[str, Any], detail: Dict[str, Any] | None, is_movie: bool) -> int:
    """Ranking signal for the snapshot sort.

    Only movies are deprioritized (anime or horror), and only when their
    detail fetch succeeded. Shows are always high priority.
    """
    if not is_movie or detail is None:
        return HIGH_PRIORITY
    if is_anime(record) or is_horror(record):
        return LOW_PRIORITY
    return HIGH_PRIORITY
