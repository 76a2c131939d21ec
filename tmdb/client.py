"""TMDb API client helpers."""

from __future__ import annotations

from typing import Any, Dict

import requests


TMDB_BASE = "https://api.themoviedb.org/3"

MOVIE_APPENDS = "release_dates,credits,keywords,videos,recommendations,similar,translations"
TV_APPENDS = "content_ratings,credits,keywords,videos,recommendations,similar,translations"


def tmdb_request(
    session: requests.Session,
    access_token: str,
    endpoint: str,
    params: Dict[str, Any],
    base_url: str = TMDB_BASE,
    timeout: float = 20,
) -> Dict[str, Any]:
    """Make a TMDb API request.

    Args:
        session: Requests session.
        access_token: TMDb v4 read access token, sent as a bearer token.
        endpoint: API endpoint path.
        params: Query parameters.
        base_url: API root.
        timeout: Per-request timeout in seconds.

    Returns:
        Parsed JSON response.

    Raises:
        requests.RequestException: On transport errors and non-2xx statuses.
        ValueError: If the body is not valid JSON.
    """
    url = f"{base_url}{endpoint}"
    headers = {
        "Authorization": f"Bearer {access_token}",
        "Content-Type": "application/json",
    }
    resp = session.get(url, params=dict(params), headers=headers, timeout=timeout)
    resp.raise_for_status()
    return resp.json()


def tmdb_discover_movies(
    session: requests.Session,
    access_token: str,
    page: int,
    start_date: str,
    end_date: str,
    language: str = "en-US",
    region: str = "US",
    **kwargs: Any,
) -> Dict[str, Any]:
    """Fetch one page of English-language movies released in a date range, most popular first."""
    params = {
        "language": language,
        "page": page,
        "region": region,
        "sort_by": "popularity.desc",
        "primary_release_date.gte": start_date,
        "primary_release_date.lte": end_date,
        "with_original_language": "en",
    }
    return tmdb_request(session, access_token, "/discover/movie", params, **kwargs)


def tmdb_popular_tv(
    session: requests.Session,
    access_token: str,
    page: int,
    language: str = "en-US",
    **kwargs: Any,
) -> Dict[str, Any]:
    """Fetch one page of TMDb's popular TV listing."""
    return tmdb_request(session, access_token, "/tv/popular", {"language": language, "page": page}, **kwargs)


def tmdb_movie_details(
    session: requests.Session,
    access_token: str,
    movie_id: int,
    language: str,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Fetch full TMDb details for a movie, with certification and sub-resources appended.

    Args:
        session: Requests session.
        access_token: TMDb bearer token.
        movie_id: TMDb movie ID.
        language: Language code.

    Returns:
        Movie details payload.
    """
    params = {"language": language, "append_to_response": MOVIE_APPENDS}
    return tmdb_request(session, access_token, f"/movie/{movie_id}", params, **kwargs)


def tmdb_tv_details(
    session: requests.Session,
    access_token: str,
    show_id: int,
    language: str,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Fetch full TMDb details for a TV show, with content ratings and sub-resources appended."""
    params = {"language": language, "append_to_response": TV_APPENDS}
    return tmdb_request(session, access_token, f"/tv/{show_id}", params, **kwargs)


def tmdb_watch_providers(
    session: requests.Session,
    access_token: str,
    tmdb_id: int,
    is_movie: bool,
    language: str,
    region: str,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Fetch regional watch-provider availability for a movie or show."""
    kind = "movie" if is_movie else "tv"
    params = {"language": language, "watch_region": region}
    return tmdb_request(session, access_token, f"/{kind}/{tmdb_id}/watch/providers", params, **kwargs)
