"""Per-title detail and watch-provider enrichment.

``project_detail`` is shared by the batch pipeline and the single-item
lookup in ``core.details``, so both produce the same denormalized shape.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

import requests

from config.models import DEFAULT_SERVICE_MAP
from logger import get_logger
from tmdb.client import tmdb_movie_details, tmdb_tv_details, tmdb_watch_providers
from tmdb.service import TmdbContext

log = get_logger()

CAST_LIMIT = 15
CREW_LIMIT = 10
KEYWORD_LIMIT = 15
VIDEO_LIMIT = 5
RELATED_LIMIT = 10
TRANSLATION_LIMIT = 20

MOVIE_CREW_JOBS = ("Director", "Writer", "Screenplay", "Producer", "Executive Producer")
TV_CREW_JOBS = ("Creator", "Executive Producer", "Showrunner", "Director", "Writer")
VIDEO_TYPES = ("Trailer", "Teaser")
VIDEO_SITE = "YouTube"


def service_key(provider_name: str, service_map: Mapping[str, str] | None = None) -> str:
    """Map a TMDb provider name to a subscription service key.

    Exact table matches win; anything else becomes the lower-cased name with
    whitespace removed.
    """
    table = DEFAULT_SERVICE_MAP if service_map is None else service_map
    if provider_name in table:
        return table[provider_name]
    return re.sub(r"\s+", "", provider_name.lower())


def _dedupe_preserve_order(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for x in items:
        if x not in seen:
            out.append(x)
            seen.add(x)
    return out


def fetch_detail(ctx: TmdbContext, tmdb_id: int, is_movie: bool) -> Optional[Dict[str, Any]]:
    """Fetch the detail document with appended sub-resources.

    Returns:
        Detail payload, or None when the request fails.
    """
    fetch = tmdb_movie_details if is_movie else tmdb_tv_details
    label = "movie" if is_movie else "show"
    try:
        data = fetch(ctx.session, ctx.access_token, tmdb_id, ctx.language, **ctx.request_kwargs())
    except (requests.RequestException, ValueError) as e:
        log.warn(f"  ✗ Error fetching {label} details for {tmdb_id}: {e}")
        return None
    finally:
        ctx.pause()
    if not isinstance(data, dict):
        return None
    return data


def _fetch_region_providers(ctx: TmdbContext, tmdb_id: int, is_movie: bool) -> Optional[Dict[str, Any]]:
    label = "movie" if is_movie else "show"
    try:
        data = tmdb_watch_providers(
            ctx.session,
            ctx.access_token,
            tmdb_id,
            is_movie,
            ctx.language,
            ctx.region,
            **ctx.request_kwargs(),
        )
    except (requests.RequestException, ValueError) as e:
        log.warn(f"  ✗ Error fetching providers for {label} {tmdb_id}: {e}")
        return None
    finally:
        ctx.pause()
    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, dict):
        return {}
    region = results.get(ctx.region)
    return region if isinstance(region, dict) else {}


def _flatrate(region: Dict[str, Any]) -> List[Dict[str, Any]]:
    flatrate = region.get("flatrate")
    if not isinstance(flatrate, list):
        return []
    return [p for p in flatrate if isinstance(p, dict)]


def fetch_providers(
    ctx: TmdbContext,
    tmdb_id: int,
    is_movie: bool,
    service_map: Mapping[str, str] | None = None,
) -> List[str]:
    """Return service keys for subscription (flatrate) availability in the context region."""
    region = _fetch_region_providers(ctx, tmdb_id, is_movie)
    if not region:
        return []
    keys = [service_key(str(p.get("provider_name") or ""), service_map) for p in _flatrate(region)]
    return _dedupe_preserve_order(k for k in keys if k)


def _display_priority(provider: Dict[str, Any]) -> int:
    # Null or non-numeric priorities sort last.
    value = provider.get("display_priority")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 999
    return int(value)


def fetch_provider_entries(ctx: TmdbContext, tmdb_id: int, is_movie: bool) -> List[Dict[str, Any]]:
    """Return full flatrate provider rows, best display priority first."""
    region = _fetch_region_providers(ctx, tmdb_id, is_movie)
    if not region:
        return []
    watch_link = region.get("link")
    entries = [
        {
            "provider_id": p.get("provider_id") or 0,
            "provider_name": p.get("provider_name") or "",
            "logo_path": p.get("logo_path"),
            "display_priority": _display_priority(p),
            "watch_link": watch_link,
        }
        for p in _flatrate(region)
    ]
    entries.sort(key=lambda entry: entry["display_priority"])
    return entries


# --- Projection ---

def _nested_list(detail: Dict[str, Any], key: str, inner: str) -> Optional[List[Dict[str, Any]]]:
    container = detail.get(key)
    if not isinstance(container, dict):
        return None
    items = container.get(inner)
    if not isinstance(items, list):
        return None
    return [item for item in items if isinstance(item, dict)]


def _person(entry: Dict[str, Any], **extra: Any) -> Dict[str, Any]:
    person = {"id": entry.get("id"), "name": entry.get("name")}
    person.update(extra)
    person["profile_path"] = entry.get("profile_path") or None
    return person


def _related(entries: List[Dict[str, Any]], is_movie: bool) -> List[Dict[str, Any]]:
    title_key = "title" if is_movie else "name"
    return [
        {
            "id": r.get("id"),
            "title": r.get(title_key) or r.get("title") or r.get("name") or "",
            "poster_path": r.get("poster_path") or None,
            "vote_average": r.get("vote_average"),
            "is_movie": is_movie,
        }
        for r in entries[:RELATED_LIMIT]
    ]


def project_detail(detail: Dict[str, Any] | None, is_movie: bool) -> Dict[str, Any]:
    """Project a detail document into the bounded extended-field shape.

    Every field is optional; anything missing or malformed is simply left
    out.
    """
    if not detail:
        return {}

    extended: Dict[str, Any] = {}

    genres = detail.get("genres")
    if isinstance(genres, list) and genres:
        extended["genres"] = [
            {"id": g.get("id"), "name": g.get("name")} for g in genres if isinstance(g, dict)
        ]

    if detail.get("overview"):
        extended["overview"] = detail["overview"]
    if detail.get("vote_average") is not None:
        extended["vote_average"] = detail["vote_average"]
    if detail.get("vote_count") is not None:
        extended["vote_count"] = detail["vote_count"]

    if is_movie:
        if detail.get("runtime"):
            extended["runtime"] = detail["runtime"]
    else:
        episode_run_time = detail.get("episode_run_time")
        if isinstance(episode_run_time, list) and episode_run_time:
            extended["runtime"] = episode_run_time[0]

    cast = _nested_list(detail, "credits", "cast")
    if cast is not None:
        extended["cast"] = [_person(c, character=c.get("character")) for c in cast[:CAST_LIMIT]]

    crew = _nested_list(detail, "credits", "crew")
    jobs = MOVIE_CREW_JOBS if is_movie else TV_CREW_JOBS
    crew_out: Optional[List[Dict[str, Any]]] = None
    if crew is not None:
        crew_out = [_person(c, job=c.get("job")) for c in crew if c.get("job") in jobs]
    if not is_movie:
        created_by = detail.get("created_by")
        if isinstance(created_by, list) and created_by:
            creators = [_person(c, job="Creator") for c in created_by if isinstance(c, dict)]
            crew_out = creators + (crew_out or [])
    if crew_out is not None:
        extended["crew"] = crew_out[:CREW_LIMIT]

    keywords = _nested_list(detail, "keywords", "keywords" if is_movie else "results")
    if keywords is not None:
        extended["keywords"] = [{"id": k.get("id"), "name": k.get("name")} for k in keywords[:KEYWORD_LIMIT]]

    videos = _nested_list(detail, "videos", "results")
    if videos is not None:
        trailers = [v for v in videos if v.get("type") in VIDEO_TYPES and v.get("site") == VIDEO_SITE]
        extended["videos"] = [
            {
                "id": v.get("id"),
                "key": v.get("key"),
                "name": v.get("name"),
                "site": v.get("site"),
                "type": v.get("type"),
                "official": v.get("official"),
                "published_at": v.get("published_at") or None,
            }
            for v in trailers[:VIDEO_LIMIT]
        ]

    if not is_movie:
        networks = detail.get("networks")
        if isinstance(networks, list) and networks:
            extended["networks"] = [
                {
                    "id": n.get("id"),
                    "name": n.get("name"),
                    "logo_path": n.get("logo_path") or None,
                    "origin_country": n.get("origin_country") or None,
                }
                for n in networks
                if isinstance(n, dict)
            ]
        if detail.get("number_of_seasons") is not None:
            extended["number_of_seasons"] = detail["number_of_seasons"]
        if detail.get("number_of_episodes") is not None:
            extended["number_of_episodes"] = detail["number_of_episodes"]

    recommendations = _nested_list(detail, "recommendations", "results")
    if recommendations is not None:
        extended["recommendations"] = _related(recommendations, is_movie)

    similar = _nested_list(detail, "similar", "results")
    if similar is not None:
        extended["similar"] = _related(similar, is_movie)

    translations = _nested_list(detail, "translations", "translations")
    if translations is not None:
        extended["translations"] = [
            {
                "iso_639_1": t.get("iso_639_1"),
                "iso_3166_1": t.get("iso_3166_1"),
                "name": t.get("name"),
                "english_name": t.get("english_name"),
            }
            for t in translations[:TRANSLATION_LIMIT]
        ]

    return extended
