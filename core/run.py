"""Explore content ingestion pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

from cli import RunOptions
from config import Config
from core.assemble import build_item, sort_by_priority, write_snapshot
from core.catalog import MOVIE, SHOW, fetch_popular
from core.classify import is_excluded
from core.enrich import fetch_detail, fetch_providers
from core.posters import PosterCache, poster_filename
from logger import get_logger
from tmdb.service import TmdbContext, init_tmdb

log = get_logger()


@dataclass
class RunContext:
    """Resolved configuration and helpers for a run."""

    cfg: Config
    tmdb_ctx: TmdbContext
    data_dir: Path
    movies_path: Path
    shows_path: Path
    poster_cache: PosterCache | None
    today: date

    def snapshot_path(self, kind: str) -> Path:
        return self.movies_path if kind == MOVIE else self.shows_path


@dataclass
class ProcessResult:
    """Per-title processing result."""

    status: str
    item: Dict[str, Any] | None = None


@dataclass
class RunSummary:
    """Aggregate results for one content kind."""

    kind: str
    saved: int
    skip_count: int
    fail_count: int
    posters: int


def snapshot_paths(cfg: Config, data_dir: Path) -> tuple[Path, Path]:
    return data_dir / cfg.output.movies_file, data_dir / cfg.output.shows_file


def resolve_data_dir(override: Path | None, cfg: Config) -> Path:
    if override:
        return override
    return Path(cfg.output.data_dir).expanduser().resolve()


def ensure_dir(path: Path, mode: int) -> None:
    """Create a directory (and parents), applying ``mode`` when newly created."""
    if path.is_dir():
        return
    path.mkdir(parents=True, exist_ok=True)
    os.chmod(path, mode)


def prepare_run_context(options: RunOptions, cfg: Config, today: date | None = None) -> RunContext | None:
    """Resolve configuration, create output directories and open the TMDb session."""
    tmdb_ctx, tmdb_error = init_tmdb(cfg)
    if tmdb_error or tmdb_ctx is None:
        log.error(tmdb_error or "TMDb session could not be initialized.")
        return None

    data_dir = resolve_data_dir(options.data_dir, cfg)
    poster_dir = data_dir / cfg.posters.dir_name
    try:
        ensure_dir(data_dir, cfg.output.dir_mode)
        if cfg.posters.enabled:
            ensure_dir(poster_dir, cfg.output.dir_mode)
    except OSError as e:
        log.error(f"Cannot create output directories under {data_dir}: {e}")
        return None

    movies_path, shows_path = snapshot_paths(cfg, data_dir)
    poster_cache = None
    if cfg.posters.enabled:
        poster_cache = PosterCache(
            poster_dir,
            tmdb_ctx,
            snapshot_paths=(movies_path, shows_path),
            index_path=data_dir / cfg.posters.index_file,
            max_posters=cfg.posters.max_posters,
            extension=cfg.posters.extension,
            file_mode=cfg.posters.file_mode,
        )

    return RunContext(
        cfg=cfg,
        tmdb_ctx=tmdb_ctx,
        data_dir=data_dir,
        movies_path=movies_path,
        shows_path=shows_path,
        poster_cache=poster_cache,
        today=today or date.today(),
    )


def cache_poster(item: Dict[str, Any], ctx: RunContext) -> bool:
    """Ensure the poster for an assembled item is in the cache."""
    cache = ctx.poster_cache
    if cache is None:
        return False
    filename = poster_filename(str(item.get("title") or ""), cache.extension)
    if filename == cache.extension:
        log.info("  ⚠ Title has no filename-safe characters; skipping poster")
        return False
    domain_date = item.get("release_date") if item.get("is_movie") else item.get("first_air_date")
    return cache.ensure_poster(item.get("poster_path"), filename, domain_date, cache.count())


def process_one_title(record: Dict[str, Any], idx: int, total: int, kind: str, ctx: RunContext) -> ProcessResult:
    """Classify, enrich and assemble a single catalog record.

    Any error is contained here so that one bad title never aborts the batch.
    """
    is_movie = kind == MOVIE
    title = record.get("title") if is_movie else record.get("name")
    tmdb_id = record.get("id")
    log.info(f"[{idx}/{total}] Processing: {title} (ID: {tmdb_id})")

    try:
        if tmdb_id is None or not title:
            log.info("  ⚠ Skipping record without id or title")
            return ProcessResult(status="skipped")
        if not is_movie and not record.get("first_air_date"):
            log.info(f"  ⚠ Skipping show without a first air date: {title}")
            return ProcessResult(status="skipped")

        detail = fetch_detail(ctx.tmdb_ctx, tmdb_id, is_movie)
        if detail is None:
            log.info("  ⚠ Details unavailable; keeping base fields only")
        elif is_excluded(detail, is_movie):
            rating = "G/PG" if is_movie else "TV-G/TV-PG"
            log.info(f"  ⚠ Skipping {rating}-rated {'movie' if is_movie else 'show'}: {title}")
            return ProcessResult(status="skipped")

        services = fetch_providers(ctx.tmdb_ctx, tmdb_id, is_movie, ctx.cfg.catalog.service_map)
        item = build_item(record, detail, services, is_movie)

        if ctx.poster_cache is not None:
            try:
                cache_poster(item, ctx)
            except OSError as e:
                log.warn(f"  ✗ Poster cache error for {title}: {e}")

        return ProcessResult(status="ok", item=item)
    except Exception as e:
        log.error(f"  ✗ Error processing {title} (ID: {tmdb_id}): {e}")
        return ProcessResult(status="failed")


def run_kind(kind: str, ctx: RunContext) -> RunSummary:
    """Fetch, process and persist one content kind."""
    label = "Movies" if kind == MOVIE else "TV Shows"
    catalog_cfg = ctx.cfg.catalog
    if kind == MOVIE:
        target, max_pages = catalog_cfg.movie_target_count, catalog_cfg.movie_max_pages
    else:
        target, max_pages = catalog_cfg.show_target_count, catalog_cfg.show_max_pages

    log.info(f"\n=== Fetching Popular {label} ===\n")
    records = fetch_popular(
        ctx.tmdb_ctx,
        kind,
        target,
        max_pages,
        today=ctx.today,
        recent_years=catalog_cfg.recent_years,
    )

    log.info(f"\n=== Processing {len(records)} {label} ===\n")
    items: List[Dict[str, Any]] = []
    skip_count = 0
    fail_count = 0
    for idx, record in enumerate(records, 1):
        result = process_one_title(record, idx, len(records), kind, ctx)
        if result.status == "ok" and result.item is not None:
            items.append(result.item)
        elif result.status == "skipped":
            skip_count += 1
        else:
            fail_count += 1

    ordered = sort_by_priority(items)
    path = ctx.snapshot_path(kind)
    write_snapshot(path, ordered, file_mode=ctx.cfg.output.file_mode)
    posters = ctx.poster_cache.count() if ctx.poster_cache else 0

    log.info(f"\n✓ Saved {len(ordered)} {label.lower()} to {path.name}")
    log.info(f"✓ Total posters in cache: {posters}")
    return RunSummary(kind=kind, saved=len(ordered), skip_count=skip_count, fail_count=fail_count, posters=posters)


def selected_kinds(options: RunOptions) -> list[str]:
    if options.movies_only:
        return [MOVIE]
    if options.shows_only:
        return [SHOW]
    return [MOVIE, SHOW]


def finalize_run(summaries: list[RunSummary]) -> int:
    """Log final summary and return exit code.

    Per-title failures are reported but never change the exit code.
    """
    log.info("\nDone.")
    for summary in summaries:
        label = "Movies" if summary.kind == MOVIE else "Shows"
        log.info(f"  {label}: saved {summary.saved}, skipped {summary.skip_count}, failed {summary.fail_count}")
    log.info("\n✅ All done!")
    return 0


def run(options: RunOptions, cfg: Config) -> int:
    """Execute the ingestion run based on options and config.

    Args:
        options: Parsed run options.
        cfg: Loaded configuration.

    Returns:
        Process exit code.
    """
    ctx = prepare_run_context(options, cfg)
    if ctx is None:
        return 2

    log.info("🎬 WatchBox Explore Content Generator")
    log.info("=====================================")

    summaries = [run_kind(kind, ctx) for kind in selected_kinds(options)]
    return finalize_run(summaries)
