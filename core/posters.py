"""Capacity-bounded poster cache with release-date eviction.

Eviction is not access-based: when the cache is full, a new poster only
gets in if its title's domain date (movie release date or show first-air
date) is strictly newer than the oldest cached poster, which is then
removed. The oldest entry is recomputed from disk on every decision.

A poster's timestamp is resolved, in order, from the date index written at
download time, from the current snapshot item whose title maps to the same
filename, from the file's mtime, and finally treated as infinitely old.
"""

from __future__ import annotations

import json
import math
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from core.assemble import load_snapshot
from core.classify import parse_date
from logger import get_logger
from tmdb.images import build_image_url, download_image
from tmdb.service import TmdbContext

log = get_logger()

POSTER_EXTENSION = ".jpg"


def poster_filename(title: str, extension: str = POSTER_EXTENSION) -> str:
    """Derive a filesystem-safe poster filename from a title.

    "The Matrix: Reloaded!" -> "the-matrix-reloaded.jpg"
    """
    name = title.lower()
    name = re.sub(r"[^a-z0-9\s-]", "", name)
    name = re.sub(r"\s+", "-", name)
    name = re.sub(r"-+", "-", name)
    return name.strip("-") + extension


def date_timestamp(value: object) -> Optional[float]:
    """POSIX timestamp (UTC midnight) for a ``YYYY-MM-DD`` string, or None."""
    parsed = parse_date(value)
    if parsed is None:
        return None
    return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc).timestamp()


@dataclass(frozen=True)
class PosterEntry:
    """A cached poster and the timestamp used to order it for eviction."""

    filename: str
    timestamp: float
    source: str


class PosterIndex:
    """Sidecar JSON mapping poster filename -> domain date."""

    def __init__(self, path: Path | None) -> None:
        self.path = path
        self._dates: Dict[str, str] = {}
        self._loaded = False

    def _load(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        if not self.path or not self.path.exists():
            return
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.warn(f"Ignoring unreadable poster index {self.path}: {e}")
            return
        if isinstance(raw, dict):
            self._dates = {str(k): str(v) for k, v in raw.items() if v}

    def get(self, filename: str) -> Optional[str]:
        self._load()
        return self._dates.get(filename)

    def set(self, filename: str, domain_date: str) -> None:
        self._load()
        self._dates[filename] = domain_date
        self._save()

    def remove(self, filename: str) -> None:
        self._load()
        if self._dates.pop(filename, None) is not None:
            self._save()

    def prune(self, existing: Iterable[str]) -> None:
        """Drop dates for posters that are no longer on disk."""
        self._load()
        keep = set(existing)
        stale = [name for name in self._dates if name not in keep]
        if not stale:
            return
        for name in stale:
            del self._dates[name]
        self._save()

    def _save(self) -> None:
        if not self.path:
            return
        tmp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=self.path.stem + ".", suffix=".tmp", dir=str(self.path.parent))
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._dates, f, indent=2, sort_keys=True)
            tmp_path.replace(self.path)
        except OSError as e:
            log.warn(f"Could not update poster index {self.path}: {e}")
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)


class PosterCache:
    """Poster directory manager enforcing ``max_posters``."""

    def __init__(
        self,
        poster_dir: Path,
        ctx: TmdbContext,
        snapshot_paths: Iterable[Path] = (),
        index_path: Path | None = None,
        max_posters: int = 1000,
        extension: str = POSTER_EXTENSION,
        file_mode: int = 0o664,
    ) -> None:
        self.poster_dir = poster_dir
        self.ctx = ctx
        self.snapshot_paths = list(snapshot_paths)
        self.index = PosterIndex(index_path)
        self.max_posters = max_posters
        self.extension = extension
        self.file_mode = file_mode

    def filenames(self) -> List[str]:
        if not self.poster_dir.is_dir():
            return []
        return sorted(
            p.name for p in self.poster_dir.iterdir() if p.is_file() and p.suffix.lower() == self.extension
        )

    def count(self) -> int:
        return len(self.filenames())

    def _snapshot_dates(self) -> Dict[str, str]:
        dates: Dict[str, str] = {}
        for path in self.snapshot_paths:
            for item in load_snapshot(path):
                title = item.get("title")
                domain_date = item.get("release_date") or item.get("first_air_date")
                if title and domain_date:
                    dates.setdefault(poster_filename(str(title), self.extension), str(domain_date))
        return dates

    def entries(self) -> List[PosterEntry]:
        """Every cached poster with its resolved eviction timestamp."""
        filenames = self.filenames()
        self.index.prune(filenames)
        snapshot_dates = self._snapshot_dates()
        entries: List[PosterEntry] = []
        for filename in filenames:
            timestamp = date_timestamp(self.index.get(filename))
            source = "index"
            if timestamp is None:
                timestamp = date_timestamp(snapshot_dates.get(filename))
                source = "snapshot"
            if timestamp is None:
                try:
                    timestamp = (self.poster_dir / filename).stat().st_mtime
                    source = "mtime"
                except OSError:
                    timestamp = -math.inf
                    source = "unknown"
            entries.append(PosterEntry(filename=filename, timestamp=timestamp, source=source))
        return entries

    def oldest_entry(self) -> Optional[PosterEntry]:
        entries = self.entries()
        if not entries:
            return None
        return min(entries, key=lambda entry: (entry.timestamp, entry.filename))

    def _download(self, poster_ref: str, filename: str, domain_date: str | None) -> bool:
        url = build_image_url(self.ctx.image_base_url, poster_ref)
        try:
            saved = download_image(
                self.ctx.session,
                url,
                self.poster_dir / filename,
                file_mode=self.file_mode,
                timeout=self.ctx.timeout,
            )
        finally:
            self.ctx.pause()
        if not saved:
            return False
        if parse_date(domain_date) is not None:
            self.index.set(filename, str(domain_date))
        return True

    def ensure_poster(
        self,
        poster_ref: str | None,
        filename: str,
        domain_date: str | None,
        current_count: int,
    ) -> bool:
        """Make sure a title's poster is cached.

        Args:
            poster_ref: Catalog-relative poster path (e.g. /abc.jpg).
            filename: Target cache filename, see ``poster_filename``.
            domain_date: Release or first-air date of the title.
            current_count: Number of posters currently cached.

        Returns:
            True if the poster is cached (already or now), False otherwise.
        """
        target = self.poster_dir / filename
        if target.exists():
            return True
        if not poster_ref:
            return False

        # Never trust a stale count to push the cache past capacity.
        count = max(current_count, self.count())
        if count < self.max_posters:
            return self._download(poster_ref, filename, domain_date)

        candidate = date_timestamp(domain_date)
        oldest = self.oldest_entry()
        if oldest is None:
            log.info(f"  ⚠ Poster limit reached ({self.max_posters}), skipping download")
            return False
        if candidate is None or candidate <= oldest.timestamp:
            log.info("  ⚠ Poster limit reached, skipping (not newer than oldest)")
            return False

        log.info(f"  ↻ Replacing oldest poster: {oldest.filename}")
        try:
            (self.poster_dir / oldest.filename).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            log.warn(f"  ✗ Could not remove {oldest.filename}: {e}")
            return False
        self.index.remove(oldest.filename)
        return self._download(poster_ref, filename, domain_date)
