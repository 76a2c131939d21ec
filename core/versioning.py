"""Content version token used to bust client-side image caches.

Callers pass the version explicitly (``versioned_url``) instead of reading
a process-wide counter.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable
from urllib.parse import urlsplit, urlunsplit


def content_version(snapshot_paths: Iterable[Path]) -> int | None:
    """Latest whole-second mtime among existing snapshot files, or None."""
    stamps = []
    for path in snapshot_paths:
        try:
            stamps.append(int(path.stat().st_mtime))
        except FileNotFoundError:
            continue
    return max(stamps) if stamps else None


def versioned_url(url: str, version: int | str | None) -> str:
    """Append ``v=<version>`` to a URL; unchanged when there is no version."""
    if version is None or version == "":
        return url
    parts = urlsplit(url)
    query = f"{parts.query}&v={version}" if parts.query else f"v={version}"
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))
