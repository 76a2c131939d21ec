"""Snapshot item assembly, priority ordering and atomic persistence."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

from core.classify import priority
from core.enrich import project_detail

PRIORITY_KEY = "_priority"
LIST_TYPE = "top"


def item_id(tmdb_id: int, is_movie: bool) -> str:
    return f"{'movie' if is_movie else 'show'}-{tmdb_id}"


def build_item(
    record: Dict[str, Any],
    detail: Dict[str, Any] | None,
    services: Sequence[str],
    is_movie: bool,
) -> Dict[str, Any]:
    """Merge base listing fields and projected detail fields into one item.

    The returned dict still carries the internal ``_priority`` ranking key;
    ``sort_by_priority`` removes it.
    """
    tmdb_id = record["id"]
    item: Dict[str, Any] = {
        "id": item_id(tmdb_id, is_movie),
        "title": record.get("title") if is_movie else record.get("name"),
        "external_id": tmdb_id,
        "poster_path": record.get("poster_path") or None,
        "list_type": LIST_TYPE,
        "services": list(services),
    }
    if is_movie:
        item["release_date"] = record.get("release_date") or None
    else:
        item["first_air_date"] = record.get("first_air_date") or None
    item["is_movie"] = is_movie
    item.update(project_detail(detail, is_movie))
    item[PRIORITY_KEY] = priority(record, detail, is_movie)
    return item


def sort_by_priority(items: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Order items high priority first, keeping input order within a band.

    Returns copies with the internal priority key stripped.
    """
    ranked = sorted(items, key=lambda item: item.get(PRIORITY_KEY, 0), reverse=True)
    return [{k: v for k, v in item.items() if k != PRIORITY_KEY} for item in ranked]


def write_snapshot(path: Path, items: List[Dict[str, Any]], file_mode: int = 0o644) -> Path:
    """Replace the snapshot file with ``items`` in one atomic rename.

    The JSON is written and flushed to a temp file in the same directory
    before it replaces ``path``; readers see either the old or the new file.

    Raises:
        OSError: If the temp file cannot be written or moved into place.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=path.stem + ".", suffix=".tmp", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, file_mode)
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return path


def load_snapshot(path: Path) -> List[Dict[str, Any]]:
    """Read a snapshot file; missing or unreadable files yield an empty list."""
    if not path.exists():
        return []
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return []
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]
