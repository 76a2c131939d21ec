"""TMDb image URL and download helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import requests

from logger import get_logger

log = get_logger()


def build_image_url(base_url: str, path: str) -> str:
    """Build a full image URL.

    Args:
        base_url: Sized image root, e.g. https://image.tmdb.org/t/p/w500.
        path: Catalog-relative image path (e.g. /poster.jpg).

    Returns:
        Full URL string, or "" when either part is missing.
    """
    if not base_url or not path:
        return ""
    path = path.strip()
    if not path.startswith("/"):
        path = "/" + path
    return base_url.rstrip("/") + path


def download_image(
    session: requests.Session,
    url: str,
    out_path: Path,
    file_mode: int = 0o664,
    timeout: float = 20,
) -> Path | None:
    """Download an image and move it into place atomically.

    The body is written to a temp file next to ``out_path`` and renamed over
    it, so a partial download never appears under the final name.

    Args:
        session: Requests session.
        url: Image URL.
        out_path: Final file path.
        file_mode: Permissions applied to the written file.
        timeout: Request timeout in seconds.

    Returns:
        ``out_path`` on success, or None on failure.
    """
    if not url:
        return None
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        log.warn(f"  ✗ Failed to download poster: {e}")
        return None

    out_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=out_path.stem + ".part.", suffix=".tmp", dir=str(out_path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(resp.content)
        os.chmod(tmp_path, file_mode)
        tmp_path.replace(out_path)
    except OSError as e:
        log.warn(f"  ✗ Failed to write poster {out_path.name}: {e}")
        tmp_path.unlink(missing_ok=True)
        return None
    return out_path
