import json
import sys
from datetime import date, timedelta
from pathlib import Path

import pytest
import requests

import main
from core import catalog, enrich, posters, run
from tmdb import service as tmdb_service

RECENT = (date.today() - timedelta(days=60)).isoformat()
NEWER = (date.today() - timedelta(days=10)).isoformat()


def _write_config(path: Path, max_posters: int = 1000) -> None:
    cfg = {
        "tmdb": {"access_token_env": "TMDB_ACCESS_TOKEN", "request_delay_seconds": 0},
        "catalog": {"movie_target_count": 10, "movie_max_pages": 2, "show_target_count": 10, "show_max_pages": 2},
        "posters": {"max_posters": max_posters},
    }
    path.write_text(json.dumps(cfg), encoding="utf-8")


def _us_cert(cert: str) -> dict:
    return {"results": [{"iso_3166_1": "US", "release_dates": [{"certification": cert}]}]}


MOVIE_DETAILS = {
    1: {"id": 1, "overview": "A war.", "release_dates": _us_cert("R"), "genres": [{"id": 28, "name": "Action"}]},
    2: {"id": 2, "overview": "Smiling.", "release_dates": _us_cert("R")},
    3: {"id": 3, "overview": "Feelings.", "release_dates": _us_cert("PG")},
}

SHOW_DETAILS = {
    10: {"id": 10, "content_ratings": {"results": [{"iso_3166_1": "US", "rating": "TV-MA"}]}},
    11: {"id": 11, "content_ratings": {"results": [{"iso_3166_1": "US", "rating": "TV-G"}]}},
}


def _mock_tmdb(monkeypatch) -> dict:
    downloads: dict = {"urls": []}

    def fake_discover(session, token, page, start_date, end_date, **kwargs):
        if page > 1:
            return {"results": []}
        return {
            "results": [
                {"id": 1, "title": "Civil War", "poster_path": "/cw.jpg", "release_date": RECENT, "genre_ids": [28]},
                {"id": 2, "title": "Smile 2", "poster_path": "/s2.jpg", "release_date": NEWER, "genre_ids": [27]},
                {"id": 3, "title": "Inside Out 2", "poster_path": "/io.jpg", "release_date": RECENT, "genre_ids": [16]},
                {"id": 4, "title": "Broken Detail", "poster_path": None, "release_date": RECENT, "genre_ids": [27]},
            ]
        }

    def fake_popular_tv(session, token, page, **kwargs):
        if page > 1:
            return {"results": []}
        return {
            "results": [
                {"id": 10, "name": "Severance", "poster_path": "/sev.jpg", "first_air_date": "2022-02-17"},
                {"id": 11, "name": "Bluey", "poster_path": "/b.jpg", "first_air_date": "2018-10-01"},
                {"id": 12, "name": "Untitled Pilot", "poster_path": "/u.jpg", "first_air_date": ""},
            ]
        }

    def fake_movie_details(session, token, movie_id, language, **kwargs):
        if movie_id not in MOVIE_DETAILS:
            raise requests.HTTPError("404 Client Error")
        return MOVIE_DETAILS[movie_id]

    def fake_tv_details(session, token, show_id, language, **kwargs):
        return SHOW_DETAILS[show_id]

    def fake_providers(session, token, tmdb_id, is_movie, language, region, **kwargs):
        if tmdb_id == 1:
            return {"results": {"US": {"flatrate": [{"provider_name": "Amazon Prime Video"}]}}}
        return {"results": {}}

    def fake_download(session, url, out_path, file_mode=0o664, timeout=20):
        downloads["urls"].append(url)
        out_path.write_bytes(b"img")
        return out_path

    monkeypatch.setattr(catalog, "tmdb_discover_movies", fake_discover)
    monkeypatch.setattr(catalog, "tmdb_popular_tv", fake_popular_tv)
    monkeypatch.setattr(enrich, "tmdb_movie_details", fake_movie_details)
    monkeypatch.setattr(enrich, "tmdb_tv_details", fake_tv_details)
    monkeypatch.setattr(enrich, "tmdb_watch_providers", fake_providers)
    monkeypatch.setattr(posters, "download_image", fake_download)
    monkeypatch.setattr(tmdb_service.time, "sleep", lambda *_args, **_kwargs: None)
    monkeypatch.setenv("TMDB_ACCESS_TOKEN", "token")
    return downloads


def _run_main(monkeypatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["main.py", *args])
    return main.main()


def test_cli_run_writes_both_snapshots(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path)
    downloads = _mock_tmdb(monkeypatch)
    data_dir = tmp_path / "data"

    exit_code = _run_main(monkeypatch, "--config", str(cfg_path), "--data-dir", str(data_dir))

    assert exit_code == 0
    movies = json.loads((data_dir / "streaming-movies-results.json").read_text(encoding="utf-8"))
    assert [m["id"] for m in movies] == ["movie-1", "movie-4", "movie-2"]
    assert movies[0]["services"] == ["prime"]
    assert movies[0]["genres"] == [{"id": 28, "name": "Action"}]
    assert "overview" not in movies[1]
    assert all("_priority" not in m for m in movies)

    shows = json.loads((data_dir / "streaming-shows-results.json").read_text(encoding="utf-8"))
    assert [s["id"] for s in shows] == ["show-10"]
    assert shows[0]["first_air_date"] == "2022-02-17"

    assert sorted(p.name for p in (data_dir / "posters").iterdir()) == ["civil-war.jpg", "severance.jpg", "smile-2.jpg"]
    assert len(downloads["urls"]) == 3

    out = capsys.readouterr().out
    assert "[1/4] Processing: Civil War (ID: 1)" in out
    assert "Skipping G/PG-rated movie: Inside Out 2" in out
    assert "Skipping TV-G/TV-PG-rated show: Bluey" in out
    assert "Done." in out


def test_cli_rerun_skips_cached_posters(tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path)
    downloads = _mock_tmdb(monkeypatch)
    data_dir = tmp_path / "data"

    assert _run_main(monkeypatch, "run", "--config", str(cfg_path), "--data-dir", str(data_dir)) == 0
    first = len(downloads["urls"])
    assert _run_main(monkeypatch, "run", "--config", str(cfg_path), "--data-dir", str(data_dir)) == 0

    assert len(downloads["urls"]) == first


def test_cli_movies_only(tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path)
    _mock_tmdb(monkeypatch)
    data_dir = tmp_path / "data"

    assert _run_main(monkeypatch, "--config", str(cfg_path), "--data-dir", str(data_dir), "--movies-only") == 0

    assert (data_dir / "streaming-movies-results.json").exists()
    assert not (data_dir / "streaming-shows-results.json").exists()


def test_cli_only_flags_are_exclusive(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(sys, "argv", ["main.py", "--movies-only", "--shows-only"])

    with pytest.raises(SystemExit) as exc:
        main.main()

    assert exc.value.code == 2


def test_cli_missing_token_is_setup_error(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path)
    _mock_tmdb(monkeypatch)
    monkeypatch.delenv("TMDB_ACCESS_TOKEN")

    exit_code = _run_main(monkeypatch, "--config", str(cfg_path), "--data-dir", str(tmp_path / "data"))

    assert exit_code == 2
    assert "TMDB_ACCESS_TOKEN" in capsys.readouterr().err


def test_cli_missing_config_path(tmp_path: Path, monkeypatch) -> None:
    assert _run_main(monkeypatch, "--config", str(tmp_path / "nope.json")) == 2


def test_cli_unusable_data_dir(tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path)
    _mock_tmdb(monkeypatch)
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")

    assert _run_main(monkeypatch, "--config", str(cfg_path), "--data-dir", str(blocker / "data")) == 2


def test_cli_fatal_error_exit_code(capsys, tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path)
    _mock_tmdb(monkeypatch)

    def fail_write(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(run, "write_snapshot", fail_write)

    exit_code = _run_main(monkeypatch, "--config", str(cfg_path), "--data-dir", str(tmp_path / "data"))

    assert exit_code == 1
    assert "Fatal error: disk full" in capsys.readouterr().err


def test_cli_title_failure_does_not_abort(tmp_path: Path, monkeypatch) -> None:
    cfg_path = tmp_path / "config.json"
    _write_config(cfg_path)
    _mock_tmdb(monkeypatch)
    real_build = run.build_item

    def flaky_build(record, detail, services, is_movie):
        if record["id"] == 2:
            raise KeyError("boom")
        return real_build(record, detail, services, is_movie)

    monkeypatch.setattr(run, "build_item", flaky_build)
    data_dir = tmp_path / "data"

    assert _run_main(monkeypatch, "--config", str(cfg_path), "--data-dir", str(data_dir), "--movies-only") == 0

    movies = json.loads((data_dir / "streaming-movies-results.json").read_text(encoding="utf-8"))
    assert [m["id"] for m in movies] == ["movie-1", "movie-4"]
