import json
import os
import stat
from pathlib import Path

import pytest

from core import assemble


def test_build_item_base_fields_and_order() -> None:
    record = {"id": 42, "title": "Civil War", "poster_path": "/cw.jpg", "release_date": "2024-04-10", "genre_ids": [28]}
    item = assemble.build_item(record, {"overview": "War.", "runtime": 109}, ["prime"], is_movie=True)

    assert list(item)[:8] == [
        "id",
        "title",
        "external_id",
        "poster_path",
        "list_type",
        "services",
        "release_date",
        "is_movie",
    ]
    assert item["id"] == "movie-42"
    assert item["external_id"] == 42
    assert item["list_type"] == "top"
    assert item["overview"] == "War."
    assert item[assemble.PRIORITY_KEY] == 1


def test_build_show_item_without_detail() -> None:
    record = {"id": 7, "name": "The Bear", "poster_path": "", "first_air_date": "2022-06-23"}
    item = assemble.build_item(record, None, [], is_movie=False)

    assert item["id"] == "show-7"
    assert item["title"] == "The Bear"
    assert item["poster_path"] is None
    assert item["first_air_date"] == "2022-06-23"
    assert "release_date" not in item
    assert item["is_movie"] is False
    assert item["services"] == []


def test_sort_by_priority_is_stable_and_strips_key() -> None:
    items = [
        {"id": "a", assemble.PRIORITY_KEY: 0},
        {"id": "b", assemble.PRIORITY_KEY: 1},
        {"id": "c", assemble.PRIORITY_KEY: 0},
        {"id": "d", assemble.PRIORITY_KEY: 1},
    ]

    ordered = assemble.sort_by_priority(items)

    assert [i["id"] for i in ordered] == ["b", "d", "a", "c"]
    assert all(assemble.PRIORITY_KEY not in i for i in ordered)
    assert assemble.PRIORITY_KEY in items[0]


def test_write_snapshot_replaces_atomically(tmp_path: Path) -> None:
    path = tmp_path / "streaming-movies-results.json"
    path.write_text("[]", encoding="utf-8")

    assemble.write_snapshot(path, [{"id": "movie-1", "title": "Amélie"}])

    assert json.loads(path.read_text(encoding="utf-8")) == [{"id": "movie-1", "title": "Amélie"}]
    assert "Amélie" in path.read_text(encoding="utf-8")
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o644
    assert [p.name for p in tmp_path.iterdir()] == [path.name]


def test_failed_write_keeps_previous_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "streaming-shows-results.json"
    path.write_text('[{"id": "show-1"}]', encoding="utf-8")

    with pytest.raises(TypeError):
        assemble.write_snapshot(path, [{"id": "show-2", "bad": object()}])

    assert json.loads(path.read_text(encoding="utf-8")) == [{"id": "show-1"}]
    assert [p.name for p in tmp_path.iterdir()] == [path.name]


def test_load_snapshot_tolerates_missing_and_corrupt(tmp_path: Path) -> None:
    assert assemble.load_snapshot(tmp_path / "missing.json") == []
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    assert assemble.load_snapshot(bad) == []
