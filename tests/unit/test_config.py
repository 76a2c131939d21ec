import json
from pathlib import Path

from config import load_config
from config.loader import config_from_dict
from config.merge import merge_dicts


def test_defaults_loaded_from_module_files() -> None:
    cfg = load_config(None)

    assert cfg.tmdb.base_url == "https://api.themoviedb.org/3"
    assert cfg.tmdb.image_base_url == "https://image.tmdb.org/t/p/w500"
    assert cfg.tmdb.access_token_env == "TMDB_ACCESS_TOKEN"
    assert cfg.catalog.movie_target_count == 400
    assert cfg.catalog.movie_max_pages == 50
    assert cfg.catalog.show_max_pages == 40
    assert cfg.catalog.service_map["Max"] == "hbomax"
    assert cfg.output.file_mode == 0o644
    assert cfg.output.dir_mode == 0o755
    assert cfg.posters.max_posters == 1000
    assert cfg.posters.file_mode == 0o664
    assert cfg.logging.level == "INFO"


def test_user_config_overrides_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "tmdb": {"region": "CA", "request_delay_seconds": "0.5"},
                "catalog": {"service_map": {"Crave": "crave"}},
                "posters": {"max_posters": 50, "file_mode": "0640"},
                "logging": {"level": "debug"},
            }
        ),
        encoding="utf-8",
    )

    cfg = load_config(path)

    assert cfg.tmdb.region == "CA"
    assert cfg.tmdb.language == "en-US"
    assert cfg.tmdb.request_delay_seconds == 0.5
    assert cfg.catalog.service_map == {"Crave": "crave"}
    assert cfg.catalog.show_target_count == 400
    assert cfg.posters.max_posters == 50
    assert cfg.posters.file_mode == 0o640
    assert cfg.logging.level == "DEBUG"


def test_bad_values_fall_back() -> None:
    cfg = config_from_dict({"catalog": {"movie_max_pages": "many"}, "output": {"file_mode": "rw"}})

    assert cfg.catalog.movie_max_pages == 50
    assert cfg.output.file_mode == 0o644


def test_merge_dicts_nested() -> None:
    merged = merge_dicts({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"c": 5}})

    assert merged == {"a": {"b": 1, "c": 5}, "d": 3}
