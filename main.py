#!/usr/bin/env python3
"""CLI entrypoint for the explore content generator."""

from __future__ import annotations

import json
from pathlib import Path

from cli import DetailsOptions, VersionOptions, parse_cli
from config import Config, load_config
from core.details import lookup_item_details
from core.run import resolve_data_dir, run, snapshot_paths
from core.versioning import content_version
from logger import get_logger
from tmdb.service import init_tmdb

log = get_logger()


def details(options: DetailsOptions, cfg: Config) -> int:
    """Print one title's details as JSON."""
    ctx, error = init_tmdb(cfg)
    if error or ctx is None:
        log.error(error or "TMDb session could not be initialized.")
        return 2
    result = lookup_item_details(ctx, options.tmdb_id, options.is_movie)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0 if result.get("success") else 1


def version(options: VersionOptions, cfg: Config) -> int:
    """Print the content version derived from the snapshot files."""
    data_dir = resolve_data_dir(options.data_dir, cfg)
    stamp = content_version(snapshot_paths(cfg, data_dir))
    if stamp is None:
        log.error(f"No snapshot files found in {data_dir}")
        return 1
    print(json.dumps({"timestamp": stamp}))
    return 0


def _validate_config_path(config_path: Path | None) -> bool:
    if config_path is None:
        return True
    if not config_path.exists():
        log.error(f"Config path not found: {config_path}")
        return False
    if config_path.is_dir():
        log.error(f"Config path must be a file: {config_path}")
        return False
    return True


def main() -> int:
    """Run the CLI entrypoint.

    Returns:
        Process exit code.
    """
    command, options = parse_cli()
    if not _validate_config_path(options.config_path):
        return 2

    try:
        cfg = load_config(options.config_path)
    except (OSError, ValueError) as e:
        log.error(f"Could not load config {options.config_path}: {e}")
        return 2
    log.set_level("DEBUG" if options.verbose else cfg.logging.level)

    try:
        if command == "details":
            return details(options, cfg)
        if command == "version":
            return version(options, cfg)
        return run(options, cfg)
    except Exception as e:
        log.error(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
