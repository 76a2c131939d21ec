"""Command-line parsing helpers."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to a config.json file")
    parser.add_argument("--data-dir", help="Directory for snapshots and the poster cache")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")


@dataclass
class RunOptions:
    """Parsed CLI options used by the run pipeline."""

    config_path: Path | None
    data_dir: Path | None
    movies_only: bool
    shows_only: bool
    verbose: bool = False


@dataclass
class DetailsOptions:
    """Parsed CLI options used by the details lookup."""

    config_path: Path | None
    data_dir: Path | None
    tmdb_id: int
    is_movie: bool
    verbose: bool = False


@dataclass
class VersionOptions:
    """Parsed CLI options used by the version command."""

    config_path: Path | None
    data_dir: Path | None
    verbose: bool = False


def _parse_run_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the run command.

    Args:
        argv: Optional argument list.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(description="Generate explore snapshots of popular streaming titles.")
    _add_common_args(parser)
    only = parser.add_mutually_exclusive_group()
    only.add_argument("--movies-only", action="store_true", help="Only refresh the movie snapshot")
    only.add_argument("--shows-only", action="store_true", help="Only refresh the show snapshot")
    return parser.parse_args(argv)


def _parse_details_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Look up one title's details on demand.")
    _add_common_args(parser)
    parser.add_argument("tmdb_id", type=int, help="TMDb id of the title")
    parser.add_argument("--show", action="store_true", help="Treat the id as a TV show")
    return parser.parse_args(argv)


def _parse_version_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the content version of the current snapshots.")
    _add_common_args(parser)
    return parser.parse_args(argv)


def _resolve_optional_path(value: str | None) -> Path | None:
    return Path(value).expanduser().resolve() if value else None


def resolve_config_path(args: argparse.Namespace) -> Path | None:
    """Resolve the config path from CLI arguments.

    Args:
        args: Parsed argparse namespace.

    Returns:
        Resolved config path, ``./config.json`` if present, else None.
    """
    if args.config:
        return Path(args.config).expanduser().resolve()
    default_file = Path.cwd() / "config.json"
    if default_file.exists():
        return default_file.resolve()
    return None


def get_run_options(argv: list[str] | None = None) -> RunOptions:
    """Build a RunOptions instance from CLI arguments."""
    args = _parse_run_args(argv)
    return RunOptions(
        config_path=resolve_config_path(args),
        data_dir=_resolve_optional_path(args.data_dir),
        movies_only=bool(args.movies_only),
        shows_only=bool(args.shows_only),
        verbose=bool(args.verbose),
    )


def get_details_options(argv: list[str] | None = None) -> DetailsOptions:
    """Build a DetailsOptions instance from CLI arguments."""
    args = _parse_details_args(argv)
    return DetailsOptions(
        config_path=resolve_config_path(args),
        data_dir=_resolve_optional_path(args.data_dir),
        tmdb_id=args.tmdb_id,
        is_movie=not args.show,
        verbose=bool(args.verbose),
    )


def get_version_options(argv: list[str] | None = None) -> VersionOptions:
    """Build a VersionOptions instance from CLI arguments."""
    args = _parse_version_args(argv)
    return VersionOptions(
        config_path=resolve_config_path(args),
        data_dir=_resolve_optional_path(args.data_dir),
        verbose=bool(args.verbose),
    )


def parse_cli(argv: list[str] | None = None) -> tuple[str, RunOptions | DetailsOptions | VersionOptions]:
    """Parse command-line arguments and return the command name and options."""
    if argv is None:
        import sys

        args = sys.argv[1:]
    else:
        args = argv
    if args and args[0] == "details":
        return "details", get_details_options(args[1:])
    if args and args[0] == "version":
        return "version", get_version_options(args[1:])
    if args and args[0] == "run":
        return "run", get_run_options(args[1:])
    return "run", get_run_options(args)
