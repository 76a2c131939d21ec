"""Config package facade."""

from config.loader import config_from_dict, load_config
from config.models import (
    CatalogConfig,
    Config,
    LoggingConfig,
    OutputConfig,
    PosterConfig,
    TmdbConfig,
)

__all__ = [
    "CatalogConfig",
    "Config",
    "LoggingConfig",
    "OutputConfig",
    "PosterConfig",
    "TmdbConfig",
    "config_from_dict",
    "load_config",
]
