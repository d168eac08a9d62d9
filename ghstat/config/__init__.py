"""
Config helpers for ghstat.
"""

from ghstat.config.loader import (
    DEFAULT_CONFIG_NAME,
    default_config_dir,
    get_greenhouse_settings,
    load_config,
    load_env_files,
)
from ghstat.config.models import GhstatConfig, GreenhouseSettings, Lead

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "GhstatConfig",
    "GreenhouseSettings",
    "Lead",
    "default_config_dir",
    "get_greenhouse_settings",
    "load_config",
    "load_env_files",
]
