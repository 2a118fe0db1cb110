"""AdBoard - Configuration Module.

This module provides YAML-backed configuration and the static product
vertical table.
"""

from .config_manager import AppConfig, ConfigError, ConfigManager
from .logging_config import configure_logging
from .verticals import (
    DEFAULT_VERTICAL_TEAMS,
    VERTICAL_TEAMS,
    build_vertical_teams,
    teams_for_vertical,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "ConfigManager",
    "configure_logging",
    "DEFAULT_VERTICAL_TEAMS",
    "VERTICAL_TEAMS",
    "build_vertical_teams",
    "teams_for_vertical",
]
