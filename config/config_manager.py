"""Configuration management for AdBoard.

Configuration is read from a YAML file in ~/.adboard/ (or the directory
named by ADBOARD_CONFIG_DIR). Every setting has a default, so a missing
file is not an error.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .verticals import DEFAULT_VERTICAL_TEAMS

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration operations fail."""

    pass


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = Field(default="~/.adboard/adboard.db")


class ReportingConfig(BaseModel):
    """Reporting configuration."""

    # Used when no exchange rate can be read from the store
    default_exchange_rate: float = Field(default=35.0, gt=0)


class AppConfig(BaseModel):
    """Application configuration."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)
    verticals: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_VERTICAL_TEAMS.items()}
    )
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000


class ConfigManager:
    """Loads and saves the YAML configuration file.

    Attributes:
        config_dir: Path to the configuration directory.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".adboard"
    CONFIG_FILE = "config.yaml"

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        """Initialize the configuration manager.

        Args:
            config_dir: Custom configuration directory path.
        """
        env_dir = os.getenv("ADBOARD_CONFIG_DIR")
        self.config_dir = config_dir or (Path(env_dir) if env_dir else self.DEFAULT_CONFIG_DIR)
        self._config: Optional[AppConfig] = None

    @property
    def config_path(self) -> Path:
        """Path to the configuration file."""
        return self.config_dir / self.CONFIG_FILE

    def load(self) -> AppConfig:
        """Load configuration from disk and the environment.

        Returns:
            The loaded AppConfig.

        Raises:
            ConfigError: If the file can't be parsed or holds invalid values.
        """
        data: dict[str, Any] = {}
        if self.config_path.exists():
            try:
                data = yaml.safe_load(self.config_path.read_text(encoding="utf-8")) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid configuration format: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(
                    f"Configuration at {self.config_path} must be a mapping"
                )
        else:
            logger.info(f"No configuration at {self.config_path}, using defaults")

        db_path = os.getenv("ADBOARD_DB_PATH")
        if db_path:
            data.setdefault("database", {})
            data["database"]["path"] = db_path

        try:
            self._config = AppConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
        return self._config

    def get_config(self) -> AppConfig:
        """Get the current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def save(self, config: AppConfig) -> None:
        """Write configuration to disk.

        Raises:
            ConfigError: If the file can't be written.
        """
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(
                yaml.safe_dump(config.model_dump(), allow_unicode=True, sort_keys=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise ConfigError(f"Failed to save configuration: {e}") from e
        self._config = config
        logger.info(f"Configuration saved to {self.config_path}")
