"""Shared dependencies for API routers."""

from typing import Mapping, Optional

from fastapi import Depends, HTTPException

from config import ConfigManager, VERTICAL_TEAMS
from services import ReportAggregationService
from storage import SQLiteStore

# Global instances - set by main.py lifespan
_store: Optional[SQLiteStore] = None
_config_manager: Optional[ConfigManager] = None
_vertical_teams: Mapping[str, tuple[str, ...]] = VERTICAL_TEAMS


def set_store(store: SQLiteStore) -> None:
    """Set the global store instance (called from main.py lifespan)."""
    global _store
    _store = store


def set_config_manager(config_manager: ConfigManager) -> None:
    """Set the global config manager instance (called from main.py lifespan)."""
    global _config_manager
    _config_manager = config_manager


def set_vertical_teams(table: Mapping[str, tuple[str, ...]]) -> None:
    """Set the frozen vertical -> teams table (called from main.py lifespan)."""
    global _vertical_teams
    _vertical_teams = table


def get_store() -> SQLiteStore:
    """Dependency for getting the SQLite store."""
    if _store is None:
        raise HTTPException(status_code=503, detail="Store not initialized")
    return _store


def get_config() -> ConfigManager:
    """Dependency for getting the config manager."""
    if _config_manager is None:
        raise HTTPException(status_code=503, detail="Config not initialized")
    return _config_manager


def get_vertical_teams() -> Mapping[str, tuple[str, ...]]:
    """Dependency for getting the vertical -> teams table."""
    return _vertical_teams


def get_report_service(
    store: SQLiteStore = Depends(get_store),
    config: ConfigManager = Depends(get_config),
    verticals: Mapping[str, tuple[str, ...]] = Depends(get_vertical_teams),
) -> ReportAggregationService:
    """Dependency for a report service bound to the current store and config."""
    return ReportAggregationService(
        store,
        verticals=verticals,
        default_exchange_rate=config.get_config().reporting.default_exchange_rate,
    )
