"""AdBoard - Storage Module.

The storage layer is organized as follows:
- models.py: Dataclass definitions
- schema.py: Database schema and migrations
- repositories/: Repository classes for each entity type
- sqlite_store.py: Main facade class (delegates to repositories)

Example:
    >>> from storage import SQLiteStore
    >>>
    >>> store = SQLiteStore()
    >>> await store.initialize()
    >>> rate = await store.get_latest_exchange_rate()
"""

from .models import ExchangeRate, PerformanceRecord
from .schema import SCHEMA, MIGRATIONS, DATETIME_FORMAT
from .sqlite_store import SQLiteStore
from .repositories import (
    BaseRepository,
    SyncDataRepository,
    ExchangeRateRepository,
)

__all__ = [
    "SQLiteStore",
    "PerformanceRecord",
    "ExchangeRate",
    "SCHEMA",
    "MIGRATIONS",
    "DATETIME_FORMAT",
    "BaseRepository",
    "SyncDataRepository",
    "ExchangeRateRepository",
]
