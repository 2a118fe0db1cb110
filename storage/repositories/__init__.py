"""Repository classes for AdBoard storage.

This package provides repository classes that encapsulate database operations
for specific entity types.
"""

from .base import BaseRepository, from_db_time, to_db_time
from .sync_data_repository import ADSER_CHUNK_SIZE, SyncDataRepository
from .exchange_rate_repository import ExchangeRateRepository

__all__ = [
    "BaseRepository",
    "from_db_time",
    "to_db_time",
    "SyncDataRepository",
    "ExchangeRateRepository",
    "ADSER_CHUNK_SIZE",
]
