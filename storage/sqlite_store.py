"""SQLite storage backend for AdBoard.

This module provides the main SQLiteStore class which acts as a facade
for the underlying repository classes.

Example:
    >>> from storage import SQLiteStore
    >>>
    >>> store = SQLiteStore(db_path="~/.adboard/adboard.db")
    >>> await store.initialize()
    >>>
    >>> await store.save_records(records)
    >>> rows = await store.find_records(start, end, teams=["อลิน"])
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from .models import ExchangeRate, PerformanceRecord
from .schema import SCHEMA, MIGRATIONS
from .repositories import ExchangeRateRepository, SyncDataRepository

logger = logging.getLogger(__name__)

__all__ = [
    "SQLiteStore",
    "PerformanceRecord",
    "ExchangeRate",
]


class SQLiteStore:
    """Async SQLite storage for performance records and exchange rates.

    Attributes:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: str | Path = "~/.adboard/adboard.db") -> None:
        """Initialize the SQLite store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path).expanduser()
        self._initialized = False

        self._sync_repo = SyncDataRepository(self.db_path)
        self._rate_repo = ExchangeRateRepository(self.db_path)

    async def initialize(self) -> None:
        """Create the database file, tables and indexes if missing.

        Safe to call repeatedly; every store method calls it first.
        """
        if self._initialized:
            return

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        loop = asyncio.get_event_loop()
        applied = await loop.run_in_executor(None, self._apply_schema)
        self._initialized = True
        logger.info(f"Database ready at {self.db_path} ({applied}/{len(MIGRATIONS)} migrations ran)")

    def _apply_schema(self) -> int:
        """Create tables, then apply each migration not already in place."""
        applied = 0
        with closing(sqlite3.connect(self.db_path)) as conn:
            conn.executescript(SCHEMA)
            for migration in MIGRATIONS:
                try:
                    conn.execute(migration)
                except sqlite3.OperationalError as e:
                    # duplicate column on databases created before the migration
                    logger.debug(f"Skipping migration: {e}")
                    continue
                applied += 1
            conn.commit()
        return applied

    # =========================================================================
    # Performance Records - Delegate to SyncDataRepository
    # =========================================================================

    async def find_records(
        self,
        start: datetime,
        end: datetime,
        teams: Optional[Sequence[str]] = None,
        adsers: Optional[Sequence[str]] = None,
    ) -> list[PerformanceRecord]:
        """Get records in an inclusive date window, filtered by team and/or operator."""
        await self.initialize()
        return await self._sync_repo.find_matching(start, end, teams=teams, adsers=adsers)

    async def distinct_adsers(
        self,
        start: datetime,
        end: datetime,
        teams: Sequence[str],
    ) -> list[str]:
        """Get the distinct operator labels of the given teams in a window."""
        await self.initialize()
        return await self._sync_repo.distinct_adsers(start, end, teams)

    async def save_records(self, records: list[PerformanceRecord]) -> int:
        """Batch insert performance records, returning rows written."""
        await self.initialize()
        return await self._sync_repo.save_batch(records)

    async def get_record_count(self) -> int:
        """Get the number of stored performance records."""
        await self.initialize()
        return await self._sync_repo.count()

    # =========================================================================
    # Exchange Rates - Delegate to ExchangeRateRepository
    # =========================================================================

    async def get_latest_exchange_rate(self) -> Optional[ExchangeRate]:
        """Get the most recently recorded exchange rate."""
        await self.initialize()
        return await self._rate_repo.get_latest()

    async def save_exchange_rate(self, rate: ExchangeRate) -> None:
        """Record a new exchange rate."""
        await self.initialize()
        await self._rate_repo.save(rate)
