"""Sync data repository for performance record operations.

This module provides database operations for the synced marketing
performance rows: windowed lookups by team or operator, operator
discovery, and batch inserts.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any, Iterator, Optional, Sequence

from ..models import PerformanceRecord
from .base import BaseRepository, from_db_time, to_db_time

logger = logging.getLogger(__name__)

# Older SQLite builds allow at most 999 bound parameters per statement
ADSER_CHUNK_SIZE = 500


def _placeholders(values: Sequence[Any]) -> str:
    return ", ".join("?" for _ in values)


def _chunks(values: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for i in range(0, len(values), size):
        yield values[i:i + size]


class SyncDataRepository(BaseRepository):
    """Repository for synced performance records."""

    async def find_matching(
        self,
        start: datetime,
        end: datetime,
        teams: Optional[Sequence[str]] = None,
        adsers: Optional[Sequence[str]] = None,
    ) -> list[PerformanceRecord]:
        """Get records whose date falls in the inclusive window.

        Args:
            start: Window start.
            end: Window end (inclusive).
            teams: Optional filter, record team must be one of these.
            adsers: Optional filter, record operator must be one of these.
                Long lists are queried in chunks of ``ADSER_CHUNK_SIZE``.

        Returns:
            Matching records ordered by date. An empty ``teams`` or
            ``adsers`` sequence matches nothing.
        """
        if (teams is not None and not teams) or (adsers is not None and not adsers):
            return []

        if adsers is None:
            return await self._find_window(start, end, teams, None)

        adsers = list(adsers)
        if len(adsers) <= ADSER_CHUNK_SIZE:
            return await self._find_window(start, end, teams, adsers)

        records: list[PerformanceRecord] = []
        for chunk in _chunks(adsers, ADSER_CHUNK_SIZE):
            records.extend(await self._find_window(start, end, teams, chunk))
        records.sort(key=lambda r: (r.date, r.id))
        return records

    async def _find_window(
        self,
        start: datetime,
        end: datetime,
        teams: Optional[Sequence[str]],
        adsers: Optional[Sequence[str]],
    ) -> list[PerformanceRecord]:
        query = """
            SELECT id, date, team, adser, spend, deposit, message, turnover_adser, external_id
            FROM sync_data
            WHERE date >= ? AND date <= ?
        """
        params: list[Any] = [to_db_time(start), to_db_time(end)]

        if teams is not None:
            query += f" AND team IN ({_placeholders(teams)})"
            params.extend(teams)
        if adsers is not None:
            query += f" AND adser IN ({_placeholders(adsers)})"
            params.extend(adsers)

        query += " ORDER BY date, id"

        rows = await self._fetch_all(query, tuple(params))
        return [self._row_to_record(row) for row in rows]

    async def distinct_adsers(
        self,
        start: datetime,
        end: datetime,
        teams: Sequence[str],
    ) -> list[str]:
        """Get the distinct operator labels active for the given teams.

        Null and empty labels are dropped.

        Returns:
            Sorted list of operator labels.
        """
        if not teams:
            return []

        rows = await self._fetch_all(
            f"""
            SELECT DISTINCT adser
            FROM sync_data
            WHERE date >= ? AND date <= ?
              AND team IN ({_placeholders(teams)})
              AND adser IS NOT NULL AND adser != ''
            ORDER BY adser
            """,
            (
                to_db_time(start),
                to_db_time(end),
                *teams,
            ),
        )
        return [row["adser"] for row in rows]

    async def save_batch(self, records: list[PerformanceRecord]) -> int:
        """Insert performance records.

        Every record is stored, including rows with identical values.
        A record carrying an ``external_id`` that is already stored is
        skipped, so re-importing the same source rows is harmless.

        Args:
            records: Records to store.

        Returns:
            Number of rows actually written.
        """
        if not records:
            return 0

        def _insert(conn: sqlite3.Connection) -> int:
            before = conn.total_changes
            conn.executemany(
                """
                INSERT OR IGNORE INTO sync_data
                (date, team, adser, spend, deposit, message, turnover_adser, external_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        to_db_time(record.date),
                        record.team,
                        record.adser,
                        record.spend,
                        record.deposit,
                        record.message,
                        record.turnover_adser,
                        record.external_id,
                    )
                    for record in records
                ],
            )
            return conn.total_changes - before

        written = await self._run_in_transaction(_insert)
        if written < len(records):
            logger.info(f"Skipped {len(records) - written} sync rows with known external ids")
        return written

    async def count(self) -> int:
        """Return the number of stored records."""
        row = await self._fetch_one("SELECT COUNT(*) AS n FROM sync_data")
        return row["n"] if row else 0

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> PerformanceRecord:
        """Convert a database row to a PerformanceRecord."""
        return PerformanceRecord(
            id=row["id"],
            date=from_db_time(row["date"]),
            team=row["team"],
            adser=row["adser"],
            spend=row["spend"] or 0,
            deposit=row["deposit"] or 0,
            message=row["message"] or 0,
            turnover_adser=row["turnover_adser"] or 0,
            external_id=row["external_id"],
        )
