"""Base repository for the AdBoard SQLite tables.

Every call opens its own connection and runs the blocking sqlite3 work in
the default executor, so repositories can be shared by concurrent requests.
"""

from __future__ import annotations

import asyncio
import sqlite3
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Optional, TypeVar

from ..schema import DATETIME_FORMAT

T = TypeVar("T")


def to_db_time(value: datetime) -> str:
    """Format a naive local datetime the way it is stored."""
    return value.strftime(DATETIME_FORMAT)


def from_db_time(value: str) -> datetime:
    """Parse a stored timestamp."""
    return datetime.strptime(value, DATETIME_FORMAT)


class BaseRepository:
    """Connection handling shared by the table repositories.

    Reads go through ``_fetch_all``/``_fetch_one``; single statements that
    write go through ``_write``; multi-statement writes use
    ``_run_in_transaction``.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path).expanduser()

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[sqlite3.Connection]:
        loop = asyncio.get_event_loop()
        conn = await loop.run_in_executor(
            None,
            lambda: sqlite3.connect(self.db_path, check_same_thread=False),
        )
        conn.row_factory = sqlite3.Row

        try:
            yield conn
        finally:
            await loop.run_in_executor(None, conn.close)

    async def _run(self, work: Callable[[sqlite3.Connection], T]) -> T:
        async with self._connection() as conn:
            loop = asyncio.get_event_loop()
            return await loop.run_in_executor(None, work, conn)

    async def _fetch_all(self, query: str, params: tuple = ()) -> list[sqlite3.Row]:
        return await self._run(lambda conn: conn.execute(query, params).fetchall())

    async def _fetch_one(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        return await self._run(lambda conn: conn.execute(query, params).fetchone())

    async def _write(self, query: str, params: tuple = ()) -> int:
        """Execute one statement and commit.

        Returns:
            Number of rows affected.
        """
        def _execute(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(query, params)
            conn.commit()
            return cursor.rowcount

        return await self._run(_execute)

    async def _run_in_transaction(
        self,
        operations: Callable[[sqlite3.Connection], T],
    ) -> T:
        """Run operations on one connection, committing only if all succeed.

        Args:
            operations: Function that takes the connection and does the writes.

        Returns:
            Result from operations function.
        """
        def _transaction(conn: sqlite3.Connection) -> Any:
            try:
                result = operations(conn)
                conn.commit()
                return result
            except Exception:
                conn.rollback()
                raise

        return await self._run(_transaction)
