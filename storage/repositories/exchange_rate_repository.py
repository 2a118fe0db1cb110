"""Exchange rate repository.

Stores the currency conversion rates used to normalize turnover in
reports. Only the most recent rate is ever read.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..models import ExchangeRate
from .base import BaseRepository, from_db_time, to_db_time

logger = logging.getLogger(__name__)


class ExchangeRateRepository(BaseRepository):
    """Repository for recorded exchange rates."""

    async def get_latest(self) -> Optional[ExchangeRate]:
        """Get the most recently recorded rate, or None if none exist."""
        row = await self._fetch_one(
            """
            SELECT id, rate, timestamp
            FROM exchange_rates
            ORDER BY timestamp DESC, id DESC
            LIMIT 1
            """
        )
        if not row:
            return None
        return ExchangeRate(
            id=row["id"],
            rate=row["rate"],
            timestamp=from_db_time(row["timestamp"]),
        )

    async def save(self, rate: ExchangeRate) -> None:
        """Record a new exchange rate."""
        await self._write(
            "INSERT INTO exchange_rates (rate, timestamp) VALUES (?, ?)",
            (rate.rate, to_db_time(rate.timestamp)),
        )
        logger.info(f"Recorded exchange rate {rate.rate} at {rate.timestamp}")
