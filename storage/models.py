"""Data models for AdBoard storage.

This module contains the dataclass definitions returned by the storage
repositories.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class PerformanceRecord:
    """A synced marketing performance row.

    Attributes:
        date: When the activity happened.
        team: Operator group label.
        adser: Individual operator label, if known.
        spend: Advertising spend.
        deposit: Deposit total attributed to the row.
        message: Number of inbound messages.
        turnover_adser: Turnover attributed to the operator.
        external_id: Row identifier in the source system, if it has one.
        id: Database row ID (None until stored).
    """

    date: datetime
    team: str
    adser: Optional[str] = None
    spend: float = 0.0
    deposit: float = 0.0
    message: float = 0.0
    turnover_adser: float = 0.0
    external_id: Optional[str] = None
    id: Optional[int] = None


@dataclass
class ExchangeRate:
    """Currency conversion rate recorded at a point in time."""

    rate: float
    timestamp: datetime
    id: Optional[int] = None
