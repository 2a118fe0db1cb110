"""Sync data router for AdBoard.

This module provides endpoints for loading the data behind the dashboard:
- Bulk import of synced performance records
- Recording and reading the exchange rate used for dollar-per-cover
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_report_service, get_store
from api.schemas.sync_data import (
    ExchangeRateInput,
    ExchangeRateResponse,
    ImportSyncDataRequest,
    ImportSyncDataResponse,
)
from services import ReportAggregationService
from storage import ExchangeRate, PerformanceRecord, SQLiteStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Sync Data"])


def _to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive local time."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


@router.post("/sync-data/import", response_model=ImportSyncDataResponse)
async def import_sync_data(
    request: ImportSyncDataRequest,
    store: SQLiteStore = Depends(get_store),
):
    """Import performance records in bulk.

    Every row is stored; a row whose externalId is already stored is
    skipped and counted as a duplicate.
    """
    records = [
        PerformanceRecord(
            date=_to_local_naive(r.date),
            team=r.team,
            adser=r.adser or None,
            spend=r.spend,
            deposit=r.deposit,
            message=r.message,
            turnover_adser=r.turnover_adser,
            external_id=r.external_id,
        )
        for r in request.records
    ]

    try:
        count = await store.save_records(records)
    except Exception:
        logger.exception(f"Sync data import of {len(records)} records failed")
        raise HTTPException(status_code=500, detail="Internal server error")

    logger.info(f"Imported {count} of {len(records)} sync records")
    return ImportSyncDataResponse(
        status="completed",
        records_imported=count,
        records_duplicate=len(records) - count,
        message=f"Successfully imported {count} records.",
    )


@router.get("/exchange-rates/latest", response_model=ExchangeRateResponse)
async def get_latest_exchange_rate(
    service: ReportAggregationService = Depends(get_report_service),
):
    """Get the exchange rate reports currently use.

    Falls back to the configured default when no rate is recorded.
    """
    latest = await service.get_latest_rate()
    if latest is None:
        return ExchangeRateResponse(rate=service.default_exchange_rate, is_default=True)
    return ExchangeRateResponse(rate=latest.rate, timestamp=latest.timestamp, is_default=False)


@router.post("/exchange-rates", response_model=ExchangeRateResponse)
async def record_exchange_rate(
    request: ExchangeRateInput,
    store: SQLiteStore = Depends(get_store),
):
    """Record a new exchange rate."""
    rate = ExchangeRate(
        rate=request.rate,
        timestamp=_to_local_naive(request.timestamp) or datetime.now(),
    )
    try:
        await store.save_exchange_rate(rate)
    except Exception:
        logger.exception("Saving exchange rate failed")
        raise HTTPException(status_code=500, detail="Internal server error")

    return ExchangeRateResponse(rate=rate.rate, timestamp=rate.timestamp, is_default=False)
