"""System router for AdBoard.

This module provides the health check endpoint.
"""

import logging

from fastapi import APIRouter, Depends

from api import __version__
from api.dependencies import get_store
from api.schemas.system import HealthResponse
from storage import SQLiteStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


@router.get("/health", response_model=HealthResponse)
async def health_check(store: SQLiteStore = Depends(get_store)):
    """Check API health including database state."""
    database_exists = store.db_path.exists()
    records_count = 0
    status = "healthy"

    try:
        records_count = await store.get_record_count()
    except Exception as e:
        logger.warning(f"Health check could not read the database: {e}")
        status = "degraded"

    return HealthResponse(
        status=status,
        version=__version__,
        database_exists=database_exists,
        records_count=records_count,
    )
