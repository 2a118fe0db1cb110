"""Sync data and exchange rate schema models."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SyncRecordInput(BaseModel):
    """Input model for a single performance record."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    date: datetime
    team: str = Field(..., min_length=1)
    adser: Optional[str] = None
    spend: float = Field(0, ge=0)
    deposit: float = Field(0, ge=0)
    message: float = Field(0, ge=0)
    turnover_adser: float = Field(0, ge=0)
    # Source row id; a row whose id is already stored is skipped
    external_id: Optional[str] = Field(None, min_length=1)


class ImportSyncDataRequest(BaseModel):
    """Request model for bulk record import."""
    records: list[SyncRecordInput]


class ImportSyncDataResponse(BaseModel):
    """Response model for record import."""
    status: str
    records_imported: int
    records_duplicate: int
    message: str


class ExchangeRateInput(BaseModel):
    """Request model for recording an exchange rate."""
    rate: float = Field(..., gt=0)
    timestamp: Optional[datetime] = None


class ExchangeRateResponse(BaseModel):
    """Response model for the exchange rate used in reports."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    rate: float
    timestamp: Optional[datetime] = None
    is_default: bool = False
