"""API Schema models for AdBoard."""

from .dashboard import (
    MetricSetResponse,
    PeriodBucketResponse,
    ChartsResponse,
    VerticalResponse,
    VerticalsResponse,
)

from .sync_data import (
    SyncRecordInput,
    ImportSyncDataRequest,
    ImportSyncDataResponse,
    ExchangeRateInput,
    ExchangeRateResponse,
)

from .system import HealthResponse

__all__ = [
    "MetricSetResponse",
    "PeriodBucketResponse",
    "ChartsResponse",
    "VerticalResponse",
    "VerticalsResponse",
    "SyncRecordInput",
    "ImportSyncDataRequest",
    "ImportSyncDataResponse",
    "ExchangeRateInput",
    "ExchangeRateResponse",
    "HealthResponse",
]
