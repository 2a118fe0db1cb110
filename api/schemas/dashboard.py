"""Dashboard chart schema models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class MetricSetResponse(BaseModel):
    """Metrics for one team or operator in one period."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    cpm: float
    cost_per_deposit: float
    deposit_amount: float
    dollar_per_cover: float
    spend: float
    deposit: float
    turnover_adser: float


class PeriodBucketResponse(BaseModel):
    """One chart point: a day or month and its per-key metrics."""
    period: str
    date: str
    metrics: dict[str, MetricSetResponse]


class ChartsResponse(BaseModel):
    """Response model for the dashboard chart series."""
    success: bool = True
    data: list[PeriodBucketResponse]
    period: str
    view: str


class VerticalResponse(BaseModel):
    """A dashboard tab and the teams it covers."""
    tab: str
    teams: list[str]


class VerticalsResponse(BaseModel):
    """Response model for the list of dashboard tabs."""
    tabs: list[VerticalResponse]
