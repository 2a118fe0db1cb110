"""Services package for business logic."""

from services.report_aggregation import (
    DEFAULT_EXCHANGE_RATE,
    Granularity,
    GroupBy,
    MetricSet,
    PeriodBucket,
    RecordTotals,
    ReportAggregationService,
    compute_metrics,
    period_label,
    period_starts,
    period_window,
    round_half_up,
)

__all__ = [
    "DEFAULT_EXCHANGE_RATE",
    "Granularity",
    "GroupBy",
    "MetricSet",
    "PeriodBucket",
    "RecordTotals",
    "ReportAggregationService",
    "compute_metrics",
    "period_label",
    "period_starts",
    "period_window",
    "round_half_up",
]
