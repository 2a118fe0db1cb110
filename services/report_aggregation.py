"""Report aggregation service for the performance dashboard.

Builds the chart series shown on each dashboard tab: for every day or
calendar month in the requested range, totals spend, deposits, messages
and turnover per team (or per operator) and derives:
- cpm: spend / messages
- cost_per_deposit: spend / deposit total
- dollar_per_cover: (turnover / exchange rate) / spend

Every ratio is 0 when its denominator is 0.
"""

from __future__ import annotations

import logging
from calendar import monthrange
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Callable, Mapping, Optional

from config import VERTICAL_TEAMS, teams_for_vertical
from storage import ExchangeRate, PerformanceRecord, SQLiteStore

logger = logging.getLogger(__name__)

DEFAULT_EXCHANGE_RATE = 35.0

# Abbreviated month names for the Thai locale, January first
THAI_MONTH_ABBREVIATIONS = (
    "ม.ค.", "ก.พ.", "มี.ค.", "เม.ย.", "พ.ค.", "มิ.ย.",
    "ก.ค.", "ส.ค.", "ก.ย.", "ต.ค.", "พ.ย.", "ธ.ค.",
)


class Granularity(str, Enum):
    """Bucket size of a report."""

    DAILY = "daily"
    MONTHLY = "monthly"


class GroupBy(str, Enum):
    """Grouping dimension of a report."""

    TEAM = "team"
    ADSER = "adser"


@dataclass
class RecordTotals:
    """Running totals of the numeric record fields."""

    spend: float = 0.0
    deposit: float = 0.0
    message: float = 0.0
    turnover_adser: float = 0.0

    def add(self, record: PerformanceRecord) -> None:
        self.spend += record.spend or 0
        self.deposit += record.deposit or 0
        self.message += record.message or 0
        self.turnover_adser += record.turnover_adser or 0


@dataclass
class MetricSet:
    """Derived metrics for one group key in one period."""

    cpm: float
    cost_per_deposit: float
    deposit_amount: float
    dollar_per_cover: float
    spend: float
    deposit: float
    turnover_adser: float


@dataclass
class PeriodBucket:
    """One point of the chart series."""

    label: str
    date: str  # ISO yyyy-mm-dd of the period start
    metrics: dict[str, MetricSet] = field(default_factory=dict)


def round_half_up(value: float, places: int) -> float:
    """Round a float with ties going up, matching JavaScript's toFixed.

    The float's exact binary value is rounded, so 2.675 (stored just below
    the tie) still rounds down to 2.67.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def compute_metrics(totals: RecordTotals, exchange_rate: float) -> MetricSet:
    """Derive the metric set from totals.

    Cost ratios are rounded to 2 places, dollar_per_cover to 4, ties up.
    """
    cpm = round_half_up(totals.spend / totals.message, 2) if totals.message > 0 else 0.0
    cost_per_deposit = (
        round_half_up(totals.spend / totals.deposit, 2) if totals.deposit > 0 else 0.0
    )
    if totals.spend > 0 and exchange_rate > 0:
        dollar_per_cover = round_half_up((totals.turnover_adser / exchange_rate) / totals.spend, 4)
    else:
        dollar_per_cover = 0.0

    return MetricSet(
        cpm=cpm,
        cost_per_deposit=cost_per_deposit,
        deposit_amount=totals.deposit,
        dollar_per_cover=dollar_per_cover,
        spend=totals.spend,
        deposit=totals.deposit,
        turnover_adser=totals.turnover_adser,
    )


def _next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def period_starts(start: date, end: date, granularity: Granularity) -> list[date]:
    """List the period boundaries between two dates, inclusive.

    Daily periods are every date from start to end. Monthly periods are the
    first day of every month from start's month to end's month. A reversed
    range has no periods.
    """
    if start > end:
        return []

    if granularity is Granularity.DAILY:
        return [start + timedelta(days=i) for i in range((end - start).days + 1)]

    periods = []
    current = start.replace(day=1)
    while current <= end:
        periods.append(current)
        current = _next_month(current)
    return periods


def period_window(period_start: date, granularity: Granularity) -> tuple[datetime, datetime]:
    """Return the first and last instant of a period."""
    if granularity is Granularity.DAILY:
        last_day = period_start
    else:
        days_in_month = monthrange(period_start.year, period_start.month)[1]
        last_day = period_start.replace(day=days_in_month)
    return datetime.combine(period_start, time.min), datetime.combine(last_day, time.max)


def period_label(period_start: date, granularity: Granularity) -> str:
    """Chart label: two-digit day of month, or the Thai month abbreviation."""
    if granularity is Granularity.DAILY:
        return f"{period_start.day:02d}"
    return THAI_MONTH_ABBREVIATIONS[period_start.month - 1]


def _period_key(moment: datetime, granularity: Granularity) -> date:
    day = moment.date()
    return day if granularity is Granularity.DAILY else day.replace(day=1)


class ReportAggregationService:
    """
    Service for building time-bucketed performance reports.

    Records for the whole requested range are fetched in one pass and
    grouped in memory, so the number of store queries does not grow with
    the number of periods or group keys.
    """

    def __init__(
        self,
        store: SQLiteStore,
        verticals: Mapping[str, tuple[str, ...]] = VERTICAL_TEAMS,
        default_exchange_rate: float = DEFAULT_EXCHANGE_RATE,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Args:
            store: Record and exchange rate store.
            verticals: Read-only vertical -> teams table.
            default_exchange_rate: Rate used when none can be read.
            clock: Returns the current moment; periods after it are dropped.
        """
        self.store = store
        self.verticals = verticals
        self.default_exchange_rate = default_exchange_rate
        self.clock = clock

    async def get_latest_rate(self) -> Optional[ExchangeRate]:
        """Return the most recent exchange rate record, or None.

        Never raises: a failing store is logged and treated as no rate.
        """
        try:
            return await self.store.get_latest_exchange_rate()
        except Exception as e:
            logger.warning(
                f"Failed to fetch exchange rate, using default {self.default_exchange_rate}: {e}"
            )
            return None

    async def get_exchange_rate(self) -> float:
        """Return the most recent exchange rate, or the default."""
        latest = await self.get_latest_rate()
        if latest is None:
            logger.info(f"No exchange rate available, using default {self.default_exchange_rate}")
            return self.default_exchange_rate
        return latest.rate

    async def generate_report(
        self,
        start_date: date,
        end_date: date,
        vertical: str,
        group_by: GroupBy = GroupBy.TEAM,
        granularity: Granularity = Granularity.DAILY,
    ) -> list[PeriodBucket]:
        """
        Build the chart series for a vertical.

        Args:
            start_date: First day of the range.
            end_date: Last day of the range (inclusive).
            vertical: Vertical ID; unknown IDs have no teams.
            group_by: Group by team, or by individual operator.
            granularity: One bucket per day or per calendar month.

        Returns:
            Period buckets in chronological order. Periods starting after
            the current moment are omitted.
        """
        group_by = GroupBy(group_by)
        granularity = Granularity(granularity)
        exchange_rate = await self.get_exchange_rate()

        now = self.clock()
        periods = [
            p for p in period_starts(start_date, end_date, granularity)
            if datetime.combine(p, time.min) <= now
        ]
        if not periods:
            return []

        window_start = period_window(periods[0], granularity)[0]
        window_end = period_window(periods[-1], granularity)[1]
        teams = teams_for_vertical(vertical, self.verticals)

        if group_by is GroupBy.TEAM:
            records = await self.store.find_records(window_start, window_end, teams=teams)
        else:
            # Operators are discovered within the vertical's teams, but an
            # operator's totals include their rows from every team.
            adsers = await self.store.distinct_adsers(window_start, window_end, teams)
            records = (
                await self.store.find_records(window_start, window_end, adsers=adsers)
                if adsers else []
            )

        by_period: dict[date, list[PerformanceRecord]] = defaultdict(list)
        for record in records:
            by_period[_period_key(record.date, granularity)].append(record)

        buckets = []
        for period in periods:
            period_records = by_period.get(period, [])

            if group_by is GroupBy.TEAM:
                keys = list(teams)
            else:
                keys = sorted({r.adser for r in period_records if r.team in teams and r.adser})

            totals = {key: RecordTotals() for key in keys}
            for record in period_records:
                key = record.team if group_by is GroupBy.TEAM else record.adser
                if key in totals:
                    totals[key].add(record)

            buckets.append(PeriodBucket(
                label=period_label(period, granularity),
                date=period.isoformat(),
                metrics={key: compute_metrics(t, exchange_rate) for key, t in totals.items()},
            ))

        logger.debug(
            f"Built {len(buckets)} {granularity.value} buckets for {vertical} "
            f"by {group_by.value} from {len(records)} records"
        )
        return buckets
