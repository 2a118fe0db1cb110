"""Tests for the report aggregation service.

This module tests:
- Period generation, windows and labels
- Metric formulas, zero guards and rounding
- Team and operator aggregation against a real SQLite store
- Exchange rate fallback
- Future period filtering

Run with: pytest tests/test_report_aggregation.py -v
"""

import sqlite3
from datetime import date, datetime
from unittest.mock import AsyncMock

import pytest

from services.report_aggregation import (
    DEFAULT_EXCHANGE_RATE,
    Granularity,
    GroupBy,
    RecordTotals,
    ReportAggregationService,
    compute_metrics,
    period_label,
    period_starts,
    period_window,
    round_half_up,
)
from storage import ExchangeRate
from tests.helpers import make_record

LOTTERY_TEAMS = ["สาวอ้อย", "อลิน", "อัญญาC", "อัญญาD"]


def fixed_clock(when: datetime):
    return lambda: when


LATE_2024 = fixed_clock(datetime(2024, 12, 31, 12, 0, 0))


class TestPeriodStarts:
    """Tests for period boundary generation."""

    def test_daily_inclusive(self):
        periods = period_starts(date(2024, 1, 30), date(2024, 2, 2), Granularity.DAILY)
        assert periods == [
            date(2024, 1, 30),
            date(2024, 1, 31),
            date(2024, 2, 1),
            date(2024, 2, 2),
        ]

    def test_single_day(self):
        assert period_starts(date(2024, 1, 15), date(2024, 1, 15), Granularity.DAILY) == [
            date(2024, 1, 15)
        ]

    def test_monthly_starts_at_first_of_month(self):
        periods = period_starts(date(2024, 1, 15), date(2024, 3, 10), Granularity.MONTHLY)
        assert periods == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]

    def test_monthly_crosses_year(self):
        periods = period_starts(date(2023, 11, 30), date(2024, 1, 1), Granularity.MONTHLY)
        assert periods == [date(2023, 11, 1), date(2023, 12, 1), date(2024, 1, 1)]

    def test_reversed_range_is_empty(self):
        assert period_starts(date(2024, 2, 1), date(2024, 1, 1), Granularity.DAILY) == []
        assert period_starts(date(2024, 2, 1), date(2024, 1, 1), Granularity.MONTHLY) == []


class TestPeriodWindow:
    """Tests for bucket start/end instants."""

    def test_daily_window(self):
        start, end = period_window(date(2024, 1, 15), Granularity.DAILY)
        assert start == datetime(2024, 1, 15, 0, 0, 0)
        assert end == datetime(2024, 1, 15, 23, 59, 59, 999999)

    def test_monthly_window_leap_february(self):
        start, end = period_window(date(2024, 2, 1), Granularity.MONTHLY)
        assert start == datetime(2024, 2, 1)
        assert end.date() == date(2024, 2, 29)
        assert (end.hour, end.minute, end.second) == (23, 59, 59)


class TestPeriodLabel:
    """Tests for chart labels."""

    def test_daily_label_is_two_digit_day(self):
        assert period_label(date(2024, 1, 5), Granularity.DAILY) == "05"
        assert period_label(date(2024, 1, 25), Granularity.DAILY) == "25"

    def test_monthly_label_is_thai_abbreviation(self):
        assert period_label(date(2024, 1, 1), Granularity.MONTHLY) == "ม.ค."
        assert period_label(date(2024, 4, 1), Granularity.MONTHLY) == "เม.ย."
        assert period_label(date(2024, 12, 1), Granularity.MONTHLY) == "ธ.ค."


class TestComputeMetrics:
    """Tests for derived metric formulas."""

    def test_reference_values(self):
        totals = RecordTotals(spend=100, deposit=10, message=50, turnover_adser=200)
        metrics = compute_metrics(totals, 35.0)

        assert metrics.cpm == 2.00
        assert metrics.cost_per_deposit == 10.00
        assert metrics.deposit_amount == 10
        assert metrics.dollar_per_cover == 0.0571
        assert metrics.spend == 100
        assert metrics.deposit == 10
        assert metrics.turnover_adser == 200

    def test_zero_totals_give_zero_ratios(self):
        metrics = compute_metrics(RecordTotals(), 35.0)
        assert metrics.cpm == 0
        assert metrics.cost_per_deposit == 0
        assert metrics.dollar_per_cover == 0
        assert metrics.deposit_amount == 0

    def test_zero_rate_gives_zero_dollar_per_cover(self):
        totals = RecordTotals(spend=100, deposit=10, message=50, turnover_adser=200)
        assert compute_metrics(totals, 0).dollar_per_cover == 0

    def test_spend_without_messages_or_deposits(self):
        metrics = compute_metrics(RecordTotals(spend=80, turnover_adser=70), 35.0)
        assert metrics.cpm == 0
        assert metrics.cost_per_deposit == 0
        assert metrics.dollar_per_cover == 0.025

    def test_rounding_precision(self):
        totals = RecordTotals(spend=10, deposit=7, message=3, turnover_adser=100)
        metrics = compute_metrics(totals, 35.0)

        assert metrics.cpm == 3.33
        assert metrics.cost_per_deposit == 1.43
        # (100 / 35) / 10 = 0.285714...
        assert metrics.dollar_per_cover == 0.2857

    def test_ties_round_up(self):
        # 100.5 / 4 = 25.125 and 1 / 8 = 0.125 are exact ties
        metrics = compute_metrics(RecordTotals(spend=100.5, message=4, deposit=8), 35.0)
        assert metrics.cpm == 25.13
        assert compute_metrics(RecordTotals(spend=1, deposit=8), 35.0).cost_per_deposit == 0.13

    def test_dollar_per_cover_tie_rounds_up(self):
        # (35 / 35) / 32 = 0.03125
        totals = RecordTotals(spend=32, turnover_adser=35)
        assert compute_metrics(totals, 35.0).dollar_per_cover == 0.0313

    def test_round_half_up_uses_exact_float_value(self):
        assert round_half_up(0.125, 2) == 0.13
        # 2.675 is stored as 2.67499999...
        assert round_half_up(2.675, 2) == 2.67

    def test_totals_treat_none_as_zero(self):
        record = make_record("2024-01-15 10:00:00", "อลิน", spend=5)
        record.deposit = None
        totals = RecordTotals()
        totals.add(record)
        totals.add(record)
        assert totals.spend == 10
        assert totals.deposit == 0


@pytest.mark.asyncio
class TestTeamReport:
    """Tests for reports grouped by team."""

    async def test_reference_scenario(self, temp_store):
        """One record per lottery team on one day, rate 35."""
        await temp_store.save_exchange_rate(ExchangeRate(rate=35.0, timestamp=datetime(2024, 1, 1)))
        await temp_store.save_records([
            make_record("2024-01-15 10:00:00", team, spend=100, deposit=10, message=50, turnover_adser=200)
            for team in LOTTERY_TEAMS
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 15), date(2024, 1, 15), "lottery", GroupBy.TEAM, Granularity.DAILY
        )

        assert len(buckets) == 1
        bucket = buckets[0]
        assert bucket.label == "15"
        assert bucket.date == "2024-01-15"
        assert list(bucket.metrics) == LOTTERY_TEAMS
        for team in LOTTERY_TEAMS:
            metrics = bucket.metrics[team]
            assert metrics.cpm == 2.00
            assert metrics.cost_per_deposit == 10.00
            assert metrics.deposit_amount == 10
            assert metrics.dollar_per_cover == 0.0571

    async def test_identical_rows_both_counted(self, temp_store):
        """Same operator, same spend, same moment on two ad accounts."""
        row = dict(adser="Ann", spend=100, deposit=5, message=20, turnover_adser=350)
        await temp_store.save_records([
            make_record("2024-01-15 10:00:00", "อลิน", **row),
            make_record("2024-01-15 10:00:00", "อลิน", **row),
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        team_view = await service.generate_report(date(2024, 1, 15), date(2024, 1, 15), "lottery")
        adser_view = await service.generate_report(
            date(2024, 1, 15), date(2024, 1, 15), "lottery", GroupBy.ADSER
        )

        for metrics in (team_view[0].metrics["อลิน"], adser_view[0].metrics["Ann"]):
            assert metrics.spend == 200
            assert metrics.deposit == 10
            assert metrics.turnover_adser == 700
            assert metrics.cpm == 5.0

    async def test_every_team_present_with_zero_metrics(self, temp_store):
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 1), date(2024, 1, 3), "baccarat", GroupBy.TEAM, Granularity.DAILY
        )

        assert [b.label for b in buckets] == ["01", "02", "03"]
        for bucket in buckets:
            assert set(bucket.metrics) == {"สเปชบาร์", "บาล้าน"}
            for metrics in bucket.metrics.values():
                assert metrics.cpm == 0
                assert metrics.cost_per_deposit == 0
                assert metrics.dollar_per_cover == 0

    async def test_sums_rows_within_day_and_ignores_other_teams(self, temp_store):
        await temp_store.save_records([
            make_record("2024-01-15 00:00:00", "อลิน", spend=30, message=10),
            make_record("2024-01-15 23:59:59", "อลิน", spend=70, message=40),
            make_record("2024-01-16 00:00:00", "อลิน", spend=999, message=1),
            make_record("2024-01-15 12:00:00", "สเปชบาร์", spend=500, message=5),
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 15), date(2024, 1, 16), "lottery", GroupBy.TEAM, Granularity.DAILY
        )

        assert buckets[0].metrics["อลิน"].spend == 100
        assert buckets[0].metrics["อลิน"].cpm == 2.00
        assert buckets[1].metrics["อลิน"].spend == 999
        assert "สเปชบาร์" not in buckets[0].metrics

    async def test_vertical_without_teams(self, temp_store):
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 1), date(2024, 1, 2), "horse-racing", GroupBy.TEAM, Granularity.DAILY
        )

        assert len(buckets) == 2
        assert all(b.metrics == {} for b in buckets)

    async def test_unknown_vertical_has_no_teams(self, temp_store):
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 1), date(2024, 1, 1), "poker", GroupBy.TEAM, Granularity.DAILY
        )

        assert len(buckets) == 1
        assert buckets[0].metrics == {}

    async def test_monthly_buckets(self, temp_store):
        await temp_store.save_records([
            make_record("2024-01-02 09:00:00", "บาล้าน", spend=40, deposit=2),
            make_record("2024-01-31 23:00:00", "บาล้าน", spend=60, deposit=3),
            make_record("2024-02-29 08:00:00", "บาล้าน", spend=10, deposit=1),
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 15), date(2024, 3, 10), "baccarat", GroupBy.TEAM, Granularity.MONTHLY
        )

        assert [b.label for b in buckets] == ["ม.ค.", "ก.พ.", "มี.ค."]
        assert [b.date for b in buckets] == ["2024-01-01", "2024-02-01", "2024-03-01"]
        assert buckets[0].metrics["บาล้าน"].spend == 100
        assert buckets[0].metrics["บาล้าน"].cost_per_deposit == 20.00
        assert buckets[1].metrics["บาล้าน"].deposit_amount == 1
        assert buckets[2].metrics["บาล้าน"].spend == 0

    async def test_idempotent(self, temp_store):
        await temp_store.save_records([
            make_record("2024-01-15 10:00:00", "อลิน", adser="Ann", spend=12, deposit=3, message=7, turnover_adser=90),
            make_record("2024-01-16 10:00:00", "อัญญาC", adser="Bob", spend=8, deposit=1, message=2, turnover_adser=40),
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        for group_by in GroupBy:
            first = await service.generate_report(
                date(2024, 1, 1), date(2024, 1, 31), "lottery", group_by, Granularity.DAILY
            )
            second = await service.generate_report(
                date(2024, 1, 1), date(2024, 1, 31), "lottery", group_by, Granularity.DAILY
            )
            assert first == second


@pytest.mark.asyncio
class TestAdserReport:
    """Tests for reports grouped by individual operator."""

    async def test_operator_merged_across_teams(self, temp_store):
        await temp_store.save_records([
            make_record("2024-01-15 09:00:00", "สาวอ้อย", adser="Ann", spend=60, deposit=4, message=20, turnover_adser=100),
            make_record("2024-01-15 15:00:00", "อลิน", adser="Ann", spend=40, deposit=6, message=30, turnover_adser=100),
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 15), date(2024, 1, 15), "lottery", GroupBy.ADSER, Granularity.DAILY
        )

        assert list(buckets[0].metrics) == ["Ann"]
        metrics = buckets[0].metrics["Ann"]
        assert metrics.spend == 100
        assert metrics.deposit == 10
        assert metrics.cpm == 2.00
        assert metrics.cost_per_deposit == 10.00
        assert metrics.dollar_per_cover == round((200 / DEFAULT_EXCHANGE_RATE) / 100, 4)

    async def test_operator_totals_include_rows_from_other_verticals(self, temp_store):
        """Operators are found via the tab's teams but totalled across all teams."""
        await temp_store.save_records([
            make_record("2024-01-15 09:00:00", "อลิน", adser="Ann", spend=10),
            make_record("2024-01-15 10:00:00", "สเปชบาร์", adser="Ann", spend=5),
            make_record("2024-01-15 11:00:00", "สเปชบาร์", adser="Zed", spend=7),
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 15), date(2024, 1, 15), "lottery", GroupBy.ADSER, Granularity.DAILY
        )

        assert list(buckets[0].metrics) == ["Ann"]
        assert buckets[0].metrics["Ann"].spend == 15

    async def test_operators_discovered_per_period(self, temp_store):
        await temp_store.save_records([
            make_record("2024-01-15 09:00:00", "อลิน", adser="Bob", spend=10),
            make_record("2024-01-16 09:00:00", "อลิน", adser="Ann", spend=20),
            make_record("2024-01-16 10:00:00", "อัญญาD", adser="Bob", spend=30),
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 15), date(2024, 1, 17), "lottery", GroupBy.ADSER, Granularity.DAILY
        )

        assert list(buckets[0].metrics) == ["Bob"]
        assert list(buckets[1].metrics) == ["Ann", "Bob"]
        assert buckets[2].metrics == {}

    async def test_missing_operator_labels_are_skipped(self, temp_store):
        await temp_store.save_records([
            make_record("2024-01-15 09:00:00", "อลิน", adser=None, spend=10),
            make_record("2024-01-15 10:00:00", "อลิน", adser="", spend=20),
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 15), date(2024, 1, 15), "lottery", GroupBy.ADSER, Granularity.DAILY
        )

        assert buckets[0].metrics == {}

    async def test_accepts_string_selectors(self, temp_store):
        await temp_store.save_records([
            make_record("2024-03-05 09:00:00", "บาล้าน", adser="Cat", spend=10, message=4),
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 3, 1), date(2024, 3, 31), "baccarat", "adser", "monthly"
        )

        assert len(buckets) == 1
        assert buckets[0].label == "มี.ค."
        assert buckets[0].metrics["Cat"].cpm == 2.50


@pytest.mark.asyncio
class TestExchangeRate:
    """Tests for exchange rate lookup and fallback."""

    async def test_uses_latest_rate(self, temp_store):
        await temp_store.save_exchange_rate(ExchangeRate(rate=30.0, timestamp=datetime(2024, 1, 1)))
        await temp_store.save_exchange_rate(ExchangeRate(rate=40.0, timestamp=datetime(2024, 6, 1)))
        await temp_store.save_records([
            make_record("2024-01-15 10:00:00", "อลิน", spend=100, turnover_adser=200),
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        assert await service.get_exchange_rate() == 40.0
        buckets = await service.generate_report(
            date(2024, 1, 15), date(2024, 1, 15), "lottery", GroupBy.TEAM, Granularity.DAILY
        )
        assert buckets[0].metrics["อลิน"].dollar_per_cover == 0.05

    async def test_no_rate_uses_default(self, temp_store):
        await temp_store.save_records([
            make_record("2024-01-15 10:00:00", "อลิน", spend=100, deposit=10, message=50, turnover_adser=200),
        ])
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        assert await service.get_exchange_rate() == 35.0
        buckets = await service.generate_report(
            date(2024, 1, 15), date(2024, 1, 15), "lottery", GroupBy.TEAM, Granularity.DAILY
        )
        assert buckets[0].metrics["อลิน"].dollar_per_cover == 0.0571

    async def test_failing_rate_lookup_uses_default(self, temp_store):
        await temp_store.save_records([
            make_record("2024-01-15 10:00:00", "อลิน", spend=100, turnover_adser=200),
        ])
        temp_store.get_latest_exchange_rate = AsyncMock(
            side_effect=sqlite3.OperationalError("no such table: exchange_rates")
        )
        service = ReportAggregationService(temp_store, default_exchange_rate=20.0, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 15), date(2024, 1, 15), "lottery", GroupBy.TEAM, Granularity.DAILY
        )

        assert buckets[0].metrics["อลิน"].dollar_per_cover == 0.1
        assert await service.get_latest_rate() is None


@pytest.mark.asyncio
class TestFuturePeriods:
    """Tests that periods after the current moment are dropped."""

    async def test_daily_periods_after_now_dropped(self, temp_store):
        service = ReportAggregationService(
            temp_store, clock=fixed_clock(datetime(2024, 1, 10, 12, 0, 0))
        )

        buckets = await service.generate_report(
            date(2024, 1, 8), date(2024, 1, 15), "lottery", GroupBy.TEAM, Granularity.DAILY
        )

        assert [b.date for b in buckets] == ["2024-01-08", "2024-01-09", "2024-01-10"]

    async def test_monthly_periods_after_now_dropped(self, temp_store):
        service = ReportAggregationService(
            temp_store, clock=fixed_clock(datetime(2024, 2, 10, 8, 0, 0))
        )

        buckets = await service.generate_report(
            date(2024, 1, 1), date(2024, 4, 30), "lottery", GroupBy.TEAM, Granularity.MONTHLY
        )

        assert [b.date for b in buckets] == ["2024-01-01", "2024-02-01"]

    async def test_range_entirely_in_future_is_empty(self, temp_store):
        temp_store.find_records = AsyncMock()
        service = ReportAggregationService(
            temp_store, clock=fixed_clock(datetime(2024, 1, 1, 0, 0, 0))
        )

        buckets = await service.generate_report(
            date(2024, 2, 1), date(2024, 2, 5), "lottery", GroupBy.TEAM, Granularity.DAILY
        )

        assert buckets == []
        temp_store.find_records.assert_not_called()

    async def test_reversed_range_is_empty(self, temp_store):
        service = ReportAggregationService(temp_store, clock=LATE_2024)

        buckets = await service.generate_report(
            date(2024, 1, 5), date(2024, 1, 1), "lottery", GroupBy.TEAM, Granularity.DAILY
        )

        assert buckets == []
