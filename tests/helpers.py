"""Builders shared by the AdBoard test suites."""

from datetime import datetime

from storage import PerformanceRecord


def make_record(when: str, team: str, adser=None, spend=0.0, deposit=0.0,
                message=0.0, turnover_adser=0.0, external_id=None) -> PerformanceRecord:
    """Build a record from a 'YYYY-MM-DD HH:MM:SS' timestamp."""
    return PerformanceRecord(
        date=datetime.strptime(when, "%Y-%m-%d %H:%M:%S"),
        team=team,
        adser=adser,
        spend=spend,
        deposit=deposit,
        message=message,
        turnover_adser=turnover_adser,
        external_id=external_id,
    )
