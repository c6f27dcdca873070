from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Union

from dateutil.relativedelta import relativedelta

from ..schemas import ALL_PERIODS

Period = Union[str, int]


@dataclass(frozen=True)
class RevenueRecord:
    month: date      # first day of the month the amount belongs to
    amount: float
    id: Optional[str] = None


def is_all_time(period: Period) -> bool:
    return isinstance(period, str) and period.strip().lower() in ALL_PERIODS


def window_start(months: int, today: date) -> date:
    """Earliest month start still inside a trailing window of `months` months."""
    return today - relativedelta(months=months)


def average_revenue(records: Iterable[RevenueRecord], period: Period, today: Optional[date] = None) -> float:
    """
    Average monthly revenue over all records, or over those within the last
    `period` months (inclusive). Months without a record are not filled in and
    two records for the same month count as two samples, so sparse history
    can skew the figure.
    """
    records = list(records)
    if not is_all_time(period):
        months = int(period)
        limit = window_start(months, today or date.today())
        records = [r for r in records if r.month >= limit]
    if not records:
        return 0.0
    return sum(r.amount for r in records) / len(records)
