"""
Earnings aggregation over a reporting period.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .usage import NormalizedUsage


@dataclass(frozen=True)
class PeriodTotals:
    """Unrounded totals for all servers in the period."""
    total_minutes: int
    total_earnings: Decimal


def aggregate(usages: Iterable[NormalizedUsage]) -> PeriodTotals:
    """Sum minutes and earnings.

    An empty period is valid and yields zero totals.
    """
    total_minutes = 0
    total_earnings = Decimal("0")
    for usage in usages:
        total_minutes += usage.minutes
        total_earnings += usage.earnings
    return PeriodTotals(total_minutes=total_minutes, total_earnings=total_earnings)
