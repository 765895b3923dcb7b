"""
Reporting period calculation and Russian date formatting.

The period is derived from an injected "now", never from a module-level
clock, so it can be computed for any date in tests or backfills.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Union

from .errors import FormatError

# Genitive forms, as in "01 февраля 2024"
RU_MONTHS_GENITIVE = {
    1: "января", 2: "февраля", 3: "марта", 4: "апреля",
    5: "мая", 6: "июня", 7: "июля", 8: "августа",
    9: "сентября", 10: "октября", 11: "ноября", 12: "декабря"
}

# Nominative forms, as in the output file name "2024-02 (февраль) ..."
RU_MONTHS_NOMINATIVE = {
    1: "январь", 2: "февраль", 3: "март", 4: "апрель",
    5: "май", 6: "июнь", 7: "июль", 8: "август",
    9: "сентябрь", 10: "октябрь", 11: "ноябрь", 12: "декабрь"
}


class PeriodPolicy(Enum):
    """Which calendar month a run reports on."""
    PREVIOUS_MONTH = "previous_month"
    CURRENT_MONTH = "current_month"


@dataclass(frozen=True)
class ReportPeriod:
    """First and last calendar day of the reported month."""
    start_date: date
    end_date: date


def _first_of_month(day: date) -> date:
    return day.replace(day=1)


def _last_of_month(day: date) -> date:
    # Day before the 1st of the following month
    if day.month == 12:
        next_month = date(day.year + 1, 1, 1)
    else:
        next_month = date(day.year, day.month + 1, 1)
    return next_month - timedelta(days=1)


def compute_report_period(
    now: Union[date, datetime],
    policy: PeriodPolicy = PeriodPolicy.PREVIOUS_MONTH
) -> ReportPeriod:
    """Compute the reporting period for a run started at `now`.

    Args:
        now: Current date or datetime
        policy: Report on the month that just ended or the running month

    Returns:
        ReportPeriod from the 1st to the last day of the target month
    """
    today = now.date() if isinstance(now, datetime) else now

    if policy == PeriodPolicy.CURRENT_MONTH:
        return ReportPeriod(start_date=_first_of_month(today), end_date=_last_of_month(today))

    end_date = _first_of_month(today) - timedelta(days=1)
    return ReportPeriod(start_date=_first_of_month(end_date), end_date=end_date)


def _check_date(value) -> date:
    if not isinstance(value, date):
        raise FormatError(f"Expected a date, got {value!r}")
    return value


def format_date_ru(value: date) -> str:
    """Format as "01 февраля 2024"."""
    value = _check_date(value)
    return f"{value.day:02d} {RU_MONTHS_GENITIVE[value.month]} {value.year}"


def format_report_date_ru(value: date) -> str:
    """Format the certificate date as "29 февраля 2024 г."."""
    return f"{format_date_ru(value)} г."


def month_name_ru(value: date) -> str:
    """Nominative month name ("февраль")."""
    return RU_MONTHS_NOMINATIVE[_check_date(value).month]


def month_label_ru(value: date) -> str:
    """Month and year for log lines ("февраль 2024 г.")."""
    value = _check_date(value)
    return f"{RU_MONTHS_NOMINATIVE[value.month]} {value.year} г."


def statistics_date(period: ReportPeriod) -> str:
    """Date the statistics API is queried with (YYYY-MM-DD of the period start)."""
    return period.start_date.isoformat()
