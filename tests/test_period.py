"""
Unit tests for the reporting period and Russian date formatting.
"""

from datetime import date, datetime

import pytest

from act_report.core.errors import FormatError
from act_report.core.period import (
    PeriodPolicy,
    ReportPeriod,
    compute_report_period,
    format_date_ru,
    format_report_date_ru,
    month_label_ru,
    month_name_ru,
    statistics_date
)


class TestComputeReportPeriod:
    """Test previous- and current-month periods."""

    def test_previous_month_leap_february(self):
        """Verify the leap day is the end of February 2024."""
        period = compute_report_period(date(2024, 3, 15))
        assert period == ReportPeriod(start_date=date(2024, 2, 1), end_date=date(2024, 2, 29))

    def test_previous_month_common_february(self):
        """Verify February has 28 days in a common year."""
        period = compute_report_period(date(2023, 3, 1))
        assert period.end_date == date(2023, 2, 28)

    def test_january_rolls_back_year(self):
        """Verify a January run reports on December of the previous year."""
        period = compute_report_period(date(2024, 1, 10))
        assert period == ReportPeriod(start_date=date(2023, 12, 1), end_date=date(2023, 12, 31))

    @pytest.mark.parametrize("now, end_day", [
        (date(2024, 5, 31), 30),
        (date(2024, 6, 1), 31),
        (date(2024, 10, 20), 30),
    ])
    def test_month_lengths(self, now, end_day):
        """Verify the end date follows calendar month lengths."""
        assert compute_report_period(now).end_date.day == end_day

    def test_accepts_datetime(self):
        """Verify a datetime "now" is reduced to its date."""
        period = compute_report_period(datetime(2024, 3, 15, 23, 59))
        assert period.start_date == date(2024, 2, 1)

    def test_current_month(self):
        """Verify the current-month policy."""
        period = compute_report_period(date(2024, 2, 10), PeriodPolicy.CURRENT_MONTH)
        assert period == ReportPeriod(start_date=date(2024, 2, 1), end_date=date(2024, 2, 29))

    def test_current_month_december(self):
        """Verify the current-month policy at year end."""
        period = compute_report_period(date(2023, 12, 5), PeriodPolicy.CURRENT_MONTH)
        assert period.end_date == date(2023, 12, 31)

    def test_deterministic(self):
        """Verify the same "now" gives the same period."""
        now = date(2024, 3, 15)
        assert compute_report_period(now) == compute_report_period(now)


class TestRussianDates:
    """Test ru-RU date formatting."""

    def test_format_date(self):
        """Verify two-digit day and genitive month."""
        assert format_date_ru(date(2024, 2, 1)) == "01 февраля 2024"

    def test_format_report_date(self):
        """Verify the certificate date carries the year suffix."""
        assert format_report_date_ru(date(2024, 2, 29)) == "29 февраля 2024 г."

    @pytest.mark.parametrize("month, genitive", [(3, "марта"), (5, "мая"), (8, "августа"), (12, "декабря")])
    def test_genitive_months(self, month, genitive):
        """Verify genitive month names."""
        assert format_date_ru(date(2024, month, 15)) == f"15 {genitive} 2024"

    def test_month_name(self):
        """Verify nominative month names."""
        assert month_name_ru(date(2024, 2, 29)) == "февраль"
        assert month_name_ru(date(2024, 5, 1)) == "май"

    def test_month_label(self):
        """Verify the month label used in log lines."""
        assert month_label_ru(date(2024, 2, 29)) == "февраль 2024 г."

    def test_statistics_date(self):
        """Verify the API is queried with the period start."""
        period = compute_report_period(date(2024, 3, 15))
        assert statistics_date(period) == "2024-02-01"

    @pytest.mark.parametrize("value", ["2024-02-01", None, 20240201])
    def test_non_date_rejected(self, value):
        """Verify formatting errors surface as FormatError."""
        with pytest.raises(FormatError):
            format_date_ru(value)
