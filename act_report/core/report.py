"""
Report assembly.

Builds the payload handed to the document template. Pure: the output
depends only on the arguments.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple

from .money import MonetaryDisplay, format_fixed
from .period import ReportPeriod, format_date_ru, format_report_date_ru
from .usage import NormalizedUsage


@dataclass(frozen=True)
class ServerRow:
    """One table row of the certificate."""
    index: int
    vm_name: str
    minutes: int
    earnings: str


@dataclass(frozen=True)
class ReportDocument:
    """Everything the template needs to render the certificate."""
    date: str
    start_date: str
    end_date: str
    server_details: Tuple[ServerRow, ...]
    total_earnings: str

    def as_context(self) -> Dict[str, Any]:
        """Plain dict for the template engine."""
        return {
            "date": self.date,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "server_details": [
                {
                    "index": row.index,
                    "vm_name": row.vm_name,
                    "minutes": row.minutes,
                    "earnings": row.earnings,
                }
                for row in self.server_details
            ],
            "total_earnings": self.total_earnings,
        }


def assemble_report(
    period: ReportPeriod,
    usages: Iterable[NormalizedUsage],
    total: MonetaryDisplay
) -> ReportDocument:
    """Assemble the certificate payload.

    Rows keep the order the statistics source returned them in and are
    numbered from 1. Earnings are rendered with exactly two decimals.

    Args:
        period: Reported month; its last day is the certificate date
        usages: Normalized per-server usage
        total: Formatted total earnings

    Returns:
        ReportDocument ready for rendering
    """
    rows = tuple(
        ServerRow(
            index=index,
            vm_name=usage.vm_name,
            minutes=usage.minutes,
            earnings=format_fixed(usage.earnings)
        )
        for index, usage in enumerate(usages, start=1)
    )
    return ReportDocument(
        date=format_report_date_ru(period.end_date),
        start_date=format_date_ru(period.start_date),
        end_date=format_date_ru(period.end_date),
        server_details=rows,
        total_earnings=total.text
    )
