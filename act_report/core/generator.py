"""
Report generation pipeline.

Runs a single pass with no retries:
1. Fetch statistics for the period start date
2. Normalize and aggregate usage
3. Format the total and assemble the certificate payload
4. Render the template and write the document

Collaborators are injected so the pipeline can run against fakes.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from .aggregator import PeriodTotals, aggregate
from .errors import ActReportError
from .money import MonetaryDisplay, format_amount, format_fixed
from .period import (
    PeriodPolicy,
    ReportPeriod,
    compute_report_period,
    month_label_ru,
    statistics_date
)
from .report import ReportDocument, assemble_report
from .usage import (
    DEFAULT_FIXED_RATE,
    MalformedPolicy,
    NormalizedUsage,
    RateSource,
    RawUsageEntry,
    normalize_entries
)

logger = logging.getLogger(__name__)


class StatisticsSource(Protocol):
    def fetch_statistics(self, date_str: str) -> List[RawUsageEntry]: ...


class DocumentRenderer(Protocol):
    def render(self, context: Dict[str, Any]) -> bytes: ...


class DocumentWriter(Protocol):
    def output_filename(self, period: ReportPeriod, last_name: str) -> str: ...

    def write(self, filename: str, data: bytes) -> Path: ...


@dataclass(frozen=True)
class ReportOptions:
    """Business rules chosen per deployment."""
    rate_source: RateSource = RateSource.API
    fixed_rate: Decimal = DEFAULT_FIXED_RATE
    period_policy: PeriodPolicy = PeriodPolicy.PREVIOUS_MONTH
    zero_pad_kopecks: bool = False
    on_malformed: MalformedPolicy = MalformedPolicy.ABORT
    last_name: str = ""


@dataclass(frozen=True)
class ReportPreview:
    """Computed report before rendering."""
    period: ReportPeriod
    usages: List[NormalizedUsage]
    totals: PeriodTotals
    total_display: MonetaryDisplay
    document: ReportDocument


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a successful run."""
    preview: ReportPreview
    output_path: Path


class ReportGenerator:
    """Produces the completed-works certificate for one month."""

    def __init__(
        self,
        source: StatisticsSource,
        renderer: Optional[DocumentRenderer] = None,
        writer: Optional[DocumentWriter] = None,
        options: Optional[ReportOptions] = None
    ):
        self.source = source
        self.renderer = renderer
        self.writer = writer
        self.options = options or ReportOptions()

    def preview(self, now: Union[date, datetime]) -> ReportPreview:
        """Fetch and compute the report without rendering it.

        Raises:
            FetchError, MalformedEntry, FormatError: Propagated unchanged
        """
        options = self.options
        period = compute_report_period(now, options.period_policy)
        date_str = statistics_date(period)

        logger.info("Fetching server statistics for %s", date_str)
        raw_entries = self.source.fetch_statistics(date_str)
        logger.debug("Received %d statistics entries", len(raw_entries))

        usages = normalize_entries(
            raw_entries,
            rate_source=options.rate_source,
            fixed_rate=options.fixed_rate,
            on_malformed=options.on_malformed
        )
        totals = aggregate(usages)
        total_display = format_amount(totals.total_earnings, options.zero_pad_kopecks)
        document = assemble_report(period, usages, total_display)

        month = month_label_ru(period.end_date)
        logger.info("Total gaming time in %s: %d minutes.", month, totals.total_minutes)
        logger.info("Total money in %s: %s rubles.", month, format_fixed(totals.total_earnings))

        return ReportPreview(
            period=period,
            usages=usages,
            totals=totals,
            total_display=total_display,
            document=document
        )

    def run(self, now: Union[date, datetime]) -> GenerationResult:
        """Generate and save the certificate.

        Returns:
            GenerationResult with the computed report and the saved path

        Raises:
            ActReportError: Any expected failure; every error is logged before propagating
        """
        if self.renderer is None or self.writer is None:
            raise ValueError("renderer and writer are required to generate a document")

        try:
            preview = self.preview(now)

            context = preview.document.as_context()
            logger.debug("Data to be rendered in the document: %s", context)
            data = self.renderer.render(context)

            filename = self.writer.output_filename(preview.period, self.options.last_name)
            output_path = self.writer.write(filename, data)
        except ActReportError as e:
            logger.error("Report generation failed: %s", e)
            raise
        except Exception:
            logger.exception("Report generation failed unexpectedly")
            raise

        logger.info("Document saved to %s", output_path)
        return GenerationResult(preview=preview, output_path=output_path)
