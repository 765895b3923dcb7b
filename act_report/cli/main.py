"""
CLI interface for the completed-works certificate generator.

Provides command-line access to report generation and inspection.
"""

import logging
import sys
from datetime import date, datetime
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from act_report.config.loader import Settings, load_settings
from act_report.core.errors import ActReportError
from act_report.core.generator import ReportGenerator, ReportPreview
from act_report.core.money import format_fixed
from act_report.core.period import (
    PeriodPolicy,
    compute_report_period,
    format_date_ru,
    statistics_date
)
from act_report.render.docx_renderer import DocxRenderer
from act_report.sdk.statistics_client import StatisticsClient
from act_report.storage.writer import ReportWriter, output_filename

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

ConfigOption = typer.Option(None, "--config", "-c", help="YAML settings file")
DateOption = typer.Option(
    None,
    "--date",
    "-d",
    formats=["%Y-%m-%d"],
    help="Run as if today were this date (YYYY-MM-DD)"
)
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def _configure_logging(verbose: bool) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True
    )


def _today(run_date: Optional[datetime]) -> date:
    return run_date.date() if run_date else date.today()


def _build_generator(settings: Settings, with_output: bool = True) -> ReportGenerator:
    """Wire the pipeline from settings."""
    source = StatisticsClient(settings.bearer_token, base_url=settings.api_url)
    renderer = None
    writer = None
    if with_output:
        renderer = DocxRenderer(settings.template, strip_settings=settings.strip_settings)
        writer = ReportWriter(settings.output_dir)
    return ReportGenerator(source, renderer, writer, settings.report_options())


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """Completed-works certificate generator."""
    if ctx.invoked_subcommand is None:
        console.print("act-report - Use --help to see available commands")


@app.command()
def generate(
    config: Optional[str] = ConfigOption,
    run_date: Optional[datetime] = DateOption,
    verbose: bool = VerboseOption
):
    """
    Generate the certificate for the reporting month.

    Fetches server statistics, computes earnings and writes the filled
    template into the output directory.
    """
    _configure_logging(verbose)
    try:
        settings = load_settings(config)
        settings.validate_preconditions()
        generator = _build_generator(settings)
        result = generator.run(_today(run_date))
    except ActReportError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    console.print(f"[green]✓[/] Document saved to {result.output_path}")
    console.print(f"Total: {result.preview.total_display.text}")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def preview(
    config: Optional[str] = ConfigOption,
    run_date: Optional[datetime] = DateOption,
    verbose: bool = VerboseOption
):
    """Show per-server earnings for the reporting month without writing a document."""
    _configure_logging(verbose)
    try:
        settings = load_settings(config)
        generator = _build_generator(settings, with_output=False)
        report = generator.preview(_today(run_date))
    except ActReportError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    _display_preview(report)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def period(
    run_date: Optional[datetime] = DateOption,
    policy: PeriodPolicy = typer.Option(
        PeriodPolicy.PREVIOUS_MONTH,
        "--policy",
        "-p",
        help="Report on the previous or the current month"
    ),
    last_name: str = typer.Option("", "--last-name", "-l", help="Operator surname for the file name")
):
    """Print the reporting period and output file name."""
    report_period = compute_report_period(_today(run_date), policy)
    console.print(f"Period: {format_date_ru(report_period.start_date)} - {format_date_ru(report_period.end_date)}")
    console.print(f"Statistics date: {statistics_date(report_period)}")
    console.print(f"Output file: {output_filename(report_period, last_name)}")


def _display_preview(report: ReportPreview) -> None:
    """Display the computed report as a table."""
    document = report.document
    console.print(f"\n[bold]Акт выполненных работ[/bold] {document.start_date} - {document.end_date}")

    if not document.server_details:
        console.print("\n[dim]No server activity in this period.[/]")

    table = Table()
    table.add_column("#", justify="right")
    table.add_column("Server")
    table.add_column("Minutes", justify="right")
    table.add_column("Earnings", justify="right")
    for row in document.server_details:
        table.add_row(str(row.index), row.vm_name, str(row.minutes), row.earnings)
    console.print(table)

    console.print(f"Total minutes: {report.totals.total_minutes}")
    console.print(f"Total earnings: {format_fixed(report.totals.total_earnings)}")
    console.print(f"Total: {document.total_earnings}")


if __name__ == "__main__":
    app()
