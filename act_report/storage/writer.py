"""
Output persistence.

Names and writes the rendered certificate.
"""

import logging
from pathlib import Path
from typing import Union

from ..core.errors import PersistenceError
from ..core.period import ReportPeriod, month_name_ru

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "output"


def output_filename(period: ReportPeriod, last_name: str = "") -> str:
    """File name for the certificate of a period.

    Example: "2024-02 (февраль) Акт выполненных работ Иванов.docx"
    """
    end = period.end_date
    return f"{end.year}-{end.month:02d} ({month_name_ru(end)}) Акт выполненных работ {last_name}.docx"


class ReportWriter:
    """Writes documents into an output directory, creating it if absent."""

    def __init__(self, output_dir: Union[str, Path] = DEFAULT_OUTPUT_DIR):
        self.output_dir = Path(output_dir)

    def output_filename(self, period: ReportPeriod, last_name: str = "") -> str:
        return output_filename(period, last_name)

    def write(self, filename: str, data: bytes) -> Path:
        """Write the document and return its path.

        Raises:
            PersistenceError: If the directory or file cannot be written
        """
        output_path = self.output_dir / filename
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(data)
        except OSError as e:
            raise PersistenceError(f"Cannot write {output_path}: {e}") from e

        logger.debug("Wrote %d bytes to %s", len(data), output_path)
        return output_path
