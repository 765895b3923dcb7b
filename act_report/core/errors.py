"""
Error kinds raised while producing a completed-works certificate.

Every error aborts the run; the CLI maps them to a diagnostic and a
non-zero exit code.
"""

from typing import Any, Optional


class ActReportError(Exception):
    """Base class for all report generation failures."""


class ConfigurationError(ActReportError):
    """Missing credential, missing template or invalid settings."""


class FetchError(ActReportError):
    """Statistics could not be retrieved from the billing API."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedEntry(ActReportError):
    """A statistics record failed shape validation."""
    def __init__(self, message: str, entry: Any = None):
        super().__init__(message)
        self.entry = entry


class FormatError(ActReportError):
    """Monetary or date formatting failed."""


class RenderError(ActReportError):
    """The template engine rejected the payload."""


class PersistenceError(ActReportError):
    """The rendered document could not be written."""
