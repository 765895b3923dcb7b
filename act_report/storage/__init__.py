"""
Persistence of rendered documents.
"""

from .writer import ReportWriter, output_filename

__all__ = ["ReportWriter", "output_filename"]
