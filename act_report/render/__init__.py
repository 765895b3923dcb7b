"""
Document rendering for the completed-works certificate.
"""

from .docx_renderer import DocxRenderer

__all__ = ["DocxRenderer"]
