"""
DOCX template rendering.

Fills a Word template with the certificate payload using docxtpl. The
jinja environment is strict: a placeholder missing from the payload is
an error rather than an empty cell.
"""

import io
import logging
import re
import zipfile
from pathlib import Path
from typing import Any, Dict, Union

import jinja2
from docx.opc.exceptions import PackageNotFoundError
from docxtpl import DocxTemplate

from ..core.errors import ConfigurationError, RenderError

logger = logging.getLogger(__name__)

SETTINGS_PART = "word/settings.xml"
SETTINGS_RELS_PART = "word/_rels/settings.xml.rels"
DOCUMENT_RELS_PART = "word/_rels/document.xml.rels"
CONTENT_TYPES_PART = "[Content_Types].xml"

_SETTINGS_RELATIONSHIP = re.compile(r'<Relationship\b[^>]*\bTarget="(?:/word/)?settings\.xml"[^>]*/>')
_SETTINGS_OVERRIDE = re.compile(r'<Override\b[^>]*\bPartName="/word/settings\.xml"[^>]*/>')


def strip_settings_part(docx_bytes: bytes) -> bytes:
    """Drop word/settings.xml and everything pointing at it.

    The archive is rewritten with DEFLATE compression.
    """
    source = zipfile.ZipFile(io.BytesIO(docx_bytes))
    buffer = io.BytesIO()
    with source, zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as target:
        for item in source.infolist():
            if item.filename in (SETTINGS_PART, SETTINGS_RELS_PART):
                continue
            data = source.read(item.filename)
            if item.filename == DOCUMENT_RELS_PART:
                data = _SETTINGS_RELATIONSHIP.sub("", data.decode("utf-8")).encode("utf-8")
            elif item.filename == CONTENT_TYPES_PART:
                data = _SETTINGS_OVERRIDE.sub("", data.decode("utf-8")).encode("utf-8")
            target.writestr(item.filename, data)
    return buffer.getvalue()


class DocxRenderer:
    """Renders a .docx template to bytes."""

    def __init__(self, template_path: Union[str, Path], strip_settings: bool = True):
        """Initialize the renderer.

        Args:
            template_path: Path to the .docx template
            strip_settings: Remove word/settings.xml from the output

        Raises:
            ConfigurationError: If the template file does not exist
        """
        self.template_path = Path(template_path)
        if not self.template_path.is_file():
            raise ConfigurationError(f"Template file {self.template_path} not found")
        self.strip_settings = strip_settings

    def render(self, context: Dict[str, Any]) -> bytes:
        """Render the template with the given payload.

        Raises:
            RenderError: If the template references missing fields, has
                invalid syntax or cannot be read as a .docx package
        """
        try:
            template = DocxTemplate(str(self.template_path))
            template.render(context, jinja2.Environment(undefined=jinja2.StrictUndefined))
            buffer = io.BytesIO()
            template.save(buffer)
        except jinja2.TemplateError as e:
            raise RenderError(f"Template {self.template_path.name} does not match the report data: {e}") from e
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError, TypeError) as e:
            raise RenderError(f"Cannot render template {self.template_path.name}: {e}") from e

        data = buffer.getvalue()
        if self.strip_settings:
            data = strip_settings_part(data)
        logger.debug("Rendered %s (%d bytes)", self.template_path.name, len(data))
        return data
