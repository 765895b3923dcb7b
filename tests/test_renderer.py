"""
Tests for DOCX template rendering.

Templates are built on the fly with python-docx.
"""

import io
import zipfile

import docx
import pytest

from act_report.core.errors import ConfigurationError, RenderError
from act_report.render.docx_renderer import DocxRenderer, strip_settings_part

CONTEXT = {
    "date": "29 февраля 2024 г.",
    "start_date": "01 февраля 2024",
    "end_date": "29 февраля 2024",
    "server_details": [
        {"index": 1, "vm_name": "srv-1", "minutes": 60, "earnings": "30.00"},
        {"index": 2, "vm_name": "srv-2", "minutes": 2, "earnings": "1.00"},
    ],
    "total_earnings": "31 (тридцать один) руб. 0 коп.",
}


def _make_template(path, paragraphs):
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    document.save(str(path))
    return path


def _paragraphs(data: bytes):
    return [p.text for p in docx.Document(io.BytesIO(data)).paragraphs]


class TestDocxRenderer:
    """Test rendering the certificate template."""

    def test_missing_template(self, tmp_path):
        """Verify a missing template is reported before rendering."""
        with pytest.raises(ConfigurationError, match="not found"):
            DocxRenderer(tmp_path / "template.docx")

    def test_renders_placeholders(self, tmp_path):
        """Verify scalar placeholders are filled."""
        template = _make_template(tmp_path / "template.docx", [
            "Акт от {{ date }}",
            "Период: {{ start_date }} - {{ end_date }}",
            "Итого: {{ total_earnings }}",
        ])

        data = DocxRenderer(template, strip_settings=False).render(CONTEXT)

        assert _paragraphs(data) == [
            "Акт от 29 февраля 2024 г.",
            "Период: 01 февраля 2024 - 29 февраля 2024",
            "Итого: 31 (тридцать один) руб. 0 коп.",
        ]

    def test_renders_server_loop(self, tmp_path):
        """Verify per-server rows are rendered in order."""
        template = _make_template(tmp_path / "template.docx", [
            "{%p for row in server_details %}",
            "{{ row.index }}. {{ row.vm_name }}: {{ row.minutes }} мин., {{ row.earnings }}",
            "{%p endfor %}",
        ])

        data = DocxRenderer(template).render(CONTEXT)

        assert _paragraphs(data) == [
            "1. srv-1: 60 мин., 30.00",
            "2. srv-2: 2 мин., 1.00",
        ]

    def test_missing_placeholder(self, tmp_path):
        """Verify a placeholder absent from the payload is an error."""
        template = _make_template(tmp_path / "template.docx", ["{{ contract_number }}"])

        with pytest.raises(RenderError, match="contract_number"):
            DocxRenderer(template).render(CONTEXT)

    def test_invalid_template_syntax(self, tmp_path):
        """Verify jinja syntax errors are reported as RenderError."""
        template = _make_template(tmp_path / "template.docx", ["{% for %}"])

        with pytest.raises(RenderError):
            DocxRenderer(template).render(CONTEXT)

    def test_not_a_docx(self, tmp_path):
        """Verify a corrupt template file is reported as RenderError."""
        template = tmp_path / "template.docx"
        template.write_bytes(b"not a zip archive")

        with pytest.raises(RenderError):
            DocxRenderer(template).render(CONTEXT)


class TestStripSettings:
    """Test removal of word/settings.xml."""

    def test_settings_removed(self, tmp_path):
        """Verify the settings part and references to it are gone."""
        template = _make_template(tmp_path / "template.docx", ["{{ total_earnings }}"])

        data = DocxRenderer(template, strip_settings=True).render(CONTEXT)

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert "word/settings.xml" not in archive.namelist()
            assert "settings.xml" not in archive.read("word/_rels/document.xml.rels").decode("utf-8")
            assert "/word/settings.xml" not in archive.read("[Content_Types].xml").decode("utf-8")
            assert all(item.compress_type == zipfile.ZIP_DEFLATED for item in archive.infolist())

        assert _paragraphs(data) == ["31 (тридцать один) руб. 0 коп."]

    def test_settings_kept(self, tmp_path):
        """Verify settings can be preserved."""
        template = _make_template(tmp_path / "template.docx", ["{{ total_earnings }}"])

        data = DocxRenderer(template, strip_settings=False).render(CONTEXT)

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert "word/settings.xml" in archive.namelist()

    def test_other_parts_untouched(self, tmp_path):
        """Verify only settings are removed from the package."""
        template = _make_template(tmp_path / "template.docx", ["text"])
        original = template.read_bytes()

        stripped = strip_settings_part(original)

        with zipfile.ZipFile(io.BytesIO(original)) as before, zipfile.ZipFile(io.BytesIO(stripped)) as after:
            removed = set(before.namelist()) - set(after.namelist())
            assert removed <= {"word/settings.xml", "word/_rels/settings.xml.rels"}
            assert after.read("word/document.xml") == before.read("word/document.xml")
