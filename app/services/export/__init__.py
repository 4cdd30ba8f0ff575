"""Conversation export module.

Provides exporters for converting conversations to different formats
(plain text, Markdown, HTML, PDF).
"""

from __future__ import annotations

from app.exceptions import InvalidExportFormatError
from app.schemas.export import ExportFormat
from app.services.export.base import ConversationExporter, TextExporter
from app.services.export.html import HTMLExporter
from app.services.export.markdown import MarkdownExporter
from app.services.export.pdf import PDFExporter
from app.services.export.text import PlainTextExporter

_EXPORTERS: dict[ExportFormat, type[ConversationExporter]] = {
    ExportFormat.TXT: PlainTextExporter,
    ExportFormat.MARKDOWN: MarkdownExporter,
    ExportFormat.HTML: HTMLExporter,
    ExportFormat.PDF: PDFExporter,
}


def get_exporter(format: ExportFormat) -> ConversationExporter:
    """Factory function to get the appropriate exporter for a format.

    Args:
        format: The export format (txt, md, html or pdf)

    Returns:
        An instance of the appropriate ConversationExporter

    Raises:
        InvalidExportFormatError: If format is not supported
    """
    exporter_class = _EXPORTERS.get(format)
    if exporter_class is None:
        raise InvalidExportFormatError(str(format))
    return exporter_class()


__all__ = [
    "ConversationExporter",
    "TextExporter",
    "get_exporter",
    "HTMLExporter",
    "MarkdownExporter",
    "PDFExporter",
    "PlainTextExporter",
]
