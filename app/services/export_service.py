"""Preview, download and clipboard operations on a conversation.

Every call renders fresh from the given conversation and options; nothing
is cached between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.core.config import settings
from app.exceptions import (
    EmptyContentError,
    InvalidExportFormatError,
    NoConversationLoadedError,
)
from app.schemas.export import ExportFormat
from app.services.export import TextExporter, get_exporter

if TYPE_CHECKING:
    from app.schemas.conversation import Conversation
    from app.schemas.export import ConversionOptions

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n\n... (truncated for preview)"
PDF_PREVIEW_MESSAGE = (
    "PDF preview is not available. "
    "Export the conversation to generate the PDF file."
)
NO_CONVERSATION_PREVIEW = "No conversation loaded. Please select a file to preview."


@dataclass(frozen=True)
class ExportArtifact:
    """A rendered file ready to hand to the caller."""

    content: bytes
    filename: str
    content_type: str


@dataclass(frozen=True)
class Preview:
    content: str
    truncated: bool = False


def _text_exporter(format: ExportFormat) -> TextExporter:
    # The PDF format has no text form of its own; plain text stands in
    if format == ExportFormat.PDF:
        format = ExportFormat.TXT
    exporter = get_exporter(format)
    if not isinstance(exporter, TextExporter):
        raise InvalidExportFormatError(str(format))
    return exporter


def truncate_preview(text: str, max_chars: int | None = None) -> Preview:
    """Cut ``text`` to ``max_chars`` and append the truncation marker."""
    limit = settings.preview_max_chars if max_chars is None else max_chars
    if len(text) <= limit:
        return Preview(content=text)
    return Preview(content=text[:limit] + TRUNCATION_MARKER, truncated=True)


def preview(
    conversation: Conversation | None,
    options: ConversionOptions,
    format: ExportFormat,
    max_chars: int | None = None,
) -> Preview:
    """Render a truncated preview.

    HTML is previewed as escaped source text, so cutting it never produces
    broken live markup.
    """
    if conversation is None:
        return Preview(content=NO_CONVERSATION_PREVIEW)
    if format == ExportFormat.PDF:
        return Preview(content=PDF_PREVIEW_MESSAGE)

    rendered = _text_exporter(format).render(conversation, options)
    return truncate_preview(rendered, max_chars)


def export_downloadable(
    conversation: Conversation | None,
    options: ConversionOptions,
    format: ExportFormat,
) -> ExportArtifact:
    """Render a downloadable file.

    Raises:
        NoConversationLoadedError: If ``conversation`` is None
        EmptyContentError: If a text rendering is blank after trimming
        ExportGenerationError: If PDF generation fails
    """
    if conversation is None:
        raise NoConversationLoadedError()

    exporter = get_exporter(format)
    if isinstance(exporter, TextExporter):
        rendered = exporter.render(conversation, options)
        if not rendered.strip():
            raise EmptyContentError(format.value)
        content = rendered.encode("utf-8")
    else:
        content = exporter.export(conversation, options)

    artifact = ExportArtifact(
        content=content,
        filename=exporter.generate_filename(conversation),
        content_type=exporter.content_type,
    )
    logger.info(
        "Exported %r as %s (%d bytes)",
        conversation.name,
        format.value,
        len(artifact.content),
    )
    return artifact


def copyable_text(
    conversation: Conversation | None,
    options: ConversionOptions,
    format: ExportFormat,
) -> str:
    """Render the full text for the clipboard.

    Raises:
        NoConversationLoadedError: If ``conversation`` is None
        EmptyContentError: If the rendering is blank after trimming
    """
    if conversation is None:
        raise NoConversationLoadedError()

    rendered = _text_exporter(format).render(conversation, options)
    if not rendered.strip():
        raise EmptyContentError(format.value)
    return rendered
