"""PDF exporter for conversations.

Uses PyMuPDF to lay text out on fixed-size A4 pages: a vertical cursor
moves down the page, and a new page is started whenever the next block
does not fit above the bottom margin.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import fitz  # PyMuPDF

from app.exceptions import ExportGenerationError
from app.schemas.conversation import MessageRole
from app.schemas.export import ExportFormat
from app.services.export.base import ConversationExporter
from app.services.export.stats import format_stats
from app.services.export.traversal import (
    ConversationSink,
    MetadataHeader,
    walk_conversation,
)

if TYPE_CHECKING:
    from app.schemas.conversation import Conversation, GenerationStats
    from app.schemas.export import ConversionOptions

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = fitz.paper_size("a4")
MARGIN = 56.0
LINE_HEIGHT_RATIO = 1.4
TAB = "    "

# Base-14 Helvetica variants
FONTS = {
    "normal": "helv",
    "bold": "hebo",
    "italic": "heit",
}

BLACK = (0, 0, 0)
GRAY = (100, 100, 100)
LIGHT_GRAY = (120, 120, 120)
DARK_GRAY = (50, 50, 50)
GREEN = (16, 185, 129)
INDIGO = (99, 102, 241)

ROLE_LABELS = {
    MessageRole.USER: ("USER", GREEN),
    MessageRole.ASSISTANT: ("ASSISTANT", INDIGO),
}


class PageLayout:
    """Cursor-based text layout over a PyMuPDF document."""

    def __init__(
        self,
        width: float = PAGE_WIDTH,
        height: float = PAGE_HEIGHT,
        margin: float = MARGIN,
    ) -> None:
        self.width = width
        self.height = height
        self.margin = margin
        self.max_width = width - 2 * margin
        self.document = fitz.open()
        self.page: fitz.Page | None = None
        self.y = margin
        self.add_page()

    @property
    def page_count(self) -> int:
        return self.document.page_count

    @property
    def remaining(self) -> float:
        """Vertical space left above the bottom margin."""
        return self.height - self.margin - self.y

    def add_page(self) -> None:
        self.page = self.document.new_page(width=self.width, height=self.height)
        self.y = self.margin

    def advance(self, amount: float) -> None:
        self.y += amount

    def ensure_space(self, required: float) -> None:
        """Start a new page unless ``required`` points fit on this one.

        A fresh page is never skipped, so blocks taller than a page still
        start at the top and continue line by line.
        """
        if required > self.remaining and self.y > self.margin:
            self.add_page()

    @staticmethod
    def line_height(fontsize: float) -> float:
        return fontsize * LINE_HEIGHT_RATIO

    def wrap(self, text: str, fontname: str, fontsize: float) -> list[str]:
        """Split ``text`` into lines no wider than the text column."""

        def width(value: str) -> float:
            return fitz.get_text_length(value, fontname=fontname, fontsize=fontsize)

        lines: list[str] = []
        for paragraph in text.replace("\r", "").replace("\t", TAB).split("\n"):
            current = ""
            for word in paragraph.split(" "):
                candidate = f"{current} {word}" if current else word
                if width(candidate) <= self.max_width:
                    current = candidate
                    continue
                if current:
                    lines.append(current)
                # Hard-break words wider than the column
                while len(word) > 1 and width(word) > self.max_width:
                    cut = 1
                    while cut < len(word) and width(word[: cut + 1]) <= self.max_width:
                        cut += 1
                    lines.append(word[:cut])
                    word = word[cut:]
                current = word
            lines.append(current)
        return lines

    def write(
        self,
        text: str,
        fontsize: float,
        style: str = "normal",
        color: tuple[int, int, int] = BLACK,
    ) -> float:
        """Write wrapped text at the cursor and return the height used."""
        fontname = FONTS[style]
        lines = self.wrap(text, fontname, fontsize)
        line_height = self.line_height(fontsize)
        rgb = tuple(channel / 255 for channel in color)

        self.ensure_space(len(lines) * line_height)
        for line in lines:
            if line_height > self.remaining:
                self.add_page()
            if line:
                self.page.insert_text(
                    (self.margin, self.y + fontsize),
                    line,
                    fontname=fontname,
                    fontsize=fontsize,
                    color=rgb,
                )
            self.y += line_height
        return len(lines) * line_height

    def to_bytes(self) -> bytes:
        return self.document.tobytes(garbage=3, deflate=True)

    def close(self) -> None:
        self.document.close()


class PDFSink(ConversationSink[bytes]):
    """Writes conversation blocks through a ``PageLayout``."""

    def __init__(self, layout: PageLayout) -> None:
        self.layout = layout

    def begin(self, title: str) -> None:
        self.layout.write(title, 18, "bold", BLACK)
        self.layout.advance(14)

    def metadata(self, header: MetadataHeader) -> None:
        self.layout.write(f"Created: {header.created_at}", 10, "normal", GRAY)
        self.layout.write(f"Model: {header.model}", 10, "normal", GRAY)
        self.layout.write(f"Token Count: {header.token_count}", 10, "normal", GRAY)
        self.layout.advance(28)

    def system_prompt(self, text: str) -> None:
        self.layout.ensure_space(56)
        self.layout.write("SYSTEM PROMPT:", 11, "bold", INDIGO)
        self.layout.advance(6)
        self.layout.write(text, 10, "normal", DARK_GRAY)
        self.layout.advance(28)

    def message(
        self,
        role: MessageRole,
        content: str,
        timestamp: str | None = None,
        stats: GenerationStats | None = None,
    ) -> None:
        label, color = ROLE_LABELS[role]
        if timestamp:
            label = f"{label} ({timestamp})"

        # Keep the role label together with the start of its content
        self.layout.ensure_space(85)
        self.layout.write(f"{label}:", 11, "bold", color)
        self.layout.advance(6)
        self.layout.write(content, 10, "normal", BLACK)

        if stats is not None:
            self.layout.advance(8)
            self.layout.write("Generation Stats:", 9, "italic", GRAY)
            self.layout.write(format_stats(stats, ExportFormat.PDF), 8, "normal", LIGHT_GRAY)

        self.layout.advance(23)

    def result(self) -> bytes:
        return self.layout.to_bytes()


class PDFExporter(ConversationExporter):
    """Export a conversation to a paginated PDF document."""

    @property
    def content_type(self) -> str:
        """MIME type for PDF."""
        return "application/pdf"

    @property
    def file_extension(self) -> str:
        """File extension for PDF."""
        return "pdf"

    def export(
        self,
        conversation: Conversation | None,
        options: ConversionOptions,
    ) -> bytes:
        """Generate PDF export content.

        Args:
            conversation: Conversation to export
            options: Inclusion flags

        Returns:
            PDF file content as bytes

        Raises:
            ExportGenerationError: If there is no conversation or layout fails
        """
        if conversation is None:
            raise ExportGenerationError("No conversation to render")

        layout: PageLayout | None = None
        try:
            layout = PageLayout()
            return walk_conversation(conversation, options, PDFSink(layout))
        except Exception as e:
            logger.exception("PDF generation failed for %r", conversation.name)
            raise ExportGenerationError(
                f"PDF generation failed: {e!s}. Please try another format."
            ) from e
        finally:
            if layout is not None:
                layout.close()
