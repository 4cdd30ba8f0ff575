"""Plain-text exporter for conversations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.schemas.conversation import MessageRole
from app.schemas.export import ExportFormat
from app.services.export.base import TextExporter
from app.services.export.stats import format_stats
from app.services.export.traversal import ConversationSink, MetadataHeader

if TYPE_CHECKING:
    from app.schemas.conversation import GenerationStats

SEPARATOR = "=" * 80


class PlainTextSink(ConversationSink[str]):
    """Collects plain-text blocks."""

    def __init__(self) -> None:
        self._parts: list[str] = []

    def metadata(self, header: MetadataHeader) -> None:
        self._parts.append(f"Conversation: {header.title}\n")
        self._parts.append(f"Created: {header.created_at}\n")
        self._parts.append(f"Model: {header.model}\n")
        self._parts.append(f"Token Count: {header.token_count}\n")
        if header.legacy_system_prompt:
            self._parts.append(f"System Prompt: {header.legacy_system_prompt}\n")
        self._parts.append(f"\n{SEPARATOR}\n\n")

    def system_prompt(self, text: str) -> None:
        self._parts.append(f"SYSTEM PROMPT:\n{text}\n\n{SEPARATOR}\n\n")

    def message(
        self,
        role: MessageRole,
        content: str,
        timestamp: str | None = None,
        stats: GenerationStats | None = None,
    ) -> None:
        label = role.value.upper()
        if timestamp:
            label = f"{label} ({timestamp})"
        self._parts.append(f"{label}:\n{content}\n\n")
        self._parts.append(format_stats(stats, ExportFormat.TXT))

    def result(self) -> str:
        return "".join(self._parts)


class PlainTextExporter(TextExporter):
    """Export a conversation to plain text."""

    @property
    def content_type(self) -> str:
        """MIME type for plain text."""
        return "text/plain"

    @property
    def file_extension(self) -> str:
        """File extension for plain text."""
        return "txt"

    def create_sink(self) -> PlainTextSink:
        return PlainTextSink()
