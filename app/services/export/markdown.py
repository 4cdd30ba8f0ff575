"""Markdown exporter for conversations.

Exports conversations to GitHub-flavored Markdown format. Message text is
already Markdown in LM Studio files, so it is embedded as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.schemas.conversation import MessageRole
from app.schemas.export import ExportFormat
from app.services.export.base import TextExporter
from app.services.export.stats import format_stats
from app.services.export.traversal import ConversationSink, MetadataHeader

if TYPE_CHECKING:
    from app.schemas.conversation import GenerationStats

ROLE_HEADINGS = {
    MessageRole.USER: "User",
    MessageRole.ASSISTANT: "Assistant",
}


class MarkdownSink(ConversationSink[str]):
    """Collects Markdown sections."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def metadata(self, header: MetadataHeader) -> None:
        self._lines.extend(
            [
                f"# {header.title}",
                "",
                f"**Created:** {header.created_at}  ",
                f"**Model:** {header.model}  ",
                f"**Token Count:** {header.token_count}",
                "",
            ]
        )
        if header.legacy_system_prompt:
            self._lines.extend(
                [f"**System Prompt:** {header.legacy_system_prompt}", ""]
            )
        self._lines.extend(["---", ""])

    def system_prompt(self, text: str) -> None:
        self._lines.extend(["## System Prompt", "", text, "", "---", ""])

    def message(
        self,
        role: MessageRole,
        content: str,
        timestamp: str | None = None,
        stats: GenerationStats | None = None,
    ) -> None:
        heading = ROLE_HEADINGS[role]
        if timestamp:
            heading = f"{heading} ({timestamp})"
        self._lines.extend([f"## {heading}", "", content, ""])

        fragment = format_stats(stats, ExportFormat.MARKDOWN)
        if fragment:
            # Fragment already carries its surrounding blank lines
            self._lines.append(fragment.strip("\n"))
            self._lines.append("")

    def result(self) -> str:
        if not self._lines:
            return ""
        return "\n".join(self._lines) + "\n"


class MarkdownExporter(TextExporter):
    """Export a conversation to Markdown format."""

    @property
    def content_type(self) -> str:
        """MIME type for Markdown."""
        return "text/markdown"

    @property
    def file_extension(self) -> str:
        """File extension for Markdown."""
        return "md"

    def create_sink(self) -> MarkdownSink:
        return MarkdownSink()
