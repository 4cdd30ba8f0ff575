"""Abstract base classes for conversation exporters.

Defines the interface that all exporter implementations must follow.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from app.services.export.fallbacks import filename_stem
from app.services.export.traversal import ConversationSink, walk_conversation

if TYPE_CHECKING:
    from app.schemas.conversation import Conversation
    from app.schemas.export import ConversionOptions


class ConversationExporter(ABC):
    """Abstract base class for conversation exporters."""

    @property
    @abstractmethod
    def content_type(self) -> str:
        """MIME type for the export format."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """File extension for the export format."""
        pass

    @abstractmethod
    def export(
        self,
        conversation: Conversation | None,
        options: ConversionOptions,
    ) -> bytes:
        """Generate export content from a conversation.

        Args:
            conversation: Conversation to export
            options: Inclusion flags

        Returns:
            Binary content of the export file

        Raises:
            ExportGenerationError: If export generation fails
        """
        pass

    def generate_filename(self, conversation: Conversation | None) -> str:
        """Generate filename for the export.

        Args:
            conversation: Conversation being exported

        Returns:
            ``<conversation name>.<extension>``, "conversation" when unnamed
        """
        return f"{filename_stem(conversation)}.{self.file_extension}"


class TextExporter(ConversationExporter):
    """Base class for exporters whose output is a string."""

    @abstractmethod
    def create_sink(self) -> ConversationSink[str]:
        """Return a fresh sink for a single render."""
        pass

    def render(
        self,
        conversation: Conversation | None,
        options: ConversionOptions,
    ) -> str:
        """Render the conversation, or "" when there is none."""
        if conversation is None:
            return ""
        return walk_conversation(conversation, options, self.create_sink())

    def export(
        self,
        conversation: Conversation | None,
        options: ConversionOptions,
    ) -> bytes:
        """Generate the UTF-8 encoded rendering."""
        return self.render(conversation, options).encode("utf-8")
