"""Shared conversation walk used by every exporter.

The walk visits metadata, the system prompt, then each message (and each
step of multi-step assistant replies) in order, and hands every piece to
a format-specific ``ConversationSink``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from app.schemas.conversation import (
    CONTENT_BLOCK_STEP_TYPE,
    MULTI_STEP_TYPE,
    MessageRole,
)
from app.services.export import fallbacks
from app.services.export.content import (
    current_version,
    extract_step_content,
    extract_version_content,
)

if TYPE_CHECKING:
    from app.schemas.conversation import Conversation, GenerationStats, Version
    from app.schemas.export import ConversionOptions

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


@dataclass(frozen=True)
class MetadataHeader:
    """Display-ready conversation metadata."""

    title: str
    created_at: str
    model: str
    token_count: str
    legacy_system_prompt: str | None = None


class ConversationSink(ABC, Generic[ResultT]):
    """Format-specific receiver of the shared walk."""

    def begin(self, title: str) -> None:
        """Called once before anything else with the display title."""

    @abstractmethod
    def metadata(self, header: MetadataHeader) -> None:
        pass

    @abstractmethod
    def system_prompt(self, text: str) -> None:
        pass

    @abstractmethod
    def message(
        self,
        role: MessageRole,
        content: str,
        timestamp: str | None = None,
        stats: GenerationStats | None = None,
    ) -> None:
        """Append one labelled block, followed by its stats when given."""

    @abstractmethod
    def result(self) -> ResultT:
        pass


def build_metadata_header(conversation: Conversation) -> MetadataHeader:
    return MetadataHeader(
        title=fallbacks.conversation_title(conversation),
        created_at=fallbacks.created_at(conversation),
        model=fallbacks.model_identifier(conversation),
        token_count=fallbacks.token_count(conversation),
        legacy_system_prompt=conversation.system_prompt or None,
    )


def _emit_assistant(
    version: Version,
    options: ConversionOptions,
    timestamp: str | None,
    sink: ConversationSink,
) -> None:
    if version.type != MULTI_STEP_TYPE or version.steps is None:
        sink.message(MessageRole.ASSISTANT, extract_version_content(version), timestamp)
        return

    for step in version.steps:
        if step.type != CONTENT_BLOCK_STEP_TYPE:
            continue
        content = extract_step_content(step)
        if not content:
            continue
        stats = None
        if options.include_stats and step.gen_info is not None:
            stats = step.gen_info.stats
        sink.message(MessageRole.ASSISTANT, content, timestamp, stats)


def walk_conversation(
    conversation: Conversation,
    options: ConversionOptions,
    sink: ConversationSink[ResultT],
) -> ResultT:
    """Feed ``conversation`` through ``sink`` and return the sink's result.

    Args:
        conversation: Loaded conversation
        options: Inclusion flags
        sink: Fresh sink for a single render

    Returns:
        Whatever the sink produces (str for text formats, bytes for PDF)

    Raises:
        EmptyVersionsError: If a message has no versions
    """
    sink.begin(fallbacks.conversation_title(conversation))

    if options.include_metadata:
        sink.metadata(build_metadata_header(conversation))

    if options.include_system_prompts:
        prompt = conversation.prediction_system_prompt
        if prompt:
            sink.system_prompt(prompt)

    for index, message in enumerate(conversation.messages):
        version = current_version(message)

        timestamp = None
        if options.include_timestamps and message.created_at is not None:
            timestamp = fallbacks.format_datetime(message.created_at)

        if version.role == MessageRole.USER.value:
            sink.message(MessageRole.USER, extract_version_content(version), timestamp)
        elif version.role == MessageRole.ASSISTANT.value:
            _emit_assistant(version, options, timestamp, sink)
        else:
            logger.debug("Skipping message %d with role %r", index, version.role)

    return sink.result()
