"""Pydantic schemas package."""

from app.schemas.conversation import (  # noqa: F401
    ContentBlock,
    Conversation,
    ConversationSummary,
    GenerationStats,
    Message,
    Step,
    Version,
)
from app.schemas.export import (  # noqa: F401
    ConversionOptions,
    ConversionRequest,
    CopyResponse,
    ExportFormat,
    PreviewResponse,
)
