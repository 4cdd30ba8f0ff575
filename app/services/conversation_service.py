"""Loading LM Studio conversation files and holding the current one.

A conversation is parsed from raw upload bytes in one step; the workspace
keeps at most one loaded conversation and replaces it wholesale on every
load.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from app.core.config import settings
from app.exceptions import (
    InvalidConversationError,
    InvalidFileTypeError,
    MalformedConversationFileError,
    NoConversationLoadedError,
    UploadTooLargeError,
)
from app.schemas.conversation import Conversation, ConversationSummary
from app.services.export.fallbacks import model_identifier

logger = logging.getLogger(__name__)

JSON_EXTENSION = ".json"


def _check_shape(data: Any) -> None:
    """Reject anything without a non-null ``name`` and a list of ``messages``."""
    if not isinstance(data, dict):
        raise InvalidConversationError("top-level JSON value must be an object")
    if data.get("name") is None:
        raise InvalidConversationError("missing 'name'")
    if not isinstance(data.get("messages"), list):
        raise InvalidConversationError("'messages' must be a list")


def parse_conversation(filename: str | None, raw: bytes) -> Conversation:
    """Parse uploaded bytes into a Conversation.

    Args:
        filename: Name of the uploaded file (must end in .json)
        raw: File content

    Returns:
        The validated conversation

    Raises:
        InvalidFileTypeError: If the file name does not end in .json
        UploadTooLargeError: If the file exceeds settings.max_upload_bytes
        MalformedConversationFileError: If the bytes are not UTF-8 JSON
        InvalidConversationError: If the JSON is not a conversation
    """
    if not filename or not filename.lower().endswith(JSON_EXTENSION):
        raise InvalidFileTypeError(filename)

    if len(raw) > settings.max_upload_bytes:
        raise UploadTooLargeError(len(raw), settings.max_upload_bytes)

    try:
        data = json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedConversationFileError(str(e)) from e

    _check_shape(data)

    try:
        return Conversation.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise InvalidConversationError(f"{location}: {first['msg']}") from e


def summarize(conversation: Conversation) -> ConversationSummary:
    return ConversationSummary(
        name=conversation.name,
        created_at=conversation.created_at,
        model=model_identifier(conversation),
        token_count=conversation.token_count,
        message_count=len(conversation.messages),
    )


class ConversationWorkspace:
    """Holds the single current conversation.

    ``load`` discards the previous conversation before parsing, so a
    failed load always leaves the workspace empty.
    """

    def __init__(self) -> None:
        self._current: Conversation | None = None

    @property
    def current(self) -> Conversation | None:
        return self._current

    def require(self) -> Conversation:
        """Return the current conversation or raise NoConversationLoadedError."""
        if self._current is None:
            raise NoConversationLoadedError()
        return self._current

    def clear(self) -> None:
        self._current = None

    def load(self, filename: str | None, raw: bytes) -> Conversation:
        self.clear()
        try:
            conversation = parse_conversation(filename, raw)
        except Exception:
            logger.warning("Failed to load conversation file %r", filename)
            raise
        self._current = conversation
        logger.info(
            "Loaded conversation %r (%d messages)",
            conversation.name,
            len(conversation.messages),
        )
        return conversation
