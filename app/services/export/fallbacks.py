"""Display values for optional conversation fields.

Every renderer reads optional data through these helpers so the literal
used for missing data is defined once.
"""

from __future__ import annotations

import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.schemas.conversation import Conversation

UNTITLED_CONVERSATION = "Untitled Conversation"
UNKNOWN = "Unknown"
NOT_AVAILABLE = "N/A"
DEFAULT_FILENAME_STEM = "conversation"

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S UTC"

# Control characters and path separators never reach a download filename
_UNSAFE_FILENAME_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f/\\]")


def format_datetime(value: datetime | None) -> str:
    """Format a timestamp as ``YYYY-MM-DD HH:MM:SS UTC`` or ``Unknown``."""
    if value is None:
        return UNKNOWN
    return value.strftime(DATETIME_FORMAT)


def conversation_title(conversation: Conversation) -> str:
    return conversation.name or UNTITLED_CONVERSATION


def created_at(conversation: Conversation) -> str:
    return format_datetime(conversation.created_at)


def model_identifier(conversation: Conversation) -> str:
    model = conversation.last_used_model
    if model is None or not model.identifier:
        return UNKNOWN
    return model.identifier


def token_count(conversation: Conversation) -> str:
    if conversation.token_count is None:
        return UNKNOWN
    return str(conversation.token_count)


def filename_stem(conversation: Conversation | None) -> str:
    """Conversation name made safe for a download filename."""
    if conversation is None or not conversation.name:
        return DEFAULT_FILENAME_STEM
    stem = _UNSAFE_FILENAME_CHARS.sub("_", conversation.name).strip()
    if not stem.strip("_"):
        return DEFAULT_FILENAME_STEM
    return stem


def fixed(value: float | None, places: int) -> str:
    """Fixed-point rendering with ``N/A`` for a missing value.

    Rounds half up on the shortest decimal form of the float, so 12.345
    renders as "12.35" to 2 places.
    """
    if value is None:
        return NOT_AVAILABLE
    try:
        quantum = Decimal(1).scaleb(-places)
        return str(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return f"{value:.{places}f}"


def count(value: int | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    return str(value)
