"""Pydantic v2 schemas for LM Studio conversation files.

Field names are snake_case in Python and camelCase on the wire
(``createdAt``, ``currentlySelected``, ``genInfo`` ...).
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Key under which LM Studio stores the per-chat system prompt
SYSTEM_PROMPT_KEY = "llm.prediction.systemPrompt"


def _coerce_timestamp(value: Any) -> datetime | None:
    """Normalise epoch milliseconds or ISO-8601 strings to an aware UTC datetime.

    Unparsable values become ``None`` rather than failing validation.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _int_or_none(value: Any) -> int | None:
    """Integers pass; integral floats are narrowed; anything else is dropped."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _number_or_none(value: Any) -> int | float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _object_or_none(value: Any) -> Any:
    return value if isinstance(value, (dict, BaseModel)) else None


def _objects_only(value: Any) -> list[Any] | None:
    """Keep the object entries of a list; a non-list becomes None."""
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, (dict, BaseModel))]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ContentBlock(_CamelModel):
    """One typed fragment of content; only ``text`` blocks carry text."""

    type: str | None = None
    text: str | None = None

    @field_validator("type", "text", mode="before")
    @classmethod
    def drop_non_strings(cls, v: Any) -> str | None:
        return _str_or_none(v)


class GenerationStats(_CamelModel):
    """Performance metrics attached to a generation step.

    Values that are not numbers are treated as missing.
    """

    tokens_per_second: float | None = None
    time_to_first_token_sec: float | None = None
    total_time_sec: float | None = None
    prompt_tokens_count: int | None = None
    predicted_tokens_count: int | None = None
    total_tokens_count: int | None = None

    @field_validator(
        "tokens_per_second", "time_to_first_token_sec", "total_time_sec", mode="before"
    )
    @classmethod
    def parse_timing(cls, v: Any) -> int | float | None:
        return _number_or_none(v)

    @field_validator(
        "prompt_tokens_count", "predicted_tokens_count", "total_tokens_count", mode="before"
    )
    @classmethod
    def parse_count(cls, v: Any) -> int | None:
        return _int_or_none(v)


class GenInfo(_CamelModel):
    stats: GenerationStats | None = None

    @field_validator("stats", mode="before")
    @classmethod
    def drop_non_objects(cls, v: Any) -> Any:
        return _object_or_none(v)


class Step(_CamelModel):
    """One sub-unit of a multi-step assistant response."""

    type: str | None = None
    content: list[ContentBlock] | None = None
    gen_info: GenInfo | None = None

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v: Any) -> str | None:
        return _str_or_none(v)

    @field_validator("content", mode="before")
    @classmethod
    def parse_content(cls, v: Any) -> list[Any] | None:
        return _objects_only(v)

    @field_validator("gen_info", mode="before")
    @classmethod
    def parse_gen_info(cls, v: Any) -> Any:
        return _object_or_none(v)


class Version(_CamelModel):
    """One alternate edit or regeneration of a message."""

    role: str | None = None
    type: str | None = None
    content: str | list[ContentBlock] | None = None
    steps: list[Step] | None = None

    @field_validator("role", "type", mode="before")
    @classmethod
    def drop_non_strings(cls, v: Any) -> str | None:
        return _str_or_none(v)

    @field_validator("content", mode="before")
    @classmethod
    def parse_content(cls, v: Any) -> str | list[Any] | None:
        if isinstance(v, str):
            return v
        return _objects_only(v)

    @field_validator("steps", mode="before")
    @classmethod
    def parse_steps(cls, v: Any) -> list[Any] | None:
        return _objects_only(v)


class Message(_CamelModel):
    """A message with its alternate versions and the selected index."""

    versions: list[Version] = Field(..., min_length=1)
    currently_selected: int | None = None
    created_at: datetime | None = None

    @field_validator("versions", mode="before")
    @classmethod
    def drop_non_object_versions(cls, v: Any) -> Any:
        if isinstance(v, list):
            return _objects_only(v)
        return v

    @field_validator("currently_selected", mode="before")
    @classmethod
    def parse_currently_selected(cls, v: Any) -> int | None:
        return _int_or_none(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, v: Any) -> datetime | None:
        return _coerce_timestamp(v)


class LastUsedModel(_CamelModel):
    identifier: str | None = None

    @field_validator("identifier", mode="before")
    @classmethod
    def parse_identifier(cls, v: Any) -> str | None:
        return _str_or_none(v)


class PredictionConfigField(_CamelModel):
    key: str | None = None
    value: Any = None

    @field_validator("key", mode="before")
    @classmethod
    def parse_key(cls, v: Any) -> str | None:
        return _str_or_none(v)


class PredictionConfig(_CamelModel):
    entries: list[PredictionConfigField] = Field(default_factory=list, alias="fields")

    @field_validator("entries", mode="before")
    @classmethod
    def parse_entries(cls, v: Any) -> list[Any]:
        return _objects_only(v) or []

    def get(self, key: str) -> Any:
        """Return the value of the first field with ``key``, or None."""
        for config_field in self.entries:
            if config_field.key == key:
                return config_field.value
        return None


class Conversation(_CamelModel):
    """A full LM Studio conversation record.

    Only ``name`` and ``messages`` are structural. Optional fields that
    carry an unusable value are read as missing so renderers fall back
    to their placeholder text.
    """

    name: str
    created_at: datetime | None = None
    last_used_model: LastUsedModel | None = None
    token_count: int | float | None = None
    system_prompt: str | None = None
    per_chat_prediction_config: PredictionConfig | None = None
    messages: list[Message]

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, v: Any) -> datetime | None:
        return _coerce_timestamp(v)

    @field_validator("last_used_model", "per_chat_prediction_config", mode="before")
    @classmethod
    def drop_non_objects(cls, v: Any) -> Any:
        return _object_or_none(v)

    @field_validator("token_count", mode="before")
    @classmethod
    def parse_token_count(cls, v: Any) -> int | float | None:
        return _number_or_none(v)

    @field_validator("system_prompt", mode="before")
    @classmethod
    def parse_system_prompt(cls, v: Any) -> str | None:
        return _str_or_none(v)

    @property
    def prediction_system_prompt(self) -> str | None:
        """System prompt from the per-chat prediction config, if non-empty."""
        if self.per_chat_prediction_config is None:
            return None
        value = self.per_chat_prediction_config.get(SYSTEM_PROMPT_KEY)
        if not value:
            return None
        return str(value)


class ConversationSummary(BaseModel):
    """Summary of the loaded conversation returned by the API."""

    name: str
    created_at: datetime | None = None
    model: str | None = None
    token_count: int | float | None = None
    message_count: int


class MessageRole(str, Enum):
    """Roles that are rendered; any other role is skipped."""

    USER = "user"
    ASSISTANT = "assistant"


# Version.type of an assistant reply made of generation steps
MULTI_STEP_TYPE = "multiStep"
# Step.type of the steps that carry renderable content
CONTENT_BLOCK_STEP_TYPE = "contentBlock"
