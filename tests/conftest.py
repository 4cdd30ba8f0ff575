"""Shared pytest fixtures for unit and API tests.

Usage in new test files:
    def test_something(client, upload_conversation, sample_conversation_data):
        upload_conversation(client, sample_conversation_data)
        ...
"""

from __future__ import annotations

import json
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.schemas.conversation import Conversation
from app.schemas.export import ConversionOptions

# 2024-05-01 10:00:00 UTC in epoch milliseconds
CREATED_AT_MS = 1714557600000


def build_conversation_data() -> dict[str, Any]:
    """Return a fresh LM Studio-style conversation dict.

    Rendered blocks: user, assistant (one content step with stats), user
    (second version selected), assistant. The system-role message is skipped.
    """
    return {
        "name": "Python Basics",
        "createdAt": CREATED_AT_MS,
        "lastUsedModel": {"identifier": "qwen2.5-7b-instruct"},
        "tokenCount": 321,
        "perChatPredictionConfig": {
            "fields": [
                {"key": "llm.prediction.temperature", "value": 0.7},
                {"key": "llm.prediction.systemPrompt", "value": "You are a helpful tutor."},
            ]
        },
        "messages": [
            {
                "versions": [
                    {"role": "user", "content": [{"type": "text", "text": "What is Python?"}]}
                ],
                "currentlySelected": 0,
            },
            {
                "versions": [
                    {
                        "role": "assistant",
                        "type": "multiStep",
                        "steps": [
                            {
                                "type": "contentBlock",
                                "content": [
                                    {"type": "text", "text": "Python is a programming language."}
                                ],
                                "genInfo": {
                                    "stats": {
                                        "tokensPerSecond": 12.345,
                                        "timeToFirstTokenSec": 0.2,
                                        "totalTimeSec": 1.2,
                                        "promptTokensCount": 20,
                                        "predictedTokensCount": 15,
                                        "totalTokensCount": 35,
                                    }
                                },
                            },
                            {"type": "debugInfoBlock", "debugInfo": "ignored"},
                        ],
                    }
                ],
                "currentlySelected": 0,
            },
            {"versions": [{"role": "system", "content": "hidden system note"}]},
            {
                "versions": [
                    {"role": "user", "content": "first draft"},
                    {"role": "user", "content": "Show me <b>bold</b> & 'more'"},
                ],
                "currentlySelected": 1,
            },
            {"versions": [{"role": "assistant", "content": "Sure: <b>bold</b>"}]},
        ],
    }


@pytest.fixture()
def sample_conversation_data() -> dict[str, Any]:
    return build_conversation_data()


@pytest.fixture()
def sample_conversation(sample_conversation_data) -> Conversation:
    return Conversation.model_validate(sample_conversation_data)


@pytest.fixture()
def make_conversation() -> Callable[..., Conversation]:
    """Return a helper that builds a Conversation from keyword overrides."""

    def _make(**overrides: Any) -> Conversation:
        data = build_conversation_data()
        data.update(overrides)
        return Conversation.model_validate(data)

    return _make


@pytest.fixture()
def all_options() -> ConversionOptions:
    return ConversionOptions()


@pytest.fixture()
def no_options() -> ConversionOptions:
    return ConversionOptions(
        include_metadata=False,
        include_timestamps=False,
        include_system_prompts=False,
        include_stats=False,
    )


@pytest.fixture()
def client():
    """TestClient with a fresh conversation workspace."""
    with TestClient(app) as tc:
        yield tc


@pytest.fixture()
def upload_conversation() -> Callable[..., Any]:
    """Return a helper that uploads a conversation file."""

    def _upload(
        client: TestClient,
        data: Any,
        filename: str = "conversation.json",
    ):
        body = data if isinstance(data, bytes) else json.dumps(data).encode("utf-8")
        return client.post(
            "/api/v1/conversation",
            files={"file": (filename, body, "application/json")},
        )

    return _upload
