"""Tests for content extraction and version resolution."""

import pytest

from app.exceptions import EmptyVersionsError
from app.schemas.conversation import Message, Step, Version
from app.services.export.content import (
    current_version,
    extract_step_content,
    extract_version_content,
)


class TestExtractVersionContent:
    def test_string_content_returned_verbatim(self):
        version = Version(role="user", content="hello")
        assert extract_version_content(version) == "hello"

    def test_text_blocks_joined_in_order(self):
        version = Version.model_validate(
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "a"},
                    {"type": "image", "fileIdentifier": "cat.png"},
                    {"type": "text", "text": "b"},
                ],
            }
        )
        assert extract_version_content(version) == "a\nb"

    def test_duplicate_blocks_are_kept(self):
        version = Version.model_validate(
            {
                "role": "user",
                "content": [{"type": "text", "text": "x"}, {"type": "text", "text": "x"}],
            }
        )
        assert extract_version_content(version) == "x\nx"

    @pytest.mark.parametrize("content", [[], None])
    def test_empty_or_missing_content(self, content):
        version = Version(role="user", content=content)
        assert extract_version_content(version) == ""

    def test_only_non_text_blocks(self):
        version = Version.model_validate(
            {"role": "user", "content": [{"type": "file", "fileIdentifier": "doc.pdf"}]}
        )
        assert extract_version_content(version) == ""


class TestExtractStepContent:
    def test_text_blocks(self):
        step = Step.model_validate(
            {
                "type": "contentBlock",
                "content": [
                    {"type": "text", "text": "first"},
                    {"type": "toolCall", "name": "search"},
                    {"type": "text", "text": "second"},
                ],
            }
        )
        assert extract_step_content(step) == "first\nsecond"

    def test_missing_content(self):
        assert extract_step_content(Step(type="contentBlock")) == ""


class TestCurrentVersion:
    @pytest.fixture()
    def versions(self):
        return [Version(role="user", content="v0"), Version(role="user", content="v1")]

    def test_selected_index(self, versions):
        message = Message(versions=versions, currently_selected=1)
        assert current_version(message) is versions[1]

    def test_missing_index_defaults_to_first(self, versions):
        message = Message(versions=versions)
        assert current_version(message) is versions[0]

    @pytest.mark.parametrize("index", [5, -1])
    def test_out_of_range_defaults_to_first(self, versions, index):
        message = Message(versions=versions, currently_selected=index)
        assert current_version(message) is versions[0]

    def test_empty_versions_raises(self):
        message = Message.model_construct(versions=[], currently_selected=None)
        with pytest.raises(EmptyVersionsError):
            current_version(message)
