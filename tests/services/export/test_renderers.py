"""Tests for the plain-text, Markdown and HTML exporters.

Tests cover:
- Shared traversal (block count, order, skipped roles, selected versions)
- Metadata, system prompt and statistics options
- Fallback literals for missing fields
- HTML escaping
"""

from __future__ import annotations

import pytest

from app.schemas.conversation import Conversation
from app.schemas.export import ConversionOptions
from app.services.export import (
    HTMLExporter,
    MarkdownExporter,
    PlainTextExporter,
    get_exporter,
)
from app.services.export.text import SEPARATOR

TEXT_EXPORTERS = [PlainTextExporter, MarkdownExporter, HTMLExporter]

BLOCK_MARKERS = {
    PlainTextExporter: ("USER:\n", "ASSISTANT:\n"),
    MarkdownExporter: ("## User\n", "## Assistant\n"),
    HTMLExporter: ('role user-role">User', 'role assistant-role">Assistant'),
}


def _count_blocks(exporter_class, output: str) -> int:
    user, assistant = BLOCK_MARKERS[exporter_class]
    return output.count(user) + output.count(assistant)


@pytest.mark.parametrize("exporter_class", TEXT_EXPORTERS)
class TestSharedTraversal:
    def test_one_block_per_renderable_message(
        self, exporter_class, sample_conversation, all_options
    ):
        output = exporter_class().render(sample_conversation, all_options)

        assert _count_blocks(exporter_class, output) == 4
        assert "hidden system note" not in output

    def test_messages_in_original_order(self, exporter_class, sample_conversation, no_options):
        output = exporter_class().render(sample_conversation, no_options)

        first = output.index("What is Python?")
        second = output.index("Python is a programming language.")
        third = output.index("Show me")
        fourth = output.index("Sure:")
        assert first < second < third < fourth

    def test_selected_version_is_rendered(self, exporter_class, sample_conversation, no_options):
        output = exporter_class().render(sample_conversation, no_options)

        assert "first draft" not in output

    def test_render_is_idempotent(self, exporter_class, sample_conversation, all_options):
        exporter = exporter_class()

        assert exporter.render(sample_conversation, all_options) == exporter.render(
            sample_conversation, all_options
        )

    def test_none_conversation_renders_empty(self, exporter_class, all_options):
        assert exporter_class().render(None, all_options) == ""

    def test_missing_model_renders_unknown(self, exporter_class, make_conversation, all_options):
        conversation = make_conversation(lastUsedModel=None, tokenCount=None)
        output = exporter_class().render(conversation, all_options)

        assert "Unknown" in output

    def test_stats_only_when_enabled(self, exporter_class, sample_conversation, all_options):
        with_stats = exporter_class().render(sample_conversation, all_options)
        without = exporter_class().render(
            sample_conversation, all_options.model_copy(update={"include_stats": False})
        )

        assert "12.35" in with_stats
        assert "12.35" not in without

    def test_system_prompt_only_when_enabled(
        self, exporter_class, sample_conversation, all_options
    ):
        with_prompt = exporter_class().render(sample_conversation, all_options)
        without = exporter_class().render(
            sample_conversation,
            all_options.model_copy(update={"include_system_prompts": False}),
        )

        assert "You are a helpful tutor." in with_prompt
        assert "You are a helpful tutor." not in without

    def test_empty_messages_with_metadata(self, exporter_class, make_conversation, all_options):
        conversation = make_conversation(messages=[], perChatPredictionConfig=None)
        output = exporter_class().render(conversation, all_options)

        assert "qwen2.5-7b-instruct" in output
        assert _count_blocks(exporter_class, output) == 0

    def test_export_encodes_utf8(self, exporter_class, make_conversation, no_options):
        conversation = make_conversation(
            messages=[{"versions": [{"role": "user", "content": "héllo ✓"}]}]
        )
        exported = exporter_class().export(conversation, no_options)

        assert "héllo ✓" in exported.decode("utf-8")


class TestPlainText:
    def test_full_output(self, sample_conversation, all_options):
        output = PlainTextExporter().render(sample_conversation, all_options)

        assert output == (
            "Conversation: Python Basics\n"
            "Created: 2024-05-01 10:00:00 UTC\n"
            "Model: qwen2.5-7b-instruct\n"
            "Token Count: 321\n"
            f"\n{SEPARATOR}\n\n"
            "SYSTEM PROMPT:\nYou are a helpful tutor.\n\n"
            f"{SEPARATOR}\n\n"
            "USER:\nWhat is Python?\n\n"
            "ASSISTANT:\nPython is a programming language.\n\n"
            "Generation Stats:\n"
            "  Tokens/sec: 12.35\n"
            "  Time to first token: 0.200s\n"
            "  Total time: 1.200s\n"
            "  Prompt tokens: 20\n"
            "  Generated tokens: 15\n"
            "  Total tokens: 35\n\n"
            "USER:\nShow me <b>bold</b> & 'more'\n\n"
            "ASSISTANT:\nSure: <b>bold</b>\n\n"
        )

    def test_empty_messages_only_metadata(self, make_conversation, all_options):
        conversation = make_conversation(messages=[], perChatPredictionConfig=None)
        output = PlainTextExporter().render(conversation, all_options)

        assert output.endswith(f"{SEPARATOR}\n\n")
        assert "USER" not in output
        assert "ASSISTANT" not in output

    def test_legacy_system_prompt_in_metadata(self, make_conversation, all_options):
        conversation = make_conversation(systemPrompt="Be terse.")
        output = PlainTextExporter().render(conversation, all_options)

        assert "System Prompt: Be terse.\n" in output

    def test_missing_name_and_created_at(self, all_options):
        conversation = Conversation(name="", messages=[])
        output = PlainTextExporter().render(conversation, all_options)

        assert "Conversation: Untitled Conversation\n" in output
        assert "Created: Unknown\n" in output
        assert "Model: Unknown\n" in output
        assert "Token Count: Unknown\n" in output

    def test_timestamps_annotate_messages(self, make_conversation, all_options):
        conversation = make_conversation(
            messages=[
                {"createdAt": 1714557660000, "versions": [{"role": "user", "content": "hi"}]},
                {"versions": [{"role": "assistant", "content": "hello"}]},
            ]
        )
        output = PlainTextExporter().render(conversation, all_options)
        untimed = PlainTextExporter().render(
            conversation, all_options.model_copy(update={"include_timestamps": False})
        )

        assert "USER (2024-05-01 10:01:00 UTC):\nhi" in output
        assert "ASSISTANT:\nhello" in output
        assert "USER:\nhi" in untimed


class TestMarkdown:
    def test_metadata_header(self, sample_conversation, all_options):
        output = MarkdownExporter().render(sample_conversation, all_options)

        assert output.startswith("# Python Basics\n\n")
        assert "**Created:** 2024-05-01 10:00:00 UTC" in output
        assert "**Model:** qwen2.5-7b-instruct" in output
        assert "**Token Count:** 321" in output
        assert "## System Prompt\n\nYou are a helpful tutor.\n\n---\n" in output

    def test_stats_follow_step_content(self, sample_conversation, all_options):
        output = MarkdownExporter().render(sample_conversation, all_options)

        assert (
            "## Assistant\n\nPython is a programming language.\n\n"
            "### Generation Statistics\n\n- **Tokens per second:** 12.35\n"
        ) in output
        assert output.index("### Generation Statistics") < output.index("Show me")

    def test_multi_step_renders_each_content_step(self, make_conversation, no_options):
        conversation = make_conversation(
            messages=[
                {
                    "versions": [
                        {
                            "role": "assistant",
                            "type": "multiStep",
                            "steps": [
                                {"type": "contentBlock", "content": [{"type": "text", "text": "one"}]},
                                {"type": "contentBlock", "content": []},
                                {"type": "toolCallBlock", "content": [{"type": "text", "text": "tool"}]},
                                {"type": "contentBlock", "content": [{"type": "text", "text": "two"}]},
                            ],
                        }
                    ]
                }
            ]
        )
        output = MarkdownExporter().render(conversation, no_options)

        assert output == "## Assistant\n\none\n\n## Assistant\n\ntwo\n\n"

    def test_no_metadata_no_blocks_is_empty(self, make_conversation, no_options):
        conversation = make_conversation(messages=[])

        assert MarkdownExporter().render(conversation, no_options) == ""


class TestHTML:
    def test_escapes_user_text(self, make_conversation, all_options):
        conversation = make_conversation(
            name="<script>alert(1)</script>",
            lastUsedModel={"identifier": 'model "x" & y'},
        )
        output = HTMLExporter().render(conversation, all_options)

        assert "<script>alert(1)</script>" not in output
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in output
        assert "model &quot;x&quot; &amp; y" in output
        assert "Show me &lt;b&gt;bold&lt;/b&gt; &amp; &#x27;more&#x27;" in output
        assert "Sure: &lt;b&gt;bold&lt;/b&gt;" in output

    def test_complete_document(self, sample_conversation, all_options):
        output = HTMLExporter().render(sample_conversation, all_options)

        assert output.startswith("<!DOCTYPE html>")
        assert "<style>" in output
        assert output.rstrip().endswith("</html>")
        assert output.count("<div") == output.count("</div>")

    def test_metadata_grid_and_roles(self, sample_conversation, all_options):
        output = HTMLExporter().render(sample_conversation, all_options)

        assert '<div class="metadata">' in output
        assert '<div class="system-prompt">' in output
        assert 'class="message-role user-role"' in output
        assert 'class="message-role assistant-role"' in output
        assert '<div class="stats">' in output

    def test_title_without_metadata(self, sample_conversation, no_options):
        output = HTMLExporter().render(sample_conversation, no_options)

        assert "<h1>Python Basics</h1>" in output
        assert '<div class="metadata">' not in output
        assert output.count("<div") == output.count("</div>")


def test_get_exporter_accepts_plain_strings():
    assert isinstance(get_exporter("md"), MarkdownExporter)


def test_generate_filename(make_conversation):
    assert PlainTextExporter().generate_filename(make_conversation()) == "Python Basics.txt"
    assert HTMLExporter().generate_filename(make_conversation(name="")) == "conversation.html"
    assert MarkdownExporter().generate_filename(None) == "conversation.md"


def test_options_default_to_enabled():
    options = ConversionOptions()

    assert options.include_metadata
    assert options.include_timestamps
    assert options.include_system_prompts
    assert options.include_stats


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a\r\nb", "a__b.txt"),
        ("notes/2024\\may", "notes_2024_may.txt"),
        ("tab\there\x7f", "tab_here_.txt"),
        ("\r\n", "conversation.txt"),
        ("  ", "conversation.txt"),
    ],
)
def test_generate_filename_strips_unsafe_characters(make_conversation, name, expected):
    assert PlainTextExporter().generate_filename(make_conversation(name=name)) == expected
