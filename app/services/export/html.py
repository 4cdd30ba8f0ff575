"""HTML exporter for conversations.

Produces a standalone document with embedded styling. All user-supplied
text is escaped before it is embedded.
"""

from __future__ import annotations

import html as html_lib
from typing import TYPE_CHECKING

from app.schemas.conversation import MessageRole
from app.schemas.export import ExportFormat
from app.services.export.base import TextExporter
from app.services.export.stats import format_stats
from app.services.export.traversal import ConversationSink, MetadataHeader

if TYPE_CHECKING:
    from app.schemas.conversation import GenerationStats

FONTS_URL = (
    "https://fonts.googleapis.com/css2?family=IBM+Plex+Sans:wght@300;400;500;600"
    "&family=IBM+Plex+Mono:wght@400;500&display=swap"
)

ROLE_CLASSES = {
    MessageRole.USER: ("user-role", "User"),
    MessageRole.ASSISTANT: ("assistant-role", "Assistant"),
}


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for safe embedding in element content or attributes."""
    return html_lib.escape(text, quote=True)


class HTMLSink(ConversationSink[str]):
    """Builds the HTML document body."""

    CSS_STYLES = """
        * {
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }
        body {
            font-family: 'IBM Plex Sans', -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
            background: #1a1a1a;
            color: #f8fafc;
            line-height: 1.6;
            padding: 40px 20px;
        }
        .container {
            max-width: 900px;
            margin: 0 auto;
            background: #242428;
            border-radius: 16px;
            padding: 40px;
            box-shadow: 0 8px 32px rgba(0, 0, 0, 0.3);
        }
        .header {
            border-bottom: 2px solid #35353b;
            padding-bottom: 24px;
            margin-bottom: 32px;
        }
        h1 {
            font-size: 2rem;
            font-weight: 500;
            color: #ffffff;
            margin-bottom: 16px;
            letter-spacing: -0.02em;
        }
        .metadata {
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
            gap: 12px;
            font-size: 14px;
            color: #cbd5e1;
        }
        .metadata-item {
            display: flex;
            gap: 8px;
        }
        .metadata-label {
            font-weight: 600;
            color: #94a3b8;
        }
        .system-prompt {
            background: #1f1f23;
            border-left: 4px solid #6366f1;
            padding: 20px;
            border-radius: 8px;
            margin-bottom: 32px;
            white-space: pre-wrap;
        }
        .system-prompt-title {
            font-weight: 600;
            color: #6366f1;
            margin-bottom: 12px;
            font-size: 14px;
            text-transform: uppercase;
            letter-spacing: 0.05em;
        }
        .message {
            margin-bottom: 32px;
            display: flex;
            flex-direction: column;
            gap: 12px;
        }
        .message-role {
            font-weight: 600;
            font-size: 14px;
            text-transform: uppercase;
            letter-spacing: 0.05em;
        }
        .user-role {
            color: #10b981;
        }
        .assistant-role {
            color: #6366f1;
        }
        .timestamp {
            font-weight: 400;
            color: #94a3b8;
            text-transform: none;
        }
        .message-content {
            background: #1f1f23;
            padding: 20px;
            border-radius: 12px;
            white-space: pre-wrap;
            word-wrap: break-word;
            font-size: 15px;
            line-height: 1.7;
        }
        .stats {
            background: #28282e;
            padding: 16px;
            border-radius: 8px;
            margin-top: 12px;
            font-size: 13px;
            font-family: 'IBM Plex Mono', monospace;
        }
        .stats-title {
            font-weight: 600;
            color: #94a3b8;
            margin-bottom: 8px;
        }
        .stats-grid {
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(150px, 1fr));
            gap: 8px;
            color: #cbd5e1;
        }
    """

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._header_open = False

    def begin(self, title: str) -> None:
        safe_title = escape_html(title)
        self._parts.append(
            "<!DOCTYPE html>\n"
            '<html lang="en">\n'
            "<head>\n"
            '    <meta charset="UTF-8">\n'
            '    <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
            f"    <title>{safe_title}</title>\n"
            f'    <link href="{escape_html(FONTS_URL)}" rel="stylesheet">\n'
            f"    <style>{self.CSS_STYLES}    </style>\n"
            "</head>\n"
            "<body>\n"
            '    <div class="container">\n'
            '        <div class="header">\n'
            f"            <h1>{safe_title}</h1>"
        )
        self._header_open = True

    def _close_header(self) -> None:
        if self._header_open:
            self._parts.append("\n        </div>")
            self._header_open = False

    def metadata(self, header: MetadataHeader) -> None:
        items = (
            ("Created:", header.created_at),
            ("Model:", header.model),
            ("Tokens:", header.token_count),
        )
        self._parts.append('\n            <div class="metadata">')
        for label, value in items:
            self._parts.append(
                '\n                <div class="metadata-item">'
                f'\n                    <span class="metadata-label">{label}</span>'
                f"\n                    <span>{escape_html(value)}</span>"
                "\n                </div>"
            )
        self._parts.append("\n            </div>")

    def system_prompt(self, text: str) -> None:
        self._close_header()
        self._parts.append(
            '\n        <div class="system-prompt">'
            '\n            <div class="system-prompt-title">System Prompt</div>'
            f"\n            <div>{escape_html(text)}</div>"
            "\n        </div>"
        )

    def message(
        self,
        role: MessageRole,
        content: str,
        timestamp: str | None = None,
        stats: GenerationStats | None = None,
    ) -> None:
        self._close_header()
        role_class, label = ROLE_CLASSES[role]
        if timestamp:
            label = f'{label} <span class="timestamp">({escape_html(timestamp)})</span>'
        self._parts.append(
            '\n        <div class="message">'
            f'\n            <div class="message-role {role_class}">{label}</div>'
            f'\n            <div class="message-content">{escape_html(content)}</div>'
        )
        self._parts.append(format_stats(stats, ExportFormat.HTML))
        self._parts.append("\n        </div>")

    def result(self) -> str:
        self._close_header()
        self._parts.append("\n    </div>\n</body>\n</html>\n")
        return "".join(self._parts)


class HTMLExporter(TextExporter):
    """Export a conversation to a standalone HTML document."""

    @property
    def content_type(self) -> str:
        """MIME type for HTML."""
        return "text/html"

    @property
    def file_extension(self) -> str:
        """File extension for HTML."""
        return "html"

    def create_sink(self) -> HTMLSink:
        return HTMLSink()
