"""Text extraction from message versions and generation steps.

A version's ``content`` is either a plain string or a list of typed
blocks; only ``text`` blocks contribute, joined with newlines in order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.exceptions import EmptyVersionsError

if TYPE_CHECKING:
    from app.schemas.conversation import ContentBlock, Message, Step, Version

TEXT_BLOCK_TYPE = "text"


def _join_text_blocks(blocks: list[ContentBlock] | None) -> str:
    if not blocks:
        return ""
    return "\n".join(
        block.text or ""
        for block in blocks
        if block.type == TEXT_BLOCK_TYPE
    )


def extract_version_content(version: Version) -> str:
    """Return the text payload of a message version ("" when there is none)."""
    content = version.content
    if isinstance(content, str):
        return content
    return _join_text_blocks(content)


def extract_step_content(step: Step) -> str:
    """Return the text payload of a generation step ("" when there is none)."""
    return _join_text_blocks(step.content)


def current_version(message: Message) -> Version:
    """Return the currently selected version of a message.

    Falls back to the first version when ``currently_selected`` is missing
    or out of range.

    Raises:
        EmptyVersionsError: If the message has no versions at all
    """
    versions = message.versions
    if not versions:
        raise EmptyVersionsError("Message has no versions")

    index = message.currently_selected
    if index is not None and 0 <= index < len(versions):
        return versions[index]
    return versions[0]
