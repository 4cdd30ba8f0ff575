"""Custom exceptions for the chat-export service.

Provides specific exception classes for conversation loading and export errors.
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Load Exceptions
# ---------------------------------------------------------------------------


class ConversationLoadError(Exception):
    """Base exception for errors raised while loading a conversation file."""

    pass


class InvalidFileTypeError(ConversationLoadError):
    """Raised when the uploaded file is not a .json file.

    Error Code: INVALID_FILE_TYPE
    """

    def __init__(self, filename: str | None) -> None:
        self.filename = filename
        super().__init__("Please select a valid JSON file")


class UploadTooLargeError(ConversationLoadError):
    """Raised when the uploaded file exceeds the configured size limit.

    Error Code: UPLOAD_TOO_LARGE
    """

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"Conversation file is {size} bytes, limit is {limit} bytes"
        )


class MalformedConversationFileError(ConversationLoadError):
    """Raised when the file cannot be decoded as JSON.

    Error Code: MALFORMED_JSON
    """

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        message = (
            "Error reading file. Please ensure it's a valid LM Studio "
            "conversation file."
        )
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InvalidConversationError(ConversationLoadError):
    """Raised when the JSON does not have the conversation shape.

    Error Code: INVALID_CONVERSATION
    """

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        message = "Invalid conversation file format"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class EmptyVersionsError(Exception):
    """Raised when a message has no versions to resolve."""

    pass


# ---------------------------------------------------------------------------
# Export Exceptions
# ---------------------------------------------------------------------------


class ExportError(Exception):
    """Base exception for export-related errors."""

    pass


class InvalidExportFormatError(ExportError):
    """Raised when an invalid export format is specified.

    Error Code: INVALID_FORMAT
    """

    def __init__(self, format_value: str) -> None:
        self.format_value = format_value
        super().__init__(
            f"Invalid export format: {format_value}. "
            "Must be 'txt', 'md', 'html' or 'pdf'."
        )


class NoConversationLoadedError(ExportError):
    """Raised when converting with no conversation loaded.

    Error Code: NO_CONVERSATION_LOADED
    """

    def __init__(self) -> None:
        super().__init__("No conversation loaded")


class EmptyContentError(ExportError):
    """Raised when the rendered output is blank.

    Error Code: EMPTY_CONTENT
    """

    def __init__(self, format_value: str) -> None:
        self.format_value = format_value
        super().__init__(f"No content to convert ({format_value})")


class ExportGenerationError(ExportError):
    """Raised when export file generation fails.

    Error Code: EXPORT_GENERATION_FAILED
    """

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        message = "Failed to generate export file"
        if detail:
            message = f"{message}. {detail}"
        super().__init__(message)
