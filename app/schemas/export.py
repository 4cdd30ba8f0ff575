"""Pydantic v2 schemas for conversion and export endpoints."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ExportFormat(str, Enum):
    """Supported output formats for a conversation."""

    TXT = "txt"
    MARKDOWN = "md"
    HTML = "html"
    PDF = "pdf"


class ConversionOptions(BaseModel):
    """Inclusion flags chosen by the caller."""

    include_metadata: bool = True
    include_timestamps: bool = True
    include_system_prompts: bool = True
    include_stats: bool = True


class ConversionRequest(BaseModel):
    """Request body for preview, export and copy endpoints."""

    format: ExportFormat = ExportFormat.TXT
    options: ConversionOptions = Field(default_factory=ConversionOptions)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "format": "md",
                    "options": {
                        "include_metadata": True,
                        "include_timestamps": False,
                        "include_system_prompts": True,
                        "include_stats": True,
                    },
                }
            ]
        }
    )


class PreviewResponse(BaseModel):
    """Truncated rendering shown before download."""

    format: ExportFormat
    content: str
    truncated: bool = False


class CopyResponse(BaseModel):
    """Full text rendering for the clipboard."""

    format: ExportFormat
    content: str
