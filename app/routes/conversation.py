"""Conversation load, preview, export and copy endpoints.

One conversation is held per application instance; uploading a file
replaces it. ``/api/v1/convert`` converts an uploaded file in one call
without touching the held conversation.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import Response

from app.exceptions import (
    ConversationLoadError,
    EmptyContentError,
    ExportError,
    ExportGenerationError,
    InvalidConversationError,
    InvalidExportFormatError,
    InvalidFileTypeError,
    MalformedConversationFileError,
    NoConversationLoadedError,
    UploadTooLargeError,
)
from app.schemas.conversation import ConversationSummary
from app.schemas.export import (
    ConversionOptions,
    ConversionRequest,
    CopyResponse,
    ExportFormat,
    PreviewResponse,
)
from app.services import conversation_service, export_service
from app.services.conversation_service import ConversationWorkspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["conversation"])

# exception type -> (status code, error code)
_ERROR_CODES: dict[type[Exception], tuple[int, str]] = {
    InvalidFileTypeError: (400, "INVALID_FILE_TYPE"),
    MalformedConversationFileError: (400, "MALFORMED_JSON"),
    InvalidConversationError: (400, "INVALID_CONVERSATION"),
    UploadTooLargeError: (413, "UPLOAD_TOO_LARGE"),
    NoConversationLoadedError: (404, "NO_CONVERSATION_LOADED"),
    EmptyContentError: (422, "EMPTY_CONTENT"),
    InvalidExportFormatError: (400, "INVALID_FORMAT"),
    ExportGenerationError: (500, "EXPORT_GENERATION_FAILED"),
}


def get_workspace(request: Request) -> ConversationWorkspace:
    """Return the conversation workspace owned by this application."""
    return request.app.state.workspace


def _http_error(exc: Exception) -> HTTPException:
    status_code, code = _ERROR_CODES.get(type(exc), (400, "CONVERSION_FAILED"))
    return HTTPException(
        status_code=status_code,
        detail={
            "error": {
                "code": code,
                "message": str(exc),
            }
        },
    )


def _content_disposition(filename: str) -> str:
    """Build an attachment header that survives non-ASCII names."""
    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace('"', "_").replace("\\", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def _download(artifact: export_service.ExportArtifact) -> Response:
    return Response(
        content=artifact.content,
        media_type=artifact.content_type,
        headers={"Content-Disposition": _content_disposition(artifact.filename)},
    )


@router.post(
    "/conversation",
    response_model=ConversationSummary,
    status_code=201,
)
async def load_conversation(
    file: UploadFile = File(..., description="LM Studio conversation JSON file"),
    workspace: ConversationWorkspace = Depends(get_workspace),
) -> ConversationSummary:
    """Upload a conversation file, replacing the current conversation.

    A rejected file leaves no conversation loaded.
    """
    raw = await file.read()
    try:
        conversation = workspace.load(file.filename, raw)
    except ConversationLoadError as e:
        raise _http_error(e)
    return conversation_service.summarize(conversation)


@router.get("/conversation", response_model=ConversationSummary)
def get_conversation(
    workspace: ConversationWorkspace = Depends(get_workspace),
) -> ConversationSummary:
    """Summary of the currently loaded conversation."""
    try:
        conversation = workspace.require()
    except NoConversationLoadedError as e:
        raise _http_error(e)
    return conversation_service.summarize(conversation)


@router.delete(
    "/conversation",
    status_code=204,
    response_model=None,
)
def clear_conversation(
    workspace: ConversationWorkspace = Depends(get_workspace),
) -> None:
    """Discard the currently loaded conversation."""
    workspace.clear()


@router.post("/conversation/preview", response_model=PreviewResponse)
def preview_conversation(
    request: ConversionRequest,
    workspace: ConversationWorkspace = Depends(get_workspace),
) -> PreviewResponse:
    """Truncated rendering of the current conversation."""
    result = export_service.preview(workspace.current, request.options, request.format)
    return PreviewResponse(
        format=request.format,
        content=result.content,
        truncated=result.truncated,
    )


@router.post("/conversation/export")
def export_conversation(
    request: ConversionRequest,
    workspace: ConversationWorkspace = Depends(get_workspace),
) -> Response:
    """Download the current conversation in the requested format."""
    try:
        artifact = export_service.export_downloadable(
            workspace.current, request.options, request.format
        )
    except ExportError as e:
        logger.warning("Export as %s failed: %s", request.format.value, e)
        raise _http_error(e)
    return _download(artifact)


@router.post("/conversation/copy", response_model=CopyResponse)
def copy_conversation(
    request: ConversionRequest,
    workspace: ConversationWorkspace = Depends(get_workspace),
) -> CopyResponse:
    """Full text rendering of the current conversation for the clipboard."""
    try:
        content = export_service.copyable_text(
            workspace.current, request.options, request.format
        )
    except ExportError as e:
        raise _http_error(e)
    return CopyResponse(format=request.format, content=content)


@router.post("/convert")
async def convert_file(
    file: UploadFile = File(..., description="LM Studio conversation JSON file"),
    format: ExportFormat = Form(ExportFormat.TXT),
    include_metadata: bool = Form(True),
    include_timestamps: bool = Form(True),
    include_system_prompts: bool = Form(True),
    include_stats: bool = Form(True),
) -> Response:
    """Convert an uploaded file in one call and download the result."""
    raw = await file.read()
    options = ConversionOptions(
        include_metadata=include_metadata,
        include_timestamps=include_timestamps,
        include_system_prompts=include_system_prompts,
        include_stats=include_stats,
    )
    try:
        conversation = conversation_service.parse_conversation(file.filename, raw)
        artifact = export_service.export_downloadable(conversation, options, format)
    except (ConversationLoadError, ExportError) as e:
        raise _http_error(e)
    return _download(artifact)
