from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from app.dependencies import get_client_manager
from app.services.analysis_services import reject_upload
from vidsentry.video_pipeline.analysis_pipeline import no_video_error

ANALYZE_VIDEO_PATH = "/api/analyze-video"
RESEARCH_CHAT_PATH = "/api/research-chat"


def _chat_error_message(errors) -> str:
    for error in errors:
        location = error.get("loc", ())
        if "history" in location:
            return "Invalid history"
        if "text" in location:
            return "Text is required"
    return "Invalid request body"


async def invalid_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed request bodies with 400 ``{"error": ...}`` instead of FastAPI's 422."""
    errors = exc.errors()
    logger.warning(f"Malformed request to {request.url.path}: {errors}")

    if request.url.path == ANALYZE_VIDEO_PATH:
        return reject_upload(get_client_manager(request), no_video_error())
    if request.url.path == RESEARCH_CHAT_PATH:
        return JSONResponse({"error": _chat_error_message(errors)}, status_code=400)
    return JSONResponse({"error": "Invalid request body"}, status_code=400)
