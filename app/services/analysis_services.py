import uuid
from typing import Optional, Tuple
from fastapi import UploadFile
from fastapi.responses import JSONResponse
from loguru import logger

from vidsentry.client_manager import ClientManager
from vidsentry.exceptions import InvalidInputException
from vidsentry.models import ANALYSIS_STATUS_EVENT, AnalysisStatus, ProgressEvent
from vidsentry.security import analyze_for_security
from vidsentry.utils.error_handler import ErrorHandler
from vidsentry.video_pipeline import broadcast_emitter
from vidsentry.video_pipeline.analysis_pipeline import (
    no_video_error,
    resolve_mime_type,
    too_large_error,
    validate_upload,
)
from app.utilities.execution_timer import ExecutionTimer


def _processing_error(e: Exception) -> JSONResponse:
    return JSONResponse(
        {"error": "Error processing video", "details": ErrorHandler.describe(e)},
        status_code=500,
    )


def reject_upload(manager: ClientManager, error: InvalidInputException) -> JSONResponse:
    """Report an upload rejected before the pipeline runs, the same way the pipeline reports one."""
    emit = broadcast_emitter(manager.broadcaster)
    invocation_id = uuid.uuid4().hex
    emit(ProgressEvent(AnalysisStatus.STARTED, "Starting video analysis", invocation_id=invocation_id))
    emit(ProgressEvent(AnalysisStatus.ERROR, f"Error: {error}", invocation_id=invocation_id))
    logger.warning(f"[{invocation_id}] Rejected upload: {error}")
    return JSONResponse({"error": str(error)}, status_code=400)


async def read_upload(video: Optional[UploadFile], limit: int) -> Tuple[bytes, str, Optional[str]]:
    """Read at most ``limit + 1`` bytes of the upload and validate it."""
    if video is None:
        raise no_video_error()
    if video.size is not None and video.size > limit:
        raise too_large_error(video.size, limit)

    payload = await video.read(limit + 1)
    original_name = video.filename or ""
    mime_type = resolve_mime_type(video.content_type, original_name)
    validate_upload(payload, mime_type, limit)
    return payload, original_name, mime_type


async def analyze_video(video: Optional[UploadFile], manager: ClientManager):
    try:
        payload, original_name, mime_type = await read_upload(video, manager.config.pipeline.max_upload_bytes)
    except InvalidInputException as e:
        return reject_upload(manager, e)

    try:
        pipeline = manager.get_pipeline()
    except Exception as e:
        logger.exception(f"Video analysis unavailable: {e}")
        manager.broadcaster.publish(
            ANALYSIS_STATUS_EVENT,
            ProgressEvent(AnalysisStatus.ERROR, f"Error: {e}").to_payload(),
        )
        return _processing_error(e)

    try:
        with ExecutionTimer(f"Video analysis of {original_name!r}"):
            result = await pipeline.analyze(
                payload,
                original_name,
                mime_type,
                emit=broadcast_emitter(manager.broadcaster),
            )
    except InvalidInputException as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except Exception as e:
        return _processing_error(e)

    return {"analysis": result.text, "status": "success"}


async def scan_analysis(analysis) -> dict:
    return analyze_for_security(analysis).to_dict()
