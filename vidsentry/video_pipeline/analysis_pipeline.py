import mimetypes
import uuid
from typing import Callable, Optional
from loguru import logger

from vidsentry.exceptions import (
    InferenceException,
    InvalidInputException,
    ProcessingTimeoutOrFailureException,
    RemoteSubmissionException,
)
from vidsentry.providers.base import InferenceProvider
from vidsentry.video_pipeline.broadcaster import ProgressBroadcaster
from vidsentry.models import (
    ANALYSIS_GENERATION,
    ANALYSIS_STATUS_EVENT,
    AnalysisResult,
    AnalysisStatus,
    FilePart,
    GenerationSettings,
    ProgressEvent,
    RemoteFileHandle,
    UploadedAsset,
)
from vidsentry.video_pipeline.polling import FileProcessingPoller
from vidsentry.video_pipeline.prompts import VIDEO_ANALYSIS_PROMPT
from vidsentry.video_pipeline.storage import TemporaryAssetStore

ProgressEmitter = Callable[[ProgressEvent], None]


def broadcast_emitter(broadcaster: ProgressBroadcaster) -> ProgressEmitter:
    """Emitter that publishes each event as an ``analysisStatus`` message."""

    def emit(event: ProgressEvent):
        broadcaster.publish(ANALYSIS_STATUS_EVENT, event.to_payload())

    return emit


def _ignore(event: ProgressEvent):
    pass


def resolve_mime_type(declared: Optional[str], original_name: str) -> Optional[str]:
    if declared and declared != "application/octet-stream":
        return declared
    guessed, _ = mimetypes.guess_type(original_name or "")
    return guessed or declared


def no_video_error() -> InvalidInputException:
    return InvalidInputException("No video file provided", error_code="NO_VIDEO")


def too_large_error(size: int, limit: int) -> InvalidInputException:
    return InvalidInputException(
        "Video file too large",
        error_code="VIDEO_TOO_LARGE",
        details={"size": size, "limit": limit},
    )


def validate_upload(video_bytes: Optional[bytes], mime_type: Optional[str], max_upload_bytes: Optional[int] = None):
    """Raise InvalidInputException for an empty, non-video or oversized upload."""
    if not video_bytes:
        raise no_video_error()
    if not mime_type or not mime_type.startswith("video/"):
        raise InvalidInputException(
            "Invalid video file",
            error_code="INVALID_VIDEO",
            details={"mime_type": mime_type},
        )
    if max_upload_bytes is not None and len(video_bytes) > max_upload_bytes:
        raise too_large_error(len(video_bytes), max_upload_bytes)


class VideoAnalysisPipeline:
    """
    Runs one uploaded video through the remote model.

    Steps: validate, persist locally, submit to the provider, poll until the
    remote file is ACTIVE, analyze, clean up. A ProgressEvent is emitted on
    entry to each milestone; any failure emits an ``error`` event and is
    re-raised. The temporary file is removed on success and on failure.

    Example Usage:
    ---------------
    >>> pipeline = VideoAnalysisPipeline(provider, TemporaryAssetStore("uploads"), FileProcessingPoller(provider))
    >>> result = await pipeline.analyze(data, "clip.mp4", "video/mp4", emit=broadcast_emitter(broadcaster))
    >>> print(result.text)
    """

    def __init__(
        self,
        provider: InferenceProvider,
        store: TemporaryAssetStore,
        poller: FileProcessingPoller,
        generation: GenerationSettings = ANALYSIS_GENERATION,
        max_upload_bytes: Optional[int] = None,
        prompt: str = VIDEO_ANALYSIS_PROMPT,
    ):
        self.provider = provider
        self.store = store
        self.poller = poller
        self.generation = generation
        self.max_upload_bytes = max_upload_bytes
        self.prompt = prompt

    async def _submit(self, asset: UploadedAsset, display_name: str) -> RemoteFileHandle:
        try:
            return await self.provider.upload_file(str(asset.path), asset.mime_type, display_name)
        except Exception as e:
            raise RemoteSubmissionException(f"Upload to inference service failed: {e}") from e

    async def _wait_until_active(self, handle: RemoteFileHandle, emit: ProgressEmitter, invocation_id: str):
        def on_attempt(attempt: int, max_attempts: int):
            emit(ProgressEvent(
                AnalysisStatus.PROCESSING,
                f"Processing video (attempt {attempt}/{max_attempts})",
                invocation_id=invocation_id,
                attempt=attempt,
            ))

        try:
            outcome = await self.poller.wait_until_ready(handle, on_attempt=on_attempt)
        except Exception as e:
            raise ProcessingTimeoutOrFailureException(f"Error while polling remote file: {e}") from e

        if not outcome.is_ready:
            raise ProcessingTimeoutOrFailureException(
                f"File processing failed or timeout reached "
                f"(remote state {outcome.handle.state.value} after {outcome.attempts} attempts)",
                state=outcome.handle.state.value,
                attempts=outcome.attempts,
            )
        return outcome

    async def _run_analysis(self, handle: RemoteFileHandle) -> str:
        try:
            session = self.provider.start_chat(self.generation)
            return await session.send_message([
                FilePart(uri=handle.uri, mime_type=handle.mime_type),
                self.prompt,
            ])
        except Exception as e:
            raise InferenceException(f"Content analysis failed: {e}") from e

    async def analyze(
        self,
        video_bytes: Optional[bytes],
        original_name: str,
        mime_type: Optional[str],
        emit: Optional[ProgressEmitter] = None,
        invocation_id: Optional[str] = None,
    ) -> AnalysisResult:
        emit = emit or _ignore
        invocation_id = invocation_id or uuid.uuid4().hex

        def status(state: AnalysisStatus, message: str):
            emit(ProgressEvent(state, message, invocation_id=invocation_id))

        status(AnalysisStatus.STARTED, "Starting video analysis")
        asset = None
        try:
            mime_type = resolve_mime_type(mime_type, original_name)
            validate_upload(video_bytes, mime_type, self.max_upload_bytes)

            status(AnalysisStatus.UPLOADING, "Uploading video to server")
            asset = await self.store.persist(video_bytes, original_name, mime_type)

            logger.info(f"[{invocation_id}] Submitting {asset.name} to the inference service")
            handle = await self._submit(asset, original_name)

            outcome = await self._wait_until_active(handle, emit, invocation_id)

            status(AnalysisStatus.ANALYZING, "Analyzing video content")
            text = await self._run_analysis(outcome.handle)
        except Exception as e:
            status(AnalysisStatus.ERROR, f"Error: {e}")
            if isinstance(e, InvalidInputException):
                logger.warning(f"[{invocation_id}] Rejected upload: {e}")
            else:
                logger.exception(f"[{invocation_id}] Error processing video: {e}")
            raise
        finally:
            if asset is not None:
                await self.store.discard(asset)

        status(AnalysisStatus.COMPLETED, "Analysis completed")
        return AnalysisResult(
            invocation_id=invocation_id,
            text=text,
            poll_attempts=outcome.attempts,
            remote_file_id=outcome.handle.file_id,
        )
