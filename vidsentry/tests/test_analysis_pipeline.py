"""Tests for the video analysis pipeline."""

import asyncio
import os

import pytest

from vidsentry.exceptions import (
    CleanupException,
    InferenceException,
    InvalidInputException,
    ProcessingTimeoutOrFailureException,
    RemoteSubmissionException,
)
from vidsentry.models import ANALYSIS_GENERATION, AnalysisStatus, FilePart, FileState
from vidsentry.video_pipeline.storage import TemporaryAssetStore

VIDEO = b"\x00\x00\x00\x18ftypmp42fake video bytes"


def _statuses(events):
    return [event.status for event in events]


def _run(pipeline, events, payload=VIDEO, name="clip.mp4", mime_type="video/mp4"):
    return asyncio.run(pipeline.analyze(payload, name, mime_type, emit=events.append))


def test_missing_video_is_invalid_input_without_upload_events(fake_provider_cls, make_pipeline, collected_events):
    provider = fake_provider_cls()
    pipeline = make_pipeline(provider)

    with pytest.raises(InvalidInputException, match="No video file provided"):
        _run(pipeline, collected_events, payload=b"")

    assert _statuses(collected_events) == [AnalysisStatus.STARTED, AnalysisStatus.ERROR]
    assert provider.uploads == []


def test_non_video_mime_type_is_rejected(fake_provider_cls, make_pipeline, collected_events):
    pipeline = make_pipeline(fake_provider_cls())

    with pytest.raises(InvalidInputException, match="Invalid video file"):
        _run(pipeline, collected_events, name="notes.txt", mime_type="text/plain")


def test_octet_stream_falls_back_to_filename_guess(fake_provider_cls, make_pipeline, collected_events):
    provider = fake_provider_cls()
    pipeline = make_pipeline(provider)

    _run(pipeline, collected_events, name="clip.mp4", mime_type="application/octet-stream")

    assert provider.uploads[0]["mime_type"] == "video/mp4"


def test_oversized_upload_is_rejected(fake_provider_cls, make_pipeline, collected_events):
    provider = fake_provider_cls()
    pipeline = make_pipeline(provider, max_upload_bytes=4)

    with pytest.raises(InvalidInputException, match="too large"):
        _run(pipeline, collected_events)
    assert provider.uploads == []


def test_successful_run_emits_statuses_in_step_order(fake_provider_cls, make_pipeline, collected_events):
    provider = fake_provider_cls(states=[FileState.PROCESSING, FileState.PROCESSING, FileState.PROCESSING,
                                         FileState.ACTIVE])
    pipeline = make_pipeline(provider)

    result = _run(pipeline, collected_events)

    assert _statuses(collected_events) == [
        AnalysisStatus.STARTED,
        AnalysisStatus.UPLOADING,
        AnalysisStatus.PROCESSING,
        AnalysisStatus.PROCESSING,
        AnalysisStatus.PROCESSING,
        AnalysisStatus.ANALYZING,
        AnalysisStatus.COMPLETED,
    ]
    attempts = [e.attempt for e in collected_events if e.status == AnalysisStatus.PROCESSING]
    assert attempts == [1, 2, 3]
    assert collected_events[2].message == "Processing video (attempt 1/30)"
    assert result.text == provider.response_text
    assert result.poll_attempts == 3


def test_already_active_file_skips_processing_events(fake_provider_cls, make_pipeline, collected_events, recording_sleep):
    pipeline = make_pipeline(fake_provider_cls(states=[FileState.ACTIVE]))

    _run(pipeline, collected_events)

    assert AnalysisStatus.PROCESSING not in _statuses(collected_events)
    assert recording_sleep.delays == []


def test_events_share_one_invocation_id(fake_provider_cls, make_pipeline, collected_events):
    pipeline = make_pipeline(fake_provider_cls(states=[FileState.PROCESSING, FileState.ACTIVE]))

    result = asyncio.run(pipeline.analyze(VIDEO, "clip.mp4", "video/mp4", emit=collected_events.append,
                                          invocation_id="inv-1"))

    assert result.invocation_id == "inv-1"
    assert {e.invocation_id for e in collected_events} == {"inv-1"}


def test_analysis_request_uses_remote_file_and_structured_generation(fake_provider_cls, make_pipeline, collected_events):
    provider = fake_provider_cls()
    pipeline = make_pipeline(provider)

    _run(pipeline, collected_events)

    assert provider.uploads[0]["display_name"] == "clip.mp4"
    assert provider.uploads[0]["existed"] is True
    assert provider.chats[0]["generation"] == ANALYSIS_GENERATION
    assert provider.chats[0]["history"] == []
    assert ANALYSIS_GENERATION.temperature == 1.0
    assert ANALYSIS_GENERATION.top_p == 0.95
    assert ANALYSIS_GENERATION.top_k == 40
    assert ANALYSIS_GENERATION.max_output_tokens == 8192
    assert ANALYSIS_GENERATION.response_mime_type == "application/json"

    file_part, prompt = provider.sent_messages[0]
    assert file_part == FilePart(uri="https://example.test/files/abc123", mime_type="video/mp4")
    assert "Key events and timestamps" in prompt


def test_poll_ceiling_fails_after_thirty_attempts(fake_provider_cls, make_pipeline, collected_events, recording_sleep):
    provider = fake_provider_cls(states=[FileState.PROCESSING])
    pipeline = make_pipeline(provider)

    with pytest.raises(ProcessingTimeoutOrFailureException) as exc_info:
        _run(pipeline, collected_events)

    processing = [e for e in collected_events if e.status == AnalysisStatus.PROCESSING]
    assert [e.attempt for e in processing] == list(range(1, 31))
    assert len(recording_sleep.delays) == 30
    assert set(recording_sleep.delays) == {10.0}
    assert exc_info.value.attempts == 30
    assert exc_info.value.state == "PROCESSING"
    assert _statuses(collected_events)[-1] == AnalysisStatus.ERROR
    assert provider.chats == []


def test_remote_failure_keeps_terminal_state(fake_provider_cls, make_pipeline, collected_events):
    pipeline = make_pipeline(fake_provider_cls(states=[FileState.PROCESSING, FileState.FAILED]))

    with pytest.raises(ProcessingTimeoutOrFailureException) as exc_info:
        _run(pipeline, collected_events)

    assert exc_info.value.state == "FAILED"
    assert exc_info.value.attempts == 1
    assert "FAILED" in str(exc_info.value)


def test_upload_failure_is_remote_submission_failure(fake_provider_cls, make_pipeline, collected_events, tmp_path):
    provider = fake_provider_cls(upload_error=RuntimeError("quota exceeded"))
    pipeline = make_pipeline(provider)

    with pytest.raises(RemoteSubmissionException, match="quota exceeded"):
        _run(pipeline, collected_events)

    error = collected_events[-1]
    assert error.status == AnalysisStatus.ERROR
    assert error.message.startswith("Error: ")
    assert "quota exceeded" in error.message
    assert os.listdir(tmp_path / "uploads") == []


def test_inference_failure_cleans_up_and_reports_error(fake_provider_cls, make_pipeline, collected_events, tmp_path):
    provider = fake_provider_cls(chat_error=RuntimeError("model overloaded"))
    pipeline = make_pipeline(provider)

    with pytest.raises(InferenceException, match="model overloaded"):
        _run(pipeline, collected_events)

    assert _statuses(collected_events)[-2:] == [AnalysisStatus.ANALYZING, AnalysisStatus.ERROR]
    assert os.listdir(tmp_path / "uploads") == []


def test_temporary_file_removed_after_success(fake_provider_cls, make_pipeline, collected_events, tmp_path):
    provider = fake_provider_cls()
    pipeline = make_pipeline(provider)

    _run(pipeline, collected_events)

    assert not os.path.exists(provider.uploads[0]["path"])
    assert os.listdir(tmp_path / "uploads") == []


class BrokenRemovalStore(TemporaryAssetStore):
    async def remove(self, asset):
        raise CleanupException("disk is read-only")


def test_cleanup_failure_does_not_change_result(fake_provider_cls, make_pipeline, collected_events, tmp_path):
    provider = fake_provider_cls()
    pipeline = make_pipeline(provider, store=BrokenRemovalStore(str(tmp_path / "uploads")))

    result = _run(pipeline, collected_events)

    assert result.text == provider.response_text
    assert _statuses(collected_events)[-1] == AnalysisStatus.COMPLETED


def test_cleanup_failure_does_not_mask_pipeline_error(fake_provider_cls, make_pipeline, collected_events, tmp_path):
    provider = fake_provider_cls(chat_error=RuntimeError("boom"))
    pipeline = make_pipeline(provider, store=BrokenRemovalStore(str(tmp_path / "uploads")))

    with pytest.raises(InferenceException, match="boom"):
        _run(pipeline, collected_events)
