"""Tests for the remote file polling state machine."""

import asyncio

import pytest

from vidsentry.exceptions import ProviderException
from vidsentry.models import FileState, RemoteFileHandle
from vidsentry.video_pipeline.polling import FileProcessingPoller, PollState

HANDLE = RemoteFileHandle(file_id="files/xyz", mime_type="video/mp4", state=FileState.PROCESSING)


def _poll(poller, on_attempt=None):
    return asyncio.run(poller.wait_until_ready(HANDLE, on_attempt=on_attempt))


def test_becomes_active(fake_provider_cls, recording_sleep):
    provider = fake_provider_cls(states=[FileState.PROCESSING, FileState.ACTIVE])
    poller = FileProcessingPoller(provider, interval=10.0, max_attempts=30, sleep=recording_sleep)

    outcome = _poll(poller)

    assert outcome.state == PollState.ACTIVE
    assert outcome.is_ready
    assert outcome.attempts == 1
    assert outcome.handle.state == FileState.ACTIVE
    assert recording_sleep.delays == [10.0]


def test_failed_state_stops_polling(fake_provider_cls, recording_sleep):
    provider = fake_provider_cls(states=[FileState.FAILED])
    poller = FileProcessingPoller(provider, sleep=recording_sleep)

    outcome = _poll(poller)

    assert outcome.state == PollState.FAILED
    assert not outcome.is_ready
    assert outcome.attempts == 0
    assert provider.get_calls == 1


def test_unspecified_state_counts_as_failure(fake_provider_cls, recording_sleep):
    poller = FileProcessingPoller(fake_provider_cls(states=[FileState.STATE_UNSPECIFIED]), sleep=recording_sleep)

    assert _poll(poller).state == PollState.FAILED


def test_times_out_at_max_attempts(fake_provider_cls, recording_sleep):
    provider = fake_provider_cls(states=[FileState.PROCESSING])
    poller = FileProcessingPoller(provider, interval=2.5, max_attempts=5, sleep=recording_sleep)
    seen = []

    outcome = _poll(poller, on_attempt=lambda attempt, limit: seen.append((attempt, limit)))

    assert outcome.state == PollState.TIMED_OUT
    assert outcome.attempts == 5
    assert seen == [(1, 5), (2, 5), (3, 5), (4, 5), (5, 5)]
    assert recording_sleep.delays == [2.5] * 5
    # one snapshot after submission plus one per attempt
    assert provider.get_calls == 6


def test_success_on_last_attempt_is_not_a_timeout(fake_provider_cls, recording_sleep):
    states = [FileState.PROCESSING] * 3 + [FileState.ACTIVE]
    poller = FileProcessingPoller(fake_provider_cls(states=states), max_attempts=3, sleep=recording_sleep)

    outcome = _poll(poller)

    assert outcome.state == PollState.ACTIVE
    assert outcome.attempts == 3


def test_provider_errors_propagate(fake_provider_cls, recording_sleep):
    class FlakyProvider(fake_provider_cls):
        async def get_file(self, file_id):
            raise ProviderException("network down")

    poller = FileProcessingPoller(FlakyProvider(), sleep=recording_sleep)

    with pytest.raises(ProviderException, match="network down"):
        _poll(poller)
