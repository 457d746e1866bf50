from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from vidsentry.models import ChatTurn, FileState, GenerationSettings, RemoteFileHandle
from vidsentry.providers.base import ChatSession, InferenceProvider
from vidsentry.video_pipeline.analysis_pipeline import VideoAnalysisPipeline
from vidsentry.video_pipeline.polling import FileProcessingPoller
from vidsentry.video_pipeline.storage import TemporaryAssetStore


class FakeChatSession(ChatSession):
    def __init__(self, provider: "FakeProvider"):
        self.provider = provider

    async def send_message(self, parts):
        self.provider.sent_messages.append(list(parts))
        if self.provider.chat_error is not None:
            raise self.provider.chat_error
        return self.provider.response_text


class FakeProvider(InferenceProvider):
    """In-memory stand-in for the remote service; ``states`` are returned by successive get_file calls."""

    def __init__(
        self,
        states: Sequence[FileState] = (FileState.ACTIVE,),
        response_text: str = '{"main_subject": "a cat", "key_events": [], "overall_summary": "calm"}',
        upload_error: Optional[Exception] = None,
        chat_error: Optional[Exception] = None,
    ):
        self.states = list(states)
        self.response_text = response_text
        self.upload_error = upload_error
        self.chat_error = chat_error
        self.uploads = []
        self.get_calls = 0
        self.chats = []
        self.sent_messages = []
        self.closed = False

    async def upload_file(self, path, mime_type, display_name):
        self.uploads.append({"path": path, "mime_type": mime_type, "display_name": display_name,
                             "existed": Path(path).exists()})
        if self.upload_error is not None:
            raise self.upload_error
        return RemoteFileHandle(file_id="files/abc123", mime_type=mime_type, state=FileState.PROCESSING,
                                uri="https://example.test/files/abc123", display_name=display_name)

    async def get_file(self, file_id):
        index = min(self.get_calls, len(self.states) - 1)
        self.get_calls += 1
        return RemoteFileHandle(file_id=file_id, mime_type="video/mp4", state=self.states[index],
                                uri=f"https://example.test/{file_id}")

    def start_chat(self, generation: GenerationSettings, history: List[ChatTurn] = None):
        self.chats.append({"generation": generation, "history": list(history or [])})
        return FakeChatSession(self)

    async def close(self):
        self.closed = True


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def fake_provider_cls():
    return FakeProvider


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def make_pipeline(tmp_path, recording_sleep):
    def _make(provider: InferenceProvider, max_attempts: int = 30, store: TemporaryAssetStore = None, **kwargs):
        store = store or TemporaryAssetStore(str(tmp_path / "uploads"))
        poller = FileProcessingPoller(provider, interval=10.0, max_attempts=max_attempts, sleep=recording_sleep)
        return VideoAnalysisPipeline(provider, store, poller, **kwargs)

    return _make


@pytest.fixture
def collected_events():
    events = []
    return events
